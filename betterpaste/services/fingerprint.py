"""Whitespace-insensitive block fingerprints.

A fingerprint is the 53-bit cyrb53 hash of a block's raw text with every
whitespace character removed.  Re-wrapped or re-indented renderings of the
same block therefore collapse onto one dedup key.

The hash is fast and stable across processes but not cryptographic:
collisions are possible and are not corrected for.
"""

import re

# ECMAScript \s. Python's \s differs: it also matches U+001C-U+001F and U+0085
# but not U+FEFF.
_WHITESPACE_RE = re.compile(
    "[\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]"
)

_MASK32 = 0xFFFFFFFF

# Lane seeds and multipliers (cyrb53)
_SEED_1 = 0xDEADBEEF
_SEED_2 = 0x41C6CE57
_MUL_1 = 2654435761
_MUL_2 = 1597334677
_FIN_1 = 2246822507
_FIN_2 = 3266489909

MAX_FINGERPRINT = 2**53 - 1


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & _MASK32


def _code_units(text: str):
    """Yield the UTF-16 code units of *text* (astral characters as surrogate pairs)."""
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def normalize(text: str) -> str:
    """Return *text* with all whitespace characters removed."""
    return _WHITESPACE_RE.sub("", text)


def cyrb53(text: str, seed: int = 0) -> int:
    h1 = (_SEED_1 ^ seed) & _MASK32
    h2 = (_SEED_2 ^ seed) & _MASK32
    for ch in _code_units(text):
        h1 = _imul(h1 ^ ch, _MUL_1)
        h2 = _imul(h2 ^ ch, _MUL_2)
    h1 = _imul(h1 ^ (h1 >> 16), _FIN_1) ^ _imul(h2 ^ (h2 >> 13), _FIN_2)
    h2 = _imul(h2 ^ (h2 >> 16), _FIN_1) ^ _imul(h1 ^ (h1 >> 13), _FIN_2)
    return 4294967296 * (0x1FFFFF & h2) + h1


def fingerprint(text: str) -> int:
    """Return the dedup key for a block's raw matched text."""
    return cyrb53(normalize(text))
