"""Heuristic rejection of blocks that were mangled by the page renderer.

Some chat front-ends collapse a code block into a single line when it is
rendered as plain text.  A long search region without any line break is the
tell-tale sign; such a block would never match its target file, so it is
not worth sending.
"""

from betterpaste.models.block import BlockRecord

MAX_SINGLE_LINE_SEARCH = 60


def _utf16_length(text: str) -> int:
    """Length as a browser counts it (astral characters count twice)."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def is_suspicious(block: BlockRecord, *, max_single_line: int = MAX_SINGLE_LINE_SEARCH) -> bool:
    """Return True if *block* looks flattened and should be dropped.

    Short single-line searches still pass; only searches longer than
    *max_single_line* UTF-16 code units with no newline are rejected.
    """
    search = block.search_content
    return _utf16_length(search) > max_single_line and "\n" not in search
