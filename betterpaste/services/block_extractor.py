"""Patch-block extraction from free-form page text.

A block is four literal markers with three content regions between them::

    [<({START})>]        path/to/file.py
    [<({SEARCH})>]       text to find
    [<({REPLACEWITH})>]  replacement text
    [<({END})>]

Extraction is a plain marker tokenizer rather than a regular expression so
that partial or malformed blocks in noisy text never produce a record and
never stop the scan.  Scanning is stateless: the same text always yields the
same records in the same order.
"""

from typing import Iterator, Optional, Tuple

from betterpaste.models.block import BlockRecord
from betterpaste.services.fingerprint import fingerprint

START = "[<({START})>]"
SEARCH = "[<({SEARCH})>]"
REPLACEWITH = "[<({REPLACEWITH})>]"
END = "[<({END})>]"

# Markers that follow START, in order.
_SEQUENCE = (SEARCH, REPLACEWITH, END)


def _find_before_next_start(text: str, marker: str, pos: int) -> Tuple[int, Optional[int]]:
    """Locate *marker* at or after *pos*, refusing to cross a new START.

    Returns ``(index, restart)``.  ``index`` is -1 when the marker is not
    usable; ``restart`` is then the position of the interrupting START, or
    *None* if the marker does not occur at all before the end of *text*.
    """
    idx = text.find(marker, pos)
    next_start = text.find(START, pos)
    if next_start != -1 and (idx == -1 or next_start < idx):
        return -1, next_start
    return idx, None


def _match_at(text: str, start_idx: int) -> Tuple[Optional[BlockRecord], int]:
    """Try to complete a block whose START marker sits at *start_idx*.

    Returns ``(record, resume_at)``.  On failure *record* is None and
    ``resume_at`` points at the next START to try, or ``len(text)`` when no
    later block can possibly complete.
    """
    regions = []
    pos = start_idx + len(START)
    for marker in _SEQUENCE:
        idx, restart = _find_before_next_start(text, marker, pos)
        if idx == -1:
            return None, restart if restart is not None else len(text)
        regions.append(text[pos:idx])
        pos = idx + len(marker)

    file_path, search_content, replace_content = (r.strip() for r in regions)
    record = BlockRecord(
        file_path=file_path,
        search_content=search_content,
        replace_content=replace_content,
        raw_span=text[start_idx:pos],
    )
    return record, pos


def extract_blocks(text: str) -> Iterator[BlockRecord]:
    """Yield every well-formed, non-overlapping block in *text*, in order."""
    pos = 0
    while True:
        start_idx = text.find(START, pos)
        if start_idx == -1:
            return
        record, pos = _match_at(text, start_idx)
        if record is not None:
            yield record


def iter_candidates(text: str) -> Iterator[Tuple[BlockRecord, int]]:
    """Yield ``(block, fingerprint)`` for every block in *text*."""
    for block in extract_blocks(text):
        yield block, fingerprint(block.raw_span)
