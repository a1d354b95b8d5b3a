## markwatch/extractor.py

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import List
from .schemas import MarkRecord

"""
Mark block format:

    &[(<date> <time>)
    <payload line>
    &]

Blocks are matched non-greedily and never across extra lines. Bytes after
the last complete block that may still become one (an unclosed opener or a
trailing '&') are not consumed, so the caller can retry them with the next
read.
"""

OPEN = b"&["
CLOSE = b"&]"
MARK_RE = re.compile(rb"&\[\((.*?) (.*?)\)\r?\n(.*?)\r?\n&\]")
# not representable in a worksheet cell
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


@dataclass
class Extraction:
    records: List[MarkRecord] = field(default_factory=list)
    consumed: int = 0
    malformed: int = 0


def _text(raw: bytes) -> str:
    return _CONTROL_RE.sub("", raw.decode("utf-8", errors="replace"))


def _unconsumed_start(buffer: bytes, pos: int, end: int) -> tuple[int, int]:
    """Scan buffer[pos:end] for leftovers.

    Returns the offset of the first byte worth keeping (``end`` if none) and
    the number of closed but unparseable blocks that were skipped.
    """
    malformed = 0
    while True:
        i = buffer.find(OPEN, pos, end)
        if i < 0:
            break
        j = buffer.find(CLOSE, i + len(OPEN), end)
        if j < 0:
            return i, malformed
        malformed += 1
        pos = j + len(CLOSE)
    if end > pos and buffer[end - 1:end] == b"&":
        return end - 1, malformed
    return end, malformed


def extract(buffer: bytes) -> Extraction:
    out = Extraction()
    last_end = 0
    for m in MARK_RE.finditer(buffer):
        out.malformed += _unconsumed_start(buffer, last_end, m.start())[1]
        date, time_, payload = (_text(g) for g in m.groups())
        out.records.append(MarkRecord(date=date, time=time_, payload=payload.strip()))
        last_end = m.end()
    out.consumed, skipped = _unconsumed_start(buffer, last_end, len(buffer))
    out.malformed += skipped
    return out
