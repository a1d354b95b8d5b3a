## markwatch/reader.py

from __future__ import annotations
import json, os, tempfile
from dataclasses import dataclass
from typing import Optional
from .errors import InputUnavailable, SeekFailure, ReadFailure
from .utils import logger


@dataclass
class PollResult:
    data: bytes
    cursor: int
    truncated: bool = False
    inode: int = 0


def poll(path: str, cursor: int) -> PollResult:
    """Read whatever was appended to ``path`` since ``cursor``.

    The file is opened fresh and closed before returning. Only the bytes
    present at stat time are read; later appends wait for the next poll.
    If the file is now smaller than ``cursor`` it was truncated or rotated
    and reading restarts from byte 0.
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise InputUnavailable(f"Cannot open {path}: {e}", {"path": path}) from e
    with f:
        try:
            st = os.fstat(f.fileno())
        except OSError as e:
            raise InputUnavailable(f"Cannot stat {path}: {e}", {"path": path}) from e
        size = st.st_size
        truncated = size < cursor
        if truncated:
            cursor = 0
        if size == cursor:
            return PollResult(b"", cursor, truncated, st.st_ino)
        try:
            f.seek(cursor)
        except OSError as e:
            raise SeekFailure(f"Cannot seek {path} to {cursor}: {e}", {"path": path, "cursor": cursor}) from e
        try:
            data = f.read(size - cursor)
        except OSError as e:
            raise ReadFailure(f"Cannot read {path}: {e}", {"path": path, "cursor": cursor}) from e
    return PollResult(data, cursor + len(data), truncated, st.st_ino)


class FileTailer:
    """Cursor plus the unconsumed tail carried between polls."""

    def __init__(self, path: str, cursor: int = 0, inode: int = 0, max_tail_bytes: int = 64 * 1024):
        self.path = path
        self.cursor = cursor
        self.inode = inode
        self.max_tail_bytes = max_tail_bytes
        self.pending = b""
        self._buffer = b""

    @property
    def committed_offset(self) -> int:
        return self.cursor - len(self.pending)

    def read(self) -> bytes:
        """Return pending tail + new bytes, or b"" when nothing was appended."""
        result = poll(self.path, self.cursor)
        replaced = bool(self.inode and result.inode and result.inode != self.inode)
        if replaced and not result.truncated:
            logger.warning(f"{self.path} was replaced; reading it from the start")
            result = poll(self.path, 0)
        elif result.truncated:
            logger.warning(f"{self.path} shrank below offset {self.cursor}; reading it from the start")
        if replaced or result.truncated:
            self.pending = b""
        self.inode = result.inode
        self.cursor = result.cursor
        if not result.data:
            self._buffer = b""
            return b""
        self._buffer = self.pending + result.data
        return self._buffer

    def commit(self, consumed: int):
        tail = self._buffer[consumed:]
        if len(tail) > self.max_tail_bytes:
            # the newest opener may still start a complete block
            start = tail.rfind(b"&[")
            if start < 0 or len(tail) - start > self.max_tail_bytes:
                start = len(tail) - 1 if tail.endswith(b"&") else len(tail)
            logger.warning(f"Dropping {start} bytes of unterminated mark data at offset {self.cursor - len(tail)}")
            tail = tail[start:]
        self.pending = tail
        self._buffer = b""


class CursorStore:
    """Committed offset persisted as JSON, written atomically (tmp + os.replace)."""

    def __init__(self, state_path: str):
        self.state_path = state_path

    def load(self, input_path: str) -> tuple[int, int]:
        """Return (offset, inode) to resume from, or (0, 0) if the state is stale."""
        if not os.path.exists(self.state_path):
            return 0, 0
        try:
            with open(self.state_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            offset, inode = int(data.get("offset", 0)), int(data.get("inode", 0))
            saved_path = str(data.get("path", ""))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable cursor state {self.state_path}: {e}; starting at 0")
            return 0, 0
        if os.path.abspath(saved_path) != os.path.abspath(input_path):
            logger.info(f"Cursor state {self.state_path} belongs to another file; starting at 0")
            return 0, 0
        try:
            st = os.stat(input_path)
        except OSError:
            return 0, 0
        if (inode and st.st_ino != inode) or st.st_size < offset:
            logger.info(f"{input_path} changed since last run; starting at 0")
            return 0, 0
        return offset, inode

    def save(self, input_path: str, offset: int, inode: int):
        d = os.path.dirname(os.path.abspath(self.state_path))
        os.makedirs(d, exist_ok=True)
        data = {"path": os.path.abspath(input_path), "offset": offset, "inode": inode}
        fd, tmp = tempfile.mkstemp(dir=d, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.state_path)
        except Exception:
            os.unlink(tmp)
            raise


def tailer_for(input_path: str, state_path: Optional[str], max_tail_bytes: int) -> FileTailer:
    if not state_path:
        return FileTailer(input_path, max_tail_bytes=max_tail_bytes)
    offset, inode = CursorStore(state_path).load(input_path)
    if offset:
        logger.info(f"Resuming {input_path} at offset {offset}")
    return FileTailer(input_path, cursor=offset, inode=inode, max_tail_bytes=max_tail_bytes)
