## markwatch/sinks.py

from __future__ import annotations
import os, tempfile, zipfile
from typing import Iterator, Tuple
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.utils.exceptions import InvalidFileException
from .errors import OutputOpenFailure, OutputWriteFailure
from .schemas import MarkRecord
from .utils import Retryable, logger, retry

HEADER = ("Date", "Time", "Data")
HEADER_FILL = "DDEBF7"


def _style_header(ws):
    edge = Side(style="thin", color="000000")
    for col, title in enumerate(HEADER, start=1):
        cell = ws.cell(row=1, column=col, value=title)
        cell.font = Font(bold=True)
        cell.fill = PatternFill(fill_type="solid", start_color=HEADER_FILL, end_color=HEADER_FILL)
        cell.border = Border(top=edge, bottom=edge, left=edge, right=edge)


class ExcelSink:
    """Append-only mark sheet in an .xlsx workbook.

    Rows are written into the in-memory workbook by ``append`` and only
    reach disk on ``flush``, which rewrites the whole file. A failed flush
    keeps the rows so the next flush writes them.
    """

    def __init__(self, path: str, wb: Workbook, sheet_name: str, save_retries: int = 3, save_retry_delay: float = 0.2):
        self.path = path
        self.wb = wb
        self.ws = wb[sheet_name]
        self.sheet_name = sheet_name
        self.save_retries = save_retries
        self.save_retry_delay = save_retry_delay
        self.next_row = self.ws.max_row + 1
        self.pending_rows = 0

    @classmethod
    def open(cls, path: str, sheet_name: str = "Mark Data", **kwargs) -> "ExcelSink":
        if not os.path.exists(path):
            wb = Workbook()
            wb.active.title = sheet_name
            _style_header(wb.active)
            logger.info(f"Creating new workbook {path} (sheet '{sheet_name}')")
            return cls(path, wb, sheet_name, **kwargs)
        try:
            wb = load_workbook(path)
        except (OSError, zipfile.BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            raise OutputOpenFailure(f"Cannot open workbook {path}: {e}", {"path": path}) from e
        if sheet_name not in wb.sheetnames:
            logger.warning(f"Sheet '{sheet_name}' missing from {path}; adding it")
            _style_header(wb.create_sheet(sheet_name))
        elif wb[sheet_name].max_row == 1 and wb[sheet_name]["A1"].value is None:
            _style_header(wb[sheet_name])
        return cls(path, wb, sheet_name, **kwargs)

    @property
    def dirty(self) -> bool:
        return self.pending_rows > 0

    def rows(self) -> Iterator[Tuple]:
        """Existing data rows, header excluded."""
        return self.ws.iter_rows(min_row=2, max_col=len(HEADER), values_only=True)

    def append(self, record: MarkRecord) -> int:
        row = self.next_row
        for col, value in enumerate(record.as_row(), start=1):
            cell = self.ws.cell(row=row, column=col)
            cell.value = value
            # payloads like "=1+1" stay text
            cell.data_type = "s"
        self.next_row += 1
        self.pending_rows += 1
        return row

    def _save(self):
        d = os.path.dirname(os.path.abspath(self.path))
        fd, tmp = tempfile.mkstemp(dir=d, suffix=".xlsx")
        os.close(fd)
        try:
            self.wb.save(tmp)
            os.replace(tmp, self.path)
        except OSError as e:
            raise Retryable(f"save to {self.path} failed: {e}") from e
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)

    def flush(self) -> int:
        """Persist the workbook; returns the number of rows written."""
        if not self.dirty:
            return 0
        try:
            retry(self.save_retries, self.save_retry_delay)(self._save)()
        except Retryable as e:
            raise OutputWriteFailure(
                f"Could not write {self.path}; {self.pending_rows} row(s) kept for next flush",
                {"path": self.path, "pending_rows": self.pending_rows},
            ) from e
        written, self.pending_rows = self.pending_rows, 0
        return written
