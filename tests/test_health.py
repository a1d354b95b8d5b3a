from __future__ import annotations
from pathlib import Path

import health
from markwatch.reader import CursorStore
from markwatch.schemas import MarkRecord
from markwatch.sinks import ExcelSink


def test_workbook_count_and_latest(tmp_path: Path) -> None:
    path = tmp_path / "out.xlsx"
    assert health.workbook_count(path) is None
    sink = ExcelSink.open(str(path))
    sink.append(MarkRecord(date="2024-01-01", time="12:00:00", payload="Temp=20C"))
    sink.append(MarkRecord(date="2024-01-01", time="12:00:05", payload="Temp=21C"))
    sink.flush()
    assert health.workbook_count(path) == 2
    assert health.latest_mark(path) == ("2024-01-01", "12:00:05", "Temp=21C")


def test_unreadable_workbook(tmp_path: Path) -> None:
    path = tmp_path / "out.xlsx"
    path.write_bytes(b"nope")
    assert health.workbook_count(path) == -1


def test_report_prints_sections(tmp_path: Path, input_file: Path, capsys) -> None:
    input_file.write_bytes(b"0123456789")
    state = tmp_path / "cursor.json"
    CursorStore(str(state)).save(str(input_file), 4, 0)
    health.main([str(tmp_path / "missing.xlsx"), str(state)])
    out = capsys.readouterr().out
    assert "not found" in out
    assert "Unread bytes: 6" in out
    assert "Log tail" in out
