from __future__ import annotations
import threading
import time
from pathlib import Path

from openpyxl import load_workbook

from markwatch.schemas import MarkRecord
from markwatch.watcher import watch
from tests.conftest import append, block


class StopAfter(threading.Event):
    """Stop event that records each sleep and sets itself after ``cycles`` of them."""

    def __init__(self, cycles: int) -> None:
        super().__init__()
        self.left = cycles
        self.waits: list[float] = []

    def wait(self, timeout=None):
        self.waits.append(timeout)
        self.left -= 1
        if self.left <= 0:
            self.set()
        return self.is_set()


def test_watch_runs_until_stopped(ctx, input_file: Path) -> None:
    append(input_file, block("d", "t", "x"))
    cycles = watch(ctx, StopAfter(3))
    assert cycles == 3
    assert len(ctx.dedup) == 1
    assert not ctx.sink.dirty


def test_watch_returns_immediately_when_already_stopped(ctx) -> None:
    stop = threading.Event()
    stop.set()
    assert watch(ctx, stop) == 0


def test_transient_error_sleeps_backoff_interval(ctx, input_file: Path) -> None:
    ctx.cfg.watcher.poll_seconds = 0.25
    ctx.cfg.watcher.backoff_seconds = 0.75
    input_file.unlink()
    stop = StopAfter(1)
    watch(ctx, stop)
    assert stop.waits == [0.75]

    input_file.write_bytes(b"")
    stop = StopAfter(1)
    watch(ctx, stop)
    assert stop.waits == [0.25]


def test_dirty_sink_is_flushed_on_stop(ctx, cfg) -> None:
    ctx.sink.append(MarkRecord(date="d", time="t", payload="unsaved"))
    stop = threading.Event()
    stop.set()
    watch(ctx, stop)
    assert not ctx.sink.dirty
    rows = list(load_workbook(cfg.sink.path)["Mark Data"].iter_rows(min_row=2, values_only=True))
    assert rows == [("d", "t", "unsaved")]


def test_stop_event_interrupts_sleep(ctx) -> None:
    ctx.cfg.watcher.poll_seconds = 30
    stop = threading.Event()
    threading.Timer(0.05, stop.set).start()
    started = time.monotonic()
    watch(ctx, stop)
    assert time.monotonic() - started < 5


def test_watch_picks_up_appends_between_cycles(ctx, input_file: Path) -> None:
    stop = threading.Event()
    worker = threading.Thread(target=watch, args=(ctx, stop))
    worker.start()
    try:
        append(input_file, block("d", "t1", "a"))
        append(input_file, block("d", "t2", "b"))
        deadline = time.monotonic() + 5
        while len(ctx.dedup) < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        stop.set()
        worker.join(5)
    assert len(ctx.dedup) == 2
    assert not ctx.sink.dirty
