## markwatch/watcher.py

from __future__ import annotations
import signal, threading
from typing import Optional
from .utils import logger
from .pipeline import BACKOFF, WatchContext, build_context, flush, poll_once
from .schemas import WatchConfig


def watch(ctx: WatchContext, stop: threading.Event):
    """Poll until ``stop`` is set; the sleep between cycles is interruptible."""
    poll = ctx.cfg.watcher.poll_seconds
    backoff = ctx.cfg.watcher.backoff_seconds
    cycles = 0
    logger.info(f"Starting to monitor file: {ctx.tailer.path}")
    while not stop.is_set():
        result = poll_once(ctx)
        cycles += 1
        stop.wait(backoff if result.state == BACKOFF else poll)
    if ctx.sink.dirty:
        flush(ctx)
    logger.info(f"Stopped monitoring {ctx.tailer.path} at offset {ctx.tailer.committed_offset}")
    return cycles


def run(cfg: WatchConfig, stop: Optional[threading.Event] = None):
    stop = stop or threading.Event()
    ctx = build_context(cfg)
    logger.info(f"Writing to Excel file: {cfg.sink.path}")

    def _stop(signum, _frame):
        logger.info(f"Received signal {signum}; stopping")
        stop.set()

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, _stop)
        signal.signal(signal.SIGTERM, _stop)
    return watch(ctx, stop)
