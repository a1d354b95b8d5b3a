## markwatch/pipeline.py

from __future__ import annotations
import os
import yaml
from dataclasses import dataclass
from typing import Optional
from pydantic import ValidationError
from .utils import logger, load_yaml
from .alerts import notify
from .dedup import DedupStore
from .errors import ConfigError, OutputWriteFailure, TransientInputError
from .extractor import extract
from .reader import CursorStore, FileTailer, tailer_for
from .schemas import WatchConfig
from .sinks import ExcelSink

IDLE, PROCESSING, BACKOFF = "idle", "processing", "backoff"


def load_config(cfg_path: Optional[str] = "config.yaml", **overrides) -> WatchConfig:
    """Read YAML config (if present) and apply non-None dotted overrides, e.g. ``sink.path``."""
    raw: dict = {}
    if cfg_path and os.path.exists(cfg_path):
        try:
            raw = load_yaml(cfg_path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot parse config {cfg_path}: {e}", {"path": cfg_path}) from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config {cfg_path} must be a mapping", {"path": cfg_path})
    for dotted, value in overrides.items():
        if value is None: continue
        node = raw
        *parents, leaf = dotted.split(".")
        for p in parents:
            if not isinstance(node.get(p), dict):
                node[p] = {}
            node = node[p]
        node[leaf] = value
    try:
        return WatchConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}", {"path": cfg_path}) from e


@dataclass
class WatchContext:
    cfg: WatchConfig
    tailer: FileTailer
    dedup: DedupStore
    sink: ExcelSink
    cursor_store: Optional[CursorStore] = None
    write_failing: bool = False


@dataclass
class CycleResult:
    state: str
    inserted: int = 0
    duplicates: int = 0
    malformed: int = 0
    flushed: bool = False


def build_context(cfg: WatchConfig) -> WatchContext:
    """Open the sink and seed dedup state from it; OutputOpenFailure propagates."""
    sink = ExcelSink.open(
        cfg.sink.path, cfg.sink.sheet_name,
        save_retries=cfg.sink.save_retries, save_retry_delay=cfg.sink.save_retry_delay,
    )
    dedup = DedupStore()
    dedup.seed(sink.rows())
    logger.info(f"Loaded {len(dedup)} existing records to avoid duplicates")
    state_path = cfg.cursor.state_path
    tailer = tailer_for(cfg.input_path, state_path, cfg.extractor.max_tail_bytes)
    return WatchContext(cfg, tailer, dedup, sink, CursorStore(state_path) if state_path else None)


def _save_cursor(ctx: WatchContext):
    if ctx.cursor_store is None or ctx.sink.dirty:
        return
    try:
        ctx.cursor_store.save(ctx.tailer.path, ctx.tailer.committed_offset, ctx.tailer.inode)
    except OSError as e:
        logger.warning(f"Could not save cursor state to {ctx.cursor_store.state_path}: {e}")


def flush(ctx: WatchContext) -> bool:
    try:
        n = ctx.sink.flush()
    except OutputWriteFailure as e:
        logger.error(str(e))
        if not ctx.write_failing:
            notify("write failure", str(e), enabled=ctx.cfg.alerts.enabled)
        ctx.write_failing = True
        return False
    if ctx.write_failing:
        logger.info(f"{ctx.sink.path} is writable again")
        ctx.write_failing = False
    if n:
        logger.info(f"Saved {n} new record(s) to {ctx.sink.path}")
    _save_cursor(ctx)
    return True


def process_buffer(ctx: WatchContext, data: bytes) -> tuple[CycleResult, int]:
    """Extract, dedup and append one buffer. Returns the result and bytes consumed."""
    found = extract(data)
    result = CycleResult(PROCESSING, malformed=found.malformed)
    if found.malformed:
        logger.warning(f"Skipped {found.malformed} malformed mark block(s)")
    for rec in found.records:
        if ctx.dedup.contains(rec.key):
            result.duplicates += 1
            logger.info(f"Duplicate mark skipped: {rec.date} {rec.time} {rec.payload!r}")
            continue
        row = ctx.sink.append(rec)
        ctx.dedup.record(rec.key)
        result.inserted += 1
        logger.info(f"New mark: {rec.date} {rec.time} {rec.payload!r} -> row {row}")
    return result, found.consumed


def poll_once(ctx: WatchContext) -> CycleResult:
    try:
        data = ctx.tailer.read()
    except TransientInputError as e:
        logger.error(str(e))
        return CycleResult(BACKOFF)
    if not data:
        result = CycleResult(IDLE)
        if ctx.sink.dirty:
            result.flushed = flush(ctx)
        return result
    result, consumed = process_buffer(ctx, data)
    ctx.tailer.commit(consumed)
    if ctx.sink.dirty:
        result.flushed = flush(ctx)
    else:
        _save_cursor(ctx)
    return result
