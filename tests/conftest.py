from __future__ import annotations
from pathlib import Path

import pytest

from markwatch.pipeline import build_context
from markwatch.schemas import WatchConfig


def block(date: str, time: str, payload: str) -> bytes:
    return f"&[({date} {time})\n{payload}\n&]\n".encode("utf-8")


def append(path: Path, data: bytes) -> None:
    with open(path, "ab") as f:
        f.write(data)


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    p = tmp_path / "marks.txt"
    p.write_bytes(b"")
    return p


@pytest.fixture
def cfg(tmp_path: Path, input_file: Path) -> WatchConfig:
    return WatchConfig(
        input_path=str(input_file),
        watcher={"poll_seconds": 0.01, "backoff_seconds": 0.01},
        sink={"path": str(tmp_path / "out" / "marks.xlsx"), "save_retries": 1, "save_retry_delay": 0},
        alerts={"enabled": False},
        logging={"path": None},
    )


@pytest.fixture
def ctx(cfg: WatchConfig):
    Path(cfg.sink.path).parent.mkdir(parents=True, exist_ok=True)
    return build_context(cfg)
