## markwatch/utils.py

from __future__ import annotations
import os, time, logging
from functools import wraps
from typing import Any, Callable

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger("markwatch")


def configure_logging(log_path: str | None = "logs/markwatch.log", level: str = "INFO"):
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_path))
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=handlers, force=True)
    return logger

class Retryable(Exception):
    pass

def retry(times: int = 3, delay: float = 1.0):
    def deco(fn: Callable[..., Any]):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            last = None
            for i in range(times):
                try:
                    return fn(*args, **kwargs)
                except Retryable as e:
                    last = e
                    logger.warning(f"Retry {i+1}/{times} for {fn.__name__}: {e}")
                    if i + 1 < times:
                        time.sleep(delay * (2 ** i))
            raise last if last else Retryable("Retry failed")
        return wrapper
    return deco

def load_yaml(path: str) -> dict:
    import yaml
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def ensure_dirs(*paths: str):
    for p in paths:
        d = os.path.dirname(os.path.abspath(p))
        os.makedirs(d, exist_ok=True)
