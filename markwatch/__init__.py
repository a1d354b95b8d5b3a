"""
markwatch package: tail a growing mark log into an Excel workbook.
- extractor: &[(date time) / payload / &] block parser
- reader: cursor-tracking reads with truncation/rotation recovery
- dedup: in-memory set of (date, time, payload) keys
- sinks: append-only .xlsx sheet
- pipeline: one poll cycle (read -> extract -> dedup -> append -> flush)
- watcher: poll loop with stop event
- alerts: email/slack on failures
"""

from dotenv import load_dotenv

__all__ = [
    "alerts",
    "cli",
    "dedup",
    "errors",
    "extractor",
    "pipeline",
    "reader",
    "schemas",
    "sinks",
    "utils",
    "watcher",
]

__version__ = "0.1.0"

load_dotenv()
