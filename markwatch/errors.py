"""
Exceptions raised by markwatch.

Transient input errors are retried by the poll loop with a backoff; output
open and config errors are fatal at startup; write errors are reported and
retried on the next flush.
"""

from __future__ import annotations
from typing import Any, Optional


class MarkWatchError(Exception):
    """Base exception for all markwatch errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(MarkWatchError):
    """Config file is missing required values or cannot be parsed."""


# =============================================================================
# Input (monitored file) errors
# =============================================================================


class TransientInputError(MarkWatchError):
    """Base for errors on the monitored file; the cursor is never advanced."""


class InputUnavailable(TransientInputError):
    """Open or stat on the monitored file failed."""


class SeekFailure(TransientInputError):
    pass


class ReadFailure(TransientInputError):
    pass


# =============================================================================
# Output (workbook) errors
# =============================================================================


class OutputOpenFailure(MarkWatchError):
    """Existing workbook could not be loaded, so dedup state cannot be seeded."""


class OutputWriteFailure(MarkWatchError):
    """Saving the workbook failed; appended rows are kept for the next flush."""
