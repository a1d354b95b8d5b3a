## markwatch/schemas.py

from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple

RecordKey = Tuple[str, str, str]


class MarkRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    time: str
    payload: str = Field(description="Payload line, stripped of surrounding whitespace")

    @property
    def key(self) -> RecordKey:
        return (self.date, self.time, self.payload)

    def as_row(self) -> list[str]:
        return [self.date, self.time, self.payload]


class WatcherConfig(BaseModel):
    poll_seconds: float = Field(0.5, gt=0)
    backoff_seconds: float = Field(1.0, gt=0)

class ExtractorConfig(BaseModel):
    max_tail_bytes: int = Field(64 * 1024, ge=0)

class SinkConfig(BaseModel):
    path: str = "output.xlsx"
    sheet_name: str = "Mark Data"
    save_retries: int = Field(3, ge=1)
    save_retry_delay: float = Field(0.2, ge=0)

class CursorConfig(BaseModel):
    state_path: Optional[str] = Field(None, description="Persist the committed offset here; None disables")

class AlertsConfig(BaseModel):
    enabled: bool = True

class LoggingConfig(BaseModel):
    path: Optional[str] = "logs/markwatch.log"
    level: str = "INFO"


class WatchConfig(BaseModel):
    input_path: str = ""
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)
    cursor: CursorConfig = Field(default_factory=CursorConfig)
    alerts: AlertsConfig = Field(default_factory=AlertsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
