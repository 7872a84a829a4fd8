"""Core shared models."""

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ..errors import InvalidTimeRange


class ImageFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    timestamp: int  # unix seconds, parsed from the filename

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.timestamp, str(self.path))


class TimeRange(BaseModel):
    """Half-open window ``[start, end)``."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_order(self) -> "TimeRange":
        if self.start >= self.end:
            raise InvalidTimeRange(
                f"Start {self.start.isoformat()} is not before end {self.end.isoformat()}"
            )
        return self

    def contains(self, timestamp: float) -> bool:
        return self.start.timestamp() <= timestamp < self.end.timestamp()
