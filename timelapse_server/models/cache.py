"""Cache entry and counters."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .generation import CacheKey


class CacheEntry(BaseModel):
    """A fully built artifact. Published once, never mutated."""

    model_config = ConfigDict(frozen=True)

    key: CacheKey
    content: bytes
    content_type: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class CacheStats(BaseModel):
    entries: int = 0
    total_bytes: int = 0
    capacity: int = 0
    max_bytes: Optional[int] = None
    in_flight: int = 0
    hits: int = 0
    misses: int = 0
    joins: int = 0
    evictions: int = 0
    failures: int = 0
