"""Data models."""

from .common import ImageFile, TimeRange
from .generation import ArtifactFormat, CacheKey, GenerationOptions, TimelapseRequest
from .cache import CacheEntry, CacheStats

__all__ = [
    "ImageFile",
    "TimeRange",
    "ArtifactFormat",
    "CacheKey",
    "GenerationOptions",
    "TimelapseRequest",
    "CacheEntry",
    "CacheStats",
]
