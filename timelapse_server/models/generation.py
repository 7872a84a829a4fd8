"""Generation options and the cache key derived from a request."""

import hashlib
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import TimeRange


class ArtifactFormat(str, Enum):
    VIDEO = "video"
    ARCHIVE = "archive"

    @property
    def content_type(self) -> str:
        return "application/zip" if self is ArtifactFormat.ARCHIVE else "video/mp4"

    @property
    def extension(self) -> str:
        return ".zip" if self is ArtifactFormat.ARCHIVE else ".mp4"


class GenerationOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    fps: int = Field(20, ge=1)
    format: ArtifactFormat = ArtifactFormat.VIDEO
    extra_encoder_args: tuple[str, ...] = ()

    @classmethod
    def from_query(
        cls,
        fps: int = 20,
        format: Optional[str] = None,
        ffmpeg_args: Optional[str] = None,
    ) -> "GenerationOptions":
        """Build options from raw query values.

        ``format=zip`` selects an archive, anything else a video. ``ffmpeg_args``
        is split on commas; empty items are dropped and the rest kept verbatim.
        """
        artifact_format = ArtifactFormat.ARCHIVE if format == "zip" else ArtifactFormat.VIDEO
        extra = tuple(arg for arg in (ffmpeg_args or "").split(",") if arg)
        return cls(fps=fps, format=artifact_format, extra_encoder_args=extra)


class CacheKey(BaseModel):
    """Identity of an artifact. Equal logical inputs give equal keys."""

    model_config = ConfigDict(frozen=True)

    folder: str
    start: float
    end: float
    fps: int
    format: ArtifactFormat
    extra_encoder_args: tuple[str, ...] = ()

    @classmethod
    def build(cls, folder: Path, time_range: TimeRange, options: GenerationOptions) -> "CacheKey":
        return cls(
            folder=str(folder),
            start=time_range.start.timestamp(),
            end=time_range.end.timestamp(),
            fps=options.fps,
            format=options.format,
            extra_encoder_args=options.extra_encoder_args,
        )

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.model_dump_json().encode()).hexdigest()[:16]


class TimelapseRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    folder: str
    time_range: TimeRange
    options: GenerationOptions = Field(default_factory=GenerationOptions)
