"""Request pipeline: folder → cache key → cached artifact → HTTP response."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from fastapi.responses import Response

from ..errors import EmptySelection
from ..models.cache import CacheEntry
from ..models.generation import CacheKey, TimelapseRequest
from . import range_responder
from .artifact_builder import ArtifactBuilder
from .generation_cache import GenerationCache
from .image_selector import resolve_folder, select_images

logger = logging.getLogger(__name__)


class TimelapseService:
    def __init__(
        self,
        output_root: Path,
        cache: GenerationCache,
        builder: ArtifactBuilder,
        max_age: int = range_responder.DEFAULT_MAX_AGE,
    ):
        self.output_root = Path(output_root)
        self.cache = cache
        self.builder = builder
        self.max_age = max_age

    async def get_artifact(self, request: TimelapseRequest) -> CacheEntry:
        # Folder errors surface before the cache is touched
        folder = resolve_folder(self.output_root, request.folder)
        key = CacheKey.build(folder, request.time_range, request.options)

        async def generate() -> bytes:
            images = await asyncio.to_thread(select_images, folder, request.time_range)
            if not images:
                raise EmptySelection(
                    f"No images in {request.folder} between "
                    f"{request.time_range.start.isoformat()} and {request.time_range.end.isoformat()}"
                )
            logger.info(f"Building {request.options.format.value} from {len(images)} frames of {request.folder}")
            return await self.builder.build(images, request.options)

        return await self.cache.get_or_generate(
            key, generate, content_type=request.options.format.content_type,
        )

    async def render(self, request: TimelapseRequest, range_header: Optional[str] = None) -> Response:
        entry = await self.get_artifact(request)
        return range_responder.respond(
            entry,
            range_header,
            max_age=self.max_age,
            filename=artifact_filename(request),
        )


def artifact_filename(request: TimelapseRequest) -> str:
    name = Path(request.folder.strip("/")).name or "timelapse"
    start = int(request.time_range.start.timestamp())
    end = int(request.time_range.end.timestamp())
    return f"{name}-{start}-{end}{request.options.format.extension}"
