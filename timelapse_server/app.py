"""FastAPI application factory."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .api.router import api_router
from .config import Settings, get_settings
from .errors import TimelapseError
from .services.artifact_builder import ArtifactBuilder
from .services.generation_cache import GenerationCache
from .services.time_ranges import load_zone
from .services.timelapse_service import TimelapseService

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")

logger = logging.getLogger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""
    async def dispatch(self, request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)"
        )
        return response


async def timelapse_error_handler(request: Request, exc: TimelapseError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.reason, "detail": exc.message},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_request", "detail": f"Invalid parameters: {', '.join(fields)}"},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.getLogger("timelapse_server").setLevel(settings.log_level.upper())
    load_zone(settings.timezone)  # fail fast on an unknown zone

    cache = GenerationCache(
        capacity=settings.cache_capacity,
        max_bytes=settings.cache_max_bytes,
    )
    builder = ArtifactBuilder(
        ffmpeg_binary=settings.ffmpeg_binary,
        timeout=settings.encoder_timeout_seconds,
        work_dir=settings.work_dir,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"OUTPUT_FOLDER: {settings.output_folder} | Port: {settings.port} | Host: {settings.host}"
        )
        for path in ("24", "48", "1w", "day/{YYYY-MM-DD}", "week/{YYYY-Www}", "from/{start}/to/{end}"):
            logger.info(f"http://{settings.host}:{settings.port}/timelapse/{path}/{{folder}}")
        yield
        await cache.close()

    app = FastAPI(
        title="timelapse-server",
        version="0.1.0",
        description="On-demand timelapse videos and archives from timestamped frames",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.cache = cache
    app.state.timelapse_service = TimelapseService(
        output_root=settings.output_folder,
        cache=cache,
        builder=builder,
        max_age=settings.cache_max_age_seconds,
    )

    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(TimelapseError, timelapse_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(api_router)

    return app
