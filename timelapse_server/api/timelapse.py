"""Timelapse API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request

from ..config import Settings
from ..models.common import TimeRange
from ..models.generation import GenerationOptions, TimelapseRequest
from ..services import time_ranges
from ..services.timelapse_service import TimelapseService

router = APIRouter(prefix="/timelapse", tags=["timelapse"])


def app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_service(request: Request) -> TimelapseService:
    return request.app.state.timelapse_service


def generation_options(
    settings: Settings = Depends(app_settings),
    fps: Optional[int] = Query(None, ge=1),
    artifact_format: Optional[str] = Query(None, alias="format"),
    ffmpeg_args: Optional[str] = Query(None, description="Comma-separated, passed to the encoder unfiltered"),
) -> GenerationOptions:
    return GenerationOptions.from_query(
        fps=fps or settings.default_fps,
        format=artifact_format,
        ffmpeg_args=ffmpeg_args,
    )


async def _render(
    service: TimelapseService,
    folder: str,
    time_range: TimeRange,
    options: GenerationOptions,
    range_header: Optional[str],
):
    request = TimelapseRequest(folder=folder, time_range=time_range, options=options)
    return await service.render(request, range_header)


async def _relative(
    window: str,
    folder: str,
    settings: Settings,
    service: TimelapseService,
    options: GenerationOptions,
    range_header: Optional[str],
):
    time_range = time_ranges.relative_window(
        window, granularity_seconds=settings.now_granularity_seconds,
    )
    return await _render(service, folder, time_range, options, range_header)


@router.get("/24/{folder:path}")
async def last_24_hours(
    folder: str,
    settings: Settings = Depends(app_settings),
    service: TimelapseService = Depends(get_service),
    options: GenerationOptions = Depends(generation_options),
    range_header: Optional[str] = Header(None, alias="Range"),
):
    return await _relative("24", folder, settings, service, options, range_header)


@router.get("/48/{folder:path}")
async def last_48_hours(
    folder: str,
    settings: Settings = Depends(app_settings),
    service: TimelapseService = Depends(get_service),
    options: GenerationOptions = Depends(generation_options),
    range_header: Optional[str] = Header(None, alias="Range"),
):
    return await _relative("48", folder, settings, service, options, range_header)


@router.get("/1w/{folder:path}")
async def last_week(
    folder: str,
    settings: Settings = Depends(app_settings),
    service: TimelapseService = Depends(get_service),
    options: GenerationOptions = Depends(generation_options),
    range_header: Optional[str] = Header(None, alias="Range"),
):
    return await _relative("1w", folder, settings, service, options, range_header)


@router.get("/day/{day}/{folder:path}")
async def calendar_day(
    day: str,
    folder: str,
    settings: Settings = Depends(app_settings),
    service: TimelapseService = Depends(get_service),
    options: GenerationOptions = Depends(generation_options),
    range_header: Optional[str] = Header(None, alias="Range"),
):
    time_range = time_ranges.calendar_day(day, time_ranges.load_zone(settings.timezone))
    return await _render(service, folder, time_range, options, range_header)


@router.get("/week/{week}/{folder:path}")
async def iso_week(
    week: str,
    folder: str,
    settings: Settings = Depends(app_settings),
    service: TimelapseService = Depends(get_service),
    options: GenerationOptions = Depends(generation_options),
    range_header: Optional[str] = Header(None, alias="Range"),
):
    time_range = time_ranges.iso_week(week, time_ranges.load_zone(settings.timezone))
    return await _render(service, folder, time_range, options, range_header)


@router.get("/from/{start}/to/{end}/{folder:path}")
async def explicit_window(
    start: str,
    end: str,
    folder: str,
    settings: Settings = Depends(app_settings),
    service: TimelapseService = Depends(get_service),
    options: GenerationOptions = Depends(generation_options),
    range_header: Optional[str] = Header(None, alias="Range"),
):
    time_range = time_ranges.explicit(start, end, time_ranges.load_zone(settings.timezone))
    return await _render(service, folder, time_range, options, range_header)
