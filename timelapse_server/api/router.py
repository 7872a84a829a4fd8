"""Aggregate all API sub-routers."""

from fastapi import APIRouter

from . import cache, health, timelapse

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(timelapse.router)
api_router.include_router(cache.router)
