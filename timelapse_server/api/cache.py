"""Cache introspection endpoint."""

from fastapi import APIRouter, Request

from ..models.cache import CacheStats

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStats)
async def cache_stats(request: Request):
    return request.app.state.cache.stats()
