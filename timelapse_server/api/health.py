"""Liveness endpoint."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/healthcheck", response_class=PlainTextResponse)
async def healthcheck():
    return "OK"
