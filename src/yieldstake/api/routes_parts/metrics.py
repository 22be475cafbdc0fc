from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from yieldstake.api.errors import ApiError
from yieldstake.runtime.metrics import format_prometheus, metrics_enabled

router = APIRouter()


@router.get("/metrics", response_class=PlainTextResponse)
def metrics() -> str:
    if not metrics_enabled():
        raise ApiError.not_found("metrics_disabled", "set YIELDSTAKE_METRICS_ENABLED=1 to expose metrics", {})
    return format_prometheus()
