from __future__ import annotations

import time

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health(request: Request) -> dict[str, object]:
    # health must never crash
    ex = getattr(request.app.state, "executor", None)
    return {
        "ok": True,
        "service": "yieldstake",
        "version": "v1",
        "ts_ms": int(time.time() * 1000),
        "collection_id": getattr(ex, "collection_id", None),
        "ready": ex is not None,
    }
