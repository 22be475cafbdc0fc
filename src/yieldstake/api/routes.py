# src/yieldstake/api/routes.py
from __future__ import annotations

from fastapi import APIRouter

from yieldstake.api.routes_parts.assets import router as assets_router
from yieldstake.api.routes_parts.health import router as health_router
from yieldstake.api.routes_parts.metrics import router as metrics_router
from yieldstake.api.routes_parts.staking import router as staking_router

public_router = APIRouter()

public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(staking_router, prefix="/v1", tags=["staking"])
public_router.include_router(assets_router, prefix="/v1", tags=["assets"])

# Ops
public_router.include_router(metrics_router, prefix="/v1", tags=["metrics"])
