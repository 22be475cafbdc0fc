from __future__ import annotations

import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from yieldstake.api.errors import ApiError
from yieldstake.api.routes import public_router
from yieldstake.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from yieldstake.runtime.executor import StakingExecutor
from yieldstake.runtime.staking_config import load_staking_config


def build_executor() -> StakingExecutor:
    """Build the StakingExecutor for API runtime.

    Kept as a module-level seam so tests can monkeypatch it.
    """
    return StakingExecutor.from_config(load_staking_config())


def _parse_cors_origins() -> List[str]:
    """Parse CORS origins.

    Policy:
      - If YIELDSTAKE_CORS_ORIGINS is unset/empty -> CORS disabled
      - Wildcard "*" is rejected in YIELDSTAKE_MODE=prod
    """
    raw = os.environ.get("YIELDSTAKE_CORS_ORIGINS", "").strip()
    mode = os.environ.get("YIELDSTAKE_MODE", "prod").strip().lower()

    if not raw:
        return []

    origins = [o.strip() for o in raw.split(",") if o.strip()]

    if "*" in origins:
        if mode == "prod":
            raise RuntimeError(
                "Unsafe CORS configuration: wildcard '*' not allowed in production. "
                "Set explicit origins in YIELDSTAKE_CORS_ORIGINS."
            )
        return ["*"]

    return origins


async def _api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load config + attach executor
      - False: no executor; for route/middleware tests
    """
    configure_structured_logging()
    mode = os.environ.get("YIELDSTAKE_MODE", "prod").strip().lower()

    if mode == "prod":
        app = FastAPI(title="YieldStake API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="YieldStake API")

    app.state.executor = build_executor() if boot_runtime else None

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_middleware(RequestLogMiddleware)

    cors_origins = _parse_cors_origins()
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.include_router(public_router)

    return app
