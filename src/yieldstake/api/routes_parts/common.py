from __future__ import annotations

from typing import Any, Callable, Dict, Optional, TypeVar

from fastapi import Request

from yieldstake.api.errors import ApiError
from yieldstake.runtime.collection import StakedCollection
from yieldstake.runtime.errors import StakingError

Json = Dict[str, Any]
T = TypeVar("T")


def _executor(request: Request):
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _now(request: Request, requested: Optional[int]) -> int:
    return int(_executor(request).now(requested))


def _mutate(request: Request, fn: Callable[[StakedCollection], T]) -> T:
    try:
        return _executor(request).mutate(fn)
    except StakingError as e:
        raise ApiError.from_staking_error(e) from e


def _read(request: Request, fn: Callable[[StakedCollection], T]) -> T:
    try:
        return _executor(request).read(fn)
    except StakingError as e:
        raise ApiError.from_staking_error(e) from e


def _period_json(p: Any) -> Optional[Json]:
    return p.to_dict() if p is not None else None
