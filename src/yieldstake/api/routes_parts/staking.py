from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from yieldstake.api.routes_parts.common import _mutate, _now, _period_json, _read
from yieldstake.api.schemas import RateRequest, TimedRequest

router = APIRouter()

Json = Dict[str, Any]


@router.get("/staking")
def staking_state(request: Request) -> Json:
    def _view(c) -> Json:
        return {
            "ok": True,
            "status": c.staking_status.name,
            "reward_rate": c.reward_rate,
            "periods": c.engine.ledger.to_list(),
        }

    return _read(request, _view)


# Admin routes assume an authorizing gateway in front of the node.


@router.post("/admin/rate")
def set_reward_rate(request: Request, body: RateRequest) -> Json:
    now = _now(request, body.now)
    p = _mutate(request, lambda c: c.set_reward_rate(body.rate, now))
    return {"ok": True, "now": now, "period": _period_json(p)}


@router.post("/admin/pause")
def pause_staking(request: Request, body: TimedRequest) -> Json:
    now = _now(request, body.now)
    p = _mutate(request, lambda c: c.pause_staking(now))
    return {"ok": True, "now": now, "closed": _period_json(p)}


@router.post("/admin/continue")
def continue_staking(request: Request, body: TimedRequest) -> Json:
    now = _now(request, body.now)
    p = _mutate(request, lambda c: c.continue_staking(now))
    return {"ok": True, "now": now, "period": _period_json(p)}
