from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Request

from yieldstake.api.routes_parts.common import _mutate, _now, _read
from yieldstake.api.schemas import MintRequest, TimedRequest, TransferRequest

router = APIRouter()

Json = Dict[str, Any]


@router.post("/assets")
def mint_assets(request: Request, body: MintRequest) -> Json:
    now = _now(request, body.now)
    ids = _mutate(request, lambda c: c.mint_assets(body.to, body.quantity, now))
    return {"ok": True, "now": now, "asset_ids": ids}


@router.get("/assets/{asset_id}")
def get_asset(request: Request, asset_id: int) -> Json:
    def _view(c) -> Json:
        return {
            "ok": True,
            "asset_id": asset_id,
            "owner": c.registry.owner_of(asset_id),
            "checkpoint": c.engine.checkpoint_of(asset_id),
        }

    return _read(request, _view)


@router.post("/assets/{asset_id}/transfer")
def transfer_asset(request: Request, asset_id: int, body: TransferRequest) -> Json:
    now = _now(request, body.now)
    settled = _mutate(request, lambda c: c.transfer(asset_id, body.sender, body.recipient, now))
    return {"ok": True, "now": now, "asset_id": asset_id, "owner": body.recipient.strip(), "settled": settled}


@router.get("/assets/{asset_id}/collectable")
def collectable_for_one(request: Request, asset_id: int, now: Optional[int] = None) -> Json:
    t = _now(request, now)
    amount = _read(request, lambda c: c.collectable_for_one(asset_id, t))
    return {"ok": True, "now": t, "asset_id": asset_id, "amount": amount}


@router.post("/assets/{asset_id}/collect")
def collect_for_one(request: Request, asset_id: int, body: TimedRequest) -> Json:
    now = _now(request, body.now)
    amount = _mutate(request, lambda c: c.collect_for_one(asset_id, now))
    return {"ok": True, "now": now, "asset_id": asset_id, "amount": amount}


@router.get("/owners/{owner}/assets")
def owner_assets(request: Request, owner: str) -> Json:
    ids = _read(request, lambda c: c.registry.assets_owned_by(owner))
    return {"ok": True, "owner": owner, "asset_ids": ids}


@router.get("/owners/{owner}/collectable")
def collectable_for_all(request: Request, owner: str, now: Optional[int] = None) -> Json:
    t = _now(request, now)
    amount = _read(request, lambda c: c.collectable_for_all(owner, t))
    return {"ok": True, "now": t, "owner": owner, "amount": amount}


@router.post("/owners/{owner}/collect")
def collect_for_all(request: Request, owner: str, body: TimedRequest) -> Json:
    now = _now(request, body.now)
    amount = _mutate(request, lambda c: c.collect_for_all(owner, now))
    return {"ok": True, "now": now, "owner": owner, "amount": amount}


@router.get("/balances/{account}")
def reward_balance(request: Request, account: str) -> Json:
    bal = _read(request, lambda c: c.token.balance_of(account))
    return {"ok": True, "account": account, "balance": bal}
