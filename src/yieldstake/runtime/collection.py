# src/yieldstake/runtime/collection.py
from __future__ import annotations

"""
Staked collection: the asset lifecycle wired to the staking engine.

Composition, not inheritance:
  - AssetRegistry answers "exists / owner of / assets of"
  - StakingEngine owns periods and checkpoints
  - RewardToken mints settled reward

Every operation validates all preconditions (ownership, minter role) before
the first mutation, so a failure leaves registry, checkpoints and balances
exactly as they were.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from yieldstake.ledger.constants import DEFAULT_MINTER_ID
from yieldstake.ledger.periods import RewardPeriod, StakingStatus
from yieldstake.registry.assets import AssetRegistry
from yieldstake.runtime.engine import StakingEngine
from yieldstake.runtime.event_log import log_event
from yieldstake.token.reward_token import RewardToken

Json = Dict[str, Any]

log = logging.getLogger("yieldstake.collection")


class StakedCollection:
    def __init__(
        self,
        *,
        engine: Optional[StakingEngine] = None,
        registry: Optional[AssetRegistry] = None,
        token: Optional[RewardToken] = None,
        minter_id: str = DEFAULT_MINTER_ID,
    ) -> None:
        self.engine = engine if engine is not None else StakingEngine()
        self.registry = registry if registry is not None else AssetRegistry()
        self.minter_id = str(minter_id)
        if token is None:
            token = RewardToken(minters=[self.minter_id])
        self.token = token
        self._lock = threading.RLock()

    # ---- admin ----

    def set_reward_rate(self, rate: int, now: int) -> RewardPeriod:
        return self.engine.change_rate(rate, now)

    def pause_staking(self, now: int) -> Optional[RewardPeriod]:
        return self.engine.close_period(now)

    def continue_staking(self, now: int) -> Optional[RewardPeriod]:
        return self.engine.resume(now)

    @property
    def staking_status(self) -> StakingStatus:
        return self.engine.status()

    @property
    def reward_rate(self) -> int:
        return self.engine.current_rate()

    # ---- asset lifecycle ----

    def mint_assets(self, to: str, quantity: int, now: int) -> List[int]:
        with self._lock:
            created = self.registry.create(to, quantity)
            for asset_id in created:
                self.engine.on_asset_created(asset_id, now)
            log_event(log, "assets_minted", to=to, asset_ids=created, now=int(now))
            return created

    def transfer(self, asset_id: int, sender: str, recipient: str, now: int) -> int:
        """Move an asset, paying the previous owner everything accrued so far."""
        with self._lock:
            to = self.registry.check_transfer(asset_id, sender, recipient)
            self.token.require_minter(self.minter_id)

            previous_owner = self.registry.owner_of(asset_id)
            amount = self.engine.on_asset_transferred(asset_id, now)
            self.token.mint(self.minter_id, previous_owner, amount)
            self.registry.transfer(asset_id, previous_owner, to)
            log_event(
                log,
                "asset_transferred",
                asset_id=int(asset_id),
                sender=previous_owner,
                recipient=to,
                now=int(now),
                settled=str(amount),
            )
            return amount

    # ---- collection ----

    def collectable_for_one(self, asset_id: int, now: int) -> int:
        return self.engine.accrued(asset_id, now)

    def collectable_for_all(self, owner: str, now: int) -> int:
        with self._lock:
            return self.engine.accrued_for_set(self.registry.assets_owned_by(owner), now)

    def collect_for_one(self, asset_id: int, now: int) -> int:
        with self._lock:
            owner = self.registry.owner_of(asset_id)
            self.token.require_minter(self.minter_id)
            amount = self.engine.collect_one(asset_id, now)
            self.token.mint(self.minter_id, owner, amount)
            return amount

    def collect_for_all(self, owner: str, now: int) -> int:
        with self._lock:
            ids = self.registry.assets_owned_by(owner)
            self.token.require_minter(self.minter_id)
            amount = self.engine.collect_set(ids, now)
            self.token.mint(self.minter_id, owner, amount)
            return amount

    # ---- snapshot ----

    def to_dict(self) -> Json:
        with self._lock:
            out = self.engine.to_dict()
            out["assets"] = self.registry.to_dict()
            out["token"] = self.token.to_dict()
            out["minter_id"] = self.minter_id
            return out

    @classmethod
    def from_dict(cls, d: Json) -> "StakedCollection":
        return cls(
            engine=StakingEngine.from_dict(d),
            registry=AssetRegistry.from_dict(d.get("assets", {}) or {}),
            token=RewardToken.from_dict(d.get("token", {}) or {}),
            minter_id=str(d.get("minter_id") or DEFAULT_MINTER_ID),
        )
