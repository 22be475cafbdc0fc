# src/yieldstake/runtime/engine.py
from __future__ import annotations

"""
Staking engine: the period ledger plus per-asset accrual behind one lock.

Two caller-facing settlement policies sit on top of `AccrualCalculator.settle`:

- explicit collection (holder-initiated) fails with NothingToCollect when
  nothing has accrued and leaves the checkpoint untouched
- lifecycle settlement (creation / ownership change) always advances the
  checkpoint, zero reward included

These are deliberately separate paths.
"""

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from yieldstake.ledger.accrual import AccrualCalculator
from yieldstake.ledger.periods import PeriodLedger, RewardPeriod, StakingStatus
from yieldstake.runtime.errors import NothingToCollect
from yieldstake.runtime.event_log import log_event
from yieldstake.runtime.metrics import inc_counter, set_gauge

Json = Dict[str, Any]

log = logging.getLogger("yieldstake.engine")


class StakingEngine:
    def __init__(
        self,
        *,
        ledger: Optional[PeriodLedger] = None,
        checkpoints: Optional[Dict[int, int]] = None,
    ) -> None:
        self._ledger = ledger if ledger is not None else PeriodLedger()
        self._calc = AccrualCalculator(self._ledger, checkpoints)
        self._lock = threading.RLock()

    @property
    def ledger(self) -> PeriodLedger:
        return self._ledger

    @property
    def calculator(self) -> AccrualCalculator:
        return self._calc

    # ---- admin: period transitions ----

    def open_period(self, rate: int, now: int) -> RewardPeriod:
        with self._lock:
            p = self._ledger.open(rate, now)
            self._after_period_change("period_opened", p)
            return p

    def change_rate(self, rate: int, now: int) -> RewardPeriod:
        with self._lock:
            p = self._ledger.change_rate(rate, now)
            self._after_period_change("rate_changed", p)
            return p

    def close_period(self, now: int) -> Optional[RewardPeriod]:
        with self._lock:
            p = self._ledger.close(now)
            if p is not None:
                self._after_period_change("period_closed", p)
            return p

    def resume(self, now: int) -> Optional[RewardPeriod]:
        with self._lock:
            p = self._ledger.resume(now)
            if p is not None:
                self._after_period_change("period_resumed", p)
            return p

    def status(self) -> StakingStatus:
        with self._lock:
            return self._ledger.status

    def current_rate(self) -> int:
        with self._lock:
            return self._ledger.current_rate()

    # ---- reads ----

    def accrued(self, asset_id: int, now: int) -> int:
        with self._lock:
            return self._calc.accrued(asset_id, now)

    def accrued_for_set(self, asset_ids: Iterable[int], now: int) -> int:
        with self._lock:
            return self._calc.accrued_for_set(list(asset_ids), now)

    def checkpoint_of(self, asset_id: int) -> Optional[int]:
        with self._lock:
            return self._calc.checkpoint_of(asset_id)

    # ---- explicit collection ----

    def collect_one(self, asset_id: int, now: int) -> int:
        with self._lock:
            if self._calc.accrued(asset_id, now) == 0:
                raise NothingToCollect("nothing_to_collect", "accrued_is_zero", {"asset_id": int(asset_id)})
            amount = self._calc.settle(asset_id, now)
            inc_counter("collections_total")
            log_event(log, "reward_collected", asset_id=int(asset_id), now=int(now), amount=str(amount))
            return amount

    def collect_set(self, asset_ids: Iterable[int], now: int) -> int:
        ids: List[int] = [int(a) for a in asset_ids]
        with self._lock:
            if self._calc.accrued_for_set(ids, now) == 0:
                raise NothingToCollect("nothing_to_collect", "accrued_is_zero", {"asset_ids": ids})
            total = 0
            for asset_id in ids:
                total += self._calc.settle(asset_id, now)
            inc_counter("collections_total")
            log_event(log, "reward_collected_set", asset_ids=ids, now=int(now), amount=str(total))
            return total

    # ---- lifecycle settlement ----

    def on_asset_created(self, asset_id: int, now: int) -> None:
        with self._lock:
            self._calc.set_checkpoint(asset_id, now)
            set_gauge("checkpointed_assets", len(self._calc.checkpoints()))

    def on_asset_transferred(self, asset_id: int, now: int) -> int:
        with self._lock:
            amount = self._calc.settle(asset_id, now)
            inc_counter("transfer_settlements_total")
            if amount == 0:
                inc_counter("transfer_settlements_zero_total")
            log_event(log, "transfer_settled", asset_id=int(asset_id), now=int(now), amount=str(amount))
            return amount

    # ---- snapshot ----

    def to_dict(self) -> Json:
        with self._lock:
            return {"periods": self._ledger.to_list(), "checkpoints": self._calc.to_dict()}

    @classmethod
    def from_dict(cls, d: Json) -> "StakingEngine":
        ledger = PeriodLedger.from_list(d.get("periods", []))
        raw_cps = d.get("checkpoints", {})
        if not isinstance(raw_cps, dict):
            raise ValueError("checkpoints must be an object")
        checkpoints = {int(k): int(v) for k, v in raw_cps.items()}
        return cls(ledger=ledger, checkpoints=checkpoints)

    def _after_period_change(self, event: str, p: RewardPeriod) -> None:
        inc_counter("period_transitions_total")
        set_gauge("periods", len(self._ledger))
        log_event(
            log,
            event,
            start_time=int(p.start_time),
            end_time=p.end_time,
            rate=int(p.rate),
            status=self._ledger.status.name,
        )
