# src/yieldstake/ledger/accrual.py
from __future__ import annotations

"""
Per-asset reward accrual over the global period ledger.

Each asset carries a single checkpoint: the instant up to which its reward
has been fully accounted for. An asset with no checkpoint accrues nothing;
a stored checkpoint of 0 is a real instant (epoch start). Accrual for a
query time is the sum, over every period, of the overlap between
[checkpoint, now) and that period, weighted by the period's rate. Closed
periods are clipped to the query time, so a `now` at or before the
checkpoint always accrues zero.

The calculator reads the ledger and never mutates it.
"""

from typing import Any, Dict, Iterable, Optional

from yieldstake.ledger.constants import SCALE, SECONDS_PER_DAY
from yieldstake.ledger.periods import PeriodLedger

Json = Dict[str, Any]


def span_reward(rate: int, start: int, end: int) -> int:
    """Reward for one asset held over [start, end) at a constant rate."""
    if end <= start:
        return 0
    return (int(end) - int(start)) * int(rate) * SCALE // SECONDS_PER_DAY


class AccrualCalculator:
    def __init__(self, ledger: PeriodLedger, checkpoints: Optional[Dict[int, int]] = None) -> None:
        self._ledger = ledger
        self._checkpoints: Dict[int, int] = {}
        for asset_id, ts in (checkpoints or {}).items():
            self._checkpoints[int(asset_id)] = int(ts)

    @property
    def ledger(self) -> PeriodLedger:
        return self._ledger

    def checkpoint_of(self, asset_id: int) -> Optional[int]:
        return self._checkpoints.get(int(asset_id))

    def checkpoints(self) -> Dict[int, int]:
        return dict(self._checkpoints)

    def set_checkpoint(self, asset_id: int, now: int) -> None:
        self._checkpoints[int(asset_id)] = int(now)

    def accrued(self, asset_id: int, now: int) -> int:
        checkpoint = self._checkpoints.get(int(asset_id))
        if checkpoint is None:
            return 0

        now = int(now)
        if now <= checkpoint:
            return 0

        total = 0
        for p in self._ledger.periods():
            if p.end_time is not None and p.end_time < checkpoint:
                continue
            start = max(checkpoint, p.start_time)
            end = min(p.end_time, now) if p.end_time is not None else now
            total += span_reward(p.rate, start, end)
        return total

    def accrued_for_set(self, asset_ids: Iterable[int], now: int) -> int:
        return sum(self.accrued(a, now) for a in asset_ids)

    def settle(self, asset_id: int, now: int) -> int:
        """Compute accrual and advance the checkpoint to `now`.

        The checkpoint never moves backwards. Minting the returned amount is
        the caller's job.
        """
        amount = self.accrued(asset_id, now)
        prev = self._checkpoints.get(int(asset_id), 0)
        self._checkpoints[int(asset_id)] = max(int(prev), int(now))
        return amount

    def to_dict(self) -> Json:
        # JSON object keys are strings
        return {str(k): int(v) for k, v in sorted(self._checkpoints.items())}
