# src/yieldstake/ledger/periods.py
from __future__ import annotations

"""
Global reward-rate history.

The ledger is an ordered, append-mostly sequence of rate periods:

  [start_0, end_0) rate_0, [start_1, end_1) rate_1, ..., [start_n, open) rate_n

Invariants held after every operation:
  - periods are ordered by start_time and never overlap (end_i <= start_{i+1})
  - at most one period is open, and only the last one
  - a closed period is never reopened or altered
  - every rate is within [MIN_REWARD_RATE, MAX_REWARD_RATE]

All period creation goes through `open()`. Rate changes and resumes are
expressed in terms of it so there is exactly one code path that appends.
"""

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from yieldstake.ledger.constants import MAX_REWARD_RATE, MIN_REWARD_RATE
from yieldstake.runtime.errors import EmptyLedger, InvalidRate, InvalidTimestamp

Json = Dict[str, Any]


class StakingStatus(IntEnum):
    CONTINUE = 0
    PAUSE = 1


@dataclass(frozen=True, slots=True)
class RewardPeriod:
    start_time: int
    end_time: Optional[int]
    rate: int

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def to_dict(self) -> Json:
        return {"start_time": int(self.start_time), "end_time": self.end_time, "rate": int(self.rate)}

    @classmethod
    def from_dict(cls, d: Json) -> "RewardPeriod":
        end = d.get("end_time")
        return cls(
            start_time=int(d["start_time"]),
            end_time=None if end is None else int(end),
            rate=int(d["rate"]),
        )


def validate_rate(rate: Any) -> int:
    if isinstance(rate, bool) or not isinstance(rate, int):
        raise InvalidRate("invalid_rate", "rate_must_be_int", {"rate": repr(rate)})
    if rate < MIN_REWARD_RATE or rate > MAX_REWARD_RATE:
        raise InvalidRate(
            "invalid_rate",
            "rate_out_of_range",
            {"rate": rate, "min": MIN_REWARD_RATE, "max": MAX_REWARD_RATE},
        )
    return rate


class PeriodLedger:
    """Ordered rate periods with open/close/change-rate transitions."""

    def __init__(self, periods: Optional[Iterable[RewardPeriod]] = None) -> None:
        self._periods: List[RewardPeriod] = []
        if periods is not None:
            for p in periods:
                self._append_checked(p)

    # ---- reads ----

    def __len__(self) -> int:
        return len(self._periods)

    def periods(self) -> Tuple[RewardPeriod, ...]:
        return tuple(self._periods)

    def last(self) -> Optional[RewardPeriod]:
        return self._periods[-1] if self._periods else None

    @property
    def status(self) -> StakingStatus:
        last = self.last()
        if last is not None and last.is_open:
            return StakingStatus.CONTINUE
        return StakingStatus.PAUSE

    def current_rate(self) -> int:
        """Rate of the running period, else the last configured rate (0 if none).

        Display only; a closed period contributes nothing past its end.
        """
        last = self.last()
        return int(last.rate) if last is not None else 0

    def latest_boundary(self) -> Optional[int]:
        last = self.last()
        if last is None:
            return None
        return int(last.start_time) if last.end_time is None else int(last.end_time)

    # ---- transitions ----

    def open(self, rate: int, now: int) -> RewardPeriod:
        """Close the running period (if any) at `now` and open a new one."""
        rate = validate_rate(rate)
        now = self._check_now(now)

        new_period = RewardPeriod(start_time=now, end_time=None, rate=rate)
        last = self.last()
        if last is not None and last.is_open:
            self._periods[-1] = replace(last, end_time=now)
        self._periods.append(new_period)
        return new_period

    def change_rate(self, rate: int, now: int) -> RewardPeriod:
        return self.open(rate, now)

    def close(self, now: int) -> Optional[RewardPeriod]:
        """Pause accrual. Idempotent: closing an already-closed ledger changes nothing."""
        last = self.last()
        if last is None:
            raise EmptyLedger("empty_ledger", "no_period_to_close", None)
        if not last.is_open:
            return None
        now = self._check_now(now)
        closed = replace(last, end_time=now)
        self._periods[-1] = closed
        return closed

    def resume(self, now: int) -> Optional[RewardPeriod]:
        """Re-open at the last configured rate. No-op if already running."""
        last = self.last()
        if last is None:
            raise EmptyLedger("empty_ledger", "no_rate_configured", None)
        if last.is_open:
            return None
        return self.open(int(last.rate), now)

    # ---- serialisation ----

    def to_list(self) -> List[Json]:
        return [p.to_dict() for p in self._periods]

    @classmethod
    def from_list(cls, items: Any) -> "PeriodLedger":
        if not isinstance(items, list):
            raise ValueError(f"periods must be a list (got {type(items).__name__})")
        out: List[RewardPeriod] = []
        for i, raw in enumerate(items):
            if not isinstance(raw, dict):
                raise ValueError(f"period[{i}] must be an object")
            try:
                out.append(RewardPeriod.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"period[{i}] is malformed: {e}") from e
        return cls(out)

    # ---- internals ----

    def _check_now(self, now: Any) -> int:
        if isinstance(now, bool) or not isinstance(now, int):
            raise InvalidTimestamp("invalid_timestamp", "now_must_be_int", {"now": repr(now)})
        boundary = self.latest_boundary()
        if boundary is not None and now < boundary:
            raise InvalidTimestamp("invalid_timestamp", "now_before_latest_boundary", {"now": now, "boundary": boundary})
        return now

    def _append_checked(self, p: RewardPeriod) -> None:
        try:
            validate_rate(p.rate)
        except InvalidRate as e:
            raise ValueError(f"period rate out of range: {p.rate}") from e
        if p.end_time is not None and p.end_time < p.start_time:
            raise ValueError(f"period ends before it starts: {p.to_dict()}")
        last = self.last()
        if last is not None:
            if last.is_open:
                raise ValueError("open period must be the last period")
            if int(last.end_time) > p.start_time:  # type: ignore[arg-type]
                raise ValueError(f"period overlaps its predecessor: {p.to_dict()}")
        self._periods.append(p)
