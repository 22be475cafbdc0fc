from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class StakingError(Exception):
    """Canonical error type for staking ledger, registry and token failures.

    Every failure is a local precondition violation raised before any
    mutation. Callers correct their input and retry.
    """

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class InvalidRate(StakingError):
    pass


class EmptyLedger(StakingError):
    pass


class NothingToCollect(StakingError):
    pass


class InvalidTimestamp(StakingError):
    pass


class UnknownAsset(StakingError):
    pass


class NotOwner(StakingError):
    pass


class InvalidRecipient(StakingError):
    pass


class InvalidQuantity(StakingError):
    pass


class MintForbidden(StakingError):
    pass
