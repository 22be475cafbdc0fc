from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Set

from yieldstake.ledger.constants import REWARD_TOKEN_NAME, REWARD_TOKEN_SYMBOL
from yieldstake.runtime.errors import InvalidRecipient, MintForbidden

Json = Dict[str, Any]


class RewardToken:
    """Fungible reward token with a minter role.

    The staking core only needs "mint N units to A"; the role gate lives here.
    """

    name = REWARD_TOKEN_NAME
    symbol = REWARD_TOKEN_SYMBOL

    def __init__(self, *, minters: Optional[Iterable[str]] = None) -> None:
        self._balances: Dict[str, int] = {}
        self._total_supply = 0
        self._minters: Set[str] = set(minters or [])

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return int(self._balances.get(str(account), 0))

    def is_minter(self, account: str) -> bool:
        return str(account) in self._minters

    def grant_minter(self, account: str) -> None:
        self._minters.add(str(account))

    def revoke_minter(self, account: str) -> None:
        self._minters.discard(str(account))

    def require_minter(self, minter: str) -> None:
        if not self.is_minter(minter):
            raise MintForbidden("mint_forbidden", "minter_role_required", {"minter": str(minter)})

    def mint(self, minter: str, to: str, amount: int) -> None:
        self.require_minter(minter)
        if not isinstance(to, str) or not to.strip():
            raise InvalidRecipient("invalid_recipient", "recipient_required", {"to": repr(to)})
        amt = int(amount)
        if amt <= 0:
            return
        self._balances[to] = self.balance_of(to) + amt
        self._total_supply += amt

    def to_dict(self) -> Json:
        return {
            "balances": {k: int(v) for k, v in sorted(self._balances.items())},
            "total_supply": int(self._total_supply),
            "minters": sorted(self._minters),
        }

    @classmethod
    def from_dict(cls, d: Json) -> "RewardToken":
        tok = cls(minters=[str(m) for m in d.get("minters", []) or []])
        balances = d.get("balances", {})
        if not isinstance(balances, dict):
            raise ValueError("balances must be an object")
        tok._balances = {str(k): int(v) for k, v in balances.items() if int(v) > 0}
        tok._total_supply = sum(tok._balances.values())
        return tok
