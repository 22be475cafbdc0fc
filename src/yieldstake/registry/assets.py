# src/yieldstake/registry/assets.py
from __future__ import annotations

"""Asset registry: identity, owner of record, per-owner enumeration, transfer.

Asset ids are sequential integers starting at 0. The registry knows nothing
about rewards; the staked collection drives settlement around it.
"""

from typing import Any, Dict, List

from yieldstake.ledger.constants import MAX_MINT_PER_CALL
from yieldstake.runtime.errors import InvalidQuantity, InvalidRecipient, NotOwner, UnknownAsset

Json = Dict[str, Any]


def _as_account(x: Any) -> str:
    return x.strip() if isinstance(x, str) else ""


class AssetRegistry:
    def __init__(self) -> None:
        self._owners: Dict[int, str] = {}
        self._next_id = 0

    @property
    def total_supply(self) -> int:
        return len(self._owners)

    @property
    def next_id(self) -> int:
        return self._next_id

    def exists(self, asset_id: int) -> bool:
        return int(asset_id) in self._owners

    def owner_of(self, asset_id: int) -> str:
        owner = self._owners.get(int(asset_id))
        if owner is None:
            raise UnknownAsset("unknown_asset", "asset_does_not_exist", {"asset_id": int(asset_id)})
        return owner

    def assets_owned_by(self, owner: str) -> List[int]:
        o = _as_account(owner)
        return sorted(a for a, who in self._owners.items() if who == o)

    def balance_of(self, owner: str) -> int:
        return len(self.assets_owned_by(owner))

    def check_create(self, owner: str, quantity: int) -> str:
        o = _as_account(owner)
        if not o:
            raise InvalidRecipient("invalid_recipient", "owner_required", {"owner": repr(owner)})
        if isinstance(quantity, bool) or not isinstance(quantity, int) or not (1 <= quantity <= MAX_MINT_PER_CALL):
            raise InvalidQuantity(
                "invalid_quantity",
                "quantity_out_of_range",
                {"quantity": repr(quantity), "max": MAX_MINT_PER_CALL},
            )
        return o

    def create(self, owner: str, quantity: int = 1) -> List[int]:
        o = self.check_create(owner, quantity)
        created: List[int] = []
        for _ in range(quantity):
            asset_id = self._next_id
            self._owners[asset_id] = o
            self._next_id += 1
            created.append(asset_id)
        return created

    def check_transfer(self, asset_id: int, sender: str, recipient: str) -> str:
        owner = self.owner_of(asset_id)
        if owner != _as_account(sender):
            raise NotOwner("not_owner", "sender_is_not_owner", {"asset_id": int(asset_id), "sender": sender})
        to = _as_account(recipient)
        if not to:
            raise InvalidRecipient("invalid_recipient", "recipient_required", {"recipient": repr(recipient)})
        return to

    def transfer(self, asset_id: int, sender: str, recipient: str) -> None:
        to = self.check_transfer(asset_id, sender, recipient)
        self._owners[int(asset_id)] = to

    def to_dict(self) -> Json:
        return {
            "next_id": int(self._next_id),
            "owners": {str(k): v for k, v in sorted(self._owners.items())},
        }

    @classmethod
    def from_dict(cls, d: Json) -> "AssetRegistry":
        reg = cls()
        owners = d.get("owners", {})
        if not isinstance(owners, dict):
            raise ValueError("owners must be an object")
        for k, v in owners.items():
            o = _as_account(v)
            if not o:
                raise ValueError(f"asset {k} has no owner")
            reg._owners[int(k)] = o
        next_id = int(d.get("next_id", 0))
        floor = max(reg._owners) + 1 if reg._owners else 0
        reg._next_id = max(next_id, floor)
        return reg
