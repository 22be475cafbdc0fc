# src/yieldstake/ledger/migrations.py
from __future__ import annotations

from typing import Any, Callable, Dict

from yieldstake.ledger.constants import DEFAULT_MINTER_ID

Json = Dict[str, Any]

# Increment this when you add a new migration step.
CURRENT_STATE_VERSION = 1


def _as_int(v: Any, default: int = 0) -> int:
    try:
        if isinstance(v, bool):
            return default
        return int(v)
    except (TypeError, ValueError):
        return default


def _ensure_dict(root: Json, key: str) -> Json:
    v = root.get(key)
    if not isinstance(v, dict):
        v = {}
        root[key] = v
    return v


def _ensure_list(root: Json, key: str) -> list:
    v = root.get(key)
    if not isinstance(v, list):
        v = []
        root[key] = v
    return v


def _migrate_v0_to_v1(st: Json) -> Json:
    """v0 -> v1: backfill roots and normalise scalar types.

    Periods themselves are not rewritten here; a malformed period sequence is
    rejected when the ledger is rebuilt.
    """
    _ensure_list(st, "periods")

    cps = _ensure_dict(st, "checkpoints")
    for k in list(cps.keys()):
        ts = _as_int(cps.get(k), -1)
        if ts < 0:
            del cps[k]
        else:
            cps[k] = ts

    assets = _ensure_dict(st, "assets")
    _ensure_dict(assets, "owners")
    assets["next_id"] = _as_int(assets.get("next_id"), 0)

    minter_id = str(st.get("minter_id") or DEFAULT_MINTER_ID)
    st["minter_id"] = minter_id

    token = _ensure_dict(st, "token")
    balances = _ensure_dict(token, "balances")
    for k in list(balances.keys()):
        balances[k] = _as_int(balances.get(k), 0)
    minters = token.get("minters")
    if not isinstance(minters, list):
        token["minters"] = [minter_id]
    token["total_supply"] = sum(v for v in balances.values() if v > 0)

    st["state_version"] = 1
    return st


_MIGRATIONS: Dict[int, Callable[[Json], Json]] = {
    0: _migrate_v0_to_v1,
}


def migrate_state_dict(raw: Any) -> Json:
    """Upgrade a persisted staking snapshot to CURRENT_STATE_VERSION.

    Non-dict input yields a fresh, empty current-version snapshot. A snapshot
    from a newer version is refused.
    """
    st: Json = dict(raw) if isinstance(raw, dict) else {}
    version = _as_int(st.get("state_version"), 0)
    if version > CURRENT_STATE_VERSION:
        raise ValueError(f"state_version {version} is newer than supported {CURRENT_STATE_VERSION}")

    while version < CURRENT_STATE_VERSION:
        step = _MIGRATIONS.get(version)
        if step is None:
            raise ValueError(f"no migration registered from state_version {version}")
        st = step(st)
        version = _as_int(st.get("state_version"), version + 1)

    return st
