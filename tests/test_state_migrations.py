from __future__ import annotations

import pytest

from yieldstake.ledger.migrations import CURRENT_STATE_VERSION, migrate_state_dict
from yieldstake.runtime.collection import StakedCollection


def _assert_minimal_shape(st: dict) -> None:
    assert st.get("state_version") == CURRENT_STATE_VERSION
    assert isinstance(st.get("periods"), list)
    assert isinstance(st.get("checkpoints"), dict)
    assert isinstance(st["assets"].get("owners"), dict)
    assert isinstance(st["assets"].get("next_id"), int)
    assert isinstance(st["token"].get("balances"), dict)
    assert isinstance(st["token"].get("minters"), list)
    assert isinstance(st.get("minter_id"), str)


def test_migrate_non_dict_input_yields_current_skeleton() -> None:
    st = migrate_state_dict(None)
    _assert_minimal_shape(st)
    c = StakedCollection.from_dict(st)
    assert len(c.engine.ledger) == 0
    assert c.token.is_minter(c.minter_id)


def test_migrate_v0_normalizes_scalars() -> None:
    v0 = {
        "periods": [{"start_time": 0, "end_time": None, "rate": 10}],
        "checkpoints": {"0": "100", "1": "garbage", "2": -4},
        "assets": {"owners": {"0": "alice"}, "next_id": "1"},
        "token": {"balances": {"alice": "25"}},
    }
    st = migrate_state_dict(v0)
    _assert_minimal_shape(st)
    assert st["checkpoints"] == {"0": 100}
    assert st["assets"]["next_id"] == 1
    assert st["token"]["balances"] == {"alice": 25}
    assert st["token"]["total_supply"] == 25


def test_migrate_current_version_is_untouched() -> None:
    st = StakedCollection().to_dict()
    st["state_version"] = CURRENT_STATE_VERSION
    assert migrate_state_dict(st) == st


def test_migrate_refuses_newer_version() -> None:
    with pytest.raises(ValueError):
        migrate_state_dict({"state_version": CURRENT_STATE_VERSION + 1})
