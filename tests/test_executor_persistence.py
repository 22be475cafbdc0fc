from __future__ import annotations

import sqlite3
import time
from pathlib import Path

import pytest

from yieldstake.ledger.constants import SCALE, SECONDS_PER_DAY
from yieldstake.runtime.errors import NothingToCollect
from yieldstake.runtime.executor import ExecutorError, StakingExecutor
from yieldstake.runtime.sqlite_db import SqliteDB

DAY = SECONDS_PER_DAY


class _Clock:
    def __init__(self, t: int = 0) -> None:
        self.t = t

    def __call__(self) -> int:
        return self.t


def _mk(tmp_path: Path, **kw) -> StakingExecutor:
    kw.setdefault("collection_id", "test-collection")
    return StakingExecutor(db_path=str(tmp_path / "stake.db"), **kw)


def test_state_survives_restart(tmp_path: Path) -> None:
    ex = _mk(tmp_path)
    ex.mutate(lambda c: c.set_reward_rate(10, 0))
    ex.mutate(lambda c: c.mint_assets("alice", 1, 0))
    ex.mutate(lambda c: c.transfer(0, "alice", "bob", DAY))

    ex2 = _mk(tmp_path)
    c = ex2.collection
    assert c.registry.owner_of(0) == "bob"
    assert c.token.balance_of("alice") == 10 * SCALE
    assert c.collectable_for_one(0, 2 * DAY) == 10 * SCALE
    assert ex2.read_state()["state_version"] == 1


def test_initial_reward_rate_opens_period_once(tmp_path: Path) -> None:
    clock = _Clock(1_000)
    ex = _mk(tmp_path, initial_reward_rate=5, clock=clock)
    assert ex.collection.reward_rate == 5
    assert ex.collection.engine.ledger.periods()[0].start_time == 1_000

    clock.t = 5_000
    ex2 = _mk(tmp_path, initial_reward_rate=5, clock=clock)
    assert len(ex2.collection.engine.ledger) == 1


def test_collection_id_mismatch_refuses_to_start(tmp_path: Path) -> None:
    _mk(tmp_path)
    with pytest.raises(ExecutorError):
        _mk(tmp_path, collection_id="other")


def test_failed_mutation_leaves_persisted_and_memory_state_intact(tmp_path: Path) -> None:
    ex = _mk(tmp_path)
    ex.mutate(lambda c: c.set_reward_rate(10, 0))
    ex.mutate(lambda c: c.mint_assets("alice", 1, 100))
    before = ex.read_state()

    with pytest.raises(NothingToCollect):
        ex.mutate(lambda c: c.collect_for_one(0, 100))

    assert ex.read_state() == before
    assert ex.collection.engine.checkpoint_of(0) == 100


def test_store_write_failure_rolls_back_memory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ex = _mk(tmp_path)
    ex.mutate(lambda c: c.set_reward_rate(10, 0))

    def _boom(_st):
        raise OSError("disk full")

    monkeypatch.setattr(ex._store, "write", _boom)
    with pytest.raises(OSError):
        ex.mutate(lambda c: c.mint_assets("alice", 1, 0))

    assert ex.collection.registry.total_supply == 0
    assert ex.collection.engine.checkpoint_of(0) is None


def test_now_defaults_to_clock(tmp_path: Path) -> None:
    ex = _mk(tmp_path, clock=_Clock(42))
    assert ex.now() == 42
    assert ex.now(7) == 7


def test_schema_version_mismatch_refuses(tmp_path: Path) -> None:
    db = SqliteDB(path=str(tmp_path / "stake.db"))
    db.init_schema()
    with db.write_tx() as con:
        con.execute("UPDATE meta SET value='99' WHERE key='schema_version';")
    with pytest.raises(RuntimeError):
        _mk(tmp_path)


def test_write_tx_gives_up_after_deadline_on_held_writer_lock(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YIELDSTAKE_SQLITE_CONNECT_TIMEOUT_MS", "0")
    monkeypatch.setenv("YIELDSTAKE_SQLITE_BUSY_TIMEOUT_MS", "0")
    monkeypatch.setenv("YIELDSTAKE_SQLITE_WRITE_DEADLINE_MS", "250")
    db = SqliteDB(path=str(tmp_path / "stake.db"))
    db.init_schema()

    with db.write_tx():
        t0 = time.monotonic()
        with pytest.raises(sqlite3.OperationalError, match="locked"):
            with db.write_tx():
                pass
        waited = time.monotonic() - t0

    assert waited >= 0.2
    assert waited < 0.2 + 8 * SqliteDB.WRITE_BACKOFF_MAX_S

    # lock released: the next writer gets through
    with db.write_tx() as con:
        con.execute("INSERT INTO meta(key, value) VALUES('writer_free', '1');")
