from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

from yieldstake.ledger.constants import DEFAULT_MINTER_ID
from yieldstake.ledger.migrations import CURRENT_STATE_VERSION, migrate_state_dict
from yieldstake.runtime.collection import StakedCollection
from yieldstake.runtime.event_log import log_event
from yieldstake.runtime.sqlite_db import SqliteDB, SqliteStakingStore
from yieldstake.runtime.staking_config import StakingConfig, load_staking_config

Json = Dict[str, Any]
T = TypeVar("T")

log = logging.getLogger("yieldstake.executor")


def _now_s() -> int:
    return int(time.time())


def _ensure_parent(path: str) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


class ExecutorError(RuntimeError):
    pass


class StakingExecutor:
    """Staked collection persisted in SQLite.

    Every mutation runs under one lock and is followed by a snapshot write.
    If the mutation or the write fails, in-memory state is restored from the
    snapshot taken before the call, so callers never observe a half-applied
    operation.
    """

    def __init__(
        self,
        *,
        db_path: str,
        collection_id: str,
        minter_id: str = DEFAULT_MINTER_ID,
        initial_reward_rate: int = 0,
        clock: Callable[[], int] = _now_s,
    ) -> None:
        self.collection_id = str(collection_id)
        self.db_path = str(db_path)
        self.clock = clock
        _ensure_parent(self.db_path)

        self._db = SqliteDB(path=self.db_path)
        self._store = SqliteStakingStore(db=self._db)
        self._lock = threading.RLock()

        if self._store.exists():
            st = migrate_state_dict(self._store.read())
            st_collection_id = str(st.get("collection_id") or "").strip()
            if st_collection_id and st_collection_id != self.collection_id:
                raise ExecutorError(
                    f"collection_id mismatch: db={st_collection_id!r} executor={self.collection_id!r}. Refuse to start."
                )
            self._collection = StakedCollection.from_dict(st)
        else:
            self._collection = StakedCollection(minter_id=minter_id)

        if int(initial_reward_rate) > 0 and len(self._collection.engine.ledger) == 0:
            self._collection.set_reward_rate(int(initial_reward_rate), self.clock())

        self._store.write(self.snapshot())
        log_event(
            log,
            "executor_started",
            collection_id=self.collection_id,
            db_path=self.db_path,
            periods=len(self._collection.engine.ledger),
            assets=self._collection.registry.total_supply,
        )

    @property
    def collection(self) -> StakedCollection:
        return self._collection

    def now(self, requested: Optional[int] = None) -> int:
        """Ambient time for a call: the caller's value if given, else the clock."""
        return int(requested) if requested is not None else int(self.clock())

    def snapshot(self) -> Json:
        with self._lock:
            st = self._collection.to_dict()
            st["state_version"] = CURRENT_STATE_VERSION
            st["collection_id"] = self.collection_id
            return st

    def read_state(self) -> Json:
        return self._store.read()

    def read(self, fn: Callable[[StakedCollection], T]) -> T:
        with self._lock:
            return fn(self._collection)

    def mutate(self, fn: Callable[[StakedCollection], T]) -> T:
        with self._lock:
            before = self.snapshot()
            try:
                out = fn(self._collection)
                self._store.write(self.snapshot())
            except Exception:
                self._collection = StakedCollection.from_dict(migrate_state_dict(before))
                raise
            return out

    @classmethod
    def from_config(cls, cfg: StakingConfig) -> "StakingExecutor":
        return cls(
            db_path=cfg.db_path,
            collection_id=cfg.collection_id,
            minter_id=cfg.minter_id,
            initial_reward_rate=cfg.initial_reward_rate,
        )

    @classmethod
    def from_env(cls) -> "StakingExecutor":
        return cls.from_config(load_staking_config())
