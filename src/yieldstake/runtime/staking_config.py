# src/yieldstake/runtime/staking_config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from yieldstake.ledger.constants import DEFAULT_MINTER_ID, MAX_REWARD_RATE


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


@dataclass(frozen=True)
class StakingConfig:
    collection_id: str
    mode: str  # "dev" | "testnet" | "prod"

    # Single SQLite DB file holding the staking snapshot.
    db_path: str

    api_host: str
    api_port: int

    log_level: str

    minter_id: str

    # Opens the first reward period at boot on an empty ledger; 0 disables.
    initial_reward_rate: int


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_staking_config(cfg: StakingConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.collection_id, str) or not cfg.collection_id.strip():
        raise ValueError("collection_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    if not isinstance(cfg.db_path, str) or not cfg.db_path.strip():
        raise ValueError("db_path must be a non-empty string")

    if not isinstance(cfg.minter_id, str) or not cfg.minter_id.strip():
        raise ValueError("minter_id must be a non-empty string")

    rate = int(cfg.initial_reward_rate)
    if rate < 0 or rate > MAX_REWARD_RATE:
        raise ValueError(f"initial_reward_rate must be 0..{MAX_REWARD_RATE}; got: {rate}")


def default_staking_config() -> StakingConfig:
    return StakingConfig(
        collection_id="yieldstake-dev",
        # Production-safe default: no docs, FULL sqlite durability.
        mode="prod",
        db_path="./data/yieldstake.db",
        api_host="127.0.0.1",
        api_port=8080,
        log_level="INFO",
        minter_id=DEFAULT_MINTER_ID,
        initial_reward_rate=0,
    )


def read_staking_config_file(path: str) -> StakingConfig:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("staking config must be a JSON object")

    d = default_staking_config()

    cfg = StakingConfig(
        collection_id=_as_str(raw.get("collection_id"), d.collection_id),
        mode=_as_str(raw.get("mode"), d.mode).strip().lower(),
        db_path=_as_str(raw.get("db_path"), d.db_path),
        api_host=_as_str(raw.get("api_host"), d.api_host),
        api_port=_as_int(raw.get("api_port"), d.api_port),
        log_level=_as_str(raw.get("log_level"), d.log_level),
        minter_id=_as_str(raw.get("minter_id"), d.minter_id),
        initial_reward_rate=_as_int(raw.get("initial_reward_rate"), d.initial_reward_rate),
    )

    validate_staking_config(cfg)
    return cfg


def load_staking_config(*, config_path: Optional[str] = None) -> StakingConfig:
    p = config_path or os.environ.get("YIELDSTAKE_CONFIG_PATH")
    if p:
        return read_staking_config_file(p)

    cfg = default_staking_config()
    validate_staking_config(cfg)
    return cfg


def apply_staking_config_to_env(cfg: StakingConfig) -> None:
    validate_staking_config(cfg)
    os.environ["YIELDSTAKE_COLLECTION_ID"] = cfg.collection_id
    os.environ["YIELDSTAKE_MODE"] = (cfg.mode or "prod").strip().lower()
    os.environ["YIELDSTAKE_DB_PATH"] = cfg.db_path
    os.environ["YIELDSTAKE_LOG_LEVEL"] = cfg.log_level
