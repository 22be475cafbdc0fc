# src/yieldstake/runtime/event_log.py
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict

Json = Dict[str, Any]

SERVICE_NAME = "yieldstake"

# Reward amounts are 18-decimal fixed point and overflow a JSON double.
_MAX_SAFE_INT = 2**53 - 1


def _component(logger: logging.Logger) -> str:
    name = str(logger.name or "")
    prefix = SERVICE_NAME + "."
    return name[len(prefix):] if name.startswith(prefix) else name


def _field(v: Any) -> Any:
    if isinstance(v, int) and not isinstance(v, bool) and abs(v) > _MAX_SAFE_INT:
        return str(v)
    if isinstance(v, (list, tuple)):
        return [_field(x) for x in v]
    return v


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one staking event as a JSON line.

    Every line carries `service`, `component` (logger name below the service
    prefix), `event` and `ts_ms`. Integers beyond 2**53 are written as strings.
    """
    payload: Json = {k: _field(v) for k, v in fields.items()}
    payload.update({"ts_ms": int(time.time() * 1000), "event": str(event), "service": SERVICE_NAME, "component": _component(logger)})
    try:
        logger.log(level, json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    except (TypeError, ValueError):
        parts = [f"event={event}"] + [f"{k}={fields.get(k)!r}" for k in sorted(fields.keys())]
        logger.log(level, " ".join(parts))
