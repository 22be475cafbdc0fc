from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure local "src/" takes precedence over any globally-installed "yieldstake" package.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)


DAY = 86_400
UNIT = 10**18


@pytest.fixture(autouse=True)
def _fresh_metrics():
    from yieldstake.runtime import metrics

    metrics.reset()
    yield
    metrics.reset()
