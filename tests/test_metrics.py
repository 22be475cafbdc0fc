from __future__ import annotations

from yieldstake.runtime import metrics


def test_counters_and_gauges_snapshot() -> None:
    metrics.inc_counter("a")
    metrics.inc_counter("a", 2)
    metrics.set_gauge("g", 7)
    metrics.inc_counter("  ")

    snap = metrics.snapshot()
    assert snap["counters"] == {"a": 3}
    assert snap["gauges"] == {"g": 7}
    assert snap["uptime_ms"] >= 0


def test_prometheus_format() -> None:
    metrics.inc_counter("collections_total", 4)
    metrics.set_gauge("periods", 2)
    text = metrics.format_prometheus()
    lines = text.strip().splitlines()
    assert lines[0].startswith("yieldstake_uptime_ms ")
    assert "yieldstake_collections_total 4" in lines
    assert "yieldstake_periods 2" in lines
    assert text.endswith("\n")


def test_metrics_enabled_flag(monkeypatch) -> None:
    monkeypatch.delenv("YIELDSTAKE_METRICS_ENABLED", raising=False)
    assert metrics.metrics_enabled() is False
    monkeypatch.setenv("YIELDSTAKE_METRICS_ENABLED", "yes")
    assert metrics.metrics_enabled() is True
