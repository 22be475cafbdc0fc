from __future__ import annotations

import pytest

from yieldstake.ledger.accrual import AccrualCalculator, span_reward
from yieldstake.ledger.constants import SCALE, SECONDS_PER_DAY
from yieldstake.ledger.periods import PeriodLedger

DAY = SECONDS_PER_DAY


def _calc(*, checkpoint: int | None = 0) -> AccrualCalculator:
    ledger = PeriodLedger()
    calc = AccrualCalculator(ledger)
    if checkpoint is not None:
        calc.set_checkpoint(1, checkpoint)
    return calc


def test_one_day_at_rate_ten() -> None:
    calc = _calc()
    calc.ledger.open(10, 0)
    assert calc.accrued(1, DAY) == 10 * SCALE


def test_accrual_spans_rate_change_without_settlement() -> None:
    calc = _calc()
    calc.ledger.open(10, 0)
    calc.ledger.change_rate(20, DAY)
    assert calc.accrued(1, 2 * DAY) == 30 * SCALE


def test_settle_at_rate_change_then_only_new_period_counts() -> None:
    calc = _calc()
    calc.ledger.open(10, 0)
    assert calc.settle(1, DAY) == 10 * SCALE
    calc.ledger.change_rate(20, DAY)
    assert calc.accrued(1, 2 * DAY) == 20 * SCALE


def test_unset_checkpoint_accrues_nothing() -> None:
    calc = _calc(checkpoint=None)
    calc.ledger.open(10, 0)
    assert calc.accrued(1, 10 * DAY) == 0
    assert calc.checkpoint_of(1) is None


def test_empty_ledger_accrues_nothing() -> None:
    calc = _calc()
    assert calc.accrued(1, 10 * DAY) == 0


def test_zero_at_or_before_checkpoint() -> None:
    calc = _calc(checkpoint=5 * DAY)
    calc.ledger.open(10, 0)
    assert calc.accrued(1, 5 * DAY) == 0
    assert calc.accrued(1, 4 * DAY) == 0


def test_zero_before_checkpoint_with_closed_periods_after_it() -> None:
    calc = _calc(checkpoint=DAY)
    calc.ledger.open(10, 0)
    calc.ledger.change_rate(20, 2 * DAY)
    calc.ledger.close(3 * DAY)
    assert calc.accrued(1, 0) == 0
    assert calc.accrued(1, DAY) == 0
    assert calc.accrued(1, DAY // 2) == 0


def test_closed_period_is_clipped_to_query_time() -> None:
    calc = _calc(checkpoint=0)
    calc.ledger.open(10, 0)
    calc.ledger.close(2 * DAY)
    assert calc.accrued(1, DAY) == 10 * SCALE
    assert calc.accrued(1, 2 * DAY) == 20 * SCALE


def test_settle_with_stale_now_pays_nothing_and_keeps_checkpoint() -> None:
    calc = _calc(checkpoint=0)
    calc.ledger.open(10, 0)
    assert calc.settle(1, DAY) == 10 * SCALE
    calc.ledger.close(2 * DAY)
    for _ in range(3):
        assert calc.settle(1, 10) == 0
    assert calc.checkpoint_of(1) == DAY
    assert calc.accrued(1, 2 * DAY) == 10 * SCALE


def test_period_ending_before_checkpoint_is_skipped() -> None:
    calc = _calc(checkpoint=3 * DAY)
    calc.ledger.open(500, 0)
    calc.ledger.close(DAY)
    calc.ledger.open(10, 2 * DAY)
    # Only [3d, 4d) at rate 10 counts.
    assert calc.accrued(1, 4 * DAY) == 10 * SCALE


def test_period_starting_before_checkpoint_is_clipped() -> None:
    calc = _calc(checkpoint=DAY // 2)
    calc.ledger.open(10, 0)
    assert calc.accrued(1, DAY) == 5 * SCALE


def test_first_accrual_can_span_many_historical_periods() -> None:
    calc = _calc(checkpoint=0)
    calc.ledger.open(1, 0)
    calc.ledger.change_rate(2, DAY)
    calc.ledger.change_rate(3, 2 * DAY)
    calc.ledger.close(3 * DAY)
    calc.ledger.open(4, 4 * DAY)
    # pause day [3d, 4d) contributes nothing
    assert calc.accrued(1, 5 * DAY) == (1 + 2 + 3 + 4) * SCALE


def test_paused_ledger_stops_accruing() -> None:
    calc = _calc()
    calc.ledger.open(10, 0)
    calc.ledger.close(DAY)
    assert calc.accrued(1, DAY) == calc.accrued(1, 30 * DAY) == 10 * SCALE


def test_monotonic_in_now() -> None:
    calc = _calc(checkpoint=100)
    calc.ledger.open(3, 0)
    calc.ledger.change_rate(999, 4_000)
    calc.ledger.close(9_000)
    calc.ledger.open(1, 12_345)

    prev = -1
    for now in range(0, 40_000, 777):
        cur = calc.accrued(1, now)
        assert cur >= 0
        if now <= 100:
            assert cur == 0
        assert cur >= prev
        prev = cur


@pytest.mark.parametrize("t_mid", [1, 3_600, 40_001, DAY])
def test_conservation_across_rate_change(t_mid: int) -> None:
    r1, r2 = 13, 977
    t_end = t_mid + 123_457

    calc = _calc(checkpoint=0)
    calc.ledger.open(r1, 0)
    calc.ledger.change_rate(r2, t_mid)

    assert calc.accrued(1, t_end) == span_reward(r1, 0, t_mid) + span_reward(r2, t_mid, t_end)


def test_settle_resets_and_is_idempotent_at_same_now() -> None:
    calc = _calc()
    calc.ledger.open(10, 0)
    assert calc.settle(1, DAY) == 10 * SCALE
    assert calc.accrued(1, DAY) == 0
    assert calc.settle(1, DAY) == 0
    assert calc.checkpoint_of(1) == DAY


def test_settle_never_moves_checkpoint_backwards() -> None:
    calc = _calc(checkpoint=DAY)
    calc.ledger.open(10, 0)
    assert calc.settle(1, DAY // 2) == 0
    assert calc.checkpoint_of(1) == DAY


def test_span_reward_is_zero_for_empty_or_inverted_span() -> None:
    assert span_reward(10, 5, 5) == 0
    assert span_reward(10, 6, 5) == 0


def test_accrued_for_set_sums_assets() -> None:
    calc = _calc()
    calc.set_checkpoint(2, DAY // 2)
    calc.ledger.open(10, 0)
    assert calc.accrued_for_set([1, 2, 99], DAY) == 15 * SCALE


def test_calculator_never_mutates_ledger() -> None:
    calc = _calc()
    calc.ledger.open(10, 0)
    before = calc.ledger.periods()
    calc.accrued(1, DAY)
    calc.settle(1, DAY)
    assert calc.ledger.periods() == before
