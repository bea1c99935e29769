"""
Test suite for trend classification.

Tests the three-bar Up/Down rule, its degenerate-input guards and the
mini-trend used inside order block windows.
"""

import pytest

from smc_stream.shared.config.smc_config import DEFAULT_THRESHOLDS, ThresholdSet
from smc_stream.shared.models.data import Resolution
from smc_stream.shared.models.smc import Trend
from smc_stream.strategy.smc.htf_alignment import (
    classify_trend,
    mini_trend,
    trends_aligned,
    volume_ratio,
)
from smc_stream.tests.fixtures.market_data import (
    flat_rows,
    macro_uptrend_rows,
    make_bars,
    mirror_rows,
)

MESO = DEFAULT_THRESHOLDS[Resolution.MESO]
MACRO = DEFAULT_THRESHOLDS[Resolution.MACRO]


def _bars_from_extremes(highs, lows, volumes):
    rows = []
    for h, l, v in zip(highs, lows, volumes):
        mid = (h + l) / 2
        rows.append((mid, h, l, mid, v))
    return make_bars(Resolution.MESO, rows)


def test_higher_highs_and_lows_with_volume_is_up():
    """Highs 100/102/104, lows 95/97/99, volume spike -> Up."""
    bars = _bars_from_extremes([100, 102, 104], [95, 97, 99], [100, 100, 400])
    assert classify_trend(bars, MESO) is Trend.UP


def test_lower_highs_and_lows_with_volume_is_down():
    bars = _bars_from_extremes([104, 102, 100], [99, 97, 95], [100, 100, 400])
    assert classify_trend(bars, MESO) is Trend.DOWN


def test_missing_volume_confirmation_is_neutral():
    bars = _bars_from_extremes([100, 102, 104], [95, 97, 99], [100, 100, 100])
    assert classify_trend(bars, MESO) is Trend.NEUTRAL


def test_mixed_highs_and_lows_is_neutral():
    bars = _bars_from_extremes([100, 102, 104], [95, 94, 99], [100, 100, 400])
    assert classify_trend(bars, MESO) is Trend.NEUTRAL


def test_small_moves_below_threshold_are_neutral():
    bars = _bars_from_extremes([100, 100.3, 100.6], [95, 95.3, 95.6], [100, 100, 400])
    assert classify_trend(bars, MESO) is Trend.NEUTRAL


def test_fewer_than_three_bars_is_neutral():
    bars = _bars_from_extremes([100, 102], [95, 97], [100, 400])
    assert classify_trend(bars, MESO) is Trend.NEUTRAL


def test_zero_volume_is_neutral():
    bars = _bars_from_extremes([100, 102, 104], [95, 97, 99], [0, 0, 0])
    assert classify_trend(bars, MESO) is Trend.NEUTRAL


def test_classification_is_deterministic():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())
    results = {classify_trend(bars, MACRO) for _ in range(5)}
    assert results == {Trend.UP}


def test_mirrored_uptrend_is_down():
    bars = make_bars(Resolution.MACRO, mirror_rows(macro_uptrend_rows()))
    assert classify_trend(bars, MACRO) is Trend.DOWN


def test_flat_series_is_neutral():
    bars = make_bars(Resolution.MACRO, flat_rows(20))
    assert classify_trend(bars, MACRO) is Trend.NEUTRAL


def test_volume_ratio_uses_last_five_bars():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())
    # last five volumes: 100, 100, 100, 100, 300
    assert abs(volume_ratio(bars) - 300 / 140) < 1e-9


def test_min_swing_points_validated():
    ThresholdSet(min_swing_points=2).validate()
    with pytest.raises(ValueError, match="min_swing_points"):
        ThresholdSet(min_swing_points=1).validate()


def test_mini_trend_thresholds():
    up = make_bars(Resolution.MICRO, [(100, 100, 100, 100, 1), (100, 101, 100, 100.2, 1), (100, 101, 100, 100.6, 1)])
    down = make_bars(Resolution.MICRO, [(100, 100, 100, 100, 1), (99.5, 100, 99, 99.8, 1), (99.5, 100, 99, 99.4, 1)])
    flat = make_bars(Resolution.MICRO, [(100, 100, 100, 100, 1), (100, 100.5, 99.5, 100.2, 1), (100, 100.5, 99.5, 100.4, 1)])

    assert mini_trend(up) is Trend.UP
    assert mini_trend(down) is Trend.DOWN
    assert mini_trend(flat) is Trend.NEUTRAL


def test_trends_aligned():
    assert trends_aligned(Trend.UP, Trend.UP)
    assert trends_aligned(Trend.DOWN, Trend.DOWN)
    assert not trends_aligned(Trend.UP, Trend.DOWN)
    assert not trends_aligned(Trend.NEUTRAL, Trend.NEUTRAL)
