"""
Test suite for order block detection.

Tests the pivot window rule, volume/rejection gating, zone bounds,
strength weighting and invalidation by the latest close.
"""

import pytest

from smc_stream.shared.config.defaults import AnalyzerConfig
from smc_stream.shared.config.smc_config import DEFAULT_THRESHOLDS, ThresholdSet
from smc_stream.shared.models.data import Resolution
from smc_stream.shared.models.smc import StructureDirection
from smc_stream.strategy.smc.order_blocks import (
    calculate_order_block_strength,
    detect_order_blocks,
    filter_by_direction,
)
from smc_stream.tests.fixtures.market_data import (
    BULLISH_OB_HIGH,
    BULLISH_OB_LOW,
    flat_rows,
    macro_uptrend_rows,
    make_bars,
    meso_uptrend_rows,
    mirror_rows,
)

MACRO = DEFAULT_THRESHOLDS[Resolution.MACRO]
MESO = DEFAULT_THRESHOLDS[Resolution.MESO]


def test_bullish_order_block_detected_at_reversal_bar():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())

    obs = detect_order_blocks(bars, MACRO, Resolution.MACRO)

    assert len(obs) == 1
    ob = obs[0]
    assert ob.direction is StructureDirection.BULLISH
    assert ob.low == pytest.approx(BULLISH_OB_LOW)
    assert ob.high == pytest.approx(BULLISH_OB_HIGH)
    assert ob.volume == 600
    assert ob.timestamp == bars[13].close_time
    # 50 + (600/140 - 1) * 10 + 20 * 0.7, weighted 1.3, clamps at 100
    assert ob.strength == 100.0


def test_meso_strength_uses_meso_lookback_and_weight():
    bars = make_bars(Resolution.MESO, meso_uptrend_rows())

    obs = detect_order_blocks(bars, MESO, Resolution.MESO)

    assert len(obs) == 1
    # avg volume of last 8 bars = 187.5 -> ratio 3.2 -> (50 + 22 + 14) * 1.1
    assert obs[0].strength == pytest.approx(94.6)


def test_bearish_order_block_from_mirrored_series():
    bars = make_bars(Resolution.MACRO, mirror_rows(macro_uptrend_rows()))

    obs = detect_order_blocks(bars, MACRO, Resolution.MACRO)

    assert len(obs) == 1
    ob = obs[0]
    assert ob.direction is StructureDirection.BEARISH
    assert ob.low == pytest.approx(200 - BULLISH_OB_HIGH)
    assert ob.high == pytest.approx(200 - BULLISH_OB_LOW)


def test_block_invalidated_once_close_runs_through():
    """A bullish block is dropped once the latest close is below its low."""
    rows = macro_uptrend_rows() + [(104.6, 104.7, 96.0, 96.5, 100.0)]
    bars = make_bars(Resolution.MACRO, rows)

    assert detect_order_blocks(bars, MACRO, Resolution.MACRO) == []


def test_surfaced_blocks_are_valid_against_latest_close():
    bars = make_bars(Resolution.MESO, meso_uptrend_rows())
    price = bars[-1].close
    for ob in detect_order_blocks(bars, MESO, Resolution.MESO):
        assert ob.is_valid(price)


def test_insufficient_volume_rejected():
    strict = ThresholdSet.from_dict({"min_volume_magnitude": 5.0}, MACRO)
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())

    assert detect_order_blocks(bars, strict, Resolution.MACRO) == []


def test_small_body_rejected():
    strict = ThresholdSet.from_dict({"min_rejection_pct": 2.0}, MACRO)
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())

    assert detect_order_blocks(bars, strict, Resolution.MACRO) == []


def test_fewer_than_five_bars_returns_empty():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows()[-4:])
    assert detect_order_blocks(bars, MACRO, Resolution.MACRO) == []


def test_zero_average_volume_returns_empty():
    rows = [(o, h, l, c, 0.0) for o, h, l, c, _ in macro_uptrend_rows()]
    bars = make_bars(Resolution.MACRO, rows)
    assert detect_order_blocks(bars, MACRO, Resolution.MACRO) == []


def test_flat_market_has_no_blocks():
    bars = make_bars(Resolution.MACRO, flat_rows(20))
    assert detect_order_blocks(bars, MACRO, Resolution.MACRO) == []


def test_result_capped_at_max_structures():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows() * 2)

    assert len(detect_order_blocks(bars, MACRO, Resolution.MACRO)) == 2
    capped = detect_order_blocks(bars, MACRO, Resolution.MACRO, AnalyzerConfig(max_structures=1))
    assert len(capped) == 1


def test_strength_formula_and_clamp():
    assert calculate_order_block_strength(2.0, 0.5, 1.0) == pytest.approx(70.0)
    assert calculate_order_block_strength(20.0, 1.0, 1.3) == 100.0
    assert calculate_order_block_strength(0.0, 0.0, 1.0) == pytest.approx(40.0)


def test_filter_by_direction():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())
    obs = detect_order_blocks(bars, MACRO, Resolution.MACRO)

    assert filter_by_direction(obs, StructureDirection.BULLISH) == obs
    assert filter_by_direction(obs, StructureDirection.BEARISH) == []


def test_non_finite_volume_is_skipped():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows())
    # Bar construction rejects NaN, so force it past validation
    object.__setattr__(bars[-1], "volume", float("nan"))

    assert detect_order_blocks(bars, MACRO, Resolution.MACRO) == []


def test_min_structure_bars_from_config():
    bars = make_bars(Resolution.MACRO, macro_uptrend_rows()[-9:])

    assert len(detect_order_blocks(bars, MACRO, Resolution.MACRO)) == 1
    assert detect_order_blocks(bars, MACRO, Resolution.MACRO, AnalyzerConfig(min_structure_bars=10)) == []
