"""
Order Block Detection Module

Implements Smart Money Concept (SMC) order block detection over a
resolution's buffered bars.

Order Blocks are high-volume reversal zones identified by:
- A 5-bar window whose first three closes trend one way and whose last
  three closes trend the other way, pivoting on the middle bar
- Volume on the pivot bar well above the recent average
- A meaningful body on the pivot bar (price rejection)

Blocks the latest close has already run through are never returned.
"""

from typing import List, Optional, Sequence

import numpy as np

from smc_stream.shared.models.data import Bar, Resolution
from smc_stream.shared.models.smc import OrderBlock, StructureDirection, Trend
from smc_stream.shared.config.smc_config import ThresholdSet
from smc_stream.shared.config.defaults import AnalyzerConfig, WINDOW_BARS
from smc_stream.strategy.smc.htf_alignment import mini_trend


def _average_volume(bars: Sequence[Bar], lookback: int) -> float:
    volumes = np.array([b.volume for b in bars[-lookback:]], dtype=float)
    return float(volumes.mean()) if len(volumes) else 0.0


def _pivot_direction(window: Sequence[Bar], mini_trend_pct: float) -> Optional[StructureDirection]:
    """Direction of the reversal pivoting on the window's middle bar, if any."""
    before = mini_trend(window[:3], mini_trend_pct)
    after = mini_trend(window[2:], mini_trend_pct)
    if before is Trend.DOWN and after is Trend.UP:
        return StructureDirection.BULLISH
    if before is Trend.UP and after is Trend.DOWN:
        return StructureDirection.BEARISH
    return None


def calculate_order_block_strength(
    volume_ratio: float,
    body_ratio: float,
    resolution_weight: float,
) -> float:
    """
    Score an order block 0-100.

    Base 50, plus 10 per unit of volume ratio above 1, plus up to 20 for a
    body filling the whole range; then weighted by resolution and clamped.
    """
    score = 50 + (volume_ratio - 1) * 10 + 20 * body_ratio
    score *= resolution_weight
    return float(np.clip(score, 0.0, 100.0))


def _zone_bounds(bar: Bar, direction: StructureDirection) -> tuple:
    """
    Bullish blocks cover the lower half of the body down to the wick low,
    bearish blocks the upper half of the body up to the wick high.
    """
    if direction is StructureDirection.BULLISH:
        return bar.low, bar.body_midpoint
    return bar.body_midpoint, bar.high


def detect_order_blocks(
    bars: Sequence[Bar],
    thresholds: ThresholdSet,
    resolution: Resolution,
    config: Optional[AnalyzerConfig] = None,
) -> List[OrderBlock]:
    """
    Detect order blocks in a resolution's buffer.

    Args:
        bars: Buffered bars, oldest first
        thresholds: Resolution threshold set (volume magnitude, lookback,
            rejection percent)
        resolution: Resolution being scanned (drives strength weighting)
        config: Analyzer configuration (defaults when None)

    Returns:
        List[OrderBlock]: Valid blocks, strongest first, at most
        config.max_structures. Empty when fewer than config.min_structure_bars
        bars are buffered
        or the average volume is zero.
    """
    cfg = config or AnalyzerConfig.defaults()
    if len(bars) < cfg.min_structure_bars:
        return []

    avg_volume = _average_volume(bars, thresholds.max_lookback)
    if not np.isfinite(avg_volume) or avg_volume <= 0:
        return []

    current_price = bars[-1].close
    weight = cfg.resolution_weights[resolution]
    min_volume = avg_volume * thresholds.min_volume_magnitude

    order_blocks = []

    for start in range(len(bars) - WINDOW_BARS + 1):
        window = bars[start:start + WINDOW_BARS]
        direction = _pivot_direction(window, cfg.mini_trend_pct)
        if direction is None:
            continue

        candle = window[2]
        if not np.isfinite(candle.volume) or candle.volume <= min_volume:
            continue

        # Zero-range and zero-open bars cannot be scored
        if candle.range <= 0 or candle.open <= 0:
            continue

        rejection_pct = candle.body / candle.open * 100
        if rejection_pct < thresholds.min_rejection_pct:
            continue

        low, high = _zone_bounds(candle, direction)
        if high <= low:
            continue

        strength = calculate_order_block_strength(
            volume_ratio=candle.volume / avg_volume,
            body_ratio=candle.body_ratio,
            resolution_weight=weight,
        )

        ob = OrderBlock(
            resolution=resolution,
            direction=direction,
            low=low,
            high=high,
            volume=candle.volume,
            strength=strength,
            timestamp=candle.close_time,
        )

        if not ob.is_valid(current_price):
            continue

        order_blocks.append(ob)

    order_blocks.sort(key=lambda ob: ob.strength, reverse=True)
    return order_blocks[:cfg.max_structures]


def filter_by_direction(order_blocks: Sequence[OrderBlock], direction: StructureDirection) -> List[OrderBlock]:
    """Keep only blocks of one direction."""
    return [ob for ob in order_blocks if ob.direction is direction]
