"""
Fair Value Gap (FVG) Detection Module

Implements Smart Money Concept Fair Value Gap detection over a
resolution's buffered bars.

Fair Value Gaps are price inefficiencies where:
- Candle 1's range does not overlap with Candle 3's range
- Candle 2 closes against Candle 1 and Candle 3 reverses it
- The untraded interval between Candle 1 and Candle 3 often acts as
  support/resistance when revisited
"""

from typing import List, Optional, Sequence

from smc_stream.shared.models.data import Bar, Resolution
from smc_stream.shared.models.smc import FairValueGap, StructureDirection
from smc_stream.shared.config.smc_config import ThresholdSet
from smc_stream.shared.config.defaults import AnalyzerConfig


def _gap_bounds(a: Bar, b: Bar, c: Bar) -> Optional[tuple]:
    """
    Classify one consecutive triple.

    Returns:
        (direction, low, high) when the triple forms a gap, else None
    """
    # Bullish: the reversal leaves an untraded interval above candle 3
    if a.low > c.high and b.close < a.close and c.close > b.close:
        return StructureDirection.BULLISH, c.high, a.low

    # Bearish: mirror, untraded interval below candle 3
    if a.high < c.low and b.close > a.close and c.close < b.close:
        return StructureDirection.BEARISH, a.high, c.low

    return None


def detect_fair_value_gaps(
    bars: Sequence[Bar],
    thresholds: ThresholdSet,
    resolution: Resolution,
    config: Optional[AnalyzerConfig] = None,
) -> List[FairValueGap]:
    """
    Detect Fair Value Gaps in a resolution's buffer.

    FVG formation on every consecutive triple (a, b, c):
    - Bullish FVG: a.low > c.high, interval [c.high, a.low]
    - Bearish FVG: a.high < c.low, interval [a.high, c.low]

    Args:
        bars: Buffered bars, oldest first
        thresholds: Resolution threshold set (min_gap_pct)
        resolution: Resolution being scanned
        config: Analyzer configuration (defaults when None)

    Returns:
        List[FairValueGap]: Unfilled gaps, largest first, at most
        config.max_structures. Empty when fewer than
        config.min_structure_bars bars are buffered.
    """
    cfg = config or AnalyzerConfig.defaults()
    if len(bars) < cfg.min_structure_bars:
        return []

    current_price = bars[-1].close
    gaps = []

    for i in range(2, len(bars)):
        formation = _gap_bounds(bars[i - 2], bars[i - 1], bars[i])
        if formation is None:
            continue

        direction, low, high = formation
        size = high - low
        midpoint = (low + high) / 2
        if size <= 0 or midpoint <= 0:
            continue

        strength = size / midpoint * 100
        if strength <= thresholds.min_gap_pct:
            continue

        fvg = FairValueGap(
            resolution=resolution,
            direction=direction,
            low=low,
            high=high,
            size=size,
            strength=strength,
            timestamp=bars[i].close_time,
        )

        if not fvg.is_valid(current_price):
            continue

        gaps.append(fvg)

    gaps.sort(key=lambda g: g.size, reverse=True)
    return gaps[:cfg.max_structures]
