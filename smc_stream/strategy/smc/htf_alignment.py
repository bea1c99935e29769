"""
Higher Timeframe (HTF) Alignment Module

Trend classification for a single resolution and the top-down agreement
check between resolutions.

A trend is confirmed from the three most recent bars:
- consecutive higher highs and higher lows (Up) or lower highs and lower
  lows (Down)
- each step moving at least min_price_change_pct
- current volume at least min_volume_multiplier times the recent mean
"""

from typing import Sequence

import numpy as np

from smc_stream.shared.models.data import Bar
from smc_stream.shared.models.smc import Trend
from smc_stream.shared.config.smc_config import ThresholdSet

TREND_BARS = 3
VOLUME_WINDOW = 5


def _pct_change(new: float, old: float) -> float:
    return (new - old) / old * 100


def volume_ratio(bars: Sequence[Bar], window: int = VOLUME_WINDOW) -> float:
    """
    Current bar volume relative to the mean of the last `window` bars
    (current bar included).

    Returns:
        The ratio, or 0.0 when the mean volume is zero
    """
    if not bars:
        return 0.0
    volumes = np.array([b.volume for b in bars[-window:]], dtype=float)
    mean_volume = float(volumes.mean())
    if mean_volume <= 0:
        return 0.0
    return bars[-1].volume / mean_volume


def classify_trend(bars: Sequence[Bar], thresholds: ThresholdSet) -> Trend:
    """
    Classify the trend of one resolution from its latest three bars.

    Args:
        bars: Buffered bars, oldest first
        thresholds: The resolution's threshold set

    Returns:
        Trend.UP, Trend.DOWN or Trend.NEUTRAL. Insufficient history,
        non-positive prices and zero mean volume all yield NEUTRAL.
    """
    if len(bars) < TREND_BARS:
        return Trend.NEUTRAL

    pre, prev, cur = bars[-3], bars[-2], bars[-1]
    if min(pre.high, pre.low, prev.high, prev.low) <= 0:
        return Trend.NEUTRAL

    ratio = volume_ratio(bars)
    if ratio <= 0:
        return Trend.NEUTRAL
    has_valid_volume = ratio >= thresholds.min_volume_multiplier

    hh_change_1 = _pct_change(cur.high, prev.high)
    hh_change_2 = _pct_change(prev.high, pre.high)
    ll_change_1 = (prev.low - cur.low) / prev.low * 100
    ll_change_2 = (pre.low - prev.low) / pre.low * 100

    min_change = thresholds.min_price_change_pct

    if (
        cur.high > prev.high > pre.high
        and cur.low > prev.low > pre.low
        and hh_change_1 >= min_change
        and hh_change_2 >= min_change
        and has_valid_volume
    ):
        return Trend.UP

    if (
        cur.high < prev.high < pre.high
        and cur.low < prev.low < pre.low
        and ll_change_1 >= min_change
        and ll_change_2 >= min_change
        and has_valid_volume
    ):
        return Trend.DOWN

    return Trend.NEUTRAL


def mini_trend(bars: Sequence[Bar], threshold_pct: float = 0.5) -> Trend:
    """
    Lightweight trend over a short run of bars: percent change of the
    first close to the last close.

    Args:
        bars: Short run of bars (three inside the order-block window)
        threshold_pct: Minimum absolute change to call a direction

    Returns:
        UP when change >= threshold, DOWN when <= -threshold, else NEUTRAL
    """
    if len(bars) < 2:
        return Trend.NEUTRAL
    first_close = bars[0].close
    if first_close <= 0:
        return Trend.NEUTRAL
    change = _pct_change(bars[-1].close, first_close)
    if change >= threshold_pct:
        return Trend.UP
    if change <= -threshold_pct:
        return Trend.DOWN
    return Trend.NEUTRAL


def trends_aligned(macro: Trend, meso: Trend) -> bool:
    """Macro and meso agree on a non-neutral direction."""
    return macro is not Trend.NEUTRAL and macro is meso
