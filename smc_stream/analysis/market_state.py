"""
Market State Annotations

Human-readable notes attached to emitted signals, computed on the
entry-timing (Micro) buffer:
- Volume regime: current volume against the buffer mean
- Candle-body dominance: body share of the latest bar's range
- Round-number proximity: distance to the nearest psychological level
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from smc_stream.shared.models.data import Bar

HIGH_VOLUME_RATIO = 1.5
LOW_VOLUME_RATIO = 0.5
STRONG_BODY_RATIO = 0.6
WICK_BODY_RATIO = 0.3
ROUND_NUMBER_PCT = 0.2


@dataclass
class MarketState:
    """Raw measurements behind the annotations."""

    volume_ratio: Optional[float]
    body_ratio: Optional[float]
    round_level: Optional[float]
    round_distance_pct: Optional[float]


def round_number_step(price: float) -> float:
    """Spacing of round levels: two significant digits below the price's magnitude."""
    digits = math.floor(math.log10(price)) + 1
    return 10.0 ** (digits - 2)


def nearest_round_level(price: float) -> float:
    step = round_number_step(price)
    return round(price / step) * step


def measure_market_state(bars: Sequence[Bar]) -> MarketState:
    """Measure volume, body and round-number state of the latest bar."""
    if not bars:
        return MarketState(None, None, None, None)

    current = bars[-1]

    volumes = np.array([b.volume for b in bars], dtype=float)
    mean_volume = float(volumes.mean())
    volume_ratio = current.volume / mean_volume if mean_volume > 0 else None

    body_ratio = current.body_ratio if current.range > 0 else None

    round_level = None
    round_distance = None
    if current.close > 0:
        round_level = nearest_round_level(current.close)
        round_distance = abs(current.close - round_level) / current.close * 100

    return MarketState(
        volume_ratio=volume_ratio,
        body_ratio=body_ratio,
        round_level=round_level,
        round_distance_pct=round_distance,
    )


def describe_market_state(bars: Sequence[Bar]) -> List[str]:
    """
    Annotate the latest bar of a buffer.

    Args:
        bars: Micro buffer, oldest first

    Returns:
        List of annotation strings (empty for an empty buffer)
    """
    state = measure_market_state(bars)
    notes = []

    if state.volume_ratio is not None:
        if state.volume_ratio >= HIGH_VOLUME_RATIO:
            notes.append(f"High volume regime ({state.volume_ratio:.2f}x average)")
        elif state.volume_ratio <= LOW_VOLUME_RATIO:
            notes.append(f"Low volume regime ({state.volume_ratio:.2f}x average)")
        else:
            notes.append(f"Normal volume regime ({state.volume_ratio:.2f}x average)")

    if state.body_ratio is not None:
        current = bars[-1]
        if state.body_ratio >= STRONG_BODY_RATIO:
            side = "bullish" if current.is_bullish else "bearish"
            notes.append(f"Strong {side} body ({state.body_ratio:.0%} of range)")
        elif state.body_ratio <= WICK_BODY_RATIO:
            notes.append(f"Wick-dominated candle (body {state.body_ratio:.0%} of range)")

    if state.round_distance_pct is not None and state.round_distance_pct <= ROUND_NUMBER_PCT:
        notes.append(f"Near round number {state.round_level:g} ({state.round_distance_pct:.2f}% away)")

    return notes
