"""
Smart-Money Concepts (SMC) detection models.

This module defines data structures for the market-structure patterns the
engine surfaces on every analysis pass:
- Order Blocks (OB): high-volume reversal zones
- Fair Value Gaps (FVG): price intervals skipped by a fast move

Both are recomputed from the buffered bars on every pass and are never
mutated afterwards; a pass either finds a structure valid or does not
surface it at all.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

from smc_stream.shared.models.data import Resolution


class Trend(str, Enum):
    """Trend label produced by the trend classifier."""
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


class StructureDirection(str, Enum):
    """Directional bias of a structure."""
    BULLISH = "bullish"
    BEARISH = "bearish"

    @property
    def opposite(self) -> "StructureDirection":
        if self is StructureDirection.BULLISH:
            return StructureDirection.BEARISH
        return StructureDirection.BULLISH


def direction_for_trend(trend: Trend) -> StructureDirection:
    """Map a non-neutral trend onto the structure direction it trades with."""
    if trend is Trend.UP:
        return StructureDirection.BULLISH
    if trend is Trend.DOWN:
        return StructureDirection.BEARISH
    raise ValueError("Neutral trend has no structure direction")


class _PriceZone:
    """Interval helpers shared by order blocks and gaps."""

    low: float
    high: float

    @property
    def width(self) -> float:
        return self.high - self.low

    @property
    def midpoint(self) -> float:
        return (self.high + self.low) / 2

    def contains(self, price: float, buffer_ratio: float = 0.0) -> bool:
        """Check if price sits inside the zone widened by buffer_ratio of its width."""
        pad = self.width * buffer_ratio
        return (self.low - pad) <= price <= (self.high + pad)

    def distance_pct(self, price: float) -> float:
        """
        Distance from price to the zone, as a percent of price.

        Returns 0.0 when price is inside the zone.
        """
        if price <= 0:
            raise ValueError(f"Price must be positive, got {price}")
        if self.low <= price <= self.high:
            return 0.0
        gap = min(abs(price - self.low), abs(price - self.high))
        return gap / price * 100


@dataclass(frozen=True)
class OrderBlock(_PriceZone):
    """
    Order Block - high-volume reversal zone.

    Attributes:
        resolution: Resolution the block was detected on
        direction: BULLISH (demand zone) or BEARISH (supply zone)
        low: Lower boundary
        high: Upper boundary
        volume: Volume of the formation bar
        strength: Strength score (0-100)
        timestamp: Close time of the formation bar
    """
    resolution: Resolution
    direction: StructureDirection
    low: float
    high: float
    volume: float
    strength: float
    timestamp: datetime

    def __post_init__(self):
        """Validate order block data."""
        if self.high <= self.low:
            raise ValueError(f"OB high ({self.high}) must be > low ({self.low})")
        if not 0 <= self.strength <= 100:
            raise ValueError(f"OB strength must be 0-100, got {self.strength}")

    def is_valid(self, price: float) -> bool:
        """
        An order block stays valid until price has moved fully through it:
        below the low for a bullish block, above the high for a bearish one.
        """
        if self.direction is StructureDirection.BULLISH:
            return price >= self.low
        return price <= self.high


@dataclass(frozen=True)
class FairValueGap(_PriceZone):
    """
    Fair Value Gap - price imbalance left by a fast move.

    Attributes:
        resolution: Resolution the gap was detected on
        direction: BULLISH or BEARISH
        low: Lower boundary of the gap
        high: Upper boundary of the gap
        size: Gap width in price
        strength: Gap size relative to the average boundary price, in percent
        timestamp: Close time of the third bar of the formation
    """
    resolution: Resolution
    direction: StructureDirection
    low: float
    high: float
    size: float
    strength: float
    timestamp: datetime

    def __post_init__(self):
        """Validate FVG data."""
        if self.high <= self.low:
            raise ValueError(f"FVG high ({self.high}) must be > low ({self.low})")
        if abs(self.size - (self.high - self.low)) > 1e-9:
            raise ValueError(f"FVG size mismatch: {self.size} vs calculated {self.high - self.low}")

    def is_valid(self, price: float) -> bool:
        """
        A bullish gap is filled once price reaches its upper bound,
        a bearish gap once price reaches its lower bound.
        """
        if self.direction is StructureDirection.BULLISH:
            return price < self.high
        return price > self.low


Structure = Union[OrderBlock, FairValueGap]
