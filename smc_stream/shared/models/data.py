"""
Data models for streamed OHLCV bars.

This module defines the core data structures for bar ingestion and
multi-timeframe analysis: the closed set of resolutions the engine
tracks and the immutable bar record that flows through the pipeline.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Resolution(str, Enum):
    """
    Time resolution of a bar series.

    - MACRO: long horizon, decides the primary trend (default 4h)
    - MESO: medium horizon, must confirm the macro trend (default 1h)
    - MICRO: short horizon, used to time entries (default 5m)
    """
    MACRO = "macro"
    MESO = "meso"
    MICRO = "micro"

    @property
    def default_interval(self) -> str:
        return DEFAULT_INTERVALS[self]


DEFAULT_INTERVALS = {
    Resolution.MACRO: "4h",
    Resolution.MESO: "1h",
    Resolution.MICRO: "5m",
}

# Top-down confirmation order
RESOLUTION_ORDER = (Resolution.MACRO, Resolution.MESO, Resolution.MICRO)


@dataclass(frozen=True)
class Bar:
    """
    Single resolution-tagged OHLCV bar.

    Attributes:
        resolution: Series this bar belongs to
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        volume: Traded volume
        trade_count: Number of trades in the period
        open_time: Bar open time
        close_time: Bar close time
        closed: True once the period has completed
    """
    resolution: Resolution
    open: float
    high: float
    low: float
    close: float
    volume: float
    open_time: datetime
    close_time: datetime
    trade_count: int = 0
    closed: bool = True

    def __post_init__(self):
        """Validate OHLCV relationships."""
        for name in ("open", "high", "low", "close", "volume"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name.capitalize()} must be finite, got {getattr(self, name)}")
        if self.high < self.low:
            raise ValueError(f"High ({self.high}) cannot be less than Low ({self.low})")
        if self.high < self.close or self.high < self.open:
            raise ValueError(f"High ({self.high}) must be >= Open ({self.open}) and Close ({self.close})")
        if self.low > self.close or self.low > self.open:
            raise ValueError(f"Low ({self.low}) must be <= Open ({self.open}) and Close ({self.close})")
        if self.volume < 0:
            raise ValueError(f"Volume must be non-negative, got {self.volume}")
        if self.close_time < self.open_time:
            raise ValueError(f"close_time ({self.close_time}) precedes open_time ({self.open_time})")

    @property
    def body(self) -> float:
        """Absolute open/close distance."""
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        """High/low distance."""
        return self.high - self.low

    @property
    def body_ratio(self) -> float:
        """Body as a fraction of the full range (0.0 for zero-range bars)."""
        if self.range <= 0:
            return 0.0
        return self.body / self.range

    @property
    def body_midpoint(self) -> float:
        return (self.open + self.close) / 2

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open
