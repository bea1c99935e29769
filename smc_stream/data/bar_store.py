"""
Bar Store

Fixed-capacity, per-resolution buffers of closed bars. Each resolution
owns a ring buffer (preallocated slots plus head index); appending to a
full buffer evicts the oldest bar first.

Not safe under concurrent writers: callers serialize appends.
"""

from typing import Dict, List, Optional, Sequence

import pandas as pd

from smc_stream.shared.models.data import Bar, Resolution
from smc_stream.shared.utils.error_policy import BarRejectedError


class RingBuffer:
    """Fixed-size FIFO of bars backed by a preallocated list."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._slots: List[Optional[Bar]] = [None] * capacity
        self._head = 0  # index of the oldest bar
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def push(self, bar: Bar) -> Optional[Bar]:
        """
        Append a bar at the tail.

        Returns:
            The evicted bar when the buffer was full, else None
        """
        evicted = None
        if self._size == self.capacity:
            evicted = self._slots[self._head]
            self._slots[self._head] = bar
            self._head = (self._head + 1) % self.capacity
        else:
            tail = (self._head + self._size) % self.capacity
            self._slots[tail] = bar
            self._size += 1
        return evicted

    def items(self) -> List[Bar]:
        """Return buffered bars, oldest first."""
        return [self._slots[(self._head + i) % self.capacity] for i in range(self._size)]

    def last(self) -> Optional[Bar]:
        if self._size == 0:
            return None
        return self._slots[(self._head + self._size - 1) % self.capacity]

    def clear(self) -> None:
        self._slots = [None] * self.capacity
        self._head = 0
        self._size = 0


class BarStore:
    """
    Per-resolution buffers of closed bars.

    Args:
        capacities: Buffer capacity per resolution
        lookahead_margin: Extra bars requested on backfill beyond capacity
    """

    def __init__(self, capacities: Dict[Resolution, int], lookahead_margin: int = 5):
        missing = [res.value for res in Resolution if res not in capacities]
        if missing:
            raise ValueError(f"Missing capacities for: {missing}")
        self.lookahead_margin = lookahead_margin
        self._buffers: Dict[Resolution, RingBuffer] = {
            res: RingBuffer(capacities[res]) for res in Resolution
        }

    def append(self, resolution: Resolution, bar: Bar) -> Optional[Bar]:
        """
        Insert a closed bar at the tail of the resolution's buffer.

        Returns:
            The evicted bar, if capacity was exceeded

        Raises:
            BarRejectedError: If the bar is not closed or tagged with another resolution
        """
        if not bar.closed:
            raise BarRejectedError(f"Refusing open {resolution.value} bar at {bar.open_time}")
        if bar.resolution is not resolution:
            raise BarRejectedError(
                f"Bar tagged {bar.resolution.value} submitted to {resolution.value} buffer"
            )
        return self._buffers[resolution].push(bar)

    def snapshot(self, resolution: Resolution) -> List[Bar]:
        """Current buffer contents, oldest first."""
        return self._buffers[resolution].items()

    def latest(self, resolution: Resolution) -> Optional[Bar]:
        return self._buffers[resolution].last()

    def size(self, resolution: Resolution) -> int:
        return len(self._buffers[resolution])

    def capacity(self, resolution: Resolution) -> int:
        return self._buffers[resolution].capacity

    def has_min_bars(self, minimum: int, resolutions: Sequence[Resolution] = tuple(Resolution)) -> bool:
        """Check every listed resolution holds at least `minimum` bars."""
        return all(self.size(res) >= minimum for res in resolutions)

    def required_count(self, resolution: Resolution) -> int:
        """Bars a backfill should request: capacity plus lookahead margin."""
        return self.capacity(resolution) + self.lookahead_margin

    def clear(self) -> None:
        for buffer in self._buffers.values():
            buffer.clear()

    def to_frame(self, resolution: Resolution) -> pd.DataFrame:
        """
        Buffer contents as an OHLCV DataFrame indexed by close time.

        Columns: open, high, low, close, volume, trade_count, open_time
        """
        bars = self.snapshot(resolution)
        columns = ['open', 'high', 'low', 'close', 'volume', 'trade_count', 'open_time']
        if not bars:
            return pd.DataFrame(columns=columns, index=pd.DatetimeIndex([], name='close_time'))
        df = pd.DataFrame(
            {
                'open': [b.open for b in bars],
                'high': [b.high for b in bars],
                'low': [b.low for b in bars],
                'close': [b.close for b in bars],
                'volume': [b.volume for b in bars],
                'trade_count': [b.trade_count for b in bars],
                'open_time': [b.open_time for b in bars],
            },
            index=pd.DatetimeIndex([b.close_time for b in bars], name='close_time'),
        )
        return df
