"""Bar buffering and historical warm-up."""

from smc_stream.data.bar_store import BarStore, RingBuffer

__all__ = [
    "BarStore",
    "RingBuffer",
]
