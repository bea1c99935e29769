"""
Signal Emitter

Fans emitted signals out to registered sinks (observer list) and keeps a
bounded history of recent signals for polling consumers.
"""

import logging
from collections import deque
from typing import Callable, Deque, List, Union

from smc_stream.contracts.signal_contract import SignalSink
from smc_stream.shared.models.planner import Signal

logger = logging.getLogger(__name__)

SinkLike = Union[SignalSink, Callable[[Signal], None]]


class CallbackSink(SignalSink):
    """Adapts a plain callable to the sink interface."""

    def __init__(self, callback: Callable[[Signal], None]):
        self.callback = callback

    def on_signal(self, signal: Signal) -> None:
        self.callback(signal)


class SignalEmitter:
    """Delivers signals to sinks in registration order."""

    def __init__(self, max_history: int = 100):
        if max_history < 1:
            raise ValueError(f"max_history must be >= 1, got {max_history}")
        self.max_history = max_history
        self._sinks: List[SignalSink] = []
        self._history: Deque[Signal] = deque(maxlen=max_history)
        self.delivery_failures = 0

    @property
    def sinks(self) -> List[SignalSink]:
        return list(self._sinks)

    def subscribe(self, sink: SinkLike) -> SignalSink:
        """
        Register a sink (or a callable, wrapped in CallbackSink).

        Returns:
            The registered sink, for a later unsubscribe
        """
        if not isinstance(sink, SignalSink):
            if not callable(sink):
                raise TypeError(f"Sink must implement SignalSink or be callable, got {type(sink).__name__}")
            sink = CallbackSink(sink)
        self._sinks.append(sink)
        return sink

    def unsubscribe(self, sink: SignalSink) -> bool:
        """Remove a sink. Returns False if it was not registered."""
        try:
            self._sinks.remove(sink)
        except ValueError:
            return False
        return True

    def emit(self, signal: Signal) -> int:
        """
        Record the signal and deliver it to every sink.

        A failing sink is logged and skipped; later sinks still receive
        the signal.

        Returns:
            Number of sinks that accepted the signal
        """
        self._history.append(signal)
        delivered = 0
        for sink in list(self._sinks):
            try:
                sink.on_signal(signal)
                delivered += 1
            except Exception as e:
                self.delivery_failures += 1
                logger.error(
                    "Sink %s failed for %s signal at %s: %s",
                    type(sink).__name__, signal.direction.value, signal.timestamp, e,
                    exc_info=True,
                )
        return delivered

    def recent(self, limit: int = 10) -> List[Signal]:
        """Most recent signals, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._history))[:limit]

    def clear_history(self) -> None:
        self._history.clear()
