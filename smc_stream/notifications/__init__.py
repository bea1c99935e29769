"""Signal delivery."""

from smc_stream.notifications.signal_emitter import CallbackSink, SignalEmitter

__all__ = [
    "CallbackSink",
    "SignalEmitter",
]
