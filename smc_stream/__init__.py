"""
smc-stream

Streaming multi-timeframe Smart Money Concepts signal engine: closed bars
in, confirmed Long/Short signals with entry, stop and staged targets out.
"""

from smc_stream.shared.config.defaults import AnalyzerConfig, get_preset
from smc_stream.shared.models.data import Bar, Resolution
from smc_stream.shared.models.planner import Direction, RiskPlan, Signal, Target
from smc_stream.contracts.signal_contract import SignalPayload, SignalSink
from smc_stream.engine.coordinator import PassOutcome, PassResult
from smc_stream.engine.orchestrator import SignalPipeline
from smc_stream.notifications.signal_emitter import SignalEmitter

__version__ = "0.1.0"

__all__ = [
    "AnalyzerConfig",
    "get_preset",
    "Bar",
    "Resolution",
    "Direction",
    "RiskPlan",
    "Signal",
    "Target",
    "SignalPayload",
    "SignalSink",
    "PassOutcome",
    "PassResult",
    "SignalPipeline",
    "SignalEmitter",
]
