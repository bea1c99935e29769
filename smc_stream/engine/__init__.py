"""Pass coordination and the pipeline facade."""

from smc_stream.engine.context import PassContext
from smc_stream.engine.coordinator import (
    CoordinatorState,
    MultiTimeframeCoordinator,
    PassOutcome,
    PassResult,
)
from smc_stream.engine.orchestrator import SignalPipeline

__all__ = [
    "PassContext",
    "CoordinatorState",
    "MultiTimeframeCoordinator",
    "PassOutcome",
    "PassResult",
    "SignalPipeline",
]
