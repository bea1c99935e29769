"""
smc-stream Orchestrator

The pipeline facade that wires together all components for one symbol:
1. Bar ingestion into per-resolution buffers
2. Top-down multi-timeframe pass
3. Signal delivery to registered sinks

Callers feed closed bars one at a time, in arrival order; the facade is
not safe under concurrent writers.
"""

from collections import Counter
from typing import Dict, Optional

from loguru import logger

from smc_stream.shared.config.defaults import AnalyzerConfig
from smc_stream.shared.models.data import Bar, Resolution
from smc_stream.shared.utils.logging_utils import (
    format_pass_summary,
    log_rejection,
    log_signal,
    time_operation,
)
from smc_stream.data.bar_store import BarStore
from smc_stream.engine.context import PassContext
from smc_stream.engine.coordinator import (
    MultiTimeframeCoordinator,
    PassOutcome,
    PassResult,
)
from smc_stream.notifications.signal_emitter import SignalEmitter


class SignalPipeline:
    """
    Streaming signal pipeline for one instrument.

    Usage:
        pipeline = SignalPipeline(AnalyzerConfig.defaults(), symbol="BTCUSDT")
        pipeline.emitter.subscribe(my_sink)

        for resolution, bar in closed_bars:
            result = pipeline.submit_bar(resolution, bar)
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        symbol: str = "BTCUSDT",
        emitter: Optional[SignalEmitter] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Analyzer configuration (defaults when None)
            symbol: Instrument label used in logs
            emitter: Signal emitter (creates one if None)
        """
        self.config = config or AnalyzerConfig.defaults()
        self.config.validate()
        self.symbol = symbol

        self.store = BarStore(self.config.capacities, self.config.lookahead_margin)
        self.coordinator = MultiTimeframeCoordinator(self.config)
        self.emitter = emitter or SignalEmitter()

        self.bars_received = 0
        self.outcome_counts: Counter = Counter()

        capacities = {res.value: cap for res, cap in self.config.capacities.items()}
        logger.info(
            f"🚀 SignalPipeline initialized: {symbol} | gate={self.config.emission_gate:.1f} | "
            f"capacities={capacities}"
        )

    def required_bar_count(self, resolution: Resolution) -> int:
        """Bars a backfill should request for a resolution: capacity plus lookahead margin."""
        return self.store.required_count(resolution)

    def submit_bar(self, resolution: Resolution, bar: Bar) -> PassResult:
        """
        Ingest one bar and run a pass.

        Open bars are ignored without touching the buffers.

        Args:
            resolution: Resolution the bar belongs to
            bar: The bar

        Returns:
            PassResult for the pass this bar triggered

        Raises:
            BarRejectedError: If the bar is tagged with another resolution
        """
        self.bars_received += 1

        if not bar.closed:
            self.outcome_counts[PassOutcome.BAR_IGNORED.value] += 1
            return PassResult(
                outcome=PassOutcome.BAR_IGNORED,
                state=self.coordinator.state,
                context=PassContext(trigger=resolution),
                reason="Bar not closed",
            )

        self.store.append(resolution, bar)

        with time_operation("analysis_pass", self.symbol):
            result = self.coordinator.run_pass(self.store, trigger=resolution)

        self.outcome_counts[result.outcome.value] += 1

        if result.signal is not None:
            signal = result.signal
            log_signal(
                self.symbol,
                signal.direction.value,
                signal.score,
                signal.entry,
                signal.stop_loss,
                signal.risk_reward,
            )
            self.emitter.emit(signal)
        else:
            log_rejection(
                self.symbol,
                result.outcome.value,
                result.reason,
                diagnostics=result.context.diagnostics(),
            )

        return result

    def reset(self) -> None:
        """Drop all buffered bars and counters."""
        self.store.clear()
        self.coordinator.reset()
        self.bars_received = 0
        self.outcome_counts.clear()

    def get_pipeline_status(self) -> Dict[str, object]:
        return {
            "symbol": self.symbol,
            "state": self.coordinator.state.value,
            "bars_received": self.bars_received,
            "buffered": {res.value: self.store.size(res) for res in Resolution},
            "outcomes": dict(self.outcome_counts),
            "signals_in_history": len(self.emitter.recent(self.emitter.max_history)),
        }

    def summary(self) -> str:
        """Formatted pass summary for the session so far."""
        return format_pass_summary(self.symbol, self.bars_received, self.outcome_counts)
