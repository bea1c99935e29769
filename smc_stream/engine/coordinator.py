"""
Multi-Timeframe Coordinator

Top-down confirmation sequence run once per closed bar:
1. Buffer sufficiency gate
2. Macro trend classification
3. Meso trend confirmation
4. Structure detection on Macro and Meso (only once trends agree)
5. Proximity search on the latest Micro bar
6. Confluence scoring against the emission gate
7. Risk planning
8. Market-state annotation and signal assembly

The coordinator reads the bar store but never mutates it and never logs;
every pass ends in an explicit PassOutcome for the caller to act on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from smc_stream.shared.models.data import Resolution
from smc_stream.shared.models.smc import Trend, direction_for_trend
from smc_stream.shared.models.planner import Direction, Signal
from smc_stream.shared.config.defaults import AnalyzerConfig
from smc_stream.shared.utils.error_policy import DegeneratePlanError, enforce_complete_signal
from smc_stream.data.bar_store import BarStore
from smc_stream.strategy.smc.htf_alignment import classify_trend, trends_aligned
from smc_stream.strategy.smc.order_blocks import detect_order_blocks
from smc_stream.strategy.smc.fvg import detect_fair_value_gaps
from smc_stream.strategy.planner.entry_engine import find_nearby_structures
from smc_stream.strategy.confluence.scorer import calculate_confluence_score
from smc_stream.strategy.planner.risk_engine import build_risk_plan
from smc_stream.analysis.market_state import describe_market_state
from smc_stream.engine.context import PassContext

STRUCTURE_RESOLUTIONS = (Resolution.MACRO, Resolution.MESO)


class CoordinatorState(str, Enum):
    """How far the top-down sequence got on the latest pass."""
    IDLE = "idle"
    MACRO_READY = "macro_ready"
    ALIGNED = "aligned"
    ENTRY_SEARCH = "entry_search"


class PassOutcome(str, Enum):
    """Why a pass ended."""
    BAR_IGNORED = "bar_ignored"
    INSUFFICIENT_HISTORY = "insufficient_history"
    MACRO_NEUTRAL = "macro_neutral"
    TREND_MISALIGNED = "trend_misaligned"
    NO_NEARBY_STRUCTURE = "no_nearby_structure"
    BELOW_SCORE_GATE = "below_score_gate"
    DEGENERATE_PLAN = "degenerate_plan"
    EMITTED = "emitted"


@dataclass
class PassResult:
    """
    Result of one pass.

    Attributes:
        outcome: Why the pass ended
        state: Coordinator state after the pass
        context: Everything the pass computed before it ended
        signal: Emitted signal (only when outcome is EMITTED)
        reason: Human-readable detail for skipped passes
    """
    outcome: PassOutcome
    state: CoordinatorState
    context: PassContext
    signal: Optional[Signal] = None
    reason: str = ""

    @property
    def emitted(self) -> bool:
        return self.outcome is PassOutcome.EMITTED


class MultiTimeframeCoordinator:
    """
    Runs the top-down confirmation sequence over a bar store.

    Usage:
        coordinator = MultiTimeframeCoordinator(config)
        result = coordinator.run_pass(store)
        if result.signal:
            ...
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig.defaults()
        self.config.validate()
        self.state = CoordinatorState.IDLE

    def reset(self) -> None:
        self.state = CoordinatorState.IDLE

    def _stop(self, outcome: PassOutcome, context: PassContext, reason: str) -> PassResult:
        self.state = CoordinatorState.IDLE
        return PassResult(outcome=outcome, state=self.state, context=context, reason=reason)

    def run_pass(self, store: BarStore, trigger: Optional[Resolution] = None) -> PassResult:
        """
        Run one top-down pass against the current buffers.

        Args:
            store: Bar store holding all three resolutions
            trigger: Resolution whose bar started this pass

        Returns:
            PassResult describing how far the pass got
        """
        cfg = self.config
        context = PassContext(trigger=trigger)

        # Stage 1: Every resolution needs enough history for trend classification
        if not store.has_min_bars(cfg.min_trend_bars):
            sizes = {res.value: store.size(res) for res in Resolution}
            return self._stop(
                PassOutcome.INSUFFICIENT_HISTORY,
                context,
                f"Need {cfg.min_trend_bars} bars per resolution, have {sizes}",
            )

        # Stage 2: Macro trend
        macro_trend = classify_trend(
            store.snapshot(Resolution.MACRO), cfg.thresholds_for(Resolution.MACRO)
        )
        context.trends[Resolution.MACRO] = macro_trend
        if macro_trend is Trend.NEUTRAL:
            return self._stop(PassOutcome.MACRO_NEUTRAL, context, "Macro trend is neutral")
        self.state = CoordinatorState.MACRO_READY

        # Stage 3: Meso must agree
        meso_trend = classify_trend(
            store.snapshot(Resolution.MESO), cfg.thresholds_for(Resolution.MESO)
        )
        context.trends[Resolution.MESO] = meso_trend
        if not trends_aligned(macro_trend, meso_trend):
            return self._stop(
                PassOutcome.TREND_MISALIGNED,
                context,
                f"Meso {meso_trend.value} disagrees with macro {macro_trend.value}",
            )
        self.state = CoordinatorState.ALIGNED

        # Stage 4: Structures on the higher resolutions
        for res in STRUCTURE_RESOLUTIONS:
            bars = store.snapshot(res)
            thresholds = cfg.thresholds_for(res)
            context.structures[res] = [
                *detect_order_blocks(bars, thresholds, res, cfg),
                *detect_fair_value_gaps(bars, thresholds, res, cfg),
            ]

        # Stage 5: Proximity search on the latest Micro bar
        self.state = CoordinatorState.ENTRY_SEARCH
        micro_bars = store.snapshot(Resolution.MICRO)
        current, previous = micro_bars[-1], micro_bars[-2]
        context.entry_bar = current
        context.timestamp = current.close_time

        structure_direction = direction_for_trend(macro_trend)
        context.nearby = find_nearby_structures(
            current.close,
            context.all_structures,
            structure_direction,
            cfg.proximity_buffer_ratio,
        )
        if not context.nearby:
            return self._stop(
                PassOutcome.NO_NEARBY_STRUCTURE,
                context,
                f"No {structure_direction.value} structure near {current.close}",
            )

        # Stage 6: Confluence gate
        breakdown = calculate_confluence_score(context.nearby, cfg.emission_gate)
        context.breakdown = breakdown
        if not breakdown.passed:
            return self._stop(
                PassOutcome.BELOW_SCORE_GATE,
                context,
                f"Score {breakdown.total_score:.2f} not above gate {breakdown.gate:.2f}",
            )

        # Stage 7: Risk plan
        direction = Direction.from_trend(macro_trend)
        try:
            context.plan = build_risk_plan(
                direction, current, previous, context.all_structures, cfg
            )
        except DegeneratePlanError as e:
            return self._stop(PassOutcome.DEGENERATE_PLAN, context, str(e))

        # Stage 8: Annotate and assemble
        context.annotations = describe_market_state(micro_bars)
        signal = Signal(
            timestamp=current.close_time,
            direction=direction,
            score=breakdown.total_score,
            plan=context.plan,
            annotations=list(context.annotations),
            macro_trend=macro_trend,
            meso_trend=meso_trend,
            structures=[n.structure for n in context.nearby],
        )
        enforce_complete_signal(signal)

        return PassResult(
            outcome=PassOutcome.EMITTED,
            state=self.state,
            context=context,
            signal=signal,
            reason=breakdown.get_rationale_summary(),
        )
