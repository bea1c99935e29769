"""
Risk Engine Module

Handles risk management calculations for a confirmed entry, including:
- Structure-aware stop loss placement behind the previous Micro bar
- Target identification from opposing structures
- R-multiple fallback ladder when no opposing structure lies beyond entry
- Weighted risk:reward
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from smc_stream.shared.models.data import Bar
from smc_stream.shared.models.smc import Structure, StructureDirection
from smc_stream.shared.models.planner import Direction, RiskPlan, Target
from smc_stream.shared.config.defaults import AnalyzerConfig
from smc_stream.shared.utils.error_policy import DegeneratePlanError


def _calculate_stop_loss(
    direction: Direction,
    current: Bar,
    previous: Bar,
    structures: Iterable[Structure],
    buffer_pct: float,
) -> float:
    """
    Stop behind the previous bar's extreme, tightened to the nearest
    protective structure when that sits closer to price.

    Long: protective structures are bullish ones whose low is below the
    current low; the highest such low replaces the previous low only if
    it is higher. Short mirrors with bearish highs above the current high.
    """
    if direction is Direction.LONG:
        stop_level = previous.low
        protective = [
            s.low for s in structures
            if s.direction is StructureDirection.BULLISH and s.low < current.low
        ]
        if protective:
            stop_level = max(stop_level, max(protective))
        return stop_level * (1 - buffer_pct / 100)

    stop_level = previous.high
    protective = [
        s.high for s in structures
        if s.direction is StructureDirection.BEARISH and s.high > current.high
    ]
    if protective:
        stop_level = min(stop_level, min(protective))
    return stop_level * (1 + buffer_pct / 100)


def _structure_target_prices(
    direction: Direction,
    entry: float,
    structures: Iterable[Structure],
    offset_pct: float,
    max_targets: int,
) -> List[float]:
    """
    Target prices just inside opposing structures beyond entry, nearest first.

    Long targets sit under bearish structures above entry, short targets
    above bullish structures below entry.
    """
    if direction is Direction.LONG:
        candidates = [
            s.low * (1 - offset_pct / 100) for s in structures
            if s.direction is StructureDirection.BEARISH and s.low > entry
        ]
        candidates = [p for p in candidates if p > entry]
    else:
        candidates = [
            s.high * (1 + offset_pct / 100) for s in structures
            if s.direction is StructureDirection.BULLISH and s.high < entry
        ]
        candidates = [p for p in candidates if p < entry]

    ordered = sorted(set(candidates), key=lambda p: abs(p - entry))
    return ordered[:max_targets]


def _r_multiple_targets(
    direction: Direction,
    entry: float,
    risk: float,
    r_multiples: Sequence[float],
    split: Sequence[float],
) -> List[Target]:
    sign = 1 if direction is Direction.LONG else -1
    targets = []
    for multiple, pct in zip(r_multiples, split):
        price = entry + sign * multiple * risk
        if price <= 0:
            raise DegeneratePlanError(f"{multiple}R target {price:.6f} is not a positive price")
        targets.append(Target(price=price, percentage=pct, rationale=f"{multiple:g}R"))
    return targets


def calculate_risk_reward(entry: float, stop_loss: float, targets: Sequence[Target]) -> float:
    """Distance from entry to the percentage-weighted target, in units of risk."""
    risk = abs(entry - stop_loss)
    if risk <= 0:
        raise DegeneratePlanError("Zero risk distance")
    weighted = sum(t.price * t.percentage / 100 for t in targets)
    return abs(weighted - entry) / risk


def build_risk_plan(
    direction: Direction,
    current: Bar,
    previous: Bar,
    structures: Sequence[Structure],
    config: Optional[AnalyzerConfig] = None,
) -> RiskPlan:
    """
    Build entry, stop and staged targets for a confirmed entry.

    Args:
        direction: LONG or SHORT
        current: Latest closed Micro bar (entry = its close)
        previous: Micro bar before it (stop anchor)
        structures: Structures surfaced on Macro and Meso this pass
        config: Analyzer configuration (defaults when None)

    Returns:
        RiskPlan with targets nearest first and percentages summing to 100

    Raises:
        DegeneratePlanError: Stop on the wrong side of entry or zero risk
    """
    cfg = config or AnalyzerConfig.defaults()
    entry = current.close

    stop_loss = _calculate_stop_loss(direction, current, previous, structures, cfg.stop_buffer_pct)

    if direction is Direction.LONG and stop_loss >= entry:
        raise DegeneratePlanError(f"LONG: stop ({stop_loss:.6f}) must be < entry ({entry:.6f})")
    if direction is Direction.SHORT and stop_loss <= entry:
        raise DegeneratePlanError(f"SHORT: stop ({stop_loss:.6f}) must be > entry ({entry:.6f})")

    risk = abs(entry - stop_loss)
    if risk <= 0:
        raise DegeneratePlanError("Zero risk distance")

    prices = _structure_target_prices(
        direction, entry, structures, cfg.target_offset_pct, cfg.max_targets
    )

    plan_type = "STRUCTURE"
    if prices:
        split = split_for(len(prices), cfg.target_split)
        targets = [
            Target(price=price, percentage=pct, rationale=f"Opposing structure T{i + 1}")
            for i, (price, pct) in enumerate(zip(prices, split))
        ]
    else:
        plan_type = "R_MULTIPLE"
        targets = _r_multiple_targets(direction, entry, risk, cfg.r_multiples, cfg.target_split)

    return RiskPlan(
        direction=direction,
        entry=entry,
        stop_loss=stop_loss,
        targets=targets,
        risk_reward=calculate_risk_reward(entry, stop_loss, targets),
        plan_type=plan_type,
    )


def split_for(count: int, target_split: Sequence[float]) -> Tuple[float, ...]:
    """
    Position split for `count` structure targets.

    Takes the first count-1 entries of the configured ladder and gives the
    rest of the position to the last target, so the split always sums to 100.
    With the default ladder: 100 / 50,50 / 50,30,20.
    """
    if not 1 <= count <= len(target_split):
        raise ValueError(f"Unsupported target count: {count} (ladder has {len(target_split)} steps)")
    head = tuple(float(pct) for pct in target_split[:count - 1])
    return head + (100.0 - sum(head),)
