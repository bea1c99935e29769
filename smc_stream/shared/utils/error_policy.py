"""
Error policy enforcement - Zero Silent Failures principle.

Nothing inside an analysis pass is fatal: anomalies end the pass with an
explicit outcome and leave buffered state untouched. The exceptions below
mark the few places where a caller handed the core something unusable,
or where a plan could not be completed.
"""

from typing import Optional

from smc_stream.shared.models.planner import RiskPlan, Signal


class SMCStreamError(Exception):
    """Base class for analyzer errors."""


class BarRejectedError(SMCStreamError):
    """Raised when a bar cannot enter the bar store (open bar, wrong resolution)."""


class DegeneratePlanError(SMCStreamError):
    """Raised when risk planning hits a degenerate numeric case (zero risk, inverted stop)."""


class IncompletePlanError(SMCStreamError):
    """Raised when a signal or plan has null/empty required fields."""


def enforce_complete_plan(plan: Optional[RiskPlan]) -> None:
    """
    Ensure a risk plan is actionable.

    Raises:
        IncompletePlanError: If any required field is missing or unusable
    """
    if plan is None:
        raise IncompletePlanError("RiskPlan is None")
    if not plan.targets:
        raise IncompletePlanError("targets list is empty")
    if plan.risk_amount <= 0:
        raise IncompletePlanError(f"Invalid risk amount: {plan.risk_amount}")
    total_pct = sum(t.percentage for t in plan.targets)
    if total_pct != 100:
        raise IncompletePlanError(f"Target percentages sum to {total_pct}, expected 100")


def enforce_complete_signal(signal: Optional[Signal]) -> None:
    """
    Ensure a signal is complete before it leaves the core.

    Raises:
        IncompletePlanError: If the signal or its plan is incomplete
    """
    if signal is None:
        raise IncompletePlanError("Signal is None")
    if signal.timestamp is None:
        raise IncompletePlanError("timestamp is None")
    enforce_complete_plan(signal.plan)
