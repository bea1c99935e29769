"""
Trade planning models.

This module defines the risk plan (entry, stop, staged targets) and the
final signal handed to delivery sinks. Following the "No-Null Outputs"
principle, a RiskPlan can only be constructed in a consistent state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from smc_stream.shared.models.smc import Structure, Trend


class Direction(str, Enum):
    """Trade direction."""
    LONG = "LONG"
    SHORT = "SHORT"

    @classmethod
    def from_trend(cls, trend: Trend) -> "Direction":
        if trend is Trend.UP:
            return cls.LONG
        if trend is Trend.DOWN:
            return cls.SHORT
        raise ValueError("Neutral trend has no trade direction")


@dataclass(frozen=True)
class Target:
    """
    Take profit target.

    Attributes:
        price: Target price
        percentage: Percentage of position to close (0-100)
        rationale: Explanation of target placement
    """
    price: float
    percentage: float
    rationale: str

    def __post_init__(self):
        if self.price <= 0:
            raise ValueError(f"Target price must be positive, got {self.price}")
        if not 0 < self.percentage <= 100:
            raise ValueError(f"Target percentage must be in (0, 100], got {self.percentage}")


@dataclass(frozen=True)
class RiskPlan:
    """
    Entry, stop-loss and staged targets for one signal.

    Attributes:
        direction: LONG or SHORT
        entry: Entry price (current close)
        stop_loss: Buffered stop price
        targets: Ordered targets, nearest first; percentages sum to 100
        risk_reward: Weighted-average reward divided by risk
        plan_type: STRUCTURE when targets come from opposing structures,
                   R_MULTIPLE for the 2R/3R/4R fallback ladder
    """
    direction: Direction
    entry: float
    stop_loss: float
    targets: List[Target]
    risk_reward: float
    plan_type: Literal["STRUCTURE", "R_MULTIPLE"] = "STRUCTURE"

    def __post_init__(self):
        """Validate plan completeness."""
        if not self.targets:
            raise ValueError("Risk plan must have at least one target")

        total_pct = sum(t.percentage for t in self.targets)
        if total_pct != 100:
            raise ValueError(
                f"Target percentages must sum to 100, got {total_pct}. "
                f"Targets: {[(t.price, t.percentage) for t in self.targets]}"
            )

        if self.risk_reward < 0:
            raise ValueError(f"Risk:reward ratio must be positive, got {self.risk_reward}")

        if self.direction is Direction.LONG:
            if self.stop_loss >= self.entry:
                raise ValueError(f"LONG: Entry ({self.entry}) must be > stop ({self.stop_loss})")
            for target in self.targets:
                if target.price <= self.entry:
                    raise ValueError(f"LONG: Target ({target.price}) must be > entry ({self.entry})")
        else:
            if self.stop_loss <= self.entry:
                raise ValueError(f"SHORT: Entry ({self.entry}) must be < stop ({self.stop_loss})")
            for target in self.targets:
                if target.price >= self.entry:
                    raise ValueError(f"SHORT: Target ({target.price}) must be < entry ({self.entry})")

    @property
    def risk_amount(self) -> float:
        """Entry to stop distance (one R)."""
        return abs(self.entry - self.stop_loss)

    @property
    def weighted_target(self) -> float:
        """Percentage-weighted average target price."""
        return sum(t.price * t.percentage / 100 for t in self.targets)

    def get_summary(self) -> str:
        """Generate a brief summary of the plan."""
        return (
            f"{self.direction.value} entry {self.entry:.2f} stop {self.stop_loss:.2f}\n"
            f"Targets: {', '.join(f'{t.price:.2f} ({t.percentage:.0f}%)' for t in self.targets)}\n"
            f"R:R: {self.risk_reward:.2f}:1"
        )


@dataclass
class Signal:
    """
    Directional trade signal emitted at the end of a successful pass.

    Attributes:
        timestamp: Close time of the micro bar that triggered the signal
        direction: LONG or SHORT
        score: Confluence score (0-100)
        plan: Entry/stop/targets
        annotations: Human-readable market-state notes
        macro_trend: Trend on the macro resolution
        meso_trend: Trend on the meso resolution
        structures: Nearby structures that justified the entry
    """
    timestamp: datetime
    direction: Direction
    score: float
    plan: RiskPlan
    annotations: List[str] = field(default_factory=list)
    macro_trend: Optional[Trend] = None
    meso_trend: Optional[Trend] = None
    structures: List[Structure] = field(default_factory=list)

    def __post_init__(self):
        if not 0 <= self.score <= 100:
            raise ValueError(f"Signal score must be 0-100, got {self.score}")
        if self.plan.direction is not self.direction:
            raise ValueError("Signal direction does not match its risk plan")

    @property
    def entry(self) -> float:
        return self.plan.entry

    @property
    def stop_loss(self) -> float:
        return self.plan.stop_loss

    @property
    def targets(self) -> List[Target]:
        return self.plan.targets

    @property
    def risk_reward(self) -> float:
        return self.plan.risk_reward

    def to_payload(self):
        """Convert to the relay payload schema."""
        from smc_stream.contracts.signal_contract import SignalPayload
        return SignalPayload.from_signal(self)
