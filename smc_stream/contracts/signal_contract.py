"""
Signal delivery contracts.

Defines the sink interface delivery collaborators implement and the
payload schema a relay serializes. The core never formats or transmits
signals itself.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from smc_stream.shared.models.planner import Signal


class SignalSink(ABC):
    """Abstract interface for anything that receives emitted signals."""

    @abstractmethod
    def on_signal(self, signal: "Signal") -> None:
        """
        Receive one emitted signal.

        Args:
            signal: Complete, validated signal
        """


class TargetPayload(BaseModel):
    price: float = Field(gt=0)
    percentage: float = Field(gt=0, le=100)
    rationale: str = ""


class SignalPayload(BaseModel):
    """Relay-facing view of a signal."""
    timestamp: datetime
    direction: str
    score: float = Field(ge=0, le=100)
    entry: float = Field(gt=0)
    stop_loss: float = Field(gt=0)
    targets: List[TargetPayload]
    risk_reward: float = Field(ge=0)
    plan_type: str
    macro_trend: Optional[str] = None
    meso_trend: Optional[str] = None
    annotations: List[str] = []

    @classmethod
    def from_signal(cls, signal: "Signal") -> "SignalPayload":
        return cls(
            timestamp=signal.timestamp,
            direction=signal.direction.value,
            score=round(signal.score, 2),
            entry=signal.entry,
            stop_loss=signal.stop_loss,
            targets=[
                TargetPayload(price=t.price, percentage=t.percentage, rationale=t.rationale)
                for t in signal.targets
            ],
            risk_reward=round(signal.risk_reward, 2),
            plan_type=signal.plan.plan_type,
            macro_trend=signal.macro_trend.value if signal.macro_trend else None,
            meso_trend=signal.meso_trend.value if signal.meso_trend else None,
            annotations=list(signal.annotations),
        )
