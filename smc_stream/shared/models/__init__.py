"""Shared data models."""

from smc_stream.shared.models.data import Bar, Resolution, RESOLUTION_ORDER
from smc_stream.shared.models.smc import (
    FairValueGap,
    OrderBlock,
    Structure,
    StructureDirection,
    Trend,
)
from smc_stream.shared.models.scoring import ConfluenceBreakdown, NearbyStructure
from smc_stream.shared.models.planner import Direction, RiskPlan, Signal, Target

__all__ = [
    "Bar",
    "Resolution",
    "RESOLUTION_ORDER",
    "FairValueGap",
    "OrderBlock",
    "Structure",
    "StructureDirection",
    "Trend",
    "ConfluenceBreakdown",
    "NearbyStructure",
    "Direction",
    "RiskPlan",
    "Signal",
    "Target",
]
