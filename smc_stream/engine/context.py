"""
PassContext - data accumulated over one analysis pass.

A fresh context is created for every pass and handed through the
top-down stages; each stage reads what earlier stages produced and adds
its own output. Whatever the pass reached is kept on the result for
diagnostics.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from smc_stream.shared.models.data import Bar, Resolution
from smc_stream.shared.models.smc import Structure, Trend
from smc_stream.shared.models.scoring import ConfluenceBreakdown, NearbyStructure
from smc_stream.shared.models.planner import RiskPlan


@dataclass
class PassContext:
    """
    Context object for one top-down pass.

    Pass flow:
    1. Trend classification populates trends
    2. Structure detection populates structures (only once trends agree)
    3. Proximity search populates nearby
    4. Confluence scoring populates breakdown
    5. Risk planning populates plan
    6. Annotation populates annotations
    """
    trigger: Optional[Resolution] = None
    timestamp: Optional[datetime] = None

    trends: Dict[Resolution, Trend] = field(default_factory=dict)
    structures: Dict[Resolution, List[Structure]] = field(default_factory=dict)
    entry_bar: Optional[Bar] = None
    nearby: List[NearbyStructure] = field(default_factory=list)
    breakdown: Optional[ConfluenceBreakdown] = None
    plan: Optional[RiskPlan] = None
    annotations: List[str] = field(default_factory=list)

    @property
    def all_structures(self) -> List[Structure]:
        """Structures from every scanned resolution, in scan order."""
        return [s for found in self.structures.values() for s in found]

    @property
    def detection_ran(self) -> bool:
        return bool(self.structures)

    def diagnostics(self) -> Dict[str, object]:
        """Flat view for rejection logging."""
        data: Dict[str, object] = {
            f"{res.value}_trend": trend.value for res, trend in self.trends.items()
        }
        for res, found in self.structures.items():
            data[f"{res.value}_structures"] = len(found)
        if self.entry_bar is not None:
            data["price"] = self.entry_bar.close
        if self.nearby:
            data["nearby"] = len(self.nearby)
        if self.breakdown is not None:
            data["score"] = self.breakdown.total_score
        return data
