"""
Confluence scoring models.

This module defines the structures produced while scoring a potential
entry: the set of structures sitting near the current price and the
aggregated confluence breakdown.
"""

from dataclasses import dataclass, field
from typing import List

from smc_stream.shared.models.smc import FairValueGap, OrderBlock, Structure


@dataclass(frozen=True)
class NearbyStructure:
    """
    A structure found within the proximity buffer of the current price.

    Attributes:
        structure: The order block or fair value gap
        distance_pct: Distance from current price, percent of price
    """
    structure: Structure
    distance_pct: float

    @property
    def is_order_block(self) -> bool:
        return isinstance(self.structure, OrderBlock)

    @property
    def is_gap(self) -> bool:
        return isinstance(self.structure, FairValueGap)


@dataclass
class ConfluenceBreakdown:
    """
    Complete confluence scoring breakdown.

    Attributes:
        total_score: Final confluence score (0-100)
        structure_count: Number of nearby structures
        avg_distance_pct: Mean distance of nearby structures (percent of price)
        avg_gap_strength: Mean strength of nearby gaps (0 when none)
        avg_ob_strength: Mean strength of nearby order blocks (0 when none)
        gate: Score the total must exceed to proceed
        nearby: Structures that fed the score
    """
    total_score: float
    structure_count: int
    avg_distance_pct: float
    avg_gap_strength: float
    avg_ob_strength: float
    gate: float
    nearby: List[NearbyStructure] = field(default_factory=list)

    def __post_init__(self):
        """Validate confluence breakdown data."""
        if not 0 <= self.total_score <= 100:
            raise ValueError(f"Total score must be 0-100, got {self.total_score}")

    @property
    def passed(self) -> bool:
        """Check if the score clears the emission gate."""
        return self.total_score > self.gate

    def get_rationale_summary(self) -> str:
        """Generate a short human-readable summary of the score."""
        return (
            f"Score {self.total_score:.1f}/100 from {self.structure_count} structure(s), "
            f"avg distance {self.avg_distance_pct:.2f}%, "
            f"OB strength {self.avg_ob_strength:.1f}, gap strength {self.avg_gap_strength:.2f}"
        )
