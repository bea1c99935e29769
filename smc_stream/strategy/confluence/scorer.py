"""
Confluence Scorer Module

Scores a potential entry from the structures sitting near price.

Score = 50
      + 5 per nearby structure
      - 2 per percent of average distance
      + half the average gap strength
      + half the average order-block strength

clamped to [0, 100]. The entry proceeds only when the score is strictly
above the emission gate.
"""

from typing import Sequence

import numpy as np

from smc_stream.shared.models.scoring import ConfluenceBreakdown, NearbyStructure

BASE_SCORE = 50.0
PER_STRUCTURE_BONUS = 5.0
DISTANCE_PENALTY = 2.0


def _mean(values: Sequence[float]) -> float:
    """Mean of values, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return float(np.mean(values))


def calculate_confluence_score(
    nearby: Sequence[NearbyStructure],
    gate: float = 60.0,
) -> ConfluenceBreakdown:
    """
    Calculate the confluence score for a set of nearby structures.

    Args:
        nearby: Structures found by the proximity search
        gate: Emission gate (score must be strictly greater)

    Returns:
        ConfluenceBreakdown with the clamped score and its inputs
    """
    avg_distance = _mean([n.distance_pct for n in nearby])
    avg_gap_strength = _mean([n.structure.strength for n in nearby if n.is_gap])
    avg_ob_strength = _mean([n.structure.strength for n in nearby if n.is_order_block])

    raw_score = (
        BASE_SCORE
        + PER_STRUCTURE_BONUS * len(nearby)
        - DISTANCE_PENALTY * avg_distance
        + avg_gap_strength / 2
        + avg_ob_strength / 2
    )
    total_score = float(np.clip(raw_score, 0.0, 100.0))

    return ConfluenceBreakdown(
        total_score=total_score,
        structure_count=len(nearby),
        avg_distance_pct=avg_distance,
        avg_gap_strength=avg_gap_strength,
        avg_ob_strength=avg_ob_strength,
        gate=gate,
        nearby=list(nearby),
    )
