"""
Entry Engine Module

Proximity search for the entry-timing resolution: which surfaced
structures sit close enough to the latest Micro close to justify an entry
in the trend direction.
"""

from typing import Iterable, List

from smc_stream.shared.models.smc import Structure, StructureDirection
from smc_stream.shared.models.scoring import NearbyStructure


def is_near(price: float, structure: Structure, buffer_ratio: float = 0.1) -> bool:
    """Price inside the structure interval widened by buffer_ratio of its width on each side."""
    return structure.contains(price, buffer_ratio)


def find_nearby_structures(
    price: float,
    structures: Iterable[Structure],
    direction: StructureDirection,
    buffer_ratio: float = 0.1,
) -> List[NearbyStructure]:
    """
    Collect trend-direction structures near the current price.

    Args:
        price: Latest Micro close
        structures: Structures surfaced on Macro and Meso this pass
        direction: BULLISH for an up trend, BEARISH for a down trend
        buffer_ratio: Proximity buffer as a fraction of structure width

    Returns:
        Matches with their distance (percent of price), closest first
    """
    if price <= 0:
        return []

    nearby = [
        NearbyStructure(structure=s, distance_pct=s.distance_pct(price))
        for s in structures
        if s.direction is direction and is_near(price, s, buffer_ratio)
    ]
    nearby.sort(key=lambda n: n.distance_pct)
    return nearby
