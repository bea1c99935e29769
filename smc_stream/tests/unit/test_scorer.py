"""
Test suite for confluence scoring and the proximity search feeding it.
"""

import pytest

from smc_stream.shared.models.scoring import NearbyStructure
from smc_stream.shared.models.smc import StructureDirection
from smc_stream.strategy.confluence.scorer import calculate_confluence_score
from smc_stream.strategy.planner.entry_engine import find_nearby_structures
from smc_stream.tests.fixtures.signals import make_gap, make_order_block


def test_empty_set_scores_base_and_fails_gate():
    breakdown = calculate_confluence_score([], gate=60.0)

    assert breakdown.total_score == 50.0
    assert breakdown.structure_count == 0
    assert breakdown.avg_gap_strength == 0.0
    assert breakdown.avg_ob_strength == 0.0
    assert not breakdown.passed


def test_mixed_structures_weighted_sum():
    ob = make_order_block(97.0, 98.0, strength=60.0)
    gap = make_gap(99.0, 100.0)
    nearby = [
        NearbyStructure(structure=ob, distance_pct=1.0),
        NearbyStructure(structure=gap, distance_pct=0.5),
    ]

    breakdown = calculate_confluence_score(nearby, gate=60.0)

    expected = 50 + 5 * 2 - 2 * 0.75 + gap.strength / 2 + 60.0 / 2
    assert breakdown.total_score == pytest.approx(expected)
    assert breakdown.avg_distance_pct == pytest.approx(0.75)
    assert breakdown.passed


def test_score_clamped_to_100():
    nearby = [
        NearbyStructure(structure=make_order_block(97.0 + i, 98.0 + i, strength=100.0), distance_pct=0.0)
        for i in range(3)
    ]
    assert calculate_confluence_score(nearby).total_score == 100.0


def test_score_clamped_to_zero():
    nearby = [NearbyStructure(structure=make_gap(99.0, 99.1), distance_pct=40.0)]
    assert calculate_confluence_score(nearby).total_score == 0.0


def test_gate_is_strict():
    """A score exactly on the gate does not pass."""
    nearby = [NearbyStructure(structure=make_order_block(97.0, 98.0, strength=10.0), distance_pct=0.0)]

    breakdown = calculate_confluence_score(nearby, gate=60.0)

    assert breakdown.total_score == pytest.approx(60.0)
    assert not breakdown.passed


def test_rationale_summary_mentions_score():
    breakdown = calculate_confluence_score([], gate=60.0)
    assert "Score 50.0/100" in breakdown.get_rationale_summary()


def test_proximity_uses_ten_percent_buffer():
    ob = make_order_block(97.0, 98.0)

    assert len(find_nearby_structures(97.5, [ob], StructureDirection.BULLISH)) == 1
    assert len(find_nearby_structures(98.09, [ob], StructureDirection.BULLISH)) == 1
    assert len(find_nearby_structures(96.91, [ob], StructureDirection.BULLISH)) == 1
    assert find_nearby_structures(98.2, [ob], StructureDirection.BULLISH) == []
    assert find_nearby_structures(96.8, [ob], StructureDirection.BULLISH) == []


def test_proximity_filters_direction_and_measures_distance():
    bullish = make_order_block(97.0, 98.0)
    bearish = make_order_block(97.0, 98.0, direction=StructureDirection.BEARISH)

    inside = find_nearby_structures(97.5, [bullish, bearish], StructureDirection.BULLISH)
    assert [n.structure for n in inside] == [bullish]
    assert inside[0].distance_pct == 0.0

    above = find_nearby_structures(98.05, [bullish], StructureDirection.BULLISH)
    assert above[0].distance_pct == pytest.approx(0.05 / 98.05 * 100)


def test_proximity_sorted_closest_first():
    far = make_gap(97.0, 97.9)
    inside = make_order_block(97.5, 98.5)

    nearby = find_nearby_structures(97.95, [far, inside], StructureDirection.BULLISH)

    assert [n.structure for n in nearby] == [inside, far]
