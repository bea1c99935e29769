"""
End-to-end pipeline scenarios.

Feeds complete Macro, Meso and Micro histories through SignalPipeline and
checks what comes out the other end.
"""

from dataclasses import replace

import pytest

from smc_stream.data.ingestion_pipeline import replay
from smc_stream.engine import coordinator as coordinator_module
from smc_stream.engine.coordinator import CoordinatorState, PassOutcome
from smc_stream.engine.orchestrator import SignalPipeline
from smc_stream.shared.models.data import Resolution
from smc_stream.shared.models.planner import Direction
from smc_stream.shared.models.smc import OrderBlock, StructureDirection, Trend
from smc_stream.tests.fixtures.market_data import (
    bars_to_frame,
    flat_rows,
    macro_uptrend_rows,
    make_bars,
    meso_uptrend_rows,
    micro_entry_rows,
    mirror_rows,
)


def _feed(pipeline, macro_rows, meso_rows, micro_rows):
    results = []
    for resolution, rows in (
        (Resolution.MACRO, macro_rows),
        (Resolution.MESO, meso_rows),
        (Resolution.MICRO, micro_rows),
    ):
        for bar in make_bars(resolution, rows):
            results.append(pipeline.submit_bar(resolution, bar))
    return results


@pytest.fixture
def pipeline():
    return SignalPipeline(symbol="TESTUSDT")


def test_long_signal_emitted_inside_bullish_order_block(pipeline):
    received = []
    pipeline.emitter.subscribe(received.append)

    results = _feed(pipeline, macro_uptrend_rows(), meso_uptrend_rows(), micro_entry_rows())

    final = results[-1]
    assert final.outcome is PassOutcome.EMITTED
    assert final.state is CoordinatorState.ENTRY_SEARCH
    assert received == [final.signal]

    signal = final.signal
    assert signal.direction is Direction.LONG
    assert signal.score > 60
    assert signal.macro_trend is Trend.UP and signal.meso_trend is Trend.UP
    assert signal.entry == 97.8
    assert signal.stop_loss == pytest.approx(97.3 * 0.997)
    assert signal.stop_loss < signal.entry
    assert 2 <= len(signal.targets) <= 3
    assert all(t.price > signal.entry for t in signal.targets)
    assert sum(t.percentage for t in signal.targets) == 100
    assert signal.risk_reward > 0

    # the Macro and Meso order blocks both back the entry
    assert len(signal.structures) >= 2
    assert all(isinstance(s, OrderBlock) for s in signal.structures)
    assert {s.resolution for s in signal.structures} == {Resolution.MACRO, Resolution.MESO}
    assert final.context.breakdown.avg_distance_pct < 1.0

    payload = signal.to_payload()
    assert payload.direction == "LONG"
    assert len(payload.targets) == len(signal.targets)


def test_pullback_bar_before_entry_is_degenerate(pipeline):
    """The pullback bar closes inside the block but its stop anchor sits above price."""
    results = _feed(pipeline, macro_uptrend_rows(), meso_uptrend_rows(), micro_entry_rows())

    assert results[-2].outcome is PassOutcome.DEGENERATE_PLAN
    assert results[-2].state is CoordinatorState.IDLE
    assert results[-2].signal is None


def test_pass_outcomes_before_entry(pipeline):
    results = _feed(pipeline, macro_uptrend_rows(), meso_uptrend_rows(), micro_entry_rows())

    macro_meso = results[:44]
    assert {r.outcome for r in macro_meso} == {PassOutcome.INSUFFICIENT_HISTORY}

    micro_fillers = results[44:52]
    assert [r.outcome for r in micro_fillers[:2]] == [PassOutcome.INSUFFICIENT_HISTORY] * 2
    assert {r.outcome for r in micro_fillers[2:]} == {PassOutcome.NO_NEARBY_STRUCTURE}

    counts = pipeline.outcome_counts
    assert counts["emitted"] == 1
    assert counts["degenerate_plan"] == 1
    assert sum(counts.values()) == pipeline.bars_received == 54
    assert "Signals Emitted:  1" in pipeline.summary()


def test_short_signal_on_mirrored_market(pipeline):
    results = _feed(
        pipeline,
        mirror_rows(macro_uptrend_rows()),
        mirror_rows(meso_uptrend_rows()),
        mirror_rows(micro_entry_rows()),
    )

    final = results[-1]
    assert final.outcome is PassOutcome.EMITTED
    signal = final.signal
    assert signal.direction is Direction.SHORT
    assert signal.score > 60
    assert signal.stop_loss > signal.entry
    assert all(t.price < signal.entry for t in signal.targets)
    assert sum(t.percentage for t in signal.targets) == 100
    assert all(s.direction is StructureDirection.BEARISH for s in signal.structures)


def test_neutral_macro_skips_detection(pipeline, monkeypatch):
    calls = []

    def _spy(*args, **kwargs):
        calls.append(args)
        return []

    monkeypatch.setattr(coordinator_module, "detect_order_blocks", _spy)
    monkeypatch.setattr(coordinator_module, "detect_fair_value_gaps", _spy)

    received = []
    pipeline.emitter.subscribe(received.append)

    results = _feed(pipeline, flat_rows(20), meso_uptrend_rows(), micro_entry_rows())

    assert calls == []
    assert received == []
    assert all(r.signal is None for r in results)
    assert results[-1].outcome is PassOutcome.MACRO_NEUTRAL
    assert results[-1].state is CoordinatorState.IDLE
    assert pipeline.outcome_counts["macro_neutral"] > 0


def test_misaligned_meso_stops_before_detection(pipeline):
    results = _feed(
        pipeline,
        macro_uptrend_rows(),
        mirror_rows(meso_uptrend_rows()),
        micro_entry_rows(),
    )

    final = results[-1]
    assert final.outcome is PassOutcome.TREND_MISALIGNED
    assert not final.context.detection_ran


def test_open_bar_ignored_without_buffering(pipeline):
    bar = make_bars(Resolution.MICRO, micro_entry_rows()[:1])[0]
    result = pipeline.submit_bar(Resolution.MICRO, replace(bar, closed=False))

    assert result.outcome is PassOutcome.BAR_IGNORED
    assert pipeline.store.size(Resolution.MICRO) == 0


def test_required_bar_count(pipeline):
    assert pipeline.required_bar_count(Resolution.MACRO) == 25
    assert pipeline.required_bar_count(Resolution.MESO) == 29
    assert pipeline.required_bar_count(Resolution.MICRO) == 35


def test_replay_of_historical_frames(pipeline):
    frames = {
        Resolution.MACRO: bars_to_frame(make_bars(Resolution.MACRO, macro_uptrend_rows())),
        Resolution.MESO: bars_to_frame(make_bars(Resolution.MESO, meso_uptrend_rows())),
        # micro history starts after the higher resolutions have closed
        Resolution.MICRO: bars_to_frame(make_bars(Resolution.MICRO, micro_entry_rows(), start_index=1000)),
    }

    signals = replay(pipeline, frames)

    assert len(signals) == 1
    assert signals[0].direction is Direction.LONG
    assert pipeline.emitter.recent(1) == signals
