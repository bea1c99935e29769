"""
Historical warm-up pipeline.

Converts OHLCV frames (from a backfill request, a CSV export, a test
fixture) into closed bars and replays them through the signal pipeline in
close-time order so every resolution sees the same clock.
"""

from typing import TYPE_CHECKING, Dict, List, Mapping

import pandas as pd
from loguru import logger

from smc_stream.shared.models.data import Bar, Resolution, RESOLUTION_ORDER
from smc_stream.shared.models.planner import Signal

if TYPE_CHECKING:
    from smc_stream.engine.orchestrator import SignalPipeline


REQUIRED_COLUMNS = ('open_time', 'close_time', 'open', 'high', 'low', 'close', 'volume')


def _validate_frame(df: pd.DataFrame, resolution: Resolution) -> None:
    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValueError(f"{resolution.value} frame missing required columns: {missing_cols}")


def bars_from_frame(df: pd.DataFrame, resolution: Resolution) -> List[Bar]:
    """
    Convert an OHLCV DataFrame into closed bars, oldest first.

    Args:
        df: Frame with open_time, close_time, open, high, low, close, volume
            and optionally trade_count / closed columns
        resolution: Resolution tag for the produced bars

    Returns:
        List[Bar] sorted by close time

    Raises:
        ValueError: If required columns are missing or a row is malformed
    """
    _validate_frame(df, resolution)
    if df.empty:
        return []

    ordered = df.sort_values('close_time', kind='mergesort')
    open_times = pd.to_datetime(ordered['open_time'], utc=True)
    close_times = pd.to_datetime(ordered['close_time'], utc=True)
    trade_counts = ordered['trade_count'] if 'trade_count' in ordered.columns else pd.Series(0, index=ordered.index)
    closed_flags = ordered['closed'] if 'closed' in ordered.columns else pd.Series(True, index=ordered.index)

    bars = []
    for idx, row in enumerate(ordered.itertuples(index=False)):
        bars.append(Bar(
            resolution=resolution,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            trade_count=int(trade_counts.iloc[idx]),
            open_time=open_times.iloc[idx].to_pydatetime(),
            close_time=close_times.iloc[idx].to_pydatetime(),
            closed=bool(closed_flags.iloc[idx]),
        ))
    return bars


def merge_by_close_time(bars_by_resolution: Mapping[Resolution, List[Bar]]) -> List[Bar]:
    """
    Interleave bars of all resolutions in close-time order.

    Ties are broken macro → meso → micro so an entry-timing bar is always
    analysed against up-to-date higher resolutions.
    """
    rank = {res: i for i, res in enumerate(RESOLUTION_ORDER)}
    merged = [bar for bars in bars_by_resolution.values() for bar in bars]
    return sorted(merged, key=lambda b: (b.close_time, rank[b.resolution]))


def replay(
    pipeline: "SignalPipeline",
    frames: Mapping[Resolution, pd.DataFrame],
    trim_to_required: bool = True,
) -> List[Signal]:
    """
    Feed historical frames through the pipeline.

    Args:
        pipeline: Target pipeline
        frames: OHLCV frame per resolution
        trim_to_required: Keep only the newest required_bar_count bars per resolution

    Returns:
        Signals emitted while replaying
    """
    bars_by_resolution: Dict[Resolution, List[Bar]] = {}
    for resolution, df in frames.items():
        bars = bars_from_frame(df, resolution)
        if trim_to_required:
            bars = bars[-pipeline.required_bar_count(resolution):]
        bars_by_resolution[resolution] = bars
        logger.info(f"Loaded {resolution.value} history: {len(bars)} bars")

    signals = []
    for bar in merge_by_close_time(bars_by_resolution):
        result = pipeline.submit_bar(bar.resolution, bar)
        if result.signal is not None:
            signals.append(result.signal)

    logger.info(f"Replay complete: {len(signals)} signal(s) emitted")
    return signals
