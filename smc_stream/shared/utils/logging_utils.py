"""
Logging utilities for the streaming pipeline.

Provides consistent, structured logging helpers for pass outcomes,
emitted signals, timing and the pass summary. Analysis functions stay
silent; only the pipeline facade and delivery layer call into here.
"""

import time
from typing import Any, Dict, Mapping, Optional
from loguru import logger


def log_rejection(
    symbol: str,
    stage: str,
    reason: str,
    diagnostics: Optional[Dict[str, Any]] = None,
    level: str = "DEBUG"
) -> None:
    """
    Log a pass that ended without a signal, with diagnostic context.

    Args:
        symbol: Instrument label
        stage: Pass outcome / stage where the pass stopped
        reason: Human-readable reason
        diagnostics: Detailed diagnostic data
        level: Log level
    """
    log_func = getattr(logger, level.lower(), logger.debug)

    log_func(f"🚫 SKIPPED: {symbol} at {stage}")
    log_func(f"   └─ Reason: {reason}")

    if diagnostics:
        log_func(f"   └─ Diagnostics:")
        for key, value in diagnostics.items():
            if isinstance(value, float):
                log_func(f"      • {key}: {value:.4f}")
            else:
                log_func(f"      • {key}: {value}")


def log_signal(symbol: str, direction: str, score: float, entry: float, stop: float, rr: float) -> None:
    """Log an emitted signal."""
    logger.info(
        f"🎯 [{symbol}] {direction} signal • score {score:.2f}/100 • "
        f"entry {entry:.4f} • stop {stop:.4f} • R:R {rr:.2f}"
    )


def log_timing(
    operation_name: str,
    duration_ms: float,
    symbol: Optional[str] = None,
    level: str = "DEBUG"
) -> None:
    """
    Log timing information for performance monitoring.

    Args:
        operation_name: Name of the operation being timed
        duration_ms: Duration in milliseconds
        symbol: Optional symbol context
        level: Log level
    """
    log_func = getattr(logger, level.lower(), logger.debug)

    symbol_str = f" [{symbol}]" if symbol else ""

    if duration_ms < 10:
        emoji = "⚡"
    elif duration_ms < 100:
        emoji = "⏱️"
    else:
        emoji = "🐌"

    log_func(f"{emoji} {operation_name}{symbol_str}: {duration_ms:.1f}ms")


def format_pass_summary(
    symbol: str,
    bars_received: int,
    outcome_counts: Mapping[str, int],
) -> str:
    """
    Format a summary of analysis passes run so far.

    Args:
        symbol: Instrument label
        bars_received: Total bars submitted
        outcome_counts: Pass outcome -> count

    Returns:
        Formatted summary string
    """
    passes = sum(outcome_counts.values())
    emitted = outcome_counts.get("emitted", 0)
    emit_rate = (emitted / passes * 100) if passes > 0 else 0

    lines = [
        "=" * 60,
        f"📊 PASS SUMMARY [{symbol}]",
        "=" * 60,
        f"Bars Received:      {bars_received}",
        f"Passes:             {passes}",
        f"✅ Signals Emitted:  {emitted} ({emit_rate:.1f}%)",
    ]

    skipped = {k: v for k, v in outcome_counts.items() if k != "emitted" and v > 0}
    if skipped:
        lines.append("")
        lines.append("Outcome Breakdown:")
        for reason, count in sorted(skipped.items(), key=lambda x: x[1], reverse=True):
            lines.append(f"  • {reason}: {count}")

    lines.append("=" * 60)

    return "\n".join(lines)


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, operation_name: str, symbol: Optional[str] = None):
        self.operation_name = operation_name
        self.symbol = symbol
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        log_timing(self.operation_name, self.duration_ms, self.symbol)
        return False  # Don't suppress exceptions


def time_operation(operation_name: str, symbol: Optional[str] = None) -> TimingContext:
    """
    Context manager for timing operations.

    Usage:
        with time_operation("analysis_pass", "BTCUSDT"):
            ...
    """
    return TimingContext(operation_name, symbol)
