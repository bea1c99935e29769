"""
Smart Money Concepts detection package.

Provides:
- Trend classification and top-down alignment
- Order block detection
- Fair value gap detection

All detectors follow consistent patterns:
- Accept a resolution's buffered bars, oldest first, and its ThresholdSet
- Return a fresh list every call; nothing is cached between passes
- Return an empty result for insufficient history instead of raising
"""

from smc_stream.strategy.smc.htf_alignment import classify_trend, mini_trend, trends_aligned
from smc_stream.strategy.smc.order_blocks import detect_order_blocks
from smc_stream.strategy.smc.fvg import detect_fair_value_gaps

__all__ = [
    "classify_trend",
    "mini_trend",
    "trends_aligned",
    "detect_order_blocks",
    "detect_fair_value_gaps",
]
