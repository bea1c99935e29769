"""SMC threshold configuration module.

Centralizes the tunable per-resolution thresholds used by the trend
classifier and the structure detectors so they can be externally
configured and versioned instead of living as magic numbers inside the
detectors.

The numbers below are empirical tuning for a liquid crypto pair on
4h / 1h / 5m bars. They are defaults, not protocol constants.
"""

from dataclasses import dataclass, asdict, fields, replace
from typing import Dict, Any, Mapping

from smc_stream.shared.models.data import Resolution


@dataclass
class ThresholdSet:
    # Trend gating
    min_price_change_pct: float = 0.8
    min_volume_multiplier: float = 1.5
    min_swing_points: int = 2

    # Order block gating
    min_volume_magnitude: float = 2.0
    max_lookback: int = 8
    min_rejection_pct: float = 0.8

    # Fair value gap gating
    min_gap_pct: float = 0.2

    def validate(self) -> None:
        """Validate threshold values, raising ValueError on invalid entries."""
        numeric_fields = [
            ("min_price_change_pct", self.min_price_change_pct, 0),
            ("min_volume_multiplier", self.min_volume_multiplier, 0),
            ("min_swing_points", self.min_swing_points, 2),
            ("min_volume_magnitude", self.min_volume_magnitude, 0),
            ("max_lookback", self.max_lookback, 1),
            ("min_rejection_pct", self.min_rejection_pct, 0),
            ("min_gap_pct", self.min_gap_pct, 0),
        ]
        for name, value, minimum in numeric_fields:
            if value < minimum:
                raise ValueError(f"{name} must be >= {minimum}, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Return a dict representation suitable for serialization."""
        return asdict(self)

    @staticmethod
    def from_dict(data: Mapping[str, Any], base: "ThresholdSet | None" = None) -> "ThresholdSet":
        """Create thresholds from a partial dict, keeping base values for missing keys."""
        result = replace(base) if base is not None else ThresholdSet()
        known = {f.name for f in fields(ThresholdSet)}
        for key, value in data.items():
            if key in known:
                setattr(result, key, value)
        result.validate()
        return result


# Macro wants larger moves and heavier volume, micro reacts to small ones
DEFAULT_THRESHOLDS: Dict[Resolution, ThresholdSet] = {
    Resolution.MACRO: ThresholdSet(
        min_price_change_pct=1.5,
        min_volume_multiplier=1.8,
        min_swing_points=3,
        min_volume_magnitude=2.5,
        max_lookback=5,
        min_rejection_pct=1.2,
        min_gap_pct=0.3,
    ),
    Resolution.MESO: ThresholdSet(
        min_price_change_pct=0.8,
        min_volume_multiplier=1.5,
        min_swing_points=2,
        min_volume_magnitude=2.0,
        max_lookback=8,
        min_rejection_pct=0.8,
        min_gap_pct=0.2,
    ),
    Resolution.MICRO: ThresholdSet(
        min_price_change_pct=0.3,
        min_volume_multiplier=1.3,
        min_swing_points=2,
        min_volume_magnitude=1.8,
        max_lookback=12,
        min_rejection_pct=0.5,
        min_gap_pct=0.1,
    ),
}


def default_thresholds() -> Dict[Resolution, ThresholdSet]:
    """Return a fresh copy of the default threshold table."""
    return {res: replace(ts) for res, ts in DEFAULT_THRESHOLDS.items()}


def sensitive_thresholds() -> Dict[Resolution, ThresholdSet]:
    """
    Looser thresholds for research on quiet markets.

    Halves the move and volume requirements so more trends and
    structures surface, at the cost of more noise.
    """
    return {
        res: replace(
            ts,
            min_price_change_pct=ts.min_price_change_pct / 2,
            min_volume_multiplier=max(1.0, ts.min_volume_multiplier - 0.5),
            min_volume_magnitude=max(1.0, ts.min_volume_magnitude - 0.7),
            min_rejection_pct=ts.min_rejection_pct / 2,
            min_gap_pct=ts.min_gap_pct / 2,
        )
        for res, ts in DEFAULT_THRESHOLDS.items()
    }


def strict_thresholds() -> Dict[Resolution, ThresholdSet]:
    """Tighter thresholds: only pronounced trends and heavy-volume blocks."""
    return {
        res: replace(
            ts,
            min_price_change_pct=ts.min_price_change_pct * 1.5,
            min_volume_multiplier=ts.min_volume_multiplier + 0.5,
            min_volume_magnitude=ts.min_volume_magnitude + 0.5,
            min_rejection_pct=ts.min_rejection_pct * 1.5,
            min_gap_pct=ts.min_gap_pct * 2,
        )
        for res, ts in DEFAULT_THRESHOLDS.items()
    }
