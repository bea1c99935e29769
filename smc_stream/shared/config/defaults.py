"""
Default configuration for the streaming analyzer.

Buffer capacities, emission gate and risk-plan buffers. Per-resolution
detection thresholds live in smc_config.
"""
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Mapping

from smc_stream.shared.models.data import Resolution
from smc_stream.shared.config.smc_config import (
    ThresholdSet,
    default_thresholds,
    sensitive_thresholds,
    strict_thresholds,
)

# Five-bar order-block pivot window; no structure scan runs on fewer bars
WINDOW_BARS = 5


def _default_capacities() -> Dict[Resolution, int]:
    return {
        Resolution.MACRO: 20,
        Resolution.MESO: 24,
        Resolution.MICRO: 30,
    }


def _default_weights() -> Dict[Resolution, float]:
    return {
        Resolution.MACRO: 1.3,
        Resolution.MESO: 1.1,
        Resolution.MICRO: 1.0,
    }


@dataclass
class AnalyzerConfig:
    """Core analyzer configuration."""
    thresholds: Dict[Resolution, ThresholdSet] = field(default_factory=default_thresholds)
    capacities: Dict[Resolution, int] = field(default_factory=_default_capacities)
    resolution_weights: Dict[Resolution, float] = field(default_factory=_default_weights)

    # Buffer sizing
    lookahead_margin: int = 5
    min_trend_bars: int = 3
    min_structure_bars: int = 5

    # Structure detection
    mini_trend_pct: float = 0.5
    max_structures: int = 10

    # Entry search and scoring
    proximity_buffer_ratio: float = 0.1
    emission_gate: float = 60.0

    # Risk planning
    stop_buffer_pct: float = 0.3
    target_offset_pct: float = 0.3
    max_targets: int = 3
    r_multiples: tuple = (2.0, 3.0, 4.0)
    target_split: tuple = (50.0, 30.0, 20.0)

    @staticmethod
    def defaults() -> "AnalyzerConfig":
        """Return a fresh default configuration object."""
        return AnalyzerConfig()

    @staticmethod
    def sensitive() -> "AnalyzerConfig":
        """Looser thresholds and a lower emission gate for research."""
        return AnalyzerConfig(thresholds=sensitive_thresholds(), emission_gate=55.0)

    @staticmethod
    def strict() -> "AnalyzerConfig":
        """Tighter thresholds and a higher emission gate."""
        return AnalyzerConfig(thresholds=strict_thresholds(), emission_gate=70.0)

    def thresholds_for(self, resolution: Resolution) -> ThresholdSet:
        return self.thresholds[resolution]

    def validate(self) -> None:
        """Validate configuration values, raising ValueError on invalid entries."""
        for res in Resolution:
            if res not in self.thresholds:
                raise ValueError(f"Missing thresholds for resolution {res.value}")
            if res not in self.capacities:
                raise ValueError(f"Missing capacity for resolution {res.value}")
            if res not in self.resolution_weights:
                raise ValueError(f"Missing weight for resolution {res.value}")
            self.thresholds[res].validate()
            if self.capacities[res] < self.min_structure_bars:
                raise ValueError(
                    f"Capacity for {res.value} must be >= {self.min_structure_bars}, "
                    f"got {self.capacities[res]}"
                )
            if self.resolution_weights[res] <= 0:
                raise ValueError(f"Weight for {res.value} must be positive")

        if self.min_structure_bars < WINDOW_BARS:
            raise ValueError(
                f"min_structure_bars must be >= {WINDOW_BARS}, got {self.min_structure_bars}"
            )
        if self.lookahead_margin < 0:
            raise ValueError(f"lookahead_margin must be >= 0, got {self.lookahead_margin}")
        if not 0 <= self.emission_gate <= 100:
            raise ValueError(f"emission_gate must be between 0 and 100, got {self.emission_gate}")
        if self.proximity_buffer_ratio < 0:
            raise ValueError(f"proximity_buffer_ratio must be >= 0, got {self.proximity_buffer_ratio}")
        if not 0 <= self.stop_buffer_pct < 100:
            raise ValueError(f"stop_buffer_pct must be between 0 and 100, got {self.stop_buffer_pct}")
        if not 0 <= self.target_offset_pct < 100:
            raise ValueError(f"target_offset_pct must be between 0 and 100, got {self.target_offset_pct}")
        if self.max_targets < 1 or self.max_targets > len(self.target_split):
            raise ValueError(f"max_targets must be between 1 and {len(self.target_split)}")
        if len(self.r_multiples) != len(self.target_split):
            raise ValueError("r_multiples and target_split must have the same length")
        if sum(self.target_split) != 100:
            raise ValueError(f"target_split must sum to 100, got {sum(self.target_split)}")
        if self.max_structures < 1:
            raise ValueError(f"max_structures must be >= 1, got {self.max_structures}")

    def to_dict(self) -> Dict[str, Any]:
        """Return a dict representation suitable for serialization."""
        data = asdict(self)
        data["thresholds"] = {res.value: ts.to_dict() for res, ts in self.thresholds.items()}
        data["capacities"] = {res.value: cap for res, cap in self.capacities.items()}
        data["resolution_weights"] = {res.value: w for res, w in self.resolution_weights.items()}
        return data

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "AnalyzerConfig":
        """Create configuration from a partial dict, applying defaults for missing keys."""
        base = AnalyzerConfig.defaults()
        for key, value in data.items():
            if key == "thresholds":
                for res_name, overrides in value.items():
                    res = Resolution(res_name)
                    base.thresholds[res] = ThresholdSet.from_dict(overrides, base.thresholds[res])
            elif key in ("capacities", "resolution_weights"):
                target = getattr(base, key)
                for res_name, item in value.items():
                    target[Resolution(res_name)] = item
            elif key in {f.name for f in fields(AnalyzerConfig)}:
                setattr(base, key, tuple(value) if key in ("r_multiples", "target_split") else value)
        base.validate()
        return base


def get_preset(preset_name: str) -> AnalyzerConfig:
    """
    Get an analyzer configuration preset by name.

    Args:
        preset_name: One of 'defaults', 'sensitive', 'strict'

    Returns:
        AnalyzerConfig instance (unknown names fall back to defaults)
    """
    presets = {
        'defaults': AnalyzerConfig.defaults,
        'sensitive': AnalyzerConfig.sensitive,
        'strict': AnalyzerConfig.strict,
    }
    factory = presets.get(preset_name, AnalyzerConfig.defaults)
    return factory()

