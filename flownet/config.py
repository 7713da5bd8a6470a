"""Configuration classes for flownet components."""

from dataclasses import dataclass


@dataclass
class FlowEngineConfig:
    """Defaults shared by the max-flow engine and its helpers."""

    # Edge attribute holding capacities (also written on created reverse edges)
    capacity_attr: str = "capacity"

    # Residuals at or below this value count as saturated in summaries/matching
    saturation_tolerance: float = 1e-9

    # Number of augmenting rounds between DEBUG progress lines
    progress_log_interval: int = 1000

    def is_saturated(self, residual: float) -> bool:
        """Return True if a residual capacity is effectively zero."""
        return abs(residual) <= self.saturation_tolerance


# Global configuration instance
FLOW_CONFIG = FlowEngineConfig()
