"""
SLA Configuration

Threshold and band definitions for confidence classification.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any

DEFAULT_SLA_THRESHOLD_MS: float = 1000.0

# Durations at or below this share of the threshold are comfortably under SLA
UNDER_SLA_RATIO: float = 0.8


@dataclass(frozen=True)
class SLAConfig:
    """Latency target for a probe."""
    threshold_ms: float = DEFAULT_SLA_THRESHOLD_MS
    under_ratio: float = UNDER_SLA_RATIO

    @property
    def under_limit_ms(self) -> float:
        return self.threshold_ms * self.under_ratio

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_SLA = SLAConfig()
