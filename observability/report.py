"""
Probe Report Model

Everything known about a single completed probe, ready for display.
This is a side-effect-only data structure - no business logic.

DESIGN RULES:
- Pure data container
- Immutable after creation
- Derived sections are computed once by the runner
"""

from dataclasses import dataclass
from typing import Any, Dict

from schemas.metrics import CalculatedMetrics, ConfidenceRange, RawMetrics, StatusFlags


@dataclass(frozen=True)
class ProbeReport:
    """
    Immutable report of one probe.

    Captures:
    - Raw lifecycle timestamps and sizes
    - Calculated latency breakdown
    - Status flags
    - SLA confidence range and the threshold it was judged against
    """

    raw: RawMetrics
    calculated: CalculatedMetrics
    flags: StatusFlags
    confidence: ConfidenceRange
    sla_threshold_ms: float

    @property
    def success(self) -> bool:
        return self.flags.is_success

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging/export."""
        return {
            "raw": self.raw.to_dict(),
            "calculated": self.calculated.to_dict(),
            "flags": self.flags.to_dict(),
            "confidenceRange": self.confidence.value,
            "slaThresholdMs": self.sla_threshold_ms,
        }
