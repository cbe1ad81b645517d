"""
SLA Classifier

Places an observed duration into a confidence range.
"""

from typing import Any, Mapping, Union

from schemas.metrics import CalculatedMetrics, ConfidenceRange
from sla.config import DEFAULT_SLA_THRESHOLD_MS, SLAConfig


def classify_confidence(
    calculated: Union[CalculatedMetrics, Mapping[str, Any]],
    sla_threshold_ms: float = DEFAULT_SLA_THRESHOLD_MS,
) -> ConfidenceRange:
    """
    Classify a probe's duration against an SLA threshold.

    Logic:
    - duration <= 0.8 * threshold  -> UNDER_SLA
    - duration <= threshold        -> WITHIN_SLA
    - otherwise                    -> OVER_SLA

    Args:
        calculated: CalculatedMetrics, or any mapping with a "duration" key (ms)
        sla_threshold_ms: Target latency in milliseconds
    """
    if isinstance(calculated, Mapping):
        duration = calculated["duration"]
    else:
        duration = calculated.duration

    sla = SLAConfig(threshold_ms=sla_threshold_ms)

    if duration <= sla.under_limit_ms:
        return ConfidenceRange.UNDER_SLA
    if duration <= sla.threshold_ms:
        return ConfidenceRange.WITHIN_SLA
    return ConfidenceRange.OVER_SLA
