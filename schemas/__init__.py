# Schemas Package
from schemas.metrics import CalculatedMetrics, ConfidenceRange, ProbeState, RawMetrics, StatusFlags
from schemas.request import ProbeExpectations, ProbeRequest

__all__ = [
    "CalculatedMetrics",
    "ConfidenceRange",
    "ProbeState",
    "RawMetrics",
    "StatusFlags",
    "ProbeExpectations",
    "ProbeRequest",
]
