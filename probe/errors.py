"""
Probe Errors

Input errors are raised before any network activity.
Transport errors terminate the probe and carry the partial record.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from schemas.metrics import RawMetrics, ProbeState


class ProbeError(Exception):
    """Base class for probe failures."""


class ProbeInputError(ProbeError, ValueError):
    """Malformed descriptor, URL or unsupported scheme."""


class ProbeStateError(ProbeError, RuntimeError):
    """A lifecycle event arrived in a state that cannot accept it."""

    def __init__(self, current: "ProbeState", target: "ProbeState"):
        super().__init__(f"Illegal probe transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


class ProbeTransportError(ProbeError):
    """
    The request failed at the transport level.

    Attributes:
        metrics: The partially populated record, for diagnostics only.
    """

    kind = "transport"

    def __init__(self, message: str, metrics: Optional["RawMetrics"] = None):
        super().__init__(message)
        self.message = message
        self.metrics = metrics


class ProbeTimeoutError(ProbeTransportError):
    """The configured request timeout expired."""

    kind = "timeout"
