# Probe Package
from probe.clock import now_micro
from probe.errors import (
    ProbeError,
    ProbeInputError,
    ProbeStateError,
    ProbeTimeoutError,
    ProbeTransportError,
)
from probe.prober import HttpProber, probe_request

__all__ = [
    "now_micro",
    "HttpProber",
    "probe_request",
    "ProbeError",
    "ProbeInputError",
    "ProbeStateError",
    "ProbeTimeoutError",
    "ProbeTransportError",
]
