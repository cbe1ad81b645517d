"""
FastAPI Dependencies

All object creation happens here, not per request.

RULE: FastAPI routes call exactly one entry point: ProbeRunner.run()
"""

from functools import lru_cache

from app.core.config import settings
from observability.sink import ConsoleReportSink
from orchestration.runner import ProbeRunner
from probe.prober import HttpProber
from schemas.request import ProbeExpectations


@lru_cache(maxsize=1)
def get_probe_runner() -> ProbeRunner:
    """
    Create and cache the ProbeRunner singleton.

    Wiring:
    - HttpProber: one throwaway client per probe, optional timeout
    - ConsoleReportSink: enabled by HTTP_PROBE_CONSOLE_SINK_ENABLED
    - ProbeExpectations: defaults from settings

    Returns:
        ProbeRunner: The single entry point for probing.
    """
    return ProbeRunner(
        prober=HttpProber(timeout_s=settings.request_timeout_s),
        sink=ConsoleReportSink(verbose=settings.console_verbose),
        sink_enabled=settings.console_sink_enabled,
        expectations=ProbeExpectations(
            expected_status=settings.expected_status,
            sla_threshold_ms=settings.sla_threshold_ms,
        ),
    )
