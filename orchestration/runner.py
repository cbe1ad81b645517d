"""
Probe Runner

Coordinates one probe end to end:
probe -> derive timings / flags / confidence -> report -> sink.

DESIGN RULES:
- Derivation happens only on settled records
- Probe failures are reported, logged and re-raised (no partial success)
- Sink output can be toggled at runtime
"""

import logging
from typing import Optional

from metrics.calculator import derive_timings
from metrics.flags import derive_status_flags
from observability.report import ProbeReport
from observability.sink import ConsoleReportSink, ReportSink
from probe.errors import ProbeTransportError
from probe.prober import HttpProber, RequestLike, coerce_request
from schemas.metrics import RawMetrics
from schemas.request import ProbeExpectations
from sla.classifier import classify_confidence


logger = logging.getLogger(__name__)


def build_report(raw: RawMetrics, expectations: Optional[ProbeExpectations] = None) -> ProbeReport:
    """Derive every projection of a settled record."""
    expectations = expectations or ProbeExpectations()
    calculated = derive_timings(raw)

    return ProbeReport(
        raw=raw,
        calculated=calculated,
        flags=derive_status_flags(raw, expected_status=expectations.expected_status),
        confidence=classify_confidence(calculated, sla_threshold_ms=expectations.sla_threshold_ms),
        sla_threshold_ms=expectations.sla_threshold_ms,
    )


class ProbeRunner:
    """
    Runs probes and forwards their reports.

    Responsibilities:
    - Validate the descriptor before any network activity
    - Execute the probe
    - Build the report with the caller's expectations
    - Forward reports and failures to the configured sink
    """

    def __init__(
        self,
        prober: Optional[HttpProber] = None,
        sink: Optional[ReportSink] = None,
        sink_enabled: bool = True,
        expectations: Optional[ProbeExpectations] = None,
    ):
        """
        Initialize runner.

        Args:
            prober: HttpProber to execute requests. Defaults to a fresh HttpProber.
            sink: ReportSink for output. Defaults to ConsoleReportSink.
            sink_enabled: Whether reports are forwarded to the sink.
            expectations: Default expectations when run() receives none.
        """
        self._prober = prober or HttpProber()
        self._sink = sink or ConsoleReportSink()
        self._sink_enabled = sink_enabled
        self._expectations = expectations or ProbeExpectations()

    @property
    def sink_enabled(self) -> bool:
        return self._sink_enabled

    @sink_enabled.setter
    def sink_enabled(self, value: bool) -> None:
        self._sink_enabled = value

    @property
    def expectations(self) -> ProbeExpectations:
        return self._expectations

    async def run(
        self,
        descriptor: RequestLike,
        expectations: Optional[ProbeExpectations] = None,
    ) -> ProbeReport:
        """
        Probe once and build the report.

        Raises:
            ProbeInputError: invalid descriptor
            ProbeTransportError: the probe failed (after the failure is emitted)
        """
        request = coerce_request(descriptor)
        expectations = expectations or self._expectations

        try:
            raw = await self._prober.probe(request)
        except ProbeTransportError as e:
            logger.warning(f"[RUNNER] Probe failed ({e.kind}) for {request.url}: {e.message}")
            if self._sink_enabled:
                self._sink.emit_failure(request, e)
            raise

        report = build_report(raw, expectations)
        logger.info(
            f"[RUNNER] {request.method} {request.url} -> {raw.http_status} "
            f"in {report.calculated.duration:.2f}ms ({report.confidence.value})"
        )

        if self._sink_enabled:
            self._sink.emit(report)
        return report
