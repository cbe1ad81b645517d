"""
Report Sink Interface

Abstract sink for probe reports.
Output-agnostic - implementations can write to console, log pipelines, etc.

DESIGN RULES:
- Side-effect only
- Never throw exceptions
- Failures are rendered distinctly from successful metrics
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from observability.report import ProbeReport
from probe.errors import ProbeError
from schemas.metrics import ConfidenceRange
from schemas.request import ProbeRequest


logger = logging.getLogger(__name__)

CONFIDENCE_INDICATORS: Dict[ConfidenceRange, str] = {
    ConfidenceRange.UNDER_SLA: "🟢",
    ConfidenceRange.WITHIN_SLA: "🟡",
    ConfidenceRange.OVER_SLA: "🔴",
}

_TRUNCATE_AT = 100


def _truncate(value: Any, limit: int = _TRUNCATE_AT) -> str:
    text = value if isinstance(value, str) else json.dumps(value)
    if len(text) > limit:
        return text[:limit] + "..."
    return text


class ReportSink(ABC):
    """
    Abstract base for report output destinations.

    Implementations:
    - ConsoleReportSink (default)
    - JsonReportSink
    """

    @abstractmethod
    def emit(self, report: ProbeReport) -> None:
        """
        Emit a completed probe report.

        Must not throw - failures should be logged and ignored.
        """
        pass

    @abstractmethod
    def emit_failure(self, request: ProbeRequest, error: ProbeError) -> None:
        """Emit a failed probe. Must not throw."""
        pass


class ConsoleReportSink(ReportSink):
    """
    Default sink that prints reports to console.

    Format: grouped sections, human-readable.
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize console sink.

        Args:
            verbose: If True, print raw sections as well. If False, derived metrics only.
        """
        self._verbose = verbose

    def emit(self, report: ProbeReport) -> None:
        """Print report to console."""
        try:
            raw = report.raw
            calc = report.calculated
            flags = report.flags

            print(f"\n{'='*60}")
            print(f"[PROBE] iteration={raw.iteration_number} thread={raw.thread_number}")
            print(f"{'='*60}")

            if self._verbose:
                self._section("Timestamps (µs since epoch)", {
                    "startTime": raw.start_time,
                    "domainLookupStart": raw.domain_lookup_start,
                    "domainLookupEnd": raw.domain_lookup_end,
                    "requestStart": raw.request_start,
                    "responseStart": raw.response_start,
                    "responseEnd": raw.response_end,
                    "endTime": raw.end_time,
                })
                self._section("Sizes (bytes)", {
                    "requestSize": raw.request_size,
                    "responseSize": raw.response_size,
                    "transferSize": raw.transfer_size,
                })
                self._section("HTTP and backend", {
                    "httpStatus": raw.http_status,
                    "podInstance": raw.pod_instance,
                    "profiling": raw.profiling,
                    "httpHeaders": _truncate(raw.http_headers),
                    "resultPayload": _truncate(raw.result_payload),
                })

            self._section("Calculated (ms)", {
                "totalTransferSize": f"{calc.total_transfer_size} bytes",
                "duration": f"{calc.duration:.2f}",
                "totalResponseTime": f"{calc.total_response_time:.2f}",
                "dnsLookupTime": f"{calc.dns_lookup_time:.2f}",
                "serverProcessingTime": f"{calc.server_processing_time:.2f} (approx.)",
                "timeToFirstByte": f"{calc.time_to_first_byte:.2f}",
                "downloadTime": f"{calc.download_time:.2f}",
            })
            self._section("Status flags", {
                "isSuccess": flags.is_success,
                "isLocalCached": flags.is_local_cached,
                "isBackendCached": flags.is_backend_cached,
            })

            indicator = CONFIDENCE_INDICATORS[report.confidence]
            print(f"\n  {indicator} Confidence Range: {report.confidence.value} "
                  f"(SLA {report.sla_threshold_ms:g}ms)")
            print(f"{'='*60}\n")

        except Exception as e:
            logger.warning(f"[SINK] Failed to emit probe report: {e}")

    def emit_failure(self, request: ProbeRequest, error: ProbeError) -> None:
        """Print a failed probe."""
        try:
            print(f"\n{'='*60}")
            print(f"[PROBE] ✗ {request.method} {request.url}")
            print(f"{'='*60}")
            print(f"  Error: {error}")
            print(f"{'='*60}\n")
        except Exception as e:
            logger.warning(f"[SINK] Failed to emit probe failure: {e}")

    def _section(self, title: str, values: Dict[str, Any]) -> None:
        print(f"\n  {title}:")
        for key, value in values.items():
            print(f"    {key}: {value}")


class JsonReportSink(ReportSink):
    """
    Sink that outputs reports as JSON lines.

    Useful for log aggregation systems.
    """

    def emit(self, report: ProbeReport) -> None:
        """Print report as JSON line."""
        try:
            print(json.dumps(report.to_dict(), default=str))
        except Exception as e:
            logger.warning(f"[SINK] Failed to emit JSON report: {e}")

    def emit_failure(self, request: ProbeRequest, error: ProbeError) -> None:
        try:
            print(json.dumps({
                "url": request.url,
                "method": request.method,
                "iterationNumber": request.iteration_number,
                "threadNumber": request.thread_number,
                "error": str(error),
                "kind": getattr(error, "kind", "input"),
            }))
        except Exception as e:
            logger.warning(f"[SINK] Failed to emit JSON failure: {e}")
