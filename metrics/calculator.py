"""
Timing Calculator

Pure derivation of latency breakdowns from a settled RawMetrics record.

DESIGN RULES:
- No side effects, no hidden state
- Total over any well-formed record, including the all-zero one
- Microsecond differences divided by 1000 (results in ms)
"""

from probe.clock import elapsed_ms
from schemas.metrics import CalculatedMetrics, RawMetrics


def derive_timings(raw: RawMetrics) -> CalculatedMetrics:
    """
    Compute durations for a probe.

    server_processing_time is connect-to-first-byte minus DNS time. It
    does not separate processing from network round trips, and when the
    lookup was skipped (both lookup fields 0) it is just TTFB. Values are
    reported as computed, never clamped.
    """
    dns_lookup_time = elapsed_ms(raw.domain_lookup_start, raw.domain_lookup_end)
    time_to_first_byte = elapsed_ms(raw.request_start, raw.response_start)

    return CalculatedMetrics(
        total_transfer_size=raw.transfer_size or (raw.request_size + raw.response_size),
        duration=elapsed_ms(raw.start_time, raw.end_time),
        total_response_time=elapsed_ms(raw.request_start, raw.response_end),
        dns_lookup_time=dns_lookup_time,
        server_processing_time=time_to_first_byte - dns_lookup_time,
        time_to_first_byte=time_to_first_byte,
        download_time=elapsed_ms(raw.response_start, raw.response_end),
    )
