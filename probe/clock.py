"""
Clock Source

Monotonic microsecond timestamps anchored to the Unix epoch.

The wall clock is sampled once at import; every later reading adds the
elapsed perf_counter delta to that anchor. Differences between two
readings are therefore immune to system clock adjustments while the
values themselves stay interpretable as epoch time.
"""

import time

_EPOCH_ANCHOR_US: int = time.time_ns() // 1000
_MONOTONIC_ANCHOR_NS: int = time.perf_counter_ns()


def now_micro() -> int:
    """Microseconds since the Unix epoch, non-decreasing within the process."""
    return _EPOCH_ANCHOR_US + (time.perf_counter_ns() - _MONOTONIC_ANCHOR_NS) // 1000


def elapsed_ms(start_us: int, end_us: int) -> float:
    """Convert a microsecond interval to milliseconds."""
    return (end_us - start_us) / 1000
