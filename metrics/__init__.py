# Metrics Package
from metrics.calculator import derive_timings
from metrics.flags import derive_status_flags, BACKEND_CACHE_HEADERS

__all__ = ["derive_timings", "derive_status_flags", "BACKEND_CACHE_HEADERS"]
