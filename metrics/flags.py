"""
Status Flags

Boolean status derived from a RawMetrics record and caller expectations.
"""

import json
import logging
from typing import Any, Mapping, Union

from schemas.metrics import RawMetrics, StatusFlags


logger = logging.getLogger(__name__)

# Lower-case header names that indicate a cache between us and the origin
BACKEND_CACHE_HEADERS = frozenset({"x-cache", "age", "cf-cache-status"})


def is_backend_cached(headers: Union[str, Mapping[str, Any]]) -> bool:
    """
    Check serialized response headers for a cache indicator.

    Malformed or non-object header blobs count as "not cached".
    """
    if isinstance(headers, str):
        try:
            headers = json.loads(headers)
        except ValueError:
            logger.debug("Unparseable headers blob, treating as not cached")
            return False

    if not isinstance(headers, Mapping):
        return False

    return any(
        bool(value)
        for name, value in headers.items()
        if isinstance(name, str) and name.lower() in BACKEND_CACHE_HEADERS
    )


def derive_status_flags(raw: RawMetrics, expected_status: int = 200) -> StatusFlags:
    """
    Derive status booleans.

    Args:
        raw: Settled metrics record
        expected_status: Exact status code that counts as success
    """
    return StatusFlags(
        is_success=raw.http_status == expected_status,
        is_local_cached=raw.transfer_size == 0,
        is_backend_cached=is_backend_cached(raw.http_headers),
    )
