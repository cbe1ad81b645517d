"""
Probe Metrics Schemas

Raw and derived telemetry for a single instrumented HTTP request.

DESIGN RULES:
- RawMetrics is written only by the probe that owns it
- Derived models are frozen and recomputable at any time
- Serialized keys are camelCase for display layers
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProbeState(str, Enum):
    """Lifecycle of a single probe."""
    CREATED = "created"
    CONNECTING = "connecting"
    AWAITING_RESPONSE = "awaiting_response"
    STREAMING_BODY = "streaming_body"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProbeState.COMPLETED, ProbeState.FAILED)


class ConfidenceRange(str, Enum):
    """Observed duration relative to an SLA threshold."""
    UNDER_SLA = "UNDER_SLA"
    WITHIN_SLA = "WITHIN_SLA"
    OVER_SLA = "OVER_SLA"


class RawMetrics(BaseModel):
    """
    Flat metrics record filled in while a probe runs.

    Timestamps are microseconds since the Unix epoch, sizes are bytes.
    Every timestamp stays 0 until its lifecycle event fires, so a record
    that never completed is still a valid input for derivation.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Identification
    iteration_number: int = 0
    thread_number: int = 0

    # Timestamps (µs since epoch)
    start_time: int = 0
    end_time: int = 0
    domain_lookup_start: int = 0
    domain_lookup_end: int = 0
    request_start: int = 0
    response_start: int = 0
    response_end: int = 0

    # HTTP and backend
    http_status: int = 0
    http_headers: str = ""
    result_payload: Union[str, Dict[str, str]] = ""
    pod_instance: Optional[str] = None
    profiling: Optional[str] = None

    # Sizes (bytes)
    request_size: int = 0
    response_size: int = 0
    transfer_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys."""
        return self.model_dump(by_alias=True)


class CalculatedMetrics(BaseModel):
    """
    Latency breakdown derived from a RawMetrics snapshot.

    All durations are milliseconds. server_processing_time is an
    approximation: it subtracts DNS time from the connect-to-first-byte
    interval, so it still contains network round trips and goes
    negative when no lookup was recorded.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    total_transfer_size: int = 0
    duration: float = 0.0
    total_response_time: float = 0.0
    dns_lookup_time: float = 0.0
    server_processing_time: float = 0.0
    time_to_first_byte: float = 0.0
    download_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class StatusFlags(BaseModel):
    """Boolean status derived from a RawMetrics snapshot."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    is_success: bool = Field(..., description="HTTP status matched the expected status")
    is_local_cached: bool = Field(..., description="Zero-byte transfer")
    is_backend_cached: bool = Field(..., description="Response carried a cache indicator header")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
