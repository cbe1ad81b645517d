from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SUPPORTED_SCHEMES = frozenset({"http", "https"})
MAX_PORT = 65535


def check_probe_url(url: str) -> httpx.URL:
    """
    Parse a probe target and reject anything that is not absolute http(s).

    Raises:
        ValueError: malformed URL, missing host, port out of range or
            unsupported scheme
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ValueError(f"Malformed URL {url!r}: {e}") from e

    if not parsed.scheme:
        raise ValueError(f"URL must be absolute: {url!r}")
    if parsed.scheme not in SUPPORTED_SCHEMES:
        raise ValueError(f"Unsupported scheme {parsed.scheme!r} in {url!r}")
    if not parsed.host:
        raise ValueError(f"URL has no host: {url!r}")
    if parsed.port is not None and not 0 <= parsed.port <= MAX_PORT:
        raise ValueError(f"Port {parsed.port} out of range in {url!r}")
    return parsed


class ProbeRequest(BaseModel):
    """
    Descriptor for a single instrumented request.

    The transport (plain or TLS) is chosen from the URL scheme.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str = Field(..., description="Absolute http(s) URL")
    method: str = Field(default="GET", description="HTTP verb")
    body: Optional[str] = Field(default=None, description="Optional request body")
    iteration_number: int = Field(default=0, description="Caller-supplied iteration identifier")
    thread_number: int = Field(default=0, description="Caller-supplied concurrency slot")

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        check_probe_url(value)
        return value

    @field_validator("method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        method = value.strip().upper()
        if not method or not method.isalpha():
            raise ValueError(f"Invalid HTTP method: {value!r}")
        return method

    @property
    def request_size(self) -> int:
        """Byte length of the encoded body."""
        return len(self.body.encode("utf-8")) if self.body else 0


class ProbeExpectations(BaseModel):
    """Caller expectations used when deriving flags and confidence."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    expected_status: int = 200
    sla_threshold_ms: float = Field(default=1000.0, gt=0)
