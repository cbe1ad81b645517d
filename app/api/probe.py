"""
Probe API Route

Thin delegation layer to the probe runner.
Contains NO measurement or derivation logic.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from app.dependencies import get_probe_runner
from orchestration.runner import ProbeRunner
from probe.errors import ProbeInputError, ProbeTransportError
from schemas.request import ProbeExpectations, ProbeRequest


router = APIRouter()


class ProbeApiRequest(ProbeRequest):
    """API request: a probe descriptor plus optional expectation overrides."""
    expected_status: Optional[int] = Field(default=None, description="Status code that counts as success")
    sla_threshold_ms: Optional[float] = Field(default=None, gt=0, description="SLA target in milliseconds")

    def to_probe_request(self) -> ProbeRequest:
        return ProbeRequest(
            url=self.url,
            method=self.method,
            body=self.body,
            iteration_number=self.iteration_number,
            thread_number=self.thread_number,
        )

    def to_expectations(self, defaults: ProbeExpectations) -> ProbeExpectations:
        return ProbeExpectations(
            expected_status=self.expected_status if self.expected_status is not None else defaults.expected_status,
            sla_threshold_ms=self.sla_threshold_ms if self.sla_threshold_ms is not None else defaults.sla_threshold_ms,
        )


@router.post("/probe")
async def probe(
    request: ProbeApiRequest,
    runner: ProbeRunner = Depends(get_probe_runner),
) -> Dict[str, Any]:
    """
    Probe a URL once and return raw metrics, calculated metrics,
    status flags and the confidence range.

    Transport failures map to 502 with the error message and kind.
    """
    try:
        report = await runner.run(
            request.to_probe_request(),
            expectations=request.to_expectations(runner.expectations),
        )
    except ProbeInputError as e:
        raise HTTPException(status_code=422, detail={"error": str(e), "kind": "input"})
    except ProbeTransportError as e:
        raise HTTPException(status_code=502, detail={"error": e.message, "kind": e.kind})

    return report.to_dict()
