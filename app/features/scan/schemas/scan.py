"""
Scan Schemas

Request and response models for the scan and report endpoints.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ScanStartRequest(BaseModel):
    """Request to start a scan. Both fields are checked by the route (400 if missing)."""
    url: Optional[str] = None
    correlation_id: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://example.com",
                "correlation_id": "5b0c8f5e-6a53-4d34-9d8a-0f0b1f8f8a11",
            }
        }
    )


class ScanRunSummary(BaseModel):
    """One row of the scan list, with per-severity counts."""
    id: int
    uuid: str
    url: str
    state: str
    state_internal: Optional[str] = None
    run_start_time: datetime
    run_end_time: Optional[datetime] = None
    critical_corrections_count: int = 0
    important_corrections_count: int = 0
    minor_corrections_count: int = 0


class ScanCorrectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    scan_run_id: int
    issue_type: str
    original_text: str
    corrected_text: str
    surrounding_text: str
    explanation_for_correction: str
    probability_of_correctness: float
    severity: str
    created_at: Optional[datetime] = None


class ScanReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: str
    url: str
    state: str
    state_internal: Optional[str] = None
    run_start_time: datetime
    run_end_time: Optional[datetime] = None
    corrections: List[ScanCorrectionOut] = []


class DebuggingInfoResponse(BaseModel):
    """Internal run metadata for superusers, merged with the stored debugging_info."""
    model_config = ConfigDict(extra="allow")

    report_id: int
    report_uuid: str
    run_start_time: datetime
    run_end_time: Optional[datetime] = None
    state: str
    state_internal: Optional[str] = None

    @classmethod
    def from_run(cls, run: Any) -> "DebuggingInfoResponse":
        extra: Dict[str, Any] = dict(run.debugging_info or {})
        extra.update(
            report_id=run.id,
            report_uuid=run.uuid,
            run_start_time=run.run_start_time,
            run_end_time=run.run_end_time,
            state=run.state,
            state_internal=run.state_internal,
        )
        return cls(**extra)
