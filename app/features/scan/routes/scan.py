from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from app.features.scan.dependencies.scan import get_scan_workflow
from app.features.scan.schemas.scan import ScanStartRequest
from app.features.scan.services.orchestration.workflow import ScanWorkflow
from app.features.scan.services.reports.report_service import list_scan_runs
from app.platform.db.session import get_db
from app.platform.logger import get_logger
from app.platform.response import api_response
from app.platform.services.sse_helper import sse_event_stream
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)

router = APIRouter(prefix="/scans", tags=["scan"])


@router.post(
    "",
    summary="Start a scan (SSE)",
    description="""
    Scan one page for spelling, grammar, style and consistency issues.

    The response is a Server-Sent Events stream. Every message is a `data:` line
    carrying `{"key": ..., "data": ...}`:
    - `running`: free-text progress message
    - `completed`: the correlation id, the report is ready
    - `error`: short human-readable failure message

    The stream closes after `completed` or `error`. Disconnecting does not stop
    the scan.
    """,
)
async def start_scan(
    payload: ScanStartRequest,
    workflow: ScanWorkflow = Depends(get_scan_workflow),
):
    if not payload.url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")

    if not payload.correlation_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="correlation_id is required")

    is_valid, url_str, error_message = validate_url(payload.url)
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid URL: {error_message}",
        )

    logger.info(f"[{payload.correlation_id}] Starting new run: {url_str}")
    channel = workflow.launch(url_str, payload.correlation_id)

    return EventSourceResponse(
        sse_event_stream(channel),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache, no-store",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


@router.get("", status_code=200)
async def list_scans(db: AsyncSession = Depends(get_db)):
    """All scan runs, newest first, with correction counts per severity."""
    scans = await list_scan_runs(db)
    return api_response(data={"scans": scans}, message="Scans retrieved")
