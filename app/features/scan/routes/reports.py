from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.scan.dependencies.scan import get_screenshot_store, require_superuser
from app.features.scan.schemas.scan import DebuggingInfoResponse, ScanReportResponse
from app.features.scan.services.reports.report_service import delete_report, get_report_or_404
from app.features.scan.services.storage.screenshot_store import ScreenshotStore
from app.platform.db.session import get_db
from app.platform.response import api_response

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/{correlation_id}")
async def get_report(correlation_id: str, db: AsyncSession = Depends(get_db)):
    run = await get_report_or_404(db, correlation_id)
    return api_response(
        data=ScanReportResponse.model_validate(run),
        message="Report retrieved",
        # A running scan keeps changing its report
        headers={"Cache-Control": "no-store"},
    )


@router.delete("/{correlation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_report(
    correlation_id: str,
    db: AsyncSession = Depends(get_db),
    screenshots: ScreenshotStore = Depends(get_screenshot_store),
):
    await delete_report(db, correlation_id, screenshots)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{correlation_id}/debugging-info", dependencies=[Depends(require_superuser)])
async def get_debugging_info(correlation_id: str, db: AsyncSession = Depends(get_db)):
    run = await get_report_or_404(db, correlation_id, with_corrections=False)
    return api_response(
        data=DebuggingInfoResponse.from_run(run).model_dump(),
        message="Debugging info retrieved",
    )
