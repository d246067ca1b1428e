from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.features.scan.models.scan_correction import ScanCorrection
from app.features.scan.models.scan_run import ScanRun
from app.features.scan.schemas.scan import ScanRunSummary
from app.features.scan.services.storage.screenshot_store import ScreenshotStore
from app.platform.logger import get_logger

logger = get_logger(__name__)


def _severity_count(severity: str):
    return func.coalesce(
        func.sum(case((ScanCorrection.severity == severity, 1), else_=0)), 0
    ).label(f"{severity}_corrections_count")


async def list_scan_runs(db: AsyncSession) -> List[ScanRunSummary]:
    """All runs, newest first, with per-severity correction counts."""
    stmt = (
        select(
            ScanRun.id,
            ScanRun.uuid,
            ScanRun.url,
            ScanRun.state,
            ScanRun.state_internal,
            ScanRun.run_start_time,
            ScanRun.run_end_time,
            _severity_count("critical"),
            _severity_count("important"),
            _severity_count("minor"),
        )
        .outerjoin(ScanCorrection, ScanCorrection.scan_run_id == ScanRun.id)
        .group_by(
            ScanRun.id,
            ScanRun.uuid,
            ScanRun.url,
            ScanRun.state,
            ScanRun.state_internal,
            ScanRun.run_start_time,
            ScanRun.run_end_time,
        )
        .order_by(ScanRun.run_start_time.desc(), ScanRun.id.desc())
    )
    result = await db.execute(stmt)
    return [ScanRunSummary(**row._mapping) for row in result.all()]


async def get_scan_run(
    db: AsyncSession, correlation_id: str, with_corrections: bool = False
) -> Optional[ScanRun]:
    stmt = (
        select(ScanRun)
        .where(ScanRun.uuid == correlation_id)
        .order_by(ScanRun.id.desc())
        .limit(1)
    )
    if with_corrections:
        stmt = stmt.options(selectinload(ScanRun.corrections))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_report_or_404(db: AsyncSession, correlation_id: str, with_corrections: bool = True) -> ScanRun:
    run = await get_scan_run(db, correlation_id, with_corrections=with_corrections)
    if not run:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return run


async def delete_report(db: AsyncSession, correlation_id: str, screenshots: ScreenshotStore) -> bool:
    """
    Delete a run, its corrections (cascade) and their screenshots.

    Raises:
        HTTPException: 404 if no run has this correlation id
    """
    run = await get_report_or_404(db, correlation_id, with_corrections=True)
    correction_uuids = [c.uuid for c in run.corrections]

    await db.delete(run)
    await db.commit()

    removed = screenshots.delete_many(correction_uuids)
    logger.info(f"[{correlation_id}] Deleted report with {len(correction_uuids)} corrections, {removed} screenshots")
    return True
