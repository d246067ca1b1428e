from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.features.scan.models.scan_correction import ScanCorrection
from app.features.scan.models.scan_run import (
    FAILED_STATE_PREFIX,
    ScanRun,
    ScanRunState,
    ScanStage,
)
from app.features.scan.services.injection.dom_injector import InjectedCorrection


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RunRepository:
    """
    Writes for one run's row and its correction rows.

    Every call opens its own short session so each write is committed (and
    visible to observers) before the workflow moves on.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def create_run(
        self, url: str, correlation_id: str, debugging_info: Optional[Dict[str, Any]] = None
    ) -> ScanRun:
        async with self.session_factory() as db:
            run = ScanRun(
                uuid=correlation_id,
                url=url,
                run_start_time=_now(),
                state=ScanRunState.running.value,
                state_internal=ScanStage.initializing.value,
                debugging_info=debugging_info or {},
            )
            db.add(run)
            await db.commit()
            await db.refresh(run)
            return run

    async def set_stage(self, run_id: int, stage: ScanStage) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(ScanRun).where(ScanRun.id == run_id).values(state_internal=stage.value)
            )
            await db.commit()

    async def save_corrections(
        self, run_id: int, injected: List[InjectedCorrection]
    ) -> List[ScanCorrection]:
        if not injected:
            return []

        async with self.session_factory() as db:
            rows = [
                ScanCorrection(
                    uuid=item.uuid,
                    scan_run_id=run_id,
                    issue_type=item.correction.issue_type.value,
                    original_text=item.correction.original_text,
                    corrected_text=item.correction.corrected_text,
                    surrounding_text=item.correction.surrounding_text,
                    explanation_for_correction=item.correction.explanation_for_correction,
                    probability_of_correctness=item.correction.probability_of_correctness,
                    severity=item.correction.severity.value,
                    created_at=item.created_at,
                )
                for item in injected
            ]
            db.add_all(rows)
            await db.commit()
            return rows

    async def mark_completed(self, run_id: int, debugging_info: Dict[str, Any]) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(ScanRun)
                .where(ScanRun.id == run_id)
                .values(
                    state=ScanRunState.completed.value,
                    state_internal=ScanStage.completed.value,
                    run_end_time=_now(),
                    debugging_info=debugging_info,
                )
            )
            await db.commit()

    async def mark_failed(self, run_id: int, reason: str) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(ScanRun)
                .where(ScanRun.id == run_id)
                .values(
                    state=ScanRunState.failed.value,
                    state_internal=f"{FAILED_STATE_PREFIX}{reason}",
                    run_end_time=_now(),
                )
            )
            await db.commit()
