from sqlalchemy import Column, String, Text, DateTime, JSON, Index
from sqlalchemy.orm import relationship
import enum

from app.platform.db.base import BaseModel


class ScanRunState(str, enum.Enum):
    """Coarse, caller-visible run state"""
    running = "running"
    completed = "completed"
    failed = "failed"


class ScanStage(str, enum.Enum):
    """Fine-grained workflow stage, stored in state_internal (forward order)"""
    initializing = "initializing"
    extracting_text = "extracting_text"
    validating_text = "validating_text"
    checking_spelling = "checking_spelling"
    filtering_corrections = "filtering_corrections"
    injecting_corrections = "injecting_corrections"
    completed = "completed"

    @property
    def order(self) -> int:
        return list(ScanStage).index(self)


FAILED_STATE_PREFIX = "failed - "


class ScanRun(BaseModel):
    """
    One scan of one URL at one point in time.

    `uuid` is the caller's correlation id; `id` is internal.
    run_end_time is set if and only if the run is completed or failed.
    """
    __tablename__ = "scan_runs"

    uuid = Column(String(64), nullable=False)
    url = Column(Text, nullable=False)

    state = Column(String(16), nullable=False, default=ScanRunState.running.value)
    state_internal = Column(Text, nullable=True, default=ScanStage.initializing.value)

    run_start_time = Column(DateTime(timezone=True), nullable=False)
    run_end_time = Column(DateTime(timezone=True), nullable=True)

    # Model names, token usage, cost estimate...
    debugging_info = Column(JSON, nullable=True)

    corrections = relationship(
        "ScanCorrection",
        back_populates="scan_run",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ScanCorrection.id",
        lazy="select",
    )

    __table_args__ = (
        Index('idx_scan_runs_uuid', 'uuid'),
        Index('idx_scan_runs_start', 'run_start_time'),
    )
