from sqlalchemy import Column, String, Integer, Float, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from app.platform.db.base import BaseModel


class ScanCorrection(BaseModel):
    """
    A correction that survived both filter passes and was highlighted on the page.

    `uuid` doubles as the screenshot file name. Rows are immutable and removed
    only together with their run.
    """
    __tablename__ = "scan_corrections"

    uuid = Column(String(36), nullable=False)
    scan_run_id = Column(Integer, ForeignKey("scan_runs.id", ondelete="CASCADE"), nullable=False)

    issue_type = Column(String(32), nullable=False)
    original_text = Column(Text, nullable=False)
    corrected_text = Column(Text, nullable=False)
    surrounding_text = Column(Text, nullable=False)
    explanation_for_correction = Column(Text, nullable=False)
    probability_of_correctness = Column(Float, nullable=False)
    severity = Column(String(16), nullable=False, index=True)

    scan_run = relationship("ScanRun", back_populates="corrections")

    __table_args__ = (
        Index('idx_scan_corrections_uuid', 'uuid'),
        Index('idx_scan_corrections_run', 'scan_run_id'),
    )
