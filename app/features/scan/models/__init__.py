"""
Scan models package.
"""
from app.features.scan.models.scan_run import ScanRun, ScanRunState, ScanStage
from app.features.scan.models.scan_correction import ScanCorrection

__all__ = ["ScanRun", "ScanRunState", "ScanStage", "ScanCorrection"]
