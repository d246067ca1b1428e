from fastapi import APIRouter

from app.features.scan.routes.scan import router as scan_router
from app.features.scan.routes.reports import router as reports_router
from app.features.scan.routes.screenshots import router as screenshots_router

api_router = APIRouter()

# Register scan feature routes
api_router.include_router(scan_router)
api_router.include_router(reports_router)
api_router.include_router(screenshots_router)
