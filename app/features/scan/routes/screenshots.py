from email.utils import formatdate
import time

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from app.features.scan.dependencies.scan import get_screenshot_store
from app.features.scan.services.storage.screenshot_store import ScreenshotStore, is_valid_screenshot_id
from app.platform.config import settings

router = APIRouter(prefix="/screenshots", tags=["Screenshots"])


@router.get("/{correction_uuid}")
async def get_screenshot(
    correction_uuid: str,
    screenshots: ScreenshotStore = Depends(get_screenshot_store),
):
    # Validate UUID format to prevent directory traversal
    if not is_valid_screenshot_id(correction_uuid):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid UUID format")

    path = screenshots.find(correction_uuid)
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Screenshot not found")

    max_age = settings.SCREENSHOT_CACHE_SECONDS
    # Screenshots never change once written
    headers = {
        "Cache-Control": f"public, max-age={max_age}, immutable",
        "CDN-Cache-Control": f"public, immutable, max-age={max_age}",
        "Expires": formatdate(time.time() + max_age, usegmt=True),
        "Pragma": "public",
    }
    return FileResponse(path, media_type="image/png", headers=headers)
