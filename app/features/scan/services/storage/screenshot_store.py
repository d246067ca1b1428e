import re
from pathlib import Path
from typing import Iterable, Optional

from fastapi.concurrency import run_in_threadpool

from app.platform.logger import get_logger

logger = get_logger(__name__)

# Strict UUID v4; anything else could be used for path traversal
UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_screenshot_id(correction_uuid: str) -> bool:
    return bool(UUID_V4_PATTERN.match(correction_uuid or ""))


class ScreenshotStore:
    """One PNG per persisted correction, named by the correction's uuid."""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, correction_uuid: str) -> Path:
        if not is_valid_screenshot_id(correction_uuid):
            raise ValueError(f"Invalid screenshot id: {correction_uuid!r}")
        return self.directory / f"{correction_uuid}.png"

    def _write(self, path: Path, image: bytes) -> None:
        with open(path, "wb") as f:
            f.write(image)

    async def save(self, correction_uuid: str, image: bytes) -> Path:
        path = self.path_for(correction_uuid)
        await run_in_threadpool(self._write, path, image)
        return path

    def find(self, correction_uuid: str) -> Optional[Path]:
        path = self.path_for(correction_uuid)
        return path if path.is_file() else None

    def delete_many(self, correction_uuids: Iterable[str]) -> int:
        removed = 0
        for correction_uuid in correction_uuids:
            if not is_valid_screenshot_id(correction_uuid):
                continue
            path = self.directory / f"{correction_uuid}.png"
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Could not delete screenshot {path}: {e}")
        return removed
