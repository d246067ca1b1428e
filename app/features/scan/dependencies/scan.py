import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request, status
from openai import AsyncOpenAI

from app.features.scan.services.analysis.correction_generator import CorrectionGenerator
from app.features.scan.services.analysis.correction_validator import CorrectionValidator
from app.features.scan.services.analysis.model_providers import ModelRegistry
from app.features.scan.services.injection.dom_injector import DomInjectorService
from app.features.scan.services.orchestration.run_repository import RunRepository
from app.features.scan.services.orchestration.workflow import ScanWorkflow
from app.features.scan.services.storage.screenshot_store import ScreenshotStore
from app.platform.cache.redis import ResultCache, create_redis_client
from app.platform.config import settings
from app.platform.db.session import SessionLocal
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ScanServices:
    """Process-wide service handles, built once at startup and injected into routes."""
    workflow: ScanWorkflow
    screenshots: ScreenshotStore
    cache: ResultCache

    async def close(self) -> None:
        await self.cache.close()


def build_scan_services() -> ScanServices:
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set, scans will fail at the model step")

    cache = ResultCache(create_redis_client(), ttl_seconds=settings.LLM_CACHE_TTL_SECONDS)
    openai_client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY or "not-configured")
    screenshots = ScreenshotStore(settings.SCREENSHOT_DIR)

    workflow = ScanWorkflow(
        runs=RunRepository(SessionLocal),
        generator=CorrectionGenerator(
            cache, ModelRegistry.create(openai_client, settings.GOOGLE_GEMINI_API_KEY)
        ),
        validator=CorrectionValidator(cache, openai_client, model=settings.VALIDATOR_MODEL),
        injector=DomInjectorService(screenshots, padding=settings.SCREENSHOT_PADDING),
        generator_model=settings.GENERATOR_MODEL,
        severities=list(settings.SCAN_SEVERITIES),
    )
    return ScanServices(workflow=workflow, screenshots=screenshots, cache=cache)


def get_scan_services(request: Request) -> ScanServices:
    return request.app.state.scan_services


def get_scan_workflow(request: Request) -> ScanWorkflow:
    return request.app.state.scan_services.workflow


def get_screenshot_store(request: Request) -> ScreenshotStore:
    return request.app.state.scan_services.screenshots


async def require_superuser(
    x_superuser_token: Optional[str] = Header(default=None),
) -> None:
    """Debug endpoints are limited to callers holding SUPERUSER_TOKEN."""
    if (
        not settings.SUPERUSER_TOKEN
        or not x_superuser_token
        or not secrets.compare_digest(x_superuser_token, settings.SUPERUSER_TOKEN)
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
