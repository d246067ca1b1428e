"""
Scan workflow (state machine).

One run scans one URL:

    initializing -> extracting_text -> validating_text -> checking_spelling
    -> filtering_corrections -> injecting_corrections -> completed

`failed - <reason>` is reachable from any stage. Each stage is written to the
run row before its work starts. "No issues found" at any point short-circuits
to completed with an empty correction list.
"""
import asyncio
from collections import Counter
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional, Set

from app.features.scan.exceptions import ScanError
from app.features.scan.models.scan_run import ScanStage
from app.features.scan.schemas.correction import Severity
from app.features.scan.services.analysis.correction_generator import CorrectionGenerator
from app.features.scan.services.analysis.correction_validator import CorrectionValidator
from app.features.scan.services.analysis.plausibility_filter import PlausibilityFilter
from app.features.scan.services.extraction.page_loader_service import BrowserSession, PageLoaderService
from app.features.scan.services.extraction.page_scripts import PAGE_HELPERS_VERSION
from app.features.scan.services.extraction.text_extractor import TextExtractorService
from app.features.scan.services.injection.dom_injector import DomInjectorService, InjectedCorrection
from app.features.scan.services.orchestration.run_repository import RunRepository
from app.platform.config import settings
from app.platform.logger import get_logger
from app.platform.services.sse_helper import ProgressChannel

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong while scanning the page"


@dataclass
class WorkflowResult:
    corrections: List[InjectedCorrection] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0


class _StageTracker:
    """Persists stage transitions and refuses to move backwards."""

    def __init__(self, runs: RunRepository, run_id: int):
        self.runs = runs
        self.run_id = run_id
        self.current = ScanStage.initializing

    async def enter(self, stage: ScanStage) -> None:
        if stage.order <= self.current.order:
            raise RuntimeError(f"Illegal stage transition {self.current.value} -> {stage.value}")
        await self.runs.set_stage(self.run_id, stage)
        self.current = stage


class ScanWorkflow:
    def __init__(
        self,
        runs: RunRepository,
        generator: CorrectionGenerator,
        validator: CorrectionValidator,
        injector: DomInjectorService,
        open_page: Callable[[str], Awaitable[BrowserSession]] = PageLoaderService.open_page,
        generator_model: str = settings.GENERATOR_MODEL,
        severities: Optional[List[str]] = None,
    ):
        self.runs = runs
        self.generator = generator
        self.validator = validator
        self.injector = injector
        self.open_page = open_page
        self.generator_model = generator_model
        self.severities = severities or list(settings.SCAN_SEVERITIES)
        self._tasks: Set[asyncio.Task] = set()

    def launch(self, url: str, correlation_id: str) -> ProgressChannel:
        """
        Start a run as an independent task and return its progress channel.

        The task is not tied to the caller: if the client goes away the run
        still finishes and updates the database.
        """
        channel = ProgressChannel(correlation_id)
        task = asyncio.create_task(self.run(url, correlation_id, channel))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return channel

    async def run(
        self, url: str, correlation_id: str, progress: ProgressChannel
    ) -> Optional[WorkflowResult]:
        """Never raises: the run row always ends completed or failed."""
        session: Optional[BrowserSession] = None
        run_id: Optional[int] = None
        result: Optional[WorkflowResult] = None

        try:
            logger.info(f"[{correlation_id}] Starting workflow for {url}")
            progress.publish("running", "Opening the page...")

            debugging_info = {
                "generate_corrections_model": self.generator_model,
                "validator_model": self.validator.model,
                "page_helpers_version": PAGE_HELPERS_VERSION,
                "severities": self.severities,
            }
            run = await self.runs.create_run(url, correlation_id, debugging_info)
            run_id = run.id

            logger.info(f"[{correlation_id}] Starting browser, opening the page")
            session = await self.open_page(url)

            result = await self._execute(url, correlation_id, run_id, session, progress)

            progress.publish("running", "Finishing up...")
            await self.runs.save_corrections(run_id, result.corrections)

            total_cost = (
                result.input_tokens * settings.COST_PER_INPUT_TOKEN
                + result.output_tokens * settings.COST_PER_OUTPUT_TOKEN
            )
            debugging_info.update(
                input_tokens=result.input_tokens,
                output_tokens=result.output_tokens,
                estimated_cost_usd=round(total_cost, 6),
                corrections_count=len(result.corrections),
            )
            await self.runs.mark_completed(run_id, debugging_info)

            logger.info(
                f"[{correlation_id}] Total cost: ${total_cost:.4f}, "
                f"number of corrections identified: {len(result.corrections)}"
            )

            counts = self.count_by_severity(result.corrections)
            for severity in Severity:
                progress.publish("running", f"Found {counts[severity.value]} {severity.value} corrections")
            progress.publish("completed", correlation_id)

            await self._release(session, correlation_id)
            session = None
            return result

        except Exception as e:
            logger.error(f"[{correlation_id}] Error running workflow: {e}", exc_info=True)
            logger.error(f"[{correlation_id}] ALERT: scan failed for {url}: {e!r}")

            await self._release(session, correlation_id)
            session = None

            if result is not None and result.corrections:
                self._discard_screenshots(result.corrections, correlation_id)

            if run_id is not None:
                try:
                    await self.runs.mark_failed(run_id, str(e) or type(e).__name__)
                except Exception as db_error:
                    logger.error(f"[{correlation_id}] Error updating scan run: {db_error}")

            user_message = e.user_message if isinstance(e, ScanError) else GENERIC_ERROR_MESSAGE
            progress.publish("error", f"Unable to check the website: {user_message}")
            return None

        finally:
            if session is not None:
                await self._release(session, correlation_id)

    async def _execute(
        self,
        url: str,
        correlation_id: str,
        run_id: int,
        session: BrowserSession,
        progress: ProgressChannel,
    ) -> WorkflowResult:
        stages = _StageTracker(self.runs, run_id)
        result = WorkflowResult()

        progress.publish("running", "Extracting text from the page...")
        await stages.enter(ScanStage.extracting_text)
        text = await TextExtractorService.extract_text(session)

        logger.info(f"[{correlation_id}] Validating text length ({len(text)} chars)")
        await stages.enter(ScanStage.validating_text)
        TextExtractorService.validate_text(text)

        progress.publish("running", "Checking for typos, grammatical errors, and other issues...")
        await stages.enter(ScanStage.checking_spelling)
        candidates, input_tokens, output_tokens = await self.generator.generate(
            url, text, self.severities, self.generator_model
        )
        result.input_tokens += input_tokens
        result.output_tokens += output_tokens

        if not candidates:
            logger.info(f"[{correlation_id}] No corrections found, completing run")
            return result

        await stages.enter(ScanStage.filtering_corrections)
        first_pass = PlausibilityFilter.apply(candidates, text)
        if not first_pass:
            logger.info(f"[{correlation_id}] No true positives among {len(candidates)} candidates")
            return result

        progress.publish("running", "Generating suggestions...")
        validated, input_tokens, output_tokens = await self.validator.validate(first_pass)
        result.input_tokens += input_tokens
        result.output_tokens += output_tokens

        if not validated:
            logger.info(f"[{correlation_id}] No valid corrections found after LLM validation")
            return result

        second_pass = PlausibilityFilter.apply(validated, text)
        if not second_pass:
            logger.info(f"[{correlation_id}] No valid corrections found after second filter")
            return result

        progress.publish("running", "Removing false positives...")
        await stages.enter(ScanStage.injecting_corrections)

        progress.publish("running", "Almost done...")
        result.corrections = await self.injector.inject(session, second_pass, correlation_id)
        return result

    @staticmethod
    def count_by_severity(corrections: List[InjectedCorrection]) -> Dict[str, int]:
        counts = Counter(item.correction.severity.value for item in corrections)
        return {severity.value: counts.get(severity.value, 0) for severity in Severity}

    def _discard_screenshots(self, corrections: List[InjectedCorrection], correlation_id: str) -> None:
        # Files without correction rows would never be reachable or deleted
        removed = self.injector.screenshot_store.delete_many(item.uuid for item in corrections)
        logger.info(f"[{correlation_id}] Removed {removed} screenshots of the failed run")

    @staticmethod
    async def _release(session: Optional[BrowserSession], correlation_id: str) -> None:
        if session is None:
            return
        try:
            await session.close()
        except Exception as e:
            logger.error(f"[{correlation_id}] Error while closing the browser: {e}")
