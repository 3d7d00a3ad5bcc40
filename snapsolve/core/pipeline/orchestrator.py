"""Sequences extract, synthesize and debug runs and owns the view state.

The orchestrator is the single writer of the stored problem, the stored
result, the view and the client registry. Each run reads a config snapshot
once and keeps it for its whole duration.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import structlog

from snapsolve.core.config import Settings, settings as default_settings
from snapsolve.core.lifecycle import CancellationToken, RequestLifecycleManager
from snapsolve.core.metrics import (
    PIPELINE_ERRORS,
    PIPELINES_CANCELED,
    PIPELINES_COMPLETED,
    PIPELINES_STARTED,
    observe_step,
)
from snapsolve.core.normalizer import AnswerNormalizer
from snapsolve.domain.exceptions import (
    AuthError,
    CanceledError,
    ConfigurationError,
    DomainException,
    ProcessingError,
    ScreenshotNotFoundError,
)
from snapsolve.infrastructure.llm.errors import classify_error
from snapsolve.infrastructure.llm.media import encode_image
from snapsolve.infrastructure.llm.registry import ClientRegistry, build_registry
from snapsolve.models.context import ImagePayload, PipelineRequest, ProviderConfig
from snapsolve.models.schema import ProblemInfo, QuestionSet, SolutionResult
from snapsolve.models.types import (
    Mode,
    PipelineKind,
    PipelineStatus,
    ProcessingEvent,
    ViewState,
)
from snapsolve.ports.config_store import ConfigStore
from snapsolve.ports.event_sink import EventSink
from snapsolve.ports.note_store import NoteStore
from snapsolve.ports.screenshot_store import ScreenshotStore

from .emitter import EventEmitter
from .steps import AnswerMcqStep, DebugStep, ExtractStep, SolveStep
from .transitions import ConfigTransition, reduce_config_change

logger = structlog.get_logger(__name__)

RegistryFactory = Callable[..., ClientRegistry]

NO_PROBLEM_MESSAGE = "No problem info available"


@dataclass(frozen=True)
class PipelineOutcome:
    kind: PipelineKind
    status: PipelineStatus
    result: Optional[Any] = None
    error: Optional[DomainException] = None

    @property
    def ok(self) -> bool:
        return self.status == PipelineStatus.SUCCEEDED


class ProcessingOrchestrator:
    def __init__(
        self,
        screenshots: ScreenshotStore,
        config_store: ConfigStore,
        notes: NoteStore,
        events: EventSink,
        registry_factory: RegistryFactory = build_registry,
        settings: Optional[Settings] = None,
    ) -> None:
        self._screenshots = screenshots
        self._config_store = config_store
        self._notes = notes
        self._emitter = EventEmitter(events)
        self._registry_factory = registry_factory
        self._settings = settings or default_settings
        self._normalizer = AnswerNormalizer()
        self.lifecycle = RequestLifecycleManager()

        self._view = ViewState.QUEUE
        self._problem: Optional[ProblemInfo] = None
        self._questions: Optional[QuestionSet] = None
        self._solution: Optional[SolutionResult] = None
        self._result_mode: Optional[Mode] = None
        self._has_debugged = False

        self._config = config_store.load()
        self._registry: Optional[ClientRegistry] = None
        self._registry_version = 0
        self._unsubscribe = config_store.on_change(self.handle_config_change)

    # --- state accessors ---

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def problem(self) -> Optional[ProblemInfo]:
        return self._problem

    @property
    def questions(self) -> Optional[QuestionSet]:
        return self._questions

    @property
    def solution(self) -> Optional[SolutionResult]:
        return self._solution

    @property
    def has_debugged(self) -> bool:
        return self._has_debugged

    @property
    def registry(self) -> Optional[ClientRegistry]:
        return self._registry

    def close(self) -> None:
        self._unsubscribe()

    # --- entry points ---

    async def process_screenshots(self) -> PipelineOutcome:
        """Primary run from the queue view, debug run from the solutions view."""
        if self._view == ViewState.QUEUE:
            return await self.start_primary()
        return await self.start_debug()

    async def start_primary(self) -> PipelineOutcome:
        kind = PipelineKind.PRIMARY
        config = self._config_store.load()
        try:
            registry = self._ensure_registry(config)
        except ConfigurationError as e:
            await self._emit_failure(kind, e)
            return PipelineOutcome(kind, PipelineStatus.FAILED, error=e)

        paths = self._screenshots.list_primary()
        if not paths:
            logger.info("No screenshots in queue")
            await self._emitter.emit(ProcessingEvent.NO_SCREENSHOTS)
            return PipelineOutcome(kind, PipelineStatus.NO_INPUT)

        await self._emitter.emit(ProcessingEvent.EXTRACTION_STARTED)
        token, dispose = self.lifecycle.begin(kind)
        PIPELINES_STARTED.labels(kind=kind.value).inc()
        log = logger.bind(kind=kind.value, token=token.id, mode=config.mode.value)
        log.info("Pipeline started", screenshots=len(paths))

        try:
            images = await token.guard(self._load_images(paths))
            if not images:
                log.warning("No screenshot files readable")
                await self._emitter.emit(ProcessingEvent.NO_SCREENSHOTS)
                return PipelineOutcome(kind, PipelineStatus.NO_INPUT)

            ctx = PipelineRequest(kind=kind, config=config, token=token, images=images)

            t0 = time.monotonic()
            ctx = await ExtractStep(self._normalizer).run(ctx, registry.adapter, self._emitter)
            observe_step("extract", time.monotonic() - t0)
            extracted = self._commit_extraction(ctx)
            await self._emitter.emit(ProcessingEvent.PROBLEM_EXTRACTED, extracted.model_dump())

            step = (
                AnswerMcqStep(self._normalizer)
                if config.mode == Mode.MCQ
                else SolveStep()
            )
            t1 = time.monotonic()
            ctx = await step.run(ctx, registry.adapter, self._emitter)
            observe_step("solve", time.monotonic() - t1)

            self._ensure_current(token)
            self._screenshots.clear_debug_queue()
            self._solution = ctx.solution
            self._view = ViewState.SOLUTIONS
            await self._emitter.emit(
                ProcessingEvent.SOLUTION_SUCCESS, ctx.solution.model_dump()
            )
            PIPELINES_COMPLETED.labels(kind=kind.value).inc()
            log.info("Pipeline succeeded")
            return PipelineOutcome(kind, PipelineStatus.SUCCEEDED, result=ctx.solution)
        except Exception as e:
            return await self._settle_failure(kind, token, e, log)
        finally:
            dispose()

    async def start_debug(self) -> PipelineOutcome:
        kind = PipelineKind.DEBUG
        config = self._config_store.load()
        try:
            registry = self._ensure_registry(config)
        except ConfigurationError as e:
            await self._emit_failure(kind, e)
            return PipelineOutcome(kind, PipelineStatus.FAILED, error=e)

        debug_paths = self._screenshots.list_debug()
        if not debug_paths:
            logger.info("No screenshots in debug queue")
            await self._emitter.emit(ProcessingEvent.NO_SCREENSHOTS)
            return PipelineOutcome(kind, PipelineStatus.NO_INPUT)

        if self._problem is None and self._questions is None:
            error = ProcessingError(NO_PROBLEM_MESSAGE)
            await self._emit_failure(kind, error)
            return PipelineOutcome(kind, PipelineStatus.FAILED, error=error)

        await self._emitter.emit(ProcessingEvent.DEBUG_STARTED)
        token, dispose = self.lifecycle.begin(kind)
        PIPELINES_STARTED.labels(kind=kind.value).inc()
        log = logger.bind(kind=kind.value, token=token.id, mode=config.mode.value)
        paths = self._screenshots.list_primary() + debug_paths
        log.info("Pipeline started", screenshots=len(paths))

        try:
            images = await token.guard(self._load_images(paths))
            if not images:
                log.warning("No screenshot files readable")
                await self._emitter.emit(ProcessingEvent.NO_SCREENSHOTS)
                return PipelineOutcome(kind, PipelineStatus.NO_INPUT)

            ctx = PipelineRequest(
                kind=kind,
                config=config,
                token=token,
                images=images,
                problem=self._problem,
                questions=self._questions,
                notes=self._notes.list_notes(),
            )

            t0 = time.monotonic()
            ctx = await DebugStep().run(ctx, registry.adapter, self._emitter)
            observe_step("debug", time.monotonic() - t0)

            self._ensure_current(token)
            self._has_debugged = True
            await self._emitter.emit(ProcessingEvent.DEBUG_SUCCESS, ctx.debug.model_dump())
            PIPELINES_COMPLETED.labels(kind=kind.value).inc()
            log.info("Pipeline succeeded")
            return PipelineOutcome(kind, PipelineStatus.SUCCEEDED, result=ctx.debug)
        except Exception as e:
            return await self._settle_failure(kind, token, e, log)
        finally:
            dispose()

    async def cancel_all(self) -> bool:
        """Abort both pipelines and return to an empty queue view.

        Returns True if a run was in flight; only then is the reset event sent.
        """
        canceled = self.lifecycle.cancel_all()
        self._clear_result()
        self._view = ViewState.QUEUE
        logger.info("All pipelines reset", canceled=canceled)
        if canceled:
            await self._emitter.emit(ProcessingEvent.NO_SCREENSHOTS)
        return canceled

    def handle_config_change(self, new: ProviderConfig) -> ConfigTransition:
        """Config store listener; applies ``reduce_config_change``."""
        transition = reduce_config_change(self._config, new, self._view, self._result_mode)
        if transition.cancel_inflight:
            self.lifecycle.cancel_all()
        if transition.clear_problem:
            self._clear_result()
        if transition.clear_debug_queue:
            self._screenshots.clear_debug_queue()
        self._view = transition.next_view
        self._config = new
        if transition.rebuild_registry:
            self._rebuild_registry(new)
        if transition.changed_anything:
            logger.info(
                "Config change applied",
                provider=new.provider,
                mode=new.mode.value,
                view=self._view.value,
                canceled=transition.cancel_inflight,
                cleared=transition.clear_problem,
            )
        return transition

    # --- internals ---

    def _rebuild_registry(self, config: ProviderConfig) -> Optional[ClientRegistry]:
        self._registry_version += 1
        try:
            registry = self._registry_factory(
                config, version=self._registry_version, settings=self._settings
            )
        except ConfigurationError as e:
            logger.warning("Client registry not built", error=str(e))
            self._registry = None
            return None
        self._registry = registry
        return registry

    def _ensure_registry(self, config: ProviderConfig) -> ClientRegistry:
        registry = self._registry
        if registry is None or registry.config != config:
            registry = self._rebuild_registry(config)
        if registry is None or not registry.ready:
            # one lazy retry before giving up
            registry = self._registry_factory(
                config, version=self._registry_version, settings=self._settings
            )
            self._registry = registry
        if not registry.ready:
            raise ConfigurationError(provider=config.provider_kind().display_name)
        return registry

    async def _load_images(self, paths: List[str]) -> List[ImagePayload]:
        results = await asyncio.gather(*(self._load_image(path) for path in paths))
        return [image for image in results if image is not None]

    async def _load_image(self, path: str) -> Optional[ImagePayload]:
        try:
            data = await self._screenshots.read_bytes(path)
        except (ScreenshotNotFoundError, OSError) as e:
            logger.warning("Skipping unreadable screenshot", path=path, error=str(e))
            return None
        return encode_image(path, data)

    def _ensure_current(self, token: CancellationToken) -> None:
        if not self.lifecycle.is_current(token):
            raise CanceledError()

    def _commit_extraction(self, ctx: PipelineRequest):
        self._ensure_current(ctx.token)
        # replaced together
        self._problem, self._questions = ctx.problem, ctx.questions
        self._solution = None
        self._result_mode = ctx.config.mode
        self._has_debugged = False
        return ctx.questions if ctx.questions is not None else ctx.problem

    def _clear_result(self) -> None:
        self._problem = None
        self._questions = None
        self._solution = None
        self._result_mode = None
        self._has_debugged = False

    async def _settle_failure(
        self, kind: PipelineKind, token: CancellationToken, exc: Exception, log
    ) -> PipelineOutcome:
        if isinstance(exc, CanceledError) or token.canceled:
            PIPELINES_CANCELED.labels(kind=kind.value).inc()
            log.info("Pipeline canceled")
            return PipelineOutcome(kind, PipelineStatus.CANCELED)

        error = classify_error(exc)
        PIPELINE_ERRORS.labels(kind=kind.value, error=error.error_type).inc()
        log.error("Pipeline failed", error_type=error.error_type, error=str(exc))
        await self._emit_failure(kind, error)
        if kind == PipelineKind.PRIMARY:
            self._view = ViewState.QUEUE
        return PipelineOutcome(kind, PipelineStatus.FAILED, error=error)

    async def _emit_failure(self, kind: PipelineKind, error: DomainException) -> None:
        payload = {"message": error.user_message, "error_type": error.error_type}
        if isinstance(error, (ConfigurationError, AuthError)):
            await self._emitter.emit(ProcessingEvent.API_KEY_INVALID, payload)
            return
        event = (
            ProcessingEvent.SOLUTION_ERROR
            if kind == PipelineKind.PRIMARY
            else ProcessingEvent.DEBUG_ERROR
        )
        await self._emitter.emit(event, payload)
