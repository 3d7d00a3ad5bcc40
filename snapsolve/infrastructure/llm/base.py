"""Uniform request shape over the supported AI backends."""

import time
from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Sequence

import structlog

from snapsolve.core.config import Settings, settings as default_settings
from snapsolve.core.lifecycle import CancellationToken
from snapsolve.core.metrics import observe_provider_call
from snapsolve.core.prompts import extraction_prompt, system_prompt_for
from snapsolve.domain.exceptions import CanceledError, DomainException, EmptyResponseError
from snapsolve.infrastructure.llm.errors import translate_provider_error
from snapsolve.models.context import ImagePayload, ProviderConfig
from snapsolve.models.types import Mode, ProviderKind, StagePurpose

logger = structlog.get_logger(__name__)


class ProviderAdapter(ABC):
    """One backend variant.

    Subclasses implement ``_complete`` only. Callers use ``extract`` and
    ``synthesize`` and never branch on the provider identity.
    """

    kind: ClassVar[ProviderKind]

    def __init__(self, config: ProviderConfig, settings: Optional[Settings] = None) -> None:
        self.config = config
        self.settings = settings or default_settings

    @property
    def label(self) -> str:
        return self.kind.display_name

    def model_for(self, purpose: StagePurpose) -> str:
        return self.config.model_for(purpose, self.settings.default_model_for(self.kind))

    def max_tokens_for(self, purpose: StagePurpose) -> int:
        if purpose == StagePurpose.SOLUTION and self.config.mode == Mode.CODING:
            return self.settings.solution_max_output_tokens
        return self.settings.max_output_tokens

    async def extract(
        self,
        images: Sequence[ImagePayload],
        language: str,
        mode: Mode,
        *,
        token: CancellationToken,
    ) -> str:
        """Vision call that reads the screenshots; returns the raw reply text."""
        return await self._call(
            purpose=StagePurpose.EXTRACTION,
            system=system_prompt_for(StagePurpose.EXTRACTION, mode, language),
            user_text=extraction_prompt(mode, language),
            images=images,
            token=token,
        )

    async def synthesize(
        self,
        prompt: str,
        purpose: StagePurpose,
        *,
        token: CancellationToken,
        images: Sequence[ImagePayload] = (),
    ) -> str:
        """Answer or debug call; the debug stage also sends screenshots."""
        return await self._call(
            purpose=purpose,
            system=system_prompt_for(purpose, self.config.mode, self.config.language),
            user_text=prompt,
            images=images,
            token=token,
        )

    async def _call(
        self,
        purpose: StagePurpose,
        system: str,
        user_text: str,
        images: Sequence[ImagePayload],
        token: CancellationToken,
    ) -> str:
        model = self.model_for(purpose)
        log = logger.bind(
            provider=self.kind.value, model=model, purpose=purpose.value, images=len(images)
        )
        log.info("Provider call started")
        started = time.perf_counter()
        try:
            text = await token.guard(
                self._complete(
                    model=model,
                    system=system,
                    user_text=user_text,
                    images=images,
                    max_tokens=self.max_tokens_for(purpose),
                )
            )
        except CanceledError:
            log.info("Provider call canceled")
            raise
        except DomainException as e:
            log.warning("Provider call failed", error_type=e.error_type, error=str(e))
            raise
        except Exception as e:
            error = self._translate(e)
            log.warning("Provider call failed", error_type=error.error_type, error=str(e))
            raise error from e
        finally:
            observe_provider_call(self.kind.value, purpose.value, time.perf_counter() - started)

        if not text or not text.strip():
            raise EmptyResponseError(provider=self.label)
        log.info(
            "Provider call finished",
            latency=f"{time.perf_counter() - started:.2f}s",
            chars=len(text),
        )
        return text

    def _translate(self, exc: Exception) -> DomainException:
        return translate_provider_error(self.label, exc)

    @abstractmethod
    async def _complete(
        self,
        model: str,
        system: str,
        user_text: str,
        images: Sequence[ImagePayload],
        max_tokens: int,
    ) -> str:
        """Send one request and return the primary candidate's text."""
