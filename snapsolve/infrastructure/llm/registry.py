"""Immutable client registry, rebuilt wholesale for each config version."""

from dataclasses import dataclass
from typing import Dict, Optional, Type

import structlog

from snapsolve.core.config import Settings, settings as default_settings
from snapsolve.infrastructure.llm.anthropic_adapter import AnthropicAdapter
from snapsolve.infrastructure.llm.base import ProviderAdapter
from snapsolve.infrastructure.llm.gemini_adapter import GeminiAdapter
from snapsolve.infrastructure.llm.openai_adapter import OpenAIAdapter
from snapsolve.models.context import ProviderConfig
from snapsolve.models.types import ProviderKind

logger = structlog.get_logger(__name__)

ADAPTERS: Dict[ProviderKind, Type[ProviderAdapter]] = {
    ProviderKind.OPENAI: OpenAIAdapter,
    ProviderKind.GEMINI: GeminiAdapter,
    ProviderKind.ANTHROPIC: AnthropicAdapter,
}


@dataclass(frozen=True)
class ClientRegistry:
    """Adapter for one config snapshot. ``adapter`` is None without an API key."""

    config: ProviderConfig
    adapter: Optional[ProviderAdapter]
    version: int = 0

    @property
    def ready(self) -> bool:
        return self.adapter is not None


def build_registry(
    config: ProviderConfig, version: int = 0, settings: Optional[Settings] = None
) -> ClientRegistry:
    """Build the adapter for ``config``.

    Raises ``UnknownProviderError`` for a provider name outside the supported set.
    """
    settings = settings or default_settings
    kind = config.provider_kind()
    if not (config.api_key or "").strip():
        logger.warning("No API key configured", provider=kind.value, version=version)
        return ClientRegistry(config=config, adapter=None, version=version)

    adapter = ADAPTERS[kind](config, settings)
    logger.info(
        "Client registry built",
        provider=kind.value,
        api_key=config.redacted_key(),
        version=version,
    )
    return ClientRegistry(config=config, adapter=adapter, version=version)
