from snapsolve.infrastructure.llm.anthropic_adapter import AnthropicAdapter
from snapsolve.infrastructure.llm.base import ProviderAdapter
from snapsolve.infrastructure.llm.errors import classify_error, translate_provider_error
from snapsolve.infrastructure.llm.gemini_adapter import GeminiAdapter
from snapsolve.infrastructure.llm.openai_adapter import OpenAIAdapter
from snapsolve.infrastructure.llm.registry import ClientRegistry, build_registry

__all__ = [
    "AnthropicAdapter",
    "ClientRegistry",
    "GeminiAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "build_registry",
    "classify_error",
    "translate_provider_error",
]
