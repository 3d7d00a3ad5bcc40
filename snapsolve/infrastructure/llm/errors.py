"""Map SDK and transport exceptions onto the domain error taxonomy."""

from typing import Optional

import anthropic
import httpx
import openai

from snapsolve.domain.exceptions import (
    AuthError,
    DomainException,
    PayloadTooLargeError,
    ProcessingError,
    ProviderError,
    RateLimitError,
)

TOKEN_LIMIT_FRAGMENTS = (
    "maximum context length",
    "context_length_exceeded",
    "prompt is too long",
    "too many tokens",
    "token limit",
)


def status_code_of(exc: BaseException) -> Optional[int]:
    """HTTP status from an SDK error, an httpx error, or a ``status`` attribute."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def _is_token_limit(message: str) -> bool:
    lowered = message.lower()
    return any(fragment in lowered for fragment in TOKEN_LIMIT_FRAGMENTS)


def _from_status(
    status: Optional[int], message: str, provider: Optional[str]
) -> Optional[DomainException]:
    if status in (401, 403):
        return AuthError(message, provider=provider)
    if status == 429:
        return RateLimitError(message, provider=provider)
    if status == 413:
        return PayloadTooLargeError(message, provider=provider)
    return None


def translate_provider_error(provider: Optional[str], exc: BaseException) -> DomainException:
    """Typed failure for an exception raised inside a provider call."""
    if isinstance(exc, DomainException):
        return exc

    message = str(exc) or type(exc).__name__
    status = status_code_of(exc)

    typed = _from_status(status, message, provider)
    if typed is not None:
        return typed
    if _is_token_limit(message):
        return PayloadTooLargeError(message, provider=provider)
    if isinstance(exc, (openai.APITimeoutError, anthropic.APITimeoutError, httpx.TimeoutException)):
        return ProviderError(f"request timed out: {message}", provider=provider)
    if isinstance(
        exc,
        (openai.APIConnectionError, anthropic.APIConnectionError, httpx.TransportError),
    ):
        return ProviderError(f"connection failed: {message}", provider=provider)
    return ProviderError(message, provider=provider, status_code=status)


def classify_error(exc: BaseException) -> DomainException:
    """Classify an exception caught at the orchestrator boundary.

    Domain errors pass through unchanged, except untyped ``ProviderError``
    instances, which get a second look at their status code and message.
    Anything left becomes ``ProcessingError`` with the raw text.
    """
    if isinstance(exc, DomainException) and type(exc) is not ProviderError:
        return exc

    provider = getattr(exc, "provider", None)
    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    status = status_code_of(exc)

    typed = _from_status(status, message, provider)
    if typed is not None:
        return typed

    lowered = message.lower()
    if "api key" in lowered or "api_key" in lowered or "unauthorized" in lowered:
        return AuthError(message, provider=provider)
    if "rate limit" in lowered or "rate_limit" in lowered:
        return RateLimitError(message, provider=provider)
    if _is_token_limit(message):
        return PayloadTooLargeError(message, provider=provider)

    if isinstance(exc, ProviderError):
        return exc
    return ProcessingError(message, provider=provider)
