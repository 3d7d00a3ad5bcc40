from typing import Optional


class DomainException(Exception):
    """Base for every error the processing core raises on purpose."""

    default_message = "Failed to process screenshots. Please try again."

    def __init__(self, message: Optional[str] = None, provider: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.provider = provider

    @property
    def error_type(self) -> str:
        return type(self).__name__

    @property
    def provider_label(self) -> str:
        return self.provider or "AI provider"

    @property
    def user_message(self) -> str:
        return self.message


class ConfigurationError(DomainException):
    default_message = "API key not configured or invalid. Please check your settings."

    @property
    def user_message(self) -> str:
        return self.default_message


class UnknownProviderError(ConfigurationError):
    def __init__(self, provider_name: Optional[str]) -> None:
        super().__init__(f"Unknown API provider: {provider_name!r}")
        self.provider_name = provider_name


class AuthError(DomainException):
    default_message = "Credential rejected by provider"

    @property
    def user_message(self) -> str:
        return f"Invalid {self.provider_label} API key. Please check your settings."


class RateLimitError(DomainException):
    default_message = "Rate limit exceeded"

    @property
    def user_message(self) -> str:
        return (
            f"{self.provider_label} API rate limit exceeded. "
            "Please wait a few minutes before trying again."
        )


class PayloadTooLargeError(DomainException):
    default_message = "Request too large for provider"

    @property
    def user_message(self) -> str:
        return (
            f"Your screenshots contain too much information for {self.provider_label} "
            "to process. Switch to another provider in settings which can handle "
            "larger inputs."
        )


class EmptyResponseError(DomainException):
    default_message = "Provider returned no candidates"

    @property
    def user_message(self) -> str:
        return (
            f"Empty response from {self.provider_label} API. "
            "Please try again or use clearer screenshots."
        )


class ParseError(DomainException):
    """Raised by a single parse strategy; absorbed by the parser chain."""

    default_message = "Could not parse provider response"


class CanceledError(DomainException):
    default_message = "Processing was canceled by the user."


class ProviderError(DomainException):
    """Transport or HTTP failure that fits no more specific category."""

    default_message = "Provider request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, provider)
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        if self.status_code is not None and self.status_code >= 500:
            return f"{self.provider_label} server error. Please try again later."
        return (
            f"Failed to process with {self.provider_label} API: {self.message}. "
            "Please check your API key or try again later."
        )


class ProcessingError(DomainException):
    """Generic fallback that carries the raw error text."""


class ScreenshotNotFoundError(DomainException):
    def __init__(self, path: str) -> None:
        super().__init__(f"Screenshot file does not exist: {path}")
        self.path = path
