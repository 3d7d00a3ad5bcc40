"""Tests for provider error translation and boundary classification."""

import httpx
import pytest

from snapsolve.domain.exceptions import (
    AuthError,
    CanceledError,
    ConfigurationError,
    EmptyResponseError,
    PayloadTooLargeError,
    ProcessingError,
    ProviderError,
    RateLimitError,
)
from snapsolve.infrastructure.llm.errors import (
    classify_error,
    status_code_of,
    translate_provider_error,
)
from tests._helpers.fakes import StatusError


def _http_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://example.test/models/x:generateContent")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


class TestStatusCode:
    def test_httpx_error(self):
        assert status_code_of(_http_error(503)) == 503

    def test_attribute(self):
        assert status_code_of(StatusError("x", 429)) == 429

    def test_absent(self):
        assert status_code_of(ValueError("x")) is None


class TestTranslateProviderError:
    @pytest.mark.parametrize(
        "status,expected",
        [(401, AuthError), (403, AuthError), (429, RateLimitError), (413, PayloadTooLargeError)],
    )
    def test_status_mapping(self, status, expected):
        error = translate_provider_error("Gemini", _http_error(status))
        assert isinstance(error, expected)
        assert error.provider == "Gemini"

    def test_token_limit_text(self):
        error = translate_provider_error(
            "OpenAI", Exception("This model's maximum context length is 128000 tokens")
        )
        assert isinstance(error, PayloadTooLargeError)

    def test_timeout(self):
        error = translate_provider_error("Gemini", httpx.ReadTimeout("slow"))
        assert isinstance(error, ProviderError)
        assert "timed out" in error.message

    def test_server_error_keeps_status(self):
        error = translate_provider_error("Claude", StatusError("overloaded", 529))
        assert type(error) is ProviderError
        assert error.status_code == 529
        assert error.user_message == "Claude server error. Please try again later."

    def test_domain_errors_pass_through(self):
        original = EmptyResponseError(provider="Gemini")
        assert translate_provider_error("Gemini", original) is original


class TestClassifyError:
    def test_typed_errors_pass_through(self):
        for error in (
            RateLimitError(provider="OpenAI"),
            CanceledError(),
            ConfigurationError(),
        ):
            assert classify_error(error) is error

    def test_untyped_provider_error_is_refined(self):
        error = classify_error(ProviderError("invalid api key supplied", provider="OpenAI"))
        assert isinstance(error, AuthError)
        assert error.user_message == "Invalid OpenAI API key. Please check your settings."

    def test_rate_limit_text(self):
        error = classify_error(RuntimeError("Rate limit hit"))
        assert isinstance(error, RateLimitError)
        assert error.provider_label == "AI provider"

    def test_plain_provider_error_kept(self):
        original = ProviderError("connection failed: reset", provider="Gemini")
        assert classify_error(original) is original

    def test_anything_else_is_processing_error(self):
        error = classify_error(KeyError("problem_statement"))
        assert isinstance(error, ProcessingError)
        assert "problem_statement" in error.user_message


class TestUserMessages:
    def test_payload_too_large(self):
        message = PayloadTooLargeError(provider="Gemini").user_message
        assert message.startswith("Your screenshots contain too much information for Gemini")

    def test_configuration_error_message_is_fixed(self):
        error = ConfigurationError("whatever detail", provider="OpenAI")
        assert error.user_message == (
            "API key not configured or invalid. Please check your settings."
        )
