from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from snapsolve.models.types import ProviderKind


class Settings(BaseSettings):
    # Application
    app_name: str = "SnapSolve"
    version: str = "0.1.0"
    environment: str = Field(default="development")

    # Defaults for the first config snapshot
    default_provider: str = Field(default=ProviderKind.OPENAI.value)
    api_key: Optional[str] = Field(default=None)
    default_mode: str = Field(default="coding")
    default_language: str = Field(default="python")

    # Provider calls
    request_timeout_sec: float = Field(default=60.0)
    provider_max_retries: int = Field(default=0)  # rate limits are surfaced, not retried
    temperature: float = Field(default=0.2)
    max_output_tokens: int = Field(default=4000)
    solution_max_output_tokens: int = Field(default=8192)
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )

    # Default model per provider
    openai_default_model: str = Field(default="gpt-4.1")
    gemini_default_model: str = Field(default="gemini-2.0-flash")
    anthropic_default_model: str = Field(default="claude-3-7-sonnet-20250219")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    model_config = SettingsConfigDict(
        env_prefix="SNAPSOLVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def default_model_for(self, kind: ProviderKind) -> str:
        """Fallback model when the config snapshot names none for a stage."""
        return {
            ProviderKind.OPENAI: self.openai_default_model,
            ProviderKind.GEMINI: self.gemini_default_model,
            ProviderKind.ANTHROPIC: self.anthropic_default_model,
        }[kind]


# Global settings instance
settings = Settings()
