"""Verifier settings and environment configuration loading."""

from __future__ import annotations

from typing import Self

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_LOG_FORMATS = frozenset({"text", "json"})


class ConfigurationError(RuntimeError):
    """Raised when the environment cannot support a verification run."""


class Settings(BaseSettings):
    """Typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # GitHub membership lookups
    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("GITHUB_TOKEN", "GH_TOKEN"),
    )
    github_api_url: str = "https://api.github.com"

    # Whole-run deadline, shared by the gpg subprocess and the GitHub call.
    verification_timeout_seconds: float = Field(default=10.0, gt=0)

    gpg_binary: str = "gpg"

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_use_utc: bool = False

    @model_validator(mode="after")
    def _normalize(self) -> Self:
        self.log_format = self.log_format.strip().lower()
        if self.log_format not in SUPPORTED_LOG_FORMATS:
            raise ValueError(
                f"LOG_FORMAT must be one of {sorted(SUPPORTED_LOG_FORMATS)}, got {self.log_format!r}.",
            )
        self.log_level = self.log_level.strip().upper() or "INFO"
        self.github_api_url = self.github_api_url.strip().rstrip("/")
        self.github_token = self.github_token.strip()
        return self

    def require_github_token(self) -> str:
        """Return the GitHub token or fail the run before any verification starts."""
        if not self.github_token:
            msg = "GITHUB_TOKEN (or GH_TOKEN) must be set to query organization membership."
            raise ConfigurationError(msg)
        return self.github_token
