# ruff: noqa: S101
from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from keyverify.core.config import ConfigurationError, Settings
from keyverify.core.logging import bind_logger, configure_logging
from keyverify.core.time import Deadline, DeadlineExceeded

_ENV_KEYS = (
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "GITHUB_API_URL",
    "VERIFICATION_TIMEOUT_SECONDS",
    "GPG_BINARY",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_USE_UTC",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_settings_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = Settings()
    assert settings.github_token == ""
    assert settings.github_api_url == "https://api.github.com"
    assert settings.verification_timeout_seconds == pytest.approx(10.0)
    assert settings.gpg_binary == "gpg"
    assert settings.log_format == "text"


def test_settings_read_token_from_either_variable(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("GH_TOKEN", " gh-token ")
    assert Settings().require_github_token() == "gh-token"

    clean_env.setenv("GITHUB_TOKEN", "primary-token")
    assert Settings().github_token == "primary-token"


def test_missing_token_is_a_configuration_error(clean_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(ConfigurationError):
        Settings().require_github_token()


def test_settings_reject_unknown_log_format_and_bad_timeout(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LOG_FORMAT", "xml")
    with pytest.raises(ValidationError):
        Settings()

    clean_env.setenv("LOG_FORMAT", "JSON")
    clean_env.setenv("VERIFICATION_TIMEOUT_SECONDS", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_settings_load_dotenv_from_working_directory(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("GITHUB_TOKEN=from-dotenv\nGITHUB_API_URL=https://ghe.local/api/v3/\n")
    settings = Settings()
    assert settings.github_token == "from-dotenv"
    assert settings.github_api_url == "https://ghe.local/api/v3"


def test_deadline_tracks_remaining_budget() -> None:
    now = [100.0]
    deadline = Deadline(seconds=5.0, clock=lambda: now[0])

    assert deadline.remaining() == pytest.approx(5.0)
    now[0] = 103.0
    assert deadline.timeout_for("lookup") == pytest.approx(2.0)
    now[0] = 106.0
    assert deadline.expired() is True
    with pytest.raises(DeadlineExceeded, match="before lookup"):
        deadline.timeout_for("lookup")


def test_deadline_requires_positive_budget() -> None:
    with pytest.raises(ValueError):
        Deadline(seconds=0)


def test_json_logging_includes_bound_context() -> None:
    stream = io.StringIO()
    logger = bind_logger(configure_logging(level="DEBUG", log_format="json", stream=stream), github="alice")
    logger.bind(org="acme").info("verify.run.started", extra={"location": "key.asc"})

    record = json.loads(stream.getvalue().strip())
    assert record["event"] == "verify.run.started"
    assert record["level"] == "INFO"
    assert record["logger"] == "keyverify"
    assert record["github"] == "alice"
    assert record["org"] == "acme"
    assert record["location"] == "key.asc"


def test_text_logging_appends_sorted_context() -> None:
    stream = io.StringIO()
    logger = bind_logger(configure_logging(level="INFO", log_format="text", stream=stream), org="acme")
    logger.debug("verify.hidden")
    logger.warning("verify.key.load_failed", extra={"error": "missing"})

    output = stream.getvalue()
    assert "verify.hidden" not in output
    assert "WARNING keyverify verify.key.load_failed error=missing org=acme" in output
