"""Unit tests for settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from required_actions_check.checker.config import CheckerSettings
from required_actions_check.server.config import ServerSettings


def test_checker_settings_require_token(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("REQUIRED_ACTIONS_GITHUB_TOKEN", raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError):
        CheckerSettings()


def test_checker_settings_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REQUIRED_ACTIONS_GITHUB_TOKEN", "test-token")
    for name in (
        "GITHUB_BASE_URL",
        "LOG_LEVEL",
        "REQUIRED_ACTIONS_CONFIG",
        "REQUIRED_ACTIONS_STATUS_CONTEXT",
        "REQUIRED_ACTIONS_TARGET_URL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = CheckerSettings()

    assert settings.github_token == "test-token"
    assert settings.github_base_url == "https://api.github.com"
    assert settings.log_level == "INFO"
    assert settings.policy_path == Path("config.yml")
    assert settings.status_context == "required-actions-check"
    assert settings.target_url == "https://api.github.com"


def test_checker_settings_from_env_file(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("REQUIRED_ACTIONS_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("REQUIRED_ACTIONS_CONFIG", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "REQUIRED_ACTIONS_GITHUB_TOKEN=from-file\nREQUIRED_ACTIONS_CONFIG=policy/actions.yml\n",
        encoding="utf-8",
    )

    settings = CheckerSettings(_env_file=env_file)

    assert settings.github_token == "from-file"
    assert settings.policy_path == Path("policy/actions.yml")


def test_server_settings_do_not_require_token(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("REQUIRED_ACTIONS_GITHUB_TOKEN", raising=False)
    monkeypatch.setenv("REQUIRED_ACTIONS_WEBHOOK_SECRET", "s3cret")

    settings = ServerSettings()

    assert settings.github_token == ""
    assert settings.webhook_secret == "s3cret"
