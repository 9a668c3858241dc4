"""Configuration for the required-actions checker.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `REQUIRED_ACTIONS_GITHUB_TOKEN`.

The policy itself (required actions, break ceiling, directives) lives in a YAML
file whose path is configured here; see :mod:`required_actions_check.checker.policy`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATUS_CONTEXT = "required-actions-check"


class CheckerSettings(BaseSettings):
    """Settings for the command line checker.

    Environment variables:
    - REQUIRED_ACTIONS_GITHUB_TOKEN
    - GITHUB_BASE_URL                   (optional)
    - LOG_LEVEL                         (optional)
    - REQUIRED_ACTIONS_CONFIG           (optional)
    - REQUIRED_ACTIONS_STATUS_CONTEXT   (optional)
    - REQUIRED_ACTIONS_TARGET_URL       (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `CheckerSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="REQUIRED_ACTIONS_GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    policy_path: Path = Field(
        default=Path("config.yml"),
        validation_alias="REQUIRED_ACTIONS_CONFIG",
        description="Path to the required-actions policy file",
    )

    status_context: str = Field(
        default=DEFAULT_STATUS_CONTEXT,
        validation_alias="REQUIRED_ACTIONS_STATUS_CONTEXT",
        description="Context name of the commit status posted on pull requests",
    )
    target_url: str = Field(
        default="https://api.github.com",
        validation_alias="REQUIRED_ACTIONS_TARGET_URL",
        description="Link attached to the commit status",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> CheckerSettings:
        if not self.github_token.strip():
            raise ValueError("REQUIRED_ACTIONS_GITHUB_TOKEN is required")
        return self
