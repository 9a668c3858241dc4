"""Configuration for the webhook server.

The server can start without a GitHub token so that health checks work before
credentials are provisioned. Webhook deliveries that need GitHub access
validate credentials at request time.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from required_actions_check.checker.config import DEFAULT_STATUS_CONTEXT


class ServerSettings(BaseSettings):
    """Settings for the webhook server.

    Notes:
        - Unlike :class:`required_actions_check.checker.config.CheckerSettings`,
          this does NOT require a GitHub token at startup.
        - When `webhook_secret` is empty, signatures are not verified.
    """

    github_token: str = Field(default="", validation_alias="REQUIRED_ACTIONS_GITHUB_TOKEN")
    github_base_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_BASE_URL"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    webhook_secret: str = Field(
        default="",
        validation_alias="REQUIRED_ACTIONS_WEBHOOK_SECRET",
        description="Secret configured on the GitHub webhook, used to verify X-Hub-Signature-256.",
    )

    policy_path: Path = Field(
        default=Path("config.yml"), validation_alias="REQUIRED_ACTIONS_CONFIG"
    )
    status_context: str = Field(
        default=DEFAULT_STATUS_CONTEXT, validation_alias="REQUIRED_ACTIONS_STATUS_CONTEXT"
    )
    target_url: str = Field(
        default="https://api.github.com", validation_alias="REQUIRED_ACTIONS_TARGET_URL"
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")
