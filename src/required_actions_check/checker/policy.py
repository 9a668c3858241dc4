"""Required-actions policy loaded from `config.yml`.

Example:

    requiredActions:
      - name: actions/checkout
      - actions/setup-node
    breakCeiling:
      label: allow-bypass
      title: "[skip-actions-check]"
    directives:
      checkReusableWorkflows: true
      matchStrategy: substring

snake_case keys (`required_actions`, `break_ceiling`, `check_reusable_workflows`,
`match_strategy`) are accepted as well.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from required_actions_check.checker.workflow.matching import MatchStrategy


class PolicyError(Exception):
    """Raised when the policy file is missing or invalid."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Invalid policy file {path}: {message}")
        self.path = path


class RequiredAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)


class BreakCeiling(BaseModel):
    """Label or title that bypasses the check for a pull request."""

    model_config = ConfigDict(frozen=True)

    label: str | None = None
    title: str | None = None


class Directives(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    check_reusable_workflows: bool = Field(default=False, alias="checkReusableWorkflows")
    match_strategy: MatchStrategy = Field(default=MatchStrategy.SUBSTRING, alias="matchStrategy")


class RequiredActionsPolicy(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    required_actions: list[RequiredAction] = Field(alias="requiredActions", min_length=1)
    break_ceiling: BreakCeiling = Field(default_factory=BreakCeiling, alias="breakCeiling")
    directives: Directives = Field(default_factory=Directives)

    @field_validator("required_actions", mode="before")
    @classmethod
    def _coerce_names(cls, value: object) -> object:
        if isinstance(value, list):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value


def load_policy(path: Path) -> RequiredActionsPolicy:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PolicyError(path, str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PolicyError(path, f"YAML parse error: {e}") from e

    if not isinstance(data, dict):
        raise PolicyError(path, "expected a mapping at the top level")

    try:
        return RequiredActionsPolicy.model_validate(data)
    except ValidationError as e:
        raise PolicyError(path, str(e)) from e
