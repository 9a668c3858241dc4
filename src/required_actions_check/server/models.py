"""Pydantic models for the webhook server."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from required_actions_check.checker.github.client import PullRequestInfo

HANDLED_ACTIONS = frozenset(
    {"opened", "synchronize", "labeled", "unlabeled", "edited", "reopened"}
)


class Owner(BaseModel):
    login: str


class Repository(BaseModel):
    name: str
    owner: Owner


class Label(BaseModel):
    name: str


class BaseRef(BaseModel):
    repo: Repository


class HeadRef(BaseModel):
    ref: str
    sha: str


class PullRequest(BaseModel):
    number: int
    title: str = ""
    html_url: str = ""
    labels: list[Label] = Field(default_factory=list)
    head: HeadRef
    base: BaseRef


class PullRequestEvent(BaseModel):
    """The subset of a `pull_request` webhook payload the check reads."""

    action: str
    pull_request: PullRequest

    def to_pull_request_info(self) -> PullRequestInfo:
        pr = self.pull_request
        return PullRequestInfo(
            owner=pr.base.repo.owner.login,
            repo=pr.base.repo.name,
            number=pr.number,
            title=pr.title,
            html_url=pr.html_url,
            labels=tuple(label.name for label in pr.labels),
            head_ref=pr.head.ref,
            head_sha=pr.head.sha,
        )


class WebhookResponse(BaseModel):
    status: Literal["ignored", "checked"]
    state: Literal["success", "failure"] | None = None
    description: str | None = None
    skipped: bool = False
    satisfied_by: str | None = None
    found_actions: list[str] = Field(default_factory=list)
