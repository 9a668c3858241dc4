"""Test configuration and fixtures."""

from __future__ import annotations

import textwrap
from collections.abc import Callable

import pytest

from required_actions_check.checker.policy import Directives, RequiredAction, RequiredActionsPolicy
from required_actions_check.checker.workflow.fetcher import (
    WorkflowFetchError,
    WorkflowNotFound,
    parse_workflow_text,
)
from required_actions_check.checker.workflow.models import WorkflowDocument
from required_actions_check.checker.workflow.references import WorkflowReference

FetcherEntries = dict[str, WorkflowDocument | WorkflowFetchError]


class FakeFetcher:
    """In-memory fetcher keyed by "owner/repo/path@ref".

    Unknown references raise WorkflowNotFound, like a 404 from GitHub.
    """

    def __init__(self, entries: FetcherEntries) -> None:
        self.entries = entries
        self.calls: list[WorkflowReference] = []

    def fetch(self, reference: WorkflowReference) -> WorkflowDocument:
        self.calls.append(reference)
        entry = self.entries.get(str(reference))
        if entry is None:
            raise WorkflowNotFound(reference, f"File not found: {reference.path}")
        if isinstance(entry, WorkflowFetchError):
            raise entry
        return entry


@pytest.fixture
def workflow() -> Callable[[str], WorkflowDocument]:
    """Parse an indented YAML snippet into a workflow document."""

    def _load(text: str) -> WorkflowDocument:
        return parse_workflow_text(textwrap.dedent(text))

    return _load


@pytest.fixture
def make_fetcher() -> Callable[[FetcherEntries], FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def required_actions() -> list[RequiredAction]:
    return [RequiredAction(name="actions/checkout"), RequiredAction(name="actions/setup-node")]


@pytest.fixture
def reusable() -> Directives:
    return Directives(check_reusable_workflows=True)


@pytest.fixture
def policy(required_actions: list[RequiredAction], reusable: Directives) -> RequiredActionsPolicy:
    return RequiredActionsPolicy(
        required_actions=required_actions,
        break_ceiling={"label": "allow-bypass", "title": "[skip required-actions]"},
        directives=reusable,
    )
