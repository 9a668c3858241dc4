"""Recursive check that a workflow graph invokes every required action.

The root workflow is searched first. Only when its own steps do not cover every
required action are the reusable workflows it calls fetched and searched, with
matches from every branch counting towards the same requirement.

The set of found action names is passed into each recursive call and returned
from it; callers merge the returned set, so no set is shared between calls.
Fetch failures never abort the check: the failing branch contributes nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from required_actions_check.checker.workflow.fetcher import (
    WorkflowFetcher,
    WorkflowFetchError,
    WorkflowForbidden,
    WorkflowNotFound,
)
from required_actions_check.checker.workflow.matching import ActionMatcher, matcher_for
from required_actions_check.checker.workflow.models import WorkflowDocument
from required_actions_check.checker.workflow.references import (
    InvalidWorkflowReference,
    WorkflowReference,
    parse_workflow_reference,
)

if TYPE_CHECKING:
    from required_actions_check.checker.policy import Directives, RequiredAction

logger = logging.getLogger(__name__)

FailureKind = Literal["not_found", "forbidden", "error", "invalid_reference"]


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """A reusable-workflow branch that contributed nothing because it could not be loaded."""

    uses: str
    kind: FailureKind
    message: str
    reference: WorkflowReference | None = None


@dataclass(frozen=True, slots=True)
class ResolveResult:
    satisfied: bool
    found: frozenset[str]
    failures: tuple[FetchFailure, ...] = ()


def resolve_workflow(
    workflow: WorkflowDocument,
    required_actions: Sequence[RequiredAction],
    directives: Directives,
    fetcher: WorkflowFetcher,
    owner: str,
    repo: str,
    ref: str,
    found_so_far: Iterable[str] | None = None,
    *,
    root: WorkflowReference | None = None,
) -> ResolveResult:
    """Check whether `workflow` and the workflows it calls use every required action.

    Args:
        workflow: Root workflow document.
        required_actions: Actions that must all be found. Duplicates are ignored.
        directives: Whether to descend into reusable workflows, and how to match.
        fetcher: Loads referenced workflows.
        owner: Owner that local (`./...`) references resolve against.
        repo: Repository that local references resolve against.
        ref: Git ref that local references resolve against.
        found_so_far: Action names already found by an earlier pass.
        root: Reference of `workflow` itself, so a workflow calling itself is
            recognised as a cycle.

    Returns:
        The verdict, every required action name found, and the branches that
        could not be loaded. A `False` verdict does not say whether the
        missing actions are absent or sit behind a failed branch; inspect
        `failures` for that.
    """

    traversal = _Traversal(
        required=frozenset(action.name for action in required_actions),
        directives=directives,
        matcher=matcher_for(directives.match_strategy),
        fetcher=fetcher,
        owner=owner,
        repo=repo,
        ref=ref,
    )
    if root is not None:
        traversal.visited.add(root)

    satisfied, found = traversal.resolve(workflow, frozenset(found_so_far or ()))
    return ResolveResult(satisfied=satisfied, found=found, failures=tuple(traversal.failures))


class _Traversal:
    def __init__(
        self,
        *,
        required: frozenset[str],
        directives: Directives,
        matcher: ActionMatcher,
        fetcher: WorkflowFetcher,
        owner: str,
        repo: str,
        ref: str,
    ) -> None:
        self.required = required
        self.directives = directives
        self.matcher = matcher
        self.fetcher = fetcher
        self.owner = owner
        self.repo = repo
        self.ref = ref
        self.visited: set[WorkflowReference] = set()
        self.failures: list[FetchFailure] = []

    def covered(self, found: frozenset[str]) -> bool:
        return self.required <= found

    def match_steps(self, workflow: WorkflowDocument) -> set[str]:
        matched: set[str] = set()
        for job in workflow.jobs.values():
            for step in job.steps:
                if step.uses is None:
                    continue
                for name in self.required:
                    if self.matcher(name, step.uses):
                        matched.add(name)
        return matched

    def resolve(
        self, workflow: WorkflowDocument, found: frozenset[str]
    ) -> tuple[bool, frozenset[str]]:
        found = found | self.match_steps(workflow)
        if self.covered(found):
            return True, found

        if not self.directives.check_reusable_workflows:
            return False, found

        for job_name, job in workflow.jobs.items():
            if job.uses is None:
                continue

            reference = self.load_reference(job_name, job.uses)
            if reference is None:
                continue
            if reference in self.visited:
                logger.debug(
                    "Skipping already visited workflow",
                    extra={"job": job_name, "workflow": str(reference)},
                )
                continue
            self.visited.add(reference)

            document = self.fetch(job.uses, reference)
            if document is None:
                continue

            satisfied, found = self.resolve(document, found)
            if satisfied:
                return True, found

        return self.covered(found), found

    def load_reference(self, job_name: str, uses: str) -> WorkflowReference | None:
        # Local references always resolve against the origin of the check.
        try:
            return parse_workflow_reference(uses, owner=self.owner, repo=self.repo, ref=self.ref)
        except InvalidWorkflowReference as e:
            logger.error(
                f"Invalid workflow reference in job {job_name!r}: {e.reason}",
                extra={"job": job_name, "uses": uses},
            )
            self.failures.append(FetchFailure(uses=uses, kind="invalid_reference", message=str(e)))
            return None

    def fetch(self, uses: str, reference: WorkflowReference) -> WorkflowDocument | None:
        try:
            return self.fetcher.fetch(reference)
        except WorkflowNotFound as e:
            logger.error(f"Workflow not found: Unable to access {reference}")
            self.failures.append(_failure(uses, "not_found", e))
        except WorkflowForbidden as e:
            logger.error(f"Permission denied: Unable to access {reference}")
            self.failures.append(_failure(uses, "forbidden", e))
        except WorkflowFetchError as e:
            logger.error(f"Error fetching workflow: {reference}, Message Details: {e.message}")
            self.failures.append(_failure(uses, "error", e))
        return None


def _failure(uses: str, kind: FailureKind, error: WorkflowFetchError) -> FetchFailure:
    return FetchFailure(uses=uses, kind=kind, message=error.message, reference=error.reference)
