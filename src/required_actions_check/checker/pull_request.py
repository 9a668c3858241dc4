"""Pull request check: resolve the repository's workflows and post a commit status."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests
import yaml

from required_actions_check.checker.config import DEFAULT_STATUS_CONTEXT
from required_actions_check.checker.github.client import CommitState, GitHubClient, PullRequestInfo
from required_actions_check.checker.policy import BreakCeiling, RequiredActionsPolicy
from required_actions_check.checker.workflow.fetcher import (
    GitHubWorkflowFetcher,
    WorkflowFetcher,
    parse_workflow_text,
)
from required_actions_check.checker.workflow.references import WorkflowReference
from required_actions_check.checker.workflow.resolver import resolve_workflow

logger = logging.getLogger(__name__)

BREAK_CEILING_DESCRIPTION = "Break ceiling condition met, skipping workflow checks."
SUCCESS_DESCRIPTION = "All workflows have the required actions."
FAILURE_DESCRIPTION = "One or more workflows are missing required actions."


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    state: CommitState
    description: str
    skipped: bool = False
    satisfied_by: str | None = None
    found_actions: frozenset[str] = frozenset()


def break_ceiling_reason(ceiling: BreakCeiling, pr: PullRequestInfo) -> str | None:
    """Return why the check is bypassed for `pr`, or None."""

    if ceiling.label and ceiling.label in pr.labels:
        return "label"
    if ceiling.title and ceiling.title in pr.title:
        return "title"
    return None


def check_pull_request(
    *,
    pr: PullRequestInfo,
    policy: RequiredActionsPolicy,
    github: GitHubClient,
    fetcher: WorkflowFetcher | None = None,
    status_context: str = DEFAULT_STATUS_CONTEXT,
    target_url: str = "",
    post_status: bool = True,
) -> CheckOutcome:
    """Check the workflows of `pr`'s base repository at the PR head ref.

    One workflow that reaches every required action is enough for success.
    """

    reason = break_ceiling_reason(policy.break_ceiling, pr)
    if reason is not None:
        logger.info(
            f"Break ceiling {reason} found, skipping workflow checks.",
            extra={"pr": pr.html_url},
        )
        outcome = CheckOutcome(state="success", description=BREAK_CEILING_DESCRIPTION, skipped=True)
        if post_status:
            _post(github, pr, outcome, status_context=status_context, target_url=target_url)
        return outcome

    logger.info("Checking workflows for PR", extra={"pr": pr.html_url})
    fetcher = fetcher or GitHubWorkflowFetcher(github)

    satisfied_by: str | None = None
    found: frozenset[str] = frozenset()
    for registered in github.list_workflows():
        root = WorkflowReference(
            owner=pr.owner, repo=pr.repo, path=registered.path, ref=pr.head_ref
        )
        try:
            text, _sha = github.get_text_file_from_repo(
                path=registered.path, ref=pr.head_ref, repository=pr.repository
            )
            document = parse_workflow_text(text)
        except (
            OSError,
            requests.RequestException,
            ValueError,
            yaml.YAMLError,
        ) as e:
            logger.error(
                f"Skipping workflow {root}: {e}",
                extra={"pr": pr.html_url, "workflow": registered.path},
            )
            continue

        result = resolve_workflow(
            document,
            policy.required_actions,
            policy.directives,
            fetcher,
            pr.owner,
            pr.repo,
            pr.head_ref,
            root=root,
        )
        found = found | result.found
        logger.debug(
            "Workflow checked",
            extra={
                "workflow": registered.path,
                "satisfied": result.satisfied,
                "found": sorted(result.found),
                "failed_references": [f.uses for f in result.failures],
            },
        )
        if result.satisfied:
            satisfied_by = registered.path
            found = result.found
            break

    all_valid = satisfied_by is not None
    logger.info(f"All workflows valid: {all_valid}", extra={"pr": pr.html_url})

    outcome = CheckOutcome(
        state="success" if all_valid else "failure",
        description=SUCCESS_DESCRIPTION if all_valid else FAILURE_DESCRIPTION,
        satisfied_by=satisfied_by,
        found_actions=found,
    )
    if post_status:
        _post(github, pr, outcome, status_context=status_context, target_url=target_url)
    return outcome


def _post(
    github: GitHubClient,
    pr: PullRequestInfo,
    outcome: CheckOutcome,
    *,
    status_context: str,
    target_url: str,
) -> None:
    logger.info("Setting status check for PR", extra={"pr": pr.html_url, "state": outcome.state})
    github.create_commit_status(
        sha=pr.head_sha,
        state=outcome.state,
        context=status_context,
        description=outcome.description,
        target_url=target_url,
    )
