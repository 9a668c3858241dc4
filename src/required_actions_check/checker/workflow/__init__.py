"""Workflow documents, reusable-workflow references, and the recursive resolver."""

from required_actions_check.checker.workflow.fetcher import (
    GitHubWorkflowFetcher,
    WorkflowFetcher,
    WorkflowFetchError,
    WorkflowForbidden,
    WorkflowNotFound,
)
from required_actions_check.checker.workflow.matching import MatchStrategy, matcher_for
from required_actions_check.checker.workflow.models import (
    Job,
    MalformedWorkflowError,
    Step,
    WorkflowDocument,
)
from required_actions_check.checker.workflow.references import (
    InvalidWorkflowReference,
    WorkflowReference,
    parse_workflow_reference,
)
from required_actions_check.checker.workflow.resolver import (
    FetchFailure,
    ResolveResult,
    resolve_workflow,
)

__all__ = [
    "FetchFailure",
    "GitHubWorkflowFetcher",
    "InvalidWorkflowReference",
    "Job",
    "MalformedWorkflowError",
    "MatchStrategy",
    "ResolveResult",
    "Step",
    "WorkflowDocument",
    "WorkflowFetchError",
    "WorkflowFetcher",
    "WorkflowForbidden",
    "WorkflowNotFound",
    "WorkflowReference",
    "matcher_for",
    "parse_workflow_reference",
    "resolve_workflow",
]
