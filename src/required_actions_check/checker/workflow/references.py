"""Parsing of reusable-workflow references.

A job's `uses` takes one of two forms:

- `./<path>` for a workflow in the same repository
- `<owner>/<repo>/.github/workflows/<file>@<ref>` for a workflow elsewhere
"""

from __future__ import annotations

from dataclasses import dataclass

WORKFLOWS_DIR = ".github/workflows/"
DEFAULT_REF = "main"


class InvalidWorkflowReference(ValueError):
    """Raised when a job's `uses` is not a recognisable workflow reference."""

    def __init__(self, uses: str, reason: str) -> None:
        super().__init__(f"Invalid reusable workflow reference {uses!r}: {reason}")
        self.uses = uses
        self.reason = reason


@dataclass(frozen=True, slots=True)
class WorkflowReference:
    owner: str
    repo: str
    path: str
    ref: str

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}/{self.path}@{self.ref}"


def parse_workflow_reference(uses: str, *, owner: str, repo: str, ref: str) -> WorkflowReference:
    """Parse a job-level `uses` into a reference.

    Local references resolve against the given owner/repo/ref, which callers
    pass as the origin of the whole check.
    """

    value = uses.strip()
    if value.startswith("./"):
        path = value[2:]
        if not path:
            raise InvalidWorkflowReference(uses, "empty local path")
        return WorkflowReference(owner=owner, repo=repo, path=path, ref=ref)

    marker = "/" + WORKFLOWS_DIR
    if marker not in value:
        raise InvalidWorkflowReference(uses, f"expected '<owner>/<repo>/{WORKFLOWS_DIR}<file>'")

    full_repo, file_with_ref = value.split(marker, 1)
    parts = full_repo.split("/")
    if len(parts) != 2 or not all(parts):
        raise InvalidWorkflowReference(uses, "expected '<owner>/<repo>' before the workflow path")

    file_name, _, found_ref = file_with_ref.partition("@")
    if not file_name:
        raise InvalidWorkflowReference(uses, "missing workflow file name")

    return WorkflowReference(
        owner=parts[0],
        repo=parts[1],
        path=f"{WORKFLOWS_DIR}{file_name}",
        ref=found_ref or DEFAULT_REF,
    )
