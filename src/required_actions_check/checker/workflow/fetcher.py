"""Loading of reusable workflows referenced from other workflows."""

from __future__ import annotations

import logging
from typing import Protocol

import requests
import yaml

from required_actions_check.checker.github.client import GitHubClient
from required_actions_check.checker.workflow.models import MalformedWorkflowError, WorkflowDocument
from required_actions_check.checker.workflow.references import WorkflowReference

logger = logging.getLogger(__name__)


class WorkflowFetchError(Exception):
    """A referenced workflow could not be fetched or parsed."""

    def __init__(self, reference: WorkflowReference, message: str) -> None:
        super().__init__(message)
        self.reference = reference
        self.message = message


class WorkflowNotFound(WorkflowFetchError):
    pass


class WorkflowForbidden(WorkflowFetchError):
    pass


class WorkflowFetcher(Protocol):
    def fetch(self, reference: WorkflowReference) -> WorkflowDocument: ...


def parse_workflow_text(text: str) -> WorkflowDocument:
    """Parse workflow YAML.

    Raises:
        yaml.YAMLError: on invalid YAML.
        MalformedWorkflowError: if the YAML is not shaped like a workflow.
    """

    return WorkflowDocument.from_mapping(yaml.safe_load(text))


class GitHubWorkflowFetcher:
    """Fetch workflow files through the repository contents API."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    def fetch(self, reference: WorkflowReference) -> WorkflowDocument:
        logger.debug("Fetching workflow", extra={"workflow": str(reference)})
        try:
            text, _sha = self._github.get_text_file_from_repo(
                path=reference.path,
                ref=reference.ref,
                repository=reference.repository,
            )
        except FileNotFoundError as e:
            raise WorkflowNotFound(reference, str(e)) from e
        except PermissionError as e:
            raise WorkflowForbidden(reference, str(e)) from e
        except (requests.RequestException, ValueError) as e:
            raise WorkflowFetchError(reference, str(e)) from e

        try:
            return parse_workflow_text(text)
        except yaml.YAMLError as e:
            raise WorkflowFetchError(reference, f"YAML parse error: {e}") from e
        except MalformedWorkflowError as e:
            raise WorkflowFetchError(reference, str(e)) from e
