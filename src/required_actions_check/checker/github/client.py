"""GitHub API client wrapper.

This intentionally wraps PyGithub to keep GitHub calls out of the checker and make tests easy.
File contents are read over plain REST so that any repository, not only the
connected one, can be read and 403/404 responses can be told apart.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Literal

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)

CommitState = Literal["error", "failure", "pending", "success"]


@dataclass(frozen=True, slots=True)
class RegisteredWorkflow:
    """A workflow registered with GitHub Actions for a repository."""

    name: str
    path: str
    state: str


@dataclass(frozen=True, slots=True)
class PullRequestInfo:
    """The pull request fields the check needs."""

    owner: str
    repo: str
    number: int
    title: str
    html_url: str
    labels: tuple[str, ...]
    head_ref: str
    head_sha: str

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"


class GitHubClient:
    """Small wrapper around PyGithub for the operations the check needs."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository:
            raise ValueError("GitHub repository is required")

        self._repository_name = repository.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "required-actions-check",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

        self._repo = self._github.get_repo(self._repository_name)
        logger.info(
            "Authenticated with GitHub and connected to repository",
            extra={"repo": self._repository_name},
        )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _repo_url(self, *, repository: str, path: str) -> str:
        repository = repository.strip().strip("/")
        path = path.lstrip("/")
        if not path:
            return f"{self._rest_base_url}/repos/{repository}"
        return f"{self._rest_base_url}/repos/{repository}/{path}"

    def get_text_file_from_repo(
        self,
        *,
        path: str,
        ref: str = "",
        repository: str | None = None,
    ) -> tuple[str, str]:
        """Return (text_content, sha) for a file in a repo at a ref.

        Raises:
            FileNotFoundError: if not present (404).
            PermissionError: if the token may not read it (403).
            requests.HTTPError: for any other error status.
        """

        repo = (repository or self._repository_name).strip()
        norm = path.lstrip("/")
        url = self._repo_url(repository=repo, path=f"contents/{norm}")
        params: dict[str, str] = {}
        if ref.strip():
            params["ref"] = ref

        resp = self._session.get(url, params=params or None, timeout=30)
        if resp.status_code == 404:
            raise FileNotFoundError(f"File not found: {repo}/{norm}")
        if resp.status_code == 403:
            raise PermissionError(f"Access denied: {repo}/{norm}")
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()

        if not isinstance(data, dict):
            raise ValueError(f"Unexpected contents response for {norm}: not a file")

        file_sha = data.get("sha")
        if not isinstance(file_sha, str) or not file_sha.strip():
            raise ValueError("Unexpected contents response: missing sha")

        encoding = data.get("encoding")
        content = data.get("content")
        if encoding == "base64" and isinstance(content, str):
            raw = base64.b64decode(content.encode("utf-8"))
            return raw.decode("utf-8"), file_sha

        # Fallback: treat as plain string when possible.
        if isinstance(content, str):
            return content, file_sha
        raise ValueError("Unexpected contents response: missing content")

    def list_workflows(self) -> list[RegisteredWorkflow]:
        """List workflows registered with GitHub Actions for the connected repository."""

        logger.debug("Listing workflows", extra={"repo": self._repository_name})
        return [
            RegisteredWorkflow(name=w.name, path=w.path, state=w.state)
            for w in self._repo.get_workflows()
        ]

    def get_pull_request(self, *, pull_number: int) -> PullRequestInfo:
        if pull_number <= 0:
            raise ValueError("pull_number must be a positive integer")

        logger.debug(f"Fetching pull request #{pull_number}")
        pr = self._repo.get_pull(pull_number)
        base_repo = pr.base.repo
        return PullRequestInfo(
            owner=base_repo.owner.login,
            repo=base_repo.name,
            number=pr.number,
            title=pr.title or "",
            html_url=pr.html_url or "",
            labels=tuple(label.name for label in pr.labels),
            head_ref=pr.head.ref,
            head_sha=pr.head.sha,
        )

    def create_commit_status(
        self,
        *,
        sha: str,
        state: CommitState,
        context: str,
        description: str,
        target_url: str = "",
    ) -> None:
        if not sha.strip():
            raise ValueError("sha is required")

        commit = self._repo.get_commit(sha)
        if target_url:
            commit.create_status(
                state=state,
                target_url=target_url,
                description=description,
                context=context,
            )
        else:
            commit.create_status(state=state, description=description, context=context)
        logger.info(
            "Commit status set",
            extra={"repo": self._repository_name, "sha": sha, "state": state, "context": context},
        )

    def close(self) -> None:
        """Close the underlying HTTP connections."""

        self._session.close()
        if self._github is not None:
            self._github.close()
