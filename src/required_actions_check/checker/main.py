"""CLI entrypoint for the required-actions checker."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import yaml
from pydantic import ValidationError

from required_actions_check import __version__
from required_actions_check.checker.config import CheckerSettings
from required_actions_check.checker.github.client import GitHubClient
from required_actions_check.checker.logging import configure_logging
from required_actions_check.checker.policy import PolicyError, load_policy
from required_actions_check.checker.pull_request import check_pull_request
from required_actions_check.checker.workflow.fetcher import (
    GitHubWorkflowFetcher,
    parse_workflow_text,
)
from required_actions_check.checker.workflow.models import MalformedWorkflowError
from required_actions_check.checker.workflow.references import WorkflowReference
from required_actions_check.checker.workflow.resolver import ResolveResult, resolve_workflow

logger = logging.getLogger(__name__)

EXIT_SATISFIED = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_NOT_SATISFIED = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="required-actions-check",
        description="Check that GitHub workflows use a required set of actions",
    )
    parser.add_argument(
        "--version", action="version", version=f"required-actions-check {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_pr = subparsers.add_parser(
        "check-pr",
        help="Check a pull request's workflows and post the commit status",
    )
    check_pr.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        required=True,
        help="Base repository in the form 'owner/repo'",
    )
    check_pr.add_argument("--pr-number", type=int, required=True, help="Pull request number")
    check_pr.add_argument(
        "--config",
        default=None,
        help="Policy file (defaults to REQUIRED_ACTIONS_CONFIG or ./config.yml)",
    )
    check_pr.add_argument(
        "--no-status",
        action="store_true",
        help="Report the outcome without posting a commit status",
    )

    check_workflow = subparsers.add_parser(
        "check-workflow",
        help="Check a single workflow and the reusable workflows it calls",
    )
    check_workflow.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        required=True,
        help="Repository the workflow belongs to, in the form 'owner/repo'",
    )
    check_workflow.add_argument(
        "--path",
        default="",
        help="Workflow path in the repository, e.g. '.github/workflows/ci.yml'",
    )
    check_workflow.add_argument(
        "--ref",
        default="main",
        help="Git ref the workflow and its local references are read at",
    )
    check_workflow.add_argument(
        "--file",
        default=None,
        help="Read the root workflow from this local file instead of the repository",
    )
    check_workflow.add_argument(
        "--config",
        default=None,
        help="Policy file (defaults to REQUIRED_ACTIONS_CONFIG or ./config.yml)",
    )

    serve = subparsers.add_parser("serve", help="Run the webhook server")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    serve.add_argument("--port", type=int, default=3000, help="Port to listen on")

    return parser


def _print_result(result: ResolveResult) -> None:
    print(f"satisfied: {result.satisfied}")
    print(f"found: {', '.join(sorted(result.found)) or '(none)'}")
    for failure in result.failures:
        print(f"unreachable: {failure.uses} ({failure.kind}: {failure.message})")


def _check_workflow(args: argparse.Namespace, settings: CheckerSettings) -> int:
    if not args.file and not args.path:
        print("Either --path or --file is required", file=sys.stderr)
        return EXIT_USAGE

    policy = load_policy(Path(args.config) if args.config else settings.policy_path)
    owner, _, repo = args.repository.partition("/")

    github = GitHubClient(
        token=settings.github_token,
        repository=args.repository,
        base_url=settings.github_base_url,
    )
    try:
        if args.file:
            text = Path(args.file).read_text(encoding="utf-8")
        else:
            text, _sha = github.get_text_file_from_repo(path=args.path, ref=args.ref)
        document = parse_workflow_text(text)

        root = None
        if args.path:
            root = WorkflowReference(owner=owner, repo=repo, path=args.path, ref=args.ref)

        result = resolve_workflow(
            document,
            policy.required_actions,
            policy.directives,
            GitHubWorkflowFetcher(github),
            owner,
            repo,
            args.ref,
            root=root,
        )
        _print_result(result)
        return EXIT_SATISFIED if result.satisfied else EXIT_NOT_SATISFIED
    finally:
        github.close()


def _check_pr(args: argparse.Namespace, settings: CheckerSettings) -> int:
    policy = load_policy(Path(args.config) if args.config else settings.policy_path)

    github = GitHubClient(
        token=settings.github_token,
        repository=args.repository,
        base_url=settings.github_base_url,
    )
    try:
        pr = github.get_pull_request(pull_number=args.pr_number)
        outcome = check_pull_request(
            pr=pr,
            policy=policy,
            github=github,
            status_context=settings.status_context,
            target_url=settings.target_url,
            post_status=not args.no_status,
        )
        print(f"{outcome.state}: {outcome.description}")
        if outcome.satisfied_by:
            print(f"satisfied by: {outcome.satisfied_by}")
        return EXIT_SATISFIED if outcome.state == "success" else EXIT_NOT_SATISFIED
    finally:
        github.close()


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from required_actions_check.server.config import ServerSettings

    configure_logging(ServerSettings().log_level)
    uvicorn.run(
        "required_actions_check.server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
    )
    return EXIT_SATISFIED


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        # The server reads its own settings and does not need a token at startup.
        return _serve(args)

    try:
        settings = CheckerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; print a concise actionable error.
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings.log_level)
    logger.debug("Settings loaded", extra={"policy_path": str(settings.policy_path)})

    try:
        if args.command == "check-pr":
            return _check_pr(args, settings)
        if args.command == "check-workflow":
            return _check_workflow(args, settings)

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_USAGE

    except PolicyError as e:
        logger.error(str(e), extra={"path": str(e.path)})
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    except (yaml.YAMLError, MalformedWorkflowError) as e:
        logger.error(f"Root workflow could not be parsed: {e}")
        print(f"Root workflow could not be parsed: {e}", file=sys.stderr)
        return EXIT_ERROR

    except Exception:
        logger.exception("Command failed")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
