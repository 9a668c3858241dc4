"""Unit tests for the recursive workflow resolver."""

from __future__ import annotations

import logging

import pytest

from required_actions_check.checker.policy import Directives, RequiredAction
from required_actions_check.checker.workflow.fetcher import WorkflowFetchError, WorkflowForbidden
from required_actions_check.checker.workflow.matching import MatchStrategy
from required_actions_check.checker.workflow.references import WorkflowReference
from required_actions_check.checker.workflow.resolver import resolve_workflow

ROOT = """
jobs:
  checkout:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v3
  build:
    uses: ./.github/workflows/build.yml
"""

BUILD = """
jobs:
  node:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/setup-node@v2
"""


def test_direct_steps_satisfy_without_fetching(
    workflow, make_fetcher, required_actions, reusable
) -> None:
    doc = workflow(
        """
        jobs:
          test:
            steps:
              - name: no uses here
                run: echo hi
              - uses: actions/checkout@v4
              - uses: actions/setup-node@v4
          deploy:
            uses: ./.github/workflows/deploy.yml
        """
    )
    fetcher = make_fetcher({})

    result = resolve_workflow(doc, required_actions, reusable, fetcher, "o", "r", "feature")

    assert result.satisfied is True
    assert result.found == {"actions/checkout", "actions/setup-node"}
    assert fetcher.calls == []


def test_local_reusable_workflow_completes_requirement(
    workflow, make_fetcher, required_actions, reusable
) -> None:
    fetcher = make_fetcher({"o/r/.github/workflows/build.yml@feature": workflow(BUILD)})

    result = resolve_workflow(
        workflow(ROOT), required_actions, reusable, fetcher, "o", "r", "feature"
    )

    assert result.satisfied is True
    assert result.found == {"actions/checkout", "actions/setup-node"}
    assert result.failures == ()


def test_reusable_workflows_ignored_when_directive_is_off(
    workflow, make_fetcher, required_actions
) -> None:
    fetcher = make_fetcher({"o/r/.github/workflows/build.yml@feature": workflow(BUILD)})

    result = resolve_workflow(
        workflow(ROOT), required_actions, Directives(), fetcher, "o", "r", "feature"
    )

    assert result.satisfied is False
    assert result.found == {"actions/checkout"}
    assert fetcher.calls == []


def test_local_references_resolve_against_origin_not_intermediate_repo(
    workflow, make_fetcher, reusable
) -> None:
    root = workflow(
        """
        jobs:
          call:
            uses: other/shared/.github/workflows/middle.yml@v1
        """
    )
    middle = workflow(
        """
        jobs:
          call-local:
            uses: ./.github/workflows/leaf.yml
        """
    )
    leaf = workflow(
        """
        jobs:
          leaf:
            steps:
              - uses: actions/checkout@v4
        """
    )
    fetcher = make_fetcher(
        {
            "other/shared/.github/workflows/middle.yml@v1": middle,
            "o/r/.github/workflows/leaf.yml@pr-branch": leaf,
        }
    )

    result = resolve_workflow(
        root, [RequiredAction(name="actions/checkout")], reusable, fetcher, "o", "r", "pr-branch"
    )

    assert result.satisfied is True
    assert fetcher.calls[-1] == WorkflowReference(
        owner="o", repo="r", path=".github/workflows/leaf.yml", ref="pr-branch"
    )


def test_not_found_sibling_does_not_block_next_reference(
    workflow, make_fetcher, required_actions, reusable, caplog
) -> None:
    root = workflow(
        """
        jobs:
          missing:
            uses: ./.github/workflows/missing.yml
          build:
            uses: ./.github/workflows/build.yml
          checkout:
            steps:
              - uses: actions/checkout@v3
        """
    )
    fetcher = make_fetcher({"o/r/.github/workflows/build.yml@main": workflow(BUILD)})

    with caplog.at_level(logging.ERROR):
        result = resolve_workflow(root, required_actions, reusable, fetcher, "o", "r", "main")

    assert result.satisfied is True
    assert [f.kind for f in result.failures] == ["not_found"]
    expected = "Workflow not found: Unable to access o/r/.github/workflows/missing.yml@main"
    assert expected in caplog.text


def test_fetch_failures_are_logged_by_kind(workflow, make_fetcher, reusable, caplog) -> None:
    forbidden_ref = WorkflowReference(
        owner="private", repo="repo", path=".github/workflows/a.yml", ref="main"
    )
    broken_ref = WorkflowReference(owner="o", repo="r", path=".github/workflows/b.yml", ref="dev")
    root = workflow(
        """
        jobs:
          a:
            uses: private/repo/.github/workflows/a.yml
          b:
            uses: ./.github/workflows/b.yml
          c:
            uses: not-a-workflow-reference
        """
    )
    fetcher = make_fetcher(
        {
            str(forbidden_ref): WorkflowForbidden(forbidden_ref, "Access denied"),
            str(broken_ref): WorkflowFetchError(broken_ref, "YAML parse error: bad indent"),
        }
    )

    with caplog.at_level(logging.ERROR):
        result = resolve_workflow(
            root, [RequiredAction(name="actions/checkout")], reusable, fetcher, "o", "r", "dev"
        )

    assert result.satisfied is False
    assert [f.kind for f in result.failures] == ["forbidden", "error", "invalid_reference"]
    assert (
        "Permission denied: Unable to access private/repo/.github/workflows/a.yml@main"
    ) in caplog.text
    assert (
        "Error fetching workflow: o/r/.github/workflows/b.yml@dev, "
        "Message Details: YAML parse error: bad indent"
    ) in caplog.text


def test_first_satisfying_reference_short_circuits(workflow, make_fetcher, reusable) -> None:
    root = workflow(
        """
        jobs:
          first:
            uses: ./.github/workflows/first.yml
          second:
            uses: ./.github/workflows/second.yml
        """
    )
    first = workflow(
        """
        jobs:
          job:
            steps:
              - uses: actions/checkout@v4
        """
    )
    fetcher = make_fetcher({"o/r/.github/workflows/first.yml@main": first})

    result = resolve_workflow(
        root, [RequiredAction(name="actions/checkout")], reusable, fetcher, "o", "r", "main"
    )

    assert result.satisfied is True
    assert [c.path for c in fetcher.calls] == [".github/workflows/first.yml"]


def test_matches_accumulate_across_sibling_branches(
    workflow, make_fetcher, required_actions, reusable
) -> None:
    root = workflow(
        """
        jobs:
          one:
            uses: ./.github/workflows/one.yml
          two:
            uses: ./.github/workflows/two.yml
        """
    )
    one = workflow("jobs:\n  j:\n    steps:\n      - uses: actions/checkout@v4\n")
    two = workflow("jobs:\n  j:\n    steps:\n      - uses: actions/setup-node@v4\n")
    fetcher = make_fetcher(
        {
            "o/r/.github/workflows/one.yml@main": one,
            "o/r/.github/workflows/two.yml@main": two,
        }
    )

    result = resolve_workflow(root, required_actions, reusable, fetcher, "o", "r", "main")

    assert result.satisfied is True
    assert result.found == {"actions/checkout", "actions/setup-node"}


def test_found_so_far_is_kept_and_not_mutated(workflow, make_fetcher, required_actions) -> None:
    seed = {"actions/setup-node"}
    doc = workflow("jobs:\n  j:\n    steps:\n      - uses: actions/checkout@v4\n")

    result = resolve_workflow(
        doc, required_actions, Directives(), make_fetcher({}), "o", "r", "main", seed
    )

    assert result.satisfied is True
    assert result.found >= seed
    assert seed == {"actions/setup-node"}


def test_cyclic_references_terminate(workflow, make_fetcher, required_actions, reusable) -> None:
    a = workflow(
        """
        jobs:
          to-b:
            uses: ./.github/workflows/b.yml
          checkout:
            steps:
              - uses: actions/checkout@v4
        """
    )
    b = workflow(
        """
        jobs:
          to-a:
            uses: ./.github/workflows/a.yml
          to-self:
            uses: ./.github/workflows/b.yml
        """
    )
    fetcher = make_fetcher(
        {
            "o/r/.github/workflows/a.yml@main": a,
            "o/r/.github/workflows/b.yml@main": b,
        }
    )
    root = WorkflowReference(owner="o", repo="r", path=".github/workflows/a.yml", ref="main")

    result = resolve_workflow(
        a, required_actions, reusable, fetcher, "o", "r", "main", root=root
    )

    assert result.satisfied is False
    assert result.found == {"actions/checkout"}
    assert [c.path for c in fetcher.calls] == [".github/workflows/b.yml"]


def test_duplicate_required_actions_are_idempotent(workflow, make_fetcher) -> None:
    doc = workflow("jobs:\n  j:\n    steps:\n      - uses: actions/checkout@v4\n")
    required = [RequiredAction(name="actions/checkout"), RequiredAction(name="actions/checkout")]

    result = resolve_workflow(doc, required, Directives(), make_fetcher({}), "o", "r", "main")

    assert result.satisfied is True
    assert result.found == {"actions/checkout"}


def test_substring_matching_accepts_unrelated_action_containing_the_name(
    workflow, make_fetcher
) -> None:
    doc = workflow("jobs:\n  j:\n    steps:\n      - uses: my-org/actions/checkout-cache@v1\n")
    required = [RequiredAction(name="actions/checkout")]

    result = resolve_workflow(doc, required, Directives(), make_fetcher({}), "o", "r", "main")

    assert result.satisfied is True


@pytest.mark.parametrize(
    ("strategy", "expected"),
    [
        (MatchStrategy.SUBSTRING, True),
        (MatchStrategy.PREFIX, False),
        (MatchStrategy.EXACT, False),
    ],
)
def test_match_strategy_is_configurable(workflow, make_fetcher, strategy, expected) -> None:
    doc = workflow("jobs:\n  j:\n    steps:\n      - uses: my-org/actions/checkout-cache@v1\n")
    directives = Directives(match_strategy=strategy)

    result = resolve_workflow(
        doc,
        [RequiredAction(name="actions/checkout")],
        directives,
        make_fetcher({}),
        "o",
        "r",
        "main",
    )

    assert result.satisfied is expected


def test_jobs_without_steps_or_uses_are_tolerated(workflow, make_fetcher, reusable) -> None:
    doc = workflow(
        """
        on: push
        jobs:
          empty: {}
          null-steps:
            steps:
          odd-step:
            steps:
              - "just a string"
              - uses: 42
        """
    )

    result = resolve_workflow(
        doc, [RequiredAction(name="actions/checkout")], reusable, make_fetcher({}), "o", "r", "main"
    )

    assert result.satisfied is False
    assert result.found == frozenset()
    assert result.failures == ()
