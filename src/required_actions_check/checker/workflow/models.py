"""Workflow document types.

Only the parts of a GitHub Actions workflow that the resolver looks at are
modelled: jobs, their steps' `uses` strings, and a job-level `uses` pointing at
a reusable workflow. Everything else in the YAML is ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class MalformedWorkflowError(ValueError):
    """Raised when a loaded document does not have the shape of a workflow."""


@dataclass(frozen=True, slots=True)
class Step:
    uses: str | None = None


@dataclass(frozen=True, slots=True)
class Job:
    """A workflow job.

    A leaf job runs `steps`; a caller job sets `uses` to a reusable workflow.
    Neither is required and both may be present.
    """

    steps: tuple[Step, ...] = ()
    uses: str | None = None


@dataclass(frozen=True, slots=True)
class WorkflowDocument:
    jobs: dict[str, Job] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: object) -> WorkflowDocument:
        """Build a document from the result of `yaml.safe_load`.

        Raises:
            MalformedWorkflowError: if the document or its `jobs` is not a mapping.
        """

        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise MalformedWorkflowError(
                f"Workflow must be a mapping, got {type(data).__name__}"
            )

        raw_jobs = data.get("jobs")
        if raw_jobs is None:
            return cls()
        if not isinstance(raw_jobs, Mapping):
            raise MalformedWorkflowError(
                f"Workflow 'jobs' must be a mapping, got {type(raw_jobs).__name__}"
            )

        jobs: dict[str, Job] = {}
        for name, raw_job in raw_jobs.items():
            jobs[str(name)] = _job_from_mapping(raw_job)
        return cls(jobs=jobs)


def _job_from_mapping(raw: object) -> Job:
    if not isinstance(raw, Mapping):
        return Job()

    uses = raw.get("uses")
    steps: list[Step] = []
    raw_steps: Any = raw.get("steps")
    if isinstance(raw_steps, list):
        for raw_step in raw_steps:
            if not isinstance(raw_step, Mapping):
                continue
            step_uses = raw_step.get("uses")
            steps.append(Step(uses=step_uses if isinstance(step_uses, str) else None))

    return Job(steps=tuple(steps), uses=uses if isinstance(uses, str) and uses else None)
