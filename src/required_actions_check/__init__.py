"""Required actions check.

Verifies that a repository's GitHub Actions workflows, including the reusable
workflows they call, use a required set of actions, and reports the result on
pull requests as a commit status.
"""

__version__ = "0.1.0"

from required_actions_check.checker.config import CheckerSettings
from required_actions_check.checker.workflow.resolver import ResolveResult, resolve_workflow

__all__ = ["__version__", "CheckerSettings", "ResolveResult", "resolve_workflow"]
