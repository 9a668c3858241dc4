"""FastAPI server adapter for required-actions-check.

This module exposes the pull request check as a GitHub webhook receiver.

Design intent:
- Keep checking logic in `required_actions_check.checker.*`
- Keep server-specific concerns (routing, signature verification) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from required_actions_check.server.app import create_app
