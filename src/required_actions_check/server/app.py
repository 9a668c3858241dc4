"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the checker services.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from fastapi import FastAPI, Header, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from required_actions_check import __version__
from required_actions_check.checker.github.client import GitHubClient, PullRequestInfo
from required_actions_check.checker.policy import PolicyError, load_policy
from required_actions_check.checker.pull_request import CheckOutcome, check_pull_request
from required_actions_check.server.config import ServerSettings
from required_actions_check.server.models import (
    HANDLED_ACTIONS,
    PullRequestEvent,
    WebhookResponse,
)

logger = logging.getLogger(__name__)


def verify_signature(secret: str, body: bytes, signature: str) -> bool:
    """Check a GitHub `X-Hub-Signature-256` header against the raw request body."""

    if not signature.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


def _run_check(settings: ServerSettings, pr: PullRequestInfo) -> CheckOutcome:
    try:
        policy = load_policy(settings.policy_path)
    except PolicyError as e:
        logger.error(str(e), extra={"path": str(e.path)})
        raise HTTPException(status_code=500, detail="Policy file is missing or invalid") from e

    github = GitHubClient(
        token=settings.github_token,
        repository=pr.repository,
        base_url=settings.github_base_url,
    )
    try:
        return check_pull_request(
            pr=pr,
            policy=policy,
            github=github,
            status_context=settings.status_context,
            target_url=settings.target_url,
        )
    finally:
        github.close()


def create_app() -> FastAPI:
    settings = ServerSettings()

    app = FastAPI(
        title="Required Actions Check",
        version=__version__,
        description="GitHub webhook receiver checking pull requests for required workflow actions.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Expose settings for request handlers that want to read it.
    app.state.settings = settings

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/api/webhook", response_model=WebhookResponse)
    async def webhook(
        request: Request,
        response: Response,
        x_github_event: str = Header(default=""),
        x_hub_signature_256: str = Header(default=""),
    ) -> WebhookResponse:
        body = await request.body()

        if settings.webhook_secret and not verify_signature(
            settings.webhook_secret, body, x_hub_signature_256
        ):
            logger.warning("Rejected webhook delivery with a bad signature")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        if x_github_event != "pull_request":
            response.status_code = 202
            return WebhookResponse(status="ignored")

        try:
            event = PullRequestEvent.model_validate_json(body)
        except ValidationError as e:
            detail = e.errors(include_url=False, include_context=False, include_input=False)
            raise HTTPException(status_code=422, detail=detail) from e

        if event.action not in HANDLED_ACTIONS:
            response.status_code = 202
            return WebhookResponse(status="ignored")

        if not settings.github_token.strip():
            raise HTTPException(
                status_code=409,
                detail="REQUIRED_ACTIONS_GITHUB_TOKEN is required for this endpoint",
            )

        pr = event.to_pull_request_info()
        logger.info("Processing pull request", extra={"pr": pr.html_url, "action": event.action})
        outcome = await run_in_threadpool(_run_check, settings, pr)

        return WebhookResponse(
            status="checked",
            state=outcome.state,
            description=outcome.description,
            skipped=outcome.skipped,
            satisfied_by=outcome.satisfied_by,
            found_actions=sorted(outcome.found_actions),
        )

    return app
