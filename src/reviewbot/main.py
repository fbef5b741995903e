"""FastAPI application entry point for the review bot.

This module provides the HTTP surface of the service: the GitHub webhook
receiver and a liveness probe. Responses only ever carry a generic
status phrase so that callers learn nothing about internal failures.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from .analysis.pipeline import AnalysisPipeline
from .analysis.rules import RuleEngine
from .config import ReviewBotSettings, get_settings
from .events.emitter import LoggingEventEmitter
from .github.client import GitHubClient
from .orchestrator import ReviewOrchestrator, ReviewOutcome
from .reporting.reporter import ResultReporter
from .webhook.router import EventRouter, build_envelope

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"


def _redact_secret(value: str) -> str:
    """Replace a secret with a fixed mask that reveals only whether it is set."""
    return "********" if value else "<unset>"


def _log_configuration(settings: ReviewBotSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Review bot configuration:")
    logger.info(f"  GitHub Base URL: {settings.github_base_url}")
    logger.info(f"  GitHub Token: {_redact_secret(settings.github_token)}")
    logger.info(
        f"  GitHub Webhook Secret: {_redact_secret(settings.github_webhook_secret)}"
    )
    logger.info(f"  GitHub Timeout Seconds: {settings.github_timeout_seconds}")
    logger.info(f"  Analyzable Extensions: {', '.join(settings.analyzable_extensions)}")
    logger.info(f"  Check Name: {settings.check_name}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")


def build_orchestrator(
    cfg: ReviewBotSettings,
    gh_client: GitHubClient,
) -> ReviewOrchestrator:
    """Wire all review dependencies into a ReviewOrchestrator.

    Args:
        cfg: Validated settings.
        gh_client: Authenticated GitHub API client.

    Returns:
        Fully wired ReviewOrchestrator.
    """
    pipeline = AnalysisPipeline(
        github_client=gh_client,
        rule_engine=RuleEngine(),
        extensions=cfg.analyzable_extensions,
    )
    reporter = ResultReporter(github_client=gh_client, check_name=cfg.check_name)

    return ReviewOrchestrator(
        webhook_secret=cfg.github_webhook_secret,
        router=EventRouter(),
        pipeline=pipeline,
        reporter=reporter,
        event_emitter=LoggingEventEmitter(),
    )


def create_app(orchestrator: Optional[ReviewOrchestrator] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        orchestrator: Prebuilt orchestrator. When omitted, the lifespan
            loads settings from the environment and wires one, along
            with a GitHub client that is closed on shutdown.

    Returns:
        The configured application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load configuration and wire dependencies on startup."""
        github_client: Optional[GitHubClient] = None

        logger.info("Review bot starting up...")

        if orchestrator is not None:
            app.state.orchestrator = orchestrator
        else:
            settings = get_settings()
            _log_configuration(settings)

            github_client = GitHubClient(
                token=settings.github_token,
                base_url=settings.github_base_url,
                timeout=settings.github_timeout_seconds,
            )
            app.state.orchestrator = build_orchestrator(settings, github_client)

        logger.info("Review bot started successfully")

        yield

        logger.info("Review bot shutting down...")

        if github_client is not None:
            await github_client.close()

        logger.info("Review bot shutdown complete")

    app = FastAPI(
        title="Review Bot",
        description="Line-level code analysis for GitHub pushes and pull requests",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        """Liveness probe endpoint."""
        return {"status": "healthy"}

    @app.post("/webhook")
    async def github_webhook(request: Request):
        """GitHub webhook receiver endpoint.

        The signature is verified over the body bytes exactly as
        received; the body is never re-serialized before verification.

        Returns:
            200 for processed or ignored events, 401 for signature
            failures, 500 for any processing failure.
        """
        raw_payload = await request.body()
        envelope = build_envelope(
            event_type=request.headers.get(EVENT_HEADER),
            raw_payload=raw_payload,
            signature_header=request.headers.get(SIGNATURE_HEADER),
            delivery_id=request.headers.get(DELIVERY_HEADER),
        )

        try:
            outcome = await request.app.state.orchestrator.handle(envelope)
        except Exception:
            logger.exception(
                "Webhook processing failed",
                extra={"event": envelope.event_type, "delivery_id": envelope.delivery_id},
            )
            return PlainTextResponse("Internal Server Error", status_code=500)

        if outcome is ReviewOutcome.UNAUTHORIZED:
            return PlainTextResponse("Unauthorized", status_code=401)

        return PlainTextResponse("OK", status_code=200)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # For local development, load settings to get host/port
    dev_settings = get_settings()
    uvicorn.run(
        "src.reviewbot.main:app",
        host=dev_settings.host,
        port=dev_settings.port,
        reload=True,
    )
