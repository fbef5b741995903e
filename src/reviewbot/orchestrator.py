"""Review orchestrator connecting all stages of webhook processing.

Drives one webhook delivery through the review workflow:
signature gate → router → analysis pipeline → result reporter.

The orchestrator delegates all work to injected dependencies. It turns
signature failures and unrecognized events into outcomes, and lets
GitHub failures propagate so the HTTP layer can answer with a 500.

Source:
- src/reviewbot/webhook/signature.py (verify_signature)
- src/reviewbot/webhook/router.py (EventRouter)
- src/reviewbot/analysis/pipeline.py (AnalysisPipeline)
- src/reviewbot/reporting/reporter.py (ResultReporter)
- src/reviewbot/events/emitter.py (EventEmitter)
"""

import logging
from enum import Enum
from typing import Optional

from src.reviewbot.analysis.pipeline import AnalysisPipeline
from src.reviewbot.events.emitter import EventEmitter, NullEventEmitter
from src.reviewbot.events.models import EventType, ReviewEvent
from src.reviewbot.github.client import GitHubAPIError
from src.reviewbot.github.models import PublishedCheck
from src.reviewbot.reporting.reporter import ResultReporter
from src.reviewbot.webhook.models import WebhookEnvelope, WorkflowSelection
from src.reviewbot.webhook.router import EventRouter
from src.reviewbot.webhook.signature import verify_signature

logger = logging.getLogger(__name__)


class ReviewOutcome(str, Enum):
    """How a webhook delivery was handled.

    Attributes:
        UNAUTHORIZED: Signature verification failed; nothing else ran.
        IGNORED: Authentic, but not an event that triggers analysis.
        COMPLETED: Analysis ran and one check run was published.
    """

    UNAUTHORIZED = "unauthorized"
    IGNORED = "ignored"
    COMPLETED = "completed"


class ReviewOrchestrator:
    """Orchestrates the review of one webhook delivery.

    Attributes:
        webhook_secret: Shared secret used to verify deliveries.
        router: Maps envelopes to workflow selections.
        pipeline: Analyzes the files changed by a commit.
        reporter: Publishes the check run.
        event_emitter: Emits review events for observability.
    """

    def __init__(
        self,
        webhook_secret: str,
        router: EventRouter,
        pipeline: AnalysisPipeline,
        reporter: ResultReporter,
        event_emitter: Optional[EventEmitter] = None,
    ):
        self.webhook_secret = webhook_secret
        self.router = router
        self.pipeline = pipeline
        self.reporter = reporter
        self.event_emitter = event_emitter or NullEventEmitter()

    async def handle(self, envelope: WebhookEnvelope) -> ReviewOutcome:
        """Process one webhook delivery end to end.

        Args:
            envelope: The inbound request, signature not yet verified.

        Returns:
            The outcome of processing.

        Raises:
            GitHubAPIError: If listing files, fetching every file, or
                publishing the check run fails.
        """
        if not verify_signature(
            self.webhook_secret,
            envelope.raw_payload,
            envelope.signature_header,
        ):
            await self._emit(
                ReviewEvent(
                    event_type=EventType.SIGNATURE_REJECTED,
                    github_event=envelope.event_type,
                    delivery_id=envelope.delivery_id,
                )
            )
            return ReviewOutcome.UNAUTHORIZED

        selection = self.router.route(envelope)
        if selection is None:
            await self._emit(
                ReviewEvent(
                    event_type=EventType.EVENT_IGNORED,
                    github_event=envelope.event_type,
                    delivery_id=envelope.delivery_id,
                    details={"action": envelope.action},
                )
            )
            return ReviewOutcome.IGNORED

        try:
            await self._review(selection, envelope)
        except GitHubAPIError as exc:
            await self._emit(
                ReviewEvent(
                    event_type=EventType.ANALYSIS_FAILED,
                    github_event=envelope.event_type,
                    delivery_id=envelope.delivery_id,
                    repository=selection.repository.full_name,
                    commit_sha=selection.commit.sha,
                    details={
                        "error_type": type(exc).__name__,
                        "status_code": exc.status_code,
                    },
                )
            )
            raise

        return ReviewOutcome.COMPLETED

    async def _review(
        self,
        selection: WorkflowSelection,
        envelope: WebhookEnvelope,
    ) -> PublishedCheck:
        """Analyze the selected commit and publish its check run."""
        repository = selection.repository
        commit = selection.commit

        logger.info(
            "Starting review",
            extra={
                "repository": repository.full_name,
                "sha": commit.sha,
                "kind": selection.kind.value,
                "delivery_id": envelope.delivery_id,
            },
        )

        outcome = await self.pipeline.analyze(repository, commit)
        published = await self.reporter.report(
            repository,
            commit,
            outcome.findings,
            skipped_files=outcome.skipped_files,
        )

        await self._emit(
            ReviewEvent(
                event_type=EventType.CHECK_PUBLISHED,
                github_event=envelope.event_type,
                delivery_id=envelope.delivery_id,
                repository=repository.full_name,
                commit_sha=commit.sha,
                details={
                    "conclusion": outcome.to_result().verdict.value,
                    "findings": len(outcome.findings),
                    "analyzed_files": outcome.analyzed_files,
                    "skipped_files": outcome.skipped_files,
                },
            )
        )

        return published

    async def _emit(self, event: ReviewEvent) -> None:
        """Emit a review event, logging emitter failures instead of raising."""
        try:
            await self.event_emitter.emit(event)
        except Exception:
            logger.exception(
                "Failed to emit review event",
                extra={"event_type": event.event_type.value},
            )
