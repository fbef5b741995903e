"""Review event models for observability.

Events are emitted at the terminal points of webhook processing so that
each delivery leaves one structured record behind:
- EventType: what happened to the delivery
- ReviewEvent: the structured event with its context

The models use Pydantic for validation, consistent with the rest of the
package.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Outcomes of processing one webhook delivery.

    Attributes:
        CHECK_PUBLISHED: Analysis ran and a check run was created.
        ANALYSIS_FAILED: A GitHub call or the analysis itself failed.
        EVENT_IGNORED: The delivery did not trigger an analysis.
        SIGNATURE_REJECTED: The delivery failed signature verification.
    """

    CHECK_PUBLISHED = "check_published"
    ANALYSIS_FAILED = "analysis_failed"
    EVENT_IGNORED = "event_ignored"
    SIGNATURE_REJECTED = "signature_rejected"


class ReviewEvent(BaseModel):
    """Structured event emitted by the review bot.

    Attributes:
        event_type: What happened to the delivery.
        github_event: The X-GitHub-Event header value.
        delivery_id: The X-GitHub-Delivery header value, if any.
        repository: "{owner}/{name}" once routing has identified it.
        commit_sha: The analyzed commit once routing has identified it.
        timestamp: When the event occurred (UTC timezone).
        details: Additional context specific to the event type.

    Details Field Conventions:
        For CHECK_PUBLISHED events:
            - conclusion: success or failure
            - findings: number of findings
            - skipped_files: number of files that could not be fetched

        For ANALYSIS_FAILED events:
            - error_type: Exception class name
            - status_code: HTTP status from GitHub, if any
    """

    event_type: EventType
    github_event: str = ""
    delivery_id: Optional[str] = None
    repository: Optional[str] = None
    commit_sha: Optional[str] = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC timezone)",
    )
    details: Dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> Dict[str, Any]:
        """Convert event to a flat dictionary suitable for structured logging.

        Example:
            >>> event = ReviewEvent(event_type=EventType.EVENT_IGNORED, github_event="star")
            >>> event.to_log_dict()["event_type"]
            'event_ignored'
        """
        return {
            "event_type": self.event_type.value,
            "github_event": self.github_event,
            "delivery_id": self.delivery_id,
            "repository": self.repository,
            "commit_sha": self.commit_sha,
            "timestamp": self.timestamp.isoformat(),
            **self.details,
        }
