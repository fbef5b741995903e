"""GitHub webhook models for the review bot.

This module defines the normalized request envelope and the typed
references the router extracts from it. The models use Pydantic for
validation, consistent with the configuration approach in config.py.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WebhookEnvelope(BaseModel):
    """Normalized representation of one inbound webhook request.

    The raw payload is kept exactly as received so the signature can be
    verified over the original bytes.

    Attributes:
        event_type: Value of the X-GitHub-Event header.
        action: Top-level "action" field of the payload, if any.
        raw_payload: Request body bytes as received.
        signature_header: Value of the X-Hub-Signature-256 header, if any.
        delivery_id: Value of the X-GitHub-Delivery header, used for logs.
    """

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(
        default="",
        description="The GitHub event name from the X-GitHub-Event header",
    )

    action: Optional[str] = Field(
        default=None,
        description="The payload's top-level action field",
    )

    raw_payload: bytes = Field(
        default=b"",
        description="The request body exactly as received",
    )

    signature_header: Optional[str] = Field(
        default=None,
        description="The X-Hub-Signature-256 header value",
    )

    delivery_id: Optional[str] = Field(
        default=None,
        description="The X-GitHub-Delivery header value",
    )


class RepositoryRef(BaseModel):
    """Identifies the repository a webhook event refers to."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Repository owner login")
    name: str = Field(..., min_length=1, description="Repository name")

    @property
    def full_name(self) -> str:
        """Repository path in format "{owner}/{name}"."""
        return f"{self.owner}/{self.name}"


class CommitRef(BaseModel):
    """The commit whose tree state is analyzed."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., min_length=1, description="Commit SHA")

    @property
    def short_sha(self) -> str:
        """First seven characters of the commit SHA."""
        return self.sha[:7]


class EventKind(str, Enum):
    """Webhook events that trigger an analysis run.

    Attributes:
        PULL_REQUEST_OPENED: A pull request was opened; the head commit is analyzed.
        PUSH: Commits were pushed; the pushed head commit is analyzed.
    """

    PULL_REQUEST_OPENED = "pull_request_opened"
    PUSH = "push"


class WorkflowSelection(BaseModel):
    """Routing decision for an event that requires analysis."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    repository: RepositoryRef
    commit: CommitRef
