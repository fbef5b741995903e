"""GitHub webhook handling for the review bot.

This module authenticates and classifies inbound webhook deliveries:
- Signature verification over the raw body (X-Hub-Signature-256)
- Routing of pull_request.opened and push events to an analysis run
"""

from .models import (
    CommitRef,
    EventKind,
    RepositoryRef,
    WebhookEnvelope,
    WorkflowSelection,
)
from .router import EventRouter, build_envelope
from .signature import compute_signature, verify_signature

__all__ = [
    "CommitRef",
    "EventKind",
    "EventRouter",
    "RepositoryRef",
    "WebhookEnvelope",
    "WorkflowSelection",
    "build_envelope",
    "compute_signature",
    "verify_signature",
]
