"""Event routing for inbound GitHub webhooks.

The router maps an already-authenticated envelope to the workflow it
triggers. It performs no network I/O, so it can be exercised with plain
payload dictionaries.

Recognized events:
- ``pull_request`` with action ``opened``: analyze the PR head commit
- ``push``: analyze the pushed head commit

GitHub Webhook Payload Structure (pull_request event):
{
  "action": "opened",
  "pull_request": {"head": {"sha": "abc123..."}},
  "repository": {"name": "repo-name", "owner": {"login": "owner-name"}}
}

GitHub Webhook Payload Structure (push event):
{
  "head_commit": {"id": "abc123..."},
  "repository": {"name": "repo-name", "owner": {"login": "owner-name"}}
}
"""

import json
import logging
from typing import Any, Dict, Optional

from src.reviewbot.webhook.models import (
    CommitRef,
    EventKind,
    RepositoryRef,
    WebhookEnvelope,
    WorkflowSelection,
)

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENT = "pull_request"
PUSH_EVENT = "push"


def decode_payload(raw_payload: bytes) -> Optional[Dict[str, Any]]:
    """Decode a raw webhook body into a JSON object.

    Returns:
        The decoded object, or None if the body is not a JSON object.
    """
    try:
        payload = json.loads(raw_payload)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def build_envelope(
    event_type: Optional[str],
    raw_payload: bytes,
    signature_header: Optional[str],
    delivery_id: Optional[str] = None,
) -> WebhookEnvelope:
    """Build the envelope for one inbound request.

    The action is read from the payload on a best-effort basis; a body
    that does not decode leaves it unset.
    """
    action = None
    payload = decode_payload(raw_payload)
    if payload is not None and isinstance(payload.get("action"), str):
        action = payload["action"]

    return WebhookEnvelope(
        event_type=event_type or "",
        action=action,
        raw_payload=raw_payload,
        signature_header=signature_header,
        delivery_id=delivery_id,
    )


class EventRouter:
    """Classifies webhook envelopes into analysis workflows."""

    def route(self, envelope: WebhookEnvelope) -> Optional[WorkflowSelection]:
        """Select the workflow for an envelope.

        Args:
            envelope: An envelope whose signature has been verified.

        Returns:
            WorkflowSelection for a recognized event, None for anything
            that should be acknowledged without further action. A
            recognized event with an unusable payload is also None.
        """
        kind = self._classify(envelope)
        if kind is None:
            logger.debug(
                "Ignoring event: event=%s action=%s",
                envelope.event_type,
                envelope.action,
            )
            return None

        payload = decode_payload(envelope.raw_payload)
        if payload is None:
            logger.warning(
                "Recognized event has a non-object payload",
                extra={"event": envelope.event_type, "delivery_id": envelope.delivery_id},
            )
            return None

        repository = self._extract_repository(payload)
        if repository is None:
            return None

        if kind is EventKind.PULL_REQUEST_OPENED:
            sha = self._nested_str(payload, "pull_request", "head", "sha")
        else:
            sha = self._nested_str(payload, "head_commit", "id")

        if sha is None:
            logger.warning(
                "Event payload has no head commit",
                extra={"event": envelope.event_type, "repository": repository.full_name},
            )
            return None

        selection = WorkflowSelection(
            kind=kind,
            repository=repository,
            commit=CommitRef(sha=sha),
        )

        logger.info(
            "Routed %s event for %s@%s",
            kind.value,
            repository.full_name,
            selection.commit.short_sha,
        )

        return selection

    def _classify(self, envelope: WebhookEnvelope) -> Optional[EventKind]:
        if envelope.event_type == PULL_REQUEST_EVENT and envelope.action == "opened":
            return EventKind.PULL_REQUEST_OPENED
        if envelope.event_type == PUSH_EVENT:
            return EventKind.PUSH
        return None

    def _extract_repository(self, payload: Dict[str, Any]) -> Optional[RepositoryRef]:
        """Extract owner login and repository name from the payload."""
        owner = self._nested_str(payload, "repository", "owner", "login")
        name = self._nested_str(payload, "repository", "name")
        if owner is None or name is None:
            logger.warning("Missing or invalid 'repository' field in payload")
            return None
        return RepositoryRef(owner=owner, name=name)

    @staticmethod
    def _nested_str(payload: Dict[str, Any], *keys: str) -> Optional[str]:
        """Walk nested dictionaries and return a non-empty string leaf."""
        value: Any = payload
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()
