"""Event emitter implementations for review bot observability.

This module defines an abstract EventEmitter interface and the sinks
the service ships with:

- LoggingEventEmitter: Emits events as structured log entries
- NullEventEmitter: Discards events (for testing)
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from src.reviewbot.events.models import EventType, ReviewEvent


logger = logging.getLogger(__name__)


class EventEmitter(ABC):
    """Abstract base class for review event emitters.

    Implementations should be:
    - Async-safe: emit() is called from request handlers
    - Fault-tolerant: emit() failures should not fail the request
    """

    @abstractmethod
    async def emit(self, event: ReviewEvent) -> None:
        """Emit a review event.

        Args:
            event: The review event to emit.
        """
        pass

    async def close(self) -> None:
        """Close the emitter and release resources."""
        pass


class LoggingEventEmitter(EventEmitter):
    """Event emitter that logs events using structured logging.

    Events are logged at different levels based on event type:

    - CHECK_PUBLISHED: INFO level
    - EVENT_IGNORED: INFO level
    - SIGNATURE_REJECTED: WARNING level
    - ANALYSIS_FAILED: ERROR level

    Example:
        >>> emitter = LoggingEventEmitter()
        >>> await emitter.emit(ReviewEvent(event_type=EventType.EVENT_IGNORED))
        # Logs: INFO - Review event: event_ignored for -
    """

    def __init__(self, logger_name: Optional[str] = None):
        """Initialize the logging event emitter.

        Args:
            logger_name: Optional logger name. If not provided, uses
                         the module logger.
        """
        self._logger = (
            logging.getLogger(logger_name)
            if logger_name
            else logger
        )
        self._log_level_map = {
            EventType.CHECK_PUBLISHED: logging.INFO,
            EventType.EVENT_IGNORED: logging.INFO,
            EventType.SIGNATURE_REJECTED: logging.WARNING,
            EventType.ANALYSIS_FAILED: logging.ERROR,
        }

    async def emit(self, event: ReviewEvent) -> None:
        log_level = self._log_level_map.get(event.event_type, logging.INFO)

        self._logger.log(
            log_level,
            "Review event: %s for %s",
            event.event_type.value,
            event.repository or "-",
            extra=event.to_log_dict(),
        )


class NullEventEmitter(EventEmitter):
    """Event emitter that discards all events."""

    async def emit(self, event: ReviewEvent) -> None:
        pass
