"""Review event emission.

Event Emitters:
- EventEmitter: Abstract base class for event emission
- LoggingEventEmitter: Emits events as structured log entries
- NullEventEmitter: Discards events (for testing)
"""

from src.reviewbot.events.emitter import (
    EventEmitter,
    LoggingEventEmitter,
    NullEventEmitter,
)
from src.reviewbot.events.models import EventType, ReviewEvent

__all__ = [
    "EventEmitter",
    "EventType",
    "LoggingEventEmitter",
    "NullEventEmitter",
    "ReviewEvent",
]
