"""Structured event logging for modelhost.

Provides a unified event schema, filesystem NDJSON sink, and a safe
emit helper that never raises uncaught exceptions.
"""

from modelhost.logging.events import (
    EventLevel,
    EventType,
    ModelhostEvent,
    emit,
    make_session_event,
    open_sink,
)
from modelhost.logging.sink import EventSink

__all__ = [
    "EventLevel",
    "EventSink",
    "EventType",
    "ModelhostEvent",
    "emit",
    "make_session_event",
    "open_sink",
]
