"""Unified event schema and the emit helper.

All timestamps use UTC ISO-8601 with ``Z`` suffix.  ``emit()`` is safe to
call from any context -- failures are swallowed and printed to stderr.
Sinks are opened per session with ``open_sink()``.
"""

from __future__ import annotations

import sys
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EventLevel(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"


class EventType(str, Enum):
    # Session lifecycle
    session_started = "session_started"

    # Data loading
    data_loaded = "data_loaded"
    data_load_skipped = "data_load_skipped"
    data_load_failed = "data_load_failed"

    # Binding sync
    binding_error = "binding_error"

    # Model execution
    model_run_completed = "model_run_completed"
    model_run_failed = "model_run_failed"

    # Scripts
    script_completed = "script_completed"
    script_failed = "script_failed"

    # Report
    report_rendered = "report_rendered"


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

DATA_FILE_MISSING = "data_file_missing"
DATA_FILE_EMPTY = "data_file_empty"
DATA_PARSE_ERROR = "data_parse_error"
BINDING_ACCESS_ERROR = "binding_access_error"
MODEL_EXECUTION_ERROR = "model_execution_error"
SCRIPT_PARSE_ERROR = "script_parse_error"
SCRIPT_RUNTIME_ERROR = "script_runtime_error"


# ---------------------------------------------------------------------------
# Context truncation
# ---------------------------------------------------------------------------

_MAX_VALUE_LEN = 256


def truncate_context(context: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *context* with long string values truncated.

    Script sources and file contents can end up in event context; anything
    longer than 256 characters is cut and marked.
    """
    out: dict[str, Any] = {}
    for k, v in context.items():
        if isinstance(v, dict):
            out[k] = truncate_context(v)
        elif isinstance(v, str) and len(v) > _MAX_VALUE_LEN:
            out[k] = v[:_MAX_VALUE_LEN] + "...[truncated]"
        else:
            out[k] = v
    return out


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


def _utc_now() -> str:
    """Return current UTC timestamp in ISO-8601 with Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ModelhostEvent(BaseModel):
    """A single structured log event."""

    schema_version: int = 1
    ts: str = Field(default_factory=_utc_now)
    level: EventLevel
    event_type: EventType
    context: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    error_code: str | None = None


def make_session_event(
    event_type: EventType,
    level: EventLevel,
    message: str,
    *,
    session_id: str,
    model_name: str,
    error_code: str | None = None,
    extra: dict[str, Any] | None = None,
) -> ModelhostEvent:
    """Build an event with guaranteed session attribution context."""
    ctx: dict[str, Any] = {"session_id": session_id, "model_name": model_name}
    if extra:
        ctx.update(extra)
    return ModelhostEvent(
        level=level,
        event_type=event_type,
        message=message,
        context=ctx,
        error_code=error_code,
    )


# ---------------------------------------------------------------------------
# Sink construction
# ---------------------------------------------------------------------------


def open_sink(project_dir: Any, config: dict[str, Any] | None = None) -> Any:
    """Return an ``EventSink`` for *project_dir*, or ``None`` when logging is off.

    Each session owns the sink it opens; nothing is kept at module level.

    Args:
        project_dir: Project root, or ``None`` for no logging.
        config: Merged configuration.  When omitted, ``modelhost.yaml`` is
            read from *project_dir*.  ``logging_enabled`` and
            ``logging_fsync`` are taken from it.
    """
    from pathlib import Path

    from modelhost.logging.sink import EventSink
    from modelhost.project import load_project_config

    if project_dir is None:
        return None
    cfg = config if config is not None else load_project_config(Path(project_dir))
    if not cfg.get("logging_enabled", True):
        return None
    return EventSink(Path(project_dir), fsync=bool(cfg.get("logging_fsync", False)))


# ---------------------------------------------------------------------------
# Rate-limited stderr warnings
# ---------------------------------------------------------------------------

_last_stderr_ts: float = 0.0
_STDERR_INTERVAL_SECS = 60.0


def _stderr_warning(msg: str) -> None:
    """Print a warning to stderr, rate-limited to one per 60 seconds."""
    global _last_stderr_ts
    now = time.monotonic()
    if now - _last_stderr_ts < _STDERR_INTERVAL_SECS:
        return
    _last_stderr_ts = now
    try:
        print(f"[modelhost] {msg}", file=sys.stderr)
    except Exception:
        pass


# ---------------------------------------------------------------------------
# Safe emit helpers
# ---------------------------------------------------------------------------


def emit(event: ModelhostEvent, *, sink: Any, session_id: str | None = None) -> None:
    """Write an event to *sink*'s global log and optionally a per-session log.

    A ``None`` sink discards the event.

    **Never raises.**  On failure, prints a rate-limited warning to stderr.
    """
    try:
        if sink is None:
            return
        event = event.model_copy(update={"context": truncate_context(event.context)})
        sink.write(event, session_id=session_id)
    except Exception:
        _stderr_warning(f"logging failed: {traceback.format_exc()}")
