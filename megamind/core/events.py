from __future__ import annotations

import typing as t
from enum import Enum
from typing import Final

__all__ = [
    "EventCategory",
    "EventSeverity",
    "LIFECYCLE_EVENTS",
    "CALL_EVENTS",
    "REJECTION_EVENTS",
    "STATE_EVENTS",
    "EVENTS",
]


class EventCategory(Enum):
    """Event classification for audit trail organisation."""

    LIFECYCLE = "lifecycle"
    CALL = "call"
    REJECTION = "rejection"
    STATE = "state"


class EventSeverity(Enum):
    """Event severity levels for filtering and alerting."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


LIFECYCLE_EVENTS: Final[dict[str, dict[str, t.Any]]] = {
    "binding_attached": {
        "category": EventCategory.LIFECYCLE,
        "severity": EventSeverity.INFO,
        "description": "Binding attached to an operation",
    },
    "binding_activated": {
        "category": EventCategory.LIFECYCLE,
        "severity": EventSeverity.INFO,
        "description": "Binding activated and ready for calls",
    },
    "binding_detached": {
        "category": EventCategory.LIFECYCLE,
        "severity": EventSeverity.INFO,
        "description": "Binding detached from its consumer",
    },
    "auto_invoke_skipped": {
        "category": EventCategory.LIFECYCLE,
        "severity": EventSeverity.ERROR,
        "description": "Immediate call skipped because arguments are missing",
    },
}

CALL_EVENTS: Final[dict[str, dict[str, t.Any]]] = {
    "call_started": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.DEBUG,
        "description": "Operation dispatched",
    },
    "call_succeeded": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.INFO,
        "description": "Operation resolved successfully",
    },
    "call_failed": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.ERROR,
        "description": "Operation raised an exception",
    },
    "cache_hit": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.DEBUG,
        "description": "Result served from the cache without dispatch",
    },
    "callback_error": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.ERROR,
        "description": "Consumer callback or validator raised an exception",
    },
    "notification_suppressed": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.DEBUG,
        "description": "Validation gate blocked a success or error callback",
    },
    "cooldown_scheduled": {
        "category": EventCategory.CALL,
        "severity": EventSeverity.DEBUG,
        "description": "In-flight marker release scheduled",
    },
}

REJECTION_EVENTS: Final[dict[str, dict[str, t.Any]]] = {
    "duplicate_rejected": {
        "category": EventCategory.REJECTION,
        "severity": EventSeverity.WARNING,
        "description": "Identical call still in flight",
    },
    "quota_exhausted": {
        "category": EventCategory.REJECTION,
        "severity": EventSeverity.WARNING,
        "description": "Maximum number of calls reached",
    },
    "detached_rejected": {
        "category": EventCategory.REJECTION,
        "severity": EventSeverity.WARNING,
        "description": "Call attempted on a detached binding",
    },
}

STATE_EVENTS: Final[dict[str, dict[str, t.Any]]] = {
    "state_cleared": {
        "category": EventCategory.STATE,
        "severity": EventSeverity.INFO,
        "description": "Visible state cleared",
    },
    "state_reset": {
        "category": EventCategory.STATE,
        "severity": EventSeverity.INFO,
        "description": "Visible state, call counter and cache entries reset",
    },
    "state_discarded": {
        "category": EventCategory.STATE,
        "severity": EventSeverity.DEBUG,
        "description": "Result of a call settled after detach was discarded",
    },
}

EVENTS: Final[dict[str, dict[str, t.Any]]] = {
    **LIFECYCLE_EVENTS,
    **CALL_EVENTS,
    **REJECTION_EVENTS,
    **STATE_EVENTS,
}
