"""\
Base Tools
==========

Author: Akshay Mestry <xa@mes3.dev>
Created on: Tuesday, July 22 2025
Last updated on: Monday, October 19 2026

Base components.

This module provides the foundational classes the call manager is built
from: introspectable objects, named validation predicates, lightweight
metrics, an in-memory audit trail and the component lifecycle that every
binding follows.
"""

from __future__ import annotations

import time
import types
import typing as t
from abc import ABC
from abc import abstractmethod
from collections import Counter
from collections import deque
from collections.abc import Iterator
from collections.abc import Sequence
from uuid import uuid4

from megamind.core.events import EVENTS
from megamind.core.events import EventCategory
from megamind.core.events import EventSeverity

__all__: Sequence[str] = [
    "AuditLog",
    "Component",
    "MetricCollector",
    "Observable",
    "Validator",
]

_AttributeStream = Iterator[tuple[str, t.Any]]
_StateInfoDict = dict[str, t.Any]

# NOTE(xames3): These limits only affect `repr` output and keep large
# payloads (paged results especially) from flooding the logs.
_SEQUENCE_LIMIT: t.Final[int] = 5
_DICTIONARY_LIMIT: t.Final[int] = 3
_STRING_LIMIT: t.Final[int] = 60

_SEVERITY_LEVEL_MAP: dict[EventSeverity, int] = {
    EventSeverity.DEBUG: 0,
    EventSeverity.INFO: 1,
    EventSeverity.WARNING: 2,
    EventSeverity.ERROR: 3,
    EventSeverity.CRITICAL: 4,
}


class Observable:
    """Provide observable behaviour for derived classes.

    This class serves as a mixin for objects that expose their internal
    state in a consistent and controlled manner. Derived classes yield
    the attributes worth showing from `__inspect_attrs__` and get a
    compact `repr` with sensible limits for large values.
    """

    __slots__: tuple[str] = ("__weakref__",)

    def __inspect_attrs__(self) -> _AttributeStream:
        """Inspect and yield public attributes of the instance.

        :yield: Tuples of attribute names and their values. Attributes
            starting with an underscore or set to `None` are skipped.
        """
        for attr, value in getattr(self, "__dict__", {}).items():
            if not attr.startswith("_") and value is not None:
                yield attr, value

    def _format(self, value: t.Any) -> str:
        """Format value for string representation.

        :param value: The value to format.
        :return: A formatted, possibly summarised, representation.
        """
        if value is self:
            return f"<circular-{type(self).__name__}>"
        elif isinstance(value, str) and len(value) > _STRING_LIMIT:
            return f"{value[:_STRING_LIMIT - 3]}..."
        elif (
            isinstance(value, (list, tuple, set))
            and len(value) > _SEQUENCE_LIMIT
        ):
            return f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict) and len(value) > _DICTIONARY_LIMIT:
            return f"dict({len(value)} items)"
        return repr(value)

    def __repr__(self) -> str:
        """Return a string representation of the instance."""
        attrs = [
            f"{name}={self._format(value)}"
            for name, value in self.__inspect_attrs__()
        ]
        extra = ", ".join(attrs) if attrs else ""
        return f"{type(self).__name__}({extra})"


class Validator(Observable, ABC):
    """Decide whether a success or error notification should fire.

    Validators are named, synchronous predicates evaluated by the
    validation gate once a call settles. They only decide whether the
    consumer's `on_success`/`on_error` callback runs; the binding's
    state is updated regardless. Any plain callable taking the payload
    and returning a boolean is accepted wherever a validator is, this
    class just gives such predicates a name for introspection.

    :param name: Name for the validator, defaults to `None`.
    :param description: Optional description of what this validator
        checks, defaults to `None`.

    .. code-block:: python

        class NonEmpty(Validator):
            def __call__(self, payload):
                return bool(payload)
    """

    __slots__: tuple[str] = ("_name", "_description")

    def __init__(
        self,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        """Initialise a validator."""
        self._name = name or type(self).__name__
        self._description = description

    def __inspect_attrs__(self) -> _AttributeStream:
        """Yield validator's attributes for introspection."""
        yield "name", self._name
        if self._description:
            yield "description", self._description

    @abstractmethod
    def __call__(self, payload: t.Any) -> bool:
        """Return `True` if the notification for `payload` may fire.

        :param payload: The resolved value or the captured exception.
        :return: `True` to notify the consumer, `False` to stay quiet.

        .. note::

            Validators should not modify the payload, it is the same
            object that ends up in the binding's state.
        """
        raise NotImplementedError("Subclasses must implement __call__ method")

    @property
    def name(self) -> str:
        """Get the name of the validator."""
        return self._name

    @property
    def description(self) -> str | None:
        """Get the description of the validator."""
        return self._description


class MetricCollector(Observable):
    """Count what happened to the call requests of a binding.

    Dispatched calls are counted and timed. Cache hits and rejected
    requests never reach the operation, so they are only counted, the
    rejections by reason (`duplicate`, `quota` or `detached`).

    .. code-block:: python

        collector = MetricCollector()
        collector.record_call(0.5, success=True)
        collector.record_rejection("duplicate")
        print(collector["dispatched"], collector["rejections"])
    """

    __slots__: tuple[str, ...] = (
        "_counts",
        "_rejections",
        "_total",
        "_fastest",
        "_slowest",
        "_last_call",
    )

    def __init__(self) -> None:
        """Initialise an empty collector."""
        self._counts: Counter[str] = Counter()
        self._rejections: Counter[str] = Counter()
        self._total = 0.0
        self._fastest: float | None = None
        self._slowest: float | None = None
        self._last_call: float | None = None

    def __inspect_attrs__(self) -> _AttributeStream:
        """Yield collector's attributes for introspection."""
        yield "dispatched", self._counts["dispatched"]
        if self._counts["dispatched"]:
            yield "success_rate", f"{self.success_rate:.1%}"
        if self._counts["cache_hits"]:
            yield "cache_hits", self._counts["cache_hits"]
        if self._rejections:
            yield "rejected", self._rejections.total()

    def __getitem__(self, key: str) -> t.Any:
        """Get a single metric, see :attr:`metrics` for the names."""
        return self.metrics[key]

    def record_call(self, duration: float, *, success: bool) -> None:
        """Record a dispatched call once it settled.

        :param duration: Time from dispatch to settle in seconds.
        :param success: Whether the operation resolved.
        """
        self._counts["dispatched"] += 1
        self._counts["successes" if success else "failures"] += 1
        self._total += duration
        if self._fastest is None or duration < self._fastest:
            self._fastest = duration
        if self._slowest is None or duration > self._slowest:
            self._slowest = duration
        self._last_call = time.time()

    def record_cache_hit(self) -> None:
        """Record a request served from the result cache."""
        self._counts["cache_hits"] += 1

    def record_rejection(self, reason: str) -> None:
        """Record a request that was turned away before dispatch."""
        self._rejections[reason] += 1

    @property
    def success_rate(self) -> float:
        """Get the share of dispatched calls that resolved."""
        dispatched = self._counts["dispatched"]
        return self._counts["successes"] / dispatched if dispatched else 0.0

    @property
    def metrics(self) -> _StateInfoDict:
        """Return a snapshot of the collected metrics.

        Durations are `None` until the first call settles.
        """
        dispatched = self._counts["dispatched"]
        return {
            "dispatched": dispatched,
            "successes": self._counts["successes"],
            "failures": self._counts["failures"],
            "success_rate": self.success_rate,
            "cache_hits": self._counts["cache_hits"],
            "rejections": dict(self._rejections),
            "avg_duration": self._total / dispatched if dispatched else None,
            "fastest": self._fastest,
            "slowest": self._slowest,
            "last_call": self._last_call,
        }


class AuditLog(Observable):
    """Bounded, chronological trail of what happened to a binding.

    Each entry is a plain dictionary carrying the event name, a short
    identifier, a timestamp, the component name, and the category,
    severity and description looked up in
    :data:`megamind.core.events.EVENTS`, plus any metadata passed along.
    The oldest entries are dropped once `limit` is reached.

    :param limit: Maximum number of entries kept, defaults to `1000`.
        `None` keeps everything.

    .. code-block:: python

        audit = AuditLog()
        audit.record_event("cache_hit", component="search", key="...")
        hits = audit.get_events(event="cache_hit")
    """

    __slots__: tuple[str, ...] = ("_entries",)

    def __init__(self, limit: int | None = 1000) -> None:
        """Initialise an empty audit trail."""
        self._entries: deque[_StateInfoDict] = deque(maxlen=limit)

    def __inspect_attrs__(self) -> _AttributeStream:
        """Yield audit trail's attributes for introspection."""
        yield "entries", len(self._entries)
        if self._entries:
            yield "latest", self._entries[-1]["event"]

    def __len__(self) -> int:
        """Return the number of entries kept."""
        return len(self._entries)

    def __iter__(self) -> Iterator[_StateInfoDict]:
        """Iterate over entries, oldest first."""
        return iter(self._entries)

    def record_event(
        self,
        event: str,
        *,
        component: str,
        **metadata: t.Any,
    ) -> _StateInfoDict:
        """Append an entry for `event` and return it.

        Events missing from the catalogue are kept as `CALL` events of
        `INFO` severity.

        :param event: Name of the event.
        :param component: Name of the component reporting it.
        :return: The recorded entry.
        """
        known = EVENTS.get(event, {})
        entry = {
            "event": event,
            "event_id": uuid4().hex[:8],
            "timestamp": time.time(),
            "component": component,
            "category": known.get("category", EventCategory.CALL),
            "severity": known.get("severity", EventSeverity.INFO),
            "description": known.get("description", f"Unknown event: {event}"),
            **metadata,
        }
        self._entries.append(entry)
        return entry

    def get_events(
        self,
        event: str | None = None,
        *,
        category: EventCategory | None = None,
        severity: EventSeverity | None = None,
        limit: int | None = None,
    ) -> list[_StateInfoDict]:
        """Return the entries matching every given filter.

        :param event: Exact event name, defaults to `None`.
        :param category: Event category, defaults to `None`.
        :param severity: Minimum severity, defaults to `None`.
        :param limit: Keep only the most recent matches, defaults
            to `None`.
        :return: Matching entries, oldest first.
        """
        floor = _SEVERITY_LEVEL_MAP[severity] if severity else 0
        matches = [
            entry
            for entry in self._entries
            if (event is None or entry["event"] == event)
            and (category is None or entry["category"] is category)
            and _SEVERITY_LEVEL_MAP[entry["severity"]] >= floor
        ]
        return matches[-limit:] if limit else matches

    def get_event_summary(self) -> dict[str, t.Any]:
        """Return counts of the kept entries by name and category."""
        return {
            "total_events": len(self._entries),
            "by_event": dict(Counter(e["event"] for e in self._entries)),
            "by_category": dict(
                Counter(e["category"] for e in self._entries)
            ),
        }

    @property
    def entries(self) -> list[_StateInfoDict]:
        """Get a copy of the kept entries."""
        return list(self._entries)


class Component(Observable):
    """Base class for all managed components in the package.

    Components carry a short unique identifier assigned once for their
    lifetime, their own metrics and audit trail, and a lifecycle of
    initialisation, activation, deactivation and cleanup. They can be
    driven manually or with `async with`.

    :param name: Human-readable component name, defaults to `None`.
    :param type_: Component type identifier, defaults to `None`.
    """

    __slots__: tuple[str] = (
        "_id",
        "_name",
        "_type",
        "_metrics",
        "_audit",
    )

    def __init__(
        self,
        *,
        name: str | None = None,
        type_: str | None = None,
    ) -> None:
        """Initialise a component instance."""
        self._id = str(uuid4())[:8]
        self._name = name or type(self).__name__
        self._type = type_ or "component"
        self._metrics = MetricCollector()
        self._audit = AuditLog()

    def __inspect_attrs__(self) -> _AttributeStream:
        """Yield the component's attributes for introspection."""
        yield "id", self._id
        yield "name", self._name
        yield "type", self._type

    def record(self, event: str, **metadata: t.Any) -> None:
        """Record an event in the component's audit log."""
        self._audit.record_event(event, component=self._name, **metadata)

    async def initialise(self) -> None:
        """Initialise and prepare the component for use."""

    async def activate(self) -> None:
        """Activate the component for operation."""

    async def deactivate(self) -> None:
        """Deactivate the component gracefully."""

    async def cleanup(self) -> None:
        """Perform final cleanup of resources."""

    async def __aenter__(self) -> t.Self:
        """Initialise and activate the component."""
        await self.initialise()
        await self.activate()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Deactivate and clean up the component, even on errors."""
        try:
            await self.deactivate()
        finally:
            await self.cleanup()

    @property
    def id(self) -> str:
        """Get the unique identifier of the component."""
        return self._id

    @property
    def name(self) -> str:
        """Get the human-readable name of the component."""
        return self._name

    @property
    def type(self) -> str:
        """Get the type identifier of the component"""
        return self._type

    @property
    def metrics(self) -> MetricCollector:
        """Get the metrics for the component."""
        return self._metrics

    @property
    def audit(self) -> AuditLog:
        """Get the audit log for the component."""
        return self._audit
