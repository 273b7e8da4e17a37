"""\
Shared call store
=================

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module provides the state shared by every binding of a call
manager: the in-flight registry that rejects overlapping duplicate
calls, the result cache, the cooldown timers that release in-flight
markers and the process-wide validation predicates.

De-duplication and caching are defined by call identity rather than by
the binding issuing the call, so these tables are shared. They live on
an explicit `CallStore` instance handed to the manager instead of in
module globals.

.. note::

    All mutations happen synchronously between suspension points of a
    single event loop, so check-then-insert is atomic without locks.
"""

from __future__ import annotations

import asyncio
import copy
import typing as t

from megamind.core.base import Observable
from megamind.utils.logging import get_logger

if t.TYPE_CHECKING:
    from collections.abc import Iterator

    from megamind.core.gate import Predicate

__all__: tuple[str, ...] = (
    "CallStore",
    "InFlightRegistry",
    "MISSING",
    "ResultCache",
)

logger = get_logger(__name__)


class _Missing:
    """Sentinel for cache misses, `None` being a valid cached value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: t.Final[t.Any] = _Missing()


class InFlightRegistry(Observable):
    """Map invocation keys to the binding currently owning them.

    At most one marker exists per key. A second acquisition for a key
    that is already held is refused, never queued.
    """

    __slots__: tuple[str] = ("_markers",)

    def __init__(self) -> None:
        """Initialise an empty registry."""
        self._markers: dict[str, str] = {}

    def __inspect_attrs__(self) -> Iterator[tuple[str, t.Any]]:
        """Yield registry's attributes for introspection."""
        yield "in_flight", len(self._markers)

    def __contains__(self, key: str) -> bool:
        """Check if a marker exists for a key."""
        return key in self._markers

    def __len__(self) -> int:
        """Return the number of held markers."""
        return len(self._markers)

    def try_acquire(self, key: str, binding_id: str) -> bool:
        """Insert a marker for `key` unless one already exists.

        :param key: Invocation key of the call.
        :param binding_id: Identifier of the binding issuing the call.
        :return: `True` if the marker was inserted, `False` if the key
            is already in flight (for any binding, this one included).
        """
        if key in self._markers:
            return False
        self._markers[key] = binding_id
        return True

    def release(self, key: str) -> None:
        """Remove the marker for `key` unconditionally."""
        self._markers.pop(key, None)

    def owner(self, key: str) -> str | None:
        """Return the binding id holding `key`, if any."""
        return self._markers.get(key)

    def clear(self) -> None:
        """Remove every marker."""
        self._markers.clear()


def _shallow_copy(value: t.Any) -> t.Any:
    try:
        return copy.copy(value)
    except (TypeError, copy.Error):
        return value


class ResultCache(Observable):
    """Map invocation keys to their last successful result.

    Entries never expire on their own; they are removed by a binding
    reset, an explicit eviction or by clearing the whole cache.

    Values are shallow-copied on the way in and out, so a consumer
    mutating the data of one binding in place does not rewrite what
    other bindings are served. Values that cannot be copied are shared.
    """

    __slots__: tuple[str] = ("_entries",)

    def __init__(self) -> None:
        """Initialise an empty cache."""
        self._entries: dict[str, t.Any] = {}

    def __inspect_attrs__(self) -> Iterator[tuple[str, t.Any]]:
        """Yield cache's attributes for introspection."""
        yield "entries", len(self._entries)

    def __contains__(self, key: str) -> bool:
        """Check if a result is cached for a key."""
        return key in self._entries

    def __len__(self) -> int:
        """Return the number of cached results."""
        return len(self._entries)

    def get(self, key: str) -> t.Any:
        """Return the cached result for `key` or `MISSING`."""
        if key not in self._entries:
            return MISSING
        return _shallow_copy(self._entries[key])

    def put(self, key: str, value: t.Any) -> None:
        """Store the latest successful result for `key`."""
        self._entries[key] = _shallow_copy(value)

    def evict(self, key: str) -> None:
        """Drop the cached result for `key`, if any."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every cached result."""
        self._entries.clear()


class CallStore(Observable):
    """State shared by all bindings of a call manager.

    A store owns one in-flight registry, one result cache, the cooldown
    timers keyed by invocation key and the process-wide success and
    error predicates. Share a single store between managers to share
    de-duplication and caching between them.

    .. code-block:: python

        store = CallStore()
        first = CallManager(store)
        second = CallManager(store)
    """

    __slots__: tuple[str] = (
        "_registry",
        "_cache",
        "_timers",
        "success_validator",
        "error_validator",
    )

    def __init__(self) -> None:
        """Initialise an empty store."""
        self._registry = InFlightRegistry()
        self._cache = ResultCache()
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self.success_validator: Predicate | None = None
        self.error_validator: Predicate | None = None

    def __inspect_attrs__(self) -> Iterator[tuple[str, t.Any]]:
        """Yield store's attributes for introspection."""
        yield "in_flight", len(self._registry)
        yield "cached", len(self._cache)
        yield "cooldowns", len(self._timers)

    def schedule_release(
        self,
        key: str,
        delay: int,
        owner: str | None = None,
    ) -> None:
        """Release the in-flight marker for `key` after a cooldown.

        The release always happens on a later iteration of the running
        event loop, even with a zero delay, so a settled call is never
        released in the same step it settled in. Scheduling a key that
        already has a pending release replaces that release.

        :param key: Invocation key to release.
        :param delay: Cooldown in milliseconds.
        :param owner: Binding id the marker must still belong to when
            the cooldown elapses, defaults to `None` (release regardless).
        """
        pending = self._timers.pop(key, None)
        if pending is not None:
            pending.cancel()
        loop = asyncio.get_running_loop()
        self._timers[key] = loop.call_later(
            delay / 1000,
            self._expire,
            key,
            owner,
        )

    def _expire(self, key: str, owner: str | None) -> None:
        """Timer callback releasing a key once its cooldown elapsed."""
        self._timers.pop(key, None)
        if owner is not None and self._registry.owner(key) != owner:
            return
        self._registry.release(key)
        logger.debug("Cooldown elapsed", extra={"key": key})

    def release(self, key: str) -> None:
        """Release `key` now and cancel its pending cooldown, if any."""
        pending = self._timers.pop(key, None)
        if pending is not None:
            pending.cancel()
        self._registry.release(key)

    def cooling_down(self, key: str) -> bool:
        """Check if a release is pending for `key`."""
        return key in self._timers

    def close(self) -> None:
        """Cancel all cooldowns and empty the registry and the cache."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._registry.clear()
        self._cache.clear()

    @property
    def registry(self) -> InFlightRegistry:
        """Get the in-flight registry."""
        return self._registry

    @property
    def cache(self) -> ResultCache:
        """Get the result cache."""
        return self._cache
