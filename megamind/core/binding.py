"""\
Bindings
========

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module provides the binding, the single attachment point between a
consumer and one asynchronous operation. A binding owns the visible
state of its calls (data, latest data, error, loading flag and call
counter) and drives each call through the lifecycle::

    idle -> loading -> succeeded | failed -> idle (on clear)

Every call request is turned into an invocation key, looked up in the
shared result cache, checked against the in-flight registry and the
binding's quota, and only then dispatched. Rejected requests never
raise; they are logged (when the binding's `debug` option is on) and
recorded in the binding's audit log.
"""

from __future__ import annotations

import enum
import inspect
import logging
import time
import typing as t

from opentelemetry import trace
from opentelemetry.trace import Status
from opentelemetry.trace import StatusCode

from megamind.core.assembler import AssemblyMode
from megamind.core.assembler import assemble
from megamind.core.base import Component
from megamind.core.base import Observable
from megamind.core.config import CallOptions
from megamind.core.error import BindingError
from megamind.core.gate import NotificationKind
from megamind.core.gate import should_notify
from megamind.core.keys import build_key
from megamind.core.keys import operation_name
from megamind.core.quota import check_quota
from megamind.core.store import MISSING
from megamind.utils.logging import get_logger

if t.TYPE_CHECKING:
    from collections.abc import Iterator
    from collections.abc import Sequence

    from megamind.core.gate import Predicate
    from megamind.core.store import CallStore

__all__: tuple[str, ...] = (
    "Binding",
    "BindingEvents",
    "CallState",
    "required_arguments",
)

logger = get_logger(__name__)


class CallState(enum.StrEnum):
    """Lifecycle states of a binding's calls."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BindingEvents(Observable):
    """Consumer callbacks and local validators of a binding.

    All callbacks are synchronous and optional. `validate_on_success`
    and `validate_on_error` are the binding-local predicates of the
    validation gate; when set they fully replace the process-wide
    predicates for this binding.

    :param on_loading_start: Called when a call is dispatched.
    :param on_loading_finished: Called when a call settles or is
        rejected for quota.
    :param on_success: Called with the resolved value.
    :param on_error: Called with the captured exception.
    :param on_loading_change: Called with the new loading flag.
    :param validate_on_success: Local success predicate.
    :param validate_on_error: Local error predicate.
    """

    __slots__: tuple[str, ...] = (
        "on_loading_start",
        "on_loading_finished",
        "on_success",
        "on_error",
        "on_loading_change",
        "validate_on_success",
        "validate_on_error",
    )

    def __init__(
        self,
        *,
        on_loading_start: t.Callable[[], t.Any] | None = None,
        on_loading_finished: t.Callable[[], t.Any] | None = None,
        on_success: t.Callable[[t.Any], t.Any] | None = None,
        on_error: t.Callable[[Exception], t.Any] | None = None,
        on_loading_change: t.Callable[[bool], t.Any] | None = None,
        validate_on_success: Predicate | None = None,
        validate_on_error: Predicate | None = None,
    ) -> None:
        """Initialise the callbacks of a binding."""
        self.on_loading_start = on_loading_start
        self.on_loading_finished = on_loading_finished
        self.on_success = on_success
        self.on_error = on_error
        self.on_loading_change = on_loading_change
        self.validate_on_success = validate_on_success
        self.validate_on_error = validate_on_error

    def __inspect_attrs__(self) -> Iterator[tuple[str, t.Any]]:
        """Yield the names of the registered callbacks."""
        for name in self.__slots__:
            if getattr(self, name) is not None:
                yield name, True


def required_arguments(operation: t.Callable[..., t.Any]) -> int:
    """Count the positional parameters an operation cannot do without.

    :param operation: The callable to inspect.
    :return: Number of positional parameters without a default. Zero if
        the signature cannot be inspected.
    """
    try:
        signature = inspect.signature(operation)
    except (TypeError, ValueError):
        return 0
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    return sum(
        1
        for parameter in signature.parameters.values()
        if parameter.kind in positional
        and parameter.default is inspect.Parameter.empty
    )


class Binding(Component):
    """Manage repeated calls of one asynchronous operation.

    A binding is normally created through
    :meth:`megamind.core.manager.CallManager.attach`, which also
    activates it. Activation performs the immediate call when the
    `call_immediately` option is on.

    :param operation: Callable returning a value or an awaitable.
    :param store: Shared store holding the in-flight registry, result
        cache and process-wide validators.
    :param options: Call options, defaults to `CallOptions()`.
    :param params: Arguments for the immediate call on activation,
        defaults to `None`.
    :param events: Consumer callbacks, defaults to `None`.
    :param tracer: Tracer used for dispatched calls, defaults to the
        globally configured `OpenTelemetry` tracer.
    :raises BindingError: If `operation` is not callable.

    .. code-block:: python

        async def fetch_page(page):
            ...

        binding = await manager.attach(
            fetch_page,
            params=(1,),
            cache=True,
        )
        await binding.invoke_append(2)
        print(binding.data, binding.call_count)
    """

    __slots__: tuple[str, ...] = (
        "_operation",
        "_operation_name",
        "_options",
        "_params",
        "_events",
        "_store",
        "_tracer",
        "_data",
        "_latest_data",
        "_error",
        "_is_loading",
        "_call_count",
        "_state",
        "_key",
        "_cached_keys",
        "_activated",
        "_attached",
    )

    def __init__(
        self,
        operation: t.Callable[..., t.Any],
        store: CallStore,
        *,
        options: CallOptions | None = None,
        params: Sequence[t.Any] | None = None,
        events: BindingEvents | None = None,
        tracer: trace.Tracer | None = None,
    ) -> None:
        """Initialise a binding with idle state."""
        if not callable(operation):
            raise BindingError(f"operation must be callable, got {operation!r}")
        self._operation = operation
        self._operation_name = operation_name(operation)
        super().__init__(
            name=getattr(operation, "__name__", self._operation_name),
            type_="binding",
        )
        self._options = options or CallOptions()
        self._params = tuple(params) if params is not None else None
        self._events = events or BindingEvents()
        self._store = store
        self._tracer = tracer or trace.get_tracer(__name__)
        self._data: t.Any = None
        self._latest_data: t.Any = None
        self._error: Exception | None = None
        self._is_loading = False
        self._call_count = 0
        self._state = CallState.IDLE
        self._key: str | None = None
        self._cached_keys: set[str] = set()
        self._activated = False
        self._attached = True
        self.record("binding_attached", operation=self._operation_name)

    def __inspect_attrs__(self) -> Iterator[tuple[str, t.Any]]:
        """Yield the binding's attributes for introspection."""
        yield from super().__inspect_attrs__()
        yield "state", self._state
        yield "call_count", self._call_count
        yield "is_loading", self._is_loading
        if not self._attached:
            yield "attached", False

    def _log(self, level: int, message: str, **extra: t.Any) -> None:
        """Log a call-flow message when the `debug` option is on."""
        if self._options.debug:
            logger.log(
                level,
                f"{self._name} :: {message}",
                extra={"binding": self._id, **extra},
            )

    def _emit(self, callback: str, *args: t.Any) -> None:
        """Run a consumer callback, recording rather than raising.

        Exceptions raised by the callback are logged and audited, and
        the rest of the transition carries on.
        """
        function = getattr(self._events, callback)
        if function is None:
            return
        try:
            function(*args)
        except Exception as error:
            logger.exception(
                f"{self._name} :: {callback} raised {error!r}",
                extra={"binding": self._id},
            )
            self.record("callback_error", callback=callback, error=str(error))

    def _notify(self, kind: NotificationKind, payload: t.Any) -> None:
        """Pass a settled call through the validation gate.

        :param kind: Whether the call succeeded or failed.
        :param payload: The resolved value or captured exception.
        """
        if kind is NotificationKind.SUCCESS:
            local = self._events.validate_on_success
            global_ = self._store.success_validator
            callback = "on_success"
        else:
            local = self._events.validate_on_error
            global_ = self._store.error_validator
            callback = "on_error"
        try:
            allowed = should_notify(kind, payload, local, global_)
        except Exception as error:
            logger.exception(
                f"{self._name} :: {kind} validator raised {error!r}",
                extra={"binding": self._id},
            )
            self.record("callback_error", callback=kind, error=str(error))
            allowed = False
        if allowed:
            self._emit(callback, payload)
        else:
            self.record("notification_suppressed", kind=kind)

    def _finish_loading(self) -> None:
        """Close the loading transition."""
        self._is_loading = False
        self._emit("on_loading_finished")
        self._emit("on_loading_change", False)

    async def invoke(self, *args: t.Any) -> None:
        """Call the operation and replace the stored data.

        :param args: Positional arguments for the operation.
        """
        self._log(logging.DEBUG, "invoke")
        await self._fetch(args, AssemblyMode.REPLACE)

    async def invoke_append(self, *args: t.Any) -> None:
        """Call the operation and append into the stored data.

        :param args: Positional arguments for the operation.

        .. seealso::

            :func:`megamind.core.assembler.assemble` for how results
            are appended.
        """
        self._log(logging.DEBUG, "invoke_append")
        await self._fetch(args, AssemblyMode.APPEND)

    async def _fetch(self, args: tuple[t.Any, ...], mode: AssemblyMode) -> None:
        """Run one call request through cache, registry and quota.

        :param args: Positional arguments for the operation.
        :param mode: How the resolved value is assembled into `data`.
        """
        if not self._attached:
            self._log(logging.WARNING, "binding is detached")
            self._metrics.record_rejection("detached")
            self.record("detached_rejected")
            return
        key = build_key(self._operation_name, args)
        if self._options.cache:
            cached = self._store.cache.get(key)
            if cached is not MISSING:
                self._serve_cached(key, cached, mode)
                return
        if not self._store.registry.try_acquire(key, self._id):
            self._log(
                logging.WARNING,
                "last call isn't finished yet",
                key=key,
            )
            self._metrics.record_rejection("duplicate")
            self.record(
                "duplicate_rejected",
                key=key,
                owner=self._store.registry.owner(key),
            )
            return
        if not check_quota(self._call_count, self._options.max_calls):
            self._store.release(key)
            self._log(logging.WARNING, "max calls exceeded", key=key)
            self._metrics.record_rejection("quota")
            self.record("quota_exhausted", key=key, calls=self._call_count)
            self._finish_loading()
            return
        self._call_count += 1
        self._key = key
        self._state = CallState.LOADING
        self._emit("on_loading_start")
        self._is_loading = True
        self._emit("on_loading_change", True)
        self._log(logging.DEBUG, "started calling", key=key)
        self.record("call_started", key=key, mode=mode)
        try:
            await self._execute(key, args, mode)
        finally:
            if self._store.registry.owner(key) == self._id:
                self._store.schedule_release(
                    key,
                    self._options.minimum_delay_between_calls,
                    self._id,
                )
                self.record(
                    "cooldown_scheduled",
                    key=key,
                    delay=self._options.minimum_delay_between_calls,
                )

    async def _execute(
        self,
        key: str,
        args: tuple[t.Any, ...],
        mode: AssemblyMode,
    ) -> None:
        """Dispatch the operation inside a span and settle its outcome."""
        attributes = {
            "megamind.binding": self._id,
            "megamind.operation": self._operation_name,
            "megamind.key": key,
            "megamind.mode": str(mode),
        }
        with self._tracer.start_as_current_span(
            "megamind.invoke",
            attributes=attributes,
        ) as span:
            started = time.perf_counter()
            try:
                result = self._operation(*args)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as error:
                span.record_exception(error)
                span.set_status(Status(StatusCode.ERROR, str(error)))
                took = time.perf_counter() - started
                self._metrics.record_call(took, success=False)
                self._settle_failure(key, error)
            else:
                took = time.perf_counter() - started
                self._metrics.record_call(took, success=True)
                self._settle_success(key, result, mode)

    def _settle_success(self, key: str, result: t.Any, mode: AssemblyMode) -> None:
        """Apply a resolved value to the binding's state."""
        if self._options.cache:
            self._store.cache.put(key, result)
            self._cached_keys.add(key)
        if not self._attached:
            self.record("state_discarded", key=key)
            return
        self._data = assemble(self._data, result, mode)
        self._latest_data = result
        self._state = CallState.SUCCEEDED
        self._log(logging.DEBUG, "call succeeded", key=key)
        self.record("call_succeeded", key=key)
        self._notify(NotificationKind.SUCCESS, result)
        self._finish_loading()
        self._log(logging.DEBUG, "call finished", key=key)

    def _settle_failure(self, key: str, error: Exception) -> None:
        """Apply a captured exception to the binding's state."""
        if not self._attached:
            self.record("state_discarded", key=key)
            return
        self._error = error
        self._state = CallState.FAILED
        self._log(logging.ERROR, f"call failed: {error!r}", key=key)
        self.record("call_failed", key=key, error=repr(error))
        self._notify(NotificationKind.ERROR, error)
        self._finish_loading()
        self._log(logging.DEBUG, "call finished", key=key)

    def _serve_cached(self, key: str, cached: t.Any, mode: AssemblyMode) -> None:
        """Apply a cached value without dispatching the operation."""
        self._key = key
        self._cached_keys.add(key)
        self._data = assemble(self._data, cached, mode)
        self._latest_data = cached
        self._state = CallState.SUCCEEDED
        self._log(logging.DEBUG, "served from cache", key=key)
        self._metrics.record_cache_hit()
        self.record("cache_hit", key=key)
        self._notify(NotificationKind.SUCCESS, cached)

    def clear(self) -> None:
        """Reset the visible state back to idle.

        The in-flight marker this binding still holds for its current
        key is released. Cached results and the call counter are kept,
        so a fresh call with the same arguments is served from cache.
        """
        self._log(logging.DEBUG, "clear")
        self._data = None
        self._latest_data = None
        self._error = None
        self._is_loading = False
        self._state = CallState.IDLE
        key = self._key
        if key is not None and self._store.registry.owner(key) == self._id:
            self._store.release(key)
        self.record("state_cleared", key=key)

    def reset(self) -> None:
        """Clear the state, zero the counter and evict cached results.

        Every cache entry this binding wrote or was served from is
        evicted, so the next call with the same arguments dispatches
        the operation again.
        """
        self.clear()
        self._call_count = 0
        for key in self._cached_keys:
            self._store.cache.evict(key)
        evicted = len(self._cached_keys)
        self._cached_keys.clear()
        self.record("state_reset", evicted=evicted)

    async def activate(self) -> None:
        """Activate the binding and perform the immediate call.

        The immediate call happens once per binding, when the
        `call_immediately` option is on and either `params` were given
        or the operation has no required positional parameters. When
        arguments are required but missing, the problem is logged and
        no call is attempted.
        """
        if self._activated:
            return
        self._activated = True
        self.record("binding_activated")
        if not self._options.call_immediately:
            return
        if self._params is not None:
            await self.invoke(*self._params)
        elif required_arguments(self._operation) == 0:
            self._log(
                logging.DEBUG,
                "calling right away because no params found",
            )
            await self.invoke()
        else:
            logger.error(
                f"{self._name} :: unable to call because you need to pass "
                "some params",
                extra={"binding": self._id},
            )
            self.record("auto_invoke_skipped")

    async def deactivate(self) -> None:
        """Detach the binding, see :meth:`detach`."""
        self.detach()

    def detach(self) -> None:
        """Detach the binding from its consumer.

        An outstanding call is not cancelled: it runs to completion and
        its cooldown still applies, but its result no longer touches
        this binding. New calls on a detached binding are ignored.
        """
        if not self._attached:
            return
        self._attached = False
        self.record("binding_detached")

    @property
    def data(self) -> t.Any:
        """Get the assembled data of successful calls."""
        return self._data

    @property
    def latest_data(self) -> t.Any:
        """Get the raw value of the latest successful call."""
        return self._latest_data

    @property
    def error(self) -> Exception | None:
        """Get the exception of the latest failed call."""
        return self._error

    @property
    def is_loading(self) -> bool:
        """Check if a call is in progress."""
        return self._is_loading

    @property
    def call_count(self) -> int:
        """Get the number of calls accepted against the quota."""
        return self._call_count

    @property
    def state(self) -> CallState:
        """Get the lifecycle state of the binding."""
        return self._state

    @property
    def key(self) -> str | None:
        """Get the invocation key of the latest accepted call."""
        return self._key

    @property
    def attached(self) -> bool:
        """Check if the binding is still attached."""
        return self._attached

    @property
    def operation(self) -> t.Callable[..., t.Any]:
        """Get the managed operation."""
        return self._operation

    @property
    def options(self) -> CallOptions:
        """Get the call options of the binding."""
        return self._options

    @property
    def events(self) -> BindingEvents:
        """Get the consumer callbacks of the binding."""
        return self._events
