"""\
Call manager
============

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module provides the call manager, the entry point consumers use to
attach bindings to their asynchronous operations. The manager owns (or
is handed) the shared store and hands it to every binding it creates,
together with its tracer.
"""

from __future__ import annotations

import typing as t
from contextlib import asynccontextmanager

from megamind.core.base import Observable
from megamind.core.binding import Binding
from megamind.core.binding import BindingEvents
from megamind.core.config import CallOptions
from megamind.core.config import Config
from megamind.core.store import CallStore
from megamind.utils.logging import configure
from megamind.utils.logging import get_logger
from megamind.utils.opentelemetry import get_tracer

if t.TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from collections.abc import Iterator
    from collections.abc import Sequence

    from megamind.core.gate import Predicate

__all__: tuple[str, ...] = ("CallManager",)


class CallManager(Observable):
    """Attach and track bindings sharing one call store.

    :param store: Shared store, defaults to a new `CallStore`. Pass the
        same store to several managers to share de-duplication and
        caching between them.
    :param config: Package configuration, defaults to `Config()`. When
        given, its `logger` settings are applied to the `megamind`
        logger with :func:`megamind.utils.logging.configure`; without
        it the host application's logging setup is left alone.

    .. code-block:: python

        manager = CallManager()
        manager.set_global_success_validator(lambda data: data is not None)

        async with manager.binding(fetch_users, call_immediately=False) as users:
            await users.invoke("admins")
            print(users.data)
    """

    __slots__: tuple[str, ...] = (
        "_store",
        "_config",
        "_logger",
        "_tracer",
        "_bindings",
    )

    def __init__(
        self,
        store: CallStore | None = None,
        *,
        config: Config | None = None,
    ) -> None:
        """Initialise a call manager."""
        self._store = store or CallStore()
        self._config = config or Config()
        if config is not None:
            configure(config.logger)
        self._logger = get_logger(__name__)
        self._tracer = get_tracer(config=self._config)
        self._bindings: dict[str, Binding] = {}

    def __inspect_attrs__(self) -> Iterator[tuple[str, t.Any]]:
        """Yield manager's attributes for introspection."""
        yield "bindings", len(self._bindings)
        yield "store", self._store

    def create(
        self,
        operation: t.Callable[..., t.Any],
        *,
        params: Sequence[t.Any] | None = None,
        options: CallOptions | None = None,
        events: BindingEvents | None = None,
        **overrides: t.Any,
    ) -> Binding:
        """Create and register a binding without activating it.

        :param operation: Callable returning a value or an awaitable.
        :param params: Arguments for the immediate call, defaults
            to `None`.
        :param options: Call options, defaults to `None`.
        :param events: Consumer callbacks, defaults to `None`.
        :param overrides: Option values applied on top of `options`,
            for example ``cache=True``.
        :return: The registered, not yet activated, binding.
        :raises ConfigValidationError: If an option is unknown or
            invalid.
        :raises BindingError: If `operation` is not callable.
        """
        if options is None:
            options = CallOptions(**overrides)
        elif overrides:
            options = CallOptions(**{**dict(options), **overrides})
        binding = Binding(
            operation,
            self._store,
            options=options,
            params=params,
            events=events,
            tracer=self._tracer,
        )
        self._bindings[binding.id] = binding
        self._logger.debug(
            f"Attached {binding.name!r}",
            extra={"binding": binding.id},
        )
        return binding

    async def attach(
        self,
        operation: t.Callable[..., t.Any],
        *,
        params: Sequence[t.Any] | None = None,
        options: CallOptions | None = None,
        events: BindingEvents | None = None,
        **overrides: t.Any,
    ) -> Binding:
        """Attach a binding and activate it.

        Activation performs the immediate call (awaited to completion)
        when the `call_immediately` option is on. See :meth:`create` for
        the parameters.

        :return: The active binding.
        """
        binding = self.create(
            operation,
            params=params,
            options=options,
            events=events,
            **overrides,
        )
        await binding.initialise()
        await binding.activate()
        return binding

    async def detach(self, binding: Binding) -> None:
        """Detach a binding and forget about it.

        :param binding: A binding created by this manager.
        """
        await binding.deactivate()
        await binding.cleanup()
        self._bindings.pop(binding.id, None)
        self._logger.debug(
            f"Detached {binding.name!r}",
            extra={"binding": binding.id},
        )

    @asynccontextmanager
    async def binding(
        self,
        operation: t.Callable[..., t.Any],
        *,
        params: Sequence[t.Any] | None = None,
        options: CallOptions | None = None,
        events: BindingEvents | None = None,
        **overrides: t.Any,
    ) -> AsyncIterator[Binding]:
        """Attach a binding for the duration of an `async with` block.

        :yield: The active binding, detached again on exit.
        """
        binding = await self.attach(
            operation,
            params=params,
            options=options,
            events=events,
            **overrides,
        )
        try:
            yield binding
        finally:
            await self.detach(binding)

    def set_global_success_validator(self, predicate: Predicate | None) -> None:
        """Set the process-wide success predicate.

        It applies to every binding sharing this manager's store that
        has no local `validate_on_success`. Pass `None` to remove it.
        """
        self._store.success_validator = predicate

    def set_global_error_validator(self, predicate: Predicate | None) -> None:
        """Set the process-wide error predicate.

        It applies to every binding sharing this manager's store that
        has no local `validate_on_error`. Pass `None` to remove it.
        """
        self._store.error_validator = predicate

    def close(self) -> None:
        """Cancel pending cooldowns and empty the shared store."""
        self._store.close()

    @property
    def store(self) -> CallStore:
        """Get the shared call store."""
        return self._store

    @property
    def bindings(self) -> list[Binding]:
        """Get the bindings currently attached through this manager."""
        return list(self._bindings.values())

    @property
    def tracer(self) -> t.Any:
        """Get the manager's tracer."""
        return self._tracer
