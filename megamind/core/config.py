"""\
Configurations
=============

Author: Akshay Mestry <xa@mes3.dev>
Created on: Saturday, August 02 2025
Last updated on: Monday, October 19 2026

This module provides the configurations that are used throughout this
package: the per-binding call options and the package-wide logging and
telemetry settings.
"""

from __future__ import annotations

import threading
import typing as t
from weakref import WeakKeyDictionary as WKDictionary

from megamind.core.error import ConfigValidationError
from megamind.core.quota import UNLIMITED
from megamind.core.quota import is_valid_quota

if t.TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Iterator

__all__: tuple[str, ...] = (
    "CallOptions",
    "Config",
    "ConsoleLoggerConfig",
    "FileLoggerConfig",
    "LoggerConfig",
    "TTYLoggerConfig",
    "TelemetryConfig",
    "config_property",
)

_ALLOWED_LOG_LEVELS: tuple[str, ...] = (
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
)
# NOTE(xames3): `qualName` is filled in by the coloured formatter and
# `extra` by every formatter of this package, see
# `megamind.utils.logging`.
_DEFAULT_LOG_FMT: t.Final[str] = (
    "%(asctime)s %(levelname)s %(qualName)s:%(lineno)d %(extra)s: %(message)s"
)
_DEFAULT_LOG_DATEFMT: t.Final[str] = "%Y-%m-%dT%H:%M:%SZ"


T = t.TypeVar("T")


class config_property(t.Generic[T]):  # noqa: N801
    """Descriptor for configuration properties.

    This descriptor class creates and provides functionalities like
    Python's built-in `property` object decorator, but with additional
    features for configuration management such as allowed values,
    custom checks, numeric ranges and immutability.
    """

    __slots__: tuple[str, ...] = (
        "allowed",
        "between",
        "check",
        "default",
        "description",
        "frozen",
        "locks",
        "property",
        "validate",
    )

    _object_locks: WKDictionary[object, threading.RLock] = WKDictionary()
    _global_lock: threading.RLock = threading.RLock()

    def __init__(
        self,
        default: T,
        *,
        frozen: bool = False,
        description: str | None = None,
        allowed: Iterable[T] | None = None,
        check: t.Callable[[T], bool] | None = None,
        between: tuple[int | float, ...] | None = None,
    ) -> None:
        """Initialise configuration property."""
        self.default = default
        self.frozen = frozen
        self.description = description
        self.allowed = allowed
        self.check = check
        self.between = between
        self.property: str = ""
        self.validate: bool = any([self.between, self.check, self.allowed])
        self.locks: dict[int, threading.RLock] = {}

    def __set_name__(self, owner: type, name: str) -> None:
        """Register the property name and its default on the owner.

        :param owner: The class where the property is being declared.
        :param name: The name of the property.
        :raises ConfigValidationError: If the default value does not
            satisfy the declared constraints.
        """
        self.property = f"_{name}"
        if self.default is not None and self.validate:
            try:
                self.__validate__(self.default)
            except ConfigValidationError as error:
                raise ConfigValidationError(
                    f"got invalid value for {name!r}: {error}"
                ) from error
        setattr(owner, self.property, self.default)

    @t.overload
    def __get__(self, instance: None, owner: type) -> config_property[T]: ...

    @t.overload
    def __get__(self, instance: object, owner: type) -> T: ...

    def __get__(
        self,
        instance: object | None,
        owner: type,
    ) -> config_property[T] | T:
        """Get and return the property value from the instance."""
        if instance is None:
            return self
        return getattr(instance, self.property, self.default)

    def __set__(self, instance: object, value: T) -> None:
        """Set the property with validation & immutability checks.

        :param instance: The class instance where the property is being
            set.
        :param value: The value to be set for the property.
        :raises ConfigValidationError: If the property is frozen or the
            value fails validation.
        """
        if self.frozen:
            raise ConfigValidationError(
                f"cannot modify frozen property: {self.property[1:]!r}",
            )
        if self.validate:
            with self._acquire_lock(instance):
                self.__validate__(value)
        setattr(instance, self.property, value)

    def __validate__(self, value: t.Any) -> None:
        """Validate the property value based on constraints.

        :param value: The value to be validated.
        :raises ConfigValidationError: If the value does not meet the
            validation criteria.
        """
        if self.allowed is not None and value not in self.allowed:
            raise ConfigValidationError(
                f"{value!r} is not one of the allowed values "
                f"({', '.join(str(item) for item in self.allowed)})"
            )
        if self.check is not None:
            try:
                if not self.check(value):
                    raise ConfigValidationError("property validation failed")
            except ConfigValidationError:
                raise
            except Exception as error:
                raise ConfigValidationError(
                    f"property validation failed for {value!r} with "
                    f"message: {error}"
                ) from error
        if self.between is not None and len(self.between) == 2:
            minimum, maximum = self.between
            if not all(
                isinstance(num, int | float) for num in (minimum, maximum)
            ):
                raise ConfigValidationError("must be a tuple of two numbers")
            if not (minimum <= value <= maximum):
                raise ConfigValidationError(
                    f"{value} is not between {minimum} and {maximum}"
                )

    def _acquire_lock(self, instance: object) -> threading.RLock:
        """Return the lock guarding validation for an instance.

        Instances supporting weak references share a weak dictionary so
        their locks disappear with them; the rest fall back to a regular
        dictionary keyed by `id`.

        :param instance: The class instance being modified.
        :return: A re-entrant lock for the instance.
        """
        with self._global_lock:
            try:
                lock = self._object_locks.get(instance)
                if lock is None:
                    lock = self._object_locks[instance] = threading.RLock()
            except TypeError:
                lock = self.locks.setdefault(id(instance), threading.RLock())
            return lock


def _is_delay(value: t.Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class CallOptions:
    """Options controlling how a binding invokes its operation.

    Options are validated on assignment, so an instance always holds a
    usable combination. Unknown option names are rejected up front
    rather than silently ignored.

    :param overrides: Option values to replace the defaults with.
    :raises ConfigValidationError: If an option is unknown or invalid.

    .. code-block:: python

        options = CallOptions(max_calls=3, cache=True)
        options.minimum_delay_between_calls = 1000
    """

    minimum_delay_between_calls: config_property[int] = config_property(
        0,
        check=_is_delay,
        description="Milliseconds after a call settles before its key frees",
    )
    max_calls: config_property[int | str] = config_property(
        UNLIMITED,
        check=is_valid_quota,
        description="Maximum accepted calls per binding",
    )
    call_immediately: config_property[bool] = config_property(
        True,
        allowed=[True, False],
    )
    cache: config_property[bool] = config_property(False, allowed=[True, False])
    debug: config_property[bool] = config_property(False, allowed=[True, False])

    def __init__(self, **overrides: t.Any) -> None:
        """Initialise call options with validated overrides."""
        for name, value in overrides.items():
            if not isinstance(
                getattr(type(self), name, None),
                config_property,
            ):
                raise ConfigValidationError(f"unknown call option: {name!r}")
            setattr(self, name, value)

    def __iter__(self) -> Iterator[tuple[str, t.Any]]:
        """Iterate over option names and their current values."""
        for name, value in vars(type(self)).items():
            if isinstance(value, config_property):
                yield name, getattr(self, name)

    def __repr__(self) -> str:
        """Return a string representation of the options."""
        extra = ", ".join(f"{name}={value!r}" for name, value in self)
        return f"{type(self).__name__}({extra})"


class FileLoggerConfig:
    """File logger configuration.

    This class provides configuration options for logging to a file with
    options for log rotation and backup retention.
    """

    enable: config_property[bool] = config_property(
        False,
        allowed=[True, False],
    )
    level: config_property[str] = config_property(
        "INFO",
        allowed=_ALLOWED_LOG_LEVELS,
    )
    fmt: config_property[str] = config_property(_DEFAULT_LOG_FMT)
    path: config_property[str] = config_property(
        "logs/megamind.log",
        check=lambda x: isinstance(x, str) and bool(x.strip()),
    )
    encoding: config_property[str] = config_property("utf-8", frozen=True)
    max_size: config_property[str] = config_property("10MB")
    backups: config_property[int] = config_property(5, check=lambda x: x >= 0)


class ConsoleLoggerConfig:
    """Console logger configuration.

    This class provides configuration options for logging to the console
    or the tty, typically while developing against a binding with its
    `debug` option turned on.
    """

    enable: config_property[bool] = config_property(
        True,
        allowed=[True, False],
    )
    level: config_property[str] = config_property(
        "DEBUG",
        allowed=_ALLOWED_LOG_LEVELS,
    )
    fmt: config_property[str] = config_property(_DEFAULT_LOG_FMT)
    colour: config_property[bool] = config_property(
        True,
        allowed=[True, False],
    )


TTYLoggerConfig = ConsoleLoggerConfig


class LoggerConfig:
    """Logger configuration.

    This class combines the file and console logger configurations into
    a single logging setup consumed by `megamind.utils.logging.configure`.
    """

    level: config_property[str] = config_property(
        "DEBUG",
        allowed=_ALLOWED_LOG_LEVELS,
    )
    fmt: config_property[str] = config_property(_DEFAULT_LOG_FMT)
    datefmt: config_property[str] = config_property(_DEFAULT_LOG_DATEFMT)
    as_json: config_property[bool] = config_property(
        False,
        allowed=[True, False],
    )
    file: FileLoggerConfig = FileLoggerConfig()
    tty: TTYLoggerConfig = TTYLoggerConfig()


class TelemetryConfig:
    """Telemetry configuration for `OpenTelemetry` tracing."""

    enabled: config_property[bool] = config_property(
        False,
        allowed=[True, False],
    )
    name: config_property[str] = config_property("")


class Config:
    """Configuration.

    This class serves as the main configuration object for the package.
    It provides a centralised place to manage logging and telemetry
    settings shared by every call manager.
    """

    name: config_property[str] = config_property("megamind", frozen=True)
    version: config_property[str] = config_property("19.10.2026", frozen=True)
    debug: config_property[bool] = config_property(False, allowed=[True, False])
    logger: LoggerConfig = LoggerConfig()
    telemetry: TelemetryConfig = TelemetryConfig()
