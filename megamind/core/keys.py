"""\
Invocation keys
===============

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module derives the identity of a call from the operation and its
arguments. Two calls with the same operation and structurally equal
arguments share a key no matter which binding issued them, which is
what makes de-duplication and caching work across bindings.
"""

from __future__ import annotations

import json
import types
import typing as t

if t.TYPE_CHECKING:
    from collections.abc import Sequence

__all__: tuple[str, ...] = (
    "PLACEHOLDER",
    "build_key",
    "operation_name",
)

PLACEHOLDER: t.Final[str] = "<unserialisable>"
_SEPARATOR: t.Final[str] = ":"


def _placeholder(value: t.Any) -> str:
    return PLACEHOLDER


def operation_name(operation: t.Callable[..., t.Any]) -> str:
    """Return a stable, qualified name for an operation.

    Functions defined inside another function and lambdas share their
    qualified name with every sibling made by the same code, so their
    name also carries the object's identity.

    :param operation: The callable being managed.
    :return: `<module>.<qualname>`, suffixed with `@<id>` for nested
        functions and lambdas, or the callable's `repr` when it has no
        qualified name (partials, callable instances, etc.).
    """
    qualname = getattr(operation, "__qualname__", None)
    if not isinstance(qualname, str):
        return repr(operation)
    module = getattr(operation, "__module__", None)
    name = f"{module}.{qualname}" if module else qualname
    if isinstance(operation, types.FunctionType) and (
        "<locals>" in qualname or "<lambda>" in qualname
    ):
        name = f"{name}@{id(operation):x}"
    return name


def build_key(name: str, args: Sequence[t.Any] | None) -> str:
    """Build the invocation key for an operation and its arguments.

    Arguments are serialised as canonical JSON (sorted keys, compact
    separators). Values that JSON cannot represent are replaced by a
    fixed placeholder; if the sequence still cannot be serialised (for
    example a circular reference) the whole payload becomes the
    placeholder.

    :param name: Operation name, see :func:`operation_name`.
    :param args: Positional arguments of the call, `None` for no
        arguments.
    :return: The invocation key.
    """
    try:
        payload = json.dumps(
            list(args or ()),
            sort_keys=True,
            separators=(",", ":"),
            default=_placeholder,
        )
    except (TypeError, ValueError):
        payload = PLACEHOLDER
    return f"{name}{_SEPARATOR}{payload}"
