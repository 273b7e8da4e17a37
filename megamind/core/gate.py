"""\
Validation gate
===============

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module decides whether a settled call notifies its consumer. A
binding-local predicate wins outright over the process-wide one, and
with neither registered every notification goes through.
"""

from __future__ import annotations

import enum
import typing as t

from megamind.utils.logging import get_logger

__all__: tuple[str, ...] = (
    "NotificationKind",
    "Predicate",
    "should_notify",
)

Predicate = t.Callable[[t.Any], bool]

logger = get_logger(__name__)


class NotificationKind(enum.StrEnum):
    """Kinds of notification guarded by the gate."""

    SUCCESS = "success"
    ERROR = "error"


def should_notify(
    kind: NotificationKind,
    payload: t.Any,
    local: Predicate | None = None,
    global_: Predicate | None = None,
) -> bool:
    """Evaluate the validation gate for a settled call.

    Exactly one predicate is consulted: the local one when registered,
    otherwise the global one for this kind. The global predicate never
    runs when a local predicate exists.

    :param kind: Whether the call succeeded or failed.
    :param payload: The resolved value or the captured exception.
    :param local: Binding-local predicate, defaults to `None`.
    :param global_: Process-wide predicate, defaults to `None`.
    :return: `True` if the consumer's callback should fire.
    """
    predicate = local if local is not None else global_
    if predicate is None:
        return True
    allowed = bool(predicate(payload))
    if not allowed:
        logger.debug(f"{kind} notification blocked by {predicate!r}")
    return allowed
