"""\
Quota
=====

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module provides the call quota check used by every binding. The
counter itself lives on the binding and is incremented only when a call
is accepted, so rapid calls against the same binding consume quota in
call order. The cooldown half of the bookkeeping is a timer owned by
`megamind.core.store.CallStore`.
"""

from __future__ import annotations

import typing as t

__all__: tuple[str, ...] = (
    "UNLIMITED",
    "check_quota",
    "is_valid_quota",
)

UNLIMITED: t.Final[str] = "unlimited"


def is_valid_quota(value: t.Any) -> bool:
    """Check if a value is usable as a `max_calls` option."""
    if value == UNLIMITED:
        return True
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def check_quota(call_count: int, max_calls: int | str) -> bool:
    """Return `True` if another call may be accepted.

    :param call_count: Number of calls accepted so far.
    :param max_calls: Maximum number of calls, or `UNLIMITED`.
    :return: `True` if the quota is unlimited or not yet reached.
    """
    if max_calls == UNLIMITED:
        return True
    return call_count < max_calls
