"""\
Result assembly
===============

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

This module decides how a freshly resolved value is folded into the
data a binding already holds.
"""

from __future__ import annotations

import enum
import typing as t
from collections.abc import Mapping
from collections.abc import Sequence

__all__: tuple[str, ...] = (
    "AssemblyMode",
    "assemble",
)


class AssemblyMode(enum.StrEnum):
    """Result assembly policies."""

    REPLACE = "replace"
    APPEND = "append"


def _is_sequence(value: t.Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def assemble(
    previous: t.Any,
    incoming: t.Any,
    mode: AssemblyMode = AssemblyMode.REPLACE,
) -> t.Any:
    """Fold an incoming result into the previously stored one.

    In append mode, when both values are mappings, the first field of
    `previous` whose value is a sequence in both mappings is
    concatenated and the rest of `incoming` is kept as is. This is a
    heuristic, not a deep merge: only that single field is merged. Any
    other shape falls back to replacing.

    :param previous: The data currently held by the binding.
    :param incoming: The newly resolved value.
    :param mode: Assembly policy, defaults to `AssemblyMode.REPLACE`.
    :return: The value the binding should hold next.

    .. code-block:: python

        assemble({"items": [1, 2]}, {"items": [3, 4]}, AssemblyMode.APPEND)
        # {"items": [1, 2, 3, 4]}
    """
    if mode is not AssemblyMode.APPEND:
        return incoming
    if not isinstance(previous, Mapping) or not isinstance(incoming, Mapping):
        return incoming
    for field, value in previous.items():
        if field in incoming and _is_sequence(value):
            if _is_sequence(incoming[field]):
                merged = dict(incoming)
                merged[field] = [*value, *incoming[field]]
                return merged
    return incoming
