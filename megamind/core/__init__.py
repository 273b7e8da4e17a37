"""\
Core
====

Author: Akshay Mestry <xa@mes3.dev>
Created on: Saturday, August 02 2025
Last updated on: Monday, October 19 2026

This module acts as an entry point for combining the call manager, its
bindings and the configurations used throughout this package.
"""

from __future__ import annotations

from .assembler import *
from .base import *
from .binding import *
from .config import *
from .error import *
from .gate import *
from .keys import *
from .manager import *
from .quota import *
from .store import *


__all__: tuple[str, ...] = (
    tuple(assembler.__all__)
    + tuple(base.__all__)
    + tuple(binding.__all__)
    + tuple(config.__all__)
    + tuple(error.__all__)
    + tuple(gate.__all__)
    + tuple(keys.__all__)
    + tuple(manager.__all__)
    + tuple(quota.__all__)
    + tuple(store.__all__)
)
