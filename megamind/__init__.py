"""\
Megamind
========

Author: Akshay Mestry <xa@mes3.dev>
Created on: Monday, October 19 2026
Last updated on: Monday, October 19 2026

Call manager for asynchronous operations.

This package (megamind) manages repeated invocation of asynchronous
operations on behalf of a consumer. It tracks loading, result and error
state, rejects overlapping duplicate calls, optionally caches results
by call identity, enforces a maximum number of calls and a cooldown
between them, assembles results by replacing or appending, and gates
success and error notifications through local and process-wide
validators.

.. code-block:: python

    from megamind import CallManager

    manager = CallManager()
    users = await manager.attach(fetch_users, params=("admins",))
    print(users.data, users.error, users.is_loading)
"""

from __future__ import annotations

from .core import *
from .utils import *


__all__: tuple[str, ...] = ("__version__",)
__all__ += core.__all__
__all__ += utils.__all__

__version__: str = "19.10.2026"
