import asyncio

import pytest

from megamind.core.manager import CallManager
from megamind.core.store import CallStore


@pytest.fixture
def store():
    store = CallStore()
    yield store
    store.close()


@pytest.fixture
def manager(store):
    manager = CallManager(store)
    yield manager
    manager.close()


@pytest.fixture
def recorder():
    """Operation recording its arguments, resolving to `ok-<ms>`."""

    class Recorder:
        def __init__(self):
            self.calls = []

        async def __call__(self, ms):
            self.calls.append(ms)
            await asyncio.sleep(ms / 1000)
            return f"ok-{ms}"

    return Recorder()
