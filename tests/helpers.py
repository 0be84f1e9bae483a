# /tests/helpers.py
# Shared helpers for running the app in-process

import asyncio
from contextlib import asynccontextmanager

from aiohttp.test_utils import TestClient, TestServer

from fanpress import Settings, create_app


@asynccontextmanager
async def running_app(data_file, **overrides):
    """Start the app on a test server and yield a client for it."""
    settings = Settings(data_file=data_file, **overrides)
    app = create_app(settings)
    async with TestClient(TestServer(app)) as client:
        yield client


async def wait_for(predicate, timeout=2.0):
    """Poll ``predicate`` until it is truthy or ``timeout`` expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


def hold_writes(store):
    """Make the store's file writes wait until ``release`` is set.

    Returns:
        (release, writing): set ``release`` to let writes finish;
        ``writing`` is set once a write has started
    """
    release, writing = asyncio.Event(), asyncio.Event()
    original = store._write

    async def held(payload):
        writing.set()
        await release.wait()
        await original(payload)

    store._write = held
    return release, writing
