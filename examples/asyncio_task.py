"""A spawned asyncio task, entered and exited on every step it takes."""

import asyncio

import taskscope
from taskscope.integrations.asyncio import spawn


async def sleeper() -> None:
    await asyncio.sleep(0.1)


async def main() -> None:
    await spawn(sleeper())


taskscope.init()
asyncio.run(main())
