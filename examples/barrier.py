"""Two tasks meeting at an instrumented barrier."""

import asyncio

import taskscope
from taskscope.integrations.asyncio import Barrier, spawn


async def main() -> None:
    barrier = Barrier(2)

    async def waiter() -> None:
        await asyncio.sleep(0.1)
        await barrier.wait()

    task = spawn(waiter())
    await barrier.wait()
    await task
    barrier.close()


taskscope.init()
asyncio.run(main())
