"""Helpers shared by emitters and gates."""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine


async def invoke(fn: Callable[[Any], Any], arg: Any) -> None:
    """Call a sync or async callback with a single argument."""
    result = fn(arg)
    if inspect.isawaitable(result):
        await result


def spawn(
    tasks: set[asyncio.Task[Any]], coro: Coroutine[Any, Any, None]
) -> asyncio.Task[None]:
    """Run `coro` as a task on the running loop, keeping a reference in `tasks`."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        raise
    task = loop.create_task(coro)
    tasks.add(task)
    task.add_done_callback(tasks.discard)
    return task
