"""Await the first event matching a condition."""

from __future__ import annotations

from contextlib import aclosing
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable, Coroutine

    from asyncemit.base import BaseEmitter


def filter[T](  # noqa: A001
    emitter: BaseEmitter[T], condition: Callable[[T], bool] | None = None
) -> Coroutine[Any, Any, bool]:
    """Wait until `emitter` activates with a value satisfying `condition`.

    Listening starts when this is called, not when the result is awaited.
    The result is True on a match and False if the emitter is cancelled
    first. A deactivation is raised. Without a condition nothing matches,
    which turns this into a way to await the end of an emitter.
    """
    return _first_match(emitter.future(), condition or _never)


def filter_value[T](emitter: BaseEmitter[T], value: T) -> Coroutine[Any, Any, bool]:
    """Wait until `emitter` activates with `value`."""
    return filter(emitter, lambda current: current == value)


async def _first_match[T](
    events: AsyncGenerator[T, None], condition: Callable[[T], bool]
) -> bool:
    async with aclosing(events):
        async for value in events:
            if condition(value):
                return True
    return False


def _never(_value: Any) -> bool:
    return False
