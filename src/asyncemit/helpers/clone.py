"""Mirror an emitter into an independent copy."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from asyncemit.draining import QueueEmitter


if TYPE_CHECKING:
    import asyncio

    from asyncemit.base import BaseEmitter


def clone[E: BaseEmitter[Any]](original: E) -> E:
    """Create an emitter of the same kind following `original` from now on.

    Past events are not replayed. Deactivations are mirrored and end the
    mirroring, a cancellation of `original` ends it without cancelling the
    copy. Settling the copy never affects `original`. Construction options
    such as `seal_on_error` and a queue's `backlog_warning` are carried over.
    """
    name = f"{original.name}-clone" if original.name else None
    options: dict[str, Any] = {"seal_on_error": original.seal_on_error}
    if isinstance(original, QueueEmitter):
        options["backlog_warning"] = original.backlog_warning
    copy = type(original)(name, **options)
    task = original.on(copy.activate)
    task.add_done_callback(partial(_mirror_error, copy))
    return copy


def _mirror_error(copy: BaseEmitter[Any], task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if isinstance(error, Exception) and copy.alive:
        copy.deactivate(error)
