"""Fan several emitters into one."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

from asyncemit.exceptions import SourceDeactivatedError
from asyncemit.sequence import Emitter


if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping

    from asyncemit.base import BaseEmitter


@dataclass(frozen=True, slots=True)
class MergedEvent[T]:
    """An event forwarded by a merged emitter."""

    name: str
    """Key of the source emitter."""

    value: T | None = None
    """Forwarded value, None for unit emitters."""


def merge(emitters: Mapping[str, BaseEmitter[Any]]) -> Emitter[MergedEvent[Any]]:
    """Merge multiple emitters into one.

    Each activation of a source is forwarded as a `MergedEvent` tagged with
    the source's key. A deactivated source deactivates the merged emitter
    with a `SourceDeactivatedError` naming it, while a cancelled source is
    simply no longer forwarded.

    Example:
        merged = merge({"keys": keyboard, "clicks": mouse})
        merged.on(lambda event: print(event.name, event.value))
    """
    merged: Emitter[MergedEvent[Any]] = Emitter(f"merge({', '.join(emitters)})")
    for name, source in emitters.items():
        task = source.on(partial(_forward, merged, name))
        task.add_done_callback(partial(_forward_error, merged, name))
    return merged


def _forward(merged: Emitter[MergedEvent[Any]], name: str, value: Any) -> None:
    merged.activate(MergedEvent(name, value))


def _forward_error(
    merged: Emitter[MergedEvent[Any]], name: str, task: asyncio.Task[None]
) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if isinstance(error, Exception):
        merged.deactivate(SourceDeactivatedError(name, error))
