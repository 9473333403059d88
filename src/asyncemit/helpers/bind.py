"""Bridge callback-style event sources into emitters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from asyncemit.sequence import Emitter


if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from asyncemit.base import BaseEmitter


class ListenerSource(Protocol):
    """Anything exposing `add_listener` / `remove_listener` per event key."""

    def add_listener(self, event: Hashable, callback: Callable[[Any], Any]) -> Any: ...

    def remove_listener(self, event: Hashable, callback: Callable[[Any], Any]) -> Any: ...


def bind(source: ListenerSource, *events: Hashable) -> Emitter[Any]:
    """Create an emitter activated whenever `source` fires one of `events`."""
    emitter: Emitter[Any] = Emitter(", ".join(map(str, events)) or None)
    for event in events:
        source.add_listener(event, emitter.activate)
    return emitter


def bind_errors(
    source: ListenerSource, event: Hashable, error_event: Hashable = "error"
) -> Emitter[Any]:
    """Like `bind`, but `error_event` deactivates the emitter."""
    emitter: Emitter[Any] = Emitter(str(event))
    source.add_listener(event, emitter.activate)
    source.add_listener(error_event, emitter.deactivate)
    return emitter


def unbind(source: ListenerSource, emitter: BaseEmitter[Any], *events: Hashable) -> None:
    """Stop `source` from activating `emitter` for `events`."""
    for event in events:
        source.remove_listener(event, emitter.activate)


def unbind_errors(
    source: ListenerSource,
    emitter: BaseEmitter[Any],
    event: Hashable,
    error_event: Hashable = "error",
) -> None:
    """Undo `bind_errors`."""
    source.remove_listener(event, emitter.activate)
    source.remove_listener(error_event, emitter.deactivate)
