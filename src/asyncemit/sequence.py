"""Emitter that keeps its whole history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from asyncemit.base import BaseEmitter


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from asyncemit.cancellation import CancelToken
    from asyncemit.slot import Slot


class Emitter[T](BaseEmitter[T]):
    """Append-only emitter supporting replay of past events.

    Every settled event stays addressable, so memory grows with the number
    of events. Use `QueueEmitter` for long lived, busy emitters.

    Example:
        clicks = Emitter[str]("clicks")
        clicks.on(print)
        clicks.activate("left").activate("right")

        async for button in clicks.past():
            ...
    """

    __slots__ = ("_slots",)

    def __init__(self, name: str | None = None, *, seal_on_error: bool = False) -> None:
        self._slots: list[Slot[T]] = []
        super().__init__(name, seal_on_error=seal_on_error)

    @property
    def next(self) -> Slot[T]:
        return self._slots[-1]

    @property
    def previous(self) -> Slot[T] | None:
        """The most recently settled slot, None if nothing happened yet."""
        return self._slots[self._count - 1] if self._count else None

    @property
    def slots(self) -> tuple[Slot[T], ...]:
        return tuple(self._slots)

    def all(self, token: CancelToken | None = None) -> AsyncGenerator[T, None]:
        """Iterate from the very first event, then keep following new ones."""
        return self._iterate(self._enter(self._slots[0]), token=token)

    def past(self) -> AsyncGenerator[T, None]:
        """Iterate the events settled so far, then stop."""
        return self._iterate(self._enter(self._slots[0]), limit=self._count)

    def _retain(self, slot: Slot[T]) -> None:
        self._slots.append(slot)
