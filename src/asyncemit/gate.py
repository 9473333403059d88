"""Emitter for exactly one event."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from asyncemit.exceptions import CancelledEvent
from asyncemit.slot import Slot, SlotState, Ticket
from asyncemit.utils import invoke, spawn


if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Generator

    from asyncemit.base import Callback, ErrorCallback


logger = logging.getLogger(__name__)


class Gate[T]:
    """Single-shot emitter: the first settlement wins, later ones are ignored.

    A gate can be awaited directly. Note that a cancelled gate raises
    `CancelledEvent` when awaited, use `once` to have it ignored instead.

    Example:
        handshake = Gate[str]()
        handshake.once(print)
        handshake.activate("ready")
        handshake.activate("ignored")
    """

    __slots__ = ("__weakref__", "_slot", "_tasks", "name")

    def __init__(self, *listeners: Callback[T], name: str | None = None) -> None:
        """Create a gate, attaching `listeners` right away."""
        self.name = name
        self._slot: Slot[T] = Slot()
        self._tasks: set[asyncio.Task[Any]] = set()
        for listener in listeners:
            self.once(listener)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Gate{label} {self._slot.state.value}>"

    @property
    def triggered(self) -> bool:
        """Whether the gate has been settled already."""
        return self._slot.settled

    @property
    def deactivated(self) -> bool:
        return self._slot.state is SlotState.DEACTIVATED

    @property
    def cancelled(self) -> bool:
        return self._slot.state is SlotState.CANCELLED

    @property
    def event(self) -> Slot[T]:
        return self._slot

    def activate(self, value: T | None = None) -> None:
        if self._ignored("activate"):
            return
        self._slot.resolve(value)  # type: ignore[arg-type]

    def deactivate(self, error: Exception) -> None:
        if not isinstance(error, Exception):
            msg = f"deactivate() expects an Exception instance, got {type(error).__name__}"
            raise TypeError(msg)
        if self._ignored("deactivate"):
            return
        self._slot.reject(error)

    def cancel(self, message: str | None = None) -> None:
        if self._ignored("cancel"):
            return
        self._slot.reject(CancelledEvent(message))

    def once(
        self, fn: Callback[T], err_fn: ErrorCallback | None = None
    ) -> asyncio.Task[None]:
        """Call `fn` with the value once the gate is activated.

        Cancellation is ignored. A deactivation goes to `err_fn`, or makes
        the returned task fail if no `err_fn` is given.
        """
        return spawn(self._tasks, self._deliver(Ticket(self._slot), fn, err_fn))

    def __await__(self) -> Generator[Any, None, T]:
        return self._slot.wait().__await__()

    def _ignored(self, action: str) -> bool:
        if self.triggered:
            logger.debug("%r already settled, ignoring %s()", self, action)
            return True
        return False

    async def _deliver(
        self, ticket: Ticket[T], fn: Callable[[T], Any], err_fn: ErrorCallback | None
    ) -> None:
        try:
            value = await ticket.wait()
        except CancelledEvent:
            return
        except Exception as e:
            if err_fn is None:
                raise
            await invoke(err_fn, e)
            return
        await invoke(fn, value)
