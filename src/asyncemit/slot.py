"""Write-once result cells that make up an emitter's chain."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any, cast

from asyncemit.exceptions import CancelledEvent, SlotPendingError, SlotSettledError


if TYPE_CHECKING:
    from collections.abc import Callable, Generator


type Waiter = Callable[[Slot[Any]], None]


class SlotState(Enum):
    """Disposition of a slot."""

    PENDING = "pending"
    ACTIVATED = "activated"
    DEACTIVATED = "deactivated"
    CANCELLED = "cancelled"


class Slot[T]:
    """A single event occurrence.

    A slot starts out pending and is settled exactly once, either with a
    value or with an error. Continuations registered through `add_waiter`
    run synchronously, in registration order, at the moment it settles.
    Awaiting a slot suspends until then and returns the value or raises
    the error.
    """

    __slots__ = ("_error", "_state", "_successor", "_value", "_waiters")

    def __init__(self) -> None:
        self._state = SlotState.PENDING
        self._value: T | None = None
        self._error: Exception | None = None
        self._waiters: list[Waiter] = []
        self._successor: Slot[T] | None = None

    def __repr__(self) -> str:
        return f"<Slot {self._state.value}>"

    @property
    def state(self) -> SlotState:
        return self._state

    @property
    def settled(self) -> bool:
        return self._state is not SlotState.PENDING

    @property
    def successor(self) -> Slot[T] | None:
        """The slot installed after this one, if any."""
        return self._successor

    def resolve(self, value: T) -> None:
        """Settle with a value."""
        self._settle(SlotState.ACTIVATED)
        self._value = value
        self._wake()

    def reject(self, error: Exception) -> None:
        """Settle with an error. `CancelledEvent` marks the slot as cancelled."""
        if isinstance(error, CancelledEvent):
            self._settle(SlotState.CANCELLED)
        else:
            self._settle(SlotState.DEACTIVATED)
        self._error = error
        self._wake()

    def result(self) -> T:
        """Return the value or raise the error this slot settled with."""
        match self._state:
            case SlotState.PENDING:
                msg = "Slot has not been settled yet"
                raise SlotPendingError(msg)
            case SlotState.ACTIVATED:
                return cast("T", self._value)
            case _:
                raise cast("Exception", self._error)

    def add_waiter(self, waiter: Waiter) -> None:
        """Run `waiter` once this slot settles (immediately if it already has)."""
        if self.settled:
            waiter(self)
        else:
            self._waiters.append(waiter)

    def discard_waiter(self, waiter: Waiter) -> None:
        """Forget a waiter that is no longer interested."""
        if waiter in self._waiters:
            self._waiters.remove(waiter)

    def link(self, successor: Slot[T]) -> None:
        self._successor = successor

    async def wait(self) -> T:
        """Suspend until settled, then return the result."""
        return await Ticket(self).wait()

    def __await__(self) -> Generator[Any, None, T]:
        return self.wait().__await__()

    def _settle(self, state: SlotState) -> None:
        if self.settled:
            msg = f"Slot already {self._state.value}"
            raise SlotSettledError(msg)
        self._state = state

    def _wake(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            waiter(self)


class Ticket[T]:
    """A listener's place in the waiter list of one slot.

    Listeners take their ticket synchronously when they register, which
    fixes their turn before their task first runs. Tickets woken by the same
    settlement resume in the order they were taken, including tickets whose
    task only gets to run after the settlement.
    """

    __slots__ = ("__weakref__", "_future", "_slot", "_woken")

    def __init__(self, slot: Slot[T]) -> None:
        self._slot = slot
        self._future: asyncio.Future[None] | None = None
        self._woken = False
        if not slot.settled:
            slot.add_waiter(self._wake)

    def __repr__(self) -> str:
        return f"<Ticket on {self._slot!r}>"

    @property
    def slot(self) -> Slot[T]:
        return self._slot

    async def wait(self, rival: Slot[Any] | None = None) -> T:
        """Suspend until the slot settles, then return its result.

        If `rival` settles while the slot is still pending, the rival's
        result is returned (or its error raised) instead. A slot that has
        settled by the time the waiter resumes always wins.
        """
        try:
            if self._woken:
                # Tickets woken earlier by the same settlement go first.
                await asyncio.sleep(0)
            elif not self._slot.settled and (rival is None or not rival.settled):
                self._future = asyncio.get_running_loop().create_future()
                if rival is not None:
                    rival.add_waiter(self._wake)
                await self._future
        finally:
            self.close()
            if rival is not None:
                rival.discard_waiter(self._wake)
        if self._slot.settled or rival is None:
            return self._slot.result()
        return rival.result()

    def close(self) -> None:
        """Give up the place in the waiter list."""
        self._slot.discard_waiter(self._wake)

    def _wake(self, _slot: Slot[Any]) -> None:
        self._woken = True
        if self._future is not None and not self._future.done():
            self._future.set_result(None)
