"""Cancellation tokens and racing a slot against one."""

from __future__ import annotations

import asyncio
from typing import Never

from asyncemit.exceptions import CancelledEvent
from asyncemit.slot import Slot, Ticket


class CancelToken:
    """Cancellation request owned by a single listener registration.

    Cancelling a token never touches an emitter's chain, it only changes
    what the listener racing against it observes.
    """

    __slots__ = ("_slot",)

    def __init__(self) -> None:
        self._slot: Slot[Never] = Slot()

    def __repr__(self) -> str:
        return f"<CancelToken {'cancelled' if self.cancelled else 'active'}>"

    @property
    def cancelled(self) -> bool:
        return self._slot.settled

    @property
    def slot(self) -> Slot[Never]:
        return self._slot

    def cancel(self, message: str | None = None) -> None:
        """Request cancellation. Calling this again has no effect."""
        if not self.cancelled:
            self._slot.reject(CancelledEvent(message))

    def cancel_after(self, delay: float) -> asyncio.TimerHandle:
        """Cancel once `delay` seconds have passed on the running loop."""
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self.cancel, f"Timed out after {delay}s")


async def race[T](slot: Slot[T], token: CancelToken) -> T:
    """Wait for whichever of `slot` and `token` settles first.

    If the slot has settled by the time the racer resumes it wins, even when
    the token was cancelled in the same turn.

    Raises:
        CancelledEvent: If the token was cancelled while the slot is pending.
    """
    return await Ticket(slot).wait(token.slot)


class Canceller:
    """Callable handle that stops one listener.

    Example:
        stop = emitter.on_cancellable(print)
        ...
        stop()
    """

    __slots__ = ("_token", "task")

    def __init__(self, token: CancelToken, task: asyncio.Task[None]) -> None:
        self._token = token
        self.task = task

    def __call__(self, message: str | None = None) -> None:
        self._token.cancel(message)

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled
