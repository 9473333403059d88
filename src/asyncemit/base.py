"""Settlement protocol and listener forms shared by chained emitters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import aclosing
import logging
from typing import TYPE_CHECKING, Any, Self

from asyncemit.cancellation import Canceller, CancelToken
from asyncemit.exceptions import CancelledEvent, EmitterClosedError
from asyncemit.slot import Slot, Ticket
from asyncemit.utils import invoke, spawn


if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncGenerator, Callable, Coroutine


logger = logging.getLogger(__name__)

type Callback[T] = Callable[[T], Any]
type ErrorCallback = Callable[[Exception], Any]


class BaseEmitter[T](ABC):
    """Chain of slots where each settlement appends a fresh pending tail.

    Producers call `activate`, `deactivate` or `cancel`; each of them settles
    the current tail and installs a new one. Consumers attach to a chain
    position when they register, so an activation happening right after
    `once`/`on` is never missed and listeners of the same event are called
    in registration order.

    Listener methods spawn tasks and therefore need a running event loop.
    """

    __slots__ = ("__weakref__", "_count", "_sealed", "_tasks", "name", "seal_on_error")

    def __init__(self, name: str | None = None, *, seal_on_error: bool = False) -> None:
        """Create an emitter with one pending tail.

        Args:
            name: Name used in reprs and log messages
            seal_on_error: If True, `deactivate` and `cancel` end the chain and
                any further settlement raises `EmitterClosedError`
        """
        self.name = name
        self.seal_on_error = seal_on_error
        self._count = 0
        self._sealed = False
        self._tasks: set[asyncio.Task[Any]] = set()
        self._retain(Slot())

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label} count={self._count}>"

    @property
    @abstractmethod
    def next(self) -> Slot[T]:
        """Slot of the upcoming event.

        Awaiting it raises on deactivation and on cancellation alike, so use
        the listener methods when cancellation should end things quietly.
        """

    @abstractmethod
    def _retain(self, slot: Slot[T]) -> None:
        """Store a freshly installed tail."""

    @property
    def count(self) -> int:
        """Number of settled events."""
        return self._count

    @property
    def alive(self) -> bool:
        """Whether another event can still be settled."""
        return not self._sealed

    def activate(self, value: T | None = None) -> Self:
        """Deliver an event. Unit emitters (`Emitter[None]`) omit the value."""
        tail = self._take_tail()
        logger.debug("%r activated", self)
        tail.resolve(value)  # type: ignore[arg-type]
        self._install_tail(tail)
        return self

    def deactivate(self, error: Exception) -> Self:
        """Deliver an error to every listener of the upcoming event."""
        if not isinstance(error, Exception):
            msg = f"deactivate() expects an Exception instance, got {type(error).__name__}"
            raise TypeError(msg)
        tail = self._take_tail()
        logger.debug("%r deactivated: %r", self, error)
        tail.reject(error)
        self._install_tail(tail, terminal=self.seal_on_error)
        return self

    def cancel(self, message: str | None = None) -> Self:
        """Gracefully end iteration for everyone listening to the upcoming event."""
        tail = self._take_tail()
        logger.debug("%r cancelled", self)
        tail.reject(CancelledEvent(message))
        self._install_tail(tail, terminal=self.seal_on_error)
        return self

    def future(self, token: CancelToken | None = None) -> AsyncGenerator[T, None]:
        """Iterate every event from now on.

        Never finishes by itself: a cancellation ends it quietly and a
        deactivation raises out of it. With a `token`, cancelling the token
        ends the iteration too, unless the upcoming event already settled.
        """
        return self._iterate(self._enter(self.next), token=token)

    def __aiter__(self) -> AsyncGenerator[T, None]:
        return self.future()

    def once(self, fn: Callback[T]) -> asyncio.Task[None]:
        """Call `fn` with the next event.

        The returned task fails if the event is a deactivation and finishes
        without calling `fn` on cancellation.
        """
        return spawn(self._tasks, self._deliver_once(self._enter(self.next), fn))

    def on(self, fn: Callback[T]) -> asyncio.Task[None]:
        """Call `fn` for every event until a cancellation or deactivation."""
        return spawn(self._tasks, self._consume(self.future(), fn))

    def once_cancellable(
        self, fn: Callback[T], err_fn: ErrorCallback | None = None
    ) -> Canceller:
        """Call `fn` with the next event unless the returned canceller fires first.

        Args:
            fn: Called with the value of the next activation
            err_fn: Called with a deactivation error or an error raised by
                `fn`. Errors are logged when omitted.
        """
        token = CancelToken()
        listener = self._deliver_once(self._enter(self.next), fn, token)
        task = spawn(self._tasks, self._guard(listener, err_fn))
        return Canceller(token, task)

    def on_cancellable(
        self, fn: Callback[T], err_fn: ErrorCallback | None = None
    ) -> Canceller:
        """Call `fn` for every event until the returned canceller fires.

        Events settled before the listener observes the cancellation are
        still delivered, so `activate()` followed by `stop()` in the same
        turn reaches `fn`.
        """
        token = CancelToken()
        listener = self._consume(self.future(token), fn)
        task = spawn(self._tasks, self._guard(listener, err_fn))
        return Canceller(token, task)

    def on_continue_after_error(
        self, fn: Callback[T], err_fn: ErrorCallback | None = None
    ) -> asyncio.Task[None]:
        """Call `fn` for every event, surviving deactivations.

        A deactivation is passed to `err_fn` and listening resumes with the
        event after it. Cancellation stops the listener for good.
        """
        listener = self._resume_after_errors(self._enter(self.next), fn, err_fn)
        return spawn(self._tasks, listener)

    def _take_tail(self) -> Slot[T]:
        if self._sealed:
            msg = f"{self!r} was sealed by a deactivation"
            raise EmitterClosedError(msg)
        self._count += 1
        return self.next

    def _install_tail(self, settled: Slot[T], *, terminal: bool = False) -> None:
        if terminal:
            self._sealed = True
            return
        tail: Slot[T] = Slot()
        settled.link(tail)
        self._retain(tail)

    def _enter(self, slot: Slot[T]) -> Ticket[T]:
        """Position a listener on `slot`."""
        return Ticket(slot)

    def _leave(self, ticket: Ticket[T]) -> None:
        """Called once a listener moves past or stops listening at `ticket`."""
        ticket.close()

    async def _iterate(
        self,
        ticket: Ticket[T],
        *,
        limit: int | None = None,
        token: CancelToken | None = None,
    ) -> AsyncGenerator[T, None]:
        rival = None if token is None else token.slot
        remaining = limit
        try:
            while remaining != 0:
                try:
                    value = await ticket.wait(rival)
                except CancelledEvent:
                    return
                yield value
                if remaining is not None:
                    remaining -= 1
                successor = ticket.slot.successor
                if successor is None or remaining == 0:
                    return
                self._leave(ticket)
                ticket = self._enter(successor)
        finally:
            self._leave(ticket)

    async def _deliver_once(
        self, ticket: Ticket[T], fn: Callback[T], token: CancelToken | None = None
    ) -> None:
        try:
            value = await ticket.wait(None if token is None else token.slot)
        except CancelledEvent:
            return
        finally:
            self._leave(ticket)
        await invoke(fn, value)

    async def _consume(self, events: AsyncGenerator[T, None], fn: Callback[T]) -> None:
        async with aclosing(events):
            async for value in events:
                await invoke(fn, value)

    async def _resume_after_errors(
        self, ticket: Ticket[T], fn: Callback[T], err_fn: ErrorCallback | None
    ) -> None:
        try:
            while True:
                try:
                    value = await ticket.wait()
                except CancelledEvent:
                    return
                except Exception as e:  # noqa: BLE001
                    await self._report(e, err_fn)
                else:
                    try:
                        await invoke(fn, value)
                    except Exception as e:  # noqa: BLE001
                        await self._report(e, err_fn)
                successor = ticket.slot.successor
                if successor is None:
                    return
                self._leave(ticket)
                ticket = self._enter(successor)
        finally:
            self._leave(ticket)

    async def _guard(
        self, listener: Coroutine[Any, Any, None], err_fn: ErrorCallback | None
    ) -> None:
        try:
            await listener
        except CancelledEvent:
            pass
        except Exception as e:  # noqa: BLE001
            await self._report(e, err_fn)

    async def _report(self, error: Exception, err_fn: ErrorCallback | None) -> None:
        if err_fn is None:
            logger.exception("Listener on %r failed", self)
            return
        await invoke(err_fn, error)
