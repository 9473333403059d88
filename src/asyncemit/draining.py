"""Emitter that forgets events once they have been delivered."""

from __future__ import annotations

import asyncio
from collections import deque
import logging
from typing import TYPE_CHECKING
from weakref import WeakSet

from asyncemit.base import BaseEmitter


if TYPE_CHECKING:
    from asyncemit.slot import Slot, Ticket


logger = logging.getLogger(__name__)


class QueueEmitter[T](BaseEmitter[T]):
    """Emitter whose memory is bounded by its undelivered backlog.

    Slots live in a FIFO. Whenever a listener moves past an event or stops
    listening, a drain task is scheduled which, after the current round of
    listeners had their turn, drops settled slots from the front until it
    reaches one a listener is still positioned on. Events nobody listened
    to are dropped along with delivered ones. Past events cannot be
    replayed.
    """

    __slots__ = ("_backlog_warning", "_cursors", "_drain_task", "_queue")

    def __init__(
        self,
        name: str | None = None,
        *,
        seal_on_error: bool = False,
        backlog_warning: int | None = None,
    ) -> None:
        """Create a draining emitter.

        Args:
            name: Name used in reprs and log messages
            seal_on_error: If True, `deactivate` and `cancel` end the chain
            backlog_warning: Log a warning whenever the backlog grows to this size
        """
        self._queue: deque[Slot[T]] = deque()
        self._cursors: WeakSet[Ticket[T]] = WeakSet()
        self._drain_task: asyncio.Task[None] | None = None
        self._backlog_warning = backlog_warning
        super().__init__(name, seal_on_error=seal_on_error)

    @property
    def next(self) -> Slot[T]:
        return self._queue[-1]

    @property
    def backlog(self) -> int:
        """Settled events still held in memory."""
        return len(self._queue) - (0 if self.next.settled else 1)

    @property
    def backlog_warning(self) -> int | None:
        return self._backlog_warning

    def _retain(self, slot: Slot[T]) -> None:
        self._queue.append(slot)
        if self._backlog_warning is not None and self.backlog == self._backlog_warning:
            logger.warning("%r holds %d undelivered events", self, self.backlog)

    def _enter(self, slot: Slot[T]) -> Ticket[T]:
        ticket = super()._enter(slot)
        self._cursors.add(ticket)
        return ticket

    def _leave(self, ticket: Ticket[T]) -> None:
        super()._leave(ticket)
        self._cursors.discard(ticket)
        if self._drain_task is None or self._drain_task.done():
            loop = asyncio.get_running_loop()
            self._drain_task = loop.create_task(self._drain())

    async def _drain(self) -> None:
        # Let every listener woken by the same settlement run first.
        await asyncio.sleep(0)
        queue = self._queue
        held = {ticket.slot for ticket in self._cursors}
        while len(queue) > 1 and queue[0].settled and queue[0] not in held:
            queue.popleft()
        logger.debug("%r drained, backlog=%d", self, self.backlog)
