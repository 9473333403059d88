"""asyncemit: promise-style event emitters for asyncio.

Producers settle events with `activate`, `deactivate` or `cancel`; consumers
await the next event, iterate future (or past) events, or register callbacks.

Example:
    clicks = Emitter[str]()
    clicks.on(print)
    clicks.activate("left")

    async for button in clicks:
        ...
"""

from __future__ import annotations

__version__ = "0.1.0"

from asyncemit.base import BaseEmitter
from asyncemit.cancellation import Canceller, CancelToken, race
from asyncemit.config import (
    EmitterConfig,
    GateConfig,
    QueueEmitterConfig,
    SequenceEmitterConfig,
)
from asyncemit.draining import QueueEmitter
from asyncemit.exceptions import (
    CancelledEvent,
    EmitterClosedError,
    EmitterError,
    SlotPendingError,
    SlotSettledError,
    SourceDeactivatedError,
)
from asyncemit.gate import Gate
from asyncemit.helpers import (
    ListenerSource,
    MergedEvent,
    bind,
    bind_errors,
    clone,
    filter,  # noqa: A004
    filter_value,
    merge,
    unbind,
    unbind_errors,
)
from asyncemit.sequence import Emitter
from asyncemit.slot import Slot, SlotState, Ticket

__all__ = [
    # Core
    "BaseEmitter",
    "Emitter",
    "Gate",
    "QueueEmitter",
    "Slot",
    "SlotState",
    "Ticket",
    # Cancellation
    "CancelToken",
    "Canceller",
    "race",
    # Errors
    "CancelledEvent",
    "EmitterClosedError",
    "EmitterError",
    "SlotPendingError",
    "SlotSettledError",
    "SourceDeactivatedError",
    # Config
    "EmitterConfig",
    "GateConfig",
    "QueueEmitterConfig",
    "SequenceEmitterConfig",
    # Helpers
    "ListenerSource",
    "MergedEvent",
    "bind",
    "bind_errors",
    "clone",
    "filter",
    "filter_value",
    "merge",
    "unbind",
    "unbind_errors",
]
