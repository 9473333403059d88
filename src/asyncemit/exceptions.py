"""Exceptions raised by emitters and their slots."""

from __future__ import annotations


class EmitterError(Exception):
    """Base class for all asyncemit errors."""


class CancelledEvent(EmitterError):  # noqa: N818
    """Graceful end of an event stream.

    Listeners created through ``once``, ``on`` or iteration swallow it.
    Raw awaits (``await emitter.next``, ``await gate``) raise it, so callers
    using those must check for it themselves.
    """

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Cancelled emitter gracefully")


class SlotSettledError(EmitterError):
    """A slot was settled more than once."""


class SlotPendingError(EmitterError):
    """The result of a slot was requested before it settled."""


class EmitterClosedError(EmitterError):
    """A sealed emitter was asked to settle another event."""


class SourceDeactivatedError(EmitterError):
    """A source of a merged emitter was deactivated."""

    def __init__(self, name: str, error: Exception) -> None:
        super().__init__(f"Emitter {name!r} was deactivated: {error}")
        self.name = name
        self.error = error
        self.__cause__ = error
