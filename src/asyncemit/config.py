"""Emitter configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


if TYPE_CHECKING:
    from asyncemit.draining import QueueEmitter
    from asyncemit.gate import Gate
    from asyncemit.sequence import Emitter


class BaseEmitterConfig(BaseModel):
    """Base emitter configuration."""

    type: str = Field(init=False)
    """Emitter type."""

    name: str | None = Field(
        default=None,
        title="Emitter Name",
        examples=["clicks", "handshake"],
    )
    """Name used in reprs and log messages."""

    model_config = ConfigDict(use_attribute_docstrings=True, extra="forbid")


class SequenceEmitterConfig(BaseEmitterConfig):
    """Append-only emitter configuration.

    Keeps every event, allowing replay through `all()` and `past()`.
    """

    type: Literal["sequence"] = Field("sequence", init=False)

    seal_on_error: bool = Field(default=False, title="Seal On Error")
    """Whether a deactivation or cancellation ends the emitter for good."""

    def get_emitter(self) -> Emitter:
        """Create the configured emitter."""
        from asyncemit.sequence import Emitter

        return Emitter(self.name, seal_on_error=self.seal_on_error)


class QueueEmitterConfig(BaseEmitterConfig):
    """Draining emitter configuration.

    Drops events once delivered, so memory is bounded by the backlog.
    """

    type: Literal["queue"] = Field("queue", init=False)

    seal_on_error: bool = Field(default=False, title="Seal On Error")
    """Whether a deactivation or cancellation ends the emitter for good."""

    backlog_warning: int | None = Field(
        default=None,
        gt=0,
        title="Backlog Warning Threshold",
        examples=[1000, 10_000],
    )
    """Log a warning whenever this many events are waiting to be drained."""

    def get_emitter(self) -> QueueEmitter:
        """Create the configured emitter."""
        from asyncemit.draining import QueueEmitter

        return QueueEmitter(
            self.name,
            seal_on_error=self.seal_on_error,
            backlog_warning=self.backlog_warning,
        )


class GateConfig(BaseEmitterConfig):
    """Single-shot gate configuration."""

    type: Literal["gate"] = Field("gate", init=False)

    def get_emitter(self) -> Gate:
        """Create the configured gate."""
        from asyncemit.gate import Gate

        return Gate(name=self.name)


EmitterConfig = Annotated[
    SequenceEmitterConfig | QueueEmitterConfig | GateConfig,
    Field(discriminator="type"),
]
