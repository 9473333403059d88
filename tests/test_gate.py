"""Tests for the single-shot gate."""

from __future__ import annotations

import asyncio
from typing import Any

import anyio
import pytest

from asyncemit import CancelledEvent, Gate, SlotState


@pytest.fixture
def gate() -> Gate[int]:
    """Create a gate for testing."""
    return Gate(name="handshake")


def test_gate_starts_untriggered(gate: Gate[int]):
    """Test a fresh gate reports no settlement."""
    assert not gate.triggered
    assert not gate.deactivated
    assert not gate.cancelled
    assert gate.event.state is SlotState.PENDING
    assert repr(gate) == "<Gate 'handshake' pending>"


async def test_activate_once(gate: Gate[int]):
    """Test awaiting an activated gate returns its value."""
    asyncio.get_running_loop().call_soon(gate.activate, 12)
    assert not gate.triggered

    assert await gate == 12  # noqa: PLR2004
    assert gate.triggered


async def test_first_settlement_wins(gate: Gate[int]):
    """Test later settlements are ignored."""
    gate.activate(1)
    gate.deactivate(ValueError("ignored"))
    gate.cancel()
    gate.activate(2)

    assert gate.triggered
    assert not gate.deactivated
    assert not gate.cancelled
    assert await gate == 1


async def test_first_deactivation_wins(gate: Gate[int]):
    """Test a deactivation sticks once it happened first."""
    gate.deactivate(ValueError("Deactivation"))
    gate.activate(1)
    gate.cancel()

    assert gate.triggered
    assert gate.deactivated
    assert not gate.cancelled
    with pytest.raises(ValueError, match="Deactivation"):
        await gate


async def test_cancel_raises_on_await(gate: Gate[int]):
    """Test awaiting a cancelled gate raises the cancellation."""
    gate.cancel()
    gate.deactivate(ValueError("ignored"))

    assert gate.cancelled
    assert not gate.deactivated
    with pytest.raises(CancelledEvent, match="Cancelled emitter gracefully"):
        await gate


async def test_once_listeners(gate: Gate[int]):
    """Test every `once` listener receives the value."""
    received: list[int] = []
    first = gate.once(received.append)
    second = gate.once(received.append)

    gate.activate(7)
    await asyncio.gather(first, second)

    assert received == [7, 7]


async def test_once_listeners_fire_in_registration_order(gate: Gate[int]):
    """Test three listeners registered before activation run in order."""
    calls: list[str] = []
    gate.once(lambda _: calls.append("first"))
    gate.once(lambda _: calls.append("second"))
    gate.once(lambda _: calls.append("third"))

    gate.activate(1)
    await anyio.sleep(0.01)

    assert calls == ["first", "second", "third"]


async def test_once_order_started_then_pending(gate: Gate[int]):
    """Test a waiting listener fires before one whose task has not run yet."""
    calls: list[str] = []
    gate.once(lambda _: calls.append("first"))
    await anyio.sleep(0.01)
    gate.once(lambda _: calls.append("second"))

    gate.activate(1)
    await anyio.sleep(0.01)

    assert calls == ["first", "second"]


async def test_once_after_trigger(gate: Gate[int]):
    """Test listeners attached after settlement still get the value."""
    gate.activate(3)
    received: list[int] = []

    await gate.once(received.append)

    assert received == [3]


async def test_once_ignores_cancel(gate: Gate[int]):
    """Test cancellation calls neither callback."""
    calls: list[Any] = []
    task = gate.once(calls.append, calls.append)

    gate.cancel()
    await task

    assert calls == []


async def test_once_deactivation(gate: Gate[int]):
    """Test deactivations reach the error callback or fail the task."""
    errors: list[Exception] = []
    handled = gate.once(lambda _: None, errors.append)
    unhandled = gate.once(lambda _: None)

    gate.deactivate(ValueError("broken"))

    await handled
    with pytest.raises(ValueError, match="broken"):
        await unhandled
    assert len(errors) == 1


async def test_constructor_listeners():
    """Test listeners passed to the constructor are attached immediately."""
    received: list[str] = []

    async def record(value: str) -> None:
        await anyio.sleep(0)
        received.append(value.upper())

    gate = Gate(received.append, record)
    gate.activate("go")
    await anyio.sleep(0.01)

    assert received == ["go", "GO"]


def test_deactivate_requires_exception(gate: Gate[int]):
    """Test deactivate rejects non-exception arguments."""
    with pytest.raises(TypeError):
        gate.deactivate("nope")  # type: ignore[arg-type]
    assert not gate.triggered
