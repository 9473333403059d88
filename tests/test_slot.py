"""Tests for slots, cancellation tokens and racing."""

from __future__ import annotations

import asyncio

import anyio
import pytest

from asyncemit import (
    CancelledEvent,
    CancelToken,
    Slot,
    SlotPendingError,
    SlotSettledError,
    SlotState,
    Ticket,
    race,
)


def test_slot_starts_pending():
    """Test a fresh slot has no result yet."""
    slot: Slot[int] = Slot()

    assert slot.state is SlotState.PENDING
    assert not slot.settled
    assert slot.successor is None
    with pytest.raises(SlotPendingError):
        slot.result()


def test_slot_dispositions():
    """Test each way of settling a slot."""
    activated: Slot[int] = Slot()
    activated.resolve(7)
    deactivated: Slot[int] = Slot()
    deactivated.reject(ValueError("broken"))
    cancelled: Slot[int] = Slot()
    cancelled.reject(CancelledEvent())

    assert activated.state is SlotState.ACTIVATED
    assert activated.result() == 7  # noqa: PLR2004
    assert deactivated.state is SlotState.DEACTIVATED
    with pytest.raises(ValueError, match="broken"):
        deactivated.result()
    assert cancelled.state is SlotState.CANCELLED
    with pytest.raises(CancelledEvent, match="Cancelled emitter gracefully"):
        cancelled.result()


def test_slot_is_write_once():
    """Test a settled slot refuses to settle again."""
    slot: Slot[int] = Slot()
    slot.resolve(1)

    with pytest.raises(SlotSettledError):
        slot.resolve(2)
    with pytest.raises(SlotSettledError):
        slot.reject(ValueError("late"))
    assert slot.result() == 1


def test_waiters_run_in_registration_order():
    """Test waiters are woken in the order they were added."""
    slot: Slot[None] = Slot()
    order: list[str] = []
    slot.add_waiter(lambda _: order.append("a"))
    slot.add_waiter(lambda _: order.append("b"))
    slot.add_waiter(lambda _: order.append("c"))

    slot.resolve(None)
    slot.add_waiter(lambda _: order.append("late"))

    assert order == ["a", "b", "c", "late"]


def test_discarded_waiter_is_not_called():
    """Test removing a waiter before settlement."""
    slot: Slot[None] = Slot()
    calls: list[Slot[None]] = []
    slot.add_waiter(calls.append)
    slot.discard_waiter(calls.append)

    slot.resolve(None)

    assert calls == []


async def test_await_slot_until_resolved():
    """Test awaiting a slot that is settled later."""
    slot: Slot[str] = Slot()
    asyncio.get_running_loop().call_soon(slot.resolve, "done")

    assert await slot == "done"


async def test_await_rejected_slot_raises():
    """Test awaiting a rejected slot raises its error."""
    slot: Slot[str] = Slot()
    asyncio.get_running_loop().call_soon(slot.reject, KeyError("missing"))

    with pytest.raises(KeyError):
        await slot


async def test_race_prefers_settled_slot():
    """Test a settled slot beats a cancelled token."""
    slot: Slot[int] = Slot()
    token = CancelToken()
    slot.resolve(3)
    token.cancel()

    assert await race(slot, token) == 3  # noqa: PLR2004


async def test_race_prefers_slot_settled_in_same_turn():
    """Test the slot wins when both settle before the racer resumes."""
    slot: Slot[int] = Slot()
    token = CancelToken()

    async def settle_both():
        await anyio.sleep(0.01)
        token.cancel()
        slot.resolve(5)

    task = asyncio.create_task(settle_both())
    assert await race(slot, token) == 5  # noqa: PLR2004
    await task


async def test_race_cancelled_token():
    """Test a cancelled token ends a race on a pending slot."""
    slot: Slot[int] = Slot()
    token = CancelToken()
    asyncio.get_running_loop().call_soon(token.cancel, "stop listening")

    with pytest.raises(CancelledEvent, match="stop listening"):
        await race(slot, token)
    assert not slot.settled


async def test_cancel_token_is_idempotent():
    """Test cancelling a token twice keeps the first message."""
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")

    assert token.cancelled
    with pytest.raises(CancelledEvent, match="first"):
        await token.slot


async def test_cancel_after_times_out():
    """Test composing a timeout from a token."""
    slot: Slot[int] = Slot()
    token = CancelToken()
    token.cancel_after(0.01)

    with pytest.raises(CancelledEvent, match="Timed out"):
        await race(slot, token)


async def test_tickets_resume_in_the_order_taken():
    """Test a ticket taken early resumes first, even if its task started late."""
    slot: Slot[str] = Slot()
    calls: list[str] = []

    async def listen(ticket: Ticket[str], label: str) -> None:
        await ticket.wait()
        calls.append(label)

    first = asyncio.create_task(listen(Ticket(slot), "first"))
    await anyio.sleep(0)
    second = asyncio.create_task(listen(Ticket(slot), "second"))
    slot.resolve("go")
    await asyncio.gather(first, second)

    assert calls == ["first", "second"]


async def test_ticket_on_settled_slot():
    """Test a ticket for a settled slot returns without waiting."""
    slot: Slot[int] = Slot()
    slot.reject(LookupError("gone"))

    with pytest.raises(LookupError, match="gone"):
        await Ticket(slot).wait()


def test_closed_ticket_leaves_waiter_list():
    """Test closing a ticket removes it from the slot."""
    slot: Slot[int] = Slot()
    ticket = Ticket(slot)
    ticket.close()
    slot.resolve(1)

    assert ticket.slot is slot
    assert repr(ticket) == "<Ticket on <Slot activated>>"
