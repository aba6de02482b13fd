"""Cooperative cancellation helpers for background tasks."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class ShutdownRequested(Exception):
    """Raised when the shared cancel event fires while waiting."""


async def race(
    awaitable: Awaitable[T], cancel: asyncio.Event, timeout: float | None = None
) -> T:
    """Await ``awaitable`` unless ``cancel`` is set first.

    Raises ``ShutdownRequested`` on cancellation and ``TimeoutError`` when
    ``timeout`` elapses. The losing side is always cancelled.
    """
    work = asyncio.ensure_future(awaitable)
    if cancel.is_set():
        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise ShutdownRequested
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {work, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (work, waiter):
            if not task.done():
                task.cancel()
        await asyncio.gather(work, waiter, return_exceptions=True)
    if work in done:
        return work.result()
    if waiter in done:
        raise ShutdownRequested
    raise TimeoutError


async def sleep_or_cancel(seconds: float, cancel: asyncio.Event) -> bool:
    """Sleep for ``seconds``; return True if cancelled in the meantime."""
    try:
        await asyncio.wait_for(cancel.wait(), timeout=seconds)
    except TimeoutError:
        return False
    return True
