"""Fire-and-forget dispatch of outbound messages.

Services never await email delivery inside a unit of work. They queue a
coroutine factory on the session's outbox with :func:`enqueue`; the unit of
work calls :func:`flush_outbox` after a successful commit (or
:func:`discard_outbox` on rollback). Each spawned task swallows and logs its
own failure so a broken mail server can never touch committed records.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

_OUTBOX_KEY = "outbox"

MessageFactory = Callable[[], Awaitable[Any]]

# Strong references so the event loop doesn't garbage-collect running tasks
_pending: set[asyncio.Task] = set()


def enqueue(session: Any, factory: MessageFactory, *, label: str = "message") -> None:
    """Queue *factory* to run once the session's unit of work commits."""
    session.info.setdefault(_OUTBOX_KEY, []).append((label, factory))


def pending_messages(session: Any) -> list[str]:
    """Labels of messages queued on *session* but not yet released."""
    return [label for label, _ in session.info.get(_OUTBOX_KEY, [])]


def discard_outbox(session: Any) -> int:
    dropped = session.info.pop(_OUTBOX_KEY, [])
    if dropped:
        logger.info("Discarded %d queued message(s) after rollback", len(dropped))
    return len(dropped)


def flush_outbox(session: Any) -> int:
    """Spawn every queued message as a background task. Returns the count."""
    queued = session.info.pop(_OUTBOX_KEY, [])
    for label, factory in queued:
        spawn(factory, label=label)
    return len(queued)


def spawn(factory: MessageFactory, *, label: str = "message") -> asyncio.Task:
    task = asyncio.create_task(_guarded(factory, label))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def _guarded(factory: MessageFactory, label: str) -> None:
    try:
        await factory()
    except Exception as exc:
        logger.error("Background dispatch '%s' failed: %s", label, exc, exc_info=True)


async def wait_for_dispatch(timeout: float | None = None) -> None:
    """Wait for in-flight dispatch tasks (shutdown and tests)."""
    if not _pending:
        return
    await asyncio.wait(set(_pending), timeout=timeout)
