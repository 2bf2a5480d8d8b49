"""
Turn-response coordination.

A table's round loop runs as one asyncio task. When it needs a decision
from a player it calls ``await_response``, which parks that task until the
first of:

    - a command arrives in the player's inbox (the oldest one is returned),
    - the player's connection closes,
    - the timeout elapses.

The last two resolve to a default action instead of raising, so a silent or
vanished player never stalls the table. Other tables keep running while
one waits, since the wait only suspends the calling task.
"""

import asyncio
import logging
from typing import Optional, TYPE_CHECKING

from constants import CMD_STAND

if TYPE_CHECKING:
    from room import Actor

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_TIMEOUT = 30.0


async def await_response(
    actor: "Actor",
    timeout: Optional[float] = DEFAULT_RESPONSE_TIMEOUT,
    default: str = CMD_STAND,
) -> str:
    """
    Wait for an actor's next command.

    Args:
        actor: The player being asked.
        timeout: Seconds to wait; None waits until input or disconnect.
        default: Returned on timeout or when the connection is not live.

    Returns:
        The oldest queued command, or ``default``.
    """
    if not actor.is_live:
        return default

    # A burst of input is served in arrival order
    if not actor.inbox.empty():
        return actor.inbox.get_nowait()

    get_task = asyncio.ensure_future(actor.inbox.get())
    closed_task = asyncio.ensure_future(actor.closed.wait())
    try:
        await asyncio.wait(
            {get_task, closed_task},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (get_task, closed_task):
            if not task.done():
                task.cancel()

    if get_task.done() and not get_task.cancelled():
        return get_task.result()

    if closed_task.done():
        logger.debug(f"Actor {actor.id} disconnected while awaited, using {default}")
    else:
        logger.debug(f"Actor {actor.id} timed out after {timeout}s, using {default}")
    return default
