"""WebSocket message handlers for the Blackjack table server.

Messages are single text lines, ``COMMAND [argument]``. CREATE and JOIN
have their own handlers in the HANDLERS dict; every other command is game
input and goes to the sender's inbox, where the table's round loop picks
it up through the turn coordinator.
"""

import logging
from typing import Optional

from constants import (
    CMD_CREATE,
    CMD_JOIN,
    MSG_TABLE_CREATED,
    MSG_TABLE_FULL,
    MSG_TABLE_JOINED,
    MSG_TABLE_NOT_FOUND,
)
from errors import ProtocolError, TableFullError, TableNotFoundError
from room import Actor, TableManager

logger = logging.getLogger(__name__)


def parse_message(raw: str) -> tuple[str, Optional[str]]:
    """
    Split a protocol line into command and optional argument.

    Examples:
        "JOIN abc123" -> ("JOIN", "abc123")
        "  HIT "      -> ("HIT", None)
    """
    parts = raw.strip().split(None, 1)
    if not parts:
        return "", None
    command = parts[0]
    argument = parts[1].strip() if len(parts) > 1 else None
    return command, argument


# ---------------------------------------------------------------------------
# Lobby handlers
# ---------------------------------------------------------------------------

async def handle_create(argument: Optional[str], actor: Actor, *, table_manager: TableManager, **kw) -> None:
    if actor.table_code:
        raise ProtocolError(f"CREATE from actor {actor.id} already at table {actor.table_code}")

    table = table_manager.create_table()
    await actor.send(f"{MSG_TABLE_CREATED} {table.code}")
    table.seat(actor)


async def handle_join(argument: Optional[str], actor: Actor, *, table_manager: TableManager, **kw) -> None:
    if actor.table_code:
        raise ProtocolError(f"JOIN from actor {actor.id} already at table {actor.table_code}")

    code = (argument or "").upper()
    try:
        table = table_manager.join_table(code, actor)
    except TableNotFoundError:
        await actor.send(MSG_TABLE_NOT_FOUND)
        return
    except TableFullError:
        await actor.send(MSG_TABLE_FULL)
        return

    await actor.send(f"{MSG_TABLE_JOINED} {table.code}")


# ---------------------------------------------------------------------------
# Game input
# ---------------------------------------------------------------------------

async def handle_game_input(command: str, actor: Actor, *, table_manager: TableManager, **kw) -> None:
    """Route a turn action or replay vote to the sender's inbox."""
    if not actor.table_code:
        raise ProtocolError(f"{command!r} from actor {actor.id} with no table")

    table = table_manager.get_table(actor.table_code)
    if table is None:
        actor.table_code = None
        raise ProtocolError(f"{command!r} from actor {actor.id} for a closed table")

    if not table.accepts_input(actor):
        raise ProtocolError(f"{command!r} from actor {actor.id} not accepted in phase {table.phase.value}")

    actor.submit(command)


HANDLERS = {
    CMD_CREATE: handle_create,
    CMD_JOIN: handle_join,
}


async def dispatch(raw: str, actor: Actor, **deps) -> None:
    """
    Handle one inbound line from an actor.

    Protocol errors are logged and dropped; they never reach the client
    or close the connection.
    """
    command, argument = parse_message(raw)
    if not command:
        return

    try:
        handler = HANDLERS.get(command)
        if handler:
            await handler(argument, actor, **deps)
        else:
            await handle_game_input(command, actor, **deps)
    except ProtocolError as e:
        logger.debug(f"Ignored message: {e}")
