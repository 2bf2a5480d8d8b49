"""
Table management for multiplayer Blackjack.

This module holds the per-table game session and the registry of live
tables.

A Table contains:
    - A unique 6-character code for joining
    - The active Actors playing the current round, in seating order
    - The queued Actors who sat down mid-round and wait for the next deal
    - The dealer's hand and the Deck
    - The asyncio task driving its rounds

Round flow (one task per table, one phase at a time):
    IDLE -> DEALING -> PLAYER_TURNS -> DEALER_TURN -> SETTLEMENT
         -> REPLAY_POLL -> DEALING (next round) | TERMINATED
"""

import asyncio
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from fastapi import WebSocket

from config import TableTiming, config
from constants import (
    BLACKJACK,
    CMD_HIT,
    CMD_NO,
    CMD_YES,
    DEALER_STANDS_ON,
    MSG_CARDS,
    MSG_DEALER_CARD,
    MSG_DEALER_INIT,
    MSG_DEALER_RESET,
    MSG_DEALER_REVEAL,
    MSG_PLAY_AGAIN,
    MSG_PLAY_AGAIN_LOCK,
    MSG_RESULT,
    MSG_YOUR_TURN,
    TABLE_CODE_ALPHABET,
)
from coordinator import await_response
from errors import TableFullError, TableNotFoundError
from game import Card, Deck, Outcome, format_hand, hand_value, is_blackjack, is_bust, settle
from logging_config import get_logger

logger = get_logger(__name__)


class ActorStatus(str, Enum):
    """Where an actor stands in the current round."""

    PENDING = "pending"      # Queued, sits out the current round
    ACTIVE = "active"        # Dealt in, turn not finished
    STANDING = "standing"    # Turn finished without busting
    BUST = "bust"            # Went over 21
    BLACKJACK = "blackjack"  # Dealt a natural 21


class TablePhase(str, Enum):
    """Phases of a table's round loop."""

    IDLE = "idle"
    DEALING = "dealing"
    PLAYER_TURNS = "player_turns"
    DEALER_TURN = "dealer_turn"
    SETTLEMENT = "settlement"
    REPLAY_POLL = "replay_poll"
    TERMINATED = "terminated"


@dataclass(eq=False)
class Actor:
    """
    A seated participant, correlated with one live connection.

    The connection layer only talks to an Actor through ``send`` (deliver
    text), ``submit`` (push an inbound command to the inbox) and ``close``
    (close notification). The round loop reads the inbox through the turn
    coordinator.

    Attributes:
        id: Unique identifier (connection id).
        websocket: Connection used for outbound text (None once detached).
        inbox: FIFO of inbound commands, consumed by the turn coordinator.
        closed: Set when the connection goes away.
        hand: Cards held this round.
        status: Round status; PENDING while queued.
        table_code: Code of the table the actor sits at, if any.
        wins/losses/pushes: Running score across rounds.
    """

    id: str
    websocket: Optional[WebSocket] = None
    inbox: asyncio.Queue = field(default_factory=asyncio.Queue)
    closed: asyncio.Event = field(default_factory=asyncio.Event)
    hand: list[Card] = field(default_factory=list)
    status: ActorStatus = ActorStatus.PENDING
    table_code: Optional[str] = None
    wins: int = 0
    losses: int = 0
    pushes: int = 0

    @property
    def is_live(self) -> bool:
        """Whether the connection is open."""
        return self.websocket is not None and not self.closed.is_set()

    @property
    def is_queued(self) -> bool:
        return self.status == ActorStatus.PENDING

    def hand_value(self) -> int:
        return hand_value(self.hand)

    async def send(self, text: str) -> None:
        """
        Deliver one protocol line.

        Sends to a dead connection are dropped. A failed send marks the
        actor closed so the round loop stops waiting on it.
        """
        if not self.is_live:
            logger.debug(f"Dropped message for closed actor {self.id}: {text}")
            return
        try:
            await self.websocket.send_text(text)
        except Exception as e:
            logger.debug(f"Send to actor {self.id} failed: {e}")
            self.close()

    def submit(self, command: str) -> None:
        """Queue an inbound command for the coordinator."""
        self.inbox.put_nowait(command)

    def clear_inbox(self) -> int:
        """Drop any queued commands, returning how many were dropped."""
        dropped = 0
        while not self.inbox.empty():
            self.inbox.get_nowait()
            dropped += 1
        return dropped

    def close(self) -> None:
        """Mark the connection gone; wakes any pending coordinator wait."""
        self.closed.set()

    def record(self, outcome: Outcome) -> None:
        """Add a settled hand to the actor's running score."""
        if outcome == Outcome.WIN:
            self.wins += 1
        elif outcome == Outcome.LOSE:
            self.losses += 1
        else:
            self.pushes += 1


@dataclass(eq=False)
class Table:
    """
    One isolated Blackjack game identified by a unique code.

    The table's task is the only mutator of the dealer hand and deck, and
    of each active actor's hand. Actors who sit down while a round is
    running are queued and merged into ``active`` only between rounds.

    Attributes:
        code: 6-character code for joining (e.g., "ABC123").
        active: Actors dealt into the current round, in seating order.
        queued: Actors waiting for the next deal.
        dealer: The dealer's hand.
        deck: The shoe for the current round.
        phase: Current TablePhase.
        running: True while the round loop is dealing, playing, polling or
            pausing between rounds.
        polling: The actor currently asked whether to play again.
        rounds_played: Completed rounds at this table.
        manager: Registry to leave when the table empties.
    """

    code: str
    max_players: int = field(default_factory=lambda: config.MAX_PLAYERS_PER_TABLE)
    response_timeout: float = field(default_factory=lambda: config.RESPONSE_TIMEOUT)
    timing: TableTiming = field(default_factory=lambda: config.timing)
    deck_factory: Callable[[], Deck] = Deck
    manager: Optional["TableManager"] = field(default=None, repr=False)

    active: list[Actor] = field(default_factory=list)
    queued: list[Actor] = field(default_factory=list)
    dealer: list[Card] = field(default_factory=list)
    deck: Optional[Deck] = None
    phase: TablePhase = TablePhase.IDLE
    running: bool = False
    polling: Optional[Actor] = None
    rounds_played: int = 0
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.log = logger.with_context(table_code=self.code)

    # -------------------------------------------------------------------------
    # Seating
    # -------------------------------------------------------------------------

    def player_count(self) -> int:
        """Active plus queued actors."""
        return len(self.active) + len(self.queued)

    def is_full(self) -> bool:
        return self.player_count() >= self.max_players

    def is_empty(self) -> bool:
        return not self.active and not self.queued

    def seat(self, actor: Actor) -> bool:
        """
        Sit an actor down.

        While a round is running the actor is queued for the next deal.
        The first actor at an idle table starts the round loop.

        Returns:
            True if the actor was queued rather than seated active.

        Raises:
            TableFullError: The table is at capacity (nothing changes).
        """
        if self.is_full():
            raise TableFullError(self.code, self.max_players)

        actor.table_code = self.code
        actor.hand = []

        if self.running:
            actor.status = ActorStatus.PENDING
            self.queued.append(actor)
            self.log.info(f"Actor {actor.id} queued for next round", extra={"player_id": actor.id})
            return True

        actor.status = ActorStatus.ACTIVE
        self.active.append(actor)
        self.log.info(f"Actor {actor.id} seated", extra={"player_id": actor.id})

        if self.task is None:
            self.task = asyncio.create_task(self.run())
        return False

    def remove(self, actor: Actor) -> None:
        """
        Take an actor off the table (disconnect or declined replay).

        Destroys the table through its manager once nobody is left.
        """
        if actor in self.active:
            self.active.remove(actor)
        if actor in self.queued:
            self.queued.remove(actor)
        if self.polling is actor:
            self.polling = None
        actor.table_code = None
        self.log.info(f"Actor {actor.id} left", extra={"player_id": actor.id})

        if self.is_empty():
            self._discard()

    def accepts_input(self, actor: Actor) -> bool:
        """
        Whether an inbound command from this actor should reach its inbox.

        Queued actors are ignored until dealt in. During the replay poll
        only the actor being asked may answer.
        """
        if actor not in self.active:
            return False
        if self.phase == TablePhase.REPLAY_POLL:
            return self.polling is actor
        return True

    # -------------------------------------------------------------------------
    # Messaging
    # -------------------------------------------------------------------------

    def live_actors(self) -> list[Actor]:
        """Active actors whose connection is still open."""
        return [a for a in self.active if a.is_live]

    async def broadcast(self, message: str) -> None:
        """Send a message to every live active actor."""
        for actor in self.live_actors():
            await actor.send(message)

    async def send_to(self, actor: Actor, message: str) -> None:
        """Send a message to one actor, skipped if its connection is gone."""
        if actor.is_live:
            await actor.send(message)

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    # -------------------------------------------------------------------------
    # Round loop
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """
        Drive rounds until nobody is left at the table.

        Queued actors are merged in at the top of each iteration, i.e. only
        between rounds.
        """
        try:
            await self._pause(self.timing.JOIN_GRACE_DELAY)
            while True:
                self._promote_queued()
                if not self.active:
                    break
                self.running = True
                await self.play_round()
                await self.poll_replay()
                if self.is_empty():
                    break
                await self._pause(self.timing.NEXT_ROUND_DELAY)
        except Exception:
            self.log.exception(f"Table {self.code} round loop failed")
            raise
        finally:
            self.running = False
            self.phase = TablePhase.TERMINATED
            self.polling = None
            self.task = None
            self.log.info(f"Table {self.code} closed after {self.rounds_played} rounds")
            if self.is_empty():
                self._discard()

    def _promote_queued(self) -> None:
        """Merge live queued actors into the active list with fresh hands."""
        self.active = [a for a in self.active if a.is_live]
        for actor in self.queued:
            if actor.is_live:
                self.active.append(actor)
            else:
                actor.table_code = None
        self.queued = []
        for actor in self.active:
            actor.hand = []
            actor.status = ActorStatus.ACTIVE

    async def play_round(self) -> None:
        """Deal, take turns, play the dealer and settle one round."""
        await self.deal()

        self.phase = TablePhase.PLAYER_TURNS
        for actor in list(self.active):
            if actor in self.active:
                await self.play_turn(actor)

        self.phase = TablePhase.DEALER_TURN
        await self.play_dealer()

        self.phase = TablePhase.SETTLEMENT
        await self.settle_round()
        self.rounds_played += 1

    async def deal(self) -> None:
        """Fresh deck, two cards to the dealer and to every active actor."""
        self.phase = TablePhase.DEALING
        self.deck = self.deck_factory()
        self.log.info(f"Round {self.rounds_played + 1} starting with {len(self.active)} players")

        await self.broadcast(MSG_DEALER_RESET)

        self.dealer = [self.deck.draw(), self.deck.draw()]
        for actor in self.active:
            actor.hand = [self.deck.draw(), self.deck.draw()]
            if is_blackjack(actor.hand):
                actor.status = ActorStatus.BLACKJACK

        # Both cards go out; hiding the hole card is the client's business
        await self.broadcast(f"{MSG_DEALER_INIT} {self.dealer[0]} {self.dealer[1]}")
        await self._pause(self.timing.DEAL_DELAY)

        for actor in list(self.active):
            await self.send_to(actor, f"{MSG_CARDS} {format_hand(actor.hand)}")
        await self._pause(self.timing.TURN_DELAY)

    async def play_turn(self, actor: Actor) -> None:
        """
        Prompt one actor until it stands, busts or reaches 21.

        Any answer other than HIT ends the turn, including the STAND the
        coordinator falls back to on timeout or disconnect.
        """
        if not actor.is_live:
            return

        while actor.hand_value() < BLACKJACK:
            await self.send_to(actor, MSG_YOUR_TURN)
            response = await await_response(actor, timeout=self.response_timeout)

            if response != CMD_HIT:
                break

            actor.hand.append(self.deck.draw())
            await self.send_to(actor, f"{MSG_CARDS} {format_hand(actor.hand)}")
            if is_bust(actor.hand):
                actor.status = ActorStatus.BUST
                self.log.debug(f"Actor {actor.id} bust", extra={"player_id": actor.id})
                return

        if actor.status == ActorStatus.ACTIVE:
            actor.status = ActorStatus.STANDING

    async def play_dealer(self) -> None:
        """Reveal the hole card, then draw to 17 unless every player bust."""
        await self.broadcast(MSG_DEALER_REVEAL)
        await self._pause(self.timing.REVEAL_DELAY)

        if all(is_bust(a.hand) for a in self.active):
            return

        while hand_value(self.dealer) < DEALER_STANDS_ON:
            card = self.deck.draw()
            self.dealer.append(card)
            await self.broadcast(f"{MSG_DEALER_CARD} {card}")
            await self._pause(self.timing.DEALER_DRAW_DELAY)

    async def settle_round(self) -> None:
        """Send each active actor its outcome and the dealer's final hand."""
        dealer_value = hand_value(self.dealer)
        dealer_cards = format_hand(self.dealer)

        for actor in list(self.active):
            outcome = settle(actor.hand_value(), dealer_value)
            actor.record(outcome)
            self.log.info(
                f"Actor {actor.id} {outcome.value}: {actor.hand_value()} vs dealer {dealer_value}",
                extra={"player_id": actor.id},
            )
            await self.send_to(actor, f"{MSG_RESULT} {outcome.value} DEALER {dealer_cards}")
        await self._pause(self.timing.RESULT_DELAY)

    async def poll_replay(self) -> None:
        """
        Ask each active actor, one at a time, whether to play again.

        Everyone else is locked out while one actor is asked, so a stray
        keystroke from another player can't answer for them. Anything but
        YES (timeouts included) takes the actor off the table at once,
        freeing the seat and stopping further lock broadcasts to it.
        """
        self.phase = TablePhase.REPLAY_POLL

        for actor in list(self.active):
            if actor not in self.active:
                continue
            if not actor.is_live:
                self.remove(actor)
                continue

            self.polling = actor
            await self.broadcast(MSG_PLAY_AGAIN_LOCK)
            actor.clear_inbox()
            await self.send_to(actor, MSG_PLAY_AGAIN)

            response = await await_response(actor, timeout=self.response_timeout, default=CMD_NO)
            self.polling = None

            if response != CMD_YES and actor in self.active:
                self.log.info(f"Actor {actor.id} declined another round", extra={"player_id": actor.id})
                self.remove(actor)
            await self._pause(self.timing.REPLAY_DELAY)

        self.active = [a for a in self.active if a.is_live]

    def _discard(self) -> None:
        if self.manager is not None:
            self.manager.remove_table(self.code, self)


class TableManager:
    """
    Registry of all live tables.

    Provides table creation with unique codes, lookup, join and cleanup.
    A single TableManager instance is used by the server; everything runs
    on one event loop, so the plain dict needs no lock.
    """

    def __init__(
        self,
        max_players: Optional[int] = None,
        code_length: Optional[int] = None,
        response_timeout: Optional[float] = None,
        timing: Optional[TableTiming] = None,
        deck_factory: Callable[[], Deck] = Deck,
    ) -> None:
        """Initialize an empty table manager; None settings fall back to config."""
        self.tables: dict[str, Table] = {}
        self.max_players = max_players if max_players is not None else config.MAX_PLAYERS_PER_TABLE
        self.code_length = code_length if code_length is not None else config.TABLE_CODE_LENGTH
        self.response_timeout = response_timeout if response_timeout is not None else config.RESPONSE_TIMEOUT
        self.timing = timing or config.timing
        self.deck_factory = deck_factory

    def _generate_code(self, max_attempts: int = 100) -> str:
        """Generate a unique table code."""
        for _ in range(max_attempts):
            code = "".join(random.choices(TABLE_CODE_ALPHABET, k=self.code_length))
            if code not in self.tables:
                return code
        raise RuntimeError("Could not generate unique table code")

    def create_table(self) -> Table:
        """
        Create a new table with a unique code.

        Returns:
            The newly created Table.
        """
        code = self._generate_code()
        table = Table(
            code=code,
            max_players=self.max_players,
            response_timeout=self.response_timeout,
            timing=self.timing,
            deck_factory=self.deck_factory,
            manager=self,
        )
        self.tables[code] = table
        logger.info(f"Table {code} created", extra={"table_code": code})
        return table

    def get_table(self, code: str) -> Optional[Table]:
        """
        Get a table by its code (case-insensitive).

        Returns:
            The Table if found, None otherwise.
        """
        return self.tables.get(code.upper())

    def remove_table(self, code: str, table: Optional[Table] = None) -> None:
        """
        Delete a table. Idempotent.

        Args:
            code: The table code to remove.
            table: If given, only remove the entry while it still maps to
                this table, so a finished table never evicts a newer one
                that reused its code.
        """
        current = self.tables.get(code)
        if current is None or (table is not None and current is not table):
            return
        del self.tables[code]
        logger.info(f"Table {code} removed", extra={"table_code": code})

    def join_table(self, code: str, actor: Actor) -> Table:
        """
        Seat an actor at an existing table.

        Raises:
            TableNotFoundError: No live table has this code.
            TableFullError: The table is at capacity.
        """
        table = self.get_table(code)
        if table is None:
            raise TableNotFoundError(code)
        table.seat(actor)
        return table

    def leave_table(self, actor: Actor) -> None:
        """Remove an actor from whatever table it sits at."""
        if not actor.table_code:
            return
        table = self.get_table(actor.table_code)
        if table is None:
            actor.table_code = None
            return
        table.remove(actor)

    def actor_count(self) -> int:
        """Actors seated or queued across every table."""
        return sum(t.player_count() for t in self.tables.values())
