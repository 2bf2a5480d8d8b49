"""
Card and scoring logic for Blackjack.

This module implements the pieces of the game that have no notion of
connections or timing: cards, the shoe a table deals from, hand values
and the settlement rule.

Blackjack Rules Summary:
    - Each player and the dealer start with two cards
    - Players hit until they stand or go over 21 (bust)
    - The dealer draws while under 17, then stands
    - A player beats the dealer by finishing closer to 21 without busting

Ace Handling:
    Every ace starts at 11. While the hand is over 21 and some ace is
    still counted as 11, one ace drops to 1. So A+A = 12, A+K = 21,
    A+A+9 = 21.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from constants import (
    BLACKJACK,
    RANKS,
    RANK_VALUES,
    SOFT_ACE_REDUCTION,
    SUITS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Card:
    """
    A playing card. Immutable once drawn.

    Attributes:
        rank: One of A, 2-10, J, Q, K.
        suit: One of the four suit symbols.
    """

    rank: str
    suit: str

    def __str__(self) -> str:
        return format_card(self)

    @property
    def is_ace(self) -> bool:
        return self.rank == "A"

    def value(self) -> int:
        """Get the card's value with an ace counted as 11."""
        return RANK_VALUES[self.rank]


def format_card(card: Card) -> str:
    """Canonical display string, e.g. "A♥", "10♠"."""
    return f"{card.rank}{card.suit}"


def format_hand(hand: Iterable[Card]) -> str:
    """Comma-joined card strings, e.g. "10♠,7♥"."""
    return ",".join(format_card(card) for card in hand)


def parse_card(text: str) -> Card:
    """
    Parse a display string back into a Card.

    Raises:
        ValueError: If the text is not a rank followed by a suit symbol.
    """
    rank, suit = text[:-1], text[-1:]
    if rank not in RANKS or suit not in SUITS:
        raise ValueError(f"Not a card: {text!r}")
    return Card(rank, suit)


def build_deck() -> list[Card]:
    """Return the 52 cards of a standard deck, unshuffled."""
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


def shuffle(cards: list[Card], rng: Optional[random.Random] = None) -> list[Card]:
    """
    Shuffle cards in place (Fisher-Yates) and return them.

    Args:
        cards: The list to permute.
        rng: Random source; the module-level generator when omitted.
    """
    (rng or random).shuffle(cards)
    return cards


def hand_value(hand: Iterable[Card]) -> int:
    """
    Best Blackjack value of a hand.

    Aces count 11 until the total passes 21, then drop to 1 one at a time.
    """
    total = 0
    soft_aces = 0
    for card in hand:
        total += card.value()
        if card.is_ace:
            soft_aces += 1

    while total > BLACKJACK and soft_aces > 0:
        total -= SOFT_ACE_REDUCTION
        soft_aces -= 1

    return total


def is_bust(hand: Iterable[Card]) -> bool:
    return hand_value(hand) > BLACKJACK


def is_blackjack(hand: list[Card]) -> bool:
    """A natural: exactly two cards worth 21."""
    return len(hand) == 2 and hand_value(hand) == BLACKJACK


class Deck:
    """
    The shoe a table deals from.

    Cards are drawn from the front. A draw never fails: when the deck runs
    out it is replaced by a freshly shuffled full deck before drawing.

    For deterministic play (tests, simulations) the deck can be seeded, or
    stacked with an explicit card order via ``Deck.stacked``.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        """
        Initialize a full shuffled deck.

        Args:
            seed: Optional random seed. Shuffles (including reshuffles on
                exhaustion) are reproducible for a given seed.
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self.reshuffles = 0
        self.cards: list[Card] = shuffle(build_deck(), self.rng)

    @classmethod
    def stacked(cls, cards: Iterable[Card], seed: Optional[int] = None) -> "Deck":
        """Create a deck that deals the given cards first, in order."""
        deck = cls(seed=seed)
        deck.cards = list(cards)
        return deck

    def draw(self) -> Card:
        """Remove and return the front card, reshuffling first if empty."""
        if self.cards_remaining() == 0:
            self.reshuffle()
        return self.cards.pop(0)

    def reshuffle(self) -> None:
        """Replace the remaining cards with a freshly shuffled full deck."""
        self.cards = shuffle(build_deck(), self.rng)
        self.reshuffles += 1
        logger.info(f"Deck reshuffled (reshuffle #{self.reshuffles})")

    def cards_remaining(self) -> int:
        """Return the number of cards left before the next reshuffle."""
        return len(self.cards)


class Outcome(str, Enum):
    """Result of one player's hand against the dealer."""

    WIN = "WIN"
    LOSE = "LOSE"
    PUSH = "PUSH"


def settle(player_value: int, dealer_value: int) -> Outcome:
    """
    Compare final hand values.

    A busted player always loses, even if the dealer busts too.
    """
    if player_value > BLACKJACK:
        return Outcome.LOSE
    if dealer_value > BLACKJACK:
        return Outcome.WIN
    if player_value > dealer_value:
        return Outcome.WIN
    if player_value == dealer_value:
        return Outcome.PUSH
    return Outcome.LOSE
