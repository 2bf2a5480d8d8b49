"""
Test suite for Blackjack card and scoring rules.

Verifies:
- Hand values, including multi-ace soft/hard reduction
- Card formatting and parsing
- Deck composition, draw order and reshuffle on exhaustion
- Settlement (WIN / LOSE / PUSH)

Run with: pytest test_game.py -v
"""

import itertools
import random

import pytest

from constants import RANKS, SUITS
from game import (
    Card,
    Deck,
    Outcome,
    build_deck,
    format_card,
    format_hand,
    hand_value,
    is_blackjack,
    is_bust,
    parse_card,
    settle,
    shuffle,
)


def hand(*ranks: str) -> list[Card]:
    """Build a hand from ranks (all spades for simplicity)."""
    return [Card(rank, "♠") for rank in ranks]


# =============================================================================
# Hand value tests
# =============================================================================

class TestHandValue:
    """Verify hand values match standard Blackjack scoring."""

    def test_two_aces_is_12(self):
        assert hand_value(hand("A", "A")) == 12

    def test_ace_king_is_21(self):
        assert hand_value(hand("A", "K")) == 21

    def test_two_aces_and_nine_is_21(self):
        assert hand_value(hand("A", "A", "9")) == 21

    def test_ten_ten_five_busts(self):
        assert hand_value(hand("10", "10", "5")) == 25

    def test_face_cards_worth_10(self):
        assert hand_value(hand("J")) == 10
        assert hand_value(hand("Q")) == 10
        assert hand_value(hand("K")) == 10

    def test_numerals_face_value(self):
        for rank in ("2", "3", "4", "5", "6", "7", "8", "9", "10"):
            assert hand_value(hand(rank)) == int(rank)

    def test_soft_hand_turns_hard(self):
        # A+6 = soft 17, hitting a 10 makes it hard 17
        assert hand_value(hand("A", "6")) == 17
        assert hand_value(hand("A", "6", "10")) == 17

    def test_four_aces(self):
        assert hand_value(hand("A", "A", "A", "A")) == 14

    def test_four_aces_and_seven(self):
        assert hand_value(hand("A", "A", "A", "A", "7")) == 21

    def test_empty_hand(self):
        assert hand_value([]) == 0

    def test_order_does_not_matter(self):
        cards = hand("A", "5", "A", "K")
        for perm in itertools.permutations(cards):
            assert hand_value(list(perm)) == 17

    def test_value_within_ace_bounds(self):
        """Value lies between all-aces-as-1 and at-most-one-ace-as-11."""
        rng = random.Random(7)
        deck = build_deck()
        for _ in range(500):
            cards = rng.sample(deck, rng.randint(1, 7))
            low = sum(1 if c.is_ace else c.value() for c in cards)
            has_ace = any(c.is_ace for c in cards)
            high = low + 10 if has_ace else low

            value = hand_value(cards)
            assert low <= value <= high
            # Never bust when counting an ace as 1 would avoid it
            if low <= 21:
                assert value <= 21
            # Never leave 10 points on the table
            if has_ace and high <= 21:
                assert value == high

    def test_is_bust(self):
        assert is_bust(hand("10", "10", "5"))
        assert not is_bust(hand("10", "A", "K"))

    def test_is_blackjack(self):
        assert is_blackjack(hand("A", "K"))
        assert not is_blackjack(hand("7", "7", "7"))
        assert not is_blackjack(hand("A", "9"))


# =============================================================================
# Card tests
# =============================================================================

class TestCard:

    def test_format_card(self):
        assert format_card(Card("A", "♥")) == "A♥"
        assert format_card(Card("10", "♠")) == "10♠"
        assert str(Card("K", "♦")) == "K♦"

    def test_format_hand(self):
        assert format_hand([Card("10", "♠"), Card("7", "♥")]) == "10♠,7♥"

    def test_parse_card(self):
        assert parse_card("10♣") == Card("10", "♣")
        assert parse_card("Q♦") == Card("Q", "♦")

    def test_parse_card_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_card("11♠")
        with pytest.raises(ValueError):
            parse_card("AX")

    def test_card_is_immutable(self):
        card = Card("A", "♥")
        with pytest.raises(AttributeError):
            card.rank = "K"


# =============================================================================
# Deck tests
# =============================================================================

class TestDeck:

    def test_build_deck_is_full_set(self):
        cards = build_deck()
        assert len(cards) == len(RANKS) * len(SUITS) == 52
        assert set(cards) == {Card(r, s) for r in RANKS for s in SUITS}

    def test_shuffle_is_permutation(self):
        cards = build_deck()
        shuffled = shuffle(list(cards), random.Random(1))
        assert sorted(shuffled, key=str) == sorted(cards, key=str)
        assert shuffled != cards

    def test_new_deck_is_full(self):
        deck = Deck(seed=42)
        assert deck.cards_remaining() == 52
        assert len(set(deck.cards)) == 52

    def test_seeded_decks_match(self):
        assert Deck(seed=3).cards == Deck(seed=3).cards

    def test_stacked_deck_draws_in_order(self):
        cards = [Card("10", "♠"), Card("7", "♥"), Card("A", "♦")]
        deck = Deck.stacked(cards)
        assert [deck.draw() for _ in range(3)] == cards

    def test_draw_removes_card(self):
        deck = Deck(seed=1)
        first = deck.cards[0]
        assert deck.draw() == first
        assert deck.cards_remaining() == 51
        assert first not in deck.cards

    def test_draw_never_fails(self):
        deck = Deck(seed=9)
        drawn = [deck.draw() for _ in range(52)]
        assert len(set(drawn)) == 52
        assert deck.reshuffles == 0

        # 53rd draw comes from a fresh full deck
        extra = deck.draw()
        assert isinstance(extra, Card)
        assert deck.reshuffles == 1
        assert deck.cards_remaining() == 51

    def test_many_draws_keep_going(self):
        deck = Deck(seed=5)
        for _ in range(52 * 4 + 3):
            deck.draw()
        assert deck.reshuffles == 4

    def test_stacked_deck_reshuffles_when_exhausted(self):
        deck = Deck.stacked([Card("2", "♣")], seed=11)
        deck.draw()
        deck.draw()
        assert deck.reshuffles == 1
        assert deck.cards_remaining() == 51


# =============================================================================
# Settlement tests
# =============================================================================

class TestSettle:

    def test_player_bust_loses(self):
        assert settle(22, 18) == Outcome.LOSE

    def test_player_bust_loses_even_if_dealer_busts(self):
        assert settle(25, 23) == Outcome.LOSE

    def test_dealer_bust_wins(self):
        assert settle(12, 22) == Outcome.WIN

    def test_higher_wins(self):
        assert settle(20, 18) == Outcome.WIN

    def test_equal_pushes(self):
        assert settle(18, 18) == Outcome.PUSH

    def test_lower_loses(self):
        assert settle(17, 19) == Outcome.LOSE

    def test_outcome_wire_values(self):
        assert Outcome.WIN.value == "WIN"
        assert Outcome.LOSE.value == "LOSE"
        assert Outcome.PUSH.value == "PUSH"
