"""
Card and protocol constants for the Blackjack table server.

This module is the single source of truth for card ranks, suits, Blackjack
numbers and the words of the text protocol spoken over the WebSocket.

Blackjack Scoring:
    - Ace: 11, or 1 when 11 would bust the hand
    - 2-10: Face value
    - Jack, Queen, King: 10
"""

# =============================================================================
# Cards
# =============================================================================

SUITS: tuple[str, ...] = ("♥", "♦", "♣", "♠")
RANKS: tuple[str, ...] = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K")

RANK_VALUES: dict[str, int] = {
    'A': 11,
    '2': 2,
    '3': 3,
    '4': 4,
    '5': 5,
    '6': 6,
    '7': 7,
    '8': 8,
    '9': 9,
    '10': 10,
    'J': 10,
    'Q': 10,
    'K': 10,
}

BLACKJACK = 21
DEALER_STANDS_ON = 17
SOFT_ACE_REDUCTION = 10  # Ace counted as 1 instead of 11


# =============================================================================
# Tables
# =============================================================================

TABLE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


# =============================================================================
# Protocol
# =============================================================================

# Inbound
CMD_CREATE = "CREATE"
CMD_JOIN = "JOIN"
CMD_HIT = "HIT"
CMD_STAND = "STAND"
CMD_YES = "YES"
CMD_NO = "NO"

# Outbound
MSG_TABLE_CREATED = "TABLE_CREATED"
MSG_TABLE_JOINED = "TABLE_JOINED"
MSG_TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
MSG_TABLE_FULL = "TABLE_FULL"
MSG_DEALER_RESET = "DEALER_RESET"
MSG_CARDS = "CARDS"
MSG_DEALER_INIT = "DEALER_INIT"
MSG_DEALER_REVEAL = "DEALER_REVEAL"
MSG_DEALER_CARD = "DEALER_CARD"
MSG_RESULT = "RESULT"
MSG_YOUR_TURN = "YOUR_TURN"
MSG_PLAY_AGAIN = "PLAY_AGAIN?"
MSG_PLAY_AGAIN_LOCK = "PLAY_AGAIN_LOCK"
