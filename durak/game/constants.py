"""Durak rule constants for the canonical 36-card game."""

from durak.common.card import NUM_CARDS

DECK_SIZE = NUM_CARDS
HAND_SIZE = 6  # Hands are dealt and refilled up to this size
MAX_ATTACK_CARDS = 6  # Maximum attack cards on the table in one round
MIN_PLAYERS = 2
MAX_PLAYERS = 6
