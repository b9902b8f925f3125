"""
This module defines the `Suit`, `Rank`, and `Card` classes used to represent the
36-card Durak deck.

- `Suit`: An enum for the four suits. The enum value is the suit ordinal used in
the canonical card index.

- `Rank`: An enum for the nine ranks Six through Ace, Ace high. The enum value is
the rank ordinal (Six = 1, Ace = 9).

- `Card`: An immutable playing card. Each card has a canonical integer index in
the range [0, 36) which round-trips exactly.

The module also provides the trump-aware helpers shared by the game state and
the per-turn view: `sort_cards`, `beats_card`, `transfer_card` and `hand_fmt`.
"""

from enum import Enum, unique
from typing import Iterable, List, Optional

NUM_RANKS = 9
NUM_SUITS = 4
NUM_CARDS = NUM_RANKS * NUM_SUITS
TRUMP_SORT_OFFSET = 100


@unique
class Suit(Enum):
    """
    Enum for suits in a Durak deck.
    """

    SPADES = 0
    DIAMONDS = 1
    HEARTS = 2
    CLUBS = 3

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]

    def __str__(self) -> str:
        return self.symbol


_SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.CLUBS: "♣",
}


@unique
class Rank(Enum):
    """
    Enum for ranks in a Durak deck, Six lowest and Ace highest.
    """

    SIX = 1
    SEVEN = 2
    EIGHT = 3
    NINE = 4
    TEN = 5
    JACK = 6
    QUEEN = 7
    KING = 8
    ACE = 9

    @property
    def rank_str(self) -> str:
        """A short string representation of the rank."""
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING, Rank.ACE):
            return self.name[0]
        return str(self.value + 5)

    def __lt__(self, other):
        if isinstance(other, Rank):
            return self.value < other.value
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, Rank):
            return self.value > other.value
        return NotImplemented

    def __str__(self) -> str:
        return self.rank_str


class Card:
    """
    Class representing a Durak playing card.

    >>> card = Card(Suit.HEARTS, Rank.TEN)
    >>> print(card)
    10♥
    >>> card.index
    22
    >>> Card.from_index(22) == card
    True
    """

    __slots__ = ("_suit", "_rank")

    def __init__(self, suit: Suit, rank: Rank):
        """
        Initialize a Card instance.

        :param suit: Suit of the card (one of the Suit enums)
        :param rank: Rank of the card (one of the Rank enums)
        """
        if not isinstance(suit, Suit):
            raise TypeError(f"Invalid suit: {suit}")
        if not isinstance(rank, Rank):
            raise TypeError(f"Invalid rank: {rank}")
        object.__setattr__(self, "_suit", suit)
        object.__setattr__(self, "_rank", rank)

    def __setattr__(self, name, value):
        raise AttributeError("Card is immutable")

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def rank(self) -> Rank:
        return self._rank

    @classmethod
    def from_index(cls, index: int) -> "Card":
        """
        Build a card from its canonical index.

        :param index: Integer in the range [0, 36)
        :raises ValueError: If the index is out of range
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Card index must be an int, got {index!r}")
        if not 0 <= index < NUM_CARDS:
            raise ValueError(f"Card index out of range: {index}")
        return cls(Suit(index // NUM_RANKS), Rank(index % NUM_RANKS + 1))

    @property
    def index(self) -> int:
        """The canonical index: (rank_ordinal - 1) + suit_ordinal * 9."""
        return (self._rank.value - 1) + self._suit.value * NUM_RANKS

    def sort_key(self, trump: Optional[Suit]) -> int:
        """Ordering key that places every trump card after every non-trump card."""
        if self._suit == trump:
            return self.index + TRUMP_SORT_OFFSET
        return self.index

    def beats(self, attack: "Card", trump: Suit) -> bool:
        """Check whether this card, played in defense, beats `attack`."""
        return beats_card(self, attack, trump)

    def __eq__(self, other):
        """
        Checks if this card is equal to another card.

        :param other: The other card to compare to.
        :return: True if the cards have the same rank and suit, False otherwise.
        """
        if isinstance(other, Card):
            return self._rank == other._rank and self._suit == other._suit
        return NotImplemented

    def __hash__(self):
        return hash((self._suit, self._rank))

    def __repr__(self) -> str:
        return f"Card(Suit.{self._suit.name}, Rank.{self._rank.name})"

    def __str__(self) -> str:
        return f"{self._rank.rank_str}{self._suit.symbol}"


def beats_card(defense: Card, attack: Card, trump: Suit) -> bool:
    """
    Check whether `defense` beats `attack` given the trump suit.

    A trump defense beats any non-trump attack, or a lower trump. A non-trump
    defense only beats a lower card of its own suit, and never a trump.
    """
    if defense.suit == trump:
        if attack.suit == trump:
            return defense.rank > attack.rank
        return True
    if attack.suit == trump or attack.suit != defense.suit:
        return False
    return defense.rank > attack.rank


def sort_cards(cards: List[Card], trump: Optional[Suit]) -> None:
    """Sort a hand in place, trump cards last."""
    cards.sort(key=lambda card: card.sort_key(trump))


def transfer_card(source: List[Card], destination: List[Card], card: Card) -> bool:
    """
    Move the first occurrence of `card` from `source` to the end of `destination`.

    :return: True if the card was found and moved.
    """
    try:
        position = source.index(card)
    except ValueError:
        return False
    destination.append(source.pop(position))
    return True


def hand_fmt(cards: Iterable[Card]) -> str:
    """Format cards as fixed-width columns for display."""
    return "".join(f"{str(card):>4}" for card in cards)
