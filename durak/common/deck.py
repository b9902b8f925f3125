"""
This module contains the Deck class, which holds the 36 Durak cards before they
are dealt.

>>> import random
>>> deck = Deck(random.Random(7))
>>> deck.size
36
>>> hand = []
>>> deck.deal(6, hand, Suit.HEARTS)
>>> len(hand), deck.size
(6, 30)
"""

import random
from typing import List, Optional

from durak.common.card import Card, Suit, NUM_CARDS, sort_cards
from durak.errors import NotEnoughCardsError


class Deck:
    """
    A class representing the undealt Durak deck.

    Cards are drawn uniformly at random without replacement, using the random
    source supplied by the caller so games can be reproduced from a seed.
    """

    # Precompute the default deck
    _default_deck = [Card.from_index(i) for i in range(NUM_CARDS)]

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize a Deck instance with all 36 cards.

        :param rng: Random source used for trump selection and dealing.
        """
        self.rng = rng or random.Random()
        self.cards: List[Card] = self.initialize_default_deck()

    def initialize_default_deck(self) -> List[Card]:
        """
        Construct the full deck in canonical index order.

        >>> len(Deck().initialize_default_deck())
        36
        """
        return self._default_deck.copy()

    def choose_trump(self) -> Suit:
        """Pick the trump suit uniformly at random, independent of the cards."""
        return self.rng.choice(list(Suit))

    def deal(self, num_cards: int, hand: List[Card], trump: Optional[Suit]) -> None:
        """
        Move `num_cards` random cards into `hand`, then sort the hand trump-last.

        :raises NotEnoughCardsError: If fewer than `num_cards` cards remain.
        """
        if num_cards > len(self.cards):
            raise NotEnoughCardsError(
                f"Not enough cards in deck: requested {num_cards}, have {len(self.cards)}"
            )
        for _ in range(num_cards):
            hand.append(self.cards.pop(self.rng.randrange(len(self.cards))))
        sort_cards(hand, trump)

    def shuffle(self) -> "Deck":
        """Shuffle the undealt cards in place."""
        self.rng.shuffle(self.cards)
        return self

    def remaining(self) -> List[Card]:
        """Drain and return every card still in the deck, in random order."""
        self.shuffle()
        cards, self.cards = self.cards, []
        return cards

    @property
    def size(self) -> int:
        """
        Return the number of remaining cards in the deck.
        """
        return len(self.cards)

    def is_empty(self) -> bool:
        return len(self.cards) == 0

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"
