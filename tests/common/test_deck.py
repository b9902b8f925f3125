import random

import pytest

from durak.common.card import NUM_CARDS, Card, Suit
from durak.common.deck import Deck
from durak.errors import GameInitializationError, NotEnoughCardsError


def test_deck_initialization():
    deck = Deck()
    assert deck.size == NUM_CARDS
    assert len(set(deck.cards)) == NUM_CARDS


def test_deck_str():
    assert str(Deck()) == "Deck of 36 cards"


def test_deck_repr():
    deck = Deck()
    assert repr(deck) == f"Deck({[repr(card) for card in deck.cards]})"


def test_choose_trump_returns_a_suit():
    deck = Deck(random.Random(3))
    assert isinstance(deck.choose_trump(), Suit)


def test_choose_trump_covers_every_suit():
    rng = random.Random(42)
    seen = {Deck(rng).choose_trump() for _ in range(200)}
    assert seen == set(Suit)


def test_deal_moves_cards_into_hand():
    deck = Deck(random.Random(5))
    hand = []
    deck.deal(6, hand, Suit.HEARTS)
    assert len(hand) == 6
    assert deck.size == 30
    assert not set(hand) & set(deck.cards)


def test_deal_sorts_trump_last():
    deck = Deck(random.Random(5))
    hand = []
    deck.deal(20, hand, Suit.HEARTS)
    keys = [card.sort_key(Suit.HEARTS) for card in hand]
    assert keys == sorted(keys)


def test_deal_appends_to_existing_hand():
    deck = Deck(random.Random(5))
    existing = Card.from_index(0)
    deck.cards.remove(existing)
    hand = [existing]
    deck.deal(2, hand, Suit.CLUBS)
    assert len(hand) == 3
    assert existing in hand


def test_deal_not_enough_cards():
    deck = Deck(random.Random(5))
    hand = []
    deck.deal(34, hand, Suit.CLUBS)
    with pytest.raises(NotEnoughCardsError):
        deck.deal(3, hand, Suit.CLUBS)
    assert len(hand) == 34
    assert deck.size == 2


def test_not_enough_cards_is_an_initialization_error():
    assert issubclass(NotEnoughCardsError, GameInitializationError)


def test_same_seed_same_deal():
    hands = []
    for _ in range(2):
        deck = Deck(random.Random(99))
        hand = []
        deck.deal(6, hand, Suit.SPADES)
        hands.append(hand)
    assert hands[0] == hands[1]


def test_remaining_drains_deck():
    deck = Deck(random.Random(1))
    hand = []
    deck.deal(12, hand, Suit.SPADES)
    rest = deck.remaining()
    assert len(rest) == 24
    assert deck.is_empty()
    assert sorted(c.index for c in hand + rest) == list(range(NUM_CARDS))
