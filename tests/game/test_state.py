"""
Tests for game registration, dealing and hand refills.
"""

import random

import pytest

from durak.common.card import NUM_CARDS, Card, Rank, Suit
from durak.errors import (
    DuplicateIdError,
    NotEnoughPlayersError,
    TooManyPlayersError,
)
from durak.game.constants import HAND_SIZE
from durak.game.state import GameState, Player, TurnType


def make_state(num_players, seed=7):
    state = GameState()
    for player_id in range(num_players):
        state.add_player(player_id)
    state.init(random.Random(seed))
    return state


def census(state):
    return sorted(card.index for card in state.all_cards())


class TestRegistration:
    def test_add_player(self):
        state = GameState()
        player = state.add_player(5)
        assert isinstance(player, Player)
        assert player.id == 5
        assert player.hand == []
        assert [p.id for p in state.players] == [5]

    def test_duplicate_id(self):
        state = GameState()
        state.add_player(1)
        with pytest.raises(DuplicateIdError):
            state.add_player(1)
        assert len(state.players) == 1

    def test_seventh_player_rejected(self):
        state = GameState()
        for player_id in range(6):
            state.add_player(player_id)
        with pytest.raises(TooManyPlayersError):
            state.add_player(6)
        assert len(state.players) == 6


class TestInit:
    def test_not_enough_players(self):
        state = GameState()
        state.add_player(0)
        with pytest.raises(NotEnoughPlayersError):
            state.init(random.Random(1))
        assert not state.initialized
        assert state.players[0].hand == []

    def test_too_many_players(self):
        state = GameState()
        state.players = [Player(id=i) for i in range(7)]
        with pytest.raises(TooManyPlayersError):
            state.init(random.Random(1))
        assert not state.initialized

    @pytest.mark.parametrize("num_players", [2, 3, 4, 5, 6])
    def test_deal(self, num_players):
        state = make_state(num_players)
        assert state.initialized
        assert isinstance(state.trump, Suit)
        for player in state.players:
            assert len(player.hand) == HAND_SIZE
        assert len(state.draw_pile) == NUM_CARDS - HAND_SIZE * num_players
        assert census(state) == list(range(NUM_CARDS))

    def test_first_round_setup(self):
        state = make_state(4)
        assert state.to_play == 0
        assert state.defender == 1
        assert state.attackers == [0, 2, 3]
        assert state.attackers_passed == []
        assert state.turn_type == TurnType.ATTACK
        assert state.defender not in state.attackers

    def test_hands_sorted_trump_last(self):
        state = make_state(3)
        for player in state.players:
            keys = [card.sort_key(state.trump) for card in player.hand]
            assert keys == sorted(keys)

    def test_seeded_deal_is_reproducible(self):
        first = make_state(3, seed=11)
        second = make_state(3, seed=11)
        assert first.trump == second.trump
        assert [p.hand for p in first.players] == [p.hand for p in second.players]
        assert first.draw_pile == second.draw_pile


class TestRefill:
    def test_refill_draws_from_end_of_pile(self):
        state = make_state(2)
        player = state.players[0]
        player.hand = player.hand[:4]
        expected = set(state.draw_pile[-2:])
        pile_size = len(state.draw_pile)

        assert state.refill_from_talon(0) == 2
        assert len(player.hand) == HAND_SIZE
        assert expected <= set(player.hand)
        assert len(state.draw_pile) == pile_size - 2

    def test_refill_stops_when_pile_empty(self):
        state = make_state(2)
        state.draw_pile = [Card(Suit.HEARTS, Rank.ACE)]
        state.players[0].hand = []
        assert state.refill_from_talon(0) == 1
        assert state.players[0].hand == [Card(Suit.HEARTS, Rank.ACE)]
        assert state.draw_pile == []

    def test_refill_does_not_exceed_hand_size(self):
        state = make_state(2)
        state.players[0].hand.append(state.draw_pile.pop())
        assert state.refill_from_talon(0) == 0
        assert len(state.players[0].hand) == HAND_SIZE + 1

    def test_attackers_refill_before_defender(self):
        state = make_state(3)
        for player in state.players:
            player.hand = []
        state.draw_pile = state.draw_pile[:8]
        drawn = state.refill_players_hands()
        # attackers are 0 and 2, then defender 1
        assert drawn == {0: 6, 2: 2, 1: 0}
        assert len(state.players[1].hand) == 0


class TestViews:
    def test_view_for_player_to_play(self):
        state = make_state(3)
        view = state.view()
        assert view.hand == tuple(state.players[0].hand)
        assert view.trump == state.trump
        assert view.to_play == 0
        assert view.defender == 1
        assert [info.id for info in view.player_info] == [0, 1, 2]
        assert all(info.hand_len == HAND_SIZE for info in view.player_info)

    def test_view_for_other_player(self):
        state = make_state(3)
        view = state.view(2)
        assert view.hand == tuple(state.players[2].hand)
        assert view.to_play == 0

    def test_view_is_a_snapshot(self):
        state = make_state(2)
        view = state.view()
        state.players[0].hand.pop()
        assert len(view.hand) == HAND_SIZE


class TestEndOfGame:
    def test_loser_and_winners(self):
        state = make_state(3)
        state.players[0].hand = []
        state.players[2].hand = []
        state.turn_type = TurnType.GAME_END
        assert state.loser is state.players[1]
        assert [p.id for p in state.winners] == [0, 2]

    def test_no_loser_before_game_end(self):
        state = make_state(2)
        assert state.loser is None
        assert state.winners == []

    def test_to_dict(self):
        state = make_state(2)
        data = state.to_dict()
        assert data["turn_type"] == "ATTACK"
        assert data["draw_pile_size"] == 24
        assert data["players"] == [
            {"id": 0, "hand_size": 6},
            {"id": 1, "hand_size": 6},
        ]
