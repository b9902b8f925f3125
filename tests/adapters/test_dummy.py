import pytest

from durak.adapters.dummy import DummyPlayer
from durak.common.card import Card, Rank, Suit
from durak.game.view import Action, PlayerInfo, Ready, ToPlayState

H6 = Card(Suit.HEARTS, Rank.SIX)
H7 = Card(Suit.HEARTS, Rank.SEVEN)
S6 = Card(Suit.SPADES, Rank.SIX)
DA = Card(Suit.DIAMONDS, Rank.ACE)
C6 = Card(Suit.CLUBS, Rank.SIX)

PLAYERS = (PlayerInfo(1, 6), PlayerInfo(2, 6))


def view(hand, attack=(), defense=(), to_play=0):
    return ToPlayState(
        trump=Suit.CLUBS,
        attack_cards=attack,
        defense_cards=defense,
        hand=hand,
        player_info=PLAYERS,
        defender=1,
        to_play=to_play,
    )


@pytest.mark.asyncio
async def test_attacks_with_first_valid_card():
    player = DummyPlayer()
    assert await player.attack(view([DA, S6], attack=[H6], defense=[H7])) == Action.play(S6)
    assert await player.attack(view([DA, S6])) == Action.play(DA)


@pytest.mark.asyncio
async def test_passes_without_valid_attack():
    player = DummyPlayer()
    assert await player.attack(view([DA], attack=[H6], defense=[H7])) == Action.pass_turn()


@pytest.mark.asyncio
async def test_defends_with_first_valid_card():
    player = DummyPlayer()
    state = view([DA, H7, C6], attack=[H6], to_play=1)
    assert await player.defend(state) == Action.play(H7)


@pytest.mark.asyncio
async def test_gives_up_without_valid_defense():
    player = DummyPlayer()
    state = view([DA, S6], attack=[H7], to_play=1)
    assert await player.defend(state) == Action.pass_turn()


@pytest.mark.asyncio
async def test_never_piles_on():
    player = DummyPlayer()
    assert await player.pile_on(view([S6], attack=[H6])) == []


@pytest.mark.asyncio
async def test_scripted_actions_come_first():
    player = DummyPlayer(
        auto_actions={"attack": [Action.pass_turn()], "pile_on": [[S6]]},
        strategy_function=lambda turn, state: Action.play(state.hand[-1]),
    )
    state = view([DA, S6])
    assert await player.attack(state) == Action.pass_turn()
    assert await player.attack(state) == Action.play(S6)
    assert await player.pile_on(view([S6], attack=[H6])) == [S6]


@pytest.mark.asyncio
async def test_get_id_skips_taken_ids():
    player = DummyPlayer()
    assert await player.get_id([]) == 1

    player = DummyPlayer()
    assert await player.get_id([PlayerInfo(1, 0), PlayerInfo(2, 0)]) == 3

    player = DummyPlayer(player_id=5)
    assert await player.get_id([PlayerInfo(1, 0)]) == 5

    # Raised past the highest taken id, not into the gap at 2
    player = DummyPlayer()
    assert await player.get_id([PlayerInfo(1, 0), PlayerInfo(3, 0)]) == 4


@pytest.mark.asyncio
async def test_records_notifications():
    player = DummyPlayer(ready=Ready.NO)
    state = view([DA])
    await player.observe_move(state)
    await player.message("hello")
    assert await player.won() == Ready.NO
    assert await player.lost() == Ready.NO
    await player.error("boom")

    assert player.observed_states == [state]
    assert player.events == [
        ("message", "hello"),
        ("won", None),
        ("lost", None),
        ("error", "boom"),
    ]
