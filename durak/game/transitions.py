"""
State transition functions for the Durak card game.

Each function applies one already-validated move (or one bookkeeping step) to a
`GameState` in place and moves the state machine to its next turn type. No
function here asks a player anything or validates a decision; that is the turn
engine's job. Every transition reports what happened to the event bus.
"""

from typing import List, Optional, Sequence
import logging

from durak.common.card import Card, hand_fmt, transfer_card
from durak.events import EventBus, EventEmitter, EngineEventType
from durak.game.constants import MAX_ATTACK_CARDS
from durak.game.state import GameState, TurnType

logger = logging.getLogger("durak.game.transitions")


def _event_bus(event_bus: Optional[EventEmitter]) -> EventEmitter:
    return event_bus if event_bus is not None else EventBus.get_instance()


class StateTransitionEngine:
    """
    Transitions of the Durak turn state machine.

    This class contains static methods that mutate a game state. The caller is
    responsible for validating moves before applying them.
    """

    @staticmethod
    def play_attack(
        state: GameState, card: Card, event_bus: Optional[EventEmitter] = None
    ) -> None:
        """
        Move an attack card from the active attacker's hand to the table and
        hand the turn to the defender.
        """
        attacker_index = state.to_play
        attacker = state.players[attacker_index]
        transfer_card(attacker.hand, state.attack_cards, card)
        state.attackers_passed.clear()
        state.last_attacker = attacker_index
        state.to_play = state.defender
        state.turn_type = TurnType.DEFENSE

        _event_bus(event_bus).emit(
            EngineEventType.ATTACK_PLAYED,
            {
                "game_id": state.id,
                "player_id": attacker.id,
                "card": str(card),
                "attack_count": len(state.attack_cards),
                "remaining_hand_size": len(attacker.hand),
            },
        )

    @staticmethod
    def pass_attack(state: GameState, event_bus: Optional[EventEmitter] = None) -> None:
        """
        Record a pass by the active attacker and move on to the next attacker
        that has not passed and still holds cards. When none is left the round
        ends with the defender to play, which marks the defense as successful.
        """
        passer = state.players[state.to_play]
        state.attackers_passed.append(state.to_play)

        next_attacker = next(
            (
                index
                for index in state.attackers
                if index not in state.attackers_passed
                and state.players[index].has_cards
            ),
            None,
        )
        if next_attacker is None:
            logger.debug("Ending round because all attackers passed")
            state.to_play = state.defender
            state.turn_type = TurnType.END_ROUND
        else:
            state.to_play = next_attacker

        _event_bus(event_bus).emit(
            EngineEventType.ATTACK_PASSED,
            {
                "game_id": state.id,
                "player_id": passer.id,
                "next_player_id": state.players[state.to_play].id,
                "round_over": next_attacker is None,
            },
        )

    @staticmethod
    def play_defense(
        state: GameState, card: Card, event_bus: Optional[EventEmitter] = None
    ) -> None:
        """
        Move a defense card to the table. The round ends in a successful defense
        once six attack cards are answered or the defender runs out of cards;
        otherwise the last attacker may add another card.
        """
        defender = state.players[state.defender]
        against = state.attack_cards[len(state.defense_cards)]
        transfer_card(defender.hand, state.defense_cards, card)

        if len(state.attack_cards) >= MAX_ATTACK_CARDS or not defender.has_cards:
            logger.debug("Ending round because attack has been successfully defended")
            state.to_play = state.defender
            state.turn_type = TurnType.END_ROUND
        else:
            state.to_play = state.last_attacker
            state.turn_type = TurnType.ATTACK

        _event_bus(event_bus).emit(
            EngineEventType.DEFENSE_PLAYED,
            {
                "game_id": state.id,
                "player_id": defender.id,
                "card": str(card),
                "against_card": str(against),
                "remaining_hand_size": len(defender.hand),
            },
        )

    @staticmethod
    def abandon_defense(
        state: GameState, event_bus: Optional[EventEmitter] = None
    ) -> None:
        """The defender gives up; the other players may pile on."""
        state.turn_type = TurnType.PILE_ON

        _event_bus(event_bus).emit(
            EngineEventType.DEFENSE_ABANDONED,
            {
                "game_id": state.id,
                "player_id": state.players[state.defender].id,
                "table_size": len(state.attack_cards) + len(state.defense_cards),
            },
        )

    @staticmethod
    def pile_on(
        state: GameState,
        player_index: int,
        cards: Sequence[Card],
        event_bus: Optional[EventEmitter] = None,
    ) -> None:
        """Move a validated batch of pile-on cards from a hand to the attack cards."""
        player = state.players[player_index]
        for card in cards:
            transfer_card(player.hand, state.attack_cards, card)
        logger.debug("Player %s has piled on %s", player.id, hand_fmt(cards))

        _event_bus(event_bus).emit(
            EngineEventType.PILE_ON,
            {
                "game_id": state.id,
                "player_id": player.id,
                "cards": [str(card) for card in cards],
                "attack_count": len(state.attack_cards),
            },
        )

    @staticmethod
    def finish_pile_on(state: GameState) -> None:
        """
        Close the pile-on phase. The player after the defender leads the next
        round, which also marks the defense as failed for settlement.
        """
        state.to_play = (state.defender + 1) % len(state.players)
        state.turn_type = TurnType.END_ROUND

    @staticmethod
    def end_round(state: GameState, event_bus: Optional[EventEmitter] = None) -> bool:
        """
        Settle the table, refill hands and either end the game or set up the
        next round.

        Returns:
            True if the defense succeeded
        """
        bus = _event_bus(event_bus)
        defender = state.players[state.defender]
        defended = state.to_play == state.defender
        table_cards: List[Card] = state.attack_cards + state.defense_cards

        if defended:
            state.discarded_cards.extend(table_cards)
        else:
            defender.hand.extend(table_cards)
        state.attack_cards = []
        state.defense_cards = []
        state.current_round += 1

        drawn = state.refill_players_hands()

        bus.emit(
            EngineEventType.ROUND_ENDED,
            {
                "game_id": state.id,
                "round_number": state.current_round,
                "defender_id": defender.id,
                "defender_won": defended,
                "card_count": len(table_cards),
            },
        )
        bus.emit(
            EngineEventType.HANDS_REFILLED,
            {
                "game_id": state.id,
                "drawn": drawn,
                "draw_pile_size": len(state.draw_pile),
            },
        )

        holding = state.players_with_cards
        if len(holding) <= 1:
            state.turn_type = TurnType.GAME_END
            state.attackers = []
            state.attackers_passed = []
            loser = state.players[holding[0]] if holding else None
            bus.emit(
                EngineEventType.GAME_ENDED,
                {
                    "game_id": state.id,
                    "loser_id": loser.id if loser else None,
                    "winner_ids": [p.id for p in state.players if not p.has_cards],
                    "round_count": state.current_round,
                },
            )
            return defended

        # The next round is led by to_play, or the first player after them still in the game
        while state.to_play not in holding:
            state.to_play = (state.to_play + 1) % len(state.players)
        offset = holding.index(state.to_play)
        rotated = holding[offset:] + holding[:offset]

        state.defender = rotated[1]
        state.attackers = [rotated[0]] + rotated[2:]
        state.attackers_passed = []
        state.turn_type = TurnType.ATTACK
        return defended
