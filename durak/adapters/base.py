"""
Base player interface for the Durak engine.

This module defines the interface that every player agent must implement to
take part in a game. The engine never decides a move itself: it asks the agent
whose turn it is, validates the answer, and applies it.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from durak.common.card import Card
from durak.game.view import Action, PlayerInfo, Ready, ToPlayState


class DurakPlayer(ABC):
    """
    Base interface for Durak player agents.

    Implementations bridge the engine and a decision source: a console user,
    a bot, or a remote client over the network. Decision methods are required;
    notification methods have no-op defaults.

    Agents that block on a human at this process's console set `interactive`;
    the engine does not apply its decision timeout to them, since an abandoned
    prompt would keep reading the console.
    """

    interactive: bool = False

    @abstractmethod
    async def attack(self, state: ToPlayState) -> Action:
        """
        Play an attack turn.

        Args:
            state: The view of the game for this player

        Returns:
            Action.play(card) to attack with a card, or Action.pass_turn()
        """
        pass

    @abstractmethod
    async def defend(self, state: ToPlayState) -> Action:
        """
        Play a defense turn against the most recent attack card.

        Args:
            state: The view of the game for this player

        Returns:
            Action.play(card) to beat the attack card, or Action.pass_turn() to give up
        """
        pass

    @abstractmethod
    async def pile_on(self, state: ToPlayState) -> List[Card]:
        """
        Add cards to an attack the defender has given up on.

        Args:
            state: The view of the game for this player

        Returns:
            Cards to add, possibly none
        """
        pass

    @abstractmethod
    async def get_id(self, player_info: Sequence[PlayerInfo]) -> int:
        """
        Choose a unique id for this player.

        Args:
            player_info: The players already registered; their ids are taken

        Returns:
            An id not used by any registered player
        """
        pass

    # The following methods have default implementations but can be overridden

    async def observe_move(self, state: ToPlayState) -> None:
        """
        Sent to every player after each turn so clients can update their display.
        """
        pass

    async def won(self) -> Ready:
        """Notification that the player did not lose the game."""
        return Ready.YES

    async def lost(self) -> Ready:
        """Notification that the player lost the game."""
        return Ready.YES

    async def message(self, msg: str) -> None:
        """Any non-error notification from the game engine."""
        pass

    async def error(self, error: str) -> None:
        """Notification that the game was aborted because of an error."""
        pass
