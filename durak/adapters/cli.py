"""
Command-line player for the Durak engine.

This module provides a console-based player. The table, the player list and
the hand are printed before every decision; the user answers with the 1-based
position of a card in their hand, or 0 to pass (or to finish a pile-on
selection).
"""

from typing import List, Optional, Sequence
import logging

from durak.adapters.base import DurakPlayer
from durak.common.card import Card, Suit
from durak.common.io_interface import (
    AsyncIOInterfaceWrapper,
    ConsoleIOInterface,
    IOInterface,
)
from durak.errors import InvalidMoveError
from durak.game.view import Action, PlayerInfo, Ready, ToPlayState

logger = logging.getLogger("durak.adapters.cli")

RED = "\x1b[31m"
RESET = "\x1b[0m"
COLUMN = 5


class CLIPlayer(DurakPlayer):
    """
    Command-line player.

    Uses an IOInterface for all input and output, so the same player can be
    driven by a real console or by a scripted test interface.

    Console input runs on a worker thread that cannot be interrupted, so the
    engine never times out this player. When it plays through a NetworkClient
    and the server gives up on a decision, the user still answers the old
    prompt; the server discards that answer.
    """

    interactive = True

    def __init__(
        self,
        player_id: int = 0,
        io_interface: Optional[IOInterface] = None,
        color: bool = True,
    ):
        """
        Initialize the CLI player.

        Args:
            player_id: Id to propose if the user does not pick one
            io_interface: Optional IOInterface to use for I/O. If None, a console
                          IOInterface is used.
            color: Whether to highlight trump cards and the active player with ANSI colors
        """
        self.id = player_id
        self.io_interface = io_interface or ConsoleIOInterface()
        self.io = AsyncIOInterfaceWrapper(self.io_interface)
        self.color = color

    def _highlight(self, text: str, active: bool) -> str:
        if active and self.color:
            return f"{RED}{text}{RESET}"
        return text

    def format_cards(self, cards: Sequence[Card], trump: Suit) -> str:
        return "".join(
            self._highlight(f"{str(card):>{COLUMN}}", card.suit == trump)
            for card in cards
        )

    def render(self, state: ToPlayState) -> str:
        """Render the view as text."""
        lines = []
        players = []
        for index, info in enumerate(state.player_info):
            label = f"#{info.id}: {info.hand_len} cards"
            if index == state.defender:
                label += " (defending)"
            players.append(self._highlight(label, index == state.to_play))
        lines.append("Players: " + " | ".join(players))
        lines.append(f"Trump: {state.trump}")
        lines.append("")
        lines.append("A:  " + self.format_cards(state.attack_cards, state.trump))
        lines.append("D:  " + self.format_cards(state.defense_cards, state.trump))
        lines.append("")
        lines.append("    " + self.format_cards(state.hand, state.trump))
        lines.append(
            "    "
            + "".join(f"{i + 1:>{COLUMN}}" for i in range(len(state.hand)))
            + f"{0:>{COLUMN}}"
        )
        return "\n".join(lines)

    async def _show(self, header: str, state: ToPlayState) -> None:
        await self.io.output(f"Player ID: {self.id}\n{header}\n{self.render(state)}")

    async def _choose_card(self, state: ToPlayState, validator) -> Action:
        while True:
            choice = await self.io.check_numeric_response("Your move:  ")
            if choice == 0:
                return Action.pass_turn()
            if not 1 <= choice <= len(state.hand):
                await self.io.output("Input out of range")
                continue
            action = Action.play(state.hand[choice - 1])
            try:
                validator(action)
            except InvalidMoveError as e:
                await self.io.output(str(e))
                continue
            return action

    async def attack(self, state: ToPlayState) -> Action:
        await self._show("You are attacking", state)
        return await self._choose_card(state, state.validate_attack)

    async def defend(self, state: ToPlayState) -> Action:
        await self._show("You are defending", state)
        return await self._choose_card(state, state.validate_defense)

    async def pile_on(self, state: ToPlayState) -> List[Card]:
        await self._show("You are piling on (toggle cards, 0 to finish)", state)
        selected: List[int] = []
        while True:
            marks = "".join(
                f"{'^' if i + 1 in selected else '':>{COLUMN}}"
                for i in range(len(state.hand))
            )
            await self.io.output("    " + marks)
            choice = await self.io.check_numeric_response("Your move:  ")
            if choice == 0:
                cards = [state.hand[i - 1] for i in sorted(selected)]
                try:
                    state.validate_pile_on(cards)
                except InvalidMoveError as e:
                    await self.io.output(f"Validation error: {e}")
                    continue
                return cards
            if not 1 <= choice <= len(state.hand):
                continue
            if choice in selected:
                selected.remove(choice)
            else:
                selected.append(choice)

    async def observe_move(self, state: ToPlayState) -> None:
        await self._show("", state)

    async def get_id(self, player_info: Sequence[PlayerInfo]) -> int:
        taken = {info.id for info in player_info}
        await self.io.output(
            "Player List:\n" + "\n".join(f"Player {pid}" for pid in sorted(taken))
        )
        while True:
            choice = await self.io.check_numeric_response("Choose your player ID:  ")
            if choice in taken:
                await self.io.output("That ID is already taken.")
                continue
            self.id = choice
            return self.id

    async def won(self) -> Ready:
        await self.io.output(f"Congratulations, Player #{self.id}\nYOU WON!!!")
        return Ready.YES

    async def lost(self) -> Ready:
        await self.io.output(f"I'm sorry, Player #{self.id}\nYou lost.")
        return Ready.YES

    async def message(self, msg: str) -> None:
        await self.io.output(f"Message from game engine: {msg}")

    async def error(self, error: str) -> None:
        logger.error("Game aborted: %s", error)
        await self.io.output(
            f"I'm sorry, there was an error.\nError: {error}\nThe game is over now."
        )
