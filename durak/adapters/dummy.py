"""
Dummy player for the Durak engine, used for testing and simulation.

This module provides a non-interactive player that always makes the first
legal move it finds. It can also be scripted with fixed decisions, which makes
it the workhorse of the engine tests.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import asyncio

from durak.adapters.base import DurakPlayer
from durak.common.card import Card
from durak.game.view import Action, PlayerInfo, Ready, ToPlayState


class DummyPlayer(DurakPlayer):
    """
    Dummy player for testing and simulation.

    Without configuration it attacks and defends with the first valid card in
    its (trump-last sorted) hand and never piles on. Scripted decisions in
    `auto_actions` are used first, then `strategy_function`, then the default.
    """

    def __init__(
        self,
        player_id: int = 1,
        auto_actions: Optional[Dict[str, List[Any]]] = None,
        strategy_function: Optional[Callable[[str, ToPlayState], Any]] = None,
        wait_ms: int = 0,
        ready: Ready = Ready.YES,
    ):
        """
        Initialize the dummy player.

        Args:
            player_id: Preferred id; raised past any id already taken in get_id
            auto_actions: Optional mapping of "attack", "defend" or "pile_on" to
                          decisions to return in sequence
            strategy_function: Optional function taking (turn, state) and returning
                               a decision for that turn
            wait_ms: Artificial delay before each decision, in milliseconds
            ready: Answer given to won() and lost()
        """
        self.id = player_id
        self.auto_actions = {k: list(v) for k, v in (auto_actions or {}).items()}
        self.strategy_function = strategy_function
        self.wait_ms = wait_ms
        self.ready = ready

        # Track notifications for later inspection
        self.events: List[Tuple[str, Any]] = []
        self.observed_states: List[ToPlayState] = []

    async def _wait(self) -> None:
        if self.wait_ms > 0:
            await asyncio.sleep(self.wait_ms / 1000.0)

    def _scripted(self, turn: str, state: ToPlayState) -> Any:
        queue = self.auto_actions.get(turn)
        if queue:
            return queue.pop(0)
        if self.strategy_function is not None:
            return self.strategy_function(turn, state)
        return None

    async def attack(self, state: ToPlayState) -> Action:
        await self._wait()
        decision = self._scripted("attack", state)
        if decision is not None:
            return decision
        valid = state.valid_attack_cards()
        return Action.play(valid[0]) if valid else Action.pass_turn()

    async def defend(self, state: ToPlayState) -> Action:
        await self._wait()
        decision = self._scripted("defend", state)
        if decision is not None:
            return decision
        valid = state.valid_defense_cards()
        return Action.play(valid[0]) if valid else Action.pass_turn()

    async def pile_on(self, state: ToPlayState) -> List[Card]:
        await self._wait()
        decision = self._scripted("pile_on", state)
        if decision is not None:
            return decision
        return []

    async def get_id(self, player_info: Sequence[PlayerInfo]) -> int:
        for info in player_info:
            if self.id <= info.id:
                self.id = info.id + 1
        return self.id

    async def observe_move(self, state: ToPlayState) -> None:
        self.observed_states.append(state)

    async def won(self) -> Ready:
        self.events.append(("won", None))
        return self.ready

    async def lost(self) -> Ready:
        self.events.append(("lost", None))
        return self.ready

    async def message(self, msg: str) -> None:
        self.events.append(("message", msg))

    async def error(self, error: str) -> None:
        self.events.append(("error", error))
