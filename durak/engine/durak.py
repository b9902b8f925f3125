"""
Durak card game engine implementation.

This module provides the DurakEngine class, which drives the Durak turn state
machine. It asks the active player agent for a decision, validates it
independently, applies it through the state transitions and notifies every
agent of the result. Notifications are broadcast concurrently; decisions are
strictly sequential.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional
import asyncio
import logging
import random

from durak.adapters.base import DurakPlayer
from durak.common.card import hand_fmt
from durak.errors import (
    DecisionTimeoutError,
    DurakError,
    PlayerAgentError,
)
from durak.events import EventBus, EventEmitter, EngineEventType
from durak.game.state import GameState, TurnType
from durak.game.transitions import StateTransitionEngine
from durak.game.view import Action, Ready, ToPlayState

logger = logging.getLogger("durak.engine")

TIMEOUT_POLICIES = ("pass", "error")


@dataclass
class PlayerResult:
    """
    Outcome of a game for one player.

    Attributes:
        player_id: The player's id
        player: The agent that played
        ready: The agent's answer to the won/lost notification
    """

    player_id: int
    player: DurakPlayer
    ready: Ready


@dataclass
class DurakGameResult:
    """
    The results of a game of Durak. Players whose won/lost notification failed
    are left out.

    Attributes:
        winners: Players who emptied their hands
        losers: The player left holding cards, if any
    """

    winners: List[PlayerResult] = field(default_factory=list)
    losers: List[PlayerResult] = field(default_factory=list)

    @property
    def loser_id(self) -> Optional[int]:
        return self.losers[0].player_id if self.losers else None

    @property
    def winner_ids(self) -> List[int]:
        return [result.player_id for result in self.winners]


async def broadcast(calls: List[Awaitable[Any]]) -> List[Any]:
    """
    Run notification calls concurrently and wait for all of them. A failure in
    one call is returned in its slot instead of cancelling the others.
    """
    return await asyncio.gather(*calls, return_exceptions=True)


class DurakEngine:
    """
    Engine implementation for the Durak card game.

    Usage::

        engine = DurakEngine(config={"decision_timeout": 30})
        for player in players:
            await engine.add_player(player)
        engine.init(random.Random(seed))
        result = await engine.run_game()
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        event_bus: Optional[EventEmitter] = None,
    ):
        """
        Initialize the Durak engine.

        Args:
            config: Configuration options for the game
            event_bus: Event emitter to report to; defaults to the global EventBus
        """
        # Apply default configuration
        default_config = {
            "decision_timeout": None,  # Seconds; None waits forever
            "timeout_policy": "pass",  # "pass" or "error"
            "announce_trump": True,
        }

        # Merge with provided config
        if config:
            default_config.update(config)

        self.config = default_config

        timeout = self.config["decision_timeout"]
        if timeout is not None and timeout <= 0:
            raise ValueError("decision_timeout must be positive or None")
        if self.config["timeout_policy"] not in TIMEOUT_POLICIES:
            raise ValueError(
                f"timeout_policy must be one of {TIMEOUT_POLICIES}, "
                f"got {self.config['timeout_policy']!r}"
            )

        self.event_bus = event_bus if event_bus is not None else EventBus.get_instance()
        self.state = GameState()
        self.players: List[DurakPlayer] = []

    async def add_player(self, player: DurakPlayer) -> int:
        """
        Register a player agent. The agent is asked for its id first.

        Returns:
            The id the player registered with

        Raises:
            DuplicateIdError: The agent chose an id already taken
            TooManyPlayersError: Six players are already registered
        """
        player_id = await player.get_id(self.state.player_info())
        self.state.add_player(player_id)
        self.players.append(player)
        logger.debug("Added player # %s", player_id)

        self.event_bus.emit(
            EngineEventType.PLAYER_JOINED,
            {
                "game_id": self.state.id,
                "player_id": player_id,
                "player_count": len(self.players),
            },
        )
        return player_id

    def init(self, rng: Optional[random.Random] = None) -> None:
        """
        Deal the cards and choose the trump suit.

        Raises:
            NotEnoughPlayersError: Fewer than two players are registered
            TooManyPlayersError: More than six players are registered
        """
        self.state.init(rng)
        self.event_bus.emit(
            EngineEventType.GAME_STARTED,
            {
                "game_id": self.state.id,
                "trump": str(self.state.trump),
                "player_ids": [p.id for p in self.state.players],
                "draw_pile_size": len(self.state.draw_pile),
            },
        )

    async def run_game(self) -> DurakGameResult:
        """
        Play the game to the end and notify every player of the outcome.

        If a move is invalid or an agent fails, every player is sent an error
        notification and the exception is re-raised.
        """
        if not self.state.initialized:
            raise DurakError("Game has not been initialized")

        try:
            if self.config["announce_trump"]:
                await self._broadcast_message(
                    f"Game starting. Trump suit is {self.state.trump}"
                )
            await self.game_loop()
        except DurakError as e:
            logger.error("Game error: %s", e)
            self.event_bus.emit(
                EngineEventType.ERROR,
                {
                    "game_id": self.state.id,
                    "error_type": type(e).__name__,
                    "message": str(e),
                    "player_id": getattr(e, "player_id", None),
                },
            )
            self.event_bus.emit(
                EngineEventType.GAME_ABORTED,
                {"game_id": self.state.id, "error": str(e), "error_type": type(e).__name__},
            )
            await self._broadcast_error(str(e))
            raise

        return await self._notify_results()

    async def game_loop(self) -> None:
        """Play turns until the game ends, notifying every player after each one."""
        while self.state.turn_type != TurnType.GAME_END:
            await self.play_turn()
            await self._broadcast_observe()

    async def play_turn(self) -> None:
        """Play a single turn of the state machine."""
        state = self.state
        logger.debug("Taking turn: %s", state.turn_type.name)
        for player in state.players:
            logger.debug("Player # %s has cards: %s", player.id, hand_fmt(player.hand))

        if state.turn_type == TurnType.ATTACK:
            await self._attack_turn()
        elif state.turn_type == TurnType.DEFENSE:
            await self._defense_turn()
        elif state.turn_type == TurnType.PILE_ON:
            await self._pile_on_turn()
        elif state.turn_type == TurnType.END_ROUND:
            StateTransitionEngine.end_round(state, self.event_bus)

    async def _attack_turn(self) -> None:
        state = self.state
        attacker = state.players[state.to_play]
        if not attacker.has_cards:
            logger.debug("Skipping turn because player has no cards left")
            action = Action.pass_turn()
        elif not state.players[state.defender].has_cards:
            logger.debug("Skipping turn because defender has no cards left")
            action = Action.pass_turn()
        else:
            view = state.view()
            action = await self._decide(
                state.to_play, "attack", view, Action.pass_turn()
            )
            self._check_action(action, attacker.id)
            view.validate_attack(action)

        if action.is_pass:
            logger.debug("Player # %s has selected to pass", attacker.id)
            StateTransitionEngine.pass_attack(state, self.event_bus)
        else:
            logger.debug("Player # %s has selected %s", attacker.id, action.card)
            StateTransitionEngine.play_attack(state, action.card, self.event_bus)

    async def _defense_turn(self) -> None:
        state = self.state
        defender = state.players[state.to_play]
        view = state.view()
        action = await self._decide(state.to_play, "defend", view, Action.pass_turn())
        self._check_action(action, defender.id)
        view.validate_defense(action)

        if action.is_pass:
            logger.debug("Player # %s has given up the defense", defender.id)
            StateTransitionEngine.abandon_defense(state, self.event_bus)
        else:
            logger.debug("Player # %s has selected %s", defender.id, action.card)
            StateTransitionEngine.play_defense(state, action.card, self.event_bus)

    async def _pile_on_turn(self) -> None:
        state = self.state
        for index in range(len(state.players)):
            if index == state.defender:
                continue
            state.to_play = index
            view = state.view()
            cards = await self._decide(index, "pile_on", view, [])
            if not isinstance(cards, (list, tuple)):
                raise PlayerAgentError(
                    f"Player {state.players[index].id} returned {cards!r} for a pile on",
                    state.players[index].id,
                )
            cards = list(cards)
            view.validate_pile_on(cards)
            StateTransitionEngine.pile_on(state, index, cards, self.event_bus)
        StateTransitionEngine.finish_pile_on(state)

    @staticmethod
    def _check_action(action: Any, player_id: int) -> None:
        if not isinstance(action, Action):
            raise PlayerAgentError(
                f"Player {player_id} returned {action!r} instead of an Action", player_id
            )

    async def _call(
        self, index: int, method: Callable[..., Awaitable[Any]], *args: Any
    ) -> Any:
        """
        Call a player agent method under the decision timeout. Any failure of
        the agent is raised as PlayerAgentError. Interactive agents are
        waited for without a timeout.
        """
        player_id = self.state.players[index].id
        timeout = self.config["decision_timeout"]
        try:
            if timeout is None or self.players[index].interactive:
                return await method(*args)
            return await asyncio.wait_for(method(*args), timeout)
        except asyncio.TimeoutError as e:
            raise DecisionTimeoutError(
                f"Player {player_id} did not respond to {method.__name__} "
                f"within {timeout} seconds",
                player_id,
            ) from e
        except DurakError:
            raise
        except Exception as e:
            raise PlayerAgentError(
                f"Player {player_id} failed in {method.__name__}: {e}", player_id
            ) from e

    async def _decide(
        self, index: int, turn: str, view: ToPlayState, default: Any
    ) -> Any:
        """
        Ask a player for a decision. A timeout yields `default` under the
        "pass" policy and is fatal under the "error" policy.
        """
        player_id = self.state.players[index].id
        self.event_bus.emit(
            EngineEventType.PLAYER_DECISION_NEEDED,
            {"game_id": self.state.id, "player_id": player_id, "turn": turn},
        )
        method = getattr(self.players[index], turn)
        try:
            return await self._call(index, method, view)
        except DecisionTimeoutError as e:
            if self.config["timeout_policy"] == "error":
                raise
            logger.warning("%s; using the default decision", e)
            self.event_bus.emit(
                EngineEventType.PLAYER_TIMEOUT,
                {"game_id": self.state.id, "player_id": player_id, "turn": turn},
            )
            return default

    async def _broadcast_observe(self) -> None:
        """
        Send every player their own view of the new state. Every player is
        notified even if some fail; the first failure is then raised.
        """
        results = await broadcast(
            [
                self._call(index, player.observe_move, self.state.view(index))
                for index, player in enumerate(self.players)
            ]
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _broadcast_message(self, text: str) -> None:
        results = await broadcast(
            [
                self._call(index, player.message, text)
                for index, player in enumerate(self.players)
            ]
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _broadcast_error(self, text: str) -> None:
        results = await broadcast(
            [
                self._call(index, player.error, text)
                for index, player in enumerate(self.players)
            ]
        )
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Error notification failed: %s", result)

    async def _notify_results(self) -> DurakGameResult:
        """Tell every player whether they won or lost, all at once."""
        result = DurakGameResult()
        calls = []
        for index, (player, agent) in enumerate(zip(self.state.players, self.players)):
            if player.has_cards:
                logger.debug("Player %s lost", player.id)
                calls.append(self._call(index, agent.lost))
            else:
                logger.debug("Player %s won", player.id)
                calls.append(self._call(index, agent.won))

        outcomes = await broadcast(calls)
        for player, agent, outcome in zip(self.state.players, self.players, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Error: %s", outcome)
                continue
            entry = PlayerResult(player_id=player.id, player=agent, ready=outcome)
            if player.has_cards:
                result.losers.append(entry)
            else:
                result.winners.append(entry)
            self.event_bus.emit(
                EngineEventType.PLAYER_RESULT,
                {
                    "game_id": self.state.id,
                    "player_id": player.id,
                    "won": not player.has_cards,
                    "ready": getattr(outcome, "value", outcome),
                },
            )
        return result
