"""
Durak game module.

This module provides the game state, the per-turn view with its move
validators, and the state transitions of the Durak turn state machine.
"""

from durak.game.state import (
    GameState as GameState,
    Player as Player,
    TurnType as TurnType,
)
from durak.game.view import (
    Action as Action,
    ActionType as ActionType,
    PlayerInfo as PlayerInfo,
    Ready as Ready,
    ToPlayState as ToPlayState,
)
from durak.game.transitions import StateTransitionEngine as StateTransitionEngine

__all__ = [
    "GameState",
    "Player",
    "TurnType",
    "Action",
    "ActionType",
    "PlayerInfo",
    "Ready",
    "ToPlayState",
    "StateTransitionEngine",
]
