"""
Turn engine for the Durak card game.

This package provides the engine that queries player agents, validates their
decisions and drives the game to its end.
"""

from durak.engine.durak import DurakEngine, DurakGameResult, PlayerResult

__all__ = ["DurakEngine", "DurakGameResult", "PlayerResult"]
