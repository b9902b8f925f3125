"""
Durak rules engine.

The turn engine lives in `durak.engine`, player agents in `durak.adapters`
and the game state and move validation in `durak.game`.
"""

__version__ = "0.1.0"
