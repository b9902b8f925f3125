"""
Player agents for the Durak engine.

This package provides the player interface and the agents that implement it:
a bot, a console player and a WebSocket proxy for remote players.
"""

from durak.adapters.base import DurakPlayer
from durak.adapters.cli import CLIPlayer
from durak.adapters.dummy import DummyPlayer
from durak.adapters.network import DurakServer, NetworkClient, NetworkPlayer

__all__ = [
    "DurakPlayer",
    "CLIPlayer",
    "DummyPlayer",
    "DurakServer",
    "NetworkClient",
    "NetworkPlayer",
]
