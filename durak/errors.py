"""
Exception hierarchy for the Durak engine.

Initialization errors are raised before any game is played. Invalid move
errors are raised by the per-turn validators; once the engine confirms a
submitted move is illegal the whole game is aborted. Player agent errors wrap
failures raised by an agent or its transport.
"""

from typing import Optional


class DurakError(Exception):
    """Base class for all Durak engine errors."""


class GameInitializationError(DurakError):
    """The game could not be set up."""


class DuplicateIdError(GameInitializationError):
    """A player with the same id is already registered."""


class TooManyPlayersError(GameInitializationError):
    """The game already holds the maximum number of players."""


class NotEnoughPlayersError(GameInitializationError):
    """Fewer than the minimum number of players are registered."""


class NotEnoughCardsError(GameInitializationError):
    """More cards were requested from the deck than it holds."""


class InvalidMoveError(DurakError):
    """A submitted move breaks the rules."""


class WrongTurnTypeError(InvalidMoveError):
    """The move was submitted for the wrong role."""


class CardNotInHandError(InvalidMoveError):
    """The submitted card is not in the player's hand."""


class InvalidAttackError(InvalidMoveError):
    """The attack card's rank is not in play, or there is no attack to answer."""


class InvalidDefenseError(InvalidMoveError):
    """The defense card does not beat the live attack card."""


class PlayerAgentError(DurakError):
    """A player agent raised an error or its transport failed."""

    def __init__(self, message: str, player_id: Optional[int] = None):
        super().__init__(message)
        self.player_id = player_id


class DecisionTimeoutError(PlayerAgentError):
    """A player agent did not answer within the decision timeout."""
