"""
Authoritative state for a game of Durak.

`GameState` is the single mutable record of a game: the players and their
hands, the piles, the turn indices and the current turn type. It is only ever
mutated by the turn engine, between agent queries, after a move has been
validated. This module also implements the setup and bookkeeping steps that
do not depend on a decision: registration, dealing, refilling hands and
producing per-player views.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import random
import uuid

from durak.common.card import Card, Suit, hand_fmt, sort_cards
from durak.common.deck import Deck
from durak.errors import (
    DuplicateIdError,
    NotEnoughPlayersError,
    TooManyPlayersError,
)
from durak.game.constants import HAND_SIZE, MAX_PLAYERS, MIN_PLAYERS
from durak.game.view import PlayerInfo, ToPlayState

logger = logging.getLogger("durak.game.state")


class TurnType(Enum):
    """Turn types of the Durak state machine. GAME_END is terminal."""

    ATTACK = auto()
    DEFENSE = auto()
    PILE_ON = auto()
    END_ROUND = auto()
    GAME_END = auto()


@dataclass
class Player:
    """
    A registered player.

    Attributes:
        id: Externally supplied id, unique within the game
        hand: Cards in the player's hand, sorted trump-last
    """

    id: int
    hand: List[Card] = field(default_factory=list)

    @property
    def card_count(self) -> int:
        return len(self.hand)

    @property
    def has_cards(self) -> bool:
        return len(self.hand) > 0


@dataclass
class GameState:
    """
    Mutable record of a Durak game.

    Attributes:
        id: Unique identifier for this game
        trump: The trump suit, chosen at initialization
        players: Registered players; list positions are the player indices
        attackers: Indices of players allowed to attack this round, in priority order
        attackers_passed: Attackers that passed since the last attack card
        draw_pile: The talon; cards are drawn from the end
        attack_cards: Attack cards on the table this round
        defense_cards: Defense cards on the table; defense_cards[i] answers attack_cards[i]
        discarded_cards: Cards removed from play
        defender: Index of the defender
        last_attacker: Index of the attacker who played the live attack card
        to_play: Index of the player whose decision is awaited
        turn_type: Current state machine discriminant
        current_round: Number of completed rounds
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    trump: Optional[Suit] = None
    players: List[Player] = field(default_factory=list)
    attackers: List[int] = field(default_factory=list)
    attackers_passed: List[int] = field(default_factory=list)
    draw_pile: List[Card] = field(default_factory=list)
    attack_cards: List[Card] = field(default_factory=list)
    defense_cards: List[Card] = field(default_factory=list)
    discarded_cards: List[Card] = field(default_factory=list)
    defender: int = 0
    last_attacker: int = 0
    to_play: int = 0
    turn_type: TurnType = TurnType.ATTACK
    current_round: int = 0
    initialized: bool = False

    def add_player(self, player_id: int) -> Player:
        """
        Register a player.

        Raises:
            DuplicateIdError: The id is already registered
            TooManyPlayersError: Six players are already registered
        """
        if any(player.id == player_id for player in self.players):
            raise DuplicateIdError(f"Duplicate player id: {player_id}")
        if len(self.players) >= MAX_PLAYERS:
            raise TooManyPlayersError(f"Cannot add more than {MAX_PLAYERS} players")
        player = Player(id=player_id)
        self.players.append(player)
        return player

    def init(self, rng: Optional[random.Random] = None) -> None:
        """
        Deal the cards and set up the first round.

        The trump suit is drawn first so each dealt hand can be sorted
        trump-last. Player 0 attacks first and player 1 defends.

        Raises:
            NotEnoughPlayersError: Fewer than two players are registered
            TooManyPlayersError: More than six players are registered
        """
        logger.debug("Initializing game %s", self.id)
        if len(self.players) < MIN_PLAYERS:
            raise NotEnoughPlayersError(
                f"Need at least {MIN_PLAYERS} players to initialize game, "
                f"only have ({len(self.players)})"
            )
        if len(self.players) > MAX_PLAYERS:
            raise TooManyPlayersError(f"Can't have more than {MAX_PLAYERS} players")

        deck = Deck(rng)
        self.trump = deck.choose_trump()
        logger.debug("Trump suit is %s", self.trump)
        for player in self.players:
            player.hand = []
            deck.deal(HAND_SIZE, player.hand, self.trump)
            logger.debug("Player # %s has cards: %s", player.id, hand_fmt(player.hand))
        self.draw_pile = deck.remaining()

        self.attack_cards = []
        self.defense_cards = []
        self.discarded_cards = []
        self.to_play = 0
        self.last_attacker = 0
        self.defender = 1
        self.turn_type = TurnType.ATTACK
        self.current_round = 0
        self.attackers_passed = []
        self.attackers = [i for i in range(len(self.players)) if i != self.defender]
        self.initialized = True

    def refill_from_talon(self, player_index: int) -> int:
        """
        Draw from the end of the draw pile until the hand holds six cards or
        the pile is empty, then re-sort the hand.

        Returns:
            Number of cards drawn
        """
        hand = self.players[player_index].hand
        drawn = 0
        while len(hand) < HAND_SIZE and self.draw_pile:
            hand.append(self.draw_pile.pop())
            drawn += 1
        sort_cards(hand, self.trump)
        return drawn

    def refill_players_hands(self) -> Dict[int, int]:
        """
        Refill every attacker in attacker order, then the defender.

        Returns:
            Mapping of player id to number of cards drawn
        """
        logger.debug("Refilling player's hands")
        drawn = {}
        for index in list(self.attackers) + [self.defender]:
            drawn[self.players[index].id] = self.refill_from_talon(index)
        return drawn

    def player_info(self) -> List[PlayerInfo]:
        """Id and hand size of every player, in registration order."""
        return [PlayerInfo(id=p.id, hand_len=len(p.hand)) for p in self.players]

    def view(self, hand_index: Optional[int] = None) -> ToPlayState:
        """
        Build the per-turn view for one player.

        Args:
            hand_index: Whose hand to include; defaults to the player to play
        """
        if hand_index is None:
            hand_index = self.to_play
        return ToPlayState(
            trump=self.trump,
            attack_cards=self.attack_cards,
            defense_cards=self.defense_cards,
            hand=self.players[hand_index].hand,
            player_info=self.player_info(),
            last_attacker=self.last_attacker,
            defender=self.defender,
            to_play=self.to_play,
        )

    @property
    def players_with_cards(self) -> List[int]:
        """Indices of players still holding cards."""
        return [i for i, player in enumerate(self.players) if player.has_cards]

    @property
    def game_ended(self) -> bool:
        return self.turn_type == TurnType.GAME_END

    @property
    def loser(self) -> Optional[Player]:
        """The durak: the only player left holding cards once the game is over."""
        if not self.game_ended:
            return None
        holding = self.players_with_cards
        return self.players[holding[0]] if len(holding) == 1 else None

    @property
    def winners(self) -> List[Player]:
        """Players with empty hands once the game is over."""
        if not self.game_ended:
            return []
        return [player for player in self.players if not player.has_cards]

    def all_cards(self) -> List[Card]:
        """Every card in the game, wherever it currently is."""
        cards = []
        for player in self.players:
            cards.extend(player.hand)
        cards.extend(self.draw_pile)
        cards.extend(self.attack_cards)
        cards.extend(self.defense_cards)
        cards.extend(self.discarded_cards)
        return cards

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the game state to a dictionary suitable for logging or display.

        Returns:
            Dictionary representation of the game state
        """
        return {
            "id": self.id,
            "turn_type": self.turn_type.name,
            "trump": str(self.trump) if self.trump else None,
            "attackers": list(self.attackers),
            "attackers_passed": list(self.attackers_passed),
            "defender": self.defender,
            "last_attacker": self.last_attacker,
            "to_play": self.to_play,
            "draw_pile_size": len(self.draw_pile),
            "discarded_size": len(self.discarded_cards),
            "current_round": self.current_round,
            "table": {
                "attack_cards": [str(card) for card in self.attack_cards],
                "defense_cards": [str(card) for card in self.defense_cards],
            },
            "players": [
                {"id": player.id, "hand_size": len(player.hand)}
                for player in self.players
            ],
        }
