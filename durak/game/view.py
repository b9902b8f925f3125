"""
Limited game state made available to player agents on their turn.

A `ToPlayState` is an immutable snapshot of what a single player may see: the
trump suit, the cards on the table, their own hand and the hand sizes of every
player. It also carries the move validators. Agents can call them to pre-check
a candidate move, and the engine calls them again on every submitted move.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from durak.common.card import Card, Rank, Suit, beats_card
from durak.errors import (
    CardNotInHandError,
    InvalidAttackError,
    InvalidDefenseError,
    InvalidMoveError,
    WrongTurnTypeError,
)
from durak.game.constants import MAX_ATTACK_CARDS


class ActionType(Enum):
    """Kinds of decision on attack and defense turns."""

    PLAY = auto()
    PASS = auto()


@dataclass(frozen=True)
class Action:
    """
    A decision on an attack or defense turn: play a card, or pass.

    Attributes:
        type: Whether the player plays a card or passes
        card: The card played, None when passing
    """

    type: ActionType
    card: Optional[Card] = None

    def __post_init__(self):
        if self.type == ActionType.PLAY and not isinstance(self.card, Card):
            raise ValueError("A play action needs a card")
        if self.type == ActionType.PASS and self.card is not None:
            raise ValueError("A pass action cannot carry a card")

    @classmethod
    def play(cls, card: Card) -> "Action":
        return cls(ActionType.PLAY, card)

    @classmethod
    def pass_turn(cls) -> "Action":
        return cls(ActionType.PASS)

    @property
    def is_pass(self) -> bool:
        return self.type == ActionType.PASS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.name,
            "card": self.card.index if self.card is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        action_type = ActionType[data["type"]]
        card = data.get("card")
        return cls(action_type, Card.from_index(card) if card is not None else None)

    def __str__(self) -> str:
        return "Pass" if self.is_pass else f"Play {self.card}"


class Ready(Enum):
    """Whether a player is ready for another game."""

    YES = "yes"
    NO = "no"


@dataclass(frozen=True)
class PlayerInfo:
    """
    Public information about a player.

    Attributes:
        id: The player's unique id
        hand_len: Number of cards in the player's hand
    """

    id: int
    hand_len: int

    def to_dict(self) -> Dict[str, int]:
        return {"id": self.id, "hand_len": self.hand_len}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerInfo":
        return cls(id=int(data["id"]), hand_len=int(data["hand_len"]))


@dataclass(frozen=True)
class ToPlayState:
    """
    Immutable per-turn view of the game for one player.

    Attributes:
        trump: The trump suit
        attack_cards: Attack cards on the table, oldest first
        defense_cards: Defense cards on the table; defense_cards[i] answers attack_cards[i]
        hand: The viewing player's hand
        player_info: Id and hand size of every player, in registration order
        last_attacker: Index into player_info of whoever attacked last
        defender: Index into player_info of the defender this round
        to_play: Index into player_info of the player whose decision is awaited
    """

    trump: Suit
    attack_cards: Tuple[Card, ...] = ()
    defense_cards: Tuple[Card, ...] = ()
    hand: Tuple[Card, ...] = ()
    player_info: Tuple[PlayerInfo, ...] = ()
    last_attacker: int = 0
    defender: int = 1
    to_play: int = 0

    def __post_init__(self):
        # Accept any sequence but store tuples so the view stays immutable
        for name in ("attack_cards", "defense_cards", "hand", "player_info"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def ranks_in_play(self) -> Set[Rank]:
        """Ranks of every card currently on the table."""
        return {card.rank for card in self.attack_cards + self.defense_cards}

    @property
    def undefended_card(self) -> Optional[Card]:
        """The live attack card awaiting an answer, if any."""
        if len(self.attack_cards) > len(self.defense_cards):
            return self.attack_cards[-1]
        return None

    @property
    def attack_defense_pairs(self) -> List[Tuple[Card, Optional[Card]]]:
        """Return a list of attack and defense card pairs."""
        return [
            (attack, self.defense_cards[i] if i < len(self.defense_cards) else None)
            for i, attack in enumerate(self.attack_cards)
        ]

    @property
    def is_defending(self) -> bool:
        return self.to_play == self.defender

    def validate_attack(self, action: Action) -> None:
        """
        Validate an attack decision.

        Raises:
            WrongTurnTypeError: It is the defender's turn
            CardNotInHandError: The card is not in the hand
            InvalidAttackError: The table is full or the card's rank is not in play
        """
        if self.to_play == self.defender:
            raise WrongTurnTypeError("Attack Invalid: Defender's turn")
        if action.is_pass:
            return
        attack_card = action.card
        if attack_card not in self.hand:
            raise CardNotInHandError("Attack Invalid: Card not in player's hand")
        if not self.attack_cards:
            return
        if len(self.attack_cards) >= MAX_ATTACK_CARDS:
            raise InvalidAttackError("Attack Invalid: Table already holds six attack cards")
        if attack_card.rank not in self.ranks_in_play:
            raise InvalidAttackError("Attack Invalid: Card rank not in play")

    def validate_defense(self, action: Action) -> None:
        """
        Validate a defense decision against the most recent attack card.

        Raises:
            WrongTurnTypeError: It is not the defender's turn
            CardNotInHandError: The card is not in the hand
            InvalidAttackError: There is no undefended attack card
            InvalidDefenseError: The card does not beat the attack card
        """
        if self.to_play != self.defender:
            raise WrongTurnTypeError("Defense Invalid: Not defender's turn")
        if action.is_pass:
            return
        defense_card = action.card
        if defense_card not in self.hand:
            raise CardNotInHandError("Defense Invalid: Card not in player's hand")
        attack_card = self.undefended_card
        if attack_card is None:
            raise InvalidAttackError("Defense Invalid: No corresponding attack card")
        if not beats_card(defense_card, attack_card, self.trump):
            raise InvalidDefenseError(
                f"Defense Invalid: {defense_card} does not beat {attack_card}"
            )

    def validate_pile_on(self, cards: Sequence[Card]) -> None:
        """
        Validate a batch of cards added to an abandoned defense.

        Raises:
            WrongTurnTypeError: The defender cannot pile on
            CardNotInHandError: A card is not in the hand, or is submitted twice
            InvalidAttackError: A card's rank is not in play, or the batch overfills the table
        """
        if self.to_play == self.defender:
            raise WrongTurnTypeError("Pile On Invalid: Not attackers' turn")
        remaining = list(self.hand)
        ranks = self.ranks_in_play
        for card in cards:
            if card not in remaining:
                raise CardNotInHandError("Pile On Invalid: Card not in player's hand")
            remaining.remove(card)
            if card.rank not in ranks:
                raise InvalidAttackError("Pile On Invalid: Card rank not in play")
        if len(self.attack_cards) + len(cards) > MAX_ATTACK_CARDS:
            raise InvalidAttackError(
                "Pile On Invalid: Table cannot hold more than six attack cards"
            )

    def valid_attack_cards(self) -> List[Card]:
        """Hand cards that would pass `validate_attack`."""
        return [card for card in self.hand if self._is_valid(self.validate_attack, card)]

    def valid_defense_cards(self) -> List[Card]:
        """Hand cards that would pass `validate_defense`."""
        return [card for card in self.hand if self._is_valid(self.validate_defense, card)]

    def valid_pile_on_cards(self) -> List[Card]:
        """Hand cards whose rank is on the table, capped by the space left on it."""
        if self.to_play == self.defender:
            return []
        ranks = self.ranks_in_play
        space = max(MAX_ATTACK_CARDS - len(self.attack_cards), 0)
        return [card for card in self.hand if card.rank in ranks][:space]

    @staticmethod
    def _is_valid(validator, card: Card) -> bool:
        try:
            validator(Action.play(card))
        except InvalidMoveError:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the view to a JSON-friendly dictionary. Cards are encoded as
        their canonical index.
        """
        return {
            "trump": self.trump.value,
            "attack_cards": [card.index for card in self.attack_cards],
            "defense_cards": [card.index for card in self.defense_cards],
            "hand": [card.index for card in self.hand],
            "player_info": [info.to_dict() for info in self.player_info],
            "last_attacker": self.last_attacker,
            "defender": self.defender,
            "to_play": self.to_play,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToPlayState":
        """Rebuild a view produced by `to_dict`."""
        return cls(
            trump=Suit(data["trump"]),
            attack_cards=[Card.from_index(i) for i in data["attack_cards"]],
            defense_cards=[Card.from_index(i) for i in data["defense_cards"]],
            hand=[Card.from_index(i) for i in data["hand"]],
            player_info=[PlayerInfo.from_dict(info) for info in data["player_info"]],
            last_attacker=data["last_attacker"],
            defender=data["defender"],
            to_play=data["to_play"],
        )
