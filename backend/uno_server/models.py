from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from uno_server.errors import InvalidRequest


class Color(str, Enum):
    RED = 'red'
    BLUE = 'blue'
    GREEN = 'green'
    YELLOW = 'yellow'
    WILD = 'wild'


# Colors a player may name when playing a wild card
PLAYABLE_COLORS = (Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW)


class CardKind(str, Enum):
    NUMBER = 'number'
    SKIP = 'skip'
    REVERSE = 'reverse'
    DRAW_TWO = 'draw2'
    WILD = 'wild'
    WILD_DRAW_FOUR = 'draw4'


ACTION_KINDS = (CardKind.SKIP, CardKind.REVERSE, CardKind.DRAW_TWO)
WILD_KINDS = (CardKind.WILD, CardKind.WILD_DRAW_FOUR)


@dataclass(frozen=True)
class Card:
    """A single UNO card.

    Cards compare by (color, kind, value). A full deck holds several equal
    cards, so hand membership is always checked by equality.
    """
    color: Color
    kind: CardKind
    value: Optional[int] = None

    @classmethod
    def number(cls, color: Color, value: int) -> 'Card':
        return cls(color, CardKind.NUMBER, value)

    @classmethod
    def action(cls, color: Color, kind: CardKind) -> 'Card':
        return cls(color, kind)

    @classmethod
    def wild(cls, draw_four: bool = False) -> 'Card':
        return cls(Color.WILD, CardKind.WILD_DRAW_FOUR if draw_four else CardKind.WILD)

    @property
    def is_wild(self) -> bool:
        return self.color == Color.WILD

    @property
    def is_draw(self) -> bool:
        return self.kind in (CardKind.DRAW_TWO, CardKind.WILD_DRAW_FOUR)

    @property
    def face(self):
        """Number for number cards, kind otherwise. Used for value matching."""
        if self.kind == CardKind.NUMBER:
            return self.value
        return self.kind

    def to_dict(self) -> Dict[str, Any]:
        if self.kind == CardKind.NUMBER:
            card_type, value = 'number', self.value
        elif self.kind in WILD_KINDS:
            card_type, value = 'wild', self.kind.value
        else:
            card_type, value = 'action', self.kind.value
        return {'color': self.color.value, 'type': card_type, 'value': value}

    @classmethod
    def from_dict(cls, data: Any) -> 'Card':
        """Parse a card sent by a client; raise InvalidRequest when malformed."""
        if not isinstance(data, dict):
            raise InvalidRequest('Card is required')
        try:
            color = Color(str(data.get('color', '')).lower())
        except ValueError:
            raise InvalidRequest('Unknown card color')
        raw = data.get('value')

        if color == Color.WILD:
            if raw not in (CardKind.WILD.value, CardKind.WILD_DRAW_FOUR.value):
                raise InvalidRequest('Unknown wild card')
            return cls(color, CardKind(raw))

        if isinstance(raw, str) and raw.isdigit():
            raw = int(raw)
        if isinstance(raw, int) and not isinstance(raw, bool):
            if not 0 <= raw <= 9:
                raise InvalidRequest('Card number must be between 0 and 9')
            return cls.number(color, raw)
        try:
            kind = CardKind(raw)
        except ValueError:
            raise InvalidRequest('Unknown card value')
        if kind not in ACTION_KINDS:
            raise InvalidRequest('Only wild cards may be wild')
        return cls.action(color, kind)

    def __str__(self) -> str:
        if self.is_wild:
            return 'Wild Draw Four' if self.kind == CardKind.WILD_DRAW_FOUR else 'Wild'
        label = str(self.value) if self.kind == CardKind.NUMBER else self.kind.value
        return f"{self.color.value} {label}"


def parse_color(value: Any) -> Color:
    """Parse a color a player chose for a wild card."""
    try:
        color = value if isinstance(value, Color) else Color(str(value).lower())
    except ValueError:
        raise InvalidRequest('Choose red, blue, green or yellow for the wild card')
    if color not in PLAYABLE_COLORS:
        raise InvalidRequest('Choose red, blue, green or yellow for the wild card')
    return color


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    ready: bool = False
    uno_call: bool = False

    def has_card(self, card: Card) -> bool:
        return card in self.hand

    def remove_card(self, card: Card) -> None:
        # list.remove drops the first equal card
        self.hand.remove(card)

    def reset_round(self) -> None:
        self.hand = []
        self.ready = False
        self.uno_call = False

    def to_dict(self, host_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'handSize': len(self.hand),
            'unoCall': self.uno_call,
            'ready': self.ready,
            'isHost': self.id == host_id,
        }

    def hand_to_dict(self) -> List[Dict[str, Any]]:
        return [card.to_dict() for card in self.hand]
