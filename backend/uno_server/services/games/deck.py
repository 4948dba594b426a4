import logging
import random
from typing import List, Optional

from uno_server.models import ACTION_KINDS, PLAYABLE_COLORS, Card

logger = logging.getLogger(__name__)

DECK_SIZE = 108


def build_standard_deck() -> List[Card]:
    """Build the unshuffled 108-card UNO deck.

    Per color: one 0, two each of 1-9, two each of skip, reverse and draw2.
    Plus four wild and four wild draw four.
    """
    cards = []
    for color in PLAYABLE_COLORS:
        cards.append(Card.number(color, 0))
        for value in range(1, 10):
            cards.append(Card.number(color, value))
            cards.append(Card.number(color, value))
    for color in PLAYABLE_COLORS:
        for kind in ACTION_KINDS:
            cards.append(Card.action(color, kind))
            cards.append(Card.action(color, kind))
    for _ in range(4):
        cards.append(Card.wild())
        cards.append(Card.wild(draw_four=True))
    return cards


def shuffle(cards: List[Card], rng=None) -> None:
    """In-place Fisher-Yates shuffle, swapping from the last index down."""
    rng = rng or random
    for i in range(len(cards) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        cards[i], cards[j] = cards[j], cards[i]


class Deck:
    """Draw pile plus discard pile for one game.

    The top of the draw pile and the top of the discard pile are both the
    last element of their list.
    """

    def __init__(self, rng=None):
        self.rng = rng or random
        self.cards: List[Card] = []
        self.discard_pile: List[Card] = []

    def reset(self) -> None:
        self.cards = build_standard_deck()
        shuffle(self.cards, self.rng)
        self.discard_pile = []

    def clear(self) -> None:
        self.cards = []
        self.discard_pile = []

    def __len__(self) -> int:
        return len(self.cards)

    @property
    def top_card(self) -> Optional[Card]:
        return self.discard_pile[-1] if self.discard_pile else None

    def discard(self, card: Card) -> None:
        self.discard_pile.append(card)

    def put_bottom(self, card: Card) -> None:
        self.cards.insert(0, card)

    def reshuffle_from_discard(self) -> bool:
        """Turn all but the top discard back into a shuffled draw pile."""
        if len(self.discard_pile) <= 1:
            return False
        top = self.discard_pile.pop()
        self.cards.extend(self.discard_pile)
        self.discard_pile = [top]
        shuffle(self.cards, self.rng)
        logger.info(f"[deck-reshuffle] cards={len(self.cards)}")
        return True

    def draw_one(self) -> Optional[Card]:
        if not self.cards:
            self.reshuffle_from_discard()
        if not self.cards:
            logger.warning("[deck-empty] draw and discard piles exhausted")
            return None
        return self.cards.pop()

    def draw(self, count: int) -> List[Card]:
        drawn = []
        for _ in range(count):
            card = self.draw_one()
            if card is None:
                break
            drawn.append(card)
        return drawn
