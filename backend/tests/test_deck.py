import random
from collections import Counter

from uno_server.models import CardKind, Color
from uno_server.services.games import DECK_SIZE, Deck, build_standard_deck, shuffle

from helpers import cards


def test_standard_deck_composition():
    deck = build_standard_deck()
    assert len(deck) == DECK_SIZE == 108
    kinds = Counter(c.kind for c in deck)
    assert kinds[CardKind.NUMBER] == 76
    assert kinds[CardKind.SKIP] == kinds[CardKind.REVERSE] == kinds[CardKind.DRAW_TWO] == 8
    assert kinds[CardKind.WILD] == kinds[CardKind.WILD_DRAW_FOUR] == 4
    for color in (Color.RED, Color.BLUE, Color.GREEN, Color.YELLOW):
        numbers = Counter(c.value for c in deck if c.color == color and c.kind == CardKind.NUMBER)
        assert numbers[0] == 1
        assert all(numbers[v] == 2 for v in range(1, 10))


def test_standard_deck_is_deterministic():
    assert build_standard_deck() == build_standard_deck()


def test_shuffle_preserves_multiset():
    original = build_standard_deck()
    for seed in range(20):
        deck = list(original)
        shuffle(deck, random.Random(seed))
        assert Counter(deck) == Counter(original)
    shuffled = list(original)
    shuffle(shuffled, random.Random(3))
    assert shuffled != original


def test_draw_pops_from_end():
    deck = Deck(random.Random(1))
    deck.cards = cards('red 1', 'red 2', 'red 3')
    assert deck.draw(2) == cards('red 3', 'red 2')
    assert len(deck) == 1


def test_reshuffle_keeps_top_discard():
    deck = Deck(random.Random(1))
    deck.discard_pile = cards('red 1', 'blue 2', 'green 3')
    assert deck.reshuffle_from_discard() is True
    assert deck.discard_pile == cards('green 3')
    assert Counter(deck.cards) == Counter(cards('red 1', 'blue 2'))


def test_reshuffle_is_noop_with_one_discard():
    deck = Deck(random.Random(1))
    deck.discard_pile = cards('green 3')
    assert deck.reshuffle_from_discard() is False
    assert deck.discard_pile == cards('green 3')
    assert deck.cards == []


def test_draw_reshuffles_mid_draw():
    deck = Deck(random.Random(1))
    deck.cards = cards('red 1')
    deck.discard_pile = cards('blue 2', 'blue 3', 'yellow 9')
    drawn = deck.draw(3)
    assert len(drawn) == 3
    assert drawn[0] == cards('red 1')[0]
    assert deck.discard_pile == cards('yellow 9')


def test_draw_from_exhausted_piles_yields_nothing():
    deck = Deck(random.Random(1))
    deck.discard_pile = cards('yellow 9')
    assert deck.draw_one() is None
    assert deck.draw(2) == []
