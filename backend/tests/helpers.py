"""Shared builders for rules tests."""

import random

from uno_server.models import Card, CardKind, Color
from uno_server.services.games import UnoGame

NAMES = ['Ann', 'Ben', 'Cal', 'Dee', 'Eve']


def card(label):
    """'red 5', 'blue skip', 'green draw2', 'wild' or 'draw4'."""
    parts = label.split()
    if parts == ['wild']:
        return Card.wild()
    if parts == ['draw4']:
        return Card.wild(draw_four=True)
    color, face = Color(parts[0]), parts[1]
    if face.isdigit():
        return Card.number(color, int(face))
    return Card.action(color, CardKind(face))


def cards(*labels):
    return [card(label) for label in labels]


def lobby_game(n=2, seed=1, ready=True, **kwargs):
    game = UnoGame('TEST01', rng=random.Random(seed), **kwargs)
    for i in range(n):
        player = game.add_player(f'p{i + 1}', NAMES[i])
        player.ready = ready
    return game


def started_game(n=2, seed=1, **kwargs):
    game = lobby_game(n, seed, **kwargs)
    game.start_game('p1')
    return game


def rig(game, hands, top, color=None, draw_pile=None):
    """Replace hands and piles with a known layout."""
    for player, labels in zip(game.players, hands):
        player.hand = cards(*labels)
    game.deck.discard_pile = [card(top)]
    game.current_color = Color(color) if color else game.deck.top_card.color
    if draw_pile is not None:
        game.deck.cards = cards(*draw_pile)
    return game
