"""Headless bot games used to smoke-test the rules engine."""

import random
from collections import Counter
from dataclasses import dataclass
from typing import List, Optional, Tuple

from uno_server.models import Card, Color, Player
from .deck import DECK_SIZE
from .engine import UnoGame


@dataclass
class SimulationResult:
    winner_id: Optional[str]
    winner_name: Optional[str]
    turns: int

    @property
    def finished(self) -> bool:
        return self.winner_id is not None


def best_color(hand: List[Card]) -> Color:
    counts = Counter(card.color for card in hand if not card.is_wild)
    if not counts:
        return Color.RED
    return counts.most_common(1)[0][0]


def choose_play(game: UnoGame, player: Player) -> Optional[Tuple[Card, Optional[Color]]]:
    """First legal card in hand, naming the color the bot holds most of for wilds."""
    for card in player.hand:
        if game.is_valid_play(card, player.id):
            return card, (best_color(player.hand) if card.is_wild else None)
    return None


def simulate_game(num_players: int = 4, seed: Optional[int] = None, max_turns: int = 5000) -> SimulationResult:
    rng = random.Random(seed)
    game = UnoGame('SIM', max_players=max(10, num_players), rng=rng)
    for i in range(num_players):
        player = game.add_player(f'bot-{i + 1}', f'Bot {i + 1}')
        player.ready = True
    game.start_game(game.host_id)

    turns = 0
    while not game.game_ended and turns < max_turns:
        player = game.current_player
        if len(player.hand) == 1 and not player.uno_call:
            game.call_uno(player.id)
        choice = choose_play(game, player)
        if choice:
            card, color = choice
            game.play_card(card, player.id, color)
        else:
            game.draw_card(player.id)
        turns += 1
        if game.total_cards() != DECK_SIZE:
            raise RuntimeError(f"card count drifted to {game.total_cards()} on turn {turns}")

    winner = game.get_player(game.winner_id) if game.winner_id else None
    return SimulationResult(game.winner_id, winner.name if winner else None, turns)
