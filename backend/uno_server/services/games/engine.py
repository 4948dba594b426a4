import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from uno_server.errors import InvalidPlay, InvalidRequest, NotYourTurn, RoomUnavailable, UnoError
from uno_server.models import Card, CardKind, Color, Player, parse_color
from .deck import Deck

logger = logging.getLogger(__name__)


class GamePhase(str, Enum):
    LOBBY = 'lobby'
    IN_PROGRESS = 'in_progress'
    ENDED = 'ended'


@dataclass
class PlayResult:
    card: Card
    messages: List[str] = field(default_factory=list)
    penalty_cards: List[Card] = field(default_factory=list)
    draw_cards: int = 0
    winner_id: Optional[str] = None


@dataclass
class DrawResult:
    cards: List[Card]
    penalty: bool = False


class UnoGame:
    """Authoritative state of one room's UNO game.

    Lifecycle: lobby -> in_progress -> ended -> reset_game() -> lobby.
    Every mutating method validates first and raises an UnoError before
    touching any state, so a rejected command leaves the game unchanged.
    """

    def __init__(self, room_id: str, min_players: int = 2, max_players: int = 10,
                 hand_size: int = 7, uno_penalty: int = 2, rng=None):
        self.room_id = room_id
        self.min_players = min_players
        self.max_players = max_players
        self.hand_size = hand_size
        self.uno_penalty = uno_penalty

        self.players: List[Player] = []
        self.deck = Deck(rng)
        self.current_player_index = 0
        self.direction = 1  # 1 clockwise, -1 counter-clockwise
        self.current_color: Optional[Color] = None
        self.draw_count = 0  # pending stacked penalty
        self.skipped_player_id: Optional[str] = None
        self.host_id: Optional[str] = None
        self.game_started = False
        self.game_ended = False
        self.winner_id: Optional[str] = None
        self.play_again_votes: Set[str] = set()

    # ---- players ----

    @property
    def phase(self) -> GamePhase:
        if self.game_ended:
            return GamePhase.ENDED
        if self.game_started:
            return GamePhase.IN_PROGRESS
        return GamePhase.LOBBY

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def check_can_join(self) -> None:
        if self.game_started:
            raise RoomUnavailable('Game already started')
        if len(self.players) >= self.max_players:
            raise RoomUnavailable('Room is full')

    def add_player(self, player_id: str, name: str) -> Player:
        self.check_can_join()
        if self.get_player(player_id):
            raise InvalidRequest('You are already in this room')
        player = Player(id=player_id, name=name)
        self.players.append(player)
        # First player in an empty room becomes host
        if self.host_id is None:
            self.host_id = player_id
        return player

    def remove_player(self, player_id: str) -> Optional[Player]:
        """Remove a seat and keep the turn pointer on the right player.

        A seat removed before the pointer shifts it back by one. When the
        player to move leaves, the next player in the current direction
        takes the turn.
        """
        index = next((i for i, p in enumerate(self.players) if p.id == player_id), None)
        if index is None:
            return None
        player = self.players.pop(index)
        self.play_again_votes.discard(player_id)
        if self.skipped_player_id == player_id:
            self.skipped_player_id = None

        if not self.players:
            self.current_player_index = 0
            self.host_id = None
            return player

        if index < self.current_player_index:
            self.current_player_index -= 1
        elif index == self.current_player_index and self.direction == -1:
            self.current_player_index -= 1
        self.current_player_index %= len(self.players)

        if self.host_id == player_id:
            self.host_id = self.players[0].id
            logger.info(f"[host-reassign] room={self.room_id} host={self.players[0].name}")
        return player

    def set_player_ready(self, player_id: str, ready: bool) -> Player:
        player = self._require_player(player_id)
        if self.game_started:
            raise UnoError('Game already started')
        player.ready = bool(ready)
        return player

    # ---- starting ----

    def check_can_start(self, player_id: str) -> None:
        if self.host_id != player_id:
            raise UnoError('Only the host can start the game')
        if self.game_started:
            raise UnoError('Game already started')
        if len(self.players) < self.min_players:
            raise UnoError(f'Need at least {self.min_players} players to start')
        not_ready = [p.name for p in self.players if not p.ready]
        if not_ready:
            raise UnoError(f"Waiting for players to be ready: {', '.join(not_ready)}")

    def start_game(self, player_id: str) -> None:
        self.check_can_start(player_id)
        self.current_player_index = 0
        self.direction = 1
        self.draw_count = 0
        self.winner_id = None
        self.current_color = None
        self.skipped_player_id = None
        self.game_ended = False
        self.play_again_votes.clear()
        self.deck.reset()
        self.deal_cards()
        self.game_started = True

    def deal_cards(self) -> None:
        for player in self.players:
            player.hand = self.deck.draw(self.hand_size)
            player.uno_call = False

        # Never open on a wild; wilds found on the way go to the bottom
        first = None
        for _ in range(len(self.deck)):
            card = self.deck.draw_one()
            if not card.is_wild:
                first = card
                break
            self.deck.put_bottom(card)
        if first is None:
            raise UnoError('Not enough cards to deal')
        self.deck.discard(first)
        self.current_color = first.color

    # ---- turns ----

    def _next_index(self, steps: int = 1) -> int:
        n = len(self.players)
        return (self.current_player_index + self.direction * steps + n) % n

    def next_player(self) -> None:
        self.current_player_index = self._next_index()

    def _require_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if not player:
            raise InvalidRequest('You are not in this game')
        return player

    def _require_in_progress(self) -> None:
        if not self.game_started:
            raise UnoError('The game has not started')
        if self.game_ended:
            raise UnoError('The game is over')

    def _require_turn(self, player_id: str) -> Player:
        player = self._require_player(player_id)
        if self.current_player.id != player_id:
            raise NotYourTurn()
        return player

    def _clear_passed_skip(self) -> None:
        if self.skipped_player_id and self.current_player.id != self.skipped_player_id:
            self.skipped_player_id = None

    def is_valid_play(self, card: Card, player_id: str) -> bool:
        player = self.get_player(player_id)
        if not player or not player.has_card(card):
            return False

        if card.is_wild:
            return True

        top = self.deck.top_card
        if self.draw_count > 0:
            if card.kind == CardKind.DRAW_TWO and top.kind == CardKind.DRAW_TWO:
                return True
            if card.kind == CardKind.DRAW_TWO and top.kind == CardKind.WILD_DRAW_FOUR:
                return card.color == self.current_color
            return False

        return card.color == self.current_color or card.face == top.face

    def play_card(self, card: Card, player_id: str, chosen_color=None) -> PlayResult:
        self._require_in_progress()
        player = self._require_turn(player_id)
        if self.skipped_player_id == player_id:
            raise UnoError('You were skipped! Wait for your next turn.')
        if not player.has_card(card):
            raise InvalidPlay('Card not in hand')
        if not self.is_valid_play(card, player_id):
            raise InvalidPlay()
        color = parse_color(chosen_color) if card.is_wild else card.color

        result = PlayResult(card=card)
        if len(player.hand) == 1 and not player.uno_call:
            result.penalty_cards = self.deck.draw(self.uno_penalty)
            player.hand.extend(result.penalty_cards)
            result.messages.append(
                f"{player.name} didn't call UNO! Drawing {self.uno_penalty} penalty cards."
            )
            logger.info(f"[uno-penalty] room={self.room_id} player={player.name}")

        player.remove_card(card)
        self.deck.discard(card)
        self.current_color = color
        player.uno_call = False

        turn_moved = self._apply_special(card, result)

        if not player.hand:
            self.winner_id = player_id
            self.game_ended = True
            result.winner_id = player_id
            return result

        if not turn_moved:
            self.next_player()
        self._clear_passed_skip()
        return result

    def _skip_next(self) -> Player:
        target = self.players[self._next_index()]
        self.skipped_player_id = target.id
        self.next_player()
        self.next_player()
        return target

    def _apply_special(self, card: Card, result: PlayResult) -> bool:
        """Apply a card's effect. Returns True when the turn pointer already moved."""
        if card.kind == CardKind.SKIP:
            target = self._skip_next()
            result.messages.append(f"{target.name} was skipped!")
            return True

        if card.kind == CardKind.REVERSE:
            self.direction *= -1
            if len(self.players) == 2:
                target = self._skip_next()
                result.messages.append(f"{target.name} was skipped!")
                return True
            result.messages.append('Direction reversed!')
            return False

        if card.kind in (CardKind.DRAW_TWO, CardKind.WILD_DRAW_FOUR):
            amount = 2 if card.kind == CardKind.DRAW_TWO else 4
            self.draw_count += amount
            target = self.players[self._next_index()]
            self.next_player()
            result.draw_cards = amount
            result.messages.append(f"{target.name} must draw {amount} cards!")
            return True

        return False

    # ---- drawing ----

    def draw_penalty_cards(self, player_id: str) -> List[Card]:
        player = self._require_player(player_id)
        if self.draw_count == 0:
            return []
        owed = self.draw_count
        drawn = self.deck.draw(owed)
        player.hand.extend(drawn)
        self.draw_count = 0
        if len(drawn) < owed:
            logger.warning(f"[draw-short] room={self.room_id} player={player.name} owed={owed} drawn={len(drawn)}")
        return drawn

    def draw_card(self, player_id: str) -> DrawResult:
        self._require_in_progress()
        player = self._require_turn(player_id)
        if self.draw_count > 0:
            result = DrawResult(self.draw_penalty_cards(player_id), penalty=True)
        else:
            card = self.deck.draw_one()
            result = DrawResult([card] if card else [])
            player.hand.extend(result.cards)
        if len(player.hand) > 1:
            player.uno_call = False
        self.next_player()
        self._clear_passed_skip()
        return result

    def call_uno(self, player_id: str) -> Player:
        self._require_in_progress()
        player = self._require_turn(player_id)
        if len(player.hand) != 1:
            raise UnoError('You can only call UNO when you have 1 card!')
        player.uno_call = True
        return player

    # ---- play again ----

    @property
    def all_voted(self) -> bool:
        return bool(self.players) and all(p.id in self.play_again_votes for p in self.players)

    def play_again_status(self) -> Dict[str, Any]:
        return {
            'votes': len(self.play_again_votes),
            'totalPlayers': len(self.players),
            'votedPlayers': [p.id for p in self.players if p.id in self.play_again_votes],
        }

    def vote_play_again(self, player_id: str) -> Dict[str, Any]:
        if not self.game_ended:
            raise UnoError('Game has not ended yet')
        self._require_player(player_id)
        self.play_again_votes.add(player_id)
        status = self.play_again_status()
        status['allVoted'] = self.all_voted
        return status

    def reset_game(self) -> None:
        """Return to the lobby keeping players, room code and host."""
        self.current_player_index = 0
        self.direction = 1
        self.deck.clear()
        self.game_started = False
        self.game_ended = False
        self.winner_id = None
        self.current_color = None
        self.draw_count = 0
        self.skipped_player_id = None
        self.play_again_votes.clear()
        for player in self.players:
            player.reset_round()

    # ---- views ----

    def total_cards(self) -> int:
        return len(self.deck) + len(self.deck.discard_pile) + sum(len(p.hand) for p in self.players)

    def get_player_hand(self, player_id: str) -> List[Card]:
        player = self.get_player(player_id)
        return list(player.hand) if player else []

    def get_state(self) -> Dict[str, Any]:
        top = self.deck.top_card
        return {
            'roomId': self.room_id,
            'players': [p.to_dict(self.host_id) for p in self.players],
            'currentPlayer': self.current_player_index,
            'direction': self.direction,
            'topCard': top.to_dict() if top else None,
            'currentColor': self.current_color.value if self.current_color else None,
            'gameStarted': self.game_started,
            'gameEnded': self.game_ended,
            'winner': self.winner_id,
            'deckSize': len(self.deck),
            'drawCount': self.draw_count,
            'skippedPlayer': self.skipped_player_id,
            'hostId': self.host_id,
        }
