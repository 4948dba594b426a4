"""Inbound command handling.

Each command is a method taking the sending connection id and the raw
payload, and returning what the transport should do, in order: ``Outbound``
events addressed to a room code or a single connection, and ``Membership``
changes that put a connection in or out of a room's socket room. The
transport layer only translates socket events into ``dispatch`` calls and
these items into emits and room joins.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from uno_server.errors import InvalidRequest, UnoError
from uno_server.models import Card
from uno_server.services.games.engine import UnoGame
from uno_server.services.games.rooms import PLAY_AGAIN_RESET, RoomRegistry, clean_player_name

SINGLE_PLAYER_MESSAGE = 'All other players left. Returning to lobby...'


@dataclass(frozen=True)
class Outbound:
    event: str
    payload: Any
    to: str  # room code or connection id
    skip_sid: Optional[str] = None


@dataclass(frozen=True)
class Membership:
    sid: str
    room: str
    join: bool = True


Action = Union[Outbound, Membership]


COMMANDS = {
    'createRoom': 'create_room',
    'joinRoom': 'join_room',
    'setReady': 'set_ready',
    'startGame': 'start_game',
    'playCard': 'play_card',
    'drawCard': 'draw_card',
    'callUno': 'call_uno',
    'playAgain': 'play_again',
    'getPlayAgainStatus': 'get_play_again_status',
    'startNewGame': 'start_new_game',
    'leaveGame': 'leave_game',
    'disconnect': 'disconnect',
}


def _field(data: Any, key: str) -> Any:
    # Clients may send a bare value or an object wrapping it
    if isinstance(data, dict):
        return data.get(key)
    return data


class CommandDispatcher:
    def __init__(self, registry: RoomRegistry, logger=None):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    def dispatch(self, sid: str, command: str, data: Any = None) -> List[Action]:
        method_name = COMMANDS.get(command)
        if method_name is None:
            return [self._error(sid, f'Unknown command: {command}')]
        handler = getattr(self, method_name)
        with self.registry.lock:
            try:
                return handler(sid, data)
            except UnoError as exc:
                self.logger.info(f"[command-rejected] command={command} sid={sid} reason={exc.message}")
                return [self._error(sid, exc.message)]

    # ---- helpers ----

    @staticmethod
    def _error(sid: str, message: str) -> Outbound:
        return Outbound('error', {'message': message}, sid)

    @staticmethod
    def _broadcast(game: UnoGame, event: str, payload: Any, exclude: Optional[str] = None) -> List[Action]:
        return [Outbound(event, payload, game.room_id, skip_sid=exclude)]

    def _state(self, game: UnoGame, event: str = 'gameUpdate', exclude: Optional[str] = None) -> List[Action]:
        return self._broadcast(game, event, {'state': game.get_state()}, exclude=exclude)

    @staticmethod
    def _hand(game: UnoGame, sid: str) -> Outbound:
        hand = [card.to_dict() for card in game.get_player_hand(sid)]
        return Outbound('handUpdate', {'hand': hand}, sid)

    def _hands(self, game: UnoGame) -> List[Action]:
        return [self._hand(game, p.id) for p in game.players]

    def _require_game(self, sid: str) -> UnoGame:
        game = self.registry.game_for(sid)
        if game is None:
            raise UnoError('You are not in a room')
        return game

    def _depart(self, sid: str, explicit: bool) -> List[Action]:
        game = self.registry.game_for(sid)
        was_started = bool(game and game.game_started)
        departure = self.registry.remove_connection(sid)
        if departure is None:
            return []
        game = departure.game
        out: List[Action] = [Membership(sid, departure.room_id, join=False)]
        if not game.players:
            return out

        if explicit or was_started:
            name = departure.player.name if departure.player else 'Unknown Player'
            out += self._broadcast(game, 'playerLeft', {'playerName': name})
        if departure.returned_to_lobby:
            out += self._broadcast(game, 'gameEndedSinglePlayer', {'message': SINGLE_PLAYER_MESSAGE})
        out += self._state(game)
        if game.game_ended and game.all_voted:
            self._schedule_auto_reset(game)
        return out

    def _leave_current(self, sid: str) -> List[Action]:
        if self.registry.room_of(sid) is None:
            return []
        return self._depart(sid, explicit=True)

    def _schedule_auto_reset(self, game: UnoGame) -> None:
        if self.registry.has_pending(PLAY_AGAIN_RESET, game.room_id):
            return
        self.registry.schedule(
            PLAY_AGAIN_RESET, game.room_id, self.registry.play_again_delay,
            self._auto_reset, game.room_id,
        )

    def _auto_reset(self, room_id: str) -> List[Action]:
        game = self.registry.get_game(room_id)
        if game is None or not game.game_ended:
            return []
        game.reset_game()
        self.logger.info(f"[play-again-reset] room={room_id}")
        return self._state(game, 'gameReset')

    # ---- commands ----

    def create_room(self, sid: str, data: Any) -> List[Action]:
        name = clean_player_name(_field(data, 'playerName'))
        out = self._leave_current(sid)
        game = self.registry.create_room(sid, name)
        out.append(Membership(sid, game.room_id))
        out.append(Outbound('roomCreated', {'roomId': game.room_id, 'state': game.get_state()}, sid))
        out.append(self._hand(game, sid))
        return out

    def join_room(self, sid: str, data: Any) -> List[Action]:
        if not isinstance(data, dict) or not data.get('roomId') or not data.get('playerName'):
            raise InvalidRequest('Room ID and player name are required')
        name = clean_player_name(data.get('playerName'))
        target = self.registry.check_joinable(data.get('roomId'))
        if self.registry.room_of(sid) == target.room_id:
            raise InvalidRequest('You are already in this room')

        out = self._leave_current(sid)
        game = self.registry.join_room(sid, target.room_id, name)
        out.append(Membership(sid, game.room_id))
        out.append(Outbound('joinedRoom', {'roomId': game.room_id, 'state': game.get_state()}, sid))
        out.append(self._hand(game, sid))
        out += self._state(game, exclude=sid)
        return out

    def set_ready(self, sid: str, data: Any) -> List[Action]:
        game = self._require_game(sid)
        game.set_player_ready(sid, bool(_field(data, 'ready')))
        return self._state(game)

    def start_game(self, sid: str, data: Any = None) -> List[Action]:
        game = self._require_game(sid)
        game.start_game(sid)
        self.logger.info(f"[game-start] room={game.room_id} players={len(game.players)}")
        return self._state(game, 'gameStarted') + self._hands(game)

    def play_card(self, sid: str, data: Any) -> List[Action]:
        game = self._require_game(sid)
        if not isinstance(data, dict):
            raise InvalidRequest('Card is required')
        card = Card.from_dict(data.get('card'))
        result = game.play_card(card, sid, data.get('chosenColor'))

        out = self._state(game) + self._hands(game)
        for text in result.messages:
            out += self._broadcast(game, 'gameMessage', {'text': text})
        if result.winner_id:
            self.logger.info(f"[game-won] room={game.room_id} winner={result.winner_id}")
            out += self._broadcast(game, 'gameWon', {'winnerId': result.winner_id})
        return out

    def draw_card(self, sid: str, data: Any = None) -> List[Action]:
        game = self._require_game(sid)
        result = game.draw_card(sid)
        out = [self._hand(game, sid)]
        cards = [card.to_dict() for card in result.cards]
        if result.penalty:
            out.append(Outbound('cardsDrawn', {'cards': cards}, sid))
        elif cards:
            out.append(Outbound('cardDrawn', {'card': cards[0]}, sid))
        out += self._state(game)
        return out

    def call_uno(self, sid: str, data: Any = None) -> List[Action]:
        game = self._require_game(sid)
        player = game.call_uno(sid)
        return self._broadcast(game, 'unoCalled', {'playerId': player.id, 'playerName': player.name})

    def play_again(self, sid: str, data: Any = None) -> List[Action]:
        game = self._require_game(sid)
        status = game.vote_play_again(sid)
        out = self._broadcast(game, 'playAgainVote', status)
        if status['allVoted']:
            self._schedule_auto_reset(game)
        return out

    def get_play_again_status(self, sid: str, data: Any = None) -> List[Action]:
        game = self._require_game(sid)
        return [Outbound('playAgainStatus', game.play_again_status(), sid)]

    def start_new_game(self, sid: str, data: Any = None) -> List[Action]:
        game = self._require_game(sid)
        if not game.game_ended:
            raise UnoError('Game has not ended yet')
        if sid not in game.play_again_votes:
            raise UnoError('Vote to play again first')
        self.registry.cancel(PLAY_AGAIN_RESET, game.room_id)
        game.reset_game()
        return self._state(game, 'gameReset')

    def leave_game(self, sid: str, data: Any = None) -> List[Action]:
        return self._depart(sid, explicit=True)

    def disconnect(self, sid: str, data: Any = None) -> List[Action]:
        return self._depart(sid, explicit=False)
