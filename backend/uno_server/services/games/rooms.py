import logging
import random
import string
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from uno_server.errors import InvalidRequest, RoomNotFound
from uno_server.models import Player
from .engine import UnoGame
from .scheduler import ScheduledTask

ROOM_DELETION = 'room-delete'
PLAY_AGAIN_RESET = 'play-again-reset'


@dataclass
class Departure:
    """What happened to a room when a connection left it."""
    room_id: str
    game: UnoGame
    player: Optional[Player]
    emptied: bool = False
    returned_to_lobby: bool = False


def normalize_room_code(code: Any) -> str:
    return str(code or '').strip().upper()


def clean_player_name(name: Any) -> str:
    name = str(name or '').strip()
    if not name:
        raise InvalidRequest('Player name is required')
    return name


class RoomRegistry:
    """Owns every live room and which connection sits in which room.

    All mutation of rooms and games happens while holding ``lock``; the
    command dispatcher takes it for each inbound command and timers take it
    when they fire, so commands are applied one at a time in arrival order.
    """

    def __init__(self, scheduler, room_code_length: int = 6, min_players: int = 2,
                 max_players: int = 10, hand_size: int = 7, uno_penalty: int = 2,
                 empty_room_grace: float = 30, play_again_delay: float = 2,
                 rng=None, logger=None):
        self.scheduler = scheduler
        self.room_code_length = room_code_length
        self.min_players = min_players
        self.max_players = max_players
        self.hand_size = hand_size
        self.uno_penalty = uno_penalty
        self.empty_room_grace = empty_room_grace
        self.play_again_delay = play_again_delay
        self.rng = rng or random
        self.logger = logger or logging.getLogger(__name__)

        self.rooms: Dict[str, UnoGame] = {}
        self.player_rooms: Dict[str, str] = {}
        self.lock = threading.RLock()
        # Called with the lock held
        self.publisher: Optional[Callable[[List[Any]], None]] = None
        self._timers: Dict[Tuple[str, str], ScheduledTask] = {}

    @classmethod
    def from_config(cls, config, scheduler, logger=None, rng=None) -> 'RoomRegistry':
        return cls(
            scheduler,
            room_code_length=int(config.get('ROOM_CODE_LENGTH', 6)),
            min_players=int(config.get('MIN_PLAYERS', 2)),
            max_players=int(config.get('MAX_PLAYERS', 10)),
            hand_size=int(config.get('HAND_SIZE', 7)),
            uno_penalty=int(config.get('UNO_PENALTY_CARDS', 2)),
            empty_room_grace=float(config.get('EMPTY_ROOM_GRACE_SEC', 30)),
            play_again_delay=float(config.get('PLAY_AGAIN_RESET_DELAY_SEC', 2)),
            rng=rng,
            logger=logger,
        )

    # ---- lookup ----

    def get_game(self, room_id: Any) -> Optional[UnoGame]:
        return self.rooms.get(normalize_room_code(room_id))

    def room_of(self, sid: str) -> Optional[str]:
        return self.player_rooms.get(sid)

    def game_for(self, sid: str) -> Optional[UnoGame]:
        room_id = self.player_rooms.get(sid)
        return self.rooms.get(room_id) if room_id else None

    def generate_room_code(self) -> str:
        alphabet = string.ascii_uppercase + string.digits
        while True:
            code = ''.join(self.rng.choices(alphabet, k=self.room_code_length))
            if code not in self.rooms:
                return code

    # ---- membership ----

    def _new_game(self, room_id: str) -> UnoGame:
        return UnoGame(
            room_id,
            min_players=self.min_players,
            max_players=self.max_players,
            hand_size=self.hand_size,
            uno_penalty=self.uno_penalty,
            rng=self.rng,
        )

    def create_room(self, sid: str, player_name: Any) -> UnoGame:
        name = clean_player_name(player_name)
        if sid in self.player_rooms:
            raise InvalidRequest('Leave your current room first')
        room_id = self.generate_room_code()
        game = self._new_game(room_id)
        game.add_player(sid, name)
        self.rooms[room_id] = game
        self.player_rooms[sid] = room_id
        self.logger.info(f"[room-create] room={room_id} player={name}")
        return game

    def check_joinable(self, room_id: Any) -> UnoGame:
        code = normalize_room_code(room_id)
        if not code:
            raise InvalidRequest('Room ID and player name are required')
        game = self.rooms.get(code)
        if game is None:
            self.logger.info(f"[room-join-miss] room={code}")
            raise RoomNotFound()
        game.check_can_join()
        return game

    def join_room(self, sid: str, room_id: Any, player_name: Any) -> UnoGame:
        name = clean_player_name(player_name)
        if sid in self.player_rooms:
            raise InvalidRequest('Leave your current room first')
        game = self.check_joinable(room_id)
        code = game.room_id
        game.add_player(sid, name)
        self.player_rooms[sid] = code
        if self.cancel(ROOM_DELETION, code):
            self.logger.info(f"[timer-cancel] {ROOM_DELETION} room={code} reason=join")
        self.logger.info(f"[room-join] room={code} player={name} players={len(game.players)}")
        return game

    def remove_connection(self, sid: str) -> Optional[Departure]:
        """Take a connection out of its room and apply the churn policy.

        Empty room: deletion is scheduled after the grace period. One player
        left in a started game: the game is reset to the lobby.
        """
        room_id = self.player_rooms.pop(sid, None)
        if room_id is None:
            return None
        game = self.rooms.get(room_id)
        if game is None:
            return None

        player = game.remove_player(sid)
        departure = Departure(room_id, game, player)
        name = player.name if player else 'Unknown Player'

        if not game.players:
            self.cancel(PLAY_AGAIN_RESET, room_id)
            if game.game_started:
                game.reset_game()
            departure.emptied = True
            self.schedule(ROOM_DELETION, room_id, self.empty_room_grace, self._delete_if_empty, room_id)
        elif len(game.players) == 1 and game.game_started:
            self.cancel(PLAY_AGAIN_RESET, room_id)
            game.reset_game()
            departure.returned_to_lobby = True
            self.logger.info(f"[room-single-player] room={room_id} returned to lobby")

        self.logger.info(f"[room-leave] room={room_id} player={name} players={len(game.players)}")
        return departure

    def _delete_if_empty(self, room_id: str) -> None:
        game = self.rooms.get(room_id)
        if game is not None and not game.players:
            del self.rooms[room_id]
            self.logger.info(f"[room-delete] room={room_id}")

    # ---- timers ----

    def schedule(self, kind: str, room_id: str, delay: float, callback: Callable, *args) -> ScheduledTask:
        """Schedule a callback that re-enters the registry lock when it fires.

        Replaces any pending timer of the same kind for the room. Whatever
        the callback returns is handed to the publisher before the lock is
        released.
        """
        key = (kind, room_id)
        self.cancel(kind, room_id)
        task_ref: List[ScheduledTask] = []

        def _fire():
            with self.lock:
                task = task_ref[0]
                if self._timers.get(key) is not task:
                    return
                del self._timers[key]
                outbound = callback(*args)
                if outbound:
                    self.publish(outbound)

        task = self.scheduler.schedule(delay, _fire, name=f"{kind} room={room_id}")
        task_ref.append(task)
        self._timers[key] = task
        return task

    def cancel(self, kind: str, room_id: str) -> bool:
        task = self._timers.pop((kind, room_id), None)
        return task.cancel() if task else False

    def has_pending(self, kind: str, room_id: str) -> bool:
        task = self._timers.get((kind, room_id))
        return bool(task and task.pending)

    def publish(self, outbound: List[Any]) -> None:
        if self.publisher is None:
            self.logger.warning(f"[publish-drop] no publisher for {len(outbound)} event(s)")
            return
        self.publisher(outbound)

    # ---- views ----

    def summary(self) -> Dict[str, Any]:
        rooms = [
            {
                'roomId': room_id,
                'playerCount': len(game.players),
                'gameStarted': game.game_started,
                'players': [{'name': p.name, 'id': p.id} for p in game.players],
            }
            for room_id, game in self.rooms.items()
        ]
        return {'rooms': rooms, 'totalRooms': len(self.rooms)}
