from flask import Blueprint, jsonify
from uno_server import get_registry

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
def list_rooms():
    """Lists live rooms with their seated players."""
    registry = get_registry()
    with registry.lock:
        return jsonify(registry.summary())


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    registry = get_registry()
    with registry.lock:
        game = registry.get_game(room_id)
        if game is None:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify({
            'roomId': game.room_id,
            'playerCount': len(game.players),
            'maxPlayers': game.max_players,
            'gameStarted': game.game_started,
            'joinable': not game.game_started and len(game.players) < game.max_players,
        })
