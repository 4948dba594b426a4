from flask import Blueprint, jsonify
from uno_server import get_registry

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the UNO game server!'})

@main.route('/health')
def health():
    registry = get_registry()
    with registry.lock:
        room_count = len(registry.rooms)
    return jsonify({'status': 'ok', 'rooms': room_count})
