import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list, or '*' for any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    if CORS_ORIGINS != '*':
        CORS_ORIGINS = [o.strip() for o in CORS_ORIGINS.split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    # Seats per room
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '10'))
    HAND_SIZE = int(os.environ.get('HAND_SIZE', '7'))
    # Cards drawn for reaching one card without calling UNO
    UNO_PENALTY_CARDS = int(os.environ.get('UNO_PENALTY_CARDS', '2'))
    # Timers (seconds)
    EMPTY_ROOM_GRACE_SEC = int(os.environ.get('EMPTY_ROOM_GRACE_SEC', '30'))
    PLAY_AGAIN_RESET_DELAY_SEC = int(os.environ.get('PLAY_AGAIN_RESET_DELAY_SEC', '2'))
