"""Game domain services: deck, rules engine, rooms and timers.

Nothing in here knows about sockets. The command dispatcher and the HTTP
routes call into these modules and turn the results into events.
"""

from .deck import DECK_SIZE, Deck, build_standard_deck, shuffle
from .engine import DrawResult, GamePhase, PlayResult, UnoGame
from .rooms import Departure, RoomRegistry
from .scheduler import BackgroundScheduler, ScheduledTask

__all__ = [
    'DECK_SIZE', 'Deck', 'build_standard_deck', 'shuffle',
    'DrawResult', 'GamePhase', 'PlayResult', 'UnoGame',
    'Departure', 'RoomRegistry',
    'BackgroundScheduler', 'ScheduledTask',
]
