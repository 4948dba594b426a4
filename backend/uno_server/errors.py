"""Rule and request failures reported back to the player who caused them."""


class UnoError(Exception):
    default_message = 'Invalid action'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(UnoError):
    default_message = 'Invalid request'


class NotYourTurn(UnoError):
    default_message = "It's not your turn!"


class InvalidPlay(UnoError):
    default_message = 'Invalid play'


class RoomNotFound(UnoError):
    default_message = 'Room not found. Please check the room code.'


class RoomUnavailable(UnoError):
    default_message = 'Cannot join room (full or game started)'
