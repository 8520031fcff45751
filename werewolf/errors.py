"""Request-scoped game errors.

Each carries the message sent back to the originating connection; none of
them is ever broadcast to the rest of the room.
"""


class GameError(Exception):
    message = 'Request failed'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class RoomNotFound(GameError):
    message = 'Room not found'


class PlayerNotFound(GameError):
    message = 'Player not found in room'


class RoomGone(GameError):
    message = 'Room no longer exists'


class NotHost(GameError):
    message = 'Only the host can start the game'


class AlreadyStarted(GameError):
    message = 'Game is already in progress'


class RoomNotActive(GameError):
    message = 'Voting is not allowed at this time'
