"""
Farkle Duel - Game Rule Errors

Every error here is a rejected precondition: the match is left untouched
and the invoking player gets the message back. `code` is stable and is what
clients switch on; `message` is for display.
"""

from typing import ClassVar


class GameError(Exception):
    """Base class for rejected player intents."""

    code: ClassVar[str] = "game_error"
    message: ClassVar[str] = "Action not allowed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    def __str__(self) -> str:
        return self.args[0]


class RoomFullError(GameError):
    code = "room_full"
    message = "Room Full"


class NameInUseError(GameError):
    code = "name_in_use"
    message = "That name is already playing at this table"


class GameNotActiveError(GameError):
    code = "game_not_active"
    message = "Game not active"


class NotYourTurnError(GameError):
    code = "not_your_turn"
    message = "Not your turn"


class BustPendingError(GameError):
    code = "bust_pending"
    message = "Farkle! Turn is ending"


class MustSelectToRerollError(GameError):
    code = "must_select_to_reroll"
    message = "Must select dice to re-roll"


class InvalidSelectionError(GameError):
    code = "invalid_selection"
    message = "Invalid selection"


class CannotBankZeroError(GameError):
    code = "cannot_bank_zero"
    message = "Cannot bank 0"


class NotFinishedError(GameError):
    code = "not_finished"
    message = "Game is not finished"


class UnknownRoomError(GameError):
    code = "unknown_room"
    message = "Invalid Room"
