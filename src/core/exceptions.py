"""
Custom exceptions shared by all layers.

The domain layer raises them, the service layer lets them propagate, and whoever sits on top
(API router, socket handler) decides how to present them. Catch `GameError` to handle all of them at once.
"""


class GameError(Exception):
    """Base class for everything that can go wrong while playing a match."""


class GameStateError(GameError):
    """The match is not in a state that accepts this operation (wrong phase, not started, already over ...)"""


class IllegalMoveError(GameError):
    """The requested pawn cannot move with the current dice value (or the dice value itself is invalid)."""


class NotYourTurnError(GameError):
    """Someone tried to act on behalf of a seat that is not the active one."""


class TransportDesyncError(GameError):
    """A relayed event does not agree with the local state of the match. Treated as untrusted input."""


class RepositoryError(GameError):
    """Record could not be found / stored."""


class InvalidRequestError(GameError):
    """Request data failed validation before it reached the service."""
