"""Exceptions raised by the seabattle engine.

Caller mistakes (bad input) subclass ``ValueError``; requests made at the
wrong moment of a match subclass ``RuntimeError``. Attack outcomes such as a
miss or a repeated shot are return values, never exceptions.
"""

from __future__ import annotations


class SeaBattleError(Exception):
    """Base class for every engine error."""


class InvalidShipKindError(SeaBattleError, ValueError):
    """Ship kind is not part of the fleet enumeration."""


class InvalidLengthError(SeaBattleError, ValueError):
    """Ship length is not a positive integer."""


class OutOfBoundsError(SeaBattleError, ValueError):
    """Coordinate (or part of a ship footprint) falls outside the grid."""


class OverlapNotAllowedError(SeaBattleError, ValueError):
    """Placement would cover a cell already occupied by another ship."""


class InvalidOrientationError(SeaBattleError, ValueError):
    """Orientation is neither horizontal nor vertical."""


class AdjacentShipError(SeaBattleError, ValueError):
    """Placement would touch another ship while the policy forbids it."""


class DuplicateShipError(SeaBattleError, ValueError):
    """The ship, or another of its kind, is already part of the fleet."""


class InvalidPlayerNameError(SeaBattleError, ValueError):
    """Player name is missing or blank."""


class InvalidPlayerKindError(SeaBattleError, ValueError):
    """Player kind is neither human nor computer."""


class InvalidPhaseError(SeaBattleError, RuntimeError):
    """Operation is not allowed in the current match phase."""


class NotPlayingError(InvalidPhaseError):
    """An attack was requested while no game is being played."""


class FleetIncompleteError(InvalidPhaseError):
    """A match cannot start before both fleets are fully placed."""


class NotComputerTurnError(SeaBattleError, RuntimeError):
    """Automatic attack requested while a human is to move."""


class NoTargetsRemainingError(SeaBattleError, RuntimeError):
    """Every cell of the target board has already been attacked."""


class PlacementExhaustedError(SeaBattleError, RuntimeError):
    """No legal position is left for a ship on the board."""
