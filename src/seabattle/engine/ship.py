"""Ship domain model for the seabattle engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidLengthError, InvalidOrientationError, InvalidShipKindError


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate."""

    row: int
    col: int

    def step(self, delta_row: int, delta_col: int) -> Coordinate:
        """Return the coordinate shifted by the given deltas."""
        return Coordinate(self.row + delta_row, self.col + delta_col)


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def delta(self) -> tuple[int, int]:
        """Step between consecutive cells of a ship in this orientation."""
        return (0, 1) if self is Orientation.HORIZONTAL else (1, 0)

    @classmethod
    def parse(cls, value: Orientation | str) -> Orientation:
        if isinstance(value, Orientation):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidOrientationError(f"Unknown orientation: {value!r}") from exc


class ShipKind(Enum):
    """All ship classes of a fleet, in placement order."""

    CARRIER = "carrier"
    BATTLESHIP = "battleship"
    CRUISER = "cruiser"
    SUBMARINE = "submarine"
    DESTROYER = "destroyer"

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return _KIND_LENGTHS[self]

    @property
    def display_name(self) -> str:
        return self.value.title()

    @classmethod
    def parse(cls, value: ShipKind | str) -> ShipKind:
        """Resolve a kind from an enum member or its case-insensitive name."""
        if isinstance(value, ShipKind):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidShipKindError(f"Invalid ship kind: {value!r}")


_KIND_LENGTHS = {
    ShipKind.CARRIER: 5,
    ShipKind.BATTLESHIP: 4,
    ShipKind.CRUISER: 3,
    ShipKind.SUBMARINE: 3,
    ShipKind.DESTROYER: 2,
}


class Ship:
    """A single ship; it knows how often it was hit but not where it sits.

    Ships compare by identity so two destroyers on one board stay distinct.
    Kind and length are fixed at construction.
    """

    def __init__(self, kind: ShipKind | str | None, length: int | None = None) -> None:
        if kind is None:
            if length is None:
                raise InvalidShipKindError("A ship needs a kind or an explicit length.")
            if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
                raise InvalidLengthError(f"Invalid ship length: {length!r}")
            self._kind: ShipKind | None = None
            self._length = length
        else:
            self._kind = ShipKind.parse(kind)
            if length is not None and length != self._kind.length:
                raise InvalidLengthError(
                    f"A {self._kind.value} is {self._kind.length} cells long, not {length}."
                )
            self._length = self._kind.length
        self._hits = 0

    def __repr__(self) -> str:
        return f"Ship(kind={self._kind!r}, length={self._length}, hits={self._hits})"

    @classmethod
    def with_length(cls, length: int) -> Ship:
        """Create a kind-less ship of an arbitrary positive length."""
        return cls(None, length)

    @property
    def kind(self) -> ShipKind | None:
        return self._kind

    @property
    def length(self) -> int:
        return self._length

    @property
    def name(self) -> str:
        if self._kind is None:
            return f"Ship({self._length})"
        return self._kind.display_name

    @property
    def hits(self) -> int:
        return self._hits

    def get_hits(self) -> int:
        return self._hits

    def hit(self) -> None:
        """Record one hit; hitting a sunk ship changes nothing."""
        if self._hits < self._length:
            self._hits += 1

    def is_sunk(self) -> bool:
        return self._hits == self._length
