"""Tests for Ship domain logic."""

import pytest

from seabattle.engine.errors import (
    InvalidLengthError,
    InvalidOrientationError,
    InvalidShipKindError,
    SeaBattleError,
)
from seabattle.engine.ship import Coordinate, Orientation, Ship, ShipKind


def test_fleet_lengths() -> None:
    assert [kind.length for kind in ShipKind] == [5, 4, 3, 3, 2]


@pytest.mark.parametrize("kind", list(ShipKind))
def test_hits_are_capped_at_length(kind: ShipKind) -> None:
    ship = Ship(kind)
    for count in range(1, kind.length + 3):
        ship.hit()
        expected = min(count, kind.length)
        assert ship.get_hits() == expected
        assert ship.is_sunk() is (expected == kind.length)


def test_new_ship_is_untouched() -> None:
    ship = Ship(ShipKind.CRUISER)
    assert ship.hits == 0
    assert ship.length == 3
    assert not ship.is_sunk()


def test_kind_accepts_case_insensitive_name() -> None:
    ship = Ship("Submarine")
    assert ship.kind is ShipKind.SUBMARINE
    assert ship.name == "Submarine"


@pytest.mark.parametrize("kind", ["frigate", "", 3, None])
def test_unknown_kind_is_rejected(kind: object) -> None:
    with pytest.raises(InvalidShipKindError):
        ShipKind.parse(kind)  # type: ignore[arg-type]


def test_numeric_length_variant() -> None:
    ship = Ship.with_length(2)
    assert ship.kind is None
    ship.hit()
    ship.hit()
    assert ship.is_sunk()


@pytest.mark.parametrize("length", [0, -1, True, 2.5])
def test_numeric_length_must_be_positive_int(length: object) -> None:
    with pytest.raises(InvalidLengthError):
        Ship.with_length(length)  # type: ignore[arg-type]


def test_ships_compare_by_identity() -> None:
    assert Ship(ShipKind.DESTROYER) != Ship(ShipKind.DESTROYER)


def test_coordinate_step_and_orientation_delta() -> None:
    assert Coordinate(2, 3).step(1, -1) == Coordinate(3, 2)
    assert Orientation.HORIZONTAL.delta == (0, 1)
    assert Orientation.parse("Vertical") is Orientation.VERTICAL
    with pytest.raises(InvalidOrientationError):
        Orientation.parse("diagonal")


def test_orientation_error_belongs_to_engine_errors() -> None:
    with pytest.raises(SeaBattleError):
        Orientation.parse("sideways")


def test_ship_without_kind_or_length_is_rejected() -> None:
    with pytest.raises(InvalidShipKindError):
        Ship(None)


def test_kind_and_length_are_read_only() -> None:
    ship = Ship(ShipKind.DESTROYER)
    with pytest.raises(AttributeError):
        ship.length = 5  # type: ignore[misc]
    with pytest.raises(AttributeError):
        ship.kind = ShipKind.CARRIER  # type: ignore[misc]
    assert ship.length == 2
    assert ship.kind is ShipKind.DESTROYER
