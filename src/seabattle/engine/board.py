"""Single-player board management for the seabattle engine."""

from __future__ import annotations

import logging
from enum import Enum

from seabattle.telemetry import get_meter, get_tracer

from .errors import DuplicateShipError, OutOfBoundsError, OverlapNotAllowedError
from .ship import Coordinate, Orientation, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.board")
meter = get_meter("seabattle.engine.board")

GRID_SIZE = 10

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

ATTACK_COUNTER = meter.create_counter(
    "seabattle_engine_attacks",
    unit="1",
    description="Attacks received by a board",
)


class AttackOutcome(Enum):
    """Result of a single attack; every member is a normal outcome."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"
    ALREADY_ATTACKED = "already attacked"

    @property
    def is_hit(self) -> bool:
        return self in (AttackOutcome.HIT, AttackOutcome.SUNK)


class CellState(Enum):
    """State of a board cell from the perspective of attacks taken."""

    UNKNOWN = "unknown"
    MISS = "miss"
    HIT = "hit"


class Board:
    """A player's square grid, the ships on it and the attacks it received."""

    def __init__(self, size: int = GRID_SIZE, owner: str = "unknown") -> None:
        self.size = size
        self.owner = owner
        self._grid: list[list[Ship | None]] = [[None] * size for _ in range(size)]
        self._attacked: set[Coordinate] = set()
        self._ships: list[Ship] = []

    @property
    def ships(self) -> tuple[Ship, ...]:
        return tuple(self._ships)

    def get_grid_size(self) -> int:
        return self.size

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate has integer components inside the board."""
        for value in (coord.row, coord.col):
            if isinstance(value, bool) or not isinstance(value, int):
                return False
        return 0 <= coord.row < self.size and 0 <= coord.col < self.size

    def get_ship_at(self, coord: Coordinate) -> Ship | None:
        if not self.is_valid_coordinate(coord):
            return None
        return self._grid[coord.row][coord.col]

    def footprint(self, ship: Ship, start: Coordinate, orientation: Orientation) -> list[Coordinate]:
        """Cells a ship would cover from ``start``; may run off the board."""
        delta_row, delta_col = orientation.delta
        return [
            start.step(delta_row * offset, delta_col * offset) for offset in range(ship.length)
        ]

    def can_place_ship(self, ship: Ship, start: Coordinate, orientation: Orientation) -> bool:
        """Bounds and overlap check only; adjacency is a placement policy concern."""
        cells = self.footprint(ship, start, orientation)
        if not all(self.is_valid_coordinate(cell) for cell in cells):
            return False
        return all(self.get_ship_at(cell) is None for cell in cells)

    def place_ship(self, ship: Ship, start: Coordinate, orientation: Orientation) -> None:
        """Write ``ship`` into every cell of its footprint.

        Raises ``OutOfBoundsError`` when the ship would leave the grid and
        ``OverlapNotAllowedError`` when a cell is taken. Placing a ship that is
        already on this board raises ``DuplicateShipError``. The board is left
        untouched on failure.
        """
        orientation = Orientation.parse(orientation)
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.name", ship.name)
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.start.row", start.row)
            span.set_attribute("ship.start.col", start.col)
            span.set_attribute("board.owner", self.owner)
            details = {
                "owner": self.owner,
                "ship": ship.name,
                "orientation": orientation.name,
                "row": start.row,
                "col": start.col,
            }
            if any(existing is ship for existing in self._ships):
                PLACEMENT_COUNTER.add(1, attributes={"result": "duplicate", "owner": self.owner})
                logger.warning("ship_placement_duplicate", extra=details)
                raise DuplicateShipError(f"This {ship.name.lower()} is already on the board.")
            cells = self.footprint(ship, start, orientation)
            if not all(self.is_valid_coordinate(cell) for cell in cells):
                PLACEMENT_COUNTER.add(1, attributes={"result": "out_of_bounds", "owner": self.owner})
                logger.warning("ship_placement_out_of_bounds", extra=details)
                raise OutOfBoundsError("Ship placement out of bounds.")
            if any(self.get_ship_at(cell) is not None for cell in cells):
                PLACEMENT_COUNTER.add(1, attributes={"result": "overlap", "owner": self.owner})
                logger.warning("ship_placement_overlap", extra=details)
                raise OverlapNotAllowedError("Ships cannot overlap.")

            for cell in cells:
                self._grid[cell.row][cell.col] = ship
            self._ships.append(ship)
            PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
            logger.info("ship_placed", extra=details)

    def receive_attack(self, coord: Coordinate) -> AttackOutcome:
        """Resolve an attack against this board and return its outcome."""
        with tracer.start_as_current_span("board.receive_attack") as span:
            span.set_attribute("attack.row", coord.row)
            span.set_attribute("attack.col", coord.col)
            span.set_attribute("board.owner", self.owner)
            if not self.is_valid_coordinate(coord):
                logger.error(
                    "attack_out_of_bounds",
                    extra={"row": coord.row, "col": coord.col, "owner": self.owner},
                )
                raise OutOfBoundsError("Attack coordinates out of bounds.")

            if coord in self._attacked:
                outcome = AttackOutcome.ALREADY_ATTACKED
            else:
                self._attacked.add(coord)
                ship = self._grid[coord.row][coord.col]
                if ship is None:
                    outcome = AttackOutcome.MISS
                else:
                    ship.hit()
                    outcome = AttackOutcome.SUNK if ship.is_sunk() else AttackOutcome.HIT

            span.set_attribute("attack.outcome", outcome.value)
            ATTACK_COUNTER.add(1, attributes={"outcome": outcome.value, "owner": self.owner})
            logger.info(
                "attack_received",
                extra={
                    "row": coord.row,
                    "col": coord.col,
                    "outcome": outcome.value,
                    "owner": self.owner,
                },
            )
            return outcome

    def is_attacked(self, coord: Coordinate) -> bool:
        return coord in self._attacked

    def get_cell_state(self, coord: Coordinate) -> CellState:
        """Return the state of a cell after attacks have been taken."""
        if coord not in self._attacked:
            return CellState.UNKNOWN
        return CellState.MISS if self.get_ship_at(coord) is None else CellState.HIT

    def all_ships_sunk(self) -> bool:
        """True once every placed ship is sunk; an empty board never is."""
        return bool(self._ships) and all(ship.is_sunk() for ship in self._ships)

    def untargeted_coordinates(self) -> list[Coordinate]:
        """Every coordinate not attacked yet, in row-major order."""
        coords: list[Coordinate] = []
        for row in range(self.size):
            for col in range(self.size):
                coord = Coordinate(row, col)
                if coord not in self._attacked:
                    coords.append(coord)
        return coords

    def occupied_coordinates(self) -> set[Coordinate]:
        return {
            Coordinate(row, col)
            for row in range(self.size)
            for col in range(self.size)
            if self._grid[row][col] is not None
        }

    def reset_board(self) -> None:
        """Return the board to its just-constructed state."""
        self._grid = [[None] * self.size for _ in range(self.size)]
        self._attacked.clear()
        self._ships.clear()
        logger.debug("board_reset", extra={"owner": self.owner})
