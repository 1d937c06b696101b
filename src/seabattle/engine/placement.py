"""Fleet placement rules layered on top of :class:`Board`.

The board itself only refuses placements that leave the grid or overlap.
Whether ships may touch each other is a policy decided here, and the same
policy drives both manual placement through the match and random fleets.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass

from seabattle.telemetry import get_tracer

from .board import Board
from .errors import AdjacentShipError, PlacementExhaustedError
from .ship import Coordinate, Orientation, Ship, ShipKind

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.placement")

FLEET: tuple[ShipKind, ...] = tuple(ShipKind)


@dataclass(frozen=True)
class PlacementPolicy:
    """Rules applied on top of the board's bounds and overlap checks."""

    allow_adjacent: bool = False
    max_random_attempts: int = 1000


DEFAULT_POLICY = PlacementPolicy()


def touches_existing_ship(
    board: Board, ship: Ship, start: Coordinate, orientation: Orientation
) -> bool:
    """Scan the one-cell margin (diagonals included) around the footprint."""
    cells = board.footprint(ship, start, orientation)
    footprint = set(cells)
    for cell in cells:
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                neighbour = cell.step(delta_row, delta_col)
                if neighbour in footprint:
                    continue
                if board.get_ship_at(neighbour) is not None:
                    return True
    return False


def is_valid_placement(
    board: Board,
    ship: Ship,
    start: Coordinate,
    orientation: Orientation,
    policy: PlacementPolicy = DEFAULT_POLICY,
) -> bool:
    if not board.can_place_ship(ship, start, orientation):
        return False
    if policy.allow_adjacent:
        return True
    return not touches_existing_ship(board, ship, start, orientation)


def place_with_policy(
    board: Board,
    ship: Ship,
    start: Coordinate,
    orientation: Orientation,
    policy: PlacementPolicy = DEFAULT_POLICY,
) -> None:
    """Place ``ship`` on ``board``, enforcing adjacency when the policy asks for it."""
    orientation = Orientation.parse(orientation)
    if (
        not policy.allow_adjacent
        and board.can_place_ship(ship, start, orientation)
        and touches_existing_ship(board, ship, start, orientation)
    ):
        logger.warning(
            "ship_placement_adjacent",
            extra={"owner": board.owner, "ship": ship.name, "row": start.row, "col": start.col},
        )
        raise AdjacentShipError("Ships cannot touch each other.")
    board.place_ship(ship, start, orientation)


@dataclass(frozen=True)
class Placement:
    """Where a ship ended up."""

    ship: Ship
    start: Coordinate
    orientation: Orientation


def placed_kinds(board: Board) -> Counter[ShipKind]:
    return Counter(ship.kind for ship in board.ships if ship.kind is not None)


def missing_kinds(board: Board, fleet: tuple[ShipKind, ...] = FLEET) -> list[ShipKind]:
    """Fleet kinds not yet on the board, in fleet order."""
    counts = placed_kinds(board)
    return [kind for kind in fleet if counts[kind] == 0]


def is_fleet_complete(board: Board, fleet: tuple[ShipKind, ...] = FLEET) -> bool:
    """True when the board holds exactly one ship of every fleet kind and nothing else."""
    counts = placed_kinds(board)
    return len(board.ships) == len(fleet) and all(counts[kind] == 1 for kind in fleet)


def _candidates(board: Board) -> list[tuple[Coordinate, Orientation]]:
    return [
        (Coordinate(row, col), orientation)
        for orientation in Orientation
        for row in range(board.size)
        for col in range(board.size)
    ]


def place_ship_randomly(
    board: Board,
    ship: Ship,
    rng: random.Random,
    policy: PlacementPolicy = DEFAULT_POLICY,
) -> tuple[Coordinate, Orientation]:
    """Place one ship at a random legal spot and return where it went.

    Random draws are bounded by ``policy.max_random_attempts``; after that
    every start/orientation is scanned in order, first honouring the policy
    and then, as a last resort, ignoring adjacency.
    """
    for attempt in range(1, policy.max_random_attempts + 1):
        orientation = rng.choice(list(Orientation))
        start = Coordinate(rng.randrange(board.size), rng.randrange(board.size))
        if is_valid_placement(board, ship, start, orientation, policy):
            board.place_ship(ship, start, orientation)
            logger.debug(
                "random_ship_placed",
                extra={"ship": ship.name, "attempts": attempt, "owner": board.owner},
            )
            return start, orientation

    logger.warning(
        "random_placement_fallback_scan",
        extra={"ship": ship.name, "attempts": policy.max_random_attempts, "owner": board.owner},
    )
    fallbacks = [policy]
    if not policy.allow_adjacent:
        fallbacks.append(PlacementPolicy(allow_adjacent=True, max_random_attempts=0))
    for fallback in fallbacks:
        for start, orientation in _candidates(board):
            if is_valid_placement(board, ship, start, orientation, fallback):
                board.place_ship(ship, start, orientation)
                return start, orientation
    raise PlacementExhaustedError(f"No room left for {ship.name} on board {board.owner}.")


def place_fleet_randomly(
    board: Board,
    rng: random.Random,
    policy: PlacementPolicy = DEFAULT_POLICY,
    fleet: tuple[ShipKind, ...] = FLEET,
) -> list[Placement]:
    """Place one ship of every kind in ``fleet`` at random legal positions."""
    with tracer.start_as_current_span("placement.place_fleet_randomly") as span:
        span.set_attribute("board.owner", board.owner)
        span.set_attribute("policy.allow_adjacent", policy.allow_adjacent)
        placements: list[Placement] = []
        for kind in fleet:
            ship = Ship(kind)
            start, orientation = place_ship_randomly(board, ship, rng, policy)
            placements.append(Placement(ship, start, orientation))
        logger.info(
            "fleet_placed_randomly", extra={"owner": board.owner, "ships": len(placements)}
        )
        return placements
