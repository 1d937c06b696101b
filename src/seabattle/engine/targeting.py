"""Hunt-and-target search used by computer players."""

from __future__ import annotations

import logging

from .board import AttackOutcome, Board
from .ship import Coordinate

logger = logging.getLogger(__name__)

Step = tuple[int, int]

# Up, down, left, right.
ORTHOGONAL_STEPS: tuple[Step, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


def infer_axis(first: Coordinate, second: Coordinate) -> Step | None:
    """Unit step pointing from ``first`` toward ``second`` if they share a line."""
    if first.row == second.row and first.col != second.col:
        return (0, 1) if second.col > first.col else (0, -1)
    if first.col == second.col and first.row != second.row:
        return (1, 0) if second.row > first.row else (-1, 0)
    return None


def walk(board: Board, origin: Coordinate, step: Step) -> list[Coordinate]:
    """Cells beyond ``origin`` along ``step`` up to the edge or an attacked cell."""
    cells: list[Coordinate] = []
    current = origin.step(*step)
    while board.is_valid_coordinate(current) and not board.is_attacked(current):
        cells.append(current)
        current = current.step(*step)
    return cells


class HuntTargeter:
    """Pursues a damaged ship along the line its hits reveal.

    A first hit queues its four neighbours; a second hit on the same row or
    column fixes the axis and queues both ends of the line. A miss past one
    end of the line drops the targets queued beyond it, so the search turns
    to the other end. Sinking the ship clears everything.
    """

    def __init__(self) -> None:
        self._is_hunting = False
        self._pending: list[Coordinate] = []
        self._hit_history: list[Coordinate] = []
        self._axis: Step | None = None

    @property
    def is_hunting(self) -> bool:
        return self._is_hunting

    @property
    def pending_targets(self) -> tuple[Coordinate, ...]:
        return tuple(self._pending)

    @property
    def hit_history(self) -> tuple[Coordinate, ...]:
        return tuple(self._hit_history)

    @property
    def hunt_axis(self) -> Step | None:
        return self._axis

    def reset(self) -> None:
        self._is_hunting = False
        self._pending = []
        self._hit_history = []
        self._axis = None

    def record(self, coord: Coordinate, outcome: AttackOutcome, board: Board) -> None:
        """Update the search after an attack at ``coord`` resolved to ``outcome``."""
        self._pending = [target for target in self._pending if target != coord]
        if outcome is AttackOutcome.SUNK:
            self.reset()
        elif outcome is AttackOutcome.HIT:
            self._record_hit(coord, board)
        elif outcome is AttackOutcome.MISS and self._is_hunting:
            self._prune_after_miss(coord)

    def next_target(self, board: Board) -> Coordinate | None:
        """Dequeue the next pending target, or ``None`` to fall back to random search."""
        if not self._is_hunting:
            return None
        self._pending = [coord for coord in self._pending if not board.is_attacked(coord)]
        if self._pending:
            return self._pending.pop(0)
        logger.debug("hunt_exhausted", extra={"hits": len(self._hit_history)})
        self.reset()
        return None

    def _record_hit(self, coord: Coordinate, board: Board) -> None:
        if not self._hit_history:
            self._anchor(coord, board)
            return

        if len(self._hit_history) == 1:
            origin = self._hit_history[0]
            axis = infer_axis(origin, coord)
            if axis is None:
                self._anchor(coord, board)
                return
            self._hit_history.append(coord)
            self._axis = axis
            reverse = (-axis[0], -axis[1])
            self._pending = []
            self._enqueue(walk(board, coord, axis) + walk(board, origin, reverse), board)
            return

        self._hit_history.append(coord)
        if self._axis is not None:
            self._enqueue(walk(board, coord, self._axis), board)

    def _anchor(self, coord: Coordinate, board: Board) -> None:
        self._hit_history = [coord]
        self._axis = None
        self._is_hunting = True
        self._pending = []
        self._enqueue([coord.step(*step) for step in ORTHOGONAL_STEPS], board)

    def _enqueue(self, cells: list[Coordinate], board: Board) -> None:
        for cell in cells:
            if not board.is_valid_coordinate(cell) or board.is_attacked(cell):
                continue
            if cell not in self._pending:
                self._pending.append(cell)

    def _prune_after_miss(self, miss: Coordinate) -> None:
        if self._axis is None:
            return
        anchor = self._hit_history[0]
        delta_row, delta_col = self._axis

        def on_line(coord: Coordinate) -> bool:
            return coord.row == anchor.row if delta_row == 0 else coord.col == anchor.col

        def position(coord: Coordinate) -> int:
            return coord.row * delta_row + coord.col * delta_col

        if not on_line(miss):
            return
        hit_positions = [position(hit) for hit in self._hit_history]
        missed_at = position(miss)
        if missed_at > max(hit_positions):
            side = 1
        elif missed_at < min(hit_positions):
            side = -1
        else:
            return
        self._pending = [
            coord
            for coord in self._pending
            if not (on_line(coord) and (position(coord) - missed_at) * side > 0)
        ]
