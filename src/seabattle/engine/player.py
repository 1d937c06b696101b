"""Players: identity, score and, for the computer, a targeting strategy."""

from __future__ import annotations

import logging
import random
from enum import Enum

from seabattle.telemetry import get_tracer

from .board import AttackOutcome, Board
from .errors import InvalidPlayerKindError, InvalidPlayerNameError, NoTargetsRemainingError
from .ship import Coordinate
from .targeting import HuntTargeter, Step

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.player")


class PlayerKind(Enum):
    """Who decides where a player fires."""

    HUMAN = "human"
    COMPUTER = "computer"

    @classmethod
    def parse(cls, value: PlayerKind | str) -> PlayerKind:
        if isinstance(value, PlayerKind):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidPlayerKindError(f"Invalid player kind: {value!r}")


class Player:
    """A participant in a match.

    Score counts hits, sinking blows included. Humans choose their own
    coordinates; computers run a :class:`HuntTargeter` fed by the outcome of
    each of their attacks.
    """

    def __init__(
        self,
        name: str,
        kind: PlayerKind | str = PlayerKind.HUMAN,
        rng: random.Random | None = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidPlayerNameError("Invalid player name.")
        self._name = name
        self._kind = PlayerKind.parse(kind)
        self._score = 0
        self._rng = rng or random.Random()
        self._targeter = HuntTargeter()

    def __repr__(self) -> str:
        return f"Player(name={self._name!r}, kind={self._kind.value!r}, score={self._score})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> PlayerKind:
        return self._kind

    @property
    def is_computer(self) -> bool:
        return self._kind is PlayerKind.COMPUTER

    @property
    def score(self) -> int:
        return self._score

    @property
    def is_hunting(self) -> bool:
        return self._targeter.is_hunting

    @property
    def pending_targets(self) -> tuple[Coordinate, ...]:
        return self._targeter.pending_targets

    @property
    def hit_history(self) -> tuple[Coordinate, ...]:
        return self._targeter.hit_history

    @property
    def hunt_axis(self) -> Step | None:
        return self._targeter.hunt_axis

    def make_attack(self, coord: Coordinate, target_board: Board) -> AttackOutcome:
        """Fire at ``coord`` on ``target_board`` and return the board's verdict."""
        outcome = target_board.receive_attack(coord)
        if outcome.is_hit:
            self._score += 1
        if self.is_computer:
            self._targeter.record(coord, outcome, target_board)
        logger.debug(
            "player_attack",
            extra={
                "player": self._name,
                "row": coord.row,
                "col": coord.col,
                "outcome": outcome.value,
                "score": self._score,
            },
        )
        return outcome

    def generate_attack(self, target_board: Board) -> Coordinate:
        """Choose a coordinate on ``target_board`` that has not been attacked yet."""
        with tracer.start_as_current_span("player.generate_attack") as span:
            span.set_attribute("player.name", self._name)
            if self.is_computer:
                target = self._targeter.next_target(target_board)
                if target is not None:
                    span.set_attribute("attack.mode", "target")
                    return target
            span.set_attribute("attack.mode", "random")
            return self._random_target(target_board)

    def reset_score(self) -> None:
        """Zero the score and forget any ship being pursued."""
        self._score = 0
        self._targeter.reset()

    def _random_target(self, target_board: Board) -> Coordinate:
        candidates = target_board.untargeted_coordinates()
        if not candidates:
            raise NoTargetsRemainingError("Every cell has already been attacked.")
        return self._rng.choice(candidates)
