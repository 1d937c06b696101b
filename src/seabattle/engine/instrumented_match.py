"""Match subclass that reports game-level telemetry."""

from __future__ import annotations

import time

from seabattle.telemetry import get_logger, get_tracer, record_game_histogram, record_game_metric

from .board import AttackOutcome
from .errors import SeaBattleError
from .match import Match
from .ship import Coordinate


class InstrumentedMatch(Match):
    """Wraps Match with a span per game plus attack and outcome counters."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("seabattle.engine")
        self._tracer = get_tracer("seabattle.engine")
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0

    def start_game(self) -> None:
        with self._tracer.start_as_current_span("seabattle.engine.start_game") as span:
            super().start_game()
            self._start_game_span()
            span.set_attribute("game.id", self._game_id_counter)
            record_game_metric(
                "seabattle_game_started_total",
                1,
                {"player1": self.player1.kind.value, "player2": self.player2.kind.value},
            )
            self._logger.info("Game %d started", self._game_id_counter)

    def make_attack(self, coord: Coordinate) -> AttackOutcome:
        attacker = self.current_player
        with self._tracer.start_as_current_span("seabattle.engine.make_attack") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("player", attacker.name)
            span.set_attribute("coord.row", coord.row)
            span.set_attribute("coord.col", coord.col)

            try:
                outcome = super().make_attack(coord)
            except SeaBattleError as exc:
                record_game_metric(
                    "seabattle_game_invalid_attacks_total",
                    1,
                    {"player": attacker.name, "reason": type(exc).__name__},
                )
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.error(
                    "Invalid attack from %s at (%d,%d): %s", attacker.name, coord.row, coord.col, exc
                )
                raise

            span.set_attribute("attack_outcome", outcome.value)
            record_game_metric("seabattle_attacks_total", 1, {"player": attacker.name})
            record_game_metric(
                "seabattle_attacks_by_outcome_total",
                1,
                {"player": attacker.name, "outcome": outcome.value},
            )
            self._logger.info(
                "make_attack player=%s coord=(%d,%d) outcome=%s",
                attacker.name,
                coord.row,
                coord.col,
                outcome.value,
            )

            if self.winner is not None:
                span.set_attribute("winner", self.winner.name)
                self._finish_game()

            return outcome

    def reset_game(self) -> None:
        self.abandon_game()
        super().reset_game()

    def abandon_game(self) -> None:
        """End the game span of a match that stops before anyone has won."""
        if self._game_span is None:
            return
        self._game_span.set_attribute("abandoned", True)
        self._game_span.set_attribute("turns", self.turn_count)
        record_game_metric("seabattle_game_abandoned_total", 1, {"phase": self.phase.value})
        self._logger.info("Game %d abandoned after %d turns", self._game_id_counter, self.turn_count)
        self._close_game_span()

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span = self._tracer.start_span("seabattle.engine.game")
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        winner = self.winner.name if self.winner else "unknown"
        state = self.get_game_state()

        record_game_metric("seabattle_game_completed_total", 1, {"winner": winner})
        record_game_histogram(
            "seabattle_game_duration_seconds", duration, {"winner": winner}, unit="s"
        )
        record_game_histogram("seabattle_game_turns", state.turn_count, {"winner": winner})

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("turns", state.turn_count)
            self._game_span.set_attribute("player1_score", state.player1_score)
            self._game_span.set_attribute("player2_score", state.player2_score)
            self._game_span.set_attribute("duration_ms", duration * 1000)

        self._logger.info(
            "Game finished. Winner=%s turns=%d duration_s=%.3f", winner, state.turn_count, duration
        )
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span is not None:
            self._game_span.end()
            self._game_span = None
