"""Two-player match controller."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from seabattle.config import GameConfig
from seabattle.telemetry import get_meter, get_tracer

from .board import AttackOutcome, Board
from .errors import (
    DuplicateShipError,
    FleetIncompleteError,
    InvalidPhaseError,
    InvalidShipKindError,
    NotComputerTurnError,
    NotPlayingError,
)
from .events import (
    AttackResolved,
    EventBus,
    GameOver,
    GameReset,
    GameStarted,
    ShipPlaced,
    Subscription,
    TEvent,
)
from .placement import is_fleet_complete, missing_kinds, place_fleet_randomly, place_with_policy
from .player import Player
from .ship import Coordinate, Orientation, Ship, ShipKind

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.match")
meter = get_meter("seabattle.engine.match")

MOVE_COUNTER = meter.create_counter(
    "seabattle_engine_moves",
    unit="1",
    description="Number of attacks made through a Match",
)


class MatchPhase(Enum):
    """Lifecycle of a match; a finished game returns to NOT_PLAYING."""

    NOT_PLAYING = "not playing"
    PLAYING = "playing"


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current match."""

    current_player: Player
    phase: MatchPhase
    winner: Player | None
    player1_score: int
    player2_score: int
    turn_count: int

    @property
    def is_game_over(self) -> bool:
        return self.winner is not None


class Match:
    """Owns both boards, enforces turn order and detects the winner.

    Player one always moves first. Players are supplied by the caller; the
    boards belong to the match and are only mutated through its methods.
    """

    def __init__(
        self,
        player1: Player,
        player2: Player,
        config: GameConfig | None = None,
        rng_seed: int | None = None,
    ) -> None:
        if player1 is None or player2 is None:
            raise ValueError("Two players are required.")
        if player1 is player2:
            raise ValueError("A match needs two distinct players.")
        self.config = config or GameConfig()
        self._policy = self.config.placement_policy()
        self._rng = random.Random(rng_seed if rng_seed is not None else self.config.rng_seed)
        self._players = (player1, player2)
        self._boards: dict[Player, Board] = {
            player1: Board(size=self.config.grid_size, owner=player1.name),
            player2: Board(size=self.config.grid_size, owner=player2.name),
        }
        self._events = EventBus()
        self._phase = MatchPhase.NOT_PLAYING
        self._current_player = player1
        self._winner: Player | None = None
        self._turn_count = 0

    @property
    def player1(self) -> Player:
        return self._players[0]

    @property
    def player2(self) -> Player:
        return self._players[1]

    @property
    def player1_board(self) -> Board:
        return self._boards[self.player1]

    @property
    def player2_board(self) -> Board:
        return self._boards[self.player2]

    @property
    def phase(self) -> MatchPhase:
        return self._phase

    @property
    def current_player(self) -> Player:
        return self._current_player

    @property
    def winner(self) -> Player | None:
        return self._winner

    @property
    def turn_count(self) -> int:
        return self._turn_count

    def board_for(self, player: Player) -> Board:
        try:
            return self._boards[player]
        except KeyError:
            raise ValueError(f"{player!r} does not take part in this match.") from None

    def opponent_of(self, player: Player) -> Player:
        if player is self.player1:
            return self.player2
        if player is self.player2:
            return self.player1
        raise ValueError(f"{player!r} does not take part in this match.")

    def subscribe(self, event_type: type[TEvent], handler: Callable[[TEvent], None]) -> Subscription:
        """Register ``handler`` for every published event of ``event_type``."""
        return self._events.subscribe(event_type, handler)

    def unsubscribe(self, subscription: Subscription) -> None:
        self._events.unsubscribe(subscription)

    def place_ship(
        self,
        player: Player,
        kind: ShipKind | str,
        start: Coordinate,
        orientation: Orientation | str,
    ) -> Ship:
        """Place one ship of ``kind`` on ``player``'s board during setup."""
        self._require_setup("place ships")
        board = self.board_for(player)
        kind = ShipKind.parse(kind)
        orientation = Orientation.parse(orientation)
        if kind not in self.config.fleet:
            raise InvalidShipKindError(f"A {kind.value} is not part of this fleet.")
        if any(ship.kind is kind for ship in board.ships):
            raise DuplicateShipError(f"{player.name} has already placed a {kind.value}.")

        ship = Ship(kind)
        place_with_policy(board, ship, start, orientation, self._policy)
        self._events.publish(ShipPlaced(player, ship, start, orientation))
        return ship

    def place_fleet_randomly(self, player: Player) -> None:
        """Clear ``player``'s board and lay out the whole fleet at random."""
        self._require_setup("shuffle ships")
        board = self.board_for(player)
        board.reset_board()
        for placement in place_fleet_randomly(board, self._rng, self._policy, self.config.fleet):
            self._events.publish(
                ShipPlaced(player, placement.ship, placement.start, placement.orientation)
            )

    def is_setup_complete(self, player: Player) -> bool:
        return is_fleet_complete(self.board_for(player), self.config.fleet)

    def start_game(self) -> None:
        """Begin play once both fleets are complete.

        Fleets are checked first; only then does a computer player with an
        empty board get a random fleet. Raises ``FleetIncompleteError`` and
        leaves both boards untouched otherwise.
        """
        with tracer.start_as_current_span("match.start_game") as span:
            self._require_setup("start a game")
            auto_placed = [
                player
                for player in self._players
                if player.is_computer and not self.board_for(player).ships
            ]
            incomplete = [
                player
                for player in self._players
                if player not in auto_placed and not self.is_setup_complete(player)
            ]
            if incomplete:
                missing = {
                    player.name: [
                        kind.value
                        for kind in missing_kinds(self.board_for(player), self.config.fleet)
                    ]
                    for player in incomplete
                }
                logger.warning("start_rejected_fleet_incomplete", extra={"missing": missing})
                raise FleetIncompleteError(
                    "Please place all ships before starting the game "
                    f"({', '.join(player.name for player in incomplete)})."
                )

            for player in auto_placed:
                self.place_fleet_randomly(player)
                logger.info("computer_fleet_placed", extra={"player": player.name})

            self._phase = MatchPhase.PLAYING
            self._current_player = self.player1
            self._winner = None
            span.set_attribute("first_player", self._current_player.name)
            logger.info(
                "game_started",
                extra={"phase": self._phase.value, "current_player": self._current_player.name},
            )
            self._events.publish(GameStarted(self._current_player))

    def make_attack(self, coord: Coordinate) -> AttackOutcome:
        """Let the current player fire at ``coord`` on the opponent's board."""
        with tracer.start_as_current_span("match.make_attack") as span:
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)
            if self._phase is not MatchPhase.PLAYING:
                logger.error(
                    "attack_rejected_not_playing",
                    extra={"row": coord.row, "col": coord.col, "phase": self._phase.value},
                )
                raise NotPlayingError("Game is not currently playing.")

            attacker = self._current_player
            defender = self.opponent_of(attacker)
            span.set_attribute("player", attacker.name)
            outcome = attacker.make_attack(coord, self._boards[defender])
            self._check_win_condition()

            if self._phase is MatchPhase.PLAYING:
                self._current_player = defender
                self._turn_count += 1
                span.set_attribute("next_player", defender.name)

            MOVE_COUNTER.add(1, attributes={"outcome": outcome.value, "player": attacker.name})
            ship = self._boards[defender].get_ship_at(coord) if outcome.is_hit else None
            events: list[object] = [
                AttackResolved(attacker, defender, coord, outcome, self._turn_count, ship)
            ]
            if self._winner is not None:
                span.set_attribute("game.winner", self._winner.name)
                logger.info(
                    "game_finished",
                    extra={"winner": self._winner.name, "turn_count": self._turn_count},
                )
                events.append(GameOver(self._winner, self._turn_count))
            # Handlers see final state; GameOver is delivered even if one of them raises.
            self._events.publish_all(events)
            return outcome

    def play_computer_turn(self) -> tuple[Coordinate, AttackOutcome]:
        """Have a computer-controlled current player choose and fire a shot."""
        if self._phase is not MatchPhase.PLAYING:
            raise NotPlayingError("Game is not currently playing.")
        attacker = self._current_player
        if not attacker.is_computer:
            raise NotComputerTurnError(f"{attacker.name} is not a computer player.")
        coord = attacker.generate_attack(self._boards[self.opponent_of(attacker)])
        return coord, self.make_attack(coord)

    def get_game_state(self) -> GameState:
        """Return an immutable view of the current match."""
        return GameState(
            current_player=self._current_player,
            phase=self._phase,
            winner=self._winner,
            player1_score=self.player1.score,
            player2_score=self.player2.score,
            turn_count=self._turn_count,
        )

    def reset_game(self) -> None:
        """Clear boards, scores and turn state so a new game can be set up."""
        with tracer.start_as_current_span("match.reset_game"):
            self._phase = MatchPhase.NOT_PLAYING
            self._winner = None
            self._current_player = self.player1
            self._turn_count = 0
            for player in self._players:
                self._boards[player].reset_board()
                player.reset_score()
            logger.info("game_reset")
            self._events.publish(GameReset())

    def _check_win_condition(self) -> None:
        if self.player1_board.all_ships_sunk():
            self._winner = self.player2
        elif self.player2_board.all_ships_sunk():
            self._winner = self.player1
        if self._winner is not None:
            self._phase = MatchPhase.NOT_PLAYING

    def _require_setup(self, action: str) -> None:
        if self._phase is MatchPhase.PLAYING:
            raise InvalidPhaseError(f"Cannot {action} while a game is being played.")
        if self._winner is not None:
            raise InvalidPhaseError(f"Cannot {action} before the finished game is reset.")
