"""High-level gameplay tests."""

import random

import pytest

from seabattle.config import GameConfig
from seabattle.engine.board import AttackOutcome
from seabattle.engine.errors import (
    AdjacentShipError,
    DuplicateShipError,
    FleetIncompleteError,
    InvalidPhaseError,
    InvalidShipKindError,
    NotComputerTurnError,
    NotPlayingError,
    OutOfBoundsError,
)
from seabattle.engine.events import AttackResolved, GameOver, GameReset, GameStarted, ShipPlaced
from seabattle.engine.match import GameState, Match, MatchPhase
from seabattle.engine.player import Player, PlayerKind
from seabattle.engine.ship import Coordinate, Orientation, ShipKind

DESTROYER_ONLY = GameConfig(fleet=(ShipKind.DESTROYER,))


def _humans() -> tuple[Player, Player]:
    return Player("Player 1"), Player("Player 2")


def _destroyer_match() -> Match:
    """Both sides field a single destroyer; player 2's sits at (0,0)-(0,1)."""
    player1, player2 = _humans()
    match = Match(player1, player2, config=DESTROYER_ONLY)
    match.place_ship(player1, ShipKind.DESTROYER, Coordinate(9, 0), Orientation.HORIZONTAL)
    match.place_ship(player2, ShipKind.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
    match.start_game()
    return match


def test_new_match_initial_state() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2)

    assert match.get_game_state() == GameState(
        current_player=player1,
        phase=MatchPhase.NOT_PLAYING,
        winner=None,
        player1_score=0,
        player2_score=0,
        turn_count=0,
    )
    assert match.player1_board.get_grid_size() == 10
    assert match.board_for(player2) is match.player2_board
    assert match.opponent_of(player1) is player2


def test_match_requires_two_distinct_players() -> None:
    player = Player("Solo")
    with pytest.raises(ValueError):
        Match(player, player)
    with pytest.raises(ValueError):
        Match(player, None)  # type: ignore[arg-type]


def test_attack_before_start_is_rejected() -> None:
    match = Match(*_humans())
    with pytest.raises(NotPlayingError):
        match.make_attack(Coordinate(0, 0))
    assert match.turn_count == 0


def test_start_refused_until_fleets_complete() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2)
    match.place_fleet_randomly(player1)

    with pytest.raises(FleetIncompleteError):
        match.start_game()

    assert match.phase is MatchPhase.NOT_PLAYING
    assert match.is_setup_complete(player1)
    assert not match.is_setup_complete(player2)


def test_start_places_computer_fleet_automatically() -> None:
    human = Player("Human")
    computer = Player("Computer", PlayerKind.COMPUTER, rng=random.Random(1))
    match = Match(human, computer, rng_seed=11)
    match.place_fleet_randomly(human)

    match.start_game()

    assert match.phase is MatchPhase.PLAYING
    assert match.current_player is human
    assert match.is_setup_complete(computer)


def test_refused_start_leaves_computer_board_empty() -> None:
    human = Player("Human")
    computer = Player("Computer", PlayerKind.COMPUTER, rng=random.Random(1))
    match = Match(human, computer, rng_seed=11)
    placed: list[ShipPlaced] = []
    match.subscribe(ShipPlaced, placed.append)

    with pytest.raises(FleetIncompleteError):
        match.start_game()

    assert match.board_for(computer).ships == ()
    assert placed == []
    assert match.phase is MatchPhase.NOT_PLAYING


def test_start_while_playing_is_rejected() -> None:
    match = _destroyer_match()
    with pytest.raises(InvalidPhaseError):
        match.start_game()


def test_place_ship_validation() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2)
    match.place_ship(player1, "submarine", Coordinate(3, 3), "vertical")

    with pytest.raises(DuplicateShipError):
        match.place_ship(player1, ShipKind.SUBMARINE, Coordinate(8, 0), Orientation.HORIZONTAL)
    with pytest.raises(AdjacentShipError):
        match.place_ship(player1, ShipKind.DESTROYER, Coordinate(2, 4), Orientation.HORIZONTAL)
    with pytest.raises(OutOfBoundsError):
        match.place_ship(player1, ShipKind.CARRIER, Coordinate(0, 7), Orientation.HORIZONTAL)
    with pytest.raises(InvalidShipKindError):
        match.place_ship(player1, "frigate", Coordinate(0, 0), Orientation.HORIZONTAL)
    assert len(match.player1_board.ships) == 1


def test_adjacent_placement_allowed_when_configured() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2, config=GameConfig(allow_adjacent=True))
    match.place_ship(player1, ShipKind.SUBMARINE, Coordinate(3, 3), Orientation.VERTICAL)
    match.place_ship(player1, ShipKind.DESTROYER, Coordinate(2, 4), Orientation.HORIZONTAL)
    assert len(match.player1_board.ships) == 2


def test_kind_outside_configured_fleet_is_rejected() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2, config=DESTROYER_ONLY)
    with pytest.raises(InvalidShipKindError):
        match.place_ship(player1, ShipKind.CARRIER, Coordinate(0, 0), Orientation.HORIZONTAL)


def test_two_player_game_to_victory() -> None:
    match = _destroyer_match()
    player1, player2 = match.player1, match.player2

    assert match.make_attack(Coordinate(0, 0)) is AttackOutcome.HIT
    assert player1.score == 1
    assert match.current_player is player2
    assert match.turn_count == 1

    assert match.make_attack(Coordinate(5, 5)) is AttackOutcome.MISS
    assert match.current_player is player1

    assert match.make_attack(Coordinate(0, 1)) is AttackOutcome.SUNK
    assert match.player2_board.all_ships_sunk()
    state = match.get_game_state()
    assert state.phase is MatchPhase.NOT_PLAYING
    assert state.winner is player1
    assert state.is_game_over
    assert state.current_player is player1
    assert state.turn_count == 2
    assert (state.player1_score, state.player2_score) == (2, 0)

    with pytest.raises(NotPlayingError):
        match.make_attack(Coordinate(1, 1))


def test_out_of_bounds_attack_keeps_turn() -> None:
    match = _destroyer_match()
    with pytest.raises(OutOfBoundsError):
        match.make_attack(Coordinate(10, 10))
    assert match.current_player is match.player1
    assert match.turn_count == 0


def test_already_attacked_still_ends_the_turn() -> None:
    match = _destroyer_match()
    match.make_attack(Coordinate(4, 4))
    match.make_attack(Coordinate(4, 4))
    assert match.make_attack(Coordinate(4, 4)) is AttackOutcome.ALREADY_ATTACKED
    assert match.current_player is match.player2
    assert match.turn_count == 3
    assert match.player1.score == 0


def test_game_continues_while_ships_remain() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2, config=GameConfig(fleet=(ShipKind.DESTROYER, ShipKind.CRUISER)))
    for player in (player1, player2):
        match.place_ship(player, ShipKind.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
        match.place_ship(player, ShipKind.CRUISER, Coordinate(2, 1), Orientation.VERTICAL)
    match.start_game()

    match.make_attack(Coordinate(0, 0))
    match.make_attack(Coordinate(9, 9))
    match.make_attack(Coordinate(0, 1))

    assert not match.player2_board.all_ships_sunk()
    assert match.phase is MatchPhase.PLAYING
    assert match.winner is None


def test_computer_turn_requires_computer() -> None:
    match = _destroyer_match()
    with pytest.raises(NotComputerTurnError):
        match.play_computer_turn()


def test_full_game_against_computer_terminates() -> None:
    human = Player("Human", rng=random.Random(5))
    computer = Player("Computer", PlayerKind.COMPUTER, rng=random.Random(6))
    match = Match(human, computer, rng_seed=42)
    match.place_fleet_randomly(human)
    match.start_game()

    while match.phase is MatchPhase.PLAYING:
        if match.current_player is computer:
            coord, outcome = match.play_computer_turn()
            assert outcome is not AttackOutcome.ALREADY_ATTACKED
        else:
            coord = human.generate_attack(match.board_for(computer))
            assert match.make_attack(coord) is not AttackOutcome.ALREADY_ATTACKED

    state = match.get_game_state()
    assert state.winner in {human, computer}
    loser_board = match.board_for(match.opponent_of(state.winner))
    assert loser_board.all_ships_sunk()
    assert state.winner.score == sum(kind.length for kind in ShipKind)


def test_reset_after_play() -> None:
    match = _destroyer_match()
    match.make_attack(Coordinate(0, 0))
    match.make_attack(Coordinate(3, 3))
    match.make_attack(Coordinate(0, 1))

    match.reset_game()

    state = match.get_game_state()
    assert state.turn_count == 0
    assert state.phase is MatchPhase.NOT_PLAYING
    assert state.winner is None
    assert state.current_player is match.player1
    assert (state.player1_score, state.player2_score) == (0, 0)
    for board in (match.player1_board, match.player2_board):
        assert board.ships == ()
        assert all(
            board.get_ship_at(Coordinate(row, col)) is None
            for row in range(10)
            for col in range(10)
        )


def test_setup_locked_after_game_over_until_reset() -> None:
    match = _destroyer_match()
    match.make_attack(Coordinate(0, 0))
    match.make_attack(Coordinate(3, 3))
    match.make_attack(Coordinate(0, 1))

    with pytest.raises(InvalidPhaseError):
        match.place_fleet_randomly(match.player1)

    match.reset_game()
    match.place_fleet_randomly(match.player1)
    assert match.is_setup_complete(match.player1)


def test_events_are_published() -> None:
    player1, player2 = _humans()
    match = Match(player1, player2, config=DESTROYER_ONLY)
    received: list[object] = []
    for event_type in (ShipPlaced, GameStarted, AttackResolved, GameOver, GameReset):
        match.subscribe(event_type, received.append)

    match.place_ship(player1, ShipKind.DESTROYER, Coordinate(9, 0), Orientation.HORIZONTAL)
    match.place_ship(player2, ShipKind.DESTROYER, Coordinate(0, 0), Orientation.HORIZONTAL)
    match.start_game()
    match.make_attack(Coordinate(0, 0))
    match.make_attack(Coordinate(5, 5))
    match.make_attack(Coordinate(0, 1))
    match.reset_game()

    kinds = [type(event) for event in received]
    assert kinds == [
        ShipPlaced,
        ShipPlaced,
        GameStarted,
        AttackResolved,
        AttackResolved,
        AttackResolved,
        GameOver,
        GameReset,
    ]
    sinking = received[5]
    assert isinstance(sinking, AttackResolved)
    assert sinking.outcome is AttackOutcome.SUNK
    assert sinking.ship is not None and sinking.ship.kind is ShipKind.DESTROYER
    assert received[6] == GameOver(player1, 2)


def test_unsubscribe_stops_delivery() -> None:
    match = _destroyer_match()
    received: list[AttackResolved] = []
    subscription = match.subscribe(AttackResolved, received.append)
    match.make_attack(Coordinate(5, 5))
    match.unsubscribe(subscription)
    match.make_attack(Coordinate(5, 5))
    assert len(received) == 1


def test_game_over_is_published_when_an_attack_handler_fails() -> None:
    match = _destroyer_match()
    finished: list[GameOver] = []

    def failing_handler(event: AttackResolved) -> None:
        raise RuntimeError("display crashed")

    match.make_attack(Coordinate(0, 0))
    match.make_attack(Coordinate(5, 5))
    match.subscribe(AttackResolved, failing_handler)
    match.subscribe(GameOver, finished.append)

    with pytest.raises(RuntimeError, match="display crashed"):
        match.make_attack(Coordinate(0, 1))

    assert finished == [GameOver(match.player1, 2)]
    assert match.winner is match.player1
    assert match.phase is MatchPhase.NOT_PLAYING
