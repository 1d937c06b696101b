"""Command-line front-end: play a match against the computer."""

from __future__ import annotations

import argparse
import logging
import random
import time
from typing import Sequence

from seabattle.config import GameConfig, load_game_config
from seabattle.engine.board import AttackOutcome, Board, CellState
from seabattle.engine.errors import SeaBattleError
from seabattle.engine.events import AttackResolved
from seabattle.engine.instrumented_match import InstrumentedMatch
from seabattle.engine.match import Match, MatchPhase
from seabattle.engine.player import Player, PlayerKind
from seabattle.engine.ship import Coordinate, Orientation, ShipKind
from seabattle.telemetry import configure_console_logging, init_telemetry, shutdown_telemetry

ROW_LABELS = "ABCDEFGHIJ"


def parse_coordinate(text: str) -> Coordinate:
    """Parse ``A5`` (row letter, 1-based column) or ``3 7`` (0-based row and column)."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS:
            raise ValueError("Row must be between A and J.")
        row = ROW_LABELS.index(cleaned[0])
        try:
            col = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError("Column must be a number between 1 and 10.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            row, col = map(int, parts)
        except ValueError as exc:
            raise ValueError("Row and column must be numbers.") from exc
    if row not in range(len(ROW_LABELS)) or col not in range(len(ROW_LABELS)):
        raise ValueError("Coordinates must be within the 10x10 board.")
    return Coordinate(row, col)


def format_coordinate(coord: Coordinate) -> str:
    return f"{ROW_LABELS[coord.row]}{coord.col + 1}"


def format_board(board: Board, show_ships: bool) -> str:
    ship_cells = board.occupied_coordinates() if show_ships else set()
    header = "    " + " ".join(f"{col + 1:>2}" for col in range(board.size))
    rows = [header]
    for row in range(board.size):
        symbols = []
        for col in range(board.size):
            coord = Coordinate(row, col)
            state = board.get_cell_state(coord)
            if state is CellState.HIT:
                symbol = "X"
            elif state is CellState.MISS:
                symbol = "o"
            else:
                symbol = "S" if coord in ship_cells else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[row]} |" + " ".join(symbols))
    return "\n".join(rows)


def describe_attack(event: AttackResolved) -> str:
    label = format_coordinate(event.coord)
    if event.outcome is AttackOutcome.SUNK:
        ship_name = event.ship.name.lower() if event.ship else "ship"
        outcome = f"sank {event.defender.name}'s {ship_name}!"
    elif event.outcome is AttackOutcome.ALREADY_ATTACKED:
        outcome = "already attacked"
    else:
        outcome = event.outcome.value
    return f"{event.attacker.name} fired at {label}: {outcome}"


def _prompt_for_coordinate(board: Board) -> Coordinate:
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            coord = parse_coordinate(raw)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if board.is_attacked(coord):
            print("That cell has already been targeted. Choose another.")
            continue
        return coord


def _prompt_orientation(kind: ShipKind) -> Orientation:
    while True:
        raw = (
            input(f"Place your {kind.display_name} (length {kind.length}). Orientation [H/V]: ")
            .strip()
            .upper()
        )
        if raw in {"H", "HOR", "HORIZONTAL"}:
            return Orientation.HORIZONTAL
        if raw in {"V", "VER", "VERTICAL"}:
            return Orientation.VERTICAL
        print("Please enter H for horizontal or V for vertical.")


def _manual_ship_placement(match: Match, player: Player) -> None:
    board = match.board_for(player)
    for kind in match.config.fleet:
        while True:
            print("\nCurrent layout:")
            print(format_board(board, show_ships=True))
            orientation = _prompt_orientation(kind)
            try:
                start = parse_coordinate(input("Enter starting coordinate (e.g., A1): "))
                match.place_ship(player, kind, start, orientation)
            except ValueError as exc:
                print(f"Ship cannot be placed there: {exc}")
                continue
            break


def _prompt_manual_setup() -> bool:
    while True:
        raw = input("Would you like to place your ships manually? [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def play_game(config: GameConfig, name: str = "You") -> InstrumentedMatch:
    """Run an interactive match on stdin/stdout and return it once finished."""
    print("Welcome to Sea Battle!\n")
    human = Player(name, PlayerKind.HUMAN)
    computer = Player("Computer", PlayerKind.COMPUTER, rng=random.Random(config.rng_seed))
    match = InstrumentedMatch(human, computer, config=config)
    match.subscribe(AttackResolved, lambda event: print(describe_attack(event)))
    try:
        _play_to_the_end(match, human, computer, config)
    finally:
        # Quitting mid-game still closes the game span before telemetry shuts down.
        match.abandon_game()

    state = match.get_game_state()
    print(f"\nFinal score: {human.name} {state.player1_score} - {state.player2_score} {computer.name}")
    if state.winner is human:
        print("Congratulations, you won!")
    else:
        print("The computer won this time. Better luck next battle!")
    return match


def _play_to_the_end(match: Match, human: Player, computer: Player, config: GameConfig) -> None:
    if _prompt_manual_setup():
        _manual_ship_placement(match, human)
    else:
        match.place_fleet_randomly(human)
        print("\nYour ships have been positioned automatically.")

    match.start_game()

    while match.phase is MatchPhase.PLAYING:
        if match.current_player is human:
            print("\nYour Board:")
            print(format_board(match.board_for(human), show_ships=True))
            print("\nEnemy Waters:")
            print(format_board(match.board_for(computer), show_ships=False))
            coord = _prompt_for_coordinate(match.board_for(computer))
            try:
                match.make_attack(coord)
            except SeaBattleError as exc:
                print(f"Attack rejected: {exc}")
        else:
            if config.computer_delay_seconds:
                time.sleep(config.computer_delay_seconds)
            match.play_computer_turn()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play Sea Battle against the computer.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--computer-delay",
        type=float,
        default=None,
        help="Seconds to pause before the computer fires.",
    )
    parser.add_argument(
        "--allow-adjacent",
        action="store_true",
        default=None,
        help="Allow ships to touch each other.",
    )
    parser.add_argument("--name", default="You", help="Your player name.")
    parser.add_argument("--verbose", action="store_true", help="Show engine logs.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_console_logging(logging.INFO if args.verbose else logging.WARNING)
    init_telemetry()

    overrides = {
        "rng_seed": args.seed,
        "computer_delay_seconds": args.computer_delay,
        "allow_adjacent": args.allow_adjacent,
    }
    config = GameConfig(
        **{
            **load_game_config().model_dump(),
            **{key: value for key, value in overrides.items() if value is not None},
        }
    )
    try:
        play_game(config, name=args.name)
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
