# cli_driver.py
# This file is intended to be run to play or test the mini 2048 game on the CLI

import argparse
import logging
import random
from typing import List, Optional

from core import (
    DEFAULT_COLS,
    DEFAULT_ROWS,
    DEFAULT_WIN_TILE,
    DIRECTION,
    Grid,
)
from game_state import GameState

DIRECTION_KEYS = {'W': DIRECTION.UP, 'A': DIRECTION.LEFT, 'S': DIRECTION.DOWN, 'D': DIRECTION.RIGHT}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play mini 2048 in the terminal.")
    parser.add_argument("--rows", type=int, default=DEFAULT_ROWS) # grid height
    parser.add_argument("--cols", type=int, default=DEFAULT_COLS) # grid width
    parser.add_argument("--win-tile", type=int, default=DEFAULT_WIN_TILE) # tile that ends the game
    parser.add_argument("--seed", type=int, default=None) # reproducible spawns
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")

    # 1. Initialize game
    try:
        game = GameState(rows=args.rows, cols=args.cols, win_tile=args.win_tile,
                         rng=random.Random(args.seed))
    except ValueError as e:
        print(f"Cannot start game: {e}")
        return 2
    display_game_state(game)

    # 2. Game Loop; only moves are locked once the game is over
    while True:
        try:
            move_input = input("Enter move (W/A/S/D for Up/Left/Down/Right, U to undo, Q to quit): ").strip().upper()
        except (EOFError, KeyboardInterrupt):
            move_input = 'Q'

        if move_input == 'Q':
            print("Quitting game.")
            break

        if move_input == 'U':
            if not game.undo():
                print("Nothing to undo.")
            display_game_state(game)
            continue

        chosen_direction = DIRECTION_KEYS.get(move_input)
        if chosen_direction is None:
            print("Invalid input. Use W, A, S, D, U or Q.")
            continue

        if game.is_over():
            print("The game is over. Undo (U) or quit (Q).")
            continue

        # 3. Process the move; a blocked move leaves the game untouched
        if not game.apply_move(chosen_direction):
            print("Move did not change the board. Try a different direction.")
            if not game.available_moves():
                print("No tile can move in any direction. Undo (U) or quit (Q).")
            continue

        display_game_state(game)

    return 0


# --- Display Functions ---
def format_grid(grid: Grid) -> str:
    """Renders the grid as tab separated rows, empty cells as '.'."""
    return "\n".join("\t".join('.' if cell is None else str(cell) for cell in row) for row in grid)


def display_game_state(game: GameState):
    """Prints the grid, game status and undo availability to the console."""
    print(f"\nStatus: {game.progress.name}   Undo: {'available' if game.can_undo() else 'none'}")
    print(format_grid(game.get_grid()))
    print("-" * (game.cols * 8)) # Adjust width based on grid size
    if game.is_over():
        print(f"Game over! You reached the {game.win_tile} tile. Undo (U) or quit (Q).")


if __name__ == "__main__":
    raise SystemExit(main())
