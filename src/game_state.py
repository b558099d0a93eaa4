# game_state.py
# Owns the current grid and the undo history for one game.

import logging
import random
from typing import List, Optional

from core import (
    DEFAULT_COLS,
    DEFAULT_ROWS,
    DEFAULT_WIN_TILE,
    DIRECTION,
    GameProgressState,
    Grid,
    add_random_tile,
    copy_grid,
    create_empty_grid,
    determine_game_status,
    get_grid_shape,
    process_move,
    valid_moves,
)

logger = logging.getLogger(__name__)


class GameState:
    """
    One game: the current grid, a stack of earlier grids, and the win threshold.

    The Over flag is never stored; it is derived from the current grid on
    every query. Access is not synchronized, so a threaded host must run one
    mutation at a time.
    """

    def __init__(
        self,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        win_tile: int = DEFAULT_WIN_TILE,
        rng: Optional[random.Random] = None,
        grid: Optional[Grid] = None,
    ):
        """
        Args:
            rows (int): Number of rows of a fresh grid. Default is 4.
            cols (int): Number of columns of a fresh grid. Default is 4.
            win_tile (int): Tile value that ends the game. Default is 128.
            rng (random.Random, optional): Random source used for spawning.
            grid (Grid, optional): Start from this grid instead of spawning
                two tiles on an empty one. Its shape overrides rows/cols.
        Raises:
            ValueError: If a dimension or win_tile is not positive, or grid
                        is not rectangular.
        """
        if not isinstance(win_tile, int) or win_tile <= 0:
            raise ValueError("win_tile must be a positive integer.")
        self.win_tile = win_tile
        self.rng = rng if rng is not None else random.Random()
        self._history: List[Grid] = []

        if grid is None:
            self.rows, self.cols = rows, cols
            self._grid = self._new_grid()
        else:
            self.rows, self.cols = get_grid_shape(grid)
            self._grid = copy_grid(grid)

    def _new_grid(self) -> Grid:
        grid = create_empty_grid(self.rows, self.cols)
        grid, _ = add_random_tile(grid, self.rng)
        grid, _ = add_random_tile(grid, self.rng)
        return grid

    def reset(self) -> None:
        """Starts over: two tiles on an empty grid and no history."""
        self._grid = self._new_grid()
        self._history = []
        logger.debug("Game reset to a %dx%d grid", self.rows, self.cols)

    # --- Mutations ---

    def apply_move(self, direction: DIRECTION) -> bool:
        """
        Slides the grid in the given direction and spawns one tile if anything moved.
        Args:
            direction (DIRECTION): The direction to move.
        Returns:
            bool: True if the grid changed. A blocked move, or any move once
                  the game is Over, leaves the state untouched and returns False.
        """
        if self.is_over():
            logger.debug("Ignoring %s: game is over", direction)
            return False

        moved_grid, changed = process_move(self._grid, direction)
        if not changed:
            logger.debug("Move %s changed nothing", direction)
            return False

        self._history.append(self._grid)
        self._grid, spawned = add_random_tile(moved_grid, self.rng)
        logger.debug(
            "Move %s applied (tile spawned: %s, history depth: %d)",
            direction, spawned, len(self._history),
        )
        if self.is_over():
            logger.debug("Win tile %d reached", self.win_tile)
        return True

    def undo(self) -> bool:
        """
        Restores the grid from before the most recent effective move.
        Returns:
            bool: True if a snapshot was restored, False if the history was empty.
        """
        if not self._history:
            return False
        self._grid = self._history.pop()
        logger.debug("Undo applied (history depth: %d)", len(self._history))
        return True

    # --- Queries ---

    def get_grid(self) -> Grid:
        """Returns a copy of the current grid for rendering."""
        return copy_grid(self._grid)

    @property
    def progress(self) -> GameProgressState:
        return determine_game_status(self._grid, self.win_tile)

    def is_over(self) -> bool:
        return self.progress == GameProgressState.OVER

    def can_undo(self) -> bool:
        return bool(self._history)

    def history_depth(self) -> int:
        return len(self._history)

    def available_moves(self) -> List[DIRECTION]:
        """Directions that would change the current grid (ignores the Over gate)."""
        return valid_moves(self._grid)
