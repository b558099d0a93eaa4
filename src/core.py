# core.py
# This file is the stateless board-mutation logic for the mini 2048 game.

from enum import Enum
from typing import List, NamedTuple, Optional, Tuple
import random

Cell = Optional[int]
Grid = List[List[Cell]]

DEFAULT_ROWS = 4
DEFAULT_COLS = 4
DEFAULT_WIN_TILE = 128

class GameProgressState(Enum):
    """Represents the current progress state of the game."""
    PLAYING = 1
    OVER = 2  # Win tile reached, moves are locked

class DIRECTION(Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

class MoveResult(NamedTuple):
    """The grid produced by a move attempt and whether any tile moved."""
    grid: Grid
    changed: bool

# Counter-clockwise angle that turns each direction into a "slide left",
# and the angle that turns the result back.
ROTATE_DEGREES = {
    DIRECTION.UP: 90,
    DIRECTION.RIGHT: 180,
    DIRECTION.DOWN: 270,
    DIRECTION.LEFT: 0,
}
REVERT_DEGREES = {
    DIRECTION.UP: 270,
    DIRECTION.RIGHT: 180,
    DIRECTION.DOWN: 90,
    DIRECTION.LEFT: 0,
}

# --- Grid Helper Functions ---

def get_grid_shape(grid: Grid) -> Tuple[int, int]:
    """
    Gets the (rows, columns) shape of a rectangular grid.
    Args:
        grid (Grid): The game grid.
    Returns:
        Tuple[int, int]: Number of rows and number of columns.
    Raises:
        ValueError: If the grid is empty, has empty rows, or is not rectangular.
    """
    if not grid or not grid[0]:
        raise ValueError("Grid must have at least one row and one column.")
    column_count = len(grid[0])
    if not all(len(row) == column_count for row in grid):
        raise ValueError("Grid must be rectangular (every row the same length).")
    return len(grid), column_count

def create_empty_grid(rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS) -> Grid:
    """Builds a rows x cols grid with every cell empty."""
    if any(isinstance(n, bool) or not isinstance(n, int) or n <= 0 for n in (rows, cols)):
        raise ValueError("Grid dimensions must be positive integers.")
    return [[None] * cols for _ in range(rows)]

def copy_grid(grid: Grid) -> Grid:
    return [list(row) for row in grid]

def get_empty_cells(grid: Grid) -> List[Tuple[int, int]]:
    """
    Get coordinates of empty cells in row-major order.
    Args:
        grid (Grid): The grid to check.
    Returns:
        List[Tuple[int, int]]: List of (row, col) tuples for empty cells.
    """
    empty_cells = []
    for row_idx, row in enumerate(grid):
        for col_idx, cell in enumerate(row):
            if cell is None:
                empty_cells.append((row_idx, col_idx))
    return empty_cells

def add_random_tile(grid: Grid, rng: Optional[random.Random] = None) -> Tuple[Grid, bool]:
    """
    Adds a new tile (90% chance of 2, 10% chance of 4) to a uniformly chosen
    empty cell on a copy of the grid.
    Args:
        grid (Grid): The current game grid.
        rng (random.Random, optional): Source of the two draws. Anything with
            ``choice`` and ``random`` methods works. Defaults to the module-level
            generator.
    Returns:
        Tuple[Grid, bool]: A new grid with the added tile and a boolean
                           indicating if a tile was added.
                           If there are no empty cells, returns a copy and False.
    """
    if rng is None:
        rng = random
    empty_cells = get_empty_cells(grid)
    if not empty_cells:
        return copy_grid(grid), False

    new_grid = copy_grid(grid)
    row, col = rng.choice(empty_cells)
    new_grid[row][col] = 2 if rng.random() < 0.9 else 4
    return new_grid, True

# --- Grid Transformations ---

def rotate_grid(grid: Grid, degree: int) -> Grid:
    """
    Rotates a grid counter-clockwise by a multiple of 90 degrees.
    An R x C grid becomes C x R for 90 and 270, and stays R x C for 0 and 180.
    Args:
        grid (Grid): The grid to rotate.
        degree (int): One of 0, 90, 180, 270.
    Returns:
        Grid: The rotated grid. For 0 the input itself is returned.
    Raises:
        ValueError: If the grid is not rectangular or the angle is unsupported.
    """
    rows, cols = get_grid_shape(grid)
    if degree == 0:
        return grid
    if degree == 90:
        return [[grid[r][cols - 1 - c] for r in range(rows)] for c in range(cols)]
    if degree == 180:
        return [[grid[rows - 1 - r][cols - 1 - c] for c in range(cols)] for r in range(rows)]
    if degree == 270:
        return [[grid[rows - 1 - r][c] for r in range(rows)] for c in range(cols)]
    raise ValueError(f"Unsupported rotation angle: {degree}")

# --- Row Manipulation (Core Move Logic) ---

def collapse_row_left(row: List[Cell]) -> Tuple[List[Cell], bool]:
    """
    Slides a row toward index 0, merging equal neighbours once each.

    A pending tile is held until the next tile is seen: equal values merge
    into one tile of double value and the pending slot is cleared, so a
    merged tile is never merged again in the same pass.
    [2, 2, 2, None] -> [4, 2, None, None]
    Args:
        row (List[Cell]): The row to collapse.
    Returns:
        Tuple[List[Cell], bool]: The collapsed row (same length) and whether
                                 it differs from the input at any position.
    """
    collapsed: List[Cell] = []
    pending: Cell = None
    for cell in row:
        if cell is None:
            continue
        if pending is None:
            pending = cell
        elif pending == cell:
            collapsed.append(pending * 2)
            pending = None
        else:
            collapsed.append(pending)
            pending = cell
    if pending is not None:
        collapsed.append(pending)

    collapsed += [None] * (len(row) - len(collapsed))
    changed = any(before != after for before, after in zip(row, collapsed))
    return collapsed, changed

def _collapse_all_rows_left(grid: Grid) -> MoveResult:
    rows_changed = False
    collapsed_grid = []
    for row in grid:
        collapsed_row, row_changed = collapse_row_left(row)
        collapsed_grid.append(collapsed_row)
        rows_changed = rows_changed or row_changed
    return MoveResult(collapsed_grid, rows_changed)

# --- Core Game Move Processing ---

def process_move(grid: Grid, direction: DIRECTION) -> MoveResult:
    """
    Slides and merges the grid in the given direction.

    Every direction is rotated into a left slide, collapsed row by row,
    then rotated back.
    Args:
        grid (Grid): The current game grid. It is not modified.
        direction (DIRECTION): The direction to move.
    Returns:
        MoveResult:
            - grid: The new grid after the move.
            - changed: True if any tile moved or merged.
    Raises:
        ValueError: If the grid is not rectangular or the direction is invalid.
    """
    get_grid_shape(grid)
    if direction not in ROTATE_DEGREES:
        raise ValueError(f"Invalid direction specified for process_move: {direction!r}")

    rotated = rotate_grid(grid, ROTATE_DEGREES[direction])
    collapsed, changed = _collapse_all_rows_left(rotated)
    return MoveResult(rotate_grid(collapsed, REVERT_DEGREES[direction]), changed)

# --- Game State Checks ---

def check_for_win(grid: Grid, win_tile: int = DEFAULT_WIN_TILE) -> bool:
    """
    Check if a tile equal to win_tile exists anywhere in the grid.
    Args:
        grid (Grid): The game grid.
        win_tile (int): The threshold tile value. Default is 128.
    Returns:
        bool: True if the tile is present, False otherwise.
    """
    return any(cell == win_tile for row in grid for cell in row)

def is_move_possible(grid: Grid, direction: DIRECTION) -> bool:
    """Check if sliding in the given direction would change the grid."""
    return process_move(grid, direction).changed

def valid_moves(grid: Grid) -> List[DIRECTION]:
    """
    Lists every direction that would change the grid.
    Args:
        grid (Grid): The game grid.
    Returns:
        List[DIRECTION]: The effective directions, in enum order.
    """
    return [direction for direction in DIRECTION if is_move_possible(grid, direction)]

def determine_game_status(grid: Grid, win_tile: int = DEFAULT_WIN_TILE) -> GameProgressState:
    """
    Determines the current progress state of the game based on the grid.
    Args:
        grid (Grid): The current game grid.
        win_tile (int): The threshold tile value. Default is 128.
    Returns:
        GameProgressState: OVER once the threshold tile is present, PLAYING otherwise.
    """
    if check_for_win(grid, win_tile):
        return GameProgressState.OVER
    return GameProgressState.PLAYING
