import logging
import random
import uuid
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

import core
from game_state import GameState

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="Mini 2048 Game API",
    description="An in-memory API for playing mini 2048 with undo. "\
                "Games live only for the lifetime of the server process.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Every handler below runs its state transition without awaiting, so one
# transition completes before the event loop picks up the next request.
_games: Dict[str, GameState] = {}

# Oldest games are dropped once this many are held.
MAX_GAMES = 1000

# Largest accepted grid dimension for new games.
MAX_GRID_SIZE = 16

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    rows: int = Field(
        default=core.DEFAULT_ROWS,
        gt=0,
        le=MAX_GRID_SIZE,
        description="Number of rows of the game grid."
    )
    cols: int = Field(
        default=core.DEFAULT_COLS,
        gt=0,
        le=MAX_GRID_SIZE,
        description="Number of columns of the game grid."
    )
    win_tile: int = Field(
        default=core.DEFAULT_WIN_TILE,
        gt=0,
        description="The tile value that ends the game (e.g., 128)."
    )
    seed: Optional[int] = Field(
        default=None,
        description="Optional seed for tile spawning, for reproducible games."
    )

class GameStateData(BaseModel):
    """Represents the visible state of a game instance."""
    game_id: str = Field(..., description="Identifier to use in subsequent requests.")
    grid: List[List[Optional[int]]] = Field(..., description="The game grid; null marks an empty cell.")
    progress: core.GameProgressState = Field(
        ...,
        description="Current progress state of the game (1 = PLAYING, 2 = OVER)."
    )
    win_tile: int = Field(..., gt=0, description="The tile value that ends this game instance.")
    rows: int = Field(..., gt=0, description="Number of rows of the grid.")
    cols: int = Field(..., gt=0, description="Number of columns of the grid.")
    can_undo: bool = Field(..., description="True if there is a move to undo.")
    valid_moves: List[core.DIRECTION] = Field(
        ...,
        description="Directions that would change the grid right now."
    )

class MoveRequestData(BaseModel):
    """Data required to make a move."""
    direction: core.DIRECTION = Field(
        ...,
        description="Direction of the move (up, down, left, right)."
    )

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    move_was_effective: bool = Field(
        ...,
        description="True if the move resulted in a change to the grid, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was blocked or the game ended."
    )

class UndoResponseData(GameStateData):
    """Response after an undo request."""
    undo_was_effective: bool = Field(
        ...,
        description="True if a previous grid was restored, False if there was nothing to undo."
    )

# --- Helpers ---

def _get_game(game_id: str) -> GameState:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail=f"Unknown game id: {game_id}")
    return game

def _state_fields(game_id: str, game: GameState) -> dict:
    return {
        "game_id": game_id,
        "grid": game.get_grid(),
        "progress": game.progress,
        "win_tile": game.win_tile,
        "rows": game.rows,
        "cols": game.cols,
        "can_undo": game.can_undo(),
        "valid_moves": game.available_moves(),
    }

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New Game")
@limiter.limit("100/minute")
async def start_new_game(request: Request, settings: NewGameSettings):
    """
    Creates a new game based on the provided settings.

    - **rows** / **cols**: Grid dimensions. Default is 4 x 4.
    - **win_tile**: Tile value that ends the game. Default is 128.
    - **seed**: Optional seed for reproducible tile spawns.

    Returns the initial game state: a grid with two random tiles, PLAYING
    progress and an empty undo history.
    """
    try:
        game = GameState(
            rows=settings.rows,
            cols=settings.cols,
            win_tile=settings.win_tile,
            rng=random.Random(settings.seed),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error in /game/new: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred during game creation: {str(e)}")

    while len(_games) >= MAX_GAMES:
        oldest_id = next(iter(_games))
        del _games[oldest_id]
        logger.info("Evicted game %s (registry full)", oldest_id)

    game_id = uuid.uuid4().hex
    _games[game_id] = game
    logger.info("Created game %s (%dx%d, win tile %d)", game_id, game.rows, game.cols, game.win_tile)
    return GameStateData(**_state_fields(game_id, game))


@app.get("/game/{game_id}", response_model=GameStateData, summary="Get the Current Game State")
@limiter.limit("100/minute")
async def get_game(request: Request, game_id: str):
    """Returns the current grid and status of a game."""
    game = _get_game(game_id)
    return GameStateData(**_state_fields(game_id, game))


@app.post("/game/{game_id}/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit("100/minute")
async def make_move(request: Request, game_id: str, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    The API will:
    1. Ignore the move if the game is already over.
    2. Slide and merge the tiles in the requested direction.
    3. If the grid changed, record the old grid for undo and add a new tile (2 or 4).

    Returns the updated game state, whether the move was effective, and an optional message.
    """
    game = _get_game(game_id)
    message_for_client: Optional[str] = None

    try:
        was_over = game.is_over()
        move_was_effective = game.apply_move(request_data.direction)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Error processing move: {str(e)}")
    except Exception as e:
        logger.error("Unexpected error in /game/move: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    if was_over:
        message_for_client = "Game is over; undo or start a new game."
    elif not move_was_effective:
        message_for_client = "Move was not effective; grid unchanged."
    elif game.is_over():
        message_for_client = f"Game over! {game.win_tile} tile reached."

    return MoveResponseData(
        **_state_fields(game_id, game),
        move_was_effective=move_was_effective,
        message=message_for_client
    )


@app.post("/game/{game_id}/undo", response_model=UndoResponseData, summary="Undo the Last Move")
@limiter.limit("100/minute")
async def undo_move(request: Request, game_id: str):
    """Restores the grid from before the last effective move, if there is one."""
    game = _get_game(game_id)
    undo_was_effective = game.undo()
    return UndoResponseData(
        **_state_fields(game_id, game),
        undo_was_effective=undo_was_effective
    )


@app.delete("/game/{game_id}", status_code=204, summary="End and Discard a Game")
@limiter.limit("100/minute")
async def delete_game(request: Request, game_id: str):
    """Removes a game from the server; later requests for it return 404."""
    _get_game(game_id)
    del _games[game_id]
    logger.info("Deleted game %s", game_id)
    return Response(status_code=204)
