"""Temporal activities wrapping the game engine."""
import asyncio

from temporalio import activity

from minesweeper import engine
from minesweeper.config import best_time_store
from minesweeper.types import (
    BestTimeRequest,
    BestTimeResult,
    GameState,
    MoveRequest,
    NewGameRequest,
)


@activity.defn
async def create_game(game_id: str, request: NewGameRequest) -> GameState:
    """Create a new game; standard boards get their mines on the first reveal."""
    return engine.new_game_state(game_id, difficulty=request.difficulty, puzzle=request.puzzle)


@activity.defn
async def apply_move(game_state: GameState, move_request: MoveRequest) -> GameState:
    """Apply one reveal, flag or chord move and return the resulting state."""
    activity.logger.debug(f"Applying {move_request.action} at ({move_request.row}, {move_request.col})")
    return engine.apply_move(game_state, move_request)


@activity.defn
async def record_best_time(request: BestTimeRequest) -> BestTimeResult:
    """Compare a winning time against the stored record for its difficulty."""
    # File storage blocks, keep it off the worker's event loop
    return await asyncio.to_thread(best_time_store().record, request.difficulty, request.seconds)
