"""Flask server for Minesweeper game."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from flask import Flask, request, jsonify
from flask_cors import CORS
from temporalio.client import Client
import uuid

from minesweeper.config import best_time_store, get_temporal_client, server_port, task_queue
from minesweeper.engine import MOVE_ACTIONS, elapsed_seconds, get_difficulty
from minesweeper.puzzles import PRACTICE_PUZZLES, get_practice_puzzle, parse_puzzle, puzzle_to_dict
from minesweeper.types import DIFFICULTIES, GameState, MinesweeperError, MoveRequest, NewGameRequest
from minesweeper.workflows import MinesweeperWorkflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

# Global client reference
temporal_client: Client | None = None


class GameNotReady(Exception):
    pass


def serialize_game_state(game_state: GameState | None, now: datetime | None = None):
    """Convert game state to JSON-serializable format."""
    if not game_state:
        return None

    now = now or datetime.now(timezone.utc)
    board = game_state.board
    cells = [
        [
            {
                'row': cell.row,
                'col': cell.col,
                'isMine': cell.is_mine,
                'isRevealed': cell.is_revealed,
                'isFlagged': cell.is_flagged,
                'neighborMines': cell.neighbor_mines,
            }
            for cell in row
        ]
        for row in board.cells
    ]

    return {
        'id': game_state.id,
        'board': {
            'cells': cells,
            'width': board.width,
            'height': board.height,
            'mineCount': board.mine_count,
        },
        'status': game_state.status.value,
        'difficulty': game_state.difficulty,
        'puzzle': puzzle_to_dict(game_state.puzzle) if game_state.puzzle else None,
        'startTime': game_state.start_time.isoformat() if game_state.start_time else None,
        'endTime': game_state.end_time.isoformat() if game_state.end_time else None,
        'elapsedSeconds': elapsed_seconds(game_state, now),
        'flagsUsed': game_state.flags_used,
        'remainingFlags': game_state.remaining_flags,
        'cellsRevealed': game_state.cells_revealed,
        'newRecord': game_state.new_record,
    }


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_new_game_request(data) -> NewGameRequest:
    """Build a NewGameRequest from ``difficulty``, ``puzzle`` or ``puzzleId``."""
    data = data or {}
    if data.get('puzzle') is not None:
        return NewGameRequest(puzzle=parse_puzzle(data['puzzle']))
    if data.get('puzzleId') is not None:
        puzzle_id = data['puzzleId']
        if not _is_int(puzzle_id):
            raise MinesweeperError("puzzleId must be an integer")
        return NewGameRequest(puzzle=get_practice_puzzle(puzzle_id))
    difficulty = data.get('difficulty')
    if difficulty is None:
        return NewGameRequest()
    get_difficulty(difficulty)
    return NewGameRequest(difficulty=difficulty)


async def query_with_retry(handle, query_name, max_retries=5):
    """Query with retry logic for workflow initialization."""
    for i in range(max_retries):
        try:
            game_state = await handle.query(query_name, result_type=Optional[GameState])
            if game_state is None:
                raise GameNotReady("Game is still initializing")
            return game_state
        except Exception as error:
            if i < max_retries - 1:
                logger.info(f"Query not ready yet, retrying in {(i + 1) * 100}ms...")
                await asyncio.sleep((i + 1) * 0.1)
                continue
            raise error


@app.route('/api/games', methods=['POST'])
def create_game():
    """Create a new game."""
    try:
        game_request = parse_new_game_request(request.get_json(silent=True))
        if game_request.difficulty is None and game_request.puzzle is None:
            return jsonify({'error': 'A difficulty or a puzzle is required'}), 400
    except MinesweeperError as error:
        return jsonify({'error': str(error)}), 400

    try:
        game_id = str(uuid.uuid4())

        async def start_workflow():
            await temporal_client.start_workflow(
                MinesweeperWorkflow.run,
                args=[game_id, game_request],
                id=game_id,
                task_queue=task_queue()
            )

            handle = temporal_client.get_workflow_handle(game_id)
            return await query_with_retry(handle, "get_game_state_query")

        game_state = asyncio.run(start_workflow())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except Exception as error:
        logger.error(f"Error creating game: {error}")
        return jsonify({'error': 'Failed to create game'}), 500


@app.route('/api/games/<game_id>', methods=['GET'])
def get_game_state(game_id):
    """Get game state."""
    try:
        async def query_game():
            handle = temporal_client.get_workflow_handle(game_id)
            return await query_with_retry(handle, "get_game_state_query")

        game_state = asyncio.run(query_game())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except Exception as error:
        logger.error(f"Error getting game state: {error}")
        return jsonify({'error': 'Game not found'}), 404


@app.route('/api/games/<game_id>/moves', methods=['POST'])
def make_move(game_id):
    """Make a move."""
    data = request.get_json(silent=True) or {}

    if not _is_int(data.get('row')) or \
       not _is_int(data.get('col')) or \
       data.get('action') not in MOVE_ACTIONS:
        return jsonify({'error': 'Invalid move request'}), 400

    move_request = MoveRequest(row=data['row'], col=data['col'], action=data['action'])

    try:
        async def execute_move():
            handle = temporal_client.get_workflow_handle(game_id)
            return await handle.execute_update(
                "make_move_update",
                move_request,
                result_type=GameState,
            )

        game_state = asyncio.run(execute_move())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except Exception as error:
        logger.error(f"Error making move: {error}")
        return jsonify({'error': 'Failed to make move'}), 500


@app.route('/api/games/<game_id>/restart', methods=['POST'])
def restart_game(game_id):
    """Restart the game, optionally with a new difficulty or puzzle."""
    try:
        game_request = parse_new_game_request(request.get_json(silent=True))
    except MinesweeperError as error:
        return jsonify({'error': str(error)}), 400

    try:
        async def execute_restart():
            handle = temporal_client.get_workflow_handle(game_id)
            return await handle.execute_update(
                "restart_game_update",
                game_request,
                result_type=GameState,
            )

        game_state = asyncio.run(execute_restart())
        return jsonify({'gameState': serialize_game_state(game_state)})

    except Exception as error:
        logger.error(f"Error restarting game: {error}")
        return jsonify({'error': 'Failed to restart game'}), 500


@app.route('/api/games/<game_id>/close', methods=['POST'])
def close_game(game_id):
    """Close the game's workflow."""
    try:
        async def execute_close():
            handle = temporal_client.get_workflow_handle(game_id)
            await handle.signal("close_game_signal")

        asyncio.run(execute_close())
        return jsonify({'closed': True})

    except Exception as error:
        logger.error(f"Error closing game: {error}")
        return jsonify({'error': 'Failed to close game'}), 500


@app.route('/api/best-times', methods=['GET'])
def best_times():
    """Best time per difficulty; an unreadable store yields an empty mapping."""
    return jsonify({'bestTimes': best_time_store().load()})


@app.route('/api/difficulties', methods=['GET'])
def difficulties():
    return jsonify({
        'difficulties': {
            key: {'rows': config.rows, 'cols': config.cols, 'mines': config.mine_count}
            for key, config in DIFFICULTIES.items()
        }
    })


@app.route('/api/puzzles', methods=['GET'])
def puzzles():
    """Built-in practice puzzles by lesson index."""
    return jsonify({
        'puzzles': [
            {'id': index, **puzzle_to_dict(puzzle)}
            for index, puzzle in enumerate(PRACTICE_PUZZLES)
            if puzzle is not None
        ]
    })


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now().isoformat()
    })


async def initialize_client():
    """Initialize Temporal client."""
    global temporal_client
    temporal_client = await get_temporal_client()
    logger.info("Connected to Temporal server")


def main():
    """Start the Flask server."""
    try:
        asyncio.run(initialize_client())

        port = server_port()
        logger.info(f"Minesweeper server running on http://localhost:{port}")
        logger.info("Make sure to start the Temporal worker in another terminal: python -m minesweeper.worker")

        app.run(host='0.0.0.0', port=port, debug=False)

    except Exception as error:
        logger.error(f"Failed to start server: {error}")
        exit(1)


if __name__ == "__main__":
    main()
