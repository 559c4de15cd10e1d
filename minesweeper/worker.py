"""Temporal worker for Minesweeper game."""
import asyncio
import logging
from temporalio.client import Client
from temporalio.worker import Worker
from minesweeper.workflows import MinesweeperWorkflow
from minesweeper import activities
from minesweeper.config import data_dir, get_temporal_client, task_queue

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_worker(client: Client, queue: str) -> Worker:
    """Worker with the game workflow and all of its activities registered."""
    return Worker(
        client,
        task_queue=queue,
        workflows=[MinesweeperWorkflow],
        activities=[
            activities.create_game,
            activities.apply_move,
            activities.record_best_time,
        ],
    )


async def main():
    """Start the Temporal worker."""
    client = await get_temporal_client()
    worker = create_worker(client, task_queue())

    logger.info("Worker started, connected to Temporal")
    logger.info(f"Listening on task queue: {task_queue()}")
    logger.info(f"Best times stored in {data_dir()}")

    await worker.run()


if __name__ == "__main__":
    asyncio.run(main())
