"""Worker manager for coordinating background tasks."""

import asyncio
import logging
from typing import Dict

from .base import BaseWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manages background workers for the application.

    Coordinates starting, stopping, and monitoring of all background workers.
    Workers are registered by the application lifespan once their
    collaborators exist.
    """

    def __init__(self):
        """Initialize the worker manager."""
        self.workers: Dict[str, BaseWorker] = {}

    def register(self, name: str, worker: BaseWorker) -> BaseWorker:
        """Add a worker to be started and stopped with the others."""
        if name in self.workers:
            raise ValueError(f"Worker {name} is already registered")
        self.workers[name] = worker
        return worker

    async def start_all(self) -> None:
        """Start all workers."""
        logger.info("Starting all workers")

        for name, worker in self.workers.items():
            await worker.start()
            logger.info(f"Started worker: {name}")

        logger.info(f"Started {len(self.workers)} workers")

    async def stop_all(self) -> None:
        """Stop all workers gracefully."""
        logger.info("Stopping all workers")

        results = await asyncio.gather(
            *(worker.stop() for worker in self.workers.values()),
            return_exceptions=True,
        )

        for name, result in zip(self.workers.keys(), results):
            if isinstance(result, Exception):
                logger.error(f"Error stopping worker {name}: {result!s}")
            else:
                logger.info(f"Stopped worker: {name}")

        logger.info("All workers stopped")

    def get_worker(self, name: str) -> BaseWorker:
        """
        Get a specific worker by name.

        Raises:
            KeyError: If worker not found
        """
        return self.workers[name]

    def get_worker_status(self) -> Dict[str, bool]:
        """Map worker names to their running status."""
        return {name: worker.is_running for name, worker in self.workers.items()}
