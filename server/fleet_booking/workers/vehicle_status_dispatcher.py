"""Background delivery of best-effort vehicle status updates."""

import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..clients.interfaces import VehicleCoordinator, VehicleStatus
from ..core.observability import get_logger, metrics_collector
from .base import BaseWorker

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VehicleStatusUpdate:
    """A vehicle status change requested by a booking transition."""

    booking_id: str
    vehicle_id: str
    status: VehicleStatus
    requested_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class DeadLetter:
    """An update that could not be delivered, kept for inspection."""

    update: VehicleStatusUpdate
    reason: str
    failed_at: datetime = field(default_factory=_now)


class VehicleStatusDispatcher(BaseWorker):
    """
    Delivers vehicle status updates off the request path.

    ``submit`` never blocks: it enqueues and returns. The worker task delivers
    each update with a bounded wait. Anything that cannot be delivered (queue
    overflow, timeout, adapter failure, leftovers at shutdown) is logged,
    counted and appended to ``dead_letters``. A failed delivery never affects
    the booking transition that requested it.
    """

    def __init__(
        self,
        coordinator: VehicleCoordinator,
        timeout_seconds: float = 5.0,
        queue_size: int = 1000,
        dead_letter_size: int = 500,
        drain_seconds: float = 5.0,
    ):
        super().__init__(name="VehicleStatusDispatcher", interval_seconds=0)
        self.coordinator = coordinator
        self.timeout_seconds = timeout_seconds
        self.drain_seconds = drain_seconds
        self._queue: asyncio.Queue[VehicleStatusUpdate] = asyncio.Queue(maxsize=queue_size)
        self.dead_letters: deque[DeadLetter] = deque(maxlen=dead_letter_size)
        self.delivered_count = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, booking_id: str, vehicle_id: str, status: VehicleStatus) -> bool:
        """Queue an update; returns False if it went straight to the dead-letter sink."""
        update = VehicleStatusUpdate(booking_id=booking_id, vehicle_id=vehicle_id, status=status)
        try:
            self._queue.put_nowait(update)
        except asyncio.QueueFull:
            self._dead_letter(update, "dispatcher queue full")
            return False

        metrics_collector.set_vehicle_queue_depth(self._queue.qsize())
        logger.debug(
            "Vehicle status update queued",
            booking_id=booking_id,
            vehicle_id=vehicle_id,
            status=update.status.value,
        )
        return True

    async def process(self) -> None:
        update = await self._queue.get()
        try:
            await self.deliver(update)
        finally:
            self._queue.task_done()
            metrics_collector.set_vehicle_queue_depth(self._queue.qsize())

    async def deliver(self, update: VehicleStatusUpdate) -> bool:
        """Deliver one update within the timeout; failures are dead-lettered."""
        try:
            await asyncio.wait_for(
                self.coordinator.set_status(update.vehicle_id, update.status),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._dead_letter(update, f"timed out after {self.timeout_seconds}s")
            return False
        except asyncio.CancelledError:
            self._dead_letter(update, "service shutting down")
            raise
        except Exception as e:
            self._dead_letter(update, str(e) or e.__class__.__name__)
            return False

        self.delivered_count += 1
        logger.info(
            "Vehicle status updated",
            booking_id=update.booking_id,
            vehicle_id=update.vehicle_id,
            status=update.status.value,
        )
        return True

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait until every queued update has been handled. Returns False on timeout."""
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def stop(self) -> None:
        """Give pending updates a bounded chance to go out, then stop."""
        if self.is_running:
            drained = await self.drain(timeout=self.drain_seconds)
            if not drained:
                logger.warning(
                    "Vehicle status updates left undelivered at shutdown",
                    pending=self.pending,
                )

        await super().stop()

        while not self._queue.empty():
            update = self._queue.get_nowait()
            self._queue.task_done()
            self._dead_letter(update, "service shutting down")
        metrics_collector.set_vehicle_queue_depth(0)

    def _dead_letter(self, update: VehicleStatusUpdate, reason: str) -> None:
        self.dead_letters.append(DeadLetter(update=update, reason=reason))
        metrics_collector.record_vehicle_sync_failure(update.status.value)
        logger.error(
            "Vehicle status update failed",
            booking_id=update.booking_id,
            vehicle_id=update.vehicle_id,
            status=update.status.value,
            reason=reason,
        )
