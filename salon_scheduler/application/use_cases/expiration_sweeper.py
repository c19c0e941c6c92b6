"""
Expiration Sweeper

Background loop that moves pending appointments whose confirmation hold
has lapsed to expired. Runs once on start, then every interval.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Callable

from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.domain.entities.agreement import AppointmentStatus

DEFAULT_INTERVAL_SECONDS = 3600.0

NowFn = Callable[[], datetime]


class ExpirationSweeper:
    def __init__(
        self,
        repository: AgreementRepositoryPort,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        now_fn: NowFn | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._repository = repository
        self._interval = interval_seconds
        self._now_fn = now_fn or (lambda: datetime.now(UTC))
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        """
        Expire every lapsed pending appointment.

        Each appointment is handled on its own: a failure is logged and the
        sweep moves on. Returns the number of appointments expired.
        """
        now = self._now_fn()
        self._logger.info("Checking for expired appointments...")
        lapsed = await self._repository.get_expired_pending(now)

        if not lapsed:
            self._logger.info("No expired appointments found.")
            return 0

        self._logger.info("Found expired appointments", extra={"count": len(lapsed)})

        expired_count = 0
        for agreement in lapsed:
            try:
                if not agreement.expire(now):
                    continue
                # a confirmation that landed after the query wins
                if not await self._repository.update(agreement, expected_status=AppointmentStatus.pending):
                    self._logger.info(
                        "Appointment changed before it could be expired",
                        extra={"agreement_id": agreement.id},
                    )
                    continue
                expired_count += 1
                self._logger.info(
                    "Expired appointment",
                    extra={"agreement_id": agreement.id, "email": agreement.client.email},
                )
            except Exception as e:
                self._logger.exception(
                    "Failed to expire appointment",
                    extra={"agreement_id": agreement.id, "error": str(e)},
                )

        self._logger.info("Expiration sweep finished", extra={"count": expired_count})
        return expired_count

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        stop_event = stop_event or self._stop_event
        self._logger.info("Appointment expiration sweeper is starting.", extra={"interval": self._interval})

        while not stop_event.is_set():
            try:
                await self.sweep_once()
            except Exception as e:
                self._logger.exception("Error occurred while expiring appointments.", extra={"error": str(e)})

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                continue

        self._logger.info("Appointment expiration sweeper is stopping.")

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(self._stop_event), name="expiration-sweeper")
        return self._task

    async def stop(self, timeout: float | None = None) -> None:
        """Stop scheduling new sweeps and wait for an in-flight one to finish."""
        self._stop_event.set()
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._task, timeout=timeout)
        except asyncio.TimeoutError:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        finally:
            self._task = None
