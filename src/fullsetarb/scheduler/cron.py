"""Cron-driven scan scheduler with overlap exclusion and cancellable shutdown."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any

import structlog
from croniter import croniter

log = structlog.get_logger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def validate_schedule(schedule: str) -> str:
    """Return the cron expression unchanged, or raise ValueError if it does not parse."""
    if not croniter.is_valid(schedule):
        raise ValueError(f"invalid cron expression: {schedule!r}")
    return schedule


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class ScanScheduler:
    """Runs one cycle on start, then one per cron fire.

    At most one cycle is in flight: a fire that lands while the previous cycle is
    still running is skipped and logged. Errors raised by a cycle are logged and
    never stop the schedule.
    """

    def __init__(
        self,
        run_cycle: Callable[[], Awaitable[Any]],
        schedule: str = "*/5 * * * *",
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.schedule = validate_schedule(schedule)
        self._run_cycle = run_cycle
        self._clock = clock
        self._state = SchedulerState.IDLE
        self._trigger_task: asyncio.Task[None] | None = None
        self._cycle_task: asyncio.Task[None] | None = None
        self._stopped = asyncio.Event()
        self.cycles_started = 0
        self.cycles_skipped = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_started(self) -> bool:
        return self._trigger_task is not None

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    async def start(self) -> None:
        if self._state is SchedulerState.STOPPED:
            log.warning("scheduler_stopped_cannot_start", schedule=self.schedule)
            return
        if self._trigger_task is not None:
            log.info("scheduler_already_running", schedule=self.schedule)
            return
        log.info("scheduler_starting", schedule=self.schedule)
        self.trigger()
        self._trigger_task = asyncio.create_task(self._trigger_loop())
        log.info("scheduler_started", schedule=self.schedule)

    def trigger(self) -> bool:
        """Launch a cycle now unless one is already running. Returns True if launched."""
        if self._state is SchedulerState.STOPPED:
            return False
        if self.cycle_in_flight:
            self.cycles_skipped += 1
            log.warning("cycle_skipped_overlap", schedule=self.schedule)
            return False
        self.cycles_started += 1
        self._cycle_task = asyncio.create_task(self._guarded_cycle())
        return True

    async def _guarded_cycle(self) -> None:
        self._state = SchedulerState.RUNNING
        started = time.monotonic()
        log.info("scan_started")
        try:
            await self._run_cycle()
        except asyncio.CancelledError:
            log.warning("scan_cancelled", duration_sec=round(time.monotonic() - started, 2))
            raise
        except Exception:
            log.exception("scan_failed", duration_sec=round(time.monotonic() - started, 2))
        else:
            log.info("scan_completed", duration_sec=round(time.monotonic() - started, 2))
        finally:
            if self._state is SchedulerState.RUNNING:
                self._state = SchedulerState.IDLE

    def next_fire(self, after: datetime | None = None) -> datetime:
        base = after or self._clock()
        return croniter(self.schedule, base).get_next(datetime)

    async def _trigger_loop(self) -> None:
        last = self._clock()
        while True:
            fire_at = self.next_fire(max(self._clock(), last))
            delay = (fire_at - self._clock()).total_seconds()
            if delay > 0:
                await asyncio.sleep(delay)
            last = fire_at
            self.trigger()

    async def stop(self, grace_sec: float = 10.0) -> None:
        """Cancel the trigger; give an in-flight cycle grace_sec to finish, then cancel it."""
        if self._state is SchedulerState.STOPPED:
            return
        self._state = SchedulerState.STOPPED
        if self._trigger_task is not None:
            self._trigger_task.cancel()
            await asyncio.gather(self._trigger_task, return_exceptions=True)
        task = self._cycle_task
        if task is not None and not task.done():
            log.info("waiting_for_cycle", grace_sec=grace_sec)
            try:
                await asyncio.wait_for(asyncio.shield(task), timeout=grace_sec)
            except TimeoutError:
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
        self._stopped.set()
        log.info("scheduler_stopped", cycles=self.cycles_started, skipped=self.cycles_skipped)

    async def wait_stopped(self) -> None:
        await self._stopped.wait()
