"""Recurring scan trigger."""

from fullsetarb.scheduler.cron import ScanScheduler, SchedulerState, validate_schedule

__all__ = ["ScanScheduler", "SchedulerState", "validate_schedule"]
