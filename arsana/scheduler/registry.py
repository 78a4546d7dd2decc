"""
Job registry - wires the scheduled notifier into APScheduler.

The registry is built explicitly at startup and owns the scheduler's
lifecycle (start/stop). Registration problems are logged per job and never
escape, so a bad cron expression cannot take the API process down.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from arsana.config import (
    CRON_OVERDUE_INVITATIONS,
    CRON_UPCOMING_EVENTS,
    CRON_WEEKLY_SUMMARY,
    SCHEDULER_TIMEZONE,
)
from arsana.observability.logging import get_logger
from arsana.observability.telemetry import counter
from arsana.scheduler.jobs import ScheduledNotifier

logger = get_logger(__name__)

UPCOMING_EVENTS_JOB = "upcoming_events_check"
OVERDUE_INVITATIONS_JOB = "overdue_invitations_check"
WEEKLY_SUMMARY_JOB = "weekly_summary"


@dataclass(frozen=True)
class ScheduledJob:
    name: str
    cron: str
    func: Callable[[], Any]


class JobRegistry:
    """Registers the notifier's jobs on a scheduler and runs them guarded."""

    def __init__(
        self,
        notifier: ScheduledNotifier | None = None,
        scheduler: Any = None,
        timezone: str | tzinfo = SCHEDULER_TIMEZONE,
        crons: dict[str, str] | None = None,
    ) -> None:
        self.notifier = notifier or ScheduledNotifier()
        self.timezone = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        self.scheduler = (
            scheduler if scheduler is not None else BackgroundScheduler(timezone=self.timezone)
        )

        crons = {
            UPCOMING_EVENTS_JOB: CRON_UPCOMING_EVENTS,
            OVERDUE_INVITATIONS_JOB: CRON_OVERDUE_INVITATIONS,
            WEEKLY_SUMMARY_JOB: CRON_WEEKLY_SUMMARY,
            **(crons or {}),
        }
        self.jobs = [
            ScheduledJob(
                UPCOMING_EVENTS_JOB,
                crons[UPCOMING_EVENTS_JOB],
                self.notifier.check_upcoming_events,
            ),
            ScheduledJob(
                OVERDUE_INVITATIONS_JOB,
                crons[OVERDUE_INVITATIONS_JOB],
                self.notifier.check_overdue_invitations,
            ),
            ScheduledJob(
                WEEKLY_SUMMARY_JOB,
                crons[WEEKLY_SUMMARY_JOB],
                self.notifier.generate_weekly_summary,
            ),
        ]
        self.registered: list[str] = []

    def register(self) -> list[str]:
        """
        Add every job to the scheduler.

        Returns:
            Names of the jobs that were registered

        Side Effects:
            - Logs an error and bumps a counter for each job that fails to register
        """
        self.registered = []
        for job in self.jobs:
            try:
                trigger = CronTrigger.from_crontab(job.cron, timezone=self.timezone)
                self.scheduler.add_job(
                    self.run_guarded,
                    trigger=trigger,
                    args=[job],
                    id=job.name,
                    name=job.name,
                    replace_existing=True,
                )
            except Exception as e:
                logger.error("Failed to schedule %s (%s): %s", job.name, job.cron, e)
                counter("scheduler.registration_failures")
                continue

            self.registered.append(job.name)
            logger.info("Scheduled %s with cron '%s'", job.name, job.cron)

        return list(self.registered)

    def start(self) -> None:
        self.register()
        try:
            self.scheduler.start()
        except Exception as e:
            logger.error("Failed to start scheduler: %s", e)

    def stop(self) -> None:
        if not getattr(self.scheduler, "running", False):
            return
        try:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        except Exception as e:
            logger.error("Failed to stop scheduler: %s", e)

    def run_guarded(self, job: ScheduledJob) -> Any:
        """Run one job; any exception is logged and swallowed here, on the scheduler thread."""
        logger.info("Running %s...", job.name)
        try:
            return job.func()
        except Exception:
            logger.exception("Scheduled job %s failed", job.name)
            counter(f"scheduler.{job.name}.crashed")
            return None

    def run_now(self, name: str) -> Any:
        """Run a job immediately by name (admin/testing hook)."""
        for job in self.jobs:
            if job.name == name:
                return self.run_guarded(job)
        raise KeyError(f"Unknown job: {name}")


def start_cron_jobs(
    notifier: ScheduledNotifier | None = None,
    scheduler: Any = None,
) -> JobRegistry | None:
    """
    Build the registry and start scheduling.

    Never raises: startup failures are logged and None is returned.
    """
    logger.info("Starting cron jobs...")
    try:
        registry = JobRegistry(notifier=notifier, scheduler=scheduler)
        registry.start()
    except Exception as e:
        logger.error("Failed to start cron jobs: %s", e)
        return None

    logger.info("Cron jobs started successfully")
    return registry
