"""
Scheduler module - periodic reminder, overdue and weekly-summary jobs.
"""

from arsana.scheduler.jobs import WEEKLY_SUMMARY_TEMPLATE, ScheduledNotifier
from arsana.scheduler.registry import JobRegistry, ScheduledJob, start_cron_jobs

__all__ = [
    "JobRegistry",
    "ScheduledJob",
    "ScheduledNotifier",
    "WEEKLY_SUMMARY_TEMPLATE",
    "start_cron_jobs",
]
