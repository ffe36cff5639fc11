# teamboard/services/scheduler.py
"""
Scheduler service for out-of-band email retries
"""

import logging
from typing import Any, Callable, Dict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from teamboard.config import settings
from teamboard.database import SessionLocal
from teamboard.services import email_outbox
from teamboard.services.email_sender import EmailSender, get_email_sender

logger = logging.getLogger(__name__)


class EmailRetryScheduler:
    """Periodically redelivers outbox entries still marked pending"""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        sender_factory: Callable[[], EmailSender] = get_email_sender,
        interval_minutes: int = None,
    ):
        self.scheduler = AsyncIOScheduler()
        self.session_factory = session_factory
        self.sender_factory = sender_factory
        self.interval_minutes = interval_minutes or settings.EMAIL_RETRY_INTERVAL_MINUTES
        self.is_running = False

    def start(self):
        """Start the scheduler"""
        if self.is_running:
            return

        # Sync job: AsyncIOScheduler runs it in the loop's thread pool
        self.scheduler.add_job(
            self.retry_pending_emails,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="retry_pending_emails",
            name="Retry Pending Emails",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info(f"Email retry scheduler started (every {self.interval_minutes} minutes)")

    def stop(self):
        """Stop the scheduler"""
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Email retry scheduler stopped")

    def retry_pending_emails(self) -> int:
        sent = email_outbox.retry_pending(self.session_factory, self.sender_factory())
        if sent:
            logger.info(f"Redelivered {sent} pending emails")
        return sent

    def get_status(self) -> Dict[str, Any]:
        jobs = []
        if self.is_running:
            for job in self.scheduler.get_jobs():
                jobs.append({
                    "id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                })
        return {"running": self.is_running, "jobs": jobs}


# Global instance
email_retry_scheduler = EmailRetryScheduler()
