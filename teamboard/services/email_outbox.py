# teamboard/services/email_outbox.py
"""
Email outbox.

Emails are written to ``outbound_emails`` in the same transaction as the
change they announce, then delivered separately. A delivery failure is
recorded on the row and retried later; it never undoes the change.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from teamboard.config import settings
from teamboard.errors import EmailDeliveryError
from teamboard.models.outbound_email import OutboundEmail, EmailStatus
from teamboard.services.email_sender import EmailSender

logger = logging.getLogger(__name__)


def enqueue(db: Session, to: str, subject: str, html: str) -> OutboundEmail:
    """Add a pending email to the caller's transaction (flushed, not committed)"""
    email = OutboundEmail(recipient=to, subject=subject, html=html, status=EmailStatus.PENDING.value)
    db.add(email)
    db.flush()
    return email


def _stale_claim_cutoff(now: datetime) -> datetime:
    return now - timedelta(seconds=settings.EMAIL_CLAIM_TIMEOUT_SECONDS)


def claim(db: Session, email_id: int, now: datetime = None) -> bool:
    """Atomically mark a row ``sending`` so only one worker delivers it.

    Pending rows can be claimed, and so can rows whose previous claim is older
    than EMAIL_CLAIM_TIMEOUT_SECONDS (the worker died mid-send). Returns False
    when another worker got there first or the row is already settled.
    """
    now = now or datetime.utcnow()
    claimed = db.query(OutboundEmail).filter(
        OutboundEmail.id == email_id,
        or_(
            OutboundEmail.status == EmailStatus.PENDING.value,
            and_(
                OutboundEmail.status == EmailStatus.SENDING.value,
                OutboundEmail.claimed_at < _stale_claim_cutoff(now),
            ),
        ),
    ).update(
        {OutboundEmail.status: EmailStatus.SENDING.value, OutboundEmail.claimed_at: now},
        synchronize_session=False,
    )
    db.commit()
    return claimed == 1


def _record_failure(email: OutboundEmail, error: str, max_attempts: int):
    email.last_error = error
    email.claimed_at = None
    if email.attempts >= max_attempts:
        email.status = EmailStatus.FAILED.value
        logger.error(f"Giving up on email {email.id} to {email.recipient} after {email.attempts} attempts: {error}")
    else:
        email.status = EmailStatus.PENDING.value
        logger.warning(f"Email {email.id} to {email.recipient} failed (attempt {email.attempts}): {error}")


def attempt_delivery(db: Session, email: OutboundEmail, sender: EmailSender, max_attempts: int = None) -> bool:
    """Claim one email, try to send it and commit the outcome on the row.

    Returns True when the email has been sent, by this call or an earlier one.
    """
    if not claim(db, email.id):
        db.refresh(email)
        return email.status == EmailStatus.SENT.value
    db.refresh(email)

    max_attempts = max_attempts or settings.EMAIL_MAX_ATTEMPTS
    email.attempts = (email.attempts or 0) + 1
    try:
        provider_id = sender.send(settings.EMAIL_FROM, email.recipient, email.subject, email.html)
    except EmailDeliveryError as e:
        _record_failure(email, e.message, max_attempts)
        db.commit()
        return False
    except Exception as e:
        logger.exception(f"Unexpected error delivering email {email.id}")
        _record_failure(email, f"{type(e).__name__}: {e}", max_attempts)
        db.commit()
        return False

    email.status = EmailStatus.SENT.value
    email.provider_id = provider_id
    email.sent_at = datetime.utcnow()
    email.claimed_at = None
    email.last_error = None
    db.commit()
    logger.info(f"Email {email.id} sent to {email.recipient} (provider id {email.provider_id})")
    return True


def deliver(session_factory: Callable[[], Session], sender: EmailSender, email_ids: Iterable[int]) -> int:
    """Deliver the given outbox entries in a fresh session; returns how many are sent"""
    ids = list(email_ids)
    if not ids:
        return 0

    db = session_factory()
    try:
        emails = db.query(OutboundEmail).filter(OutboundEmail.id.in_(ids)).all()
        sent = 0
        for email in emails:
            if attempt_delivery(db, email, sender):
                sent += 1
        return sent
    finally:
        db.close()


def retryable_ids(
    db: Session,
    limit: Optional[int] = None,
    grace_seconds: Optional[int] = None,
    now: datetime = None,
) -> List[int]:
    """Ids the retry job should pick up, oldest first.

    A never-attempted row is left to the request that enqueued it for
    ``grace_seconds``. Rows stuck in ``sending`` past the claim timeout are
    included so a crashed worker's email is not lost.
    """
    now = now or datetime.utcnow()
    if grace_seconds is None:
        grace_seconds = settings.EMAIL_RETRY_GRACE_SECONDS

    query = db.query(OutboundEmail.id).filter(
        or_(
            and_(
                OutboundEmail.status == EmailStatus.PENDING.value,
                or_(
                    OutboundEmail.attempts >= 1,
                    OutboundEmail.created_at <= now - timedelta(seconds=grace_seconds),
                ),
            ),
            and_(
                OutboundEmail.status == EmailStatus.SENDING.value,
                OutboundEmail.claimed_at < _stale_claim_cutoff(now),
            ),
        )
    ).order_by(OutboundEmail.created_at)
    if limit:
        query = query.limit(limit)
    return [row[0] for row in query.all()]


def retry_pending(
    session_factory: Callable[[], Session],
    sender: EmailSender,
    limit: int = 100,
    grace_seconds: Optional[int] = None,
) -> int:
    """Redeliver pending emails, oldest first"""
    db = session_factory()
    try:
        ids = retryable_ids(db, limit, grace_seconds)
    finally:
        db.close()

    if not ids:
        return 0
    logger.info(f"Retrying {len(ids)} pending emails")
    return deliver(session_factory, sender, ids)
