# teamboard/models/outbound_email.py
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime
from teamboard.database import Base


class EmailStatus(str, enum.Enum):
    PENDING = "pending"
    SENDING = "sending"  # claimed by a worker
    SENT = "sent"
    FAILED = "failed"


class OutboundEmail(Base):
    __tablename__ = "outbound_emails"

    id = Column(Integer, primary_key=True, index=True)
    recipient = Column(String, nullable=False)
    subject = Column(String(255), nullable=False)
    html = Column(Text, nullable=False)
    status = Column(String, nullable=False, default=EmailStatus.PENDING.value, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    claimed_at = Column(DateTime, nullable=True)
    last_error = Column(Text, nullable=True)
    provider_id = Column(String, nullable=True)  # Id returned by the delivery service
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    sent_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<OutboundEmail(id={self.id}, recipient='{self.recipient}', status='{self.status}')>"
