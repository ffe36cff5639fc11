# teamboard/models/invitation.py
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from teamboard.config.settings import INVITATION_TOKEN_MAX_LENGTH
from teamboard.database import Base


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    token = Column(String(INVITATION_TOKEN_MAX_LENGTH), unique=True, index=True, nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    invited_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="invitations")
    invited_by = relationship("User", foreign_keys=[invited_by_id])

    def is_expired(self, now: datetime = None) -> bool:
        return self.expires_at < (now or datetime.utcnow())

    def __repr__(self):
        return f"<Invitation(id={self.id}, project_id={self.project_id}, email='{self.email}')>"
