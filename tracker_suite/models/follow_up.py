"""Follow-up model for scheduled client tasks."""

from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from tracker_suite.database import Base
from tracker_suite.models.client import Priority


class FollowUpStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    overdue = "overdue"


class FollowUp(Base):
    """Scheduled task tied to a client.

    ``status`` is stored as entered; reminder buckets are always derived
    from ``due_date``.
    """

    __tablename__ = "follow_ups"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    due_date = Column(DateTime, nullable=False, index=True)
    status = Column(Enum(FollowUpStatus), nullable=False, default=FollowUpStatus.pending, index=True)
    priority = Column(Enum(Priority), nullable=False, default=Priority.medium, index=True)
    completed_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="follow_ups")

    def __repr__(self):
        return f"<FollowUp {self.title} due {self.due_date}>"
