"""Interaction model - append-only contact history per client."""

from sqlalchemy import Column, Integer, DateTime, Text, Enum, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from tracker_suite.database import Base


class InteractionType(str, enum.Enum):
    """Kinds of client contact."""

    call = "call"
    email = "email"
    meeting = "meeting"
    message = "message"
    note = "note"


class Interaction(Base):
    """Immutable record of a contact event with a client."""

    __tablename__ = "interactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(InteractionType), nullable=False, index=True)
    notes = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    client = relationship("Client", back_populates="interactions")

    def __repr__(self):
        return f"<Interaction {self.type} for client {self.client_id}>"
