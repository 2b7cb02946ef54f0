from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from tracker_suite.database import Base


class ClientStatus(str, enum.Enum):
    prospect = "prospect"
    lead = "lead"
    active = "active"
    client = "client"
    inactive = "inactive"
    archived = "archived"


class Priority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class Client(Base):
    """Client record owned by a single user account."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50))
    company = Column(String(255))
    position = Column(String(255))

    status = Column(Enum(ClientStatus), nullable=False, default=ClientStatus.prospect, index=True)
    priority = Column(Enum(Priority), nullable=False, default=Priority.medium, index=True)

    category = Column(String(100))  # Enterprise, SMB, Startup, Agency
    source = Column(String(100))  # Website, Referral, Cold Call, LinkedIn
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(Text)
    last_contact_date = Column(DateTime)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="clients")
    follow_ups = relationship("FollowUp", back_populates="client", cascade="all, delete-orphan")
    interactions = relationship("Interaction", back_populates="client", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Client {self.name}>"
