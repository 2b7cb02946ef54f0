from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from tracker_suite.database import Base


class AccountType(str, enum.Enum):
    individual = "individual"
    corporate = "corporate"


class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"
    master_admin = "master_admin"


class AccountStatus(str, enum.Enum):
    trial = "trial"
    active = "active"
    expired = "expired"
    cancelled = "cancelled"


class User(Base):
    """Account that owns clients, follow-ups and interactions."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    account_type = Column(Enum(AccountType), nullable=False, default=AccountType.individual)
    company = Column(String(255))
    is_active = Column(Boolean, nullable=False, default=True)

    user_role = Column(Enum(UserRole), nullable=False, default=UserRole.user, index=True)

    # Trial lifecycle
    account_status = Column(
        Enum(AccountStatus), nullable=False, default=AccountStatus.trial, index=True
    )
    trial_ends_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    trial_email_sent = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    clients = relationship("Client", back_populates="owner", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_users_is_active", "is_active"),
    )

    def __repr__(self):
        return f"<User {self.email}>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.user_role in (UserRole.admin, UserRole.master_admin)
