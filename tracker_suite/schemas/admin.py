"""Admin console schemas."""
from pydantic import BaseModel, Field
from typing import Optional

from tracker_suite.models.user import UserRole, AccountStatus


class RoleUpdate(BaseModel):
    role: UserRole


class TrialUpdate(BaseModel):
    account_status: AccountStatus
    trial_days: Optional[int] = Field(None, ge=1, le=365)


class TrialCheckResponse(BaseModel):
    warnings_sent: int
    trials_expired: int
