from pydantic import BaseModel, EmailStr, Field, model_validator
from datetime import datetime
from typing import Optional

from tracker_suite.models.user import AccountType, UserRole, AccountStatus


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    account_type: AccountType = AccountType.individual
    company: Optional[str] = Field(None, max_length=255)


class RegisterRequest(UserBase):
    """Schema for self-service registration."""

    password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords_and_company(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        if self.account_type == AccountType.corporate and not self.company:
            raise ValueError("Company is required for corporate users")
        return self


class UserResponse(UserBase):
    """User as returned to the frontend; never includes the password hash."""

    id: int
    is_active: bool
    user_role: UserRole
    account_status: AccountStatus
    trial_ends_at: datetime
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=6)


class Token(BaseModel):
    """Login response. The token is also set as the ``session`` cookie."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenData(BaseModel):
    """Data encoded in JWT token."""

    user_id: Optional[int] = None
    email: Optional[str] = None


class ProfileUpdate(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    account_type: AccountType = AccountType.individual
    company: Optional[str] = Field(None, max_length=255)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class TrialInfoResponse(BaseModel):
    account_status: AccountStatus
    is_trial_valid: bool
    days_remaining: Optional[int] = None
    trial_ends_at: datetime
    message: Optional[str] = None
