from fastapi import APIRouter, Response, status
from sqlalchemy import select
from datetime import timedelta
import logging

from tracker_suite.api.deps import (
    DbSession,
    CurrentUser,
    TrialUser,
    SESSION_COOKIE_NAME,
    verify_password,
    get_password_hash,
    create_access_token,
)
from tracker_suite.config import settings
from tracker_suite.exceptions import ConflictError, UnauthorizedError, BusinessRuleError
from tracker_suite.models.journey import MilestoneType
from tracker_suite.models.user import User, AccountType, AccountStatus, UserRole
from tracker_suite.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    UserResponse,
    Token,
    ProfileUpdate,
    PasswordChange,
    TrialInfoResponse,
)
from tracker_suite.services.admin_notification_service import AdminNotificationService
from tracker_suite.services.journey_service import JourneyService
from tracker_suite.services.trial import calculate_trial_end_date, validate_trial_access

logger = logging.getLogger(__name__)

router = APIRouter()


def _issue_session(response: Response, user: User) -> str:
    access_token = create_access_token(
        data={"sub": str(user.id), "email": user.email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return access_token


async def _email_taken(db, email: str, exclude_user_id: int | None = None) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query)
    return result.first() is not None


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: RegisterRequest,
    response: Response,
    db: DbSession,
):
    """Register a new trial account and start its session."""
    if await _email_taken(db, user_data.email):
        raise ConflictError("User already exists")

    user = User(
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        account_type=user_data.account_type,
        company=user_data.company if user_data.account_type == AccountType.corporate else None,
        user_role=UserRole.user,
        account_status=AccountStatus.trial,
        trial_ends_at=calculate_trial_end_date(),
        trial_email_sent=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("User registered", extra={"user_id": user.id})

    await AdminNotificationService(db).notify_user_registration(user)
    await JourneyService(db).initialize_user_journey(user.id)

    access_token = _issue_session(response, user)
    return Token(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=Token)
async def login(
    response: Response,
    login_data: LoginRequest,
    db: DbSession,
):
    """Authenticate user, set the session cookie and return the token."""
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        raise UnauthorizedError("Account is inactive")

    access_token = _issue_session(response, user)
    await AdminNotificationService(db).notify_user_login(user)

    logger.info("User logged in", extra={"user_id": user.id})
    return Token(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/logout")
async def logout(response: Response):
    """Logout user by clearing session cookie."""
    response.delete_cookie(key=SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: TrialUser):
    """Get current authenticated user information."""
    return current_user


@router.get("/trial", response_model=TrialInfoResponse)
async def get_trial_info(current_user: CurrentUser):
    """Trial state for display. Not gated, so expired accounts can read it."""
    trial = validate_trial_access(current_user)
    return TrialInfoResponse(
        account_status=trial.account_status,
        is_trial_valid=trial.is_valid,
        days_remaining=trial.days_remaining,
        trial_ends_at=current_user.trial_ends_at,
        message=trial.message,
    )


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    current_user: TrialUser,
    db: DbSession,
):
    if await _email_taken(db, profile.email, exclude_user_id=current_user.id):
        raise ConflictError("Email already in use")
    if profile.account_type == AccountType.corporate and not profile.company:
        raise BusinessRuleError("Company is required for corporate users")

    current_user.email = profile.email
    current_user.first_name = profile.first_name
    current_user.last_name = profile.last_name
    current_user.account_type = profile.account_type
    current_user.company = profile.company if profile.account_type == AccountType.corporate else None
    await db.commit()

    await JourneyService(db).complete_milestone(current_user.id, MilestoneType.profile_completed)
    await db.refresh(current_user)
    return current_user


@router.put("/password")
async def change_password(
    passwords: PasswordChange,
    current_user: TrialUser,
    db: DbSession,
):
    if not verify_password(passwords.current_password, current_user.hashed_password):
        raise BusinessRuleError("Current password is incorrect")

    current_user.hashed_password = get_password_hash(passwords.new_password)
    await db.commit()

    logger.info("Password changed", extra={"user_id": current_user.id})
    return {"message": "Password updated successfully"}
