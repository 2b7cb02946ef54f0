"""
FastAPI Dependencies

Provides dependency injection for database sessions, authentication,
trial gating and the email service.

SECURITY NOTES:
- JWT payloads are never logged
- The ``session`` cookie set at login is the primary auth method
- A Bearer header is accepted for API clients and tests
"""

from typing import Annotated
from fastapi import Depends, Cookie, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from jose import JWTError, jwt
import bcrypt
from datetime import datetime, timedelta
import logging

from tracker_suite.database import get_db
from tracker_suite.config import settings
from tracker_suite.exceptions import UnauthorizedError, ForbiddenError, TrialExpiredError
from tracker_suite.models.user import User, AccountStatus
from tracker_suite.schemas.auth import TokenData
from tracker_suite.services.email_service import EmailService, get_email_service
from tracker_suite.services.trial import (
    validate_trial_access,
    should_send_trial_warning,
    send_trial_warning,
    expire_trial,
)

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session"

# HTTP Bearer for JWT
security = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
    session_token: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> User:
    """
    Resolve the user for this request from the session cookie or a Bearer token.

    SECURITY:
    - JWT payloads are NOT logged to prevent credential leakage
    - The error never says which auth method was tried
    """
    token = None
    auth_method = None

    if credentials:
        token = credentials.credentials
        auth_method = "bearer"
    elif session_token:
        token = session_token
        auth_method = "cookie"

    if not token:
        raise UnauthorizedError()

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        sub = payload.get("sub")
        email: str = payload.get("email")
        if sub is None:
            raise UnauthorizedError("Could not validate credentials")
        token_data = TokenData(user_id=int(sub), email=email)
    except JWTError:
        logger.warning("JWT validation failed", extra={"auth_method": auth_method})
        raise UnauthorizedError("Could not validate credentials")
    except ValueError:
        logger.warning("Invalid token format", extra={"auth_method": auth_method})
        raise UnauthorizedError("Could not validate credentials")

    result = await db.execute(select(User).where(User.id == token_data.user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    if not user.is_active:
        raise ForbiddenError("User account is disabled")

    logger.debug(
        "User authenticated",
        extra={"user_id": user.id, "auth_method": auth_method}
    )

    return user


# Type aliases for dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]


async def get_trial_user(
    current_user: CurrentUser,
    db: DbSession,
    response: Response,
    email_service: EmailServiceDep,
) -> User:
    """
    Gate business routes on trial/account status.

    Adds ``X-Trial-*`` headers to every gated response. A trial found to have
    lapsed is moved to ``expired`` on the spot.
    """
    trial = validate_trial_access(current_user)

    if not trial.is_valid:
        if (
            current_user.account_status == AccountStatus.trial
            and trial.account_status == AccountStatus.expired
        ):
            await expire_trial(db, email_service, current_user)
        raise TrialExpiredError(
            trial.message,
            account_status=trial.account_status.value,
            headers=trial.headers(),
        )

    if (
        trial.account_status == AccountStatus.trial
        and email_service.is_configured
        and should_send_trial_warning(current_user.trial_ends_at, current_user.trial_email_sent)
    ):
        await send_trial_warning(db, email_service, current_user)

    response.headers.update(trial.headers())
    return current_user


TrialUser = Annotated[User, Depends(get_trial_user)]
