"""Trial lifecycle: access validation, day counting and the periodic check."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tracker_suite.config import settings
from tracker_suite.models.user import User, AccountStatus
from tracker_suite.services.admin_notification_service import AdminNotificationService
from tracker_suite.services.email_service import EmailService

logger = logging.getLogger(__name__)

TRIAL_EXPIRED_MESSAGE = (
    "Your free trial has expired. Please upgrade your account to continue using Tracker Suite."
)
ACCOUNT_CANCELLED_MESSAGE = (
    "Your account has been cancelled. Please contact support to reactivate."
)


@dataclass
class TrialValidationResult:
    is_valid: bool
    account_status: AccountStatus
    days_remaining: Optional[int] = None
    message: Optional[str] = None

    def headers(self) -> dict[str, str]:
        headers = {
            "X-Trial-Status": self.account_status.value,
            "X-Trial-Valid": "true" if self.is_valid else "false",
        }
        if self.days_remaining is not None:
            headers["X-Trial-Days-Remaining"] = str(self.days_remaining)
        return headers


def calculate_trial_end_date(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.utcnow()
    return now + timedelta(days=settings.TRIAL_DURATION_DAYS)


def is_trial_expired(trial_ends_at: datetime, now: Optional[datetime] = None) -> bool:
    return (now or datetime.utcnow()) > trial_ends_at


def get_trial_days_remaining(trial_ends_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole days left, rounded up, never negative."""
    remaining = (trial_ends_at - (now or datetime.utcnow())).total_seconds() / 86400
    return max(0, math.ceil(remaining))


def should_send_trial_warning(
    trial_ends_at: datetime, email_sent: bool, now: Optional[datetime] = None
) -> bool:
    if email_sent:
        return False
    days = get_trial_days_remaining(trial_ends_at, now)
    return 0 < days <= settings.TRIAL_WARNING_DAYS


def validate_trial_access(user: User, now: Optional[datetime] = None) -> TrialValidationResult:
    """Decide whether ``user`` may use the business API right now."""
    status = user.account_status

    if status == AccountStatus.active:
        return TrialValidationResult(is_valid=True, account_status=AccountStatus.active)

    if status == AccountStatus.cancelled:
        return TrialValidationResult(
            is_valid=False,
            account_status=AccountStatus.cancelled,
            message=ACCOUNT_CANCELLED_MESSAGE,
        )

    if status == AccountStatus.trial and not is_trial_expired(user.trial_ends_at, now):
        return TrialValidationResult(
            is_valid=True,
            account_status=AccountStatus.trial,
            days_remaining=get_trial_days_remaining(user.trial_ends_at, now),
        )

    return TrialValidationResult(
        is_valid=False,
        account_status=AccountStatus.expired,
        days_remaining=0,
        message=TRIAL_EXPIRED_MESSAGE,
    )


async def send_trial_warning(db: AsyncSession, email_service: EmailService, user: User) -> bool:
    """Email the trial warning once; the flag is only set when delivery succeeds."""
    days = get_trial_days_remaining(user.trial_ends_at)
    result = await email_service.send_trial_warning_email(user.email, user.first_name, days)
    if not result.get("success"):
        logger.warning(
            "Trial warning email not sent",
            extra={"user_id": user.id, "error": result.get("error")},
        )
        return False

    user.trial_email_sent = True
    await db.commit()
    await db.refresh(user)
    await AdminNotificationService(db).notify_trial_expiring(user, days)
    logger.info("Trial warning email sent", extra={"user_id": user.id, "days_remaining": days})
    return True


async def expire_trial(db: AsyncSession, email_service: EmailService, user: User) -> None:
    """Move a lapsed trial to ``expired``, then tell the user and the admins."""
    user.account_status = AccountStatus.expired
    await db.commit()
    await db.refresh(user)

    await AdminNotificationService(db).notify_trial_expired(user)
    result = await email_service.send_trial_expired_email(user.email, user.first_name)
    if not result.get("success"):
        logger.warning(
            "Trial expired email not sent",
            extra={"user_id": user.id, "error": result.get("error")},
        )
    logger.info("Trial expired", extra={"user_id": user.id})


async def run_trial_check(db: AsyncSession, email_service: EmailService) -> dict[str, int]:
    """Send pending trial warnings and expire lapsed trials.

    Returns:
        Dict with ``warnings_sent`` and ``trials_expired`` counts
    """
    now = datetime.utcnow()
    warning_cutoff = now + timedelta(days=settings.TRIAL_WARNING_DAYS)

    warning_result = await db.execute(
        select(User).where(
            User.account_status == AccountStatus.trial,
            User.trial_email_sent == False,  # noqa: E712
            User.trial_ends_at > now,
            User.trial_ends_at <= warning_cutoff,
        )
    )
    warnings_sent = 0
    for user in warning_result.scalars().all():
        if await send_trial_warning(db, email_service, user):
            warnings_sent += 1

    expired_result = await db.execute(
        select(User).where(
            User.account_status == AccountStatus.trial,
            User.trial_ends_at <= now,
        )
    )
    expired_users = list(expired_result.scalars().all())
    for user in expired_users:
        await expire_trial(db, email_service, user)

    logger.info(
        "Trial status check completed",
        extra={"warnings_sent": warnings_sent, "trials_expired": len(expired_users)},
    )
    return {"warnings_sent": warnings_sent, "trials_expired": len(expired_users)}
