"""Follow-up reminder derivation.

Classifies open follow-ups into reminder buckets by calendar-day distance
from "now". Nothing here touches the database: callers pass the follow-ups
and a client lookup, so the same function serves the API and the tests.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timezone, date
from typing import Iterable, Mapping, Optional, Any
from zoneinfo import ZoneInfo

from tracker_suite.config import settings
from tracker_suite.models.follow_up import FollowUpStatus

UPCOMING_WINDOW_DAYS = 7


class ReminderBucket(str, enum.Enum):
    overdue = "overdue"
    due_today = "due_today"
    due_tomorrow = "due_tomorrow"
    upcoming = "upcoming"


@dataclass(frozen=True)
class BucketStyle:
    priority: str
    color: str
    icon: str


BUCKET_STYLES: dict[ReminderBucket, BucketStyle] = {
    ReminderBucket.overdue: BucketStyle(priority="high", color="red", icon="AlertTriangle"),
    ReminderBucket.due_today: BucketStyle(priority="high", color="orange", icon="Clock"),
    ReminderBucket.due_tomorrow: BucketStyle(priority="medium", color="yellow", icon="Calendar"),
    ReminderBucket.upcoming: BucketStyle(priority="low", color="blue", icon="Bell"),
}

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}


@dataclass(frozen=True)
class FollowUpNotification:
    id: str
    type: str
    title: str
    message: str
    follow_up_id: int
    client_id: int
    client_name: str
    due_date: datetime
    priority: str
    color: str
    icon: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "follow_up_id": self.follow_up_id,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "due_date": self.due_date,
            "priority": self.priority,
            "color": self.color,
            "icon": self.icon,
        }


def _local(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def _local_day(value: datetime, tz: ZoneInfo) -> date:
    return _local(value, tz).date()


def day_difference(due_date: datetime, now: datetime, tz: Optional[ZoneInfo] = None) -> int:
    """Whole calendar days from ``now`` to ``due_date`` in ``tz``."""
    tz = tz or ZoneInfo(settings.NOTIFICATION_TIMEZONE)
    return (_local_day(due_date, tz) - _local_day(now, tz)).days


def classify(diff_days: int) -> Optional[ReminderBucket]:
    """Bucket for a day difference, or None when outside the reminder window."""
    if diff_days < 0:
        return ReminderBucket.overdue
    if diff_days == 0:
        return ReminderBucket.due_today
    if diff_days == 1:
        return ReminderBucket.due_tomorrow
    if diff_days <= UPCOMING_WINDOW_DAYS:
        return ReminderBucket.upcoming
    return None


def _format_day(value: datetime, tz: ZoneInfo) -> str:
    return _local(value, tz).strftime("%b %d")


def _describe(bucket: ReminderBucket, diff_days: int, title: str, client_name: str,
              due_date: datetime, tz: ZoneInfo) -> tuple[str, str]:
    if bucket == ReminderBucket.overdue:
        return (
            "Overdue Follow-up",
            f'Follow-up "{title}" for {client_name} was due {_format_day(due_date, tz)}',
        )
    if bucket == ReminderBucket.due_today:
        return "Due Today", f'Follow-up "{title}" for {client_name} is due today'
    if bucket == ReminderBucket.due_tomorrow:
        return "Due Tomorrow", f'Follow-up "{title}" for {client_name} is due tomorrow'
    return (
        f"Due in {diff_days} days",
        f'Follow-up "{title}" for {client_name} is due {_format_day(due_date, tz)}',
    )


def derive_notifications(
    follow_ups: Iterable[Any],
    clients: Mapping[int, Any],
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> list[FollowUpNotification]:
    """Build reminders for open follow-ups, most urgent first.

    Args:
        follow_ups: FollowUp rows (or anything with the same attributes)
        clients: client_id -> client object with a ``name``
        now: reference time, defaults to the current UTC time
        tz: zone whose calendar days define the buckets

    Follow-ups that are completed, fall more than a week out or whose client
    is absent from ``clients`` produce no reminder.
    """
    now = now or datetime.now(timezone.utc)
    tz = tz or ZoneInfo(settings.NOTIFICATION_TIMEZONE)

    notifications = []
    for follow_up in follow_ups:
        if follow_up.status == FollowUpStatus.completed:
            continue
        client = clients.get(follow_up.client_id)
        if client is None:
            continue

        diff = day_difference(follow_up.due_date, now, tz)
        bucket = classify(diff)
        if bucket is None:
            continue

        style = BUCKET_STYLES[bucket]
        title, message = _describe(bucket, diff, follow_up.title, client.name, follow_up.due_date, tz)
        notifications.append(
            FollowUpNotification(
                id=f"{bucket.value}-{follow_up.id}",
                type=bucket.value,
                title=title,
                message=message,
                follow_up_id=follow_up.id,
                client_id=follow_up.client_id,
                client_name=client.name,
                due_date=follow_up.due_date,
                priority=style.priority,
                color=style.color,
                icon=style.icon,
            )
        )

    notifications.sort(
        key=lambda n: (-PRIORITY_RANK[n.priority], _sort_instant(n.due_date), n.follow_up_id)
    )
    return notifications


def _sort_instant(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
