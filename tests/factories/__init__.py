"""
Test factories for generating realistic test data.

Uses factory_boy for declarative test data generation. Every factory
builds a plain dict shaped like the matching API request body.
"""

from .user import UserFactory, CorporateUserFactory
from .client import ClientFactory, LeadClientFactory, HighPriorityClientFactory
from .follow_up import (
    FollowUpFactory,
    OverdueFollowUpFactory,
    DueTomorrowFollowUpFactory,
    CompletedFollowUpFactory,
)
from .admin_notification import (
    AdminNotificationFactory,
    SystemAlertFactory,
    CriticalNotificationFactory,
)

__all__ = [
    "UserFactory",
    "CorporateUserFactory",
    "ClientFactory",
    "LeadClientFactory",
    "HighPriorityClientFactory",
    # Follow-ups
    "FollowUpFactory",
    "OverdueFollowUpFactory",
    "DueTomorrowFollowUpFactory",
    "CompletedFollowUpFactory",
    # Admin notifications
    "AdminNotificationFactory",
    "SystemAlertFactory",
    "CriticalNotificationFactory",
]
