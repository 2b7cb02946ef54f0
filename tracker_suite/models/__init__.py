from tracker_suite.models.user import User
from tracker_suite.models.client import Client
from tracker_suite.models.follow_up import FollowUp
from tracker_suite.models.interaction import Interaction
from tracker_suite.models.admin_notification import AdminNotification
from tracker_suite.models.journey import UserJourneyMilestone, UserJourneyProgress

__all__ = [
    "User",
    "Client",
    "FollowUp",
    "Interaction",
    "AdminNotification",
    "UserJourneyMilestone",
    "UserJourneyProgress",
]
