"""
Bagshare Notifications

Match-created events are published onto a NotificationChannel by the
matching engine and delivered later by a NotificationWorker, so delivery
never runs inside (or fails) the request that created the match.
"""

from .models import MatchNotification
from .channel import NotificationChannel, NotificationWorker
from .sms import (
    NotificationDispatcher,
    SmsDispatcher,
    format_match_notification,
    format_traveler_notification,
)

__all__ = [
    "MatchNotification",
    "NotificationChannel",
    "NotificationWorker",
    "NotificationDispatcher",
    "SmsDispatcher",
    "format_match_notification",
    "format_traveler_notification",
]
