"""
Notification Channel + Worker

The matching engine publishes MatchNotification events; the worker drains
them and hands each to a NotificationDispatcher. Nothing here raises into
the publisher: a full or broken channel is logged and the event dropped.
"""

import logging
import queue
from typing import List, Optional

from .models import MatchNotification
from .sms import NotificationDispatcher

logger = logging.getLogger(__name__)


class NotificationChannel:
    """Thread-safe in-process event queue."""

    def __init__(self, maxsize: int = 1000):
        self._queue: "queue.Queue[MatchNotification]" = queue.Queue(maxsize=maxsize)

    def publish(self, notification: MatchNotification) -> bool:
        try:
            self._queue.put_nowait(notification)
            return True
        except queue.Full:
            logger.error(
                f"Notification channel full, dropping notification "
                f"for match {notification.match_id}"
            )
            return False

    def drain(self, limit: Optional[int] = None) -> List[MatchNotification]:
        """Remove and return pending events (oldest first)."""
        events: List[MatchNotification] = []
        while limit is None or len(events) < limit:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events

    def pending(self) -> int:
        return self._queue.qsize()


class NotificationWorker:
    """Delivers everything currently on the channel."""

    def __init__(self, channel: NotificationChannel, dispatcher: NotificationDispatcher):
        self.channel = channel
        self.dispatcher = dispatcher

    def run_pending(self) -> int:
        """Deliver pending notifications. Returns how many were delivered."""
        delivered = 0
        for event in self.channel.drain():
            if not event.recipient_phone:
                logger.warning(
                    f"No phone on file for user {event.recipient_id}, "
                    f"skipping notification for match {event.match_id}"
                )
                continue
            try:
                if self.dispatcher.send(event.recipient_phone, event.message):
                    delivered += 1
            except Exception:
                logger.exception(f"Notification dispatch failed for match {event.match_id}")
        return delivered
