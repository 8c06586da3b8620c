"""
FastAPI dependencies for the injected collaborators.

create_app() places the store, the notification channel and the worker on
``app.state``; handlers receive them through these functions, and tests
swap them by building the app with their own instances.
"""

from fastapi import Request

from bagshare.notifications import NotificationChannel, NotificationWorker
from bagshare.store.base import MarketStore


def get_store(request: Request) -> MarketStore:
    return request.app.state.store


def get_channel(request: Request) -> NotificationChannel:
    return request.app.state.notification_channel


def get_worker(request: Request) -> NotificationWorker:
    return request.app.state.notification_worker
