"""
Health Check Endpoint
=====================
Reports service version, store backend and notification backlog.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from bagshare import __version__
from bagshare.dependencies import get_channel, get_store
from bagshare.notifications import NotificationChannel
from bagshare.store.base import MarketStore

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("")
def health(
    store: MarketStore = Depends(get_store),
    channel: NotificationChannel = Depends(get_channel),
):
    """Does not require authentication."""
    store_ok = store.ping()
    return {
        "status": "healthy" if store_ok else "degraded",
        "api_version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {
            "store": {
                "status": "healthy" if store_ok else "error",
                "backend": type(store).__name__,
            },
            "notifications": {
                "status": "healthy",
                "pending": channel.pending(),
            },
        },
    }
