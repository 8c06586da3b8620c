"""
Bagshare Store Layer

Injected repository for users, listings, matches and issue reports.
"""

import logging

from bagshare import config
from .base import MarketStore, MATCH_MUTABLE_FIELDS
from .memory import InMemoryStore
from .models import (
    IssueReport,
    Match,
    MatchStatus,
    PackageType,
    SenderListing,
    TravelerListing,
    User,
)

logger = logging.getLogger(__name__)


def create_store() -> MarketStore:
    """PostgresStore when DATABASE_URL is configured, else InMemoryStore."""
    if config.DATABASE_URL:
        from .postgres import PostgresStore
        return PostgresStore(config.DATABASE_URL)
    logger.warning("DATABASE_URL not configured, using in-memory store")
    return InMemoryStore()


__all__ = [
    "MarketStore",
    "MATCH_MUTABLE_FIELDS",
    "InMemoryStore",
    "IssueReport",
    "Match",
    "MatchStatus",
    "PackageType",
    "SenderListing",
    "TravelerListing",
    "User",
    "create_store",
]
