"""
Shared fixtures: an in-memory store seeded with three users, listing
factories that write straight to the store, and an API client wired to the
same store with a recording notification dispatcher.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from bagshare.api_server import create_app
from bagshare.notifications import NotificationChannel, NotificationDispatcher
from bagshare.shared.auth import issue_token
from bagshare.store import InMemoryStore, SenderListing, TravelerListing, User


class RecordingDispatcher(NotificationDispatcher):
    """Collects messages instead of sending them."""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    def send(self, recipient: str, message: str) -> bool:
        self.sent.append((recipient, message))
        return True


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def traveler(store) -> User:
    return store.add_user(User(email="tina@example.com", name="Tina Traveler", phone="+15550001"))


@pytest.fixture
def sender(store) -> User:
    return store.add_user(User(email="sam@example.com", name="Sam Sender", phone="+15550002"))


@pytest.fixture
def receiver(store) -> User:
    return store.add_user(User(email="rita@example.com", name="Rita Receiver", phone="+15550003"))


@pytest.fixture
def outsider(store) -> User:
    return store.add_user(User(email="otto@example.com", name="Otto Outsider", phone="+15550004"))


@pytest.fixture
def make_traveler_listing(store, now):
    """Factory: a JFK->LAX traveler listing departing in 3 days."""
    def factory(user: User, **overrides) -> TravelerListing:
        departure = overrides.pop("departure_time", now + timedelta(days=3))
        fields = dict(
            user_id=user.id,
            origin_airport="JFK",
            destination_airport="LAX",
            flight_number="AA100",
            departure_time=departure,
            arrival_time=departure + timedelta(hours=6),
            available_weight=10.0,
            created_at=now,
        )
        fields.update(overrides)
        return store.add_traveler_listing(TravelerListing(**fields))
    return factory


@pytest.fixture
def make_sender_listing(store, now):
    """Factory: a 5kg JFK->LAX package for the given receiver."""
    def factory(user: User, receiver: User, **overrides) -> SenderListing:
        fields = dict(
            user_id=user.id,
            receiver_id=receiver.id,
            receiver_email=receiver.email,
            origin_airport="JFK",
            destination_airport="LAX",
            package_weight=5.0,
            package_type="carry-on",
            description="Books",
            created_at=now,
        )
        fields.update(overrides)
        return store.add_sender_listing(SenderListing(**fields))
    return factory


@pytest.fixture
def channel() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def client(store, channel, dispatcher) -> TestClient:
    app = create_app(store=store, channel=channel, dispatcher=dispatcher)
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Factory: bearer header for a user."""
    def factory(user: User) -> dict:
        return {"Authorization": f"Bearer {issue_token(user.id, user.email)}"}
    return factory
