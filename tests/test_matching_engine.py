"""
Matching Engine Tests

Tests validate:
- Route, weight, owner and lead-time compatibility on both paths
- Idempotent creation per listing pair
- Receiver carried from the sender listing
- Match notifications queued for sender and traveler
"""

from datetime import timedelta

import pytest

from bagshare.matching.engine import (
    create_match_for_pair,
    match_from_sender_listing,
    match_from_traveler_listing,
)
from bagshare.shared.errors import DuplicateMatch
from bagshare.store import Match, MatchStatus


# ============================================================================
# SENDER-TRIGGERED MATCHING
# ============================================================================

class TestSenderTriggered:
    """A new sender listing is paired with existing traveler listings."""

    def test_compatible_traveler_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        """Same route, enough capacity, far enough out -> one pending match."""
        tl = make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)

        created = match_from_sender_listing(store, sl.id)

        assert len(created) == 1
        match = created[0]
        assert match.traveler_listing_id == tl.id
        assert match.sender_listing_id == sl.id
        assert match.traveler_id == traveler.id
        assert match.sender_id == sender.id
        assert match.receiver_id == receiver.id
        assert match.status == MatchStatus.PENDING
        assert not match.drop_off_completed
        assert not match.destination_pick_up_completed

    def test_insufficient_capacity_not_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler, available_weight=4.0)
        sl = make_sender_listing(sender, receiver, package_weight=5.0)

        assert match_from_sender_listing(store, sl.id) == []

    def test_exact_capacity_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler, available_weight=5.0)
        sl = make_sender_listing(sender, receiver, package_weight=5.0)

        assert len(match_from_sender_listing(store, sl.id)) == 1

    def test_different_route_not_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler, destination_airport="SFO")
        make_traveler_listing(traveler, origin_airport="BOS")
        sl = make_sender_listing(sender, receiver)

        assert match_from_sender_listing(store, sl.id) == []

    def test_departure_inside_lead_time_not_matched(
        self, store, now, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        """Traveler departing in 12h is too soon for a new package."""
        make_traveler_listing(traveler, departure_time=now + timedelta(hours=12))
        sl = make_sender_listing(sender, receiver)

        assert match_from_sender_listing(store, sl.id, now=now) == []

    def test_own_traveler_listing_not_matched(
        self, store, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(sender)
        sl = make_sender_listing(sender, receiver)

        assert match_from_sender_listing(store, sl.id) == []

    def test_inactive_traveler_listing_not_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler, is_active=False)
        sl = make_sender_listing(sender, receiver)

        assert match_from_sender_listing(store, sl.id) == []

    def test_matches_every_compatible_traveler(
        self, store, traveler, outsider, sender, receiver,
        make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler)
        make_traveler_listing(outsider)
        sl = make_sender_listing(sender, receiver)

        created = match_from_sender_listing(store, sl.id)

        assert {m.traveler_id for m in created} == {traveler.id, outsider.id}

    def test_unknown_listing_returns_empty(self, store):
        assert match_from_sender_listing(store, "missing") == []


# ============================================================================
# TRAVELER-TRIGGERED MATCHING
# ============================================================================

class TestTravelerTriggered:
    """A new traveler listing is paired with existing sender listings."""

    def test_compatible_sender_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        sl = make_sender_listing(sender, receiver)
        tl = make_traveler_listing(traveler)

        created = match_from_traveler_listing(store, tl.id)

        assert len(created) == 1
        assert created[0].sender_listing_id == sl.id
        assert created[0].receiver_id == receiver.id

    def test_sender_posted_too_close_to_departure_not_matched(
        self, store, now, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        """Sender listing created 12h before departure does not qualify."""
        departure = now + timedelta(days=3)
        make_sender_listing(sender, receiver, created_at=departure - timedelta(hours=12))
        tl = make_traveler_listing(traveler, departure_time=departure)

        assert match_from_traveler_listing(store, tl.id) == []

    def test_heavy_package_not_matched(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_sender_listing(sender, receiver, package_weight=12.0)
        tl = make_traveler_listing(traveler, available_weight=10.0)

        assert match_from_traveler_listing(store, tl.id) == []

    def test_own_sender_listing_not_matched(
        self, store, traveler, receiver, make_traveler_listing, make_sender_listing
    ):
        make_sender_listing(traveler, receiver)
        tl = make_traveler_listing(traveler)

        assert match_from_traveler_listing(store, tl.id) == []

    def test_sender_listing_without_receiver_skipped(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        make_sender_listing(sender, receiver, receiver_id=None)
        tl = make_traveler_listing(traveler)

        assert match_from_traveler_listing(store, tl.id) == []


# ============================================================================
# IDEMPOTENCE
# ============================================================================

class TestIdempotence:
    """At most one match per (traveler listing, sender listing)."""

    def test_rerun_creates_nothing_new(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        tl = make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)

        assert len(match_from_sender_listing(store, sl.id)) == 1
        assert match_from_sender_listing(store, sl.id) == []
        assert match_from_traveler_listing(store, tl.id) == []
        assert len(store.list_matches_for_user(traveler.id)) == 1

    def test_two_senders_one_traveler(
        self, store, traveler, sender, outsider, receiver,
        make_traveler_listing, make_sender_listing
    ):
        """Two senders then one traveler, matched twice -> exactly two matches."""
        make_sender_listing(sender, receiver)
        make_sender_listing(outsider, receiver)
        tl = make_traveler_listing(traveler)

        first = match_from_traveler_listing(store, tl.id)
        second = match_from_traveler_listing(store, tl.id)

        assert len(first) == 2
        assert second == []
        assert len(store.list_matches_for_user(traveler.id)) == 2

    def test_store_rejects_duplicate_pair(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        tl = make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)
        fields = dict(
            traveler_listing_id=tl.id,
            sender_listing_id=sl.id,
            traveler_id=traveler.id,
            sender_id=sender.id,
            receiver_id=receiver.id,
        )
        store.insert_match(Match(**fields))

        with pytest.raises(DuplicateMatch):
            store.insert_match(Match(**fields))

    def test_create_for_existing_pair_returns_none(
        self, store, traveler, sender, receiver, make_traveler_listing, make_sender_listing
    ):
        tl = make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)

        assert create_match_for_pair(store, tl, sl) is not None
        assert create_match_for_pair(store, tl, sl) is None


# ============================================================================
# NOTIFICATIONS
# ============================================================================

class TestMatchNotifications:
    """Each new match queues one message for the sender and one for the traveler."""

    def test_notifications_published(
        self, store, channel, traveler, sender, receiver,
        make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)

        created = match_from_sender_listing(store, sl.id, channel=channel)
        events = channel.drain()

        assert len(events) == 2
        assert {e.recipient_id for e in events} == {sender.id, traveler.id}
        assert all(e.match_id == created[0].id for e in events)

    def test_sender_message_keeps_traveler_anonymous(
        self, store, channel, traveler, sender, receiver,
        make_traveler_listing, make_sender_listing
    ):
        make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)

        match_from_sender_listing(store, sl.id, channel=channel)
        to_sender = [e for e in channel.drain() if e.recipient_id == sender.id][0]

        assert traveler.name not in to_sender.message
        assert "JFK" in to_sender.message and "LAX" in to_sender.message
        assert to_sender.recipient_phone == sender.phone

    def test_no_notifications_for_existing_pair(
        self, store, channel, traveler, sender, receiver,
        make_traveler_listing, make_sender_listing
    ):
        tl = make_traveler_listing(traveler)
        sl = make_sender_listing(sender, receiver)
        match_from_sender_listing(store, sl.id, channel=channel)
        channel.drain()

        match_from_traveler_listing(store, tl.id, channel=channel)

        assert channel.pending() == 0
