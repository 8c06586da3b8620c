"""
Match Visibility Layer

Read-time transform applied whenever matches are returned to a viewer.
Travelers are anonymous to senders and receivers: their name, email and
phone are replaced with fixed placeholders. A viewer who is the traveler on
a match always sees real data. Nothing here writes to the store.
"""

from typing import Dict, List, Optional

from bagshare.shared.errors import AuthorizationFailed, ValidationFailed
from bagshare.store.base import MarketStore
from bagshare.store.models import Match, MatchStatus, User
from .lifecycle import get_match_or_404, participant_roles
from .models import (
    ANONYMOUS_TRAVELER_EMAIL,
    ANONYMOUS_TRAVELER_NAME,
    ANONYMOUS_TRAVELER_PHONE,
    MatchRole,
    MatchView,
    UserSummary,
)


def parse_role(value: Optional[str]) -> Optional[MatchRole]:
    """Map the ``type`` query parameter to a role filter (None = all roles)."""
    if value is None or value == "":
        return None
    try:
        return MatchRole(value)
    except ValueError:
        raise ValidationFailed("Invalid type parameter. Must be traveler, sender or receiver")


def visible_to(match: Match, viewer_id: str, role: Optional[MatchRole]) -> bool:
    """Role filter for match listings. Completed matches are never listed."""
    if match.status == MatchStatus.COMPLETED:
        return False

    as_traveler = match.traveler_id == viewer_id and match.sender_id != viewer_id
    as_sender = match.sender_id == viewer_id and match.traveler_id != viewer_id
    as_receiver = match.receiver_id == viewer_id

    if role == MatchRole.TRAVELER:
        return as_traveler
    if role == MatchRole.SENDER:
        return as_sender
    if role == MatchRole.RECEIVER:
        return as_receiver
    # Combined feed: senders only see matches a traveler has accepted
    return (
        as_traveler
        or (as_sender and match.status == MatchStatus.ACCEPTED)
        or as_receiver
    )


def summarize_user(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, name=user.name, email=user.email, phone=user.phone)


def anonymize_traveler(view: MatchView, viewer_id: str) -> MatchView:
    """Hide traveler identity from a sender or receiver viewer."""
    if view.traveler is None or view.traveler_id == viewer_id:
        return view
    if viewer_id not in (view.sender_id, view.receiver_id):
        return view
    hidden = view.traveler.model_copy(update={
        "name": ANONYMOUS_TRAVELER_NAME,
        "email": ANONYMOUS_TRAVELER_EMAIL,
        "phone": ANONYMOUS_TRAVELER_PHONE,
    })
    return view.model_copy(update={"traveler": hidden})


def build_match_view(
    store: MarketStore,
    match: Match,
    viewer_id: str,
    user_cache: Optional[Dict[str, Optional[User]]] = None,
) -> MatchView:
    """Embed participants and listings, then anonymize for the viewer."""
    cache = user_cache if user_cache is not None else {}

    def user(user_id: str) -> Optional[User]:
        if user_id not in cache:
            cache[user_id] = store.get_user(user_id)
        return cache[user_id]

    view = MatchView(
        **match.model_dump(),
        traveler=summarize_user(user(match.traveler_id)),
        sender=summarize_user(user(match.sender_id)),
        receiver=summarize_user(user(match.receiver_id)),
        traveler_listing=store.get_traveler_listing(match.traveler_listing_id),
        sender_listing=store.get_sender_listing(match.sender_listing_id),
    )
    return anonymize_traveler(view, viewer_id)


def list_matches_for_viewer(
    store: MarketStore,
    viewer_id: str,
    role: Optional[MatchRole] = None,
) -> List[MatchView]:
    """Matches the viewer takes part in, filtered by role, newest first."""
    matches = store.list_matches_for_user(viewer_id, include_completed=False)
    user_cache: Dict[str, Optional[User]] = {}
    return [
        build_match_view(store, match, viewer_id, user_cache)
        for match in matches
        if visible_to(match, viewer_id, role)
    ]


def get_match_for_viewer(store: MarketStore, match_id: str, viewer_id: str) -> MatchView:
    """Single match view for one of its participants (completed included)."""
    match = get_match_or_404(store, match_id)
    if not participant_roles(match, viewer_id):
        raise AuthorizationFailed("Only match participants can view this match")
    return build_match_view(store, match, viewer_id)
