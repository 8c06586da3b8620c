"""
Match Lifecycle State Machine

    pending --accept--> accepted --(4 custody checkpoints)--> completed
    pending --reject--> rejected

Within ``accepted`` the custody checkpoints advance strictly in order:

    drop_off (sender) -> pick_up (traveler)
      -> destination_drop_off (traveler) -> destination_pick_up (receiver)

destination_pick_up is the only transition that also moves the status, to
``completed``.

Every transition goes through ``apply_transition``:
1. load the match (NotFound)
2. check the actor's role (AuthorizationFailed), before any state check
3. check preconditions (PreconditionFailed)
4. commit with a compare-and-set on the precondition columns, so a
   concurrent request that got there first turns into PreconditionFailed
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bagshare.shared.errors import (
    AuthorizationFailed,
    NotFound,
    PreconditionFailed,
    ValidationFailed,
)
from bagshare.store.base import MarketStore
from bagshare.store.models import IssueReport, Match, MatchStatus
from .models import MatchRole, MatchTransition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionRule:
    actor: MatchRole
    expected: Dict[str, Any]
    changes: Dict[str, Any]
    forbidden_message: str


TRANSITION_RULES: Dict[MatchTransition, TransitionRule] = {
    MatchTransition.ACCEPT: TransitionRule(
        actor=MatchRole.TRAVELER,
        expected={"status": MatchStatus.PENDING},
        changes={"status": MatchStatus.ACCEPTED},
        forbidden_message="Only the traveler can accept a match",
    ),
    MatchTransition.REJECT: TransitionRule(
        actor=MatchRole.TRAVELER,
        expected={"status": MatchStatus.PENDING},
        changes={"status": MatchStatus.REJECTED},
        forbidden_message="Only the traveler can reject a match",
    ),
    MatchTransition.DROP_OFF: TransitionRule(
        actor=MatchRole.SENDER,
        expected={
            "status": MatchStatus.ACCEPTED,
            "drop_off_completed": False,
        },
        changes={"drop_off_completed": True},
        forbidden_message="Only the sender can mark drop-off as completed",
    ),
    MatchTransition.PICK_UP: TransitionRule(
        actor=MatchRole.TRAVELER,
        expected={
            "status": MatchStatus.ACCEPTED,
            "drop_off_completed": True,
            "pick_up_completed": False,
        },
        changes={"pick_up_completed": True},
        forbidden_message="Only the traveler can mark pick-up as completed",
    ),
    MatchTransition.DESTINATION_DROP_OFF: TransitionRule(
        actor=MatchRole.TRAVELER,
        expected={
            "status": MatchStatus.ACCEPTED,
            "pick_up_completed": True,
            "destination_drop_off_completed": False,
        },
        changes={"destination_drop_off_completed": True},
        forbidden_message="Only the traveler can mark destination drop-off as completed",
    ),
    MatchTransition.DESTINATION_PICK_UP: TransitionRule(
        actor=MatchRole.RECEIVER,
        expected={
            "status": MatchStatus.ACCEPTED,
            "destination_drop_off_completed": True,
            "destination_pick_up_completed": False,
        },
        changes={
            "destination_pick_up_completed": True,
            "status": MatchStatus.COMPLETED,
        },
        forbidden_message="Only the package receiver can mark destination pick-up as completed",
    ),
}

# Checkpoints in custody order, with the message shown when one is missing
CHECKPOINTS = [
    ("drop_off_completed", "Drop-off"),
    ("pick_up_completed", "Pick-up"),
    ("destination_drop_off_completed", "Destination drop-off"),
    ("destination_pick_up_completed", "Destination pick-up"),
]
CHECKPOINT_LABELS = dict(CHECKPOINTS)


def participant_roles(match: Match, user_id: str) -> List[MatchRole]:
    roles = []
    if match.traveler_id == user_id:
        roles.append(MatchRole.TRAVELER)
    if match.sender_id == user_id:
        roles.append(MatchRole.SENDER)
    if match.receiver_id == user_id:
        roles.append(MatchRole.RECEIVER)
    return roles


def _status_of(match: Match) -> str:
    return MatchStatus(match.status).value


def _precondition_message(match: Match, rule: TransitionRule) -> str:
    for column, wanted in rule.expected.items():
        actual = getattr(match, column)
        if actual == wanted:
            continue
        if column == "status":
            return f"Match is {_status_of(match)}, expected {MatchStatus(wanted).value}"
        label = CHECKPOINT_LABELS[column]
        if wanted:
            return f"{label} must be completed first"
        return f"{label} already completed"
    return "Match changed concurrently, retry with the current state"


def get_match_or_404(store: MarketStore, match_id: str) -> Match:
    match = store.get_match(match_id)
    if match is None:
        raise NotFound("Match not found")
    return match


def apply_transition(
    store: MarketStore,
    match_id: str,
    actor_id: str,
    transition: MatchTransition,
) -> Match:
    """
    Apply one lifecycle transition on behalf of ``actor_id``.

    Raises:
        NotFound: no such match
        AuthorizationFailed: actor does not hold the role the transition needs
        PreconditionFailed: match is not in the state the transition needs
    """
    rule = TRANSITION_RULES[transition]
    match = get_match_or_404(store, match_id)

    if rule.actor not in participant_roles(match, actor_id):
        raise AuthorizationFailed(rule.forbidden_message)

    if any(getattr(match, column) != wanted for column, wanted in rule.expected.items()):
        raise PreconditionFailed(_precondition_message(match, rule))

    updated = store.update_match_if(match_id, rule.expected, rule.changes)
    if updated is None:
        # Another request advanced or changed the match since we read it
        latest = store.get_match(match_id)
        if latest is None:
            raise NotFound("Match not found")
        raise PreconditionFailed(_precondition_message(latest, rule))

    logger.info(
        f"Match {match_id}: {transition.value} by {actor_id} "
        f"(status={_status_of(updated)})"
    )
    return updated


def update_match_status(
    store: MarketStore,
    match_id: str,
    actor_id: str,
    status: str,
) -> Match:
    """
    Coarse "set status" entry point, kept for older clients.

    Maps the requested status onto the lifecycle transitions so it can never
    skip the custody checkpoints:
    - accepted / rejected run the accept / reject transitions
    - pending is only accepted as a no-op on a pending match
    - completed is only accepted as a no-op on a match that already
      completed through destination pick-up
    """
    try:
        target = MatchStatus(status)
    except ValueError:
        raise ValidationFailed("Invalid status")

    match = get_match_or_404(store, match_id)
    roles = participant_roles(match, actor_id)
    if MatchRole.TRAVELER not in roles and MatchRole.SENDER not in roles:
        raise AuthorizationFailed("Unauthorized")
    if MatchRole.TRAVELER not in roles:
        raise AuthorizationFailed(
            "Only travelers can accept or reject matches. "
            "Senders can only view match status."
        )

    if target == MatchStatus.ACCEPTED:
        return apply_transition(store, match_id, actor_id, MatchTransition.ACCEPT)
    if target == MatchStatus.REJECTED:
        return apply_transition(store, match_id, actor_id, MatchTransition.REJECT)

    if MatchStatus(match.status) == target:
        return match
    if target == MatchStatus.COMPLETED:
        raise PreconditionFailed(
            "A match completes only when the receiver confirms destination pick-up"
        )
    raise PreconditionFailed(f"Match is {_status_of(match)} and cannot return to pending")


def report_issue(
    store: MarketStore,
    match_id: str,
    actor_id: str,
    description: Optional[str],
) -> IssueReport:
    """Append an issue report to a match. Traveler only."""
    match = get_match_or_404(store, match_id)
    if match.traveler_id != actor_id:
        raise AuthorizationFailed("Only the traveler can report issues with the package")

    text = (description or "").strip()
    if not text:
        raise ValidationFailed("Description is required")

    report = store.add_issue_report(IssueReport(
        match_id=match.id,
        reported_by_id=actor_id,
        description=text,
    ))
    logger.warning(f"Issue reported on match {match.id} by traveler {actor_id}")
    return report


def list_issue_reports(store: MarketStore, match_id: str, viewer_id: str) -> List[IssueReport]:
    """Issue reports for a match, visible to any of its participants."""
    match = get_match_or_404(store, match_id)
    if not participant_roles(match, viewer_id):
        raise AuthorizationFailed("Only match participants can view issue reports")
    return store.list_issue_reports(match_id)
