"""
Bagshare Matching Layer

Listing pairing (engine), the match lifecycle state machine and the
read-time visibility transform.
"""

from .models import MatchRole, MatchTransition, MatchView, UserSummary
from .engine import match_from_sender_listing, match_from_traveler_listing
from .lifecycle import (
    apply_transition,
    list_issue_reports,
    report_issue,
    update_match_status,
)
from .visibility import get_match_for_viewer, list_matches_for_viewer

__all__ = [
    "MatchRole",
    "MatchTransition",
    "MatchView",
    "UserSummary",
    "match_from_sender_listing",
    "match_from_traveler_listing",
    "apply_transition",
    "list_issue_reports",
    "report_issue",
    "update_match_status",
    "get_match_for_viewer",
    "list_matches_for_viewer",
]
