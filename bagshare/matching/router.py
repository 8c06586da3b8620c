"""
Match Endpoints

GET   /api/v1/matches                                   - matches for viewer (?type=)
GET   /api/v1/matches/{id}                              - single match view
PATCH /api/v1/matches/{id}/accept                       - traveler
PATCH /api/v1/matches/{id}/reject                       - traveler
PATCH /api/v1/matches/{id}/dropoff-complete             - sender
PATCH /api/v1/matches/{id}/pickup-complete              - traveler
PATCH /api/v1/matches/{id}/destination-dropoff-complete - traveler
PATCH /api/v1/matches/{id}/destination-pickup-complete  - receiver
PATCH /api/v1/matches/{id}/update                       - coarse status update
POST  /api/v1/matches/{id}/report-issue                 - traveler
GET   /api/v1/matches/{id}/issues                       - participants

All endpoints require a bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bagshare.dependencies import get_store
from bagshare.shared.auth import Principal, require_principal
from bagshare.store.base import MarketStore
from .lifecycle import (
    apply_transition,
    list_issue_reports,
    report_issue,
    update_match_status,
)
from .models import (
    IssueReportListResponse,
    IssueReportRequest,
    IssueReportResponse,
    MatchListResponse,
    MatchResponse,
    MatchTransition,
    MatchViewResponse,
    StatusUpdateRequest,
)
from .visibility import get_match_for_viewer, list_matches_for_viewer, parse_role

router = APIRouter(
    prefix="/api/v1/matches",
    tags=["matches"],
)


@router.get("", response_model=MatchListResponse)
def list_matches(
    type: Optional[str] = Query(None, description="traveler, sender or receiver"),
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    """List the caller's open matches. Traveler identity is hidden from senders and receivers."""
    role = parse_role(type)
    return MatchListResponse(matches=list_matches_for_viewer(store, principal.user_id, role))


@router.get("/{match_id}", response_model=MatchViewResponse)
def get_match(
    match_id: str,
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    return MatchViewResponse(match=get_match_for_viewer(store, match_id, principal.user_id))


def _transition_endpoint(transition: MatchTransition):
    def endpoint(
        match_id: str,
        principal: Principal = Depends(require_principal),
        store: MarketStore = Depends(get_store),
    ) -> MatchResponse:
        return MatchResponse(
            match=apply_transition(store, match_id, principal.user_id, transition)
        )
    endpoint.__name__ = f"match_{transition.value}"
    return endpoint


TRANSITION_PATHS = {
    "accept": MatchTransition.ACCEPT,
    "reject": MatchTransition.REJECT,
    "dropoff-complete": MatchTransition.DROP_OFF,
    "pickup-complete": MatchTransition.PICK_UP,
    "destination-dropoff-complete": MatchTransition.DESTINATION_DROP_OFF,
    "destination-pickup-complete": MatchTransition.DESTINATION_PICK_UP,
}

for _path, _transition in TRANSITION_PATHS.items():
    router.add_api_route(
        f"/{{match_id}}/{_path}",
        _transition_endpoint(_transition),
        methods=["PATCH"],
        response_model=MatchResponse,
    )


@router.patch("/{match_id}/update", response_model=MatchResponse)
def update_match(
    match_id: str,
    request: StatusUpdateRequest,
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    """Coarse status update. Never bypasses the custody checkpoints."""
    return MatchResponse(
        match=update_match_status(store, match_id, principal.user_id, request.status)
    )


@router.post("/{match_id}/report-issue", response_model=IssueReportResponse, status_code=201)
def create_issue_report(
    match_id: str,
    request: IssueReportRequest,
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    return IssueReportResponse(
        issue_report=report_issue(store, match_id, principal.user_id, request.description)
    )


@router.get("/{match_id}/issues", response_model=IssueReportListResponse)
def get_issue_reports(
    match_id: str,
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    return IssueReportListResponse(
        issue_reports=list_issue_reports(store, match_id, principal.user_id)
    )
