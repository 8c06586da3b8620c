"""Notification event models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from bagshare.store.models import new_id, utcnow


class MatchNotification(BaseModel):
    """One message to one participant about a newly created match."""
    id: str = Field(default_factory=new_id)
    match_id: str
    recipient_id: str
    recipient_phone: Optional[str] = Field(
        default=None,
        description="Destination number; None when the user has no phone on file"
    )
    message: str
    created_at: datetime = Field(default_factory=utcnow)
