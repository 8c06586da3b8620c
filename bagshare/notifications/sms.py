"""
SMS Dispatcher (Twilio)
=======================
Sends match notifications as SMS through the Twilio Messages REST API.

Environment Variables:
- TWILIO_ACCOUNT_SID
- TWILIO_AUTH_TOKEN
- TWILIO_PHONE_NUMBER: sender number
- TWILIO_API_BASE_URL: defaults to https://api.twilio.com/2010-04-01

When any credential is missing the dispatcher logs what it would have sent
and reports the message as undelivered.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from bagshare import config

logger = logging.getLogger(__name__)


class NotificationDispatcher(ABC):
    """Delivery side channel. ``send`` must never raise."""

    @abstractmethod
    def send(self, recipient: str, message: str) -> bool:
        ...


class SmsDispatcher(NotificationDispatcher):

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.account_sid = account_sid or config.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or config.TWILIO_AUTH_TOKEN
        self.from_number = from_number or config.TWILIO_PHONE_NUMBER
        self.base_url = (base_url or config.TWILIO_API_BASE_URL).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send(self, recipient: str, message: str) -> bool:
        if not self.is_configured:
            logger.info(f"SMS not configured. Would send to {recipient}: {message}")
            return False

        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(
                    url,
                    auth=(self.account_sid, self.auth_token),
                    data={"To": recipient, "From": self.from_number, "Body": message},
                )
        except httpx.HTTPError as e:
            logger.error(f"Error sending SMS to {recipient}: {e}")
            return False

        if response.status_code >= 400:
            logger.error(
                f"Twilio rejected SMS to {recipient}: "
                f"{response.status_code} {response.text[:200]}"
            )
            return False
        return True


def format_match_notification(origin: str, destination: str) -> str:
    """Message to the sender. Travelers stay anonymous to senders."""
    return (
        f"New Match! A traveler is traveling from {origin} to {destination} "
        f"and can carry your package. Contact them through the app!"
    )


def format_traveler_notification(sender_name: str, origin: str, destination: str) -> str:
    """Message to the traveler when a sender needs their capacity."""
    return (
        f"You have a new match! {sender_name} needs to send a package from "
        f"{origin} to {destination}. Check the app for details."
    )
