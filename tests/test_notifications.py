"""
Notification Tests

Tests validate:
- Channel publish / drain ordering and overflow
- Worker delivery, skipping recipients without a phone
- A failing dispatcher never breaks the worker
- SmsDispatcher request shape and failure handling (httpx.MockTransport)
"""

import httpx
import pytest

from bagshare.notifications import (
    MatchNotification,
    NotificationChannel,
    NotificationDispatcher,
    NotificationWorker,
    SmsDispatcher,
    format_match_notification,
    format_traveler_notification,
)


def make_event(phone="+15550009", match_id="m-1") -> MatchNotification:
    return MatchNotification(
        match_id=match_id,
        recipient_id="u-1",
        recipient_phone=phone,
        message="hello",
    )


class ExplodingDispatcher(NotificationDispatcher):
    def send(self, recipient: str, message: str) -> bool:
        raise RuntimeError("gateway down")


# ============================================================================
# CHANNEL + WORKER
# ============================================================================

class TestChannel:

    def test_drain_in_order(self):
        channel = NotificationChannel()
        channel.publish(make_event(match_id="a"))
        channel.publish(make_event(match_id="b"))

        assert [e.match_id for e in channel.drain()] == ["a", "b"]
        assert channel.pending() == 0

    def test_drain_limit(self):
        channel = NotificationChannel()
        for i in range(3):
            channel.publish(make_event(match_id=str(i)))

        assert len(channel.drain(limit=2)) == 2
        assert channel.pending() == 1

    def test_full_channel_drops(self):
        channel = NotificationChannel(maxsize=1)
        assert channel.publish(make_event())
        assert not channel.publish(make_event())


class TestWorker:

    def test_delivers_pending(self, channel, dispatcher):
        channel.publish(make_event(phone="+1"))
        channel.publish(make_event(phone="+2"))

        delivered = NotificationWorker(channel, dispatcher).run_pending()

        assert delivered == 2
        assert [r for r, _ in dispatcher.sent] == ["+1", "+2"]

    def test_skips_missing_phone(self, channel, dispatcher):
        channel.publish(make_event(phone=None))

        assert NotificationWorker(channel, dispatcher).run_pending() == 0
        assert dispatcher.sent == []

    def test_dispatcher_failure_contained(self, channel):
        channel.publish(make_event())
        channel.publish(make_event())

        assert NotificationWorker(channel, ExplodingDispatcher()).run_pending() == 0
        assert channel.pending() == 0


# ============================================================================
# SMS DISPATCHER
# ============================================================================

class TestSmsDispatcher:

    def make_dispatcher(self, handler) -> SmsDispatcher:
        return SmsDispatcher(
            account_sid="AC123",
            auth_token="secret",
            from_number="+15559999",
            base_url="https://sms.test/2010-04-01",
            transport=httpx.MockTransport(handler),
        )

    def test_posts_message(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = request.content.decode()
            seen["auth"] = request.headers.get("authorization", "")
            return httpx.Response(201, json={"sid": "SM1"})

        assert self.make_dispatcher(handler).send("+15550001", "New Match!")
        assert seen["url"] == "https://sms.test/2010-04-01/Accounts/AC123/Messages.json"
        assert "To=%2B15550001" in seen["body"]
        assert "From=%2B15559999" in seen["body"]
        assert seen["auth"].startswith("Basic ")

    def test_error_status_is_undelivered(self):
        dispatcher = self.make_dispatcher(lambda request: httpx.Response(400, text="bad number"))
        assert not dispatcher.send("+1", "hi")

    def test_transport_error_is_undelivered(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert not self.make_dispatcher(handler).send("+1", "hi")

    def test_unconfigured_sends_nothing(self):
        dispatcher = SmsDispatcher(account_sid="", auth_token="", from_number="")
        if dispatcher.is_configured:
            pytest.skip("Twilio credentials present in environment")
        assert not dispatcher.send("+1", "hi")


class TestMessageFormats:

    def test_sender_message(self):
        text = format_match_notification("JFK", "LAX")
        assert text.startswith("New Match!")
        assert "from JFK to LAX" in text

    def test_traveler_message(self):
        text = format_traveler_notification("Sam Sender", "JFK", "LAX")
        assert "Sam Sender" in text
        assert "from JFK to LAX" in text
