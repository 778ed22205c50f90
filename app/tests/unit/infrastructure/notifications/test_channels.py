"""Unit tests for notification channels and the channel factory."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from infrastructure.notifications import NotificationMessage, build_channel
from infrastructure.notifications.channels import (
    EmailChannel,
    SlackChannel,
    SMSChannel,
    WebhookChannel,
)
from infrastructure.notifications.channels.webhook import SIGNATURE_HEADER, sign_payload
from infrastructure.operations import OperationResult, OperationStatus


def make_response(status_code):
    response = requests.Response()
    response.status_code = status_code
    response._content = b""
    return response


@pytest.fixture
def message():
    return NotificationMessage(subject="API down", body="Status 503", severity="critical")


@pytest.fixture
def session():
    mock = MagicMock()
    mock.post.return_value = make_response(200)
    return mock


@pytest.mark.unit
class TestWebhookChannel:
    def test_posts_json_body(self, session, message):
        channel = WebhookChannel("https://example.com/hook", session=session)

        result = channel.send(message)

        assert result.is_success
        kwargs = session.post.call_args.kwargs
        assert json.loads(kwargs["data"])["subject"] == "API down"
        assert SIGNATURE_HEADER not in kwargs["headers"]

    def test_signs_body_with_secret(self, session, message):
        channel = WebhookChannel("https://example.com/hook", secret="s3cret", session=session)

        channel.send(message)

        kwargs = session.post.call_args.kwargs
        assert kwargs["headers"][SIGNATURE_HEADER] == sign_payload("s3cret", kwargs["data"])

    def test_sign_payload_is_hex_sha256(self):
        assert len(sign_payload("k", b"body")) == 64

    def test_server_error_is_transient(self, session, message):
        session.post.return_value = make_response(503)

        result = WebhookChannel("https://example.com/hook", session=session).send(message)

        assert result.status == OperationStatus.TRANSIENT_ERROR

    def test_timeout_is_transient(self, session, message):
        session.post.side_effect = requests.Timeout("slow")

        result = WebhookChannel("https://example.com/hook", session=session).send(message)

        assert result.error_code == "TIMEOUT"

    def test_repeated_failures_open_circuit(self, session, message):
        session.post.side_effect = requests.ConnectionError("refused")
        channel = WebhookChannel("https://example.com/dead", session=session)

        for _ in range(5):
            channel.send(message)
        result = channel.send(message)

        assert result.error_code == "CIRCUIT_OPEN"
        assert session.post.call_count == 5


@pytest.mark.unit
class TestSlackChannel:
    def test_payload(self, message):
        channel = SlackChannel("https://hooks.slack.com/services/x", channel="#ops")

        payload = channel.build_payload(message)

        assert payload == {
            "text": ":rotating_light: *API down*\nStatus 503",
            "channel": "#ops",
        }

    def test_payload_without_body_or_channel(self):
        channel = SlackChannel("https://hooks.slack.com/services/x")

        payload = channel.build_payload(NotificationMessage(subject="Up", body=""))

        assert payload == {"text": ":information_source: *Up*"}

    def test_delivers(self, session, message):
        channel = SlackChannel("https://hooks.slack.com/services/x", session=session)

        assert channel.send(message).is_success
        assert session.post.call_args.args[0] == "https://hooks.slack.com/services/x"


@pytest.mark.unit
class TestBackendChannels:
    def test_email_invokes_function(self, mock_backend, message):
        channel = EmailChannel("ops@example.com", mock_backend, "send-notification", "user-1")

        assert channel.send(message).is_success

        name, body = mock_backend.invoke_function.call_args.args
        assert name == "send-notification"
        assert body == {
            "userId": "user-1",
            "type": "monitoring",
            "title": "API down",
            "message": "Status 503",
            "channels": {"browser": False, "email": True, "sms": False},
            "data": {"severity": "critical", "recipient": "ops@example.com"},
        }

    def test_sms_collapses_newlines(self, mock_backend, message):
        SMSChannel("+33612345678", mock_backend, "send-notification", "user-1").send(message)

        body = mock_backend.invoke_function.call_args.args[1]
        assert body["message"] == "API down - Status 503"
        assert body["userId"] == "user-1"
        assert body["channels"]["sms"] is True
        assert body["channels"]["email"] is False
        assert body["data"]["recipient"] == "+33612345678"

    def test_sms_truncates_long_text(self, mock_backend):
        long_message = NotificationMessage(subject="x" * 200, body="")

        SMSChannel("+33612345678", mock_backend, "send-notification", "user-1").send(long_message)

        text = mock_backend.invoke_function.call_args.args[1]["message"]
        assert len(text) == 160
        assert text.endswith("...")

    def test_backend_failure_is_returned(self, mock_backend, message):
        mock_backend.invoke_function.return_value = OperationResult.permanent_error("bad")

        result = EmailChannel("ops@example.com", mock_backend, "fn", "user-1").send(message)

        assert result.status == OperationStatus.PERMANENT_ERROR


@pytest.mark.unit
class TestBuildChannel:
    @pytest.mark.parametrize(
        "channel_type,config,expected",
        [
            ("email", {"email": "ops@example.com"}, EmailChannel),
            ("sms", {"phone": "+33612345678"}, SMSChannel),
            ("webhook", {"url": "https://example.com/hook"}, WebhookChannel),
            ("slack", {"webhook_url": "https://hooks.slack.com/services/x"}, SlackChannel),
        ],
    )
    def test_builds_each_type(self, mock_backend, channel_type, config, expected):
        result = build_channel(channel_type, config, mock_backend, user_id="user-1")
        assert isinstance(result.data, expected)

    @pytest.mark.parametrize(
        "channel_type,config",
        [("email", {"email": "ops@example.com"}), ("sms", {"phone": "+33612345678"})],
    )
    def test_backend_channels_need_a_recipient(self, mock_backend, channel_type, config):
        result = build_channel(channel_type, config, mock_backend)
        assert result.error_code == "MISSING_RECIPIENT"

    def test_email_channel_from_factory_reaches_the_user(self, mock_backend, message):
        channel = build_channel(
            "email", {"email": "ops@example.com"}, mock_backend, user_id="user-9"
        ).data

        channel.send(message)

        body = mock_backend.invoke_function.call_args.args[1]
        assert body["userId"] == "user-9"
        assert body["title"] == "API down"
        assert body["channels"]["email"] is True

    def test_unknown_type(self, mock_backend):
        result = build_channel("pigeon", {}, mock_backend)
        assert result.error_code == "INVALID_CHANNEL_TYPE"

    def test_invalid_config(self, mock_backend):
        result = build_channel("email", {"email": "nope"}, mock_backend)
        assert result.error_code == "INVALID_CHANNEL_CONFIG"
