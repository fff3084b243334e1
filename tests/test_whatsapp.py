"""Tests for the WhatsApp client (HTTP is mocked)."""

from unittest.mock import MagicMock

import pytest
import requests

from civicsim.notifications import (
    NotificationType,
    WhatsAppClient,
    achievement_message,
    process_incoming_message,
    quiz_result_message,
    reply_for_message,
    simulation_completion_message,
    validate_phone_number,
)


def make_response(status_code=200, payload=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return WhatsAppClient(
        access_token="token",
        phone_number_id="12345",
        verify_token="verify-me",
        api_url="https://graph.example.com/v18.0/",
        timeout=3,
        session=session,
    )


class TestPhoneValidation:
    @pytest.mark.parametrize("number,formatted", [
        ("+250 788 123 456", "250788123456"),
        ("(250) 788-123-456", "250788123456"),
    ])
    def test_valid_numbers_are_normalised(self, number, formatted):
        result = validate_phone_number(number)
        assert result.is_valid
        assert result.formatted == formatted

    @pytest.mark.parametrize("number", ["12345", "1" * 16, "250-abc-123456", ""])
    def test_invalid_numbers(self, number):
        assert not validate_phone_number(number).is_valid


class TestMessages:
    def test_simulation_completion_message(self):
        message = simulation_completion_message("Aline", "Local Election Campaign", 155, 100, "Civic Champion")
        assert "Aline" in message
        assert "Score: 155 (100%)" in message
        assert "Badge: Civic Champion" in message

    def test_quiz_result_percentage(self):
        assert "(67%)" in quiz_result_message("Aline", "Constitution", 2, 3)

    def test_achievement_message(self):
        assert "First Steps" in achievement_message("Aline", "First Steps", "Complete your first simulation")

    @pytest.mark.parametrize("text,keyword", [
        ("Tell me about SIMULATION", "simulations"),
        ("quiz please", "quiz"),
        ("any lesson?", "lessons"),
        ("help", "I can help you with"),
        ("hello", "Type 'help'"),
    ])
    def test_replies_by_keyword(self, text, keyword):
        assert keyword in reply_for_message(text)

    def test_notification_types(self):
        assert NotificationType("simulation_completion") == NotificationType.SIMULATION_COMPLETION
        with pytest.raises(ValueError):
            NotificationType("spam")


class TestClient:
    def test_send_text_message(self, client, session):
        session.post.return_value = make_response(payload={"messages": [{"id": "wamid.1"}]})

        result = client.send_text_message("250788123456", "Hi")

        assert result.success
        assert result.message_id == "wamid.1"
        args, kwargs = session.post.call_args
        assert args[0] == "https://graph.example.com/v18.0/12345/messages"
        assert kwargs["timeout"] == 3
        assert kwargs["headers"]["Authorization"] == "Bearer token"
        assert kwargs["json"]["text"] == {"body": "Hi"}

    def test_send_template_message(self, client, session):
        session.post.return_value = make_response(payload={"messages": [{"id": "wamid.2"}]})

        client.send_template_message("250788123456", "reminder", parameters=["Aline"])

        template = session.post.call_args.kwargs["json"]["template"]
        assert template["name"] == "reminder"
        assert template["components"][0]["parameters"] == [{"type": "text", "text": "Aline"}]

    def test_api_error_returns_failure(self, client, session):
        session.post.return_value = make_response(
            status_code=400, payload={"error": {"message": "Invalid recipient"}}, reason="Bad Request"
        )
        result = client.send_text_message("250788123456", "Hi")
        assert not result.success
        assert "Invalid recipient" in result.error

    def test_network_error_returns_failure(self, client, session):
        session.post.side_effect = requests.Timeout("timed out")
        result = client.send_text_message("250788123456", "Hi")
        assert not result.success
        assert "timed out" in result.error

    def test_unconfigured_client_skips_http(self, session):
        client = WhatsAppClient(session=session)
        result = client.send_text_message("250788123456", "Hi")
        assert not result.success
        session.post.assert_not_called()

    def test_from_config(self):
        client = WhatsAppClient.from_config({
            "WHATSAPP_ACCESS_TOKEN": "t",
            "WHATSAPP_PHONE_NUMBER_ID": "p",
            "NOTIFICATION_TIMEOUT": 5,
        })
        assert client.is_configured
        assert client.timeout == 5

    def test_verify_webhook(self, client):
        assert client.verify_webhook("subscribe", "verify-me", "challenge-1") == "challenge-1"
        assert client.verify_webhook("subscribe", "wrong", "challenge-1") is None
        assert client.verify_webhook("unsubscribe", "verify-me", "challenge-1") is None


class TestIncomingMessages:
    def test_extracts_text_messages(self):
        body = {
            "object": "whatsapp_business_account",
            "entry": [{
                "changes": [{
                    "field": "messages",
                    "value": {"messages": [
                        {"id": "m1", "from": "250788123456", "type": "text", "text": {"body": "help"}},
                    ]},
                }],
            }],
        }
        messages = process_incoming_message(body)
        assert len(messages) == 1
        assert messages[0].sender == "250788123456"
        assert messages[0].text == "help"

    @pytest.mark.parametrize("body", [None, {}, {"object": "page"}, {"object": "whatsapp_business_account", "entry": []}])
    def test_ignores_other_payloads(self, body):
        assert process_incoming_message(body) == []
