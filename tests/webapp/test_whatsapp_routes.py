"""Tests for the WhatsApp webhook and send routes."""

from unittest.mock import MagicMock

import pytest

from civicsim.notifications import SendResult
from civicsim.webapp.routes import whatsapp


@pytest.fixture
def whatsapp_client(app):
    client = MagicMock(is_configured=True)
    client.send_text_message.return_value = SendResult(success=True, message_id="wamid.42")
    app.extensions[whatsapp.EXTENSION_KEY] = client
    return client


def text_webhook(sender, text):
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messages": [
                                {
                                    "id": "wamid.in",
                                    "from": sender,
                                    "timestamp": "1700000000",
                                    "type": "text",
                                    "text": {"body": text},
                                }
                            ]
                        }
                    }
                ]
            }
        ],
    }


def test_verify_webhook(client):
    response = client.get(
        "/api/whatsapp/webhook",
        query_string={"hub.mode": "subscribe", "hub.verify_token": "test-verify-token", "hub.challenge": "1234"},
    )

    assert response.status_code == 200
    assert response.get_data(as_text=True) == "1234"


def test_verify_webhook_wrong_token(client):
    response = client.get(
        "/api/whatsapp/webhook",
        query_string={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1234"},
    )

    assert response.status_code == 403


def test_incoming_message_gets_reply(client, whatsapp_client):
    response = client.post("/api/whatsapp/webhook", json=text_webhook("250788123456", "help"))

    assert response.status_code == 200
    assert response.get_json()["received"] == 1
    phone, message = whatsapp_client.send_text_message.call_args.args
    assert phone == "250788123456"
    assert "I can help you with" in message


def test_send_requires_login(client):
    assert client.post("/api/whatsapp/send", json={}).status_code == 401


def test_send_achievement(auth_client, whatsapp_client):
    response = auth_client.post(
        "/api/whatsapp/send",
        json={
            "phone_number": "+250 788 123 456",
            "type": "achievement",
            "user_name": "Amina",
            "achievement_name": "First Steps",
            "achievement_description": "Done",
        },
    )

    assert response.status_code == 200
    assert response.get_json() == {"success": True, "message_id": "wamid.42"}
    phone, message = whatsapp_client.send_text_message.call_args.args
    assert phone == "250788123456"
    assert "First Steps" in message


def test_send_invalid_phone(auth_client, whatsapp_client):
    response = auth_client.post("/api/whatsapp/send", json={"phone_number": "12", "type": "custom", "message": "Hi"})

    assert response.status_code == 400


def test_send_unknown_type(auth_client, whatsapp_client):
    response = auth_client.post(
        "/api/whatsapp/send", json={"phone_number": "250788123456", "type": "poem"}
    )

    assert response.status_code == 400


def test_send_failure_is_bad_gateway(auth_client, whatsapp_client):
    whatsapp_client.send_text_message.return_value = SendResult(success=False, error="rate limited")

    response = auth_client.post(
        "/api/whatsapp/send",
        json={"phone_number": "250788123456", "type": "custom", "message": "Hello"},
    )

    assert response.status_code == 502


def test_send_missing_field(auth_client, whatsapp_client):
    response = auth_client.post(
        "/api/whatsapp/send", json={"phone_number": "250788123456", "type": "lesson_completion"}
    )

    assert response.status_code == 400
    whatsapp_client.send_text_message.assert_not_called()
