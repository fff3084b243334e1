"""Tests for best-effort notification dispatch."""

from unittest.mock import MagicMock

import pytest

from civicsim.notifications import NotificationDispatcher, SendResult


@pytest.fixture
def client():
    client = MagicMock()
    client.is_configured = True
    client.send_text_message.return_value = SendResult(success=True, message_id="wamid.1")
    return client


def test_inline_dispatch_sends_formatted_number(client):
    dispatcher = NotificationDispatcher(client, max_workers=0)

    dispatcher.send_text("+250 788 123 456", "Hello")

    client.send_text_message.assert_called_once_with("250788123456", "Hello")


def test_missing_or_invalid_number_is_skipped(client):
    dispatcher = NotificationDispatcher(client, max_workers=0)
    assert dispatcher.send_text(None, "Hello") is None
    assert dispatcher.send_text("123", "Hello") is None
    client.send_text_message.assert_not_called()


def test_unconfigured_client_is_skipped(client):
    client.is_configured = False
    NotificationDispatcher(client, max_workers=0).send_text("250788123456", "Hello")
    client.send_text_message.assert_not_called()


def test_send_exception_is_logged_not_raised(client, caplog):
    client.send_text_message.side_effect = RuntimeError("boom")
    dispatcher = NotificationDispatcher(client, max_workers=0)

    dispatcher.send_text("250788123456", "Hello", description="test")

    assert "Notification 'test' raised" in caplog.text


def test_failed_send_is_logged(client, caplog):
    client.send_text_message.return_value = SendResult(success=False, error="rate limited")
    NotificationDispatcher(client, max_workers=0).send_text("250788123456", "Hello")
    assert "rate limited" in caplog.text


def test_background_dispatch(client):
    dispatcher = NotificationDispatcher(client, max_workers=1)
    future = dispatcher.notify_simulation_completed(
        "250788123456", "Aline", "Local Election Campaign", 155, percentage=100, badge="Civic Champion"
    )
    future.result(timeout=5)
    dispatcher.shutdown()

    message = client.send_text_message.call_args.args[1]
    assert "Local Election Campaign" in message


def test_notify_achievement(client):
    NotificationDispatcher(client, max_workers=0).notify_achievement(
        "250788123456", "Aline", "First Steps", "Complete your first simulation"
    )
    assert "First Steps" in client.send_text_message.call_args.args[1]
