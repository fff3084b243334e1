"""WhatsApp webhook and notification routes."""

import logging

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from civicsim.notifications import (
    NotificationType,
    WhatsAppClient,
    achievement_message,
    daily_reminder_message,
    lesson_completion_message,
    process_incoming_message,
    quiz_result_message,
    reply_for_message,
    simulation_completion_message,
    validate_phone_number,
)

logger = logging.getLogger(__name__)

bp = Blueprint("whatsapp", __name__, url_prefix="/api/whatsapp")

EXTENSION_KEY = "civicsim.whatsapp_client"


def get_whatsapp_client() -> WhatsAppClient:
    client = current_app.extensions.get(EXTENSION_KEY)
    if client is None:
        client = WhatsAppClient.from_config(current_app.config)
        current_app.extensions[EXTENSION_KEY] = client
    return client


def _build_message(notification_type: NotificationType, data: dict) -> str:
    """Message text for a notification; KeyError when a field is missing."""
    name = data.get("user_name") or "Citizen"
    if notification_type == NotificationType.SIMULATION_COMPLETION:
        return simulation_completion_message(
            name, data["simulation_title"], int(data["score"]), data.get("percentage"), data.get("badge")
        )
    if notification_type == NotificationType.QUIZ_RESULT:
        return quiz_result_message(name, data["quiz_title"], int(data["score"]), int(data["total_questions"]))
    if notification_type == NotificationType.LESSON_COMPLETION:
        return lesson_completion_message(name, data["lesson_title"])
    if notification_type == NotificationType.ACHIEVEMENT:
        return achievement_message(name, data["achievement_name"], data.get("achievement_description", ""))
    if notification_type == NotificationType.DAILY_REMINDER:
        return daily_reminder_message(name)
    return data["message"]


@bp.route("/webhook", methods=["GET"])
def verify():
    """Webhook subscription handshake."""
    challenge = get_whatsapp_client().verify_webhook(
        request.args.get("hub.mode"),
        request.args.get("hub.verify_token"),
        request.args.get("hub.challenge"),
    )
    if challenge is None:
        return jsonify({"error": "Verification failed"}), 403
    return challenge, 200, {"Content-Type": "text/plain"}


@bp.route("/webhook", methods=["POST"])
def webhook():
    """Reply to incoming messages. Always acknowledges with 200."""
    client = get_whatsapp_client()
    messages = process_incoming_message(request.get_json(silent=True))
    replies = 0
    for message in messages:
        logger.info(f"Incoming WhatsApp message {message.id} ({message.type})")
        if message.type != "text" or not message.sender:
            continue
        result = client.send_text_message(message.sender, reply_for_message(message.text))
        if result.success:
            replies += 1
    return jsonify({"status": "ok", "received": len(messages), "replies": replies})


@bp.route("/send", methods=["POST"])
@login_required
def send():
    """Send a notification.

    Body: {"phone_number": str, "type": NotificationType, ...type-specific fields}
    """
    data = request.get_json(silent=True) or {}
    phone_number = data.get("phone_number")
    if not phone_number:
        return jsonify({"error": "phone_number is required."}), 400

    phone = validate_phone_number(phone_number)
    if not phone.is_valid:
        return jsonify({"error": "Invalid phone number format."}), 400

    try:
        notification_type = NotificationType(data.get("type", NotificationType.CUSTOM.value))
    except ValueError:
        return jsonify({
            "error": "Unknown notification type.",
            "types": [t.value for t in NotificationType],
        }), 400

    try:
        message = _build_message(notification_type, data)
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"Missing or invalid field for {notification_type.value}: {e}"}), 400

    result = get_whatsapp_client().send_text_message(phone.formatted, message)
    if not result.success:
        return jsonify({"success": False, "error": result.error}), 502
    return jsonify({"success": True, "message_id": result.message_id})
