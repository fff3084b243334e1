"""User notifications (WhatsApp)."""

from .dispatcher import NotificationDispatcher
from .whatsapp import (
    IncomingMessage,
    NotificationType,
    PhoneValidation,
    SendResult,
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

__all__ = [
    "NotificationDispatcher",
    "WhatsAppClient",
    "NotificationType",
    "SendResult",
    "PhoneValidation",
    "IncomingMessage",
    "validate_phone_number",
    "process_incoming_message",
    "reply_for_message",
    "simulation_completion_message",
    "quiz_result_message",
    "lesson_completion_message",
    "achievement_message",
    "daily_reminder_message",
]
