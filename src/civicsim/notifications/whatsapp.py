"""WhatsApp Business (Cloud API) messaging.

Sending never raises: every call returns a SendResult, and callers treat a
failed send as something to log rather than an error.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://graph.facebook.com/v18.0"
DEFAULT_TIMEOUT = 10.0

_PHONE_STRIP_RE = re.compile(r"[\s\-+()]")
_PHONE_RE = re.compile(r"^\d{10,15}$")


class NotificationType(str, Enum):
    """Kinds of notification accepted by the send endpoint."""

    SIMULATION_COMPLETION = "simulation_completion"
    QUIZ_RESULT = "quiz_result"
    LESSON_COMPLETION = "lesson_completion"
    ACHIEVEMENT = "achievement"
    DAILY_REMINDER = "daily_reminder"
    CUSTOM = "custom"


@dataclass
class SendResult:
    """Outcome of a send attempt."""

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PhoneValidation:
    is_valid: bool
    formatted: str
    original: str


@dataclass(frozen=True)
class IncomingMessage:
    id: str
    sender: str
    text: Optional[str]
    type: str
    timestamp: Optional[str] = None


def validate_phone_number(phone_number: str) -> PhoneValidation:
    """Normalise a phone number to the digits-only international format.

    Spaces, dashes, parentheses and '+' are stripped; 10 to 15 digits must
    remain.
    """
    cleaned = _PHONE_STRIP_RE.sub("", phone_number or "")
    return PhoneValidation(
        is_valid=bool(_PHONE_RE.match(cleaned)),
        formatted=cleaned,
        original=phone_number,
    )


# =============================================================================
# Message builders
# =============================================================================


def simulation_completion_message(
    user_name: str,
    simulation_title: str,
    score: int,
    percentage: int | None = None,
    badge: str | None = None,
) -> str:
    lines = [
        f"🎯 Simulation Completed, {user_name}!",
        "",
        f"Simulation: {simulation_title}",
        f"Score: {score}" + (f" ({percentage}%)" if percentage is not None else ""),
    ]
    if badge:
        lines.append(f"Badge: {badge}")
    lines += ["", "Great decisions! Keep practising civic leadership in Rwanda. 🇷🇼"]
    return "\n".join(lines)


def quiz_result_message(user_name: str, quiz_title: str, score: int, total_questions: int) -> str:
    percentage = int(score / total_questions * 100 + 0.5) if total_questions else 0
    return (
        f"🎉 Quiz Results for {user_name}!\n\n"
        f"Quiz: {quiz_title}\n"
        f"Score: {score}/{total_questions} ({percentage}%)\n\n"
        "Great job on completing your civic education quiz! "
        "Keep learning about Rwanda's governance and democracy. 🇷🇼"
    )


def lesson_completion_message(user_name: str, lesson_title: str) -> str:
    return (
        "📚 Lesson Completed!\n\n"
        f"Congratulations {user_name}! You've successfully completed:\n"
        f'"{lesson_title}"\n\n'
        "Continue your civic education journey and explore more lessons about Rwanda! 🇷🇼"
    )


def achievement_message(user_name: str, achievement_name: str, achievement_description: str) -> str:
    return (
        "🏆 New Achievement Unlocked!\n\n"
        f"Congratulations {user_name}!\n"
        f"You've earned: {achievement_name}\n\n"
        f"{achievement_description}\n\n"
        "Keep up the excellent work in your civic education journey! 🇷🇼"
    )


def daily_reminder_message(user_name: str) -> str:
    return (
        f"🌅 Good morning {user_name}!\n\n"
        "Don't forget to continue your civic education journey today.\n"
        "Try a simulation, complete a lesson, or explore Rwanda's governance system.\n\n"
        "Every step makes you a more informed citizen! 🇷🇼"
    )


HELP_REPLY = (
    "🇷🇼 Welcome to Rwanda Civic Education!\n\n"
    "I can help you with:\n"
    "• 🎯 Simulations - Type 'simulation' to practise civic decisions\n"
    "• 🧠 Quizzes - Type 'quiz' to learn about available quizzes\n"
    "• 📚 Lessons - Type 'lesson' for educational content\n"
    "• 🏆 Achievements - Track your learning progress\n\n"
    "Start your civic education journey today!"
)


def reply_for_message(text: str | None) -> str:
    """Canned reply for an incoming text, chosen by keyword."""
    text = (text or "").lower()
    if "simulation" in text:
        return (
            "🎯 Practise real civic decisions! Run an election campaign, plan a community "
            "budget or defend citizens' rights in our interactive simulations."
        )
    if "quiz" in text:
        return (
            "🧠 Ready for a quiz? Visit our civic education app to take quizzes about "
            "Rwanda's governance, democracy, and history!"
        )
    if "lesson" in text:
        return (
            "📚 Explore our civic education lessons! Learn about Rwanda's constitution, "
            "government institutions, and democratic processes."
        )
    if "help" in text or "start" in text:
        return HELP_REPLY
    return (
        "Thank you for your message! 🇷🇼\n\n"
        "I'm here to help with your civic education journey. Type 'help' to see what I can "
        "do, or visit our app to start learning about Rwanda's governance and democracy!"
    )


# =============================================================================
# Client
# =============================================================================


class WhatsAppClient:
    """Minimal WhatsApp Cloud API client.

    Args:
        access_token: Bearer token for the Graph API
        phone_number_id: Sender phone number id
        verify_token: Token expected during webhook verification
        api_url: Graph API base URL
        timeout: Per-request timeout in seconds
        session: Optional requests session (injectable for tests)
    """

    def __init__(
        self,
        access_token: str | None = None,
        phone_number_id: str | None = None,
        verify_token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.verify_token = verify_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

        if not self.is_configured:
            logger.warning("WhatsApp credentials not configured; messages will be skipped")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "WhatsAppClient":
        """Build a client from a Flask-style config mapping."""
        return cls(
            access_token=config.get("WHATSAPP_ACCESS_TOKEN"),
            phone_number_id=config.get("WHATSAPP_PHONE_NUMBER_ID"),
            verify_token=config.get("WHATSAPP_VERIFY_TOKEN"),
            api_url=config.get("WHATSAPP_API_URL") or DEFAULT_API_URL,
            timeout=config.get("NOTIFICATION_TIMEOUT", DEFAULT_TIMEOUT),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.phone_number_id)

    def _post(self, payload: dict[str, Any]) -> SendResult:
        if not self.is_configured:
            return SendResult(success=False, error="WhatsApp credentials not configured")

        try:
            response = self.session.post(
                f"{self.api_url}/{self.phone_number_id}/messages",
                json=payload,
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"WhatsApp request failed: {e}")
            return SendResult(success=False, error=str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = (data.get("error") or {}).get("message") or response.reason
            logger.warning(f"WhatsApp API error {response.status_code}: {message}")
            return SendResult(success=False, error=f"WhatsApp API error: {message}", data=data)

        messages = data.get("messages") or [{}]
        return SendResult(success=True, message_id=messages[0].get("id"), data=data)

    def send_text_message(self, to: str, message: str) -> SendResult:
        """Send a plain text message."""
        return self._post({
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"body": message},
        })

    def send_template_message(
        self,
        to: str,
        template_name: str,
        language_code: str = "en",
        parameters: list[str] | None = None,
    ) -> SendResult:
        """Send a pre-approved template message with optional body parameters."""
        template: dict[str, Any] = {"name": template_name, "language": {"code": language_code}}
        if parameters:
            template["components"] = [{
                "type": "body",
                "parameters": [{"type": "text", "text": p} for p in parameters],
            }]
        return self._post({
            "messaging_product": "whatsapp",
            "to": to,
            "type": "template",
            "template": template,
        })

    def verify_webhook(self, mode: str | None, token: str | None, challenge: str | None) -> Optional[str]:
        """Return the challenge when the subscription request is legitimate, else None."""
        if mode == "subscribe" and self.verify_token and token == self.verify_token:
            return challenge
        return None


def process_incoming_message(body: Any) -> list[IncomingMessage]:
    """Extract messages from a webhook payload.

    Returns an empty list for payloads that carry no messages (status
    updates, other objects, malformed bodies).
    """
    if not isinstance(body, dict) or body.get("object") != "whatsapp_business_account":
        return []

    try:
        change = body["entry"][0]["changes"][0]
    except (KeyError, IndexError, TypeError):
        return []
    if change.get("field") != "messages":
        return []

    messages = []
    for msg in (change.get("value") or {}).get("messages") or []:
        messages.append(
            IncomingMessage(
                id=msg.get("id", ""),
                sender=msg.get("from", ""),
                text=(msg.get("text") or {}).get("body"),
                type=msg.get("type", ""),
                timestamp=msg.get("timestamp"),
            )
        )
    return messages
