"""Best-effort delivery of user notifications.

Sends run on a small thread pool so a slow or failing messaging API never
delays the request that triggered them. Every failure is logged and dropped.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from .whatsapp import (
    SendResult,
    WhatsAppClient,
    achievement_message,
    simulation_completion_message,
    validate_phone_number,
)

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fire-and-forget wrapper around a WhatsAppClient.

    Args:
        client: Client used to send messages
        max_workers: Thread pool size; 0 sends inline on the calling thread
    """

    def __init__(self, client: WhatsAppClient, max_workers: int = 2):
        self.client = client
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
            if max_workers > 0
            else None
        )

    def _submit(self, description: str, send: Callable[[], SendResult]) -> Optional[Future]:
        if self._executor is None:
            self._run(description, send)
            return None
        return self._executor.submit(self._run, description, send)

    @staticmethod
    def _run(description: str, send: Callable[[], SendResult]) -> None:
        try:
            result = send()
        except Exception:
            logger.exception(f"Notification '{description}' raised")
            return
        if result.success:
            logger.info(f"Notification '{description}' sent (id={result.message_id})")
        else:
            logger.warning(f"Notification '{description}' not sent: {result.error}")

    def send_text(self, phone_number: str | None, message: str, description: str = "custom") -> Optional[Future]:
        """Queue a text message. Missing or invalid numbers are skipped."""
        if not phone_number:
            logger.debug(f"Skipping notification '{description}': no phone number")
            return None
        phone = validate_phone_number(phone_number)
        if not phone.is_valid:
            logger.warning(f"Skipping notification '{description}': invalid phone number")
            return None
        if not self.client.is_configured:
            logger.info(f"Skipping notification '{description}': WhatsApp not configured")
            return None
        return self._submit(description, lambda: self.client.send_text_message(phone.formatted, message))

    def notify_simulation_completed(
        self,
        phone_number: str | None,
        user_name: str,
        simulation_title: str,
        score: int,
        percentage: int | None = None,
        badge: str | None = None,
    ) -> Optional[Future]:
        message = simulation_completion_message(user_name, simulation_title, score, percentage, badge)
        return self.send_text(phone_number, message, description="simulation_completion")

    def notify_achievement(
        self,
        phone_number: str | None,
        user_name: str,
        achievement_name: str,
        achievement_description: str,
    ) -> Optional[Future]:
        message = achievement_message(user_name, achievement_name, achievement_description)
        return self.send_text(phone_number, message, description="achievement")

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
