# services/notification_service.py
"""
Administrator notification for every structurally valid submission.

Two channels exist: an SMS carrying just the submitted text, or an SNS
broadcast of the whole response. Binary audio is stripped from SNS payloads.

Whether a notification failure fails the request is a deployment decision
(NOTIFICATION_FAILURE_MODE). By the time we notify, an accepted message is
already stored and queued.
"""
import json
from typing import Any, Optional

from core.config import settings
from core.exceptions import ConfigurationError
from core.logger import logger
from integrations.sns_client import SnsPublisher
from integrations.twilio_client import TwilioSmsClient
from schemas.messages import MessageRequest, MessageResponse

STRIPPED_FIELDS = frozenset({"audioDataBase64"})


def strip_binary_fields(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: strip_binary_fields(v) for k, v in value.items() if k not in STRIPPED_FIELDS}
    if isinstance(value, list):
        return [strip_binary_fields(v) for v in value]
    return value


def build_broadcast(response: MessageResponse) -> str:
    return json.dumps(strip_binary_fields(response.to_json_dict()), indent="\t", ensure_ascii=False)


class NotificationService:
    def __init__(
        self,
        channel: str,
        failure_mode: str = "raise",
        sms_client: Optional[TwilioSmsClient] = None,
        sns_publisher: Optional[SnsPublisher] = None,
    ):
        if channel not in ("sms", "sns", "none"):
            raise ConfigurationError(f"Unknown notification channel: {channel}")
        if channel == "sms" and sms_client is None:
            raise ConfigurationError("SMS notification channel needs an SMS client")
        if channel == "sns" and sns_publisher is None:
            raise ConfigurationError("SNS notification channel needs an SNS publisher")
        if failure_mode not in ("raise", "log"):
            raise ConfigurationError(f"Unknown notification failure mode: {failure_mode}")

        self.channel = channel
        self.failure_mode = failure_mode
        self._sms = sms_client
        self._sns = sns_publisher

    async def notify(self, request: MessageRequest, response: MessageResponse) -> None:
        if self.channel == "none":
            return

        try:
            if self.channel == "sms":
                await self._sms.send_sms(request.text)
            else:
                await self._sns.publish(build_broadcast(response))
        except Exception:
            if self.failure_mode == "raise":
                raise
            logger.exception(f"Notification via {self.channel} failed; returning response anyway")


def build_notification_service() -> NotificationService:
    channel = settings.NOTIFICATION_CHANNEL
    return NotificationService(
        channel=channel,
        failure_mode=settings.NOTIFICATION_FAILURE_MODE,
        sms_client=TwilioSmsClient() if channel == "sms" else None,
        sns_publisher=SnsPublisher() if channel == "sns" else None,
    )
