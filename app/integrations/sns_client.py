# app/integrations/sns_client.py
import asyncio
from typing import Optional

from core.aws_client import get_sns_client
from core.config import settings
from core.logger import logger


class SnsPublisher:
    """Broadcasts submission summaries to an SNS topic."""

    def __init__(self, client=None, topic_arn: Optional[str] = None):
        self._sns = client or get_sns_client()
        self.topic_arn = topic_arn or settings.SNS_TOPIC_ARN

    async def publish(self, message: str) -> str:
        resp = await asyncio.to_thread(
            self._sns.publish,
            TopicArn=self.topic_arn,
            Message=message,
        )
        msg_id = resp.get("MessageId", "")
        logger.info(f"SNS publish ok topic={self.topic_arn} msg_id={msg_id}")
        return msg_id
