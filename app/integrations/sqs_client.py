# app/integrations/sqs_client.py
import asyncio
import json
import threading
from typing import Any, Dict, Iterator, Optional

from core.aws_client import get_sqs_client
from core.config import settings
from core.exceptions import DependencyIntegrityError
from core.logger import logger

APPROXIMATE_DEPTH_ATTRIBUTE = "ApproximateNumberOfMessages"


class SqsMessageQueue:
    """
    Queue between the intake API and the LED strip.
    Bodies are compact JSON; the queue only guarantees at-least-once delivery.
    """

    def __init__(self, client=None, queue_url: Optional[str] = None):
        self._sqs = client or get_sqs_client()
        self.queue_url = queue_url or settings.SQS_QUEUE_URL

    async def send_json(self, payload: Dict[str, Any]) -> str:
        """
        Publish a JSON message to SQS.
        Assumes body <= 256KB, which holds for short texts with mp3 audio inline.
        """
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        logger.debug(f"SQS message body size: {len(body)} bytes")

        resp = await asyncio.to_thread(
            self._sqs.send_message,
            QueueUrl=self.queue_url,
            MessageBody=body,
        )
        msg_id = resp.get("MessageId", "")
        logger.info("SQS publish ok message_id=%s msg_id=%s", payload.get("messageId"), msg_id)
        return msg_id

    async def get_approximate_depth(self) -> int:
        """
        Point-in-time, eventually consistent backlog estimate.
        Not an exact count; two reads in a row can disagree.
        """
        resp = await asyncio.to_thread(
            self._sqs.get_queue_attributes,
            QueueUrl=self.queue_url,
            AttributeNames=[APPROXIMATE_DEPTH_ATTRIBUTE],
        )
        raw = (resp.get("Attributes") or {}).get(APPROXIMATE_DEPTH_ATTRIBUTE)
        if raw is None:
            raise DependencyIntegrityError(f"`{APPROXIMATE_DEPTH_ATTRIBUTE}` missing from queue attributes")
        depth = int(raw)
        logger.info(f"SQS approximate depth={depth}")
        return depth

    async def ping(self) -> None:
        """Raises if the queue is unreachable."""
        await asyncio.to_thread(
            self._sqs.get_queue_attributes,
            QueueUrl=self.queue_url,
            AttributeNames=["QueueArn"],
        )

    def receive_messages(
        self,
        wait_seconds: int = 10,
        stop: Optional[threading.Event] = None,
    ) -> Iterator[Optional[Dict[str, Any]]]:
        """
        Long-poll the queue one message at a time.

        Each message is deleted as soon as it is received, then parsed. Yields
        None after a poll that returned nothing so callers can show progress.
        """
        while stop is None or not stop.is_set():
            resp = self._sqs.receive_message(
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=1,
                WaitTimeSeconds=wait_seconds,
            )
            messages = resp.get("Messages") or []
            if not messages:
                yield None
                continue

            for message in messages:
                self._sqs.delete_message(
                    QueueUrl=self.queue_url,
                    ReceiptHandle=message.get("ReceiptHandle", ""),
                )
                logger.debug(f"SQS message deleted msg_id={message.get('MessageId')}")
                yield json.loads(message.get("Body") or "")
