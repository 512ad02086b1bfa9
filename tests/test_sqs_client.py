import json
import threading
from unittest.mock import MagicMock

import pytest

from core.exceptions import DependencyIntegrityError
from integrations.sqs_client import SqsMessageQueue
from scripts import watch_queue

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/test-messages"


def _queue(sqs: MagicMock) -> SqsMessageQueue:
    return SqsMessageQueue(client=sqs, queue_url=QUEUE_URL)


@pytest.mark.asyncio
async def test_send_json_uses_compact_body() -> None:
    sqs = MagicMock()
    sqs.send_message.return_value = {"MessageId": "m-1"}

    msg_id = await _queue(sqs).send_json({"messageId": "abc", "text": "héllo"})

    assert msg_id == "m-1"
    sqs.send_message.assert_called_once_with(
        QueueUrl=QUEUE_URL,
        MessageBody='{"messageId":"abc","text":"héllo"}',
    )


@pytest.mark.asyncio
async def test_approximate_depth_is_parsed_as_int() -> None:
    sqs = MagicMock()
    sqs.get_queue_attributes.return_value = {"Attributes": {"ApproximateNumberOfMessages": "12"}}

    assert await _queue(sqs).get_approximate_depth() == 12
    sqs.get_queue_attributes.assert_called_once_with(
        QueueUrl=QUEUE_URL, AttributeNames=["ApproximateNumberOfMessages"]
    )


@pytest.mark.asyncio
async def test_missing_depth_attribute_is_integrity_error() -> None:
    sqs = MagicMock()
    sqs.get_queue_attributes.return_value = {}

    with pytest.raises(DependencyIntegrityError):
        await _queue(sqs).get_approximate_depth()


@pytest.mark.asyncio
async def test_ping_runs_off_the_event_loop_thread() -> None:
    callers = []
    sqs = MagicMock()
    sqs.get_queue_attributes.side_effect = lambda **kwargs: callers.append(threading.get_ident()) or {}

    await _queue(sqs).ping()

    assert callers and callers[0] != threading.get_ident()
    sqs.get_queue_attributes.assert_called_once_with(QueueUrl=QUEUE_URL, AttributeNames=["QueueArn"])


@pytest.mark.asyncio
async def test_ping_propagates_queue_errors() -> None:
    sqs = MagicMock()
    sqs.get_queue_attributes.side_effect = RuntimeError("queue does not exist")

    with pytest.raises(RuntimeError, match="queue does not exist"):
        await _queue(sqs).ping()


def test_receive_messages_deletes_then_yields() -> None:
    stop = threading.Event()
    body = {"messageId": "abc", "text": "hi", "url": "https://messages.example.com/messages/abc.json"}
    sqs = MagicMock()
    sqs.receive_message.side_effect = [
        {},
        {"Messages": [{"MessageId": "m-1", "ReceiptHandle": "rh-1", "Body": json.dumps(body)}]},
    ]

    received = []
    for item in _queue(sqs).receive_messages(wait_seconds=1, stop=stop):
        received.append(item)
        if item is not None:
            stop.set()

    assert received == [None, body]
    sqs.delete_message.assert_called_once_with(QueueUrl=QUEUE_URL, ReceiptHandle="rh-1")
    sqs.receive_message.assert_called_with(QueueUrl=QUEUE_URL, MaxNumberOfMessages=1, WaitTimeSeconds=1)


def test_watch_queue_prints_message_without_audio(capsys: pytest.CaptureFixture[str]) -> None:
    body = {
        "messageId": "abc",
        "text": "hi",
        "url": "https://messages.example.com/messages/abc.json",
        "audioDataBase64": "AAAA",
    }
    sqs = MagicMock()
    sqs.receive_message.side_effect = [
        {"Messages": [{"ReceiptHandle": "rh-bad", "Body": json.dumps({"text": 1})}]},
        {"Messages": [{"ReceiptHandle": "rh-1", "Body": json.dumps(body)}]},
    ]

    exit_code = watch_queue.main(["--once", "--wait-seconds", "0"], queue=_queue(sqs))

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed == {k: v for k, v in body.items() if k != "audioDataBase64"}
    assert sqs.delete_message.call_count == 2
