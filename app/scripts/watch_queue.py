# scripts/watch_queue.py
"""
Drain the message queue and print what the LED strip would show.

Usage (from app/):
    python -m scripts.watch_queue [--once] [--wait-seconds N]

Messages are deleted as they are received, so do not run this against a
queue the strip is consuming.
"""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError

from core.logger import logger
from integrations.sqs_client import SqsMessageQueue
from schemas.messages import Message


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--once", action="store_true", help="Stop after the first message")
    parser.add_argument("--wait-seconds", type=int, default=10, help="Long-poll wait (0-20)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, queue: Optional[SqsMessageQueue] = None) -> int:
    args = _parse_args(argv)
    queue = queue or SqsMessageQueue()
    logger.info(f"Watching queue {queue.queue_url}")

    for body in queue.receive_messages(wait_seconds=args.wait_seconds):
        if body is None:
            print(".", end="", flush=True)
            continue

        try:
            message = Message.model_validate(body)
        except ValidationError as e:
            logger.warning(f"Skipping malformed queue message: {e.error_count()} errors")
            continue

        summary = {k: v for k, v in message.to_json_dict().items() if k != "audioDataBase64"}
        print(json.dumps(summary, indent=2, ensure_ascii=False), flush=True)
        if args.once:
            break

    return 0


if __name__ == "__main__":
    sys.exit(main())
