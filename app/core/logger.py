# app/core/logger.py
import logging
from core.config import settings

logger = logging.getLogger("upside-down-messages")
logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
logger.propagate = False

_console = logging.StreamHandler()
_console.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
_console.setFormatter(logging.Formatter(
    fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S%z",
))
logger.addHandler(_console)

# boto3 logs every request at DEBUG; keep it out of normal output
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
