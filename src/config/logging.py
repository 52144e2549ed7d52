import logging
import sys
from logging import StreamHandler

from src.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
    )
    # SDK clients are chatty at DEBUG
    for noisy in ("twilio.http_client", "botocore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
