import logging
import os
import sys
from datetime import date

from quizmaster.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Log to stdout and to a per-day file under settings.log_dir
    (e.g. var/logs/2024-05-01.log).
    """
    os.makedirs(settings.log_dir, exist_ok=True)
    log_file = os.path.join(settings.log_dir, f"{date.today().isoformat()}.log")

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )
    logger = logging.getLogger("quizmaster")
    logger.info(f"Logging configured, writing to {log_file}")
    return logger
