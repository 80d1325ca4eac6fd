import os
import sys
import logging
from pathlib import Path
from datetime import datetime
from typing import Union

# Libraries that log heavily at INFO during model loading
NOISY_LOGGERS = ("absl", "mediapipe", "matplotlib")


def setup_logging(log_dir: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """Log to a timestamped file in ``log_dir`` and to stdout"""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_filepath = os.path.join(log_dir, f"styllo_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
        handlers = [
            logging.FileHandler(log_filepath, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    except OSError as e:
        print(f"[ERROR] Failed to create log file in {log_dir}: {e}")
        handlers = [logging.StreamHandler(sys.stdout)]

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(name)s.%(funcName)s:%(lineno)d - %(message)s',
        handlers=handlers
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger("styllo")
    logger.info(f"Logging initialized (level={logging.getLevelName(level)})")
    return logger
