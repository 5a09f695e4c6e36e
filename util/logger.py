# util/logger.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING
from util.enums import Environment

if TYPE_CHECKING:
    from config.settings import Settings


class ColoredFormatter(logging.Formatter):
    """Console-only formatter; colours the level name on a copy of the record."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[37m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


def _text_format(stage: str) -> str:
    if stage == Environment.DEV:
        return "%(asctime)s %(levelname)s %(name)s - %(message)s"
    # Non-dev lines carry the stage so shared log sinks can be filtered.
    return f"%(asctime)s %(levelname)s stage={stage} %(name)s - %(message)s"


def init_logger(cfg: "Settings") -> logging.Logger:
    """
    Idempotent logger init:
    - Always logs to stdout.
    - Writes to cfg.LOG_DIR/cfg.LOG_FILE_NAME only when cfg.LOG_TO_FILE is True.
    - Rotates file logs by size (maxBytes/backupCount from cfg).
    - Respects cfg.LOG_LEVEL.
    """
    root = logging.getLogger()
    if getattr(root, "_failure_uploader_inited", False):
        return logging.getLogger(cfg.LOGGER_NAME)

    # Base level
    level = getattr(logging, (cfg.LOG_LEVEL or "INFO").upper(), logging.INFO)
    root.setLevel(level)

    # Clear any default handlers to avoid duplicates
    for h in list(root.handlers):
        root.removeHandler(h)

    # Formatters
    text_fmt = _text_format(cfg.STAGE)
    date_fmt = "%Y-%m-%dT%H:%M:%S%z"
    plain = logging.Formatter(text_fmt, datefmt=date_fmt)
    colored = ColoredFormatter(text_fmt, datefmt=date_fmt)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(colored if cfg.STAGE == Environment.DEV else plain)
    root.addHandler(ch)

    # File handler (optional)
    if cfg.LOG_TO_FILE:
        os.makedirs(cfg.LOG_DIR, exist_ok=True)
        fh = RotatingFileHandler(
            os.path.join(cfg.LOG_DIR, cfg.LOG_FILE_NAME),
            maxBytes=cfg.LOG_MAX_BYTES,
            backupCount=cfg.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        fh.setLevel(level)
        fh.setFormatter(plain)
        root.addHandler(fh)

    # Quiet noisy libs
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

    root._failure_uploader_inited = True  # mark as initialized
    logger = logging.getLogger(cfg.LOGGER_NAME)
    logger.debug("Logger initialized", extra={"component": "bootstrap"})
    return logger
