import logging
import sys
from logging.handlers import RotatingFileHandler

from . import settings

CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood DEBUG output during a sync run.
NOISY_LOGGERS = ("urllib3", "requests")


def setup_logger(
    name: str | None = None,
    log_level: int | str | None = None,
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Configures a logger (the root logger by default) for a sync run.

    The console gets bare messages at `log_level`; the rotating file under
    `settings.LOG_DIR` always records DEBUG with timestamps and logger names,
    so the per-row diagnostics of a run can be inspected afterwards.
    Calling it again for an already configured logger is a no-op.
    """
    level = log_level if log_level is not None else settings.LOG_LEVEL
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_to_file:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.LOG_DIR / settings.LOG_FILENAME,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
