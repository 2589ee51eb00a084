import logging
import sys
from logging import StreamHandler

from src.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore")
# database driver chatter, only shown when the DB log is switched on
DB_LOGGERS = ("aiosqlite",)


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    db_level = logging.NOTSET if settings.LOG_DB else logging.WARNING
    for name in DB_LOGGERS:
        logging.getLogger(name).setLevel(db_level)
