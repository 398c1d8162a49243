import logging
import sys

# Per-record context passed through ``extra=``
CONTEXT_FIELDS = ("table", "layer")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [table=%(table)s layer=%(layer)s] - %(message)s"

# Driver chatter stays out of scaffold output unless it is a problem
NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


class ContextFilter(logging.Filter):
    """Fills in '-' for context fields a record was logged without."""

    def filter(self, record: logging.LogRecord) -> bool:
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, "-")
        return True


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
