"""Centralized logging configuration."""

import logging
import re

from config import settings

# Plaid access tokens look like access-<environment>-<uuid>
_ACCESS_TOKEN_RE = re.compile(r"access-(sandbox|development|production)-[0-9a-fA-F-]+")

_QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "httpx",
    "urllib3",
    "plaid",
)


class AccessTokenFilter(logging.Filter):
    """Mask Plaid access tokens in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _ACCESS_TOKEN_RE.sub(r"access-\1-***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging() -> None:
    """Configure root logging from ``settings.LOG_LEVEL``.

    Third-party loggers are held at WARNING and every root handler gets an
    :class:`AccessTokenFilter`.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%H:%M:%S",
        level=getattr(logging, settings.LOG_LEVEL),
        force=True,
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(AccessTokenFilter())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
