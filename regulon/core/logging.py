"""Key=value logging for the Regulon backend.

Log lines carry request context (user, document type, pipeline stage) as
flat fields. Anything that looks like a credential is masked before output.
"""

import logging
import re
import sys
from typing import Any

_SECRET_KEYS = frozenset({"token", "api_key", "authorization", "password", "secret"})
_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]+")


def _mask(key: str, value: Any) -> Any:
    if key.lower() in _SECRET_KEYS and value:
        return "***"
    if isinstance(value, str):
        return _BEARER.sub(r"\1***", value)
    return value


class StructuredFormatter(logging.Formatter):
    """Render a record as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "fn": record.funcName,
            "msg": _BEARER.sub(r"\1***", record.getMessage()),
        }

        user_id = getattr(record, "user_id", None)
        if user_id:
            fields["user_id"] = user_id

        for key, value in getattr(record, "context", {}).items():
            fields[key] = _mask(key, value)

        if record.exc_info:
            # Last line only: the exception type and message
            fields["exc"] = self.formatException(record.exc_info).splitlines()[-1]

        return " ".join(f"{key}={value}" for key, value in fields.items())


def _level_for_env() -> int:
    try:
        from regulon.core.config import get_settings

        return logging.DEBUG if get_settings().REGULON_ENV == "dev" else logging.INFO
    except Exception:
        # Settings not loadable yet (e.g. missing env during import)
        return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger writing structured lines to stdout.

    Handlers are attached once per logger name; DEBUG is enabled in ``dev``.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level_for_env())
        logger.propagate = False
    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **fields: Any) -> None:
    """
    Log with extra context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **fields: Context such as user_id, purpose, stage, status
    """
    user_id = fields.pop("user_id", None)
    logger.log(level, msg, extra={"user_id": user_id, "context": fields})
