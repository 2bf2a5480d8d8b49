"""
Logging setup for the table server.

Production emits one JSON object per line; development gets a short
colored line. Both pick up the table and player a record belongs to
when the caller attached them (see ContextLogger).
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

# Record attribute -> label in the development format
CONTEXT_FIELDS = {
    "table_code": "table",
    "player_id": "player",
}

NOISY_LOGGERS = ("uvicorn.access", "uvicorn.error", "websockets", "asyncio")


def _context(record: logging.LogRecord) -> dict:
    """Context fields set on a record, skipping empty ones."""
    found = {}
    for attr in CONTEXT_FIELDS:
        value = getattr(record, attr, None)
        if value:
            found[attr] = value
    return found


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.levelno >= logging.ERROR:
            entry["source"] = f"{record.pathname}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Card suits are non-ASCII; keep them readable
        return json.dumps(entry, default=str, ensure_ascii=False)


class DevelopmentFormatter(logging.Formatter):
    """Colored single-line output with table/player context."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        level = f"{color}{record.levelname:8}{self.RESET if color else ''}"
        stamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        context = ", ".join(
            f"{CONTEXT_FIELDS[attr]}={str(value)[:8] if attr == 'player_id' else value}"
            for attr, value in _context(record).items()
        )
        tag = f" [{context}]" if context else ""

        line = f"{stamp} {level} {record.name}{tag} - {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str = "INFO", environment: str = "development") -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO.
        environment: "production" selects JSON output.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if environment == "production" else DevelopmentFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured: level={level}, environment={environment}")


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter carrying table/player context into every record.

        log = get_logger(__name__).with_context(table_code="ABC123")
        log.info("Round starting", extra={"player_id": actor.id})
    """

    def __init__(self, logger: logging.Logger, extra: Optional[dict] = None):
        super().__init__(logger, extra or {})

    def with_context(self, **kwargs) -> "ContextLogger":
        return ContextLogger(self.logger, {**self.extra, **kwargs})

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        # Per-call extra wins over adapter context
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name))
