from __future__ import annotations

import logging
import re
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "gptpolish"

# OpenAI style secret keys and bearer tokens.
_SECRET_RE = re.compile(r"(sk-[A-Za-z0-9_\-]{4})[A-Za-z0-9_\-]+|(Bearer\s+)\S+")


def redact_secrets(text: str) -> str:
    return _SECRET_RE.sub(lambda m: f"{m.group(1)}***" if m.group(1) else f"{m.group(2)}***", text)


class SecretRedactingFilter(logging.Filter):
    """Masks API keys in formatted log messages before any handler sees them."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(log_path: Path | None = None, level: int = logging.INFO) -> logging.Logger:
    """Attach a rich stderr handler (and optionally a file handler) to the package logger.

    stdout stays reserved for polished text.
    """
    redactor = SecretRedactingFilter()
    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            show_time=True,
            show_level=True,
        )
    ]
    handlers[0].setFormatter(logging.Formatter("%(message)s"))
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
        )
        handlers.append(fh)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.addFilter(redactor)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
