"""
Logging setup for StateToken.

Validation outcomes are logged by ``statetoken.auth`` with a ``token_event``
attribute (``expired``, ``issuer_mismatch``, ``rejected``) which the JSON
formatter emits as its own field. Anything that could replay a token or
expose key material is masked before a handler writes it.
"""

import json
import logging
import logging.handlers
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from statetoken.core.config_manager import LoggingConfig

REDACTED = "***REDACTED***"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMG]?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


class TokenRedactionFilter(logging.Filter):
    """Masks compact tokens, private keys, bearer headers and callback state."""

    PATTERNS = [
        # Compact JWS: the header segment always starts with base64url '{"'
        (re.compile(r"eyJ[\w-]*\.[\w-]*\.[\w-]*"), REDACTED),
        (re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.DOTALL),
         REDACTED),
        (re.compile(r"(Authorization:\s+)(?:Bearer\s+)?\S+", re.IGNORECASE), rf"\1{REDACTED}"),
        (re.compile(r"(state=)[^;&\s]+", re.IGNORECASE), rf"\1{REDACTED}"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for pattern, replacement in self.PATTERNS:
            message = pattern.sub(replacement, message)
        # Args are already merged into the message
        record.msg = message
        record.args = None
        return True


class TokenEventFormatter(logging.Formatter):
    """One JSON object per record, carrying the token event when there is one."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        event = getattr(record, "token_event", None)
        if event:
            entry["token_event"] = event

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)


def parse_size(size: str) -> int:
    """
    Convert a rotation size such as ``"10MB"`` or ``"512"`` to bytes.

    Raises:
        ValueError: If the size is not a number with an optional B/KB/MB/GB unit
    """
    match = _SIZE_PATTERN.match(size)
    if not match:
        raise ValueError(f"Invalid log rotation size: {size!r}")

    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "B").upper()])


def _create_handlers(config: LoggingConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=config.file,
                maxBytes=parse_size(config.rotation_size),
                backupCount=config.rotation_count,
                encoding="utf-8",
            )
        )

    return handlers


def setup_logging(config: LoggingConfig) -> None:
    """
    Route all StateToken logging through redacting stdout (and optional file) handlers.

    Args:
        config: Logging section of the loaded configuration
    """
    if config.format == "json":
        formatter: logging.Formatter = TokenEventFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(str(config.level).upper())
    root_logger.handlers.clear()

    for handler in _create_handlers(config):
        handler.setFormatter(formatter)
        handler.addFilter(TokenRedactionFilter())
        root_logger.addHandler(handler)

    for name, level in (config.module_levels or {}).items():
        logging.getLogger(name).setLevel(level.upper())

    root_logger.info(
        f"Logging configured: level={config.level}, format={config.format}, file={config.file}"
    )
