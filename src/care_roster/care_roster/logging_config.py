"""Application-wide logging setup."""

from __future__ import annotations

import logging
import sys

_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class ExtraFieldsFormatter(logging.Formatter):
    """Appends ``extra=`` fields as ``key=value`` pairs after the message."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}
        if not extras:
            return line
        return line + " " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))


def setup_logging(level: str | int = logging.INFO) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if root.handlers:
        root.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ExtraFieldsFormatter(_FORMAT))
    logging.basicConfig(level=level, handlers=[handler])
