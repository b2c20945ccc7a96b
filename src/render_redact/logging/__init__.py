"""
Secret-safe logging for render-redact.

Provides a logging filter that replaces structured log arguments with their
redacted rendering, so annotated fields never reach a handler.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from render_redact.marshaller import Marshaller

# Arguments formatted as-is
_PLAIN_TYPES = (str, int, float, bool, bytes, type(None))


class RedactingFilter(logging.Filter):
    """Rewrites record arguments through ``Marshaller.redact``.

    Scalars pass through untouched. Any other argument, and a non-string
    message object, is replaced by its redacted text before formatting.
    """

    def __init__(self, marshaller: Marshaller | None = None, name: str = "") -> None:
        super().__init__(name)
        self.marshaller = marshaller or Marshaller()

    def filter(self, record: logging.LogRecord) -> bool:
        if not super().filter(record):
            return False
        if not isinstance(record.msg, str):
            record.msg = self._redact(record.msg)
        if isinstance(record.args, Mapping):
            record.args = {key: self._redact(value) for key, value in record.args.items()}
        elif record.args:
            record.args = tuple(self._redact(arg) for arg in record.args)
        return True

    def _redact(self, value: Any) -> Any:
        if isinstance(value, _PLAIN_TYPES):
            return value
        return self.marshaller.redact(value)


def install_redacting_filter(
    logger: logging.Logger | str | None = None,
    marshaller: Marshaller | None = None,
) -> RedactingFilter:
    """Attach a RedactingFilter to a logger.

    Args:
        logger: Logger or logger name; the root logger when omitted.
        marshaller: Marshaller used for redaction; a default one when omitted.

    Returns:
        The installed filter, so callers can remove it again.
    """
    target = logger if isinstance(logger, logging.Logger) else logging.getLogger(logger)
    redacting = RedactingFilter(marshaller)
    target.addFilter(redacting)
    return redacting


__all__ = ["RedactingFilter", "install_redacting_filter"]
