"""Utilities for redacting credentials from log records."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Sequence

SENSITIVE_FIELD_NAMES = {
    "authorization",
    "token",
    "api_key",
}

REDACTED = "[REDACTED]"

_BEARER_RE = re.compile(r"(?i)(bearer\s+)\S+")
_AUTHORIZATION_RE = re.compile(r"(?i)(authorization\s*[:=]\s*)(.+)")


class RedactionFilter(logging.Filter):
    """Logging filter that scrubs credentials from records.

    Known secret values (e.g. the API token in use) are replaced wherever they
    appear; ``Authorization`` headers and bearer credentials are masked even
    when the value is not known up front.
    """

    _SKIP_KEYS = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "asctime",
    }

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        message = self._render_message(record.msg, record.args)
        record.msg = self._sanitize(message)
        record.args = ()

        for key, value in list(record.__dict__.items()):
            if key in self._SKIP_KEYS:
                continue
            record.__dict__[key] = self._sanitize_mapping_value(key, value)

        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self._sanitize_string(record.exc_text)
        return True

    def add_secret(self, secret: str) -> None:
        """Start masking ``secret`` in records filtered from now on."""
        if secret and secret not in self._secrets:
            self._secrets += (secret,)

    def _render_message(self, msg: Any, args: Any) -> str:
        if args:
            try:
                return str(msg) % args
            except Exception:
                return str(msg)
        return str(msg)

    def _sanitize(self, value: Any) -> Any:
        if isinstance(value, str):
            return self._sanitize_string(value)
        if isinstance(value, Mapping):
            return {k: self._sanitize_mapping_value(k, v) for k, v in value.items()}
        if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
            return [self._sanitize(v) for v in value]
        return value

    def _sanitize_mapping_value(self, key: Any, value: Any) -> Any:
        key_norm = str(key).lower()
        if key_norm in SENSITIVE_FIELD_NAMES or key_norm.endswith("_token"):
            return REDACTED
        return self._sanitize(value)

    def _sanitize_string(self, raw: str) -> str:
        cleaned = raw
        if "authorization" in raw.lower():
            cleaned = _AUTHORIZATION_RE.sub(r"\1" + REDACTED, cleaned)
        cleaned = _BEARER_RE.sub(r"\1" + REDACTED, cleaned)
        for secret in self._secrets:
            if secret in cleaned:
                cleaned = cleaned.replace(secret, REDACTED)
        return cleaned


def install_redaction_filter(
    target: logging.Filterer | None = None, secrets: Iterable[str] = ()
) -> RedactionFilter:
    """Attach a :class:`RedactionFilter` to a logger or handler.

    Filters on a logger do not see records propagated from child loggers, so
    attach it to the handlers that write records out. Calling it again
    replaces the previous filter so newly known secrets are picked up.
    """

    target = target or logging.getLogger("logq")
    for flt in list(target.filters):
        if isinstance(flt, RedactionFilter):
            target.removeFilter(flt)
    flt = RedactionFilter(secrets)
    target.addFilter(flt)
    return flt


def redact_secret(secret: str, logger: logging.Logger | None = None) -> None:
    """Add ``secret`` to every redaction filter on ``logger``'s handlers.

    Used for credentials that only become known after logging is set up,
    such as an API token passed on the command line.
    """
    logger = logger or logging.getLogger("logq")
    for handler in logger.handlers:
        for flt in handler.filters:
            if isinstance(flt, RedactionFilter):
                flt.add_secret(secret)


__all__ = ["RedactionFilter", "install_redaction_filter", "redact_secret", "REDACTED"]
