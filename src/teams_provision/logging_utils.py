"""Logging setup for CLI runs."""

import logging

from rich.console import Console
from rich.logging import RichHandler

REDACTED = "***REDACTED***"


class TokenRedactionFilter(logging.Filter):
    """Logging filter that replaces secrets with ``***REDACTED***``."""

    def __init__(self, *secrets: str) -> None:
        super().__init__()
        self._secrets = [s for s in secrets if s]

    def _redact(self, value: object) -> object:
        text = str(value)
        if not any(secret in text for secret in self._secrets):
            return value
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        record.msg = self._redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(self._redact(a) for a in record.args)
        elif isinstance(record.args, dict):
            record.args = {k: self._redact(v) for k, v in record.args.items()}
        return True


def setup_logging(verbose: bool, console: Console | None = None) -> RichHandler:
    """Configure root logging with a RichHandler and return the handler."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=verbose)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("msal").setLevel(logging.WARNING)
    return handler


def redact_secrets(handler: logging.Handler, *secrets: str) -> None:
    """Attach a redaction filter for *secrets* to *handler*."""
    handler.addFilter(TokenRedactionFilter(*secrets))


def mask(secret: str) -> str:
    """Mask a secret for display (shows the first 4 characters)."""
    if not secret:
        return ""
    if len(secret) <= 8:
        return "*" * len(secret)
    return secret[:4] + "*" * (len(secret) - 4)
