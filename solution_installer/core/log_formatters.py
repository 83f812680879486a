"""Log formatters, the rich console handler and per-thread log context."""

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text
from rich.theme import Theme

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime"}

_EVENT_STYLES = {
    "command": "installer.command",
    "install": "installer.install",
    "env": "installer.env",
    "event": "installer.event",
}

INSTALLER_THEME = Theme(
    {
        "logging.level.debug": "dim cyan",
        "logging.level.info": "dim blue",
        "logging.level.warning": "yellow",
        "logging.level.error": "red",
        "logging.level.critical": "bold red",
        "installer.event": "bright_green",
        "installer.command": "bright_blue",
        "installer.install": "bright_cyan",
        "installer.env": "bright_magenta",
    }
)


class LogContext:
    """Key/value metadata attached to log lines of the current thread."""

    def __init__(self) -> None:
        self._local = threading.local()

    def _values(self) -> Dict[str, Any]:
        values = getattr(self._local, "values", None)
        if values is None:
            values = self._local.values = {}
        return values

    def set_context(self, **kwargs: Any) -> None:
        self._values().update(kwargs)

    def get_context(self) -> Dict[str, Any]:
        """Snapshot of the current thread's context."""
        return dict(self._values())

    def clear_context(self) -> None:
        self._values().clear()

    @contextmanager
    def context(self, **kwargs: Any) -> Iterator[None]:
        """Add ``kwargs`` for the duration of the block, then restore."""
        saved = self.get_context()
        self.set_context(**kwargs)
        try:
            yield
        finally:
            values = self._values()
            values.clear()
            values.update(saved)


_default_context = LogContext()


class StructuredFormatter(logging.Formatter):
    """Formats each record as one JSON object per line.

    ``extra`` values land under ``fields``; the thread's log context under
    ``context``. Records logged through the event helpers also get a
    top-level ``event`` key.
    """

    def __init__(
        self,
        include_context: bool = True,
        context_getter: Optional[Callable[[], Dict[str, Any]]] = None,
    ) -> None:
        super().__init__()
        self.include_context = include_context
        self._context_getter = context_getter or _default_context.get_context

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        event_type = getattr(record, "event_type", None)
        if event_type:
            entry["event"] = event_type

        fields = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS
        }
        if fields:
            entry["fields"] = fields

        if self.include_context:
            context = self._context_getter()
            if context:
                entry["context"] = context

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


class InstallerRichHandler(RichHandler):
    """Rich console handler on stderr that colours messages by event type."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("console", Console(theme=INSTALLER_THEME, stderr=True))
        super().__init__(*args, **kwargs)

    def render_message(self, record: logging.LogRecord, message: str) -> Text:
        text = Text(message)
        style = _EVENT_STYLES.get(getattr(record, "event_type", None) or "")
        if style:
            text.stylize(style)
        return text
