"""Namespaced log managers that keep installer logging off the root logger."""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .log_formatters import InstallerRichHandler, LogContext, StructuredFormatter


class IsolatedLogManager:
    """Owns the loggers below one namespace and the handlers shared by them.

    Loggers never propagate to the root logger. They may be handed out before
    ``configure`` runs (module-level ``get_logger`` calls); configuring attaches
    the handlers to every logger created so far, and later loggers get them on
    creation.
    """

    def __init__(self, namespace: str = "") -> None:
        self._namespace = namespace
        self._configured = False
        self._handlers: List[logging.Handler] = []
        self._loggers: Dict[str, logging.Logger] = {}
        self._context = LogContext()
        self._lock = threading.RLock()

    @property
    def is_configured(self) -> bool:
        return self._configured

    def configure(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Optional[Path] = None,
        enable_json: bool = True,
        enable_console: bool = True,
        console_level: Optional[Union[int, str]] = None,
    ) -> None:
        """(Re)build the handler set and attach it to all managed loggers.

        Args:
            level: Level of the JSON file handler, and of the console handler
                unless ``console_level`` is given
            log_file: JSON-lines log file; only used with ``enable_json``
            enable_json: Write structured records to ``log_file``
            enable_console: Write human-readable records to stderr
            console_level: Separate level for the console handler
        """
        with self._lock:
            self._drop_handlers()

            if enable_json and log_file:
                self._handlers.append(self._json_file_handler(Path(log_file), level))

            if enable_console:
                console = InstallerRichHandler(
                    show_time=True, show_path=False, markup=False
                )
                console.setLevel(console_level or level)
                self._handlers.append(console)

            for logger in self._loggers.values():
                self._attach(logger)
            self._configured = True

    def create_logger(self, name: str) -> logging.Logger:
        """Return the logger ``<namespace>.<name>``, creating it on first use."""
        full_name = f"{self._namespace}.{name}" if self._namespace else name
        with self._lock:
            logger = self._loggers.get(full_name)
            if logger is None:
                logger = logging.getLogger(full_name)
                logger.propagate = False
                logger.setLevel(logging.DEBUG)
                self._attach(logger)
                self._loggers[full_name] = logger
            return logger

    def add_handler(self, handler: logging.Handler) -> None:
        """Attach an extra handler to all current and future loggers."""
        with self._lock:
            self._handlers.append(handler)
            for logger in self._loggers.values():
                self._attach(logger)

    def add_json_file(self, log_file: Path, level: Union[int, str] = logging.DEBUG) -> None:
        self.add_handler(self._json_file_handler(Path(log_file), level))

    def get_context(self) -> Dict[str, Any]:
        return self._context.get_context()

    def set_context(self, **kwargs: Any) -> None:
        self._context.set_context(**kwargs)

    def clear_context(self) -> None:
        self._context.clear_context()

    @contextmanager
    def context(self, **kwargs: Any) -> Iterator[None]:
        with self._context.context(**kwargs):
            yield

    def shutdown(self) -> None:
        """Detach and close all handlers and forget the thread's context."""
        with self._lock:
            self._drop_handlers()
            self._context.clear_context()

    def _json_file_handler(
        self, log_file: Path, level: Union[int, str]
    ) -> logging.Handler:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file)
        handler.setFormatter(
            StructuredFormatter(include_context=True, context_getter=self.get_context)
        )
        handler.setLevel(level)
        return handler

    def _attach(self, logger: logging.Logger) -> None:
        for handler in self._handlers:
            if handler not in logger.handlers:
                logger.addHandler(handler)

    def _drop_handlers(self) -> None:
        for logger in self._loggers.values():
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
        for handler in self._handlers:
            try:
                handler.close()
            except (OSError, RuntimeError):
                pass
        self._handlers = []
        self._configured = False
