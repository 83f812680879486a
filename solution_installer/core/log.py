"""Installer-wide logging: one isolated ``installer`` namespace plus event helpers.

Modules obtain loggers at import time with ``get_logger(__name__)``; the CLI
configures handlers later with ``configure_logging``. Structured events carry
an ``event_type`` (``command``, ``install``, ``env``) that the console
handler colours and the JSON file handler records.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from .logger_factory import IsolatedLogManager

LOGGER_NAMESPACE = "installer"


class Logger(Protocol):
    """Subset of ``logging.Logger`` the helpers rely on."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


class LogManager:
    """Configure-once wrapper around the installer's IsolatedLogManager."""

    def __init__(self, namespace: str = LOGGER_NAMESPACE) -> None:
        self._manager = IsolatedLogManager(namespace)

    @property
    def manager(self) -> IsolatedLogManager:
        return self._manager

    def configure(
        self,
        level: Union[int, str] = logging.INFO,
        log_file: Optional[Path] = None,
        enable_json: bool = True,
        enable_console: bool = True,
        console_level: Optional[Union[int, str]] = None,
    ) -> None:
        """Configure handlers. Later calls are no-ops until reset."""
        if self._manager.is_configured:
            return
        self._manager.configure(
            level=level,
            log_file=log_file,
            enable_json=enable_json,
            enable_console=enable_console,
            console_level=console_level,
        )

    def get_logger(self, name: str) -> logging.Logger:
        return self._manager.create_logger(name)

    def add_file_logging(
        self, log_file: Path, level: Union[int, str] = logging.DEBUG
    ) -> None:
        """Also write JSON lines to ``log_file``."""
        self._manager.add_json_file(log_file, level)

    def shutdown(self) -> None:
        self._manager.shutdown()

    def reset_configuration(self) -> None:
        """Drop handlers so the next ``configure`` call takes effect."""
        self._manager.shutdown()


_log_manager = LogManager()


def configure_logging(**kwargs: Any) -> None:
    _log_manager.configure(**kwargs)


def add_file_logging(log_file: Path, level: Union[int, str] = logging.DEBUG) -> None:
    _log_manager.add_file_logging(log_file, level)


def get_logger(name: str) -> logging.Logger:
    return _log_manager.get_logger(name)


def shutdown_logging() -> None:
    _log_manager.shutdown()


def log_event(logger: Logger, event_type: str, message: str, **fields: Any) -> None:
    """Log ``message`` at INFO as a structured event of ``event_type``."""
    logger.info(message, extra={"event_type": event_type, **fields})


def log_command_event(
    logger: Logger, event: str, command: Optional[str] = None, **fields: Any
) -> None:
    """Log an external-command lifecycle event (start, ok, failed, ...) at DEBUG."""
    extra: Dict[str, Any] = {"event_type": "command", "command_event": event}
    if command is not None:
        extra["command"] = command
    extra.update(fields)
    logger.debug("Command %s: %s", event, command, extra=extra)


def log_install_event(
    logger: Logger, event: str, solution_type: Optional[str] = None, **fields: Any
) -> None:
    """Log an installation lifecycle event at INFO."""
    extra: Dict[str, Any] = {"event_type": "install", "install_event": event}
    if solution_type is not None:
        extra["solution_type"] = solution_type
    extra.update(fields)
    logger.info("Install %s: %s", solution_type, event, extra=extra)


def set_log_context(**kwargs: Any) -> None:
    _log_manager.manager.set_context(**kwargs)


def get_log_context() -> Dict[str, Any]:
    return _log_manager.manager.get_context()


def clear_log_context() -> None:
    _log_manager.manager.clear_context()


def log_context(**kwargs: Any) -> Any:
    """Context manager adding ``kwargs`` to the log context of this thread."""
    return _log_manager.manager.context(**kwargs)
