"""User-facing progress lines, independent of the logging configuration."""

import sys
from typing import Optional, TextIO


def _write(stream: TextIO, message: str, flush: bool) -> None:
    stream.write(message)
    if flush:
        stream.flush()


def write_stdout(message: str, flush: bool = True) -> None:
    _write(sys.stdout, message, flush)


def write_stderr(message: str, flush: bool = True) -> None:
    _write(sys.stderr, message, flush)


def print_status(message: str, prefix: Optional[str] = None) -> None:
    """Print one installation step to stdout, e.g. ``📥 Cloning repository...``.

    Always shown, whatever the log level.
    """
    write_stdout(f"{prefix} {message}\n" if prefix else f"{message}\n")


def print_error(message: str, prefix: str = "❌") -> None:
    write_stderr(f"{prefix} {message}\n")
