"""Utility modules for the solution installer."""

from .output import print_status, print_error, write_stdout, write_stderr

__all__ = [
    "print_status",
    "print_error",
    "write_stdout",
    "write_stderr",
]
