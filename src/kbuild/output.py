"""
Centralized output module for kbuild.

All user-facing output is prefixed with the elapsed time since program
launch in MM:SS.cc format (minutes:seconds.centiseconds), so a slow compile
step stands out in the build log.

Example output:
    00:00.01 building asset index.html
    00:00.02 compiling index_html
    00:00.31 compiling hello.c
    00:00.52 linking hello.so
    00:00.60 hello built successfully!

Usage:
    from kbuild.output import log, log_detail, setup_logging

    setup_logging(verbose=False)
    log("compiling hello.c")
    log_detail("-o .objs/hello.c.o", verbose_only=True)

Module loggers (``logging.getLogger(__name__)``) reach the same stream once
``setup_logging()`` has installed an ``OutputHandler`` on the ``kbuild``
logger.
"""

import logging
import sys
import time
from typing import Optional, TextIO

_start_time: Optional[float] = None
_output_stream: TextIO = sys.stdout
_verbose: bool = False


def init_timer(output_stream: Optional[TextIO] = None) -> None:
    """
    Initialize the program timer.

    Args:
        output_stream: Optional output stream (defaults to sys.stdout)
    """
    global _start_time, _output_stream
    _start_time = time.time()
    if output_stream is not None:
        _output_stream = output_stream


def set_verbose(verbose: bool) -> None:
    """Enable or disable printing of verbose_only messages."""
    global _verbose
    _verbose = verbose


def is_verbose() -> bool:
    return _verbose


def get_elapsed() -> float:
    """Seconds since init_timer(), starting the timer on first use."""
    if _start_time is None:
        init_timer()
    return time.time() - _start_time  # type: ignore


def format_timestamp() -> str:
    """Format the current elapsed time as MM:SS.cc."""
    elapsed = get_elapsed()
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    return f"{minutes:02d}:{seconds:05.2f}"


def _print(message: str) -> None:
    _output_stream.write(f"{format_timestamp()} {message}\n")
    _output_stream.flush()


def log(message: str, verbose_only: bool = False) -> None:
    """
    Log a message with timestamp.

    Args:
        message: Message to log
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(message)


def log_detail(message: str, indent: int = 6, verbose_only: bool = False) -> None:
    """
    Log an indented detail line.

    Args:
        message: Detail message
        indent: Number of spaces to indent (default 6)
        verbose_only: If True, only print if verbose mode is enabled
    """
    if verbose_only and not _verbose:
        return
    _print(f"{' ' * indent}{message}")


def log_command(command: list[str]) -> None:
    """Echo an external command line as an indented detail."""
    log_detail(" ".join(command))


def log_error(message: str) -> None:
    _print(f"ERROR: {message}")


def log_warning(message: str) -> None:
    _print(f"WARNING: {message}")


class OutputHandler(logging.Handler):
    """Route logging records into the timestamped output stream.

    WARNING and above get the same prefixes as log_warning()/log_error();
    DEBUG records are indented like details.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                log_error(message)
            elif record.levelno >= logging.WARNING:
                log_warning(message)
            elif record.levelno >= logging.INFO:
                log(message)
            else:
                log_detail(message)
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False, output_stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure kbuild output and logging for a CLI invocation.

    Resets the timer, sets verbose mode and installs a single OutputHandler
    on the ``kbuild`` logger (replacing any handler from a previous call).

    Args:
        verbose: Show DEBUG records and verbose_only messages
        output_stream: Optional output stream (defaults to the current sys.stdout)

    Returns:
        The configured ``kbuild`` logger
    """
    init_timer(output_stream if output_stream is not None else sys.stdout)
    set_verbose(verbose)

    logger = logging.getLogger("kbuild")
    for handler in list(logger.handlers):
        if isinstance(handler, OutputHandler):
            logger.removeHandler(handler)

    handler = OutputHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
