"""Subprocess supervision for compiler and linker runs.

Each external tool runs to completion before the next one starts. The
child's stdout and stderr are inherited so compiler diagnostics reach the
terminal untouched; stdin is redirected to the null device so a tool never
reads from the console. There is no timeout and no retry: the first failure
aborts the build.
"""

import logging
import signal
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from ..errors import ToolFailedError, ToolStartError

logger = logging.getLogger(__name__)


def get_subprocess_creation_flags() -> int:
    """CREATE_NO_WINDOW on Windows so tools never open a console, else 0."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one external tool run.

    Attributes:
        command: The argument vector that was executed
        returncode: Exit status, negative when killed by a signal (POSIX)
    """

    command: tuple[str, ...]
    returncode: int

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def term_signal(self) -> Optional[int]:
        """Terminating signal number, or None for a normal exit."""
        if self.returncode < 0:
            return -self.returncode
        return None

    def describe(self) -> str:
        sig = self.term_signal
        if sig is not None:
            try:
                return f"killed by {signal.Signals(sig).name}"
            except ValueError:
                return f"killed by signal {sig}"
        return f"exit status {self.returncode}"


def run_tool(command: Sequence[str], cwd: Optional[Path] = None, **kwargs: Any) -> ToolResult:
    """Run an external tool and wait for it.

    Args:
        command: Argument vector, command[0] is looked up on PATH
        cwd: Optional working directory
        **kwargs: Additional arguments passed to subprocess.run

    Returns:
        ToolResult with the exit status

    Raises:
        ToolStartError: If the tool cannot be started at all
    """
    argv = [str(arg) for arg in command]

    default_flags = get_subprocess_creation_flags()
    if "creationflags" in kwargs:
        kwargs["creationflags"] = kwargs["creationflags"] | default_flags
    elif default_flags:
        kwargs["creationflags"] = default_flags

    if "stdin" not in kwargs:
        kwargs["stdin"] = subprocess.DEVNULL

    try:
        completed = subprocess.run(argv, cwd=cwd, check=False, **kwargs)
    except OSError as e:
        raise ToolStartError(f"failed to start {argv[0]}: {e.strerror or e}") from e

    return ToolResult(command=tuple(argv), returncode=completed.returncode)


def check_tool(command: Sequence[str], cwd: Optional[Path] = None, **kwargs: Any) -> ToolResult:
    """Run an external tool and treat anything but a clean exit as fatal.

    Raises:
        ToolStartError: If the tool cannot be started
        ToolFailedError: If the tool exits non-zero or dies from a signal
    """
    result = run_tool(command, cwd=cwd, **kwargs)
    if not result.succeeded:
        logger.debug(f"{result.command[0]}: {result.describe()}")
        raise ToolFailedError("subprocess trouble, check output", result.returncode)
    return result
