"""Run command implementation.

Builds the application, then replaces the current process with the runtime
started in the foreground from the application root:

    <runtime> -fnrc conf/<app>.conf
"""

import os
from pathlib import Path

from ..build.build_context import BuildContext
from ..build.orchestrator import BuildOrchestrator
from ..errors import CommandError


def runtime_command(context: BuildContext) -> list[str]:
    """Argument vector for starting the runtime, relative to the application root."""
    return [context.toolchain.runtime, "-fnrc", str(Path("conf") / f"{context.app_name}.conf")]


def run_project(context: BuildContext) -> None:
    """Build, then replace this process with the runtime.

    Raises:
        BuildError: If the build fails
        CommandError: If the root cannot be entered or the runtime cannot be started
    """
    BuildOrchestrator(context).build()

    try:
        os.chdir(context.root_dir)
    except OSError as e:
        raise CommandError(f"couldn't change directory to {context.root_dir}: {e.strerror or e}") from e

    cmd = runtime_command(context)
    try:
        os.execvp(cmd[0], cmd)
    except OSError as e:
        raise CommandError(f"failed to start {cmd[0]}: {e.strerror or e}") from e
