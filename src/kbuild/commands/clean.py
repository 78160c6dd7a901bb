"""Clean command implementation.

Removes build artifacts: every file under ``<root>/.objs``, the directory
itself, and the application library. Failures to remove individual files
are reported and skipped.
"""

import logging
import os
from pathlib import Path

from ..build.build_context import BuildContext
from ..build.file_walker import walk
from ..output import log

logger = logging.getLogger(__name__)


class _Remover:
    """Walker visitor that unlinks every file it is shown."""

    def __init__(self) -> None:
        self.removed = 0

    def __call__(self, path: Path, st: os.stat_result) -> None:
        del st  # Unused
        try:
            path.unlink()
            self.removed += 1
        except OSError as e:
            logger.warning(f"couldn't unlink {path}: {e.strerror or e}")


def _remove_dirs(root: Path) -> None:
    # Deepest directories first so each is empty when removed.
    for dirpath, _dirnames, _filenames in sorted(os.walk(root), reverse=True):
        try:
            Path(dirpath).rmdir()
        except OSError as e:
            logger.warning(f"couldn't rmdir {dirpath}: {e.strerror or e}")


def clean_project(context: BuildContext) -> int:
    """Remove the object directory and the built library.

    Args:
        context: Build context of the project to clean

    Returns:
        Number of files removed

    Raises:
        WalkError: If the object directory exists but cannot be read
    """
    remover = _Remover()

    if context.obj_dir.is_dir():
        walk(context.obj_dir, remover)
        _remove_dirs(context.obj_dir)

    try:
        context.library_path.unlink()
        remover.removed += 1
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"couldn't unlink {context.library_path}: {e.strerror or e}")

    log(f"removed {remover.removed} build artifact(s)")
    return remover.removed
