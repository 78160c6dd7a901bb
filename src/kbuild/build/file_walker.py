"""Recursive file discovery.

walk() visits every regular file below a directory. It is used for both the
assets tree and the sources tree, and by the clean command. Entries are
visited in the order the operating system returns them.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Callable

from ..errors import WalkError

logger = logging.getLogger(__name__)

Visitor = Callable[[Path, os.stat_result], None]


def walk(root: Path, visit: Visitor) -> None:
    """Call ``visit(path, stat_result)`` for every regular file under ``root``.

    Subdirectories are descended into. Entries that are neither regular files
    nor directories (sockets, fifos, devices) are reported and skipped. An
    entry that cannot be stat()ed, such as a dangling symlink, is reported and
    skipped. Symlinks are followed.

    Args:
        root: Directory to walk
        visit: Callback for each regular file

    Raises:
        WalkError: If ``root`` or any subdirectory cannot be opened
    """
    try:
        entries = os.scandir(root)
    except OSError as e:
        raise WalkError(f"walk: opendir({root}): {e.strerror or e}") from e

    with entries:
        for entry in entries:
            path = Path(entry.path)
            try:
                st = entry.stat()
            except OSError as e:
                logger.warning(f"stat({path}): {e.strerror or e}")
                continue

            if stat.S_ISDIR(st.st_mode):
                walk(path, visit)
            elif stat.S_ISREG(st.st_mode):
                visit(path, st)
            else:
                logger.warning(f"ignoring {path}")
