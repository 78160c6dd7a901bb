"""Object file staleness tracking.

An object is up to date when its modification time is exactly the
modification time its source had when it was last compiled successfully.
After every successful compile the object's mtime is stamped with the
source's mtime, so the next run compares for equality instead of
"newer than". A source restored to an older timestamp, or a clock that moved
backwards, still triggers a rebuild.

Times are compared in nanoseconds (``st_mtime_ns``).
"""

import logging
import os
from pathlib import Path

from ..errors import StalenessError

logger = logging.getLogger(__name__)


def requires_rebuild(source_mtime_ns: int, object_path: Path) -> bool:
    """Decide whether an object must be (re)built.

    Args:
        source_mtime_ns: Modification time of the source, in nanoseconds
        object_path: Expected object file path

    Returns:
        True if the object is missing or its mtime differs from the source's

    Raises:
        StalenessError: If the object cannot be stat()ed for a reason other
            than not existing
    """
    try:
        st = os.stat(object_path)
    except FileNotFoundError:
        return True
    except OSError as e:
        raise StalenessError(f"stat({object_path}): {e.strerror or e}") from e

    return st.st_mtime_ns != source_mtime_ns


def stamp_object(object_path: Path, source_mtime_ns: int) -> bool:
    """Set an object's access and modification time to its source's mtime.

    A failure is reported but not fatal: the object simply compiles again on
    the next run.

    Returns:
        True if the timestamp was applied
    """
    try:
        os.utime(object_path, ns=(source_mtime_ns, source_mtime_ns))
    except OSError as e:
        logger.warning(f"utime({object_path}): {e.strerror or e}")
        return False
    return True
