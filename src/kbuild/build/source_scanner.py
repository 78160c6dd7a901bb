"""Source file discovery.

Registers every .c and .cpp file below ``<root>/src`` as a compilation
unit. A unit's logical name is its path relative to ``src/`` with directory
separators replaced by underscores, so ``src/hello.c`` compiles to
``.objs/hello.c.o`` and ``src/api/v1.c`` to ``.objs/api_v1.c.o``.
Other files (headers, the generated assets.h) are ignored.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .build_context import BuildContext
from .compilation_unit import C_SUFFIXES, CPP_SUFFIXES, CompilationUnit, UnitRegistry
from .file_walker import walk
from .staleness import requires_rebuild

logger = logging.getLogger(__name__)


class SourceScanner:
    """Registers project sources with a UnitRegistry."""

    def __init__(self, context: BuildContext, registry: UnitRegistry):
        self.context = context
        self.registry = registry

    def scan(self) -> UnitRegistry:
        """Register every source under the context's src directory."""
        walk(self.context.src_dir, self.register)
        return self.registry

    def logical_name(self, path: Path) -> str:
        try:
            relative = path.relative_to(self.context.src_dir)
        except ValueError:
            return path.name
        return "_".join(relative.parts)

    def register(self, path: Path, st: os.stat_result) -> Optional[CompilationUnit]:
        """Register one source file (walker visitor).

        Returns:
            The registered unit, or None if the file is not a C/C++ source
        """
        suffix = path.suffix
        if suffix not in C_SUFFIXES and suffix not in CPP_SUFFIXES:
            return None

        name = self.logical_name(path)
        object_path = self.context.object_path(name)
        unit = CompilationUnit(
            name=name,
            source_path=path,
            object_path=object_path,
            source_mtime_ns=st.st_mtime_ns,
            needs_rebuild=requires_rebuild(st.st_mtime_ns, object_path),
            is_cpp=suffix in CPP_SUFFIXES,
        )
        logger.debug(f"{name}: {'stale' if unit.needs_rebuild else 'up to date'}")
        return self.registry.add(unit)
