"""
Build orchestration for kbuild projects.

One call to BuildOrchestrator.build() is one incremental build:

    1. Validate the project and create .objs/ if needed
    2. Embed assets (writing src/assets.h) and register their units
    3. Register sources
    4. Compile every stale unit, one at a time
    5. Remove src/assets.h
    6. Generate TLS material if cert/ is missing
    7. Link once if anything was compiled, otherwise report nothing to do

Any BuildError aborts the build at the point it happens. Objects compiled
before the failure stay on disk with their stamped mtimes, so the next run
only retries what is still stale.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..output import log
from ..tls import ensure_certs
from .asset_embedder import AssetEmbedder, AssetHeader
from .build_context import BuildContext
from .compilation_unit import UnitRegistry
from .compiler import Compiler
from .linker import Linker
from .source_scanner import SourceScanner

logger = logging.getLogger(__name__)

NOTHING_TO_DO = "nothing to be done"


@dataclass
class BuildResult:
    """Result of one build invocation.

    Attributes:
        library_path: The application library
        compiled: Logical names of the units compiled, in order
        linked: Whether the library was relinked
        unit_count: Number of units in the build
        build_time: Wall time in seconds
        message: Human-readable summary
    """

    library_path: Path
    compiled: List[str] = field(default_factory=list)
    linked: bool = False
    unit_count: int = 0
    build_time: float = 0.0
    message: str = ""

    @property
    def up_to_date(self) -> bool:
        return not self.compiled and not self.linked


class BuildOrchestrator:
    """Runs the discovery, compile and link pipeline for one BuildContext."""

    def __init__(
        self,
        context: BuildContext,
        compiler: Optional[Compiler] = None,
        linker: Optional[Linker] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            context: Build context for this invocation
            compiler: Compiler driver (defaults to one built from the context)
            linker: Linker driver (defaults to one built from the context)
        """
        self.context = context
        self.compiler = compiler if compiler is not None else Compiler(context)
        self.linker = linker if linker is not None else Linker(context)

    def discover(self) -> UnitRegistry:
        """Embed assets and register sources.

        The asset header exists when this returns; build() removes it.

        Returns:
            Registry with assets first, then sources
        """
        context = self.context
        registry = UnitRegistry()

        if context.assets_dir.is_dir():
            with AssetHeader(context.assets_header) as header:
                AssetEmbedder(context, registry, header).scan()

        SourceScanner(context, registry).scan()
        logger.debug(f"{len(registry)} compilation units, {len(registry.stale_units())} stale")
        return registry

    def build(self) -> BuildResult:
        """Execute one incremental build.

        Returns:
            BuildResult describing what was compiled and linked

        Raises:
            BuildError: On any fatal condition
        """
        start_time = time.time()
        context = self.context

        context.validate()
        context.ensure_obj_dir()

        result = BuildResult(library_path=context.library_path)
        self._remove_header()
        try:
            registry = self.discover()
            result.unit_count = len(registry)

            for unit in registry.stale_units():
                self.compiler.compile(unit)
                result.compiled.append(unit.name)
        finally:
            self._remove_header()

        ensure_certs(context)

        if result.compiled:
            self.linker.link(registry)
            result.linked = True
            result.message = f"{context.app_name} built successfully!"
        else:
            result.message = NOTHING_TO_DO

        result.build_time = time.time() - start_time
        log(result.message)
        return result

    def _remove_header(self) -> None:
        try:
            self.context.assets_header.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"unlink({self.context.assets_header}): {e.strerror or e}")
