"""
Build system components for kbuild.

This package provides the build pipeline:
- Source and asset discovery (file_walker, source_scanner)
- Asset embedding (asset_embedder)
- Staleness tracking (staleness)
- Compilation and linking (compiler, linker, supervisor)
- Build orchestration (orchestrator)
"""

from .build_context import BuildContext
from .build_env import ToolchainEnv
from .compilation_unit import CompilationUnit, UnitRegistry
from .orchestrator import BuildOrchestrator, BuildResult

__all__ = [
    "BuildContext",
    "ToolchainEnv",
    "CompilationUnit",
    "UnitRegistry",
    "BuildOrchestrator",
    "BuildResult",
]
