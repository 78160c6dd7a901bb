"""Linker driver.

Links every object in the registry, rebuilt or reused, into
``<root>/<app>.so`` using the compiler as the link driver.

Argument order:
    <cc> <shared flags> <objects...> [-l<cxxlib>] <LDFLAGS...> -o <root>/<app>.so
"""

import sys
from typing import List

from ..output import log, log_command
from .build_context import BuildContext
from .compilation_unit import UnitRegistry
from .supervisor import ToolResult, check_tool


DARWIN_SHARED_FLAGS = ("-dynamiclib", "-undefined", "suppress", "-flat_namespace")
SHARED_FLAGS = ("-shared",)


def shared_library_flags() -> tuple[str, ...]:
    """Platform flags that make the link produce a loadable shared object."""
    if sys.platform == "darwin":
        return DARWIN_SHARED_FLAGS
    return SHARED_FLAGS


class Linker:
    """Links all compilation units into the application library."""

    def __init__(self, context: BuildContext):
        self.context = context

    def build_command(self, registry: UnitRegistry) -> List[str]:
        """Assemble the linker argument vector.

        Args:
            registry: All units of this build

        Returns:
            Argument vector, starting with the compiler binary
        """
        toolchain = self.context.toolchain

        cmd = [toolchain.compiler]
        cmd.extend(shared_library_flags())
        cmd.extend(str(path) for path in registry.object_paths())
        if registry.has_cpp:
            cmd.append(f"-l{toolchain.cxx_lib}")
        cmd.extend(toolchain.ldflags)
        cmd.extend(["-o", str(self.context.library_path)])
        return cmd

    def link(self, registry: UnitRegistry) -> ToolResult:
        """Link the application library.

        Raises:
            ToolStartError: If the compiler cannot be started
            ToolFailedError: If linking fails
        """
        log(f"linking {self.context.library_path.name}")
        cmd = self.build_command(registry)
        if self.context.verbose:
            log_command(cmd)
        return check_tool(cmd)
