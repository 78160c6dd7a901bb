"""Compiler driver.

Builds the argument vector for one compilation unit and runs it through the
supervisor. C and C++ units use the same compiler binary (``CC``); C++
units get extra C++ warnings and an optional ``-std=`` override instead of
the prototype warnings used for C.

Argument order:
    <cc> -I<root>/src -I<root>/src/includes -I<prefix>/include [macOS includes]
         <CFLAGS...> <warnings> -fPIC -g <language flags> -c <source> -o <object>
"""

import sys
from typing import List

from ..output import log, log_command
from .build_context import BuildContext
from .compilation_unit import CompilationUnit
from .staleness import stamp_object
from .supervisor import ToolResult, check_tool


WARNING_FLAGS = (
    "-Wall",
    "-Wmissing-declarations",
    "-Wshadow",
    "-Wpointer-arith",
    "-Wcast-qual",
    "-Wsign-compare",
)
CODEGEN_FLAGS = ("-fPIC", "-g")
CPP_FLAGS = ("-Woverloaded-virtual", "-Wold-style-cast", "-Wnon-virtual-dtor")
C_FLAGS = ("-Wstrict-prototypes", "-Wmissing-prototypes")

# Homebrew and MacPorts OpenSSL headers
DARWIN_INCLUDES = ("-I/opt/local/include", "-I/usr/local/opt/openssl/include")


class Compiler:
    """Compiles compilation units into object files."""

    def __init__(self, context: BuildContext):
        self.context = context

    def include_flags(self) -> List[str]:
        toolchain = self.context.toolchain
        flags = [
            f"-I{self.context.src_dir}",
            f"-I{self.context.include_dir}",
            f"-I{toolchain.prefix.rstrip('/')}/include",
        ]
        if sys.platform == "darwin":
            flags.extend(DARWIN_INCLUDES)
        return flags

    def language_flags(self, unit: CompilationUnit) -> List[str]:
        if not unit.is_cpp:
            return list(C_FLAGS)
        flags = list(CPP_FLAGS)
        if self.context.toolchain.cxx_std:
            flags.append(f"-std={self.context.toolchain.cxx_std}")
        return flags

    def build_command(self, unit: CompilationUnit) -> List[str]:
        """Assemble the compiler argument vector for one unit.

        Args:
            unit: Unit to compile

        Returns:
            Argument vector, starting with the compiler binary
        """
        cmd = [self.context.toolchain.compiler]
        cmd.extend(self.include_flags())
        cmd.extend(self.context.toolchain.cflags)
        cmd.extend(WARNING_FLAGS)
        cmd.extend(CODEGEN_FLAGS)
        cmd.extend(self.language_flags(unit))
        cmd.extend(["-c", str(unit.source_path)])
        cmd.extend(["-o", str(unit.object_path)])
        return cmd

    def compile(self, unit: CompilationUnit) -> ToolResult:
        """Compile one unit and stamp its object with the source mtime.

        Raises:
            ToolStartError: If the compiler cannot be started
            ToolFailedError: If the compiler fails
        """
        log(f"compiling {unit.name}")
        cmd = self.build_command(unit)
        if self.context.verbose:
            log_command(cmd)

        result = check_tool(cmd)
        stamp_object(unit.object_path, unit.source_mtime_ns)
        unit.needs_rebuild = False
        return result
