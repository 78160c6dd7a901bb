"""Toolchain environment overrides.

kbuild reads its toolchain configuration from environment variables once per
invocation and freezes it into a ToolchainEnv, which travels inside the
BuildContext. Nothing in the pipeline reads os.environ directly.

Variables:
    CC                Compiler (and linker driver) binary, default "gcc"
    CFLAGS            Extra compile flags, whitespace separated
    LDFLAGS           Extra link flags, whitespace separated
    CXXSTD            C++ standard passed as -std=<value> to C++ units
    CXXLIB            C++ runtime library linked as -l<value>, default "stdc++"
    KBUILD_PREFIX     Prefix whose include/ directory is searched, default "/usr/local"
    KBUILD_MAX_FLAGS  Cap on CFLAGS/LDFLAGS entries, default 10, 0 = no cap
    KBUILD_RUNTIME    Runtime binary started by `kbuild run`, default "kore"
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_COMPILER = "gcc"
DEFAULT_CXX_LIB = "stdc++"
DEFAULT_PREFIX = "/usr/local"
DEFAULT_MAX_FLAGS = 10
DEFAULT_RUNTIME = "kore"


def split_flags(value: Optional[str], limit: int, source: str = "flags") -> tuple[str, ...]:
    """Split a whitespace separated flag string, keeping at most ``limit`` entries.

    Args:
        value: Raw flag string (None or empty yields no flags)
        limit: Maximum number of flags to keep, 0 for no limit
        source: Variable name used in the truncation warning

    Returns:
        Tuple of individual flags in their original order
    """
    if not value:
        return ()

    flags = value.split()
    if limit and len(flags) > limit:
        logger.warning(f"{source}: keeping the first {limit} of {len(flags)} flags")
        flags = flags[:limit]
    return tuple(flags)


def _parse_limit(value: Optional[str]) -> int:
    if value is None or value.strip() == "":
        return DEFAULT_MAX_FLAGS
    try:
        limit = int(value)
    except ValueError:
        logger.warning(f"KBUILD_MAX_FLAGS={value!r} is not a number, using {DEFAULT_MAX_FLAGS}")
        return DEFAULT_MAX_FLAGS
    if limit < 0:
        logger.warning(f"KBUILD_MAX_FLAGS={value!r} is negative, using {DEFAULT_MAX_FLAGS}")
        return DEFAULT_MAX_FLAGS
    return limit


@dataclass(frozen=True)
class ToolchainEnv:
    """Resolved toolchain overrides.

    Attributes:
        compiler: Compiler binary used for compiling and linking
        cflags: Extra compile flags (already split and capped)
        ldflags: Extra link flags (already split and capped)
        cxx_std: C++ standard for -std=, or None
        cxx_lib: C++ runtime library name for -l
        prefix: Install prefix whose include/ directory is searched
        max_flags: Cap applied to cflags and ldflags, 0 = no cap
        runtime: Runtime binary for the run command
    """

    compiler: str = DEFAULT_COMPILER
    cflags: tuple[str, ...] = ()
    ldflags: tuple[str, ...] = ()
    cxx_std: Optional[str] = None
    cxx_lib: str = DEFAULT_CXX_LIB
    prefix: str = DEFAULT_PREFIX
    max_flags: int = DEFAULT_MAX_FLAGS
    runtime: str = DEFAULT_RUNTIME

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "ToolchainEnv":
        """Build a ToolchainEnv from an environment mapping.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Frozen ToolchainEnv with defaults for every absent variable
        """
        if environ is None:
            environ = os.environ

        max_flags = _parse_limit(environ.get("KBUILD_MAX_FLAGS"))
        return cls(
            compiler=environ.get("CC") or DEFAULT_COMPILER,
            cflags=split_flags(environ.get("CFLAGS"), max_flags, "CFLAGS"),
            ldflags=split_flags(environ.get("LDFLAGS"), max_flags, "LDFLAGS"),
            cxx_std=environ.get("CXXSTD") or None,
            cxx_lib=environ.get("CXXLIB") or DEFAULT_CXX_LIB,
            prefix=environ.get("KBUILD_PREFIX") or DEFAULT_PREFIX,
            max_flags=max_flags,
            runtime=environ.get("KBUILD_RUNTIME") or DEFAULT_RUNTIME,
        )
