"""Exceptions raised by the kbuild build pipeline.

Every fatal condition derives from BuildError. The CLI catches BuildError,
prints a single diagnostic line and exits non-zero. Nothing already written
to disk (objects, generated sources) is rolled back.
"""


class BuildError(Exception):
    """Base class for fatal build failures."""

    pass


class ProjectError(BuildError):
    """Raised when a directory is not a buildable application project."""

    pass


class WalkError(BuildError):
    """Raised when a directory cannot be opened during discovery."""

    pass


class StalenessError(BuildError):
    """Raised when an object file cannot be stat()ed for a reason other than absence."""

    pass


class AssetError(BuildError):
    """Raised when an asset cannot be embedded."""

    pass


class RegistryError(BuildError):
    """Raised when two compilation units share a logical name."""

    pass


class ToolStartError(BuildError):
    """Raised when an external tool (compiler, linker) cannot be started."""

    pass


class ToolFailedError(BuildError):
    """Raised when an external tool exits non-zero or is killed by a signal."""

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode


class CommandError(BuildError):
    """Raised by the clean/create/run commands and TLS material generation."""

    pass
