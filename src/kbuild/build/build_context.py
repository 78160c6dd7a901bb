"""Build Context - per-invocation build configuration.

Design:
    A BuildContext is created once per CLI invocation (or once per test) and
    passed explicitly to every pipeline component. It holds the application
    name, the application root and the resolved toolchain overrides, and
    derives every path the pipeline touches. No component keeps process-wide
    state, so several independent contexts can coexist in one process.

Project layout:
    <root>/src/                 C and C++ sources (recursive)
    <root>/src/assets.h         generated asset header, exists only during a build
    <root>/assets/              static assets embedded into the library (recursive)
    <root>/conf/<app>.conf      application configuration, marks a valid project
    <root>/.objs/               object files and generated asset sources
    <root>/cert/                TLS material
    <root>/<app>.so             build output
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ..errors import ProjectError
from .build_env import ToolchainEnv

OBJ_DIR_NAME = ".objs"
ASSETS_HEADER_NAME = "assets.h"


@dataclass(frozen=True)
class BuildContext:
    """Full build context for one invocation.

    Attributes:
        app_name: Application name; names the config file and the output library
        root_dir: Application root directory
        toolchain: Resolved toolchain overrides
        tls: Whether TLS material is generated when missing
        verbose: Whether to echo external commands
    """

    app_name: str
    root_dir: Path
    toolchain: ToolchainEnv = field(default_factory=ToolchainEnv)
    tls: bool = True
    verbose: bool = False

    @classmethod
    def for_project(
        cls,
        project_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        tls: bool = True,
        verbose: bool = False,
    ) -> "BuildContext":
        """Create a context for a project directory.

        Without a project directory the current directory is the root and its
        basename is the application name, otherwise the given directory's
        basename is used.

        Args:
            project_dir: Application root, or None for the current directory
            environ: Environment mapping for toolchain overrides (defaults to os.environ)
            tls: Whether TLS material is generated when missing
            verbose: Whether to echo external commands

        Returns:
            A new BuildContext
        """
        if project_dir is None:
            root_dir = Path(".")
            app_name = Path(os.getcwd()).name
        else:
            root_dir = Path(project_dir)
            app_name = root_dir.resolve().name

        return cls(
            app_name=app_name,
            root_dir=root_dir,
            toolchain=ToolchainEnv.from_environ(environ),
            tls=tls,
            verbose=verbose,
        )

    @property
    def src_dir(self) -> Path:
        return self.root_dir / "src"

    @property
    def include_dir(self) -> Path:
        return self.src_dir / "includes"

    @property
    def assets_dir(self) -> Path:
        return self.root_dir / "assets"

    @property
    def obj_dir(self) -> Path:
        return self.root_dir / OBJ_DIR_NAME

    @property
    def assets_header(self) -> Path:
        return self.src_dir / ASSETS_HEADER_NAME

    @property
    def config_path(self) -> Path:
        return self.root_dir / "conf" / f"{self.app_name}.conf"

    @property
    def cert_dir(self) -> Path:
        return self.root_dir / "cert"

    @property
    def library_path(self) -> Path:
        return self.root_dir / f"{self.app_name}.so"

    def object_path(self, logical_name: str) -> Path:
        """Object file for a compilation unit: <objdir>/<logicalname>.o."""
        return self.obj_dir / f"{logical_name}.o"

    def generated_source_path(self, logical_name: str) -> Path:
        """Generated C source for an embedded asset: <objdir>/<logicalname>.c."""
        return self.obj_dir / f"{logical_name}.c"

    def validate(self) -> None:
        """Check that the root looks like an application project.

        Raises:
            ProjectError: If src/ or conf/<app>.conf is missing
        """
        if not self.src_dir.is_dir() or not self.config_path.is_file():
            raise ProjectError(f"{self.app_name} doesn't appear to be an application project")

    def ensure_obj_dir(self) -> Path:
        """Create the object directory if absent.

        Raises:
            ProjectError: If the directory cannot be created
        """
        if not self.obj_dir.is_dir():
            try:
                self.obj_dir.mkdir(mode=0o755)
            except OSError as e:
                raise ProjectError(f"mkdir({self.obj_dir}): {e.strerror or e}") from e
        return self.obj_dir
