"""Pytest configuration and fixtures for kbuild tests.

Besides shared project fixtures, this conftest restores the process-wide
output/logging state after every test: the CLI installs an OutputHandler on
the ``kbuild`` logger and points kbuild.output at the sys.stdout of the
moment, which pytest swaps between tests.
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

from kbuild import output
from kbuild.build import BuildContext, ToolchainEnv


@pytest.fixture(autouse=True)
def _restore_output():  # noqa: PT004
    """Reset kbuild.output and the kbuild logger after each test."""
    yield

    output._output_stream = sys.stdout
    output.set_verbose(False)

    logger = logging.getLogger("kbuild")
    for handler in list(logger.handlers):
        if isinstance(handler, output.OutputHandler):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def make_project(tmp_path) -> Callable[..., Path]:
    """Factory for application trees.

    Usage:
        root = make_project("hello", sources={"hello.c": "..."}, assets={"index.html": b"<html>"})
    """

    def _make(
        name: str = "hello",
        sources: Optional[dict[str, str]] = None,
        assets: Optional[dict[str, bytes]] = None,
        with_config: bool = True,
    ) -> Path:
        root = tmp_path / name
        (root / "src").mkdir(parents=True)
        (root / "conf").mkdir()
        if with_config:
            (root / "conf" / f"{name}.conf").write_text(f"load ./{name}.so\n")

        for relpath, text in (sources or {}).items():
            path = root / "src" / relpath
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)

        if assets is not None:
            (root / "assets").mkdir()
            for relpath, data in assets.items():
                path = root / "assets" / relpath
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)

        return root

    return _make


@pytest.fixture
def make_context() -> Callable[..., BuildContext]:
    """Factory for BuildContexts with TLS disabled and a fixed toolchain."""

    def _make(root: Path, toolchain: Optional[ToolchainEnv] = None, verbose: bool = False) -> BuildContext:
        return BuildContext(
            app_name=root.name,
            root_dir=root,
            toolchain=toolchain if toolchain is not None else ToolchainEnv(),
            tls=False,
            verbose=verbose,
        )

    return _make
