"""
Command-line interface for kbuild.

This module provides the `kbuild` CLI tool for building plugin-style native
web applications into a single shared library.
"""

import argparse
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, NoReturn, Optional

from rich.console import Console
from rich.markup import escape

from kbuild import __version__
from kbuild.build import BuildContext, BuildOrchestrator
from kbuild.commands import clean_project, create_project, run_project
from kbuild.errors import BuildError
from kbuild.output import setup_logging

console = Console(soft_wrap=True, highlight=False)


@dataclass
class BuildArgs:
    """Arguments for the build and run commands."""

    project_dir: Optional[Path] = None
    tls: bool = True
    verbose: bool = False


@dataclass
class CleanArgs:
    """Arguments for the clean command."""

    project_dir: Optional[Path] = None
    verbose: bool = False


@dataclass
class CreateArgs:
    """Arguments for the create command."""

    name: str
    tls: bool = True
    verbose: bool = False


def fatal(command: str, message: str) -> NoReturn:
    """Print a single diagnostic line and exit with status 1."""
    console.print(f"kbuild {command}: {message}", style="bold red", markup=False)
    sys.exit(1)


def _guard(command: str, verbose: bool, action: Callable[[], None]) -> None:
    """Run a command body, mapping failures to kbuild's exit behavior."""
    try:
        action()
    except BuildError as e:
        fatal(command, str(e))
    except KeyboardInterrupt:
        console.print()
        console.print("✗ Interrupted", style="bold yellow")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        if verbose:
            console.print(traceback.format_exc(), markup=False)
        fatal(command, f"{type(e).__name__}: {e}")


def build_command(args: BuildArgs) -> None:
    """Build the application library.

    Examples:
        kbuild build                 # Build the project in the current directory
        kbuild build hello           # Build the project in ./hello
        kbuild build -v              # Echo compiler and linker commands
        CC=clang kbuild build        # Use another compiler
    """
    setup_logging(verbose=args.verbose)

    def action() -> None:
        context = BuildContext.for_project(args.project_dir, tls=args.tls, verbose=args.verbose)
        result = BuildOrchestrator(context).build()
        if result.linked:
            console.print(f"[bold green]✓[/] {escape(str(result.library_path))} ({len(result.compiled)} of {result.unit_count} units compiled)")
        console.print(f"Build time: {result.build_time:.2f}s")

    _guard("build", args.verbose, action)
    sys.exit(0)


def run_command(args: BuildArgs) -> None:
    """Build the application and start the runtime in the foreground.

    Examples:
        kbuild run                   # Build and run the project in the current directory
        KBUILD_RUNTIME=/opt/bin/kore kbuild run hello
    """
    setup_logging(verbose=args.verbose)

    def action() -> None:
        context = BuildContext.for_project(args.project_dir, tls=args.tls, verbose=args.verbose)
        run_project(context)

    _guard("run", args.verbose, action)
    sys.exit(1)


def clean_command(args: CleanArgs) -> None:
    """Remove object files and the built library."""
    setup_logging(verbose=args.verbose)

    def action() -> None:
        context = BuildContext.for_project(args.project_dir, verbose=args.verbose)
        clean_project(context)

    _guard("clean", args.verbose, action)
    sys.exit(0)


def create_command(args: CreateArgs) -> None:
    """Create a new application skeleton."""
    setup_logging(verbose=args.verbose)

    def action() -> None:
        context = BuildContext.for_project(Path(args.name), tls=args.tls, verbose=args.verbose)
        create_project(context)

    _guard("create", args.verbose, action)
    sys.exit(0)


def _add_project_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=None,
        help="Application root (default: current directory)",
    )


def _add_common(parser: argparse.ArgumentParser, tls: bool = True) -> None:
    if tls:
        parser.add_argument(
            "--no-tls",
            dest="tls",
            action="store_false",
            help="Do not generate TLS certificates and DH parameters",
        )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output (compiler and linker command lines)",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kbuild",
        description="kbuild - incremental builder for native web applications",
        epilog="The commands exist for your convenience when hacking on your applications. "
        "Production servers should be started using the runtime's own options.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"kbuild {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("help", help="Show this help text")

    build_parser = subparsers.add_parser("build", help="Build an application")
    _add_project_dir(build_parser)
    _add_common(build_parser)

    run_parser = subparsers.add_parser("run", help="Build and run an application")
    _add_project_dir(run_parser)
    _add_common(run_parser)

    clean_parser = subparsers.add_parser("clean", help="Clean up the build files")
    _add_project_dir(clean_parser)
    _add_common(clean_parser, tls=False)

    create_parser_ = subparsers.add_parser("create", help="Create a new application skeleton")
    create_parser_.add_argument("name", help="Application name (and directory to create)")
    _add_common(create_parser_)

    return parser


def main() -> None:
    """kbuild - build, run, clean and create native web applications."""
    parser = create_parser()
    parsed_args = parser.parse_args()

    if not parsed_args.command or parsed_args.command == "help":
        parser.print_help()
        sys.exit(1)

    project_dir = getattr(parsed_args, "project_dir", None)
    if project_dir is not None and not project_dir.is_dir():
        fatal(parsed_args.command, f"{project_dir} is not a directory")

    if parsed_args.command == "build":
        build_command(BuildArgs(project_dir=project_dir, tls=parsed_args.tls, verbose=parsed_args.verbose))
    elif parsed_args.command == "run":
        run_command(BuildArgs(project_dir=project_dir, tls=parsed_args.tls, verbose=parsed_args.verbose))
    elif parsed_args.command == "clean":
        clean_command(CleanArgs(project_dir=project_dir, verbose=parsed_args.verbose))
    elif parsed_args.command == "create":
        create_command(CreateArgs(name=parsed_args.name, tls=parsed_args.tls, verbose=parsed_args.verbose))


if __name__ == "__main__":
    main()
