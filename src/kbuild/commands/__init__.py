"""Command implementations for kbuild CLI.

This package contains the commands besides build that are too large to
live in cli.py.
"""

from kbuild.commands.clean import clean_project
from kbuild.commands.create import create_project
from kbuild.commands.run import run_project

__all__ = ["clean_project", "create_project", "run_project"]
