"""Static checks on how production code reports progress.

Outside the CLI, user-facing text goes through kbuild.output or a module
logger, never print().
"""

import re
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).parent.parent.parent / "src" / "kbuild"


def production_files():
    return [path for path in SRC_DIR.rglob("*.py") if "__pycache__" not in path.parts and path.name != "cli.py"]


class TestLoggingCompliance:
    """Test cases for logging vs print statement compliance."""

    def test_no_print_statements_in_production_code(self):
        files = production_files()
        assert files, f"No Python files found in {SRC_DIR}"

        violations = []
        for file_path in files:
            for line_num, line in enumerate(file_path.read_text(encoding="utf-8").splitlines(), start=1):
                if line.strip().startswith("#"):
                    continue
                if re.search(r"(?<![\w.])print\s*\(", line):
                    violations.append(f"{file_path}:{line_num}: {line.strip()}")

        if violations:
            pytest.fail("Found print() in production code:\n" + "\n".join(violations) + "\n\nUse kbuild.output or logging instead.")

    def test_module_loggers_use_module_name(self):
        violations = []
        for file_path in production_files():
            for match in re.finditer(r"logging\.getLogger\(([^)]*)\)", file_path.read_text(encoding="utf-8")):
                if match.group(1) != "__name__":
                    violations.append(f"{file_path}: getLogger({match.group(1)})")

        # output.py configures the package logger by name
        violations = [v for v in violations if not v.startswith(str(SRC_DIR / "output.py"))]
        assert violations == []

    def test_logging_imports_present(self):
        missing = []
        for file_path in production_files():
            content = file_path.read_text(encoding="utf-8")
            if "logging." in content and not re.search(r"^import logging$", content, re.MULTILINE):
                missing.append(str(file_path))
        assert missing == []
