"""Static checks on the pytest configuration in pyproject.toml."""

import re
from pathlib import Path

PYPROJECT = Path(__file__).parent.parent.parent / "pyproject.toml"


def pytest_section():
    content = PYPROJECT.read_text(encoding="utf-8")
    match = re.search(r"^\[tool\.pytest\.ini_options\]\n(.*?)(?=^\[|\Z)", content, re.MULTILINE | re.DOTALL)
    assert match, "pyproject.toml has no [tool.pytest.ini_options] table"
    return match.group(1)


class TestPytestConfig:
    """Test that the configured run reaches every test package."""

    def test_build_tests_are_not_excluded(self):
        match = re.search(r"^norecursedirs\s*=\s*\[(.*?)\]", pytest_section(), re.MULTILINE | re.DOTALL)
        assert match, "norecursedirs must be set; the pytest default skips build/"
        patterns = re.findall(r'"([^"]*)"', match.group(1))
        assert "build" not in patterns
        assert not any(pattern in ("*", "b*", "build*") for pattern in patterns)

    def test_build_tests_exist(self):
        tests = list((Path(__file__).parent / "build").glob("test_*.py"))
        assert len(tests) >= 10
