"""Compilation units and the per-build unit registry."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

from ..errors import RegistryError

CPP_SUFFIXES = (".cpp",)
C_SUFFIXES = (".c",)


@dataclass
class CompilationUnit:
    """One source file destined for one object file.

    Attributes:
        name: Logical name, unique within a build; names the object file
        source_path: File handed to the compiler (a generated .c for assets)
        object_path: <objdir>/<name>.o
        source_mtime_ns: Modification time of the originating file at discovery
        needs_rebuild: Whether the object is missing or stale
        is_cpp: Whether the unit is C++ (extra warnings, C++ runtime at link time)
    """

    name: str
    source_path: Path
    object_path: Path
    source_mtime_ns: int
    needs_rebuild: bool
    is_cpp: bool = False


class UnitRegistry:
    """Insertion-ordered, append-only collection of compilation units."""

    def __init__(self) -> None:
        self._units: List[CompilationUnit] = []
        self._names: set[str] = set()

    def add(self, unit: CompilationUnit) -> CompilationUnit:
        """Append a unit.

        Raises:
            RegistryError: If a unit with the same logical name was already added
        """
        if unit.name in self._names:
            raise RegistryError(f"duplicate compilation unit {unit.name} ({unit.source_path})")
        self._names.add(unit.name)
        self._units.append(unit)
        return unit

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[CompilationUnit]:
        return iter(self._units)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    @property
    def has_cpp(self) -> bool:
        """True if any unit needs the C++ runtime library at link time."""
        return any(unit.is_cpp for unit in self._units)

    def stale_units(self) -> List[CompilationUnit]:
        return [unit for unit in self._units if unit.needs_rebuild]

    def object_paths(self) -> List[Path]:
        """Every object path in registration order, rebuilt or reused."""
        return [unit.object_path for unit in self._units]
