"""Static asset embedding.

Every non-empty file under ``<root>/assets`` becomes a generated C source in
the object directory exposing three symbols:

    u_int8_t  asset_<name>_<ext>[]       file bytes plus one trailing NUL
    u_int32_t asset_len_<name>_<ext>     file size, NUL not counted
    time_t    asset_mtime_<name>_<ext>   file mtime in seconds

``<name>`` is the asset's path below ``assets/`` without its extension, with
directory separators, dots, whitespace and dashes replaced by underscores.
``<ext>`` is everything after the last dot of the filename, so ``page.html``
and ``page.css`` yield ``asset_page_html`` and ``asset_page_css``.

The trailing NUL lets text assets be used as C strings directly.

Declarations for every asset, rebuilt or not, go into ``src/assets.h`` so the
header always describes the complete current asset set.
"""

import logging
import mmap
import os
import re
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Optional, TextIO

from ..errors import AssetError
from ..output import log
from .build_context import BuildContext
from .compilation_unit import CompilationUnit, UnitRegistry
from .file_walker import walk
from .staleness import requires_rebuild

logger = logging.getLogger(__name__)

HEADER_GUARD = "KBUILD_ASSETS_H"
BYTES_PER_LINE = 16
MAX_ASSET_SIZE = 0xFFFFFFFF

_UNSAFE_CHARS = re.compile(r"[.\s-]")


def sanitize(value: str) -> str:
    """Replace dots, whitespace and dashes with underscores."""
    return _UNSAFE_CHARS.sub("_", value)


@dataclass(frozen=True)
class AssetSymbol:
    """Symbol names derived from one asset file.

    Attributes:
        name: Sanitized asset path without extension
        extension: Sanitized extension (text after the last dot)
    """

    name: str
    extension: str

    @classmethod
    def from_path(cls, path: Path, assets_dir: Path) -> "AssetSymbol":
        """Derive the symbol for an asset below ``assets_dir``.

        Raises:
            AssetError: If the filename has no extension
        """
        filename = path.name
        dot = filename.rfind(".")
        if dot == -1:
            raise AssetError(f"couldn't find ext in {filename}")

        try:
            parents = path.relative_to(assets_dir).parent.parts
        except ValueError:
            parents = ()

        name = "_".join(parents + (filename[:dot],))
        return cls(name=sanitize(name), extension=sanitize(filename[dot + 1 :]))

    @property
    def logical_name(self) -> str:
        return f"{self.name}_{self.extension}"

    @property
    def data_symbol(self) -> str:
        return f"asset_{self.name}_{self.extension}"

    @property
    def length_symbol(self) -> str:
        return f"asset_len_{self.name}_{self.extension}"

    @property
    def mtime_symbol(self) -> str:
        return f"asset_mtime_{self.name}_{self.extension}"

    def declarations(self) -> str:
        """The three extern declarations for assets.h."""
        return (
            f"extern u_int8_t {self.data_symbol}[];\n"
            f"extern u_int32_t {self.length_symbol};\n"
            f"extern time_t {self.mtime_symbol};\n"
        )


class AssetHeader:
    """Writer for the include-guarded asset header.

    Usage:
        with AssetHeader(context.assets_header) as header:
            header.declare(symbol)
    """

    def __init__(self, path: Path):
        self.path = path
        self._fp: Optional[TextIO] = None
        self.symbols: list[AssetSymbol] = []

    def __enter__(self) -> "AssetHeader":
        try:
            self._fp = open(self.path, "w", encoding="utf-8")
            self._fp.write(f"#ifndef {HEADER_GUARD}\n#define {HEADER_GUARD}\n\n#include <sys/types.h>\n\n")
        except OSError as e:
            raise AssetError(f"open({self.path}): {e.strerror or e}") from e
        return self

    def declare(self, symbol: AssetSymbol) -> None:
        if self._fp is None:
            raise RuntimeError("AssetHeader used outside of a with block")
        try:
            self._fp.write(symbol.declarations())
        except OSError as e:
            raise AssetError(f"write({self.path}): {e.strerror or e}") from e
        self.symbols.append(symbol)

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        del exc_val, exc_tb  # Unused
        if self._fp is None:
            return None
        try:
            if exc_type is None:
                self._fp.write("\n#endif\n")
            self._fp.close()
        except OSError as e:
            logger.warning(f"close({self.path}): {e.strerror or e}")
        finally:
            self._fp = None
        return None


def write_asset_source(source_path: Path, symbol: AssetSymbol, data: bytes | mmap.mmap, mtime: int) -> None:
    """Write the generated C source for one asset.

    Args:
        source_path: Destination .c file
        symbol: Symbol names for the asset
        data: Asset contents
        mtime: Asset modification time in whole seconds

    Raises:
        AssetError: If the file cannot be written
    """
    size = len(data)
    try:
        with open(source_path, "w", encoding="utf-8") as out:
            out.write("/* Auto generated */\n")
            out.write("#include <sys/types.h>\n\n")
            out.write(f"u_int8_t {symbol.data_symbol}[] = {{\n")
            for offset in range(0, size, BYTES_PER_LINE):
                chunk = data[offset : offset + BYTES_PER_LINE]
                out.write(",".join(f"0x{byte:02x}" for byte in chunk))
                out.write(",\n")
            out.write("0x00\n};\n\n")
            out.write(f"u_int32_t {symbol.length_symbol} = {size};\n")
            out.write(f"time_t {symbol.mtime_symbol} = {mtime};\n")
    except OSError as e:
        raise AssetError(f"write({source_path}): {e.strerror or e}") from e


class AssetEmbedder:
    """Turns the assets tree into compilation units and header declarations."""

    def __init__(self, context: BuildContext, registry: UnitRegistry, header: AssetHeader):
        """Initialize the embedder.

        Args:
            context: Build context
            registry: Registry receiving one unit per non-empty asset
            header: Open asset header receiving declarations
        """
        self.context = context
        self.registry = registry
        self.header = header

    def scan(self) -> None:
        """Embed every asset under the context's assets directory."""
        walk(self.context.assets_dir, self.embed)

    def embed(self, path: Path, st: os.stat_result) -> Optional[CompilationUnit]:
        """Embed one asset file (walker visitor).

        Returns:
            The registered unit, or None for an empty asset

        Raises:
            AssetError: If the name has no extension, the asset is too large,
                or a file cannot be read or written
        """
        symbol = AssetSymbol.from_path(path, self.context.assets_dir)

        if st.st_size == 0:
            logger.info(f"skipping empty asset {path.name}")
            return None
        if st.st_size > MAX_ASSET_SIZE:
            raise AssetError(f"asset {path} is larger than {MAX_ASSET_SIZE} bytes")

        name = symbol.logical_name
        source_path = self.context.generated_source_path(name)
        object_path = self.context.object_path(name)
        stale = requires_rebuild(st.st_mtime_ns, object_path)

        unit = self.registry.add(
            CompilationUnit(
                name=name,
                source_path=source_path,
                object_path=object_path,
                source_mtime_ns=st.st_mtime_ns,
                needs_rebuild=stale,
            )
        )

        if stale:
            log(f"building asset {path.name}")
            self._generate(path, source_path, symbol, int(st.st_mtime))

        self.header.declare(symbol)
        return unit

    def _generate(self, path: Path, source_path: Path, symbol: AssetSymbol, mtime: int) -> None:
        try:
            with open(path, "rb") as fp, mmap.mmap(fp.fileno(), 0, access=mmap.ACCESS_READ) as data:
                write_asset_source(source_path, symbol, data, mtime)
        except (OSError, ValueError) as e:
            raise AssetError(f"mmap: {path} {getattr(e, 'strerror', None) or e}") from e
