"""
6502 Assembler - Main Interface
===============================

This module provides the Assembler class, the driver that ties the
pipeline together:

    source text -> lexer -> parser -> include flattening
                -> IR generator -> resolver -> emitter + source map

The driver owns the source-unit registry. The core stages report errors
with a SourceTag only; the driver turns them into
"{unit-name}:{row}:{col}: {message}" and raises AssemblyFailedError.

Example Usage
-------------
>>> from m6502_asm import Assembler
>>>
>>> asm = Assembler()
>>> asm.parse_unit("main.s", '''
...     .org $8000
... start:
...     lda #$01
...     rts
... ''')
>>> output = asm.assemble()
>>> output.code.hex()
'a90160'
>>> output.write_rom("out.rom")

Include Files
-------------
`.include "file.s"` is resolved relative to the directory of the file
containing the directive, then against each include path in order. The
included statements are spliced in directly after the directive.
"""

from dataclasses import dataclass, field
from pathlib import Path
import logging

from m6502_asm.assembler.ast import Include, Statement
from m6502_asm.assembler.emitter import to_bytes
from m6502_asm.assembler.generator import IRGenerator
from m6502_asm.assembler.ir import IR
from m6502_asm.assembler.parser import parse_source
from m6502_asm.assembler.resolver import resolve
from m6502_asm.assembler.source_map import SourceMap, SourceMapEntry, build_map
from m6502_asm.assembler.units import SourceUnits
from m6502_asm.errors import (
    AssemblerError,
    AssemblyFailedError,
    IncludeError,
    format_error,
)

logger = logging.getLogger(__name__)

# Unit name used for source text that does not come from a file
STRING_UNIT = "<input>"


# =============================================================================
# Assembly Output
# =============================================================================

@dataclass
class AssemblerOutput:
    """
    Everything one assembly produced.

    Attributes:
        statements: Flattened statement sequence that was assembled
        ir: Resolved IR
        code: Memory image, starting at the first block's address
        source_map: Address -> source tag index, one entry per instruction
        labels: Label table built by the resolver
        units: Source units the tags refer to
    """
    statements: list[Statement]
    ir: IR
    code: bytes
    source_map: list[SourceMapEntry]
    labels: dict[str, int]
    units: SourceUnits = field(default_factory=SourceUnits)

    @property
    def origin(self) -> int:
        """Address of the first byte of the image."""
        return self.ir.blocks[0].position if self.ir.blocks else 0

    def write_rom(self, filepath: str | Path) -> None:
        """Write the raw memory image."""
        Path(filepath).write_bytes(self.code)
        logger.debug(f"Wrote {len(self.code)} bytes to {filepath}")

    def write_source_map(self, filepath: str | Path) -> None:
        """Write the JSON source map."""
        SourceMap(self.units, self.source_map).write(Path(filepath))

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line, sorted by name)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by m6502asm\n")
            for name, address in sorted(self.labels.items()):
                f.write(f"{name} ${address:04X}\n")


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Main 6502 assembler class.

    Source is added with parse_unit() or parse_file(), possibly several
    times; assemble() then builds one program from all statements in the
    order they were added.

    Attributes:
        include_paths: Directories searched for .include files
    """

    def __init__(self, include_paths: list[str | Path] | None = None):
        """
        Initialize the assembler.

        Args:
            include_paths: List of directories to search for include files
        """
        self.include_paths = [Path(p) for p in include_paths or []]
        self._units = SourceUnits()
        self._statements: list[Statement] = []

    @property
    def units(self) -> SourceUnits:
        return self._units

    @property
    def statements(self) -> list[Statement]:
        return list(self._statements)

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse_unit(self, name: str, source: str) -> None:
        """
        Register and parse a source unit.

        Args:
            name: Unit name used in error messages (usually a file path)
            source: Assembly source code

        Raises:
            AssemblyFailedError: If the source or one of its includes
                                 cannot be parsed
        """
        path = self._unit_path(name)
        active = [path] if path is not None else []
        try:
            self._statements.extend(self._parse(name, source, active))
        except AssemblerError as err:
            raise self._failure(err) from err

    def parse_file(self, filepath: str | Path) -> None:
        """
        Read and parse a source file.

        Raises:
            AssemblyFailedError: If the file cannot be parsed
            OSError: If the file cannot be read
        """
        filepath = Path(filepath)
        self.parse_unit(str(filepath), filepath.read_text(encoding="utf-8"))

    def _parse(self, name: str, source: str, active: list[Path]) -> list[Statement]:
        unit_id = self._units.push_unit(name, source)
        statements = parse_source(source, unit_id)
        logger.debug(f"Parsed {len(statements)} statements from {name}")

        flattened: list[Statement] = []
        for statement in statements:
            flattened.append(statement)
            if isinstance(statement, Include):
                flattened.extend(self._include(statement, unit_id, active))
        return flattened

    def _include(self, statement: Include, unit_id: int, active: list[Path]) -> list[Statement]:
        filepath = self._resolve_include_path(statement.path, unit_id)
        if filepath is None:
            raise IncludeError(
                statement.path,
                "file not found",
                statement.tag,
                search_paths=[str(p) for p in self.include_paths],
            )

        abs_path = filepath.resolve()
        if abs_path in active:
            raise IncludeError(statement.path, "circular include detected", statement.tag)

        logger.debug(f"Including {filepath}")
        source = filepath.read_text(encoding="utf-8")
        return self._parse(str(filepath), source, active + [abs_path])

    def _resolve_include_path(self, filename: str, unit_id: int) -> Path | None:
        """Resolve an include filename to a full path."""
        if Path(filename).is_absolute():
            candidate = Path(filename)
            return candidate if candidate.is_file() else None

        # Try relative to the including file
        current = self._unit_path(self._units.name(unit_id))
        if current is not None:
            candidate = current.parent / filename
            if candidate.is_file():
                return candidate

        for directory in self.include_paths:
            candidate = directory / filename
            if candidate.is_file():
                return candidate

        return None

    @staticmethod
    def _unit_path(name: str) -> Path | None:
        """Return the file behind a unit name, if there is one."""
        if name == STRING_UNIT:
            return None
        path = Path(name)
        return path.resolve() if path.is_file() else None

    # =========================================================================
    # Assembly
    # =========================================================================

    def assemble(self) -> AssemblerOutput:
        """
        Assemble all parsed statements.

        Returns:
            AssemblerOutput with the resolved IR, image and source map

        Raises:
            AssemblyFailedError: If generation or resolution fails; the
                                 message carries the source location
        """
        statements = list(self._statements)
        try:
            ir = IRGenerator.generate(statements)
            labels = resolve(ir)
        except AssemblerError as err:
            raise self._failure(err) from err

        code = to_bytes(ir)
        logger.debug(f"Assembled {len(code)} bytes, {len(labels)} labels")

        return AssemblerOutput(
            statements=statements,
            ir=ir,
            code=code,
            source_map=build_map(ir),
            labels=labels,
            units=self._units,
        )

    def _failure(self, err: AssemblerError) -> AssemblyFailedError:
        return AssemblyFailedError(format_error(self._units, err), err)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = STRING_UNIT,
             include_paths: list[str | Path] | None = None) -> AssemblerOutput:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Unit name for error messages
        include_paths: Directories to search for include files

    Returns:
        AssemblerOutput

    Raises:
        AssemblyFailedError: If assembly fails
    """
    asm = Assembler(include_paths)
    asm.parse_unit(filename, source)
    return asm.assemble()


def assemble_file(filepath: str | Path,
                  include_paths: list[str | Path] | None = None) -> AssemblerOutput:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblyFailedError: If assembly fails
        OSError: If the file cannot be read
    """
    asm = Assembler(include_paths)
    asm.parse_file(filepath)
    return asm.assemble()
