"""
m6502-asm Error Hierarchy
=========================

This module defines the exception hierarchy for the whole assembler.
All exceptions inherit from M6502Error, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
M6502Error (base)
└── AssemblerError (tagged or untagged)
    ├── AssemblySyntaxError - malformed source text
    ├── UnknownOpcodeError - mnemonic not in the instruction set
    ├── AddressingModeError - no encoding for the chosen addressing mode
    ├── LiteralRangeError - literal outside 8/16 bits, or modifier misuse
    ├── DirectiveError - bad argument to .org/.pad/.byte/.word
    ├── UndefinedSymbolError - reference to a label that is never defined
    ├── BranchRangeError - branch target outside -128..+127
    ├── CapacityError - program larger than 65535 bytes
    ├── IncludeError - include file missing or circular
    └── AssemblyFailedError - driver-level wrapper with formatted location

Design Philosophy
-----------------
Errors raised by the core carry a SourceTag (source unit id + character
offset) instead of a pre-rendered location. The core never sees unit
names or source text; the driver owns the SourceUnits registry and turns
a tag into a human readable prefix with format_error():

    tagged:    {unit-name}:{row}:{col}: {message}
    untagged:  {message}
"""

from dataclasses import dataclass
from typing import Optional, Protocol


# =============================================================================
# Base Exception Class
# =============================================================================

class M6502Error(Exception):
    """
    Base exception for all m6502-asm errors.

    Example:
        try:
            assemble(source)
        except M6502Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceTag:
    """
    Identifies a point in a named source text.

    Attributes:
        unit: Id of the source unit (index into the SourceUnits registry)
        offset: Character offset from the start of that unit's text
    """
    unit: int
    offset: int

    def row_col(self, source: str) -> tuple[int, int]:
        """
        Return the 1-based (row, column) of this tag in the given text.

        The text is scanned linearly up to the offset, counting newlines.
        """
        row = 1
        col = 1
        for char in source[:self.offset]:
            if char == "\n":
                row += 1
                col = 1
            else:
                col += 1
        return row, col

    def line(self, source: str) -> str:
        """Return the text from this tag's offset to the end of its line."""
        end = source.find("\n", self.offset)
        if end == -1:
            return source[self.offset:]
        return source[self.offset:end]

    def __str__(self) -> str:
        return f"{self.unit}:{self.offset}"


class UnitLookup(Protocol):
    """The part of the source-unit registry that error formatting needs."""

    def name(self, unit_id: int) -> str: ...

    def source(self, unit_id: int) -> str: ...


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(M6502Error):
    """
    Base exception for all assembly errors.

    Attributes:
        message: The error description (also the str() of the exception)
        tag: Where in the source the error occurred, or None for
             whole-program errors
    """

    def __init__(self, message: str, tag: Optional[SourceTag] = None):
        self.message = message
        self.tag = tag
        super().__init__(message)

    @property
    def is_tagged(self) -> bool:
        return self.tag is not None


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Raised by the lexer or parser for text that does not follow the
    assembly grammar (stray characters, malformed operands, unknown
    directives, unterminated strings).
    """
    pass


class UnknownOpcodeError(AssemblerError):
    """Mnemonic is not part of the 6502 instruction set."""

    def __init__(self, mnemonic: str, tag: Optional[SourceTag] = None):
        self.mnemonic = mnemonic
        super().__init__(f"unknown opcode: {mnemonic}", tag)


class AddressingModeError(AssemblerError):
    """
    No encoding exists for the chosen addressing mode.

    Example:
        JMP $10   ; narrowed to zero page, and JMP has no zero-page form
    """
    pass


class LiteralRangeError(AssemblerError):
    """
    Numeric literal is unusable where it appears.

    Raised when a literal fits neither 8 nor 16 bits, or when a high/low
    byte modifier is applied to a value that is already a single byte.
    """
    pass


class DirectiveError(AssemblerError):
    """
    Error in a meta-directive argument.

    Examples:
        .org $10      ; origin must be a 16-bit address
        .byte $1234   ; byte constants must be in range
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """Reference to a label that is never defined."""

    def __init__(self, symbol: str, tag: Optional[SourceTag] = None):
        self.symbol = symbol
        super().__init__(f'unknown label: "{symbol}"', tag)


class BranchRangeError(AssemblerError):
    """
    Branch target is out of range.

    Conditional branches use a signed 8-bit displacement measured from
    the address just past the 2-byte branch instruction. The assembler
    does not rewrite code to reach further targets.
    """

    def __init__(self, target: str, offset: int, tag: Optional[SourceTag] = None):
        self.target = target
        self.offset = offset
        super().__init__(
            "modifying code to fix branch offsets outside of range "
            "-128 to +127 is not currently supported",
            tag,
        )


class CapacityError(AssemblerError):
    """The program does not fit in the 16-bit address space."""
    pass


class IncludeError(AssemblerError):
    """
    Error including a file.

    Raised when:
    - Include file not found in any search path
    - Circular include detected
    """

    def __init__(
        self,
        filename: str,
        reason: str,
        tag: Optional[SourceTag] = None,
        search_paths: Optional[list[str]] = None,
    ):
        self.included_filename = filename
        self.reason = reason
        self.search_paths = search_paths or []
        super().__init__(f"cannot include '{filename}': {reason}", tag)


class AssemblyFailedError(AssemblerError):
    """
    Assembly failed; the message is already formatted for display.

    The driver raises this after translating a core error's tag into a
    unit name and row/column. The original error is kept in `error` and
    chained as the exception cause.
    """

    def __init__(self, formatted: str, error: AssemblerError):
        self.error = error
        super().__init__(formatted)


# =============================================================================
# Error Formatting
# =============================================================================

def format_error(units: UnitLookup, error: AssemblerError) -> str:
    """
    Render an error the way the driver presents it.

    Args:
        units: Source-unit registry used to translate the error's tag
        error: The error to format

    Returns:
        "{unit-name}:{row}:{col}: {message}" for tagged errors,
        "{message}" for untagged ones
    """
    if error.tag is None:
        return error.message
    row, col = error.tag.row_col(units.source(error.tag.unit))
    return f"{units.name(error.tag.unit)}:{row}:{col}: {error.message}"
