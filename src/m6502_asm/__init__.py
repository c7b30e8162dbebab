"""
m6502-asm - Two-Pass Assembler for the MOS 6502
===============================================

This package assembles 6502 assembly source into a raw memory image
(ROM) plus a JSON source map from output addresses back to source lines.

Main Components
---------------
- **assembler**: Lexer, parser, IR generator, resolver and emitter
- **cpu**: The 6502 instruction set table
- **cli**: The `m6502asm` command-line tool

Quick Start
-----------
    >>> from m6502_asm import assemble
    >>> output = assemble('''
    ...     .org $8000
    ... reset:
    ...     lda #$01
    ...     rts
    ... ''')
    >>> output.code.hex()
    'a90160'
    >>> output.labels
    {'reset': 32768}

Or from the command line:
    $ m6502asm game.s -o game.rom
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from m6502_asm.assembler import Assembler, AssemblerOutput, assemble, assemble_file
from m6502_asm.errors import (
    M6502Error,
    AssemblerError,
    AssemblySyntaxError,
    UnknownOpcodeError,
    AddressingModeError,
    LiteralRangeError,
    DirectiveError,
    UndefinedSymbolError,
    BranchRangeError,
    CapacityError,
    IncludeError,
    AssemblyFailedError,
    SourceTag,
    format_error,
)

__all__ = [
    "__version__",
    "Assembler",
    "AssemblerOutput",
    "assemble",
    "assemble_file",
    "M6502Error",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnknownOpcodeError",
    "AddressingModeError",
    "LiteralRangeError",
    "DirectiveError",
    "UndefinedSymbolError",
    "BranchRangeError",
    "CapacityError",
    "IncludeError",
    "AssemblyFailedError",
    "SourceTag",
    "format_error",
]
