"""
m6502-asm Command-Line Interface
================================

This package provides the `m6502asm` command-line tool, a Click-based
front end to the assembler that writes the ROM image, its source map
and an optional symbol file.
"""

__all__ = ["m6502asm"]
