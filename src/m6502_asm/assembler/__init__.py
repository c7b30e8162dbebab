"""
6502 Assembler
==============

This module provides a two-pass assembler for the MOS 6502, producing a
raw memory image and a source map that links every instruction address
back to the source text that produced it.

Main Components
---------------
- **Assembler**: Driver that parses sources, flattens includes and runs
  the pipeline
- **Lexer / Parser**: Turn source text into statements
- **IRGenerator**: Selects encodings and builds address blocks
- **resolve**: Lays blocks out and resolves label references
- **to_bytes**: Serializes resolved IR into the memory image
- **build_map / SourceMap**: Address to source location index

Assembly Process
----------------
1. **Parsing (Lexer + Parser)**: source text -> statements
2. **Generation (IRGenerator)**: statements -> blocks of chunks
3. **Resolution (resolve)**: block lengths, layout and label table,
   then parameter substitution
4. **Output (to_bytes, build_map)**: image bytes and source map

Example Usage
-------------
>>> from m6502_asm.assembler import assemble
>>> output = assemble('''
...     .org $8000
... start:
...     jmp start
... ''')
>>> output.code.hex()
'4c0080'
"""

from m6502_asm.assembler.assembler import Assembler, AssemblerOutput, assemble, assemble_file
from m6502_asm.assembler.emitter import to_bytes
from m6502_asm.assembler.generator import IRGenerator, generate
from m6502_asm.assembler.ir import (
    IR,
    Block,
    BytesChunk,
    OpChunk,
    OpParam,
    ResolvedParam,
    UnresolvedHighByte,
    UnresolvedLowByte,
    UnresolvedParam,
    VectorChunk,
)
from m6502_asm.assembler.lexer import Lexer, Token, TokenType
from m6502_asm.assembler.parser import Parser, parse_source
from m6502_asm.assembler.resolver import resolve
from m6502_asm.assembler.source_map import SourceMap, SourceMapEntry, build_map
from m6502_asm.assembler.units import SourceUnit, SourceUnits

__all__ = [
    # Driver
    "Assembler",
    "AssemblerOutput",
    "assemble",
    "assemble_file",
    # Front end
    "Lexer",
    "Token",
    "TokenType",
    "Parser",
    "parse_source",
    "SourceUnit",
    "SourceUnits",
    # IR
    "IR",
    "Block",
    "OpChunk",
    "BytesChunk",
    "VectorChunk",
    "OpParam",
    "ResolvedParam",
    "UnresolvedParam",
    "UnresolvedLowByte",
    "UnresolvedHighByte",
    # Pipeline stages
    "IRGenerator",
    "generate",
    "resolve",
    "to_bytes",
    "build_map",
    "SourceMap",
    "SourceMapEntry",
]
