"""
m6502-asm CPU Package
=====================

Instruction set definitions for the MOS 6502, consumed read-only by the
assembler's IR generator.

Usage:
    from m6502_asm.cpu import AddressingMode, classify, lookup

    op_class = classify("lda")
    code = lookup(op_class, AddressingMode.IMMEDIATE)   # value=$A9, length=2
"""

from m6502_asm.cpu.mos6502 import (
    # Core types
    AddressingMode,
    OpClass,
    OpCode,
    # Master instruction database
    OPCODE_TABLE,
    MODE_LENGTHS,
    # Instruction set reference lists
    MNEMONICS,
    BRANCH_CLASSES,
    JUMP_CLASSES,
    ACCUMULATOR_CLASSES,
    # Lookup functions
    classify,
    lookup,
    get_valid_modes,
    is_branch,
    is_jump,
    has_accumulator_form,
)

__all__ = [
    "AddressingMode",
    "OpClass",
    "OpCode",
    "OPCODE_TABLE",
    "MODE_LENGTHS",
    "MNEMONICS",
    "BRANCH_CLASSES",
    "JUMP_CLASSES",
    "ACCUMULATOR_CLASSES",
    "classify",
    "lookup",
    "get_valid_modes",
    "is_branch",
    "is_jump",
    "has_accumulator_form",
]
