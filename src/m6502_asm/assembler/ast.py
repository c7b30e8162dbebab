"""
6502 Assembly Statement Model
=============================

This module defines the statement tree produced by the parser and
consumed by the IR generator. Statements are produced once, in source
order, and never modified afterwards.

Node Hierarchy
--------------
Statement (base, carries a SourceTag)
├── Comment - comment-only line, no-op
├── LabelDef - "name:" label definition
├── Instruction - mnemonic + syntax-level operand
└── Meta-directives
    ├── Org - .org address
    ├── Pad - .pad address
    ├── ByteList - .byte n, n, ...
    ├── WordList - .word n, n, ...
    ├── Vector - .vector label
    └── Include - .include "file"

Numbers
-------
A numeric literal remembers the width class it was written with, decided
at parse time: `$10` is a byte, `$0010` is a word even though its value
is below 256. The generator relies on this to choose between zero-page
and absolute encodings.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union

from m6502_asm.errors import SourceTag


# =============================================================================
# Numeric Literals
# =============================================================================

class NumberWidth(Enum):
    """Width class of a numeric literal."""
    BYTE = auto()     # fits in 8 bits
    WORD = auto()     # fits in 16 bits
    INVALID = auto()  # fits in neither


@dataclass(frozen=True)
class Number:
    """A numeric literal with its width class."""
    width: NumberWidth
    value: int

    @classmethod
    def byte(cls, value: int) -> "Number":
        return cls(NumberWidth.BYTE, value)

    @classmethod
    def word(cls, value: int) -> "Number":
        return cls(NumberWidth.WORD, value)

    @classmethod
    def invalid(cls, value: int) -> "Number":
        return cls(NumberWidth.INVALID, value)

    @classmethod
    def from_value(cls, value: int) -> "Number":
        """Classify a value by magnitude alone (used for decimal literals)."""
        if 0 <= value <= 0xFF:
            return cls.byte(value)
        if 0 <= value <= 0xFFFF:
            return cls.word(value)
        return cls.invalid(value)

    @property
    def is_byte(self) -> bool:
        return self.width is NumberWidth.BYTE

    @property
    def is_word(self) -> bool:
        return self.width is NumberWidth.WORD


# =============================================================================
# Operands
# =============================================================================

@dataclass(frozen=True)
class NumberTerm:
    """An inline numeric literal operand."""
    tag: SourceTag
    number: Number


@dataclass(frozen=True)
class NameTerm:
    """A symbolic operand (label reference)."""
    tag: SourceTag
    name: str


Term = Union[NumberTerm, NameTerm]


class OperandModifier(Enum):
    """Selects which half of a two-byte value an operand contributes."""
    NONE = auto()
    HIGH_BYTE = auto()   # >value
    LOW_BYTE = auto()    # <value


class OperandKind(Enum):
    """
    Operand shapes as written in source.

    This is the addressing mode the programmer asked for, before the
    generator narrows literals to zero page or forces branch modes.
    """
    NONE = auto()         # (no operand)
    IMMEDIATE = auto()    # #term
    ADDRESS = auto()      # term
    ABSOLUTE_X = auto()   # term,X
    ABSOLUTE_Y = auto()   # term,Y
    INDIRECT = auto()     # (term)
    INDIRECT_X = auto()   # (term,X)
    INDIRECT_Y = auto()   # (term),Y


@dataclass(frozen=True)
class Operand:
    """
    Syntax-level instruction operand.

    Attributes:
        kind: Operand shape
        modifier: High/low byte selection (immediate and address only)
        term: The literal or name, None for OperandKind.NONE
    """
    kind: OperandKind
    modifier: OperandModifier = OperandModifier.NONE
    term: Optional[Term] = None

    @classmethod
    def none(cls) -> "Operand":
        return cls(OperandKind.NONE)


# =============================================================================
# Statements
# =============================================================================

@dataclass(frozen=True)
class Statement:
    """Base class for all statements; every statement has a source tag."""
    tag: SourceTag


@dataclass(frozen=True)
class Comment(Statement):
    """Comment-only line."""
    pass


@dataclass(frozen=True)
class LabelDef(Statement):
    """Label definition."""
    name: str


@dataclass(frozen=True)
class Instruction(Statement):
    """
    Machine instruction.

    Attributes:
        mnemonic: Mnemonic as written (not yet classified)
        operand: Syntax-level operand
    """
    mnemonic: str
    operand: Operand = field(default_factory=Operand.none)


@dataclass(frozen=True)
class Org(Statement):
    """.org: continue assembly at an explicit address."""
    address: Number


@dataclass(frozen=True)
class Pad(Statement):
    """.pad: zero-fill up to an explicit address."""
    address: Number


@dataclass(frozen=True)
class ByteList(Statement):
    """.byte: raw byte constants."""
    values: tuple[Number, ...]


@dataclass(frozen=True)
class WordList(Statement):
    """.word: little-endian 16-bit constants."""
    values: tuple[Number, ...]


@dataclass(frozen=True)
class Vector(Statement):
    """.vector: the 16-bit address of a label."""
    label: str


@dataclass(frozen=True)
class Include(Statement):
    """.include: splice another source file in at this point."""
    path: str
