"""
6502 IR Generator
=================

This module turns the parsed statement sequence into the assembler IR.
It is the first half of the two-pass assembly process:

Generation (this module)
------------------------
- Classify each mnemonic against the 6502 instruction set
- Turn syntax-level operands into addressing modes and parameters
- Narrow single-byte literals to zero-page addressing
- Force conditional branches to PC-relative addressing
- Group output into blocks at labels and .org/.pad directives

Resolution (resolver.py)
------------------------
- Compute block lengths and positions
- Build the label table
- Substitute label references and branch offsets

Operand Narrowing
-----------------
A byte literal requesting an absolute mode is assembled in the matching
zero-page mode; a word literal never narrows, even below $100:

| Source         | Mode        | Encoding   |
|----------------|-------------|------------|
| LDA $10        | ZERO_PAGE   | A5 10      |
| LDA $0010      | ABSOLUTE    | AD 10 00   |
| LDA $10,X      | ZERO_PAGE_X | B5 10      |
| LDA label      | ABSOLUTE    | AD lo hi   |

Labels are never narrowed: their value is unknown until resolution, so
they always take the mode the operand syntax asked for.
"""

import logging
from typing import Optional

from m6502_asm.assembler.ast import (
    ByteList,
    Comment,
    Include,
    Instruction,
    LabelDef,
    NameTerm,
    Number,
    NumberTerm,
    NumberWidth,
    Operand,
    OperandKind,
    OperandModifier,
    Org,
    Pad,
    Statement,
    Term,
    Vector,
    WordList,
)
from m6502_asm.assembler.ir import (
    IR,
    Block,
    IRParam,
    OpChunk,
    OpParam,
    ResolvedParam,
    UnresolvedHighByte,
    UnresolvedLowByte,
    UnresolvedParam,
    with_mode,
)
from m6502_asm.cpu import AddressingMode, classify, is_branch, is_jump, lookup
from m6502_asm.errors import (
    AddressingModeError,
    DirectiveError,
    LiteralRangeError,
    SourceTag,
    UnknownOpcodeError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Mode Tables
# =============================================================================

# Addressing mode requested by each operand shape
OPERAND_MODES = {
    OperandKind.IMMEDIATE: AddressingMode.IMMEDIATE,
    OperandKind.ADDRESS: AddressingMode.ABSOLUTE,
    OperandKind.ABSOLUTE_X: AddressingMode.ABSOLUTE_X,
    OperandKind.ABSOLUTE_Y: AddressingMode.ABSOLUTE_Y,
    OperandKind.INDIRECT: AddressingMode.INDIRECT,
    OperandKind.INDIRECT_X: AddressingMode.PRE_INDIRECT_X,
    OperandKind.INDIRECT_Y: AddressingMode.POST_INDIRECT_Y,
}

# Zero-page equivalents used when the operand is a byte literal
ZERO_PAGE_MODES = {
    AddressingMode.ABSOLUTE: AddressingMode.ZERO_PAGE,
    AddressingMode.ABSOLUTE_X: AddressingMode.ZERO_PAGE_X,
    AddressingMode.ABSOLUTE_Y: AddressingMode.ZERO_PAGE_Y,
}


# =============================================================================
# IR Generator
# =============================================================================

class IRGenerator:
    """
    Builds IR blocks from statements.

    Usage:
        ir = IRGenerator.generate(statements)

    A generator instance holds the blocks built so far; the classmethod
    creates a fresh instance per call so nothing is shared between runs.
    """

    def __init__(self):
        self._blocks: list[Block] = []

    @classmethod
    def generate(cls, statements: list[Statement]) -> IR:
        """
        Generate unresolved IR from a statement sequence.

        Args:
            statements: Parsed statements in source order (includes
                        already flattened)

        Returns:
            IR whose label references are still unresolved

        Raises:
            UnknownOpcodeError: Mnemonic not in the instruction set
            AddressingModeError: No encoding for the chosen mode
            LiteralRangeError: Literal out of range or modifier misuse
            DirectiveError: Bad .org/.pad/.byte/.word argument
        """
        generator = cls()
        for statement in statements:
            generator._process(statement)

        logger.debug(f"Generated {len(generator._blocks)} blocks from {len(statements)} statements")
        return IR(generator._blocks)

    # =========================================================================
    # Block Management
    # =========================================================================

    def _new_block(self, position: Optional[int] = None, label: Optional[str] = None) -> Block:
        block = Block(position=position, label=label)
        self._blocks.append(block)
        return block

    def _current_block(self) -> Block:
        """Return the block being filled, opening an implicit one if needed."""
        if not self._blocks:
            return self._new_block()
        return self._blocks[-1]

    # =========================================================================
    # Statement Dispatch
    # =========================================================================

    def _process(self, statement: Statement) -> None:
        if isinstance(statement, Comment):
            pass
        elif isinstance(statement, LabelDef):
            self._new_block(label=statement.name)
        elif isinstance(statement, Instruction):
            self._process_instruction(statement)
        elif isinstance(statement, Org):
            self._new_block(position=self._origin(statement.tag, statement.address, "org must be a 16-bit address"))
        elif isinstance(statement, Pad):
            self._new_block(position=self._origin(statement.tag, statement.address, "pad requires a 16-bit address"))
        elif isinstance(statement, ByteList):
            self._current_block().add_bytes(self._byte_data(statement))
        elif isinstance(statement, WordList):
            self._current_block().add_bytes(self._word_data(statement))
        elif isinstance(statement, Vector):
            self._current_block().add_vector(statement.tag, statement.label)
        elif isinstance(statement, Include):
            # Already spliced in by the driver
            pass
        else:
            raise TypeError(f"unknown statement type: {type(statement).__name__}")

    # =========================================================================
    # Instructions
    # =========================================================================

    def _process_instruction(self, statement: Instruction) -> None:
        tag = statement.tag
        name = statement.mnemonic

        op_class = classify(name)
        if op_class is None:
            raise UnknownOpcodeError(name, tag)

        param = operand_to_param(statement.operand)
        if is_branch(op_class) and not is_jump(op_class):
            param = with_mode(param, AddressingMode.PC_RELATIVE)

        code = lookup(op_class, param.mode)
        if code is None:
            raise AddressingModeError(f"op {name} requires a parameter", tag)

        if param.width != code.length - 1:
            raise AddressingModeError(
                f"op {name} can't take a {param.width}-byte operand in {param.mode} mode", tag
            )

        self._current_block().add_op(OpChunk(tag, code, param))

    # =========================================================================
    # Meta-Directives
    # =========================================================================

    @staticmethod
    def _origin(tag: SourceTag, address: Number, message: str) -> int:
        if address.width is not NumberWidth.WORD:
            raise DirectiveError(message, tag)
        return address.value

    @staticmethod
    def _byte_data(statement: ByteList) -> bytes:
        data = bytearray()
        for number in statement.values:
            if number.width is not NumberWidth.BYTE:
                raise DirectiveError("byte constants must be in range", statement.tag)
            data.append(number.value)
        return bytes(data)

    @staticmethod
    def _word_data(statement: WordList) -> bytes:
        data = bytearray()
        for number in statement.values:
            if number.width is NumberWidth.INVALID:
                raise DirectiveError("word constants must be in range", statement.tag)
            data += number.value.to_bytes(2, "little")
        return bytes(data)


# =============================================================================
# Operand Resolution
# =============================================================================

def operand_to_param(operand: Operand) -> IRParam:
    """
    Convert a syntax-level operand to an IR parameter.

    Indexed and indirect operands ignore the modifier, which the parser
    only accepts on immediate and plain address operands.
    """
    if operand.kind is OperandKind.NONE:
        return ResolvedParam(AddressingMode.IMPLIED, OpParam.none())

    mode = OPERAND_MODES[operand.kind]
    modifier = operand.modifier
    if operand.kind not in (OperandKind.IMMEDIATE, OperandKind.ADDRESS):
        modifier = OperandModifier.NONE

    return term_to_param(operand.term, modifier, mode)


def term_to_param(term: Term, modifier: OperandModifier, mode: AddressingMode) -> IRParam:
    if isinstance(term, NumberTerm):
        return number_to_param(term.tag, term.number, modifier, mode)
    if isinstance(term, NameTerm):
        return name_to_param(term.tag, term.name, modifier, mode)
    raise TypeError(f"unknown operand term: {type(term).__name__}")


def name_to_param(tag: SourceTag, name: str, modifier: OperandModifier, mode: AddressingMode) -> IRParam:
    if modifier is OperandModifier.HIGH_BYTE:
        return UnresolvedHighByte(mode, tag, name)
    if modifier is OperandModifier.LOW_BYTE:
        return UnresolvedLowByte(mode, tag, name)
    return UnresolvedParam(mode, tag, name)


def number_to_param(tag: SourceTag, number: Number, modifier: OperandModifier, mode: AddressingMode) -> IRParam:
    if number.width is NumberWidth.BYTE:
        if modifier is not OperandModifier.NONE:
            raise LiteralRangeError("can't take high/low byte of a single byte", tag)
        # A single byte can use the faster zero-page form
        return ResolvedParam(ZERO_PAGE_MODES.get(mode, mode), OpParam.byte(number.value))

    if number.width is NumberWidth.WORD:
        value = OpParam.word(number.value)
        if modifier is OperandModifier.HIGH_BYTE:
            return ResolvedParam(mode, OpParam.byte(value.high_byte))
        if modifier is OperandModifier.LOW_BYTE:
            return ResolvedParam(mode, OpParam.byte(value.low_byte))
        return ResolvedParam(mode, value)

    raise LiteralRangeError("number not within 8-bit or 16-bit bounds", tag)


def generate(statements: list[Statement]) -> IR:
    """Generate unresolved IR from statements (see IRGenerator.generate)."""
    return IRGenerator.generate(statements)
