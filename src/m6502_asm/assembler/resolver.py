"""
6502 IR Resolver
================

Second half of the two-pass assembly process. Resolution mutates the IR
in place in three passes; each pass must finish over the whole program
before the next one starts.

Pass 1 (Lengths)
----------------
- Sum chunk lengths per block
- Reject programs larger than 65535 bytes

Pass 2 (Layout)
---------------
- Walk blocks with an address cursor starting at 0
- Explicitly positioned blocks move the cursor; the others get the
  cursor's value written back as their position
- Bind each block label to the block's position (later bindings win)
- Advance the cursor with 16-bit wraparound

Pass 3 (Substitution)
---------------------
- Assign every instruction its address
- Replace label references with addresses, address bytes or branch
  offsets
- Fill in .vector values

Branch Offsets
--------------
Conditional branches are 2 bytes long and their displacement is measured
from the following instruction:

    offset = target - (branch_address + 2)     (16-bit, wrapping)

Both addresses wrap at 64K, so a branch at $FFFE can reach $0000.
Offsets outside -128..+127 are an error; code is never rewritten to
reach a distant target.
"""

import logging

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
    chunk_length,
)
from m6502_asm.cpu import AddressingMode
from m6502_asm.errors import (
    BranchRangeError,
    CapacityError,
    SourceTag,
    UndefinedSymbolError,
)

logger = logging.getLogger(__name__)

# Largest program that fits the 16-bit address space
MAX_PROGRAM_SIZE = 0xFFFF

# Signed 8-bit displacement range of conditional branches
BRANCH_MIN = -128
BRANCH_MAX = 127


def resolve(ir: IR) -> dict[str, int]:
    """
    Resolve an IR in place.

    Args:
        ir: IR produced by the generator

    Returns:
        The label table built during layout (name -> address)

    Raises:
        CapacityError: Program exceeds 65535 bytes
        UndefinedSymbolError: Reference to a label that is never defined
        BranchRangeError: Branch target out of range
    """
    _resolve_lengths(ir)
    labels = _layout(ir)
    _substitute(ir, labels)
    return labels


# =============================================================================
# Pass 1: Lengths
# =============================================================================

def _resolve_lengths(ir: IR) -> None:
    total = 0
    for block in ir.blocks:
        block.length = sum(chunk_length(chunk) for chunk in block.chunks)
        total += block.length
        if total > MAX_PROGRAM_SIZE:
            raise CapacityError(f"assembly won't fit in {MAX_PROGRAM_SIZE} bytes")

    logger.debug(f"Pass 1: {len(ir.blocks)} blocks, {total} bytes")


# =============================================================================
# Pass 2: Layout and Label Table
# =============================================================================

def _layout(ir: IR) -> dict[str, int]:
    labels: dict[str, int] = {}
    cursor = 0

    for block in ir.blocks:
        if block.position is not None:
            cursor = block.position
        else:
            block.position = cursor

        if block.label is not None:
            if block.label in labels:
                logger.debug(f"Label '{block.label}' redefined, ${labels[block.label]:04X} -> ${cursor:04X}")
            labels[block.label] = cursor

        cursor = (cursor + block.length) & 0xFFFF

    logger.debug(f"Pass 2: {len(labels)} labels bound")
    return labels


# =============================================================================
# Pass 3: Parameter Substitution
# =============================================================================

def _substitute(ir: IR, labels: dict[str, int]) -> None:
    for block in ir.blocks:
        _substitute_block(block, labels)

    for op in ir.op_chunks():
        assert isinstance(op.param, ResolvedParam), f"unresolved parameter at {op.tag}"
        assert op.param.width == op.code.length - 1, (
            f"{op.code.op_class} {op.code.mode}: {op.param.width}-byte parameter "
            f"for a {op.code.length}-byte opcode"
        )

    logger.debug("Pass 3: all parameters resolved")


def _substitute_block(block: Block, labels: dict[str, int]) -> None:
    position = block.position
    for chunk in block.chunks:
        if isinstance(chunk, OpChunk):
            chunk.position = position
            chunk.param = _resolve_param(chunk, labels)
        elif isinstance(chunk, VectorChunk):
            chunk.value = _lookup(labels, chunk.label, chunk.tag)
        elif isinstance(chunk, BytesChunk):
            pass
        else:
            raise TypeError(f"unknown chunk type: {type(chunk).__name__}")
        position = (position + chunk_length(chunk)) & 0xFFFF


def _resolve_param(op: OpChunk, labels: dict[str, int]) -> ResolvedParam:
    param = op.param

    if isinstance(param, ResolvedParam):
        return param

    if isinstance(param, UnresolvedParam):
        target = _lookup(labels, param.name, param.tag)
        if param.mode is AddressingMode.PC_RELATIVE:
            offset = _branch_offset(op.position, target)
            if not BRANCH_MIN <= offset <= BRANCH_MAX:
                raise BranchRangeError(param.name, offset, param.tag)
            return ResolvedParam(param.mode, OpParam.byte(offset))
        return ResolvedParam(param.mode, OpParam.word(target))

    if isinstance(param, UnresolvedLowByte):
        return ResolvedParam(param.mode, OpParam.byte(_lookup(labels, param.name, param.tag)))

    if isinstance(param, UnresolvedHighByte):
        return ResolvedParam(param.mode, OpParam.byte(_lookup(labels, param.name, param.tag) >> 8))

    raise TypeError(f"unknown parameter type: {type(param).__name__}")


def _branch_offset(position: int, target: int) -> int:
    """Signed distance from the instruction after a branch to its target, mod 64K."""
    offset = (target - ((position + 2) & 0xFFFF)) & 0xFFFF
    if offset >= 0x8000:
        offset -= 0x10000
    return offset


def _lookup(labels: dict[str, int], name: str, tag: SourceTag) -> int:
    try:
        return labels[name]
    except KeyError:
        raise UndefinedSymbolError(name, tag) from None
