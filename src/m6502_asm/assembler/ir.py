"""
Assembler Intermediate Representation
=====================================

The IR sits between the statement tree and the final byte image. The
generator builds it once, the resolver mutates it once (filling in
positions, lengths and label values), and the emitter and source-map
builder then read it.

Structure
---------
```
IR
└── Block (optional explicit position, optional label, resolved length)
    └── Chunk
        ├── OpChunk      one instruction: opcode descriptor + parameter
        ├── BytesChunk   raw bytes from .byte / .word
        └── VectorChunk  2-byte little-endian label address (.vector)
```

Parameters
----------
An instruction's parameter is one of four frozen variants:

| Variant            | Final width                      |
|--------------------|----------------------------------|
| ResolvedParam      | width of its OpParam (0, 1 or 2) |
| UnresolvedParam    | 1 at PC_RELATIVE, otherwise 2    |
| UnresolvedLowByte  | 1                                |
| UnresolvedHighByte | 1                                |

The resolver replaces every unresolved variant with a ResolvedParam by
rebinding `OpChunk.param`; parameter values themselves are never mutated.
Every consumer dispatches over the closed set of variants and raises
TypeError for anything else.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from m6502_asm.cpu import AddressingMode, OpCode
from m6502_asm.errors import SourceTag


# =============================================================================
# Concrete Operand Values
# =============================================================================

@dataclass(frozen=True)
class OpParam:
    """
    A concrete 0, 1 or 2-byte operand value.

    Attributes:
        width: Number of operand bytes
        value: Unsigned value, < 256 for one byte, < 65536 for two
    """
    width: int
    value: int = 0

    @classmethod
    def none(cls) -> "OpParam":
        return cls(0, 0)

    @classmethod
    def byte(cls, value: int) -> "OpParam":
        return cls(1, value & 0xFF)

    @classmethod
    def word(cls, value: int) -> "OpParam":
        return cls(2, value & 0xFFFF)

    @property
    def low_byte(self) -> int:
        return self.value & 0xFF

    @property
    def high_byte(self) -> int:
        return (self.value >> 8) & 0xFF

    def to_bytes(self) -> bytes:
        """Operand bytes in target order (little-endian)."""
        return self.value.to_bytes(self.width, "little")


# =============================================================================
# Instruction Parameters
# =============================================================================

@dataclass(frozen=True)
class ResolvedParam:
    """Parameter with a known value."""
    mode: AddressingMode
    value: OpParam

    @property
    def width(self) -> int:
        return self.value.width


@dataclass(frozen=True)
class UnresolvedParam:
    """Reference to a label's full address (or branch offset at PC_RELATIVE)."""
    mode: AddressingMode
    tag: SourceTag
    name: str

    @property
    def width(self) -> int:
        return 1 if self.mode is AddressingMode.PC_RELATIVE else 2


@dataclass(frozen=True)
class UnresolvedLowByte:
    """Reference to the low byte of a label's address."""
    mode: AddressingMode
    tag: SourceTag
    name: str

    @property
    def width(self) -> int:
        return 1


@dataclass(frozen=True)
class UnresolvedHighByte:
    """Reference to the high byte of a label's address."""
    mode: AddressingMode
    tag: SourceTag
    name: str

    @property
    def width(self) -> int:
        return 1


IRParam = Union[ResolvedParam, UnresolvedParam, UnresolvedLowByte, UnresolvedHighByte]


def with_mode(param: IRParam, mode: AddressingMode) -> IRParam:
    """Return a copy of the parameter carrying a different addressing mode."""
    return replace(param, mode=mode)


# =============================================================================
# Chunks
# =============================================================================

@dataclass
class OpChunk:
    """
    One instruction.

    Attributes:
        tag: Source location of the mnemonic
        code: Opcode descriptor from the ISA table
        param: Operand, resolved or not
        position: Output address, assigned by the resolver
    """
    tag: SourceTag
    code: OpCode
    param: IRParam
    position: int = 0

    @property
    def length(self) -> int:
        return self.code.length


@dataclass
class BytesChunk:
    """Raw bytes emitted verbatim."""
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)


@dataclass
class VectorChunk:
    """
    A label's 16-bit address, stored little-endian.

    Attributes:
        tag: Source location of the .vector directive
        label: Referenced label name
        value: Resolved address, filled in by the resolver
    """
    tag: SourceTag
    label: str
    value: int = 0

    WIDTH = 2

    @property
    def length(self) -> int:
        return self.WIDTH


Chunk = Union[OpChunk, BytesChunk, VectorChunk]


def chunk_length(chunk: Chunk) -> int:
    """Size in bytes of any chunk."""
    if isinstance(chunk, (OpChunk, BytesChunk, VectorChunk)):
        return chunk.length
    raise TypeError(f"unknown chunk type: {type(chunk).__name__}")


# =============================================================================
# Blocks and Program
# =============================================================================

@dataclass
class Block:
    """
    A contiguous run of output bytes sharing one base address.

    Attributes:
        position: Explicit address from .org/.pad, or the address the
                  resolver computed for it
        label: Label bound to the start of this block
        chunks: Contents in order
        length: Total chunk size, computed by the resolver
    """
    position: Optional[int] = None
    label: Optional[str] = None
    chunks: list[Chunk] = field(default_factory=list)
    length: int = 0

    def add_op(self, op: OpChunk) -> None:
        self.chunks.append(op)

    def add_bytes(self, data: bytes) -> None:
        self.chunks.append(BytesChunk(bytes(data)))

    def add_vector(self, tag: SourceTag, label: str) -> None:
        self.chunks.append(VectorChunk(tag, label))


@dataclass
class IR:
    """The whole program: blocks in source order."""
    blocks: list[Block] = field(default_factory=list)

    def op_chunks(self):
        """Iterate over every instruction chunk in program order."""
        for block in self.blocks:
            for chunk in block.chunks:
                if isinstance(chunk, OpChunk):
                    yield chunk
