"""
6502 Byte Emitter
=================

Serializes resolved IR into one contiguous memory image. The image
starts at the first block's address; any hole left by .org or .pad
between the end of one block and the start of the next is zero-filled.

Encoding
--------
| Chunk       | Bytes                                  |
|-------------|----------------------------------------|
| OpChunk     | opcode, then operand little-endian     |
| BytesChunk  | payload verbatim                       |
| VectorChunk | label address little-endian (2 bytes)  |
"""

import logging

from m6502_asm.assembler.ir import IR, BytesChunk, Chunk, OpChunk, ResolvedParam, VectorChunk

logger = logging.getLogger(__name__)

# Size of the 6502 address space
ADDRESS_SPACE = 0x10000


def to_bytes(ir: IR) -> bytes:
    """
    Emit the memory image of a resolved IR.

    Args:
        ir: IR after resolve()

    Returns:
        The image, starting at the first block's address (empty for an
        empty program)
    """
    if not ir.blocks:
        return b""

    base = ir.blocks[0].position
    out = bytearray()

    for block in ir.blocks:
        write_address = base + len(out)
        if block.position > write_address:
            out.extend(bytes(block.position - write_address))
        for chunk in block.chunks:
            out += encode_chunk(chunk)
        assert len(out) <= ADDRESS_SPACE, f"image overflows the address space ({len(out)} bytes)"

    logger.debug(f"Emitted {len(out)} bytes starting at ${base:04X}")
    return bytes(out)


def encode_chunk(chunk: Chunk) -> bytes:
    """Encode a single resolved chunk."""
    if isinstance(chunk, OpChunk):
        param = chunk.param
        assert isinstance(param, ResolvedParam), f"unresolved parameter at {chunk.tag}"
        return bytes([chunk.code.value]) + param.value.to_bytes()
    if isinstance(chunk, BytesChunk):
        return chunk.data
    if isinstance(chunk, VectorChunk):
        return chunk.value.to_bytes(VectorChunk.WIDTH, "little")
    raise TypeError(f"unknown chunk type: {type(chunk).__name__}")
