# =============================================================================
# test_emitter.py - Byte Emitter Tests
# =============================================================================
# Tests for serializing resolved IR into a memory image.
#
# Test coverage includes:
#   - Instruction, raw data and vector encoding (little-endian)
#   - Image base at the first block's address
#   - Zero-filled gaps from .org / .pad
# =============================================================================

import pytest

from m6502_asm.assembler.emitter import encode_chunk, to_bytes
from m6502_asm.assembler.generator import generate
from m6502_asm.assembler.ir import IR, BytesChunk, VectorChunk
from m6502_asm.assembler.parser import parse_source
from m6502_asm.assembler.resolver import resolve
from m6502_asm.errors import SourceTag


def emit(source: str) -> bytes:
    ir = generate(parse_source(source))
    resolve(ir)
    return to_bytes(ir)


# =============================================================================
# Encoding
# =============================================================================

class TestEncoding:
    """Chunk encodings."""

    def test_empty_program(self):
        assert to_bytes(IR()) == b""
        assert emit("; nothing") == b""

    def test_implied(self):
        assert emit("rts") == bytes([0x60])

    def test_zero_page(self):
        assert emit("lda $10") == bytes([0xA5, 0x10])

    def test_absolute_little_endian(self):
        assert emit("sta $0200") == bytes([0x8D, 0x00, 0x02])

    def test_word_literal_below_256(self):
        assert emit("lda $0010") == bytes([0xAD, 0x10, 0x00])

    def test_data(self):
        assert emit(".byte 1, 2\n.word $ABCD") == bytes([0x01, 0x02, 0xCD, 0xAB])

    def test_vector_little_endian(self):
        chunk = VectorChunk(SourceTag(0, 0), "reset", 0xC012)
        assert encode_chunk(chunk) == bytes([0x12, 0xC0])

    def test_raw_chunk(self):
        assert encode_chunk(BytesChunk(b"\x01\x02")) == b"\x01\x02"

    def test_unknown_chunk(self):
        with pytest.raises(TypeError):
            encode_chunk("not a chunk")

    def test_branch_offset(self):
        assert emit(".org $8000\nloop: dex\nbne loop") == bytes([0xCA, 0xD0, 0xFD])


# =============================================================================
# Layout
# =============================================================================

class TestImageLayout:
    """Image base and gaps."""

    def test_no_leading_padding(self):
        """The image starts at the first block's own address."""
        assert emit(".org $8000\nnop") == bytes([0xEA])

    def test_gap_is_zero_filled(self):
        assert emit(".org $8000\nnop\n.org $8004\nrts") == bytes([0xEA, 0, 0, 0, 0x60])

    def test_pad_fills_gap(self):
        code = emit(".org $FFF0\nrti\n.pad $FFFA\n.word $1234")
        assert len(code) == 12
        assert code[0] == 0x40
        assert code[1:10] == bytes(9)
        assert code[10:] == bytes([0x34, 0x12])

    def test_adjacent_blocks(self):
        assert emit(".org $8000\nnop\n.org $8001\nrts") == bytes([0xEA, 0x60])

    def test_vectors_at_top_of_memory(self):
        code = emit(
            ".org $C000\n"
            "reset: sei\n"
            "nmi: rti\n"
            ".pad $FFFA\n"
            ".vector nmi\n"
            ".vector reset\n"
            ".vector nmi\n"
        )
        assert len(code) == 0x10000 - 0xC000
        assert code[:2] == bytes([0x78, 0x40])
        assert code[-6:] == bytes([0x01, 0xC0, 0x00, 0xC0, 0x01, 0xC0])
