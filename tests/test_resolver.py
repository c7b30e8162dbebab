# =============================================================================
# test_resolver.py - Resolver Tests
# =============================================================================
# Tests for the three resolution passes: lengths, layout + label table,
# and parameter substitution.
#
# Test coverage includes:
#   - Block lengths and layout, explicit and inherited positions
#   - Forward / backward reference symmetry
#   - Branch offsets and the -128..+127 range limit
#   - Low / high byte references and vectors
#   - Duplicate labels, 16-bit wraparound, capacity limit
#   - Idempotence of a second resolve
# =============================================================================

import pytest

from m6502_asm.assembler.generator import generate
from m6502_asm.assembler.ir import (
    IR,
    Block,
    BytesChunk,
    OpChunk,
    OpParam,
    ResolvedParam,
)
from m6502_asm.assembler.parser import parse_source
from m6502_asm.assembler.resolver import resolve
from m6502_asm.cpu import AddressingMode, OpClass, lookup
from m6502_asm.errors import (
    BranchRangeError,
    CapacityError,
    SourceTag,
    UndefinedSymbolError,
)


def resolved(source: str):
    """Generate and resolve; return (ir, labels)."""
    ir = generate(parse_source(source))
    labels = resolve(ir)
    return ir, labels


def ops(ir: IR) -> list[OpChunk]:
    return list(ir.op_chunks())


def filler(count: int) -> str:
    return ".byte " + ", ".join(["0"] * count)


# =============================================================================
# Layout
# =============================================================================

class TestLayout:
    """Lengths, positions and the label table."""

    def test_block_lengths(self):
        ir, _ = resolved("lda #1\nsta $0200\n.byte 1, 2\n.vector x\nx: rts")
        assert ir.blocks[0].length == 2 + 3 + 2 + 2
        assert ir.blocks[1].length == 1

    def test_implicit_origin_is_zero(self):
        _, labels = resolved("nop\nhere: rts")
        assert labels == {"here": 1}

    def test_positions_written_back(self):
        ir, _ = resolved(".org $8000\nnop\nnext: rts\nlast:")
        assert [b.position for b in ir.blocks] == [0x8000, 0x8001, 0x8002]

    def test_org_moves_cursor(self):
        _, labels = resolved(".org $8000\na: nop\n.org $9000\nb: nop")
        assert labels == {"a": 0x8000, "b": 0x9000}

    def test_label_binds_to_block_start(self):
        _, labels = resolved(".org $C000\nstart:\n\n; comment\n  lda #0")
        assert labels["start"] == 0xC000

    def test_instruction_positions(self):
        ir, _ = resolved(".org $8000\nlda #1\nsta $0200\nrts")
        assert [op.position for op in ops(ir)] == [0x8000, 0x8002, 0x8005]

    def test_labels_are_case_sensitive(self):
        _, labels = resolved("Loop: nop\nloop: nop")
        assert labels == {"Loop": 0, "loop": 1}

    def test_cursor_wraps_at_64k(self):
        _, labels = resolved(".org $FFFF\n.byte 1, 2\nafter: nop")
        assert labels["after"] == 0x0001

    def test_duplicate_label_later_binding_wins(self):
        ir, labels = resolved(".org $1000\ndup: nop\ndup: nop\njmp dup")
        assert labels["dup"] == 0x1001
        assert ops(ir)[2].param.value == OpParam.word(0x1001)

    def test_capacity(self):
        ir = IR([
            Block(position=0, chunks=[BytesChunk(bytes(0x8000))]),
            Block(chunks=[BytesChunk(bytes(0x8000))]),
        ])
        with pytest.raises(CapacityError, match="assembly won't fit in 65535 bytes") as info:
            resolve(ir)
        assert info.value.tag is None

    def test_largest_program_fits(self):
        ir = IR([Block(position=0, chunks=[BytesChunk(bytes(0xFFFF))])])
        resolve(ir)
        assert ir.blocks[0].length == 0xFFFF


# =============================================================================
# Substitution
# =============================================================================

class TestSubstitution:
    """Label references become concrete parameters."""

    def test_forward_and_backward_references_agree(self):
        ir, labels = resolved(
            ".org $8000\n"
            "start: jmp end\n"
            "  jmp start\n"
            "end: jmp start\n"
            "  jmp end\n"
        )
        assert labels == {"start": 0x8000, "end": 0x8006}
        values = [op.param.value.value for op in ops(ir)]
        assert values == [0x8006, 0x8000, 0x8000, 0x8006]

    def test_every_parameter_resolved(self):
        ir, _ = resolved("a: lda #<b\nlda #>b\nb: jmp a\nbne a")
        for op in ops(ir):
            assert isinstance(op.param, ResolvedParam)
            assert op.param.width == op.length - 1

    def test_low_and_high_byte(self):
        ir, _ = resolved(".org $1234\ntable: lda #<table\nlda #>table")
        assert [op.param.value for op in ops(ir)] == [OpParam.byte(0x34), OpParam.byte(0x12)]

    def test_vector_value(self):
        ir, _ = resolved(".org $8000\nreset: nop\n.org $FFFC\n.vector reset")
        assert ir.blocks[-1].chunks[0].value == 0x8000

    def test_undefined_label(self):
        with pytest.raises(UndefinedSymbolError, match='unknown label: "nowhere"') as info:
            resolved("jmp nowhere")
        assert info.value.symbol == "nowhere"
        assert info.value.tag == SourceTag(0, 4)

    def test_undefined_vector_label(self):
        with pytest.raises(UndefinedSymbolError, match='unknown label: "nmi"'):
            resolved(".vector nmi")

    def test_undefined_low_byte(self):
        with pytest.raises(UndefinedSymbolError):
            resolved("lda #<missing")


# =============================================================================
# Branches
# =============================================================================

class TestBranches:
    """Branch offset = target - (branch address + 2)."""

    def test_backward_branch(self):
        ir, _ = resolved(".org $8000\nloop: dex\nbne loop")
        branch = ops(ir)[1]
        assert branch.position == 0x8001
        assert branch.param.value == OpParam.byte(0xFD)  # -3

    def test_forward_branch(self):
        ir, _ = resolved(".org $8000\nbeq skip\nnop\nskip: rts")
        assert ops(ir)[0].param.value == OpParam.byte(0x01)

    def test_branch_to_self(self):
        ir, _ = resolved(".org $8000\nhere: bvc here")
        assert ops(ir)[0].param.value == OpParam.byte(0xFE)

    def test_forward_limit(self):
        ir, _ = resolved(f".org $8000\nbeq far\n{filler(127)}\nfar: rts")
        assert ops(ir)[0].param.value == OpParam.byte(0x7F)

    def test_forward_out_of_range(self):
        with pytest.raises(BranchRangeError) as info:
            resolved(f".org $8000\nbeq far\n{filler(128)}\nfar: rts")
        assert info.value.offset == 128
        assert info.value.target == "far"
        assert info.value.tag == SourceTag(0, 15)

    def test_backward_limit(self):
        ir, _ = resolved(f".org $8000\nback: {filler(126)}\nbcc back")
        assert ops(ir)[0].param.value == OpParam.byte(0x80)

    def test_backward_out_of_range(self):
        with pytest.raises(BranchRangeError, match="outside of range -128 to \\+127") as info:
            resolved(f".org $8000\nback: {filler(127)}\nbcc back")
        assert info.value.offset == -129

    def test_forward_branch_across_64k_wrap(self):
        ir, labels = resolved(".org $FFFC\nnop\nnop\nbeq target\ntarget: nop")
        branch = ops(ir)[2]
        assert branch.position == 0xFFFE
        assert labels["target"] == 0x0000
        assert branch.param.value == OpParam.byte(0x00)

    def test_backward_branch_across_64k_wrap(self):
        ir, _ = resolved(".org $FFFE\nback: nop\nnop\nbne back")
        branch = ops(ir)[2]
        assert branch.position == 0x0000
        assert branch.param.value == OpParam.byte(0xFC)  # -4


# =============================================================================
# Idempotence and Contracts
# =============================================================================

class TestRepeatedResolve:
    """Resolving resolved IR changes nothing."""

    def test_second_resolve_is_noop(self):
        ir, labels = resolved(
            "nop\nstart: lda #<data\nbne start\njmp data\ndata: .vector start"
        )
        positions = [b.position for b in ir.blocks]
        params = [op.param for op in ops(ir)]
        vector = ir.blocks[-1].chunks[0].value

        assert resolve(ir) == labels
        assert [b.position for b in ir.blocks] == positions
        assert [op.param for op in ops(ir)] == params
        assert ir.blocks[-1].chunks[0].value == vector

    def test_width_mismatch_is_contract_failure(self):
        """A hand-built chunk that breaks the width invariant trips an assert."""
        code = lookup(OpClass.LDA, AddressingMode.ABSOLUTE)
        op = OpChunk(SourceTag(0, 0), code, ResolvedParam(AddressingMode.ABSOLUTE, OpParam.byte(1)))
        with pytest.raises(AssertionError):
            resolve(IR([Block(chunks=[op])]))

    def test_unknown_chunk_type(self):
        with pytest.raises(TypeError):
            resolve(IR([Block(chunks=[object()])]))
