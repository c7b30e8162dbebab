"""
MOS 6502 Instruction Set Definition
===================================

This module defines the documented NMOS 6502 instruction set: every
mnemonic, the addressing modes it supports, and the opcode byte for each
(mnemonic, mode) pair. The 6502 is little-endian: multi-byte operands
are stored low byte first.

Addressing Modes
----------------
| Mode            | Syntax      | Size | Example       |
|-----------------|-------------|------|---------------|
| IMPLIED         | (none), A   | 1    | RTS, ASL A    |
| IMMEDIATE       | #value      | 2    | LDA #$41      |
| ZERO_PAGE       | $zz         | 2    | LDA $40       |
| ZERO_PAGE_X     | $zz,X       | 2    | LDA $40,X     |
| ZERO_PAGE_Y     | $zz,Y       | 2    | LDX $40,Y     |
| ABSOLUTE        | $hhll       | 3    | LDA $1234     |
| ABSOLUTE_X      | $hhll,X     | 3    | LDA $1234,X   |
| ABSOLUTE_Y      | $hhll,Y     | 3    | LDA $1234,Y   |
| INDIRECT        | ($hhll)     | 3    | JMP ($FFFC)   |
| PRE_INDIRECT_X  | ($zz,X)     | 2    | LDA ($40,X)   |
| POST_INDIRECT_Y | ($zz),Y     | 2    | LDA ($40),Y   |
| PC_RELATIVE     | label       | 2    | BNE loop      |

The accumulator forms of ASL, LSR, ROL and ROR take no memory operand and
are filed under IMPLIED.

This table is a pure lookup capability: it has no state and is never
modified at runtime.

Reference
---------
- MOS MCS6500 Microcomputer Family Programming Manual (1976)
- http://www.6502.org/tutorials/6502opcodes.html
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


# =============================================================================
# Addressing Mode Enumeration
# =============================================================================

class AddressingMode(Enum):
    """
    6502 addressing modes.

    The mode determines how the operand bytes following the opcode are
    interpreted, and therefore the instruction size.
    """
    IMPLIED = auto()          # No operand (RTS) or accumulator (ASL A)
    IMMEDIATE = auto()        # #value
    ZERO_PAGE = auto()        # $00-$FF
    ZERO_PAGE_X = auto()      # $zz,X
    ZERO_PAGE_Y = auto()      # $zz,Y
    ABSOLUTE = auto()         # Full 16-bit address
    ABSOLUTE_X = auto()       # $hhll,X
    ABSOLUTE_Y = auto()       # $hhll,Y
    INDIRECT = auto()         # ($hhll), JMP only
    PRE_INDIRECT_X = auto()   # ($zz,X)
    POST_INDIRECT_Y = auto()  # ($zz),Y
    PC_RELATIVE = auto()      # Signed 8-bit branch displacement

    def __str__(self) -> str:
        """Return human-readable name for error messages."""
        return self.name.lower().replace("_", " ")


# Total instruction size (opcode byte + operand bytes) for each mode
MODE_LENGTHS: dict[AddressingMode, int] = {
    AddressingMode.IMPLIED: 1,
    AddressingMode.IMMEDIATE: 2,
    AddressingMode.ZERO_PAGE: 2,
    AddressingMode.ZERO_PAGE_X: 2,
    AddressingMode.ZERO_PAGE_Y: 2,
    AddressingMode.ABSOLUTE: 3,
    AddressingMode.ABSOLUTE_X: 3,
    AddressingMode.ABSOLUTE_Y: 3,
    AddressingMode.INDIRECT: 3,
    AddressingMode.PRE_INDIRECT_X: 2,
    AddressingMode.POST_INDIRECT_Y: 2,
    AddressingMode.PC_RELATIVE: 2,
}


# =============================================================================
# Operation Classes
# =============================================================================

class OpClass(Enum):
    """One member per 6502 mnemonic."""
    ADC = "ADC"
    AND = "AND"
    ASL = "ASL"
    BCC = "BCC"
    BCS = "BCS"
    BEQ = "BEQ"
    BIT = "BIT"
    BMI = "BMI"
    BNE = "BNE"
    BPL = "BPL"
    BRK = "BRK"
    BVC = "BVC"
    BVS = "BVS"
    CLC = "CLC"
    CLD = "CLD"
    CLI = "CLI"
    CLV = "CLV"
    CMP = "CMP"
    CPX = "CPX"
    CPY = "CPY"
    DEC = "DEC"
    DEX = "DEX"
    DEY = "DEY"
    EOR = "EOR"
    INC = "INC"
    INX = "INX"
    INY = "INY"
    JMP = "JMP"
    JSR = "JSR"
    LDA = "LDA"
    LDX = "LDX"
    LDY = "LDY"
    LSR = "LSR"
    NOP = "NOP"
    ORA = "ORA"
    PHA = "PHA"
    PHP = "PHP"
    PLA = "PLA"
    PLP = "PLP"
    ROL = "ROL"
    ROR = "ROR"
    RTI = "RTI"
    RTS = "RTS"
    SBC = "SBC"
    SEC = "SEC"
    SED = "SED"
    SEI = "SEI"
    STA = "STA"
    STX = "STX"
    STY = "STY"
    TAX = "TAX"
    TAY = "TAY"
    TSX = "TSX"
    TXA = "TXA"
    TXS = "TXS"
    TYA = "TYA"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Opcode Descriptor
# =============================================================================

@dataclass(frozen=True)
class OpCode:
    """
    A specific instruction encoding.

    Attributes:
        op_class: The mnemonic this encoding belongs to
        mode: Addressing mode of this encoding
        value: The opcode byte
        length: Total instruction size in bytes (1-3, opcode included)
    """
    op_class: OpClass
    mode: AddressingMode
    value: int
    length: int

    def __repr__(self) -> str:
        return f"OpCode({self.op_class} {self.mode}, value=${self.value:02X}, length={self.length})"


# =============================================================================
# Opcode Table
# =============================================================================
# Encodings per mnemonic, keyed by addressing mode. OPCODE_TABLE below is
# built from this and keyed by (op_class, mode).
# =============================================================================

_IMP = AddressingMode.IMPLIED
_IMM = AddressingMode.IMMEDIATE
_ZP = AddressingMode.ZERO_PAGE
_ZPX = AddressingMode.ZERO_PAGE_X
_ZPY = AddressingMode.ZERO_PAGE_Y
_ABS = AddressingMode.ABSOLUTE
_ABX = AddressingMode.ABSOLUTE_X
_ABY = AddressingMode.ABSOLUTE_Y
_IND = AddressingMode.INDIRECT
_IZX = AddressingMode.PRE_INDIRECT_X
_IZY = AddressingMode.POST_INDIRECT_Y
_REL = AddressingMode.PC_RELATIVE

_ENCODINGS: dict[OpClass, dict[AddressingMode, int]] = {
    # =========================================================================
    # LOAD / STORE
    # =========================================================================
    OpClass.LDA: {_IMM: 0xA9, _ZP: 0xA5, _ZPX: 0xB5, _ABS: 0xAD,
                  _ABX: 0xBD, _ABY: 0xB9, _IZX: 0xA1, _IZY: 0xB1},
    OpClass.LDX: {_IMM: 0xA2, _ZP: 0xA6, _ZPY: 0xB6, _ABS: 0xAE, _ABY: 0xBE},
    OpClass.LDY: {_IMM: 0xA0, _ZP: 0xA4, _ZPX: 0xB4, _ABS: 0xAC, _ABX: 0xBC},
    OpClass.STA: {_ZP: 0x85, _ZPX: 0x95, _ABS: 0x8D, _ABX: 0x9D,
                  _ABY: 0x99, _IZX: 0x81, _IZY: 0x91},
    OpClass.STX: {_ZP: 0x86, _ZPY: 0x96, _ABS: 0x8E},
    OpClass.STY: {_ZP: 0x84, _ZPX: 0x94, _ABS: 0x8C},

    # =========================================================================
    # ARITHMETIC / LOGIC
    # =========================================================================
    OpClass.ADC: {_IMM: 0x69, _ZP: 0x65, _ZPX: 0x75, _ABS: 0x6D,
                  _ABX: 0x7D, _ABY: 0x79, _IZX: 0x61, _IZY: 0x71},
    OpClass.SBC: {_IMM: 0xE9, _ZP: 0xE5, _ZPX: 0xF5, _ABS: 0xED,
                  _ABX: 0xFD, _ABY: 0xF9, _IZX: 0xE1, _IZY: 0xF1},
    OpClass.AND: {_IMM: 0x29, _ZP: 0x25, _ZPX: 0x35, _ABS: 0x2D,
                  _ABX: 0x3D, _ABY: 0x39, _IZX: 0x21, _IZY: 0x31},
    OpClass.ORA: {_IMM: 0x09, _ZP: 0x05, _ZPX: 0x15, _ABS: 0x0D,
                  _ABX: 0x1D, _ABY: 0x19, _IZX: 0x01, _IZY: 0x11},
    OpClass.EOR: {_IMM: 0x49, _ZP: 0x45, _ZPX: 0x55, _ABS: 0x4D,
                  _ABX: 0x5D, _ABY: 0x59, _IZX: 0x41, _IZY: 0x51},
    OpClass.CMP: {_IMM: 0xC9, _ZP: 0xC5, _ZPX: 0xD5, _ABS: 0xCD,
                  _ABX: 0xDD, _ABY: 0xD9, _IZX: 0xC1, _IZY: 0xD1},
    OpClass.CPX: {_IMM: 0xE0, _ZP: 0xE4, _ABS: 0xEC},
    OpClass.CPY: {_IMM: 0xC0, _ZP: 0xC4, _ABS: 0xCC},
    OpClass.BIT: {_ZP: 0x24, _ABS: 0x2C},

    # =========================================================================
    # INCREMENT / DECREMENT
    # =========================================================================
    OpClass.INC: {_ZP: 0xE6, _ZPX: 0xF6, _ABS: 0xEE, _ABX: 0xFE},
    OpClass.DEC: {_ZP: 0xC6, _ZPX: 0xD6, _ABS: 0xCE, _ABX: 0xDE},
    OpClass.INX: {_IMP: 0xE8},
    OpClass.INY: {_IMP: 0xC8},
    OpClass.DEX: {_IMP: 0xCA},
    OpClass.DEY: {_IMP: 0x88},

    # =========================================================================
    # SHIFTS / ROTATES (IMPLIED = accumulator form)
    # =========================================================================
    OpClass.ASL: {_IMP: 0x0A, _ZP: 0x06, _ZPX: 0x16, _ABS: 0x0E, _ABX: 0x1E},
    OpClass.LSR: {_IMP: 0x4A, _ZP: 0x46, _ZPX: 0x56, _ABS: 0x4E, _ABX: 0x5E},
    OpClass.ROL: {_IMP: 0x2A, _ZP: 0x26, _ZPX: 0x36, _ABS: 0x2E, _ABX: 0x3E},
    OpClass.ROR: {_IMP: 0x6A, _ZP: 0x66, _ZPX: 0x76, _ABS: 0x6E, _ABX: 0x7E},

    # =========================================================================
    # CONTROL FLOW
    # =========================================================================
    OpClass.JMP: {_ABS: 0x4C, _IND: 0x6C},
    OpClass.JSR: {_ABS: 0x20},
    OpClass.RTS: {_IMP: 0x60},
    OpClass.RTI: {_IMP: 0x40},
    OpClass.BRK: {_IMP: 0x00},
    OpClass.BCC: {_REL: 0x90},
    OpClass.BCS: {_REL: 0xB0},
    OpClass.BEQ: {_REL: 0xF0},
    OpClass.BMI: {_REL: 0x30},
    OpClass.BNE: {_REL: 0xD0},
    OpClass.BPL: {_REL: 0x10},
    OpClass.BVC: {_REL: 0x50},
    OpClass.BVS: {_REL: 0x70},

    # =========================================================================
    # REGISTER TRANSFERS / STACK
    # =========================================================================
    OpClass.TAX: {_IMP: 0xAA},
    OpClass.TAY: {_IMP: 0xA8},
    OpClass.TSX: {_IMP: 0xBA},
    OpClass.TXA: {_IMP: 0x8A},
    OpClass.TXS: {_IMP: 0x9A},
    OpClass.TYA: {_IMP: 0x98},
    OpClass.PHA: {_IMP: 0x48},
    OpClass.PHP: {_IMP: 0x08},
    OpClass.PLA: {_IMP: 0x68},
    OpClass.PLP: {_IMP: 0x28},

    # =========================================================================
    # FLAGS
    # =========================================================================
    OpClass.CLC: {_IMP: 0x18},
    OpClass.CLD: {_IMP: 0xD8},
    OpClass.CLI: {_IMP: 0x58},
    OpClass.CLV: {_IMP: 0xB8},
    OpClass.SEC: {_IMP: 0x38},
    OpClass.SED: {_IMP: 0xF8},
    OpClass.SEI: {_IMP: 0x78},
    OpClass.NOP: {_IMP: 0xEA},
}

OPCODE_TABLE: dict[tuple[OpClass, AddressingMode], OpCode] = {
    (op_class, mode): OpCode(op_class, mode, value, MODE_LENGTHS[mode])
    for op_class, modes in _ENCODINGS.items()
    for mode, value in modes.items()
}


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

MNEMONICS: frozenset[str] = frozenset(op_class.value for op_class in OpClass)

# Instructions that transfer control. JMP and JSR take absolute (or
# indirect) addresses; the rest are PC-relative conditional branches.
JUMP_CLASSES: frozenset[OpClass] = frozenset({OpClass.JMP, OpClass.JSR})

BRANCH_CLASSES: frozenset[OpClass] = frozenset({
    OpClass.BCC, OpClass.BCS, OpClass.BEQ, OpClass.BMI,
    OpClass.BNE, OpClass.BPL, OpClass.BVC, OpClass.BVS,
}) | JUMP_CLASSES

# Shifts and rotates whose IMPLIED form operates on the accumulator (ASL A)
ACCUMULATOR_CLASSES: frozenset[OpClass] = frozenset({
    OpClass.ASL, OpClass.LSR, OpClass.ROL, OpClass.ROR,
})


# =============================================================================
# Lookup Functions
# =============================================================================

def classify(mnemonic: str) -> Optional[OpClass]:
    """
    Map a mnemonic to its operation class.

    Args:
        mnemonic: Instruction mnemonic, any case

    Returns:
        The OpClass, or None if the mnemonic is not a 6502 instruction
    """
    return OpClass.__members__.get(mnemonic.upper())


def lookup(op_class: OpClass, mode: AddressingMode) -> Optional[OpCode]:
    """
    Find the encoding of an operation class in an addressing mode.

    Returns:
        The OpCode, or None if the instruction has no such form
    """
    return OPCODE_TABLE.get((op_class, mode))


def get_valid_modes(op_class: OpClass) -> list[AddressingMode]:
    """Return the addressing modes an operation class supports."""
    return list(_ENCODINGS[op_class])


def is_branch(op_class: OpClass) -> bool:
    """Return True for instructions that transfer control (branches, JMP, JSR)."""
    return op_class in BRANCH_CLASSES


def is_jump(op_class: OpClass) -> bool:
    """Return True for the absolute control transfers JMP and JSR."""
    return op_class in JUMP_CLASSES


def has_accumulator_form(op_class: OpClass) -> bool:
    """Return True if the instruction accepts the accumulator operand 'A'."""
    return op_class in ACCUMULATOR_CLASSES
