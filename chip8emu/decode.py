"""CHIP-8 instruction decoding.

Every 16-bit word either decodes to exactly one ``Op`` or raises
``UnknownOpcodeFault``. Cogwood's CHIP-8 Technical reference:
http://devernay.free.fr/hacks/chip8/C8TECH10.HTM#3.0
"""

from collections import namedtuple
from enum import Enum

from .errors import UnknownOpcodeFault


class Op(Enum):
    SYS = "SYS addr"
    CLS = "CLS"
    RET = "RET"
    JP = "JP addr"
    CALL = "CALL addr"
    SE_VX_BYTE = "SE Vx, byte"
    SNE_VX_BYTE = "SNE Vx, byte"
    SE_VX_VY = "SE Vx, Vy"
    LD_VX_BYTE = "LD Vx, byte"
    ADD_VX_BYTE = "ADD Vx, byte"
    LD_VX_VY = "LD Vx, Vy"
    OR = "OR Vx, Vy"
    AND = "AND Vx, Vy"
    XOR = "XOR Vx, Vy"
    ADD = "ADD Vx, Vy"
    SUB = "SUB Vx, Vy"
    SHR = "SHR Vx"
    SUBN = "SUBN Vx, Vy"
    SHL = "SHL Vx"
    SNE_VX_VY = "SNE Vx, Vy"
    LD_I = "LD I, addr"
    JP_V0 = "JP V0, addr"
    RND = "RND Vx, byte"
    DRW = "DRW Vx, Vy, nibble"
    SKP = "SKP Vx"
    SKNP = "SKNP Vx"
    LD_VX_DT = "LD Vx, DT"
    LD_VX_K = "LD Vx, K"
    LD_DT_VX = "LD DT, Vx"
    LD_ST_VX = "LD ST, Vx"
    ADD_I_VX = "ADD I, Vx"
    LD_F_VX = "LD F, Vx"
    LD_B_VX = "LD B, Vx"
    LD_MEM_VX = "LD [I], Vx"
    LD_VX_MEM = "LD Vx, [I]"


Instruction = namedtuple("Instruction", "op opcode x y n kk nnn")

# families where the top nibble alone picks the instruction
_BY_FAMILY = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_VX_BYTE,
    0x4: Op.SNE_VX_BYTE,
    0x6: Op.LD_VX_BYTE,
    0x7: Op.ADD_VX_BYTE,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}

# 8xyN, keyed by N
_ALU = {
    0x0: Op.LD_VX_VY,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

# ExKK, keyed by KK
_KEYS = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

# FxKK, keyed by KK
_MISC = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_MEM_VX,
    0x65: Op.LD_VX_MEM,
}


def _lookup(opcode):
    family = opcode >> 12
    n = opcode & 0xF
    kk = opcode & 0xFF

    if family == 0x0:
        if opcode == 0x00E0:
            return Op.CLS
        if opcode == 0x00EE:
            return Op.RET
        return Op.SYS
    if family == 0x5:
        return Op.SE_VX_VY if n == 0 else None
    if family == 0x9:
        return Op.SNE_VX_VY if n == 0 else None
    if family == 0x8:
        return _ALU.get(n)
    if family == 0xE:
        return _KEYS.get(kk)
    if family == 0xF:
        return _MISC.get(kk)
    return _BY_FAMILY[family]


def decode(opcode, pc=0):
    """Split ``opcode`` into its fields. ``pc`` is only used to report faults."""
    opcode &= 0xFFFF
    op = _lookup(opcode)
    if op is None:
        raise UnknownOpcodeFault(opcode, pc)
    return Instruction(
        op=op,
        opcode=opcode,
        x=(opcode & 0x0F00) >> 8,
        y=(opcode & 0x00F0) >> 4,
        n=opcode & 0x000F,
        kk=opcode & 0x00FF,
        nnn=opcode & 0x0FFF,
    )
