"""Machine-code encoding of assembler instructions."""

from __future__ import annotations

import sys
from typing import TextIO

from .asm_lexer import OperandType, Symbol
from .asm_semantic import Assembly
from .elf_object import R_386_32, R_386_PC32, ElfObject

PREFIX = 0x66

# Per instruction: 8-bit r,r  r,rm  rm,r  r,imm | 32-bit r,r  r,rm  rm,r  r,imm
_TWO_OP = (
    0x88, 0x8A, 0x88, 0xB0, 0x89, 0x8B, 0x89, 0xB8,  # mov
    0x38, 0x3A, 0x38, 0x80, 0x39, 0x3B, 0x39, 0x81,  # cmp
    0x28, 0x2A, 0x28, 0x80, 0x29, 0x2B, 0x29, 0x81,  # sub
    0x00, 0x02, 0x00, 0x80, 0x01, 0x03, 0x01, 0x81,  # add
    0x22, 0x22, 0x20, 0x80, 0x23, 0x23, 0x21, 0x81,  # and
    0x0A, 0x0A, 0x08, 0x80, 0x0B, 0x0B, 0x09, 0x81,  # or
    0x00, 0x00, 0x00, 0x00, 0x00, 0x8D, 0x00, 0x00,  # lea
)

_ONE_OP = (
    0xE8, 0xCD, 0xF7, 0xF7, 0xF7, 0x40, 0x48, 0xE9,  # call int imul idiv neg inc dec jmp
    0x84, 0x85, 0x8F, 0x8C, 0x8D, 0x8E, 0x86,        # je jne jg jl jge jle jna
    0x94, 0x95, 0x9F, 0x9D, 0x9C, 0x9E,              # sete setne setg setge setl setle
    0x50,                                            # push
    0x58,                                            # pop
)

_RET = 0xC3

# ModRM reg field for the immediate forms of cmp, sub, add, and, or
_IMM_REG_CODES = (7, 5, 0, 4, 1)


class Encoder:
    """Writes instruction bytes for the current instruction state."""

    def __init__(self, assembly: Assembly, elf: ElfObject, out: TextIO | None = None) -> None:
        self.assembly = assembly
        self.elf = elf
        self.line = 0
        self.messages: list[str] = []
        self._out = out

    def _report(self, message: str) -> None:
        self.messages.append(message)
        print(message, file=self._out if self._out is not None else sys.stdout)

    def _byte(self, value: int) -> None:
        self.assembly.write_bytes(value & 0xFF, 1)

    def write_modrm(self) -> None:
        """Emit the ModRM byte unless it is unused."""
        m = self.assembly.modrm
        if m.mod != -1:
            self._byte(((m.mod & 3) << 6) + ((m.reg & 7) << 3) + (m.rm & 7))

    def write_sib(self) -> None:
        """Emit the SIB byte unless it is unused."""
        s = self.assembly.sib
        if s.scale != -1:
            self._byte(((s.scale & 3) << 6) + ((s.index & 7) << 3) + (s.base & 7))

    def process_rel(self, rel_type: int) -> bool:
        """Record a relocation for the pending label if one is needed."""
        asm = self.assembly
        label = asm.rel_label
        asm.rel_label = None
        if asm.scan_pass == 1 or label is None:
            return False
        needed = (
            (rel_type == R_386_32 and not label.is_equ)
            or (rel_type == R_386_PC32 and label.externed)
        )
        if needed:
            self.elf.add_relocation(asm.cur_seg, asm.cur_addr, label.name, rel_type)
        return needed

    def gen2op(self, opt: Symbol, dest_type: int, src_type: int, length: int) -> None:
        """Encode a two-operand instruction (mov, cmp, sub, add, and, or, lea)."""
        if not Symbol.I_MOV <= opt <= Symbol.I_LEA:
            raise ValueError(f"{opt!r} is not a two-operand instruction")
        asm = self.assembly
        modrm = asm.modrm
        if length == 2:
            self._byte(PREFIX)

        if src_type == OperandType.IMMD:
            index = 3
        else:
            index = (dest_type - 2) * 2 + src_type - 2
        index = (opt - Symbol.I_MOV) * 8 + (1 - length % 2) * 4 + index
        if not 0 <= index < len(_TWO_OP):
            raise ValueError(f"no encoding for operand types {dest_type}, {src_type}")
        opcode = _TWO_OP[index]

        if modrm.mod == -1:
            if opt == Symbol.I_MOV:
                self._byte(opcode + modrm.reg)
            else:
                position = opt - Symbol.I_CMP
                modrm.mod = 3
                modrm.rm = modrm.reg
                if not 0 <= position < len(_IMM_REG_CODES):
                    self._report(f"opcode err [line: {self.line}]")
                    return
                modrm.reg = _IMM_REG_CODES[position]
                self._byte(opcode)
                self.write_modrm()
            self.process_rel(R_386_32)
            asm.write_bytes(asm.instr.imm32, length)
        elif modrm.mod == 0:
            self._byte(opcode)
            self.write_modrm()
            if modrm.rm == 5:
                self.process_rel(R_386_32)
                asm.instr.write_disp(asm)
            elif modrm.rm == 4:
                self.write_sib()
        elif modrm.mod in (1, 2):
            self._byte(opcode)
            self.write_modrm()
            if modrm.rm == 4:
                self.write_sib()
            asm.instr.write_disp(asm)
        elif modrm.mod == 3:
            self._byte(opcode)
            self.write_modrm()

    def gen1op(self, opt: Symbol, operand_type: int, length: int) -> None:
        """Encode a one-operand instruction (call, jumps, setcc, push, pop, ...)."""
        if not Symbol.I_CALL <= opt <= Symbol.I_POP:
            raise ValueError(f"{opt!r} is not a one-operand instruction")
        asm = self.assembly
        modrm = asm.modrm
        opcode = _ONE_OP[opt - Symbol.I_CALL]

        if opt == Symbol.I_CALL or Symbol.I_JMP <= opt <= Symbol.I_JNA:
            if opt not in (Symbol.I_CALL, Symbol.I_JMP):
                self._byte(0x0F)
            self._byte(opcode)
            addr = asm.cur_addr if self.process_rel(R_386_PC32) else asm.instr.imm32
            pc = asm.cur_addr + 4
            asm.write_bytes(addr - pc, 4)
        elif Symbol.I_SETE <= opt <= Symbol.I_SETLE:
            modrm.mod = 3
            modrm.rm = modrm.reg
            modrm.reg = 0
            self._byte(0x0F)
            self._byte(opcode)
            self.write_modrm()
        elif opt == Symbol.I_INT:
            self._byte(opcode)
            asm.write_bytes(asm.instr.imm32, 1)
        elif opt == Symbol.I_PUSH:
            if operand_type == OperandType.IMMD:
                self._byte(0x68)
                asm.write_bytes(asm.instr.imm32, 4)
            else:
                if length == 2:
                    self._byte(PREFIX)
                self._byte(opcode + modrm.reg)
        elif opt in (Symbol.I_INC, Symbol.I_DEC):
            if length == 1:
                self._byte(0xFE)
                self._byte((0xC0 if opt == Symbol.I_INC else 0xC8) + modrm.reg)
            else:
                if length == 2:
                    self._byte(PREFIX)
                self._byte(opcode + modrm.reg)
        elif opt == Symbol.I_NEG:
            if length == 1:
                opcode = 0xF6
            if length == 2:
                self._byte(PREFIX)
            self._byte(opcode)
            self._byte(0xD8 + modrm.reg)
        elif opt == Symbol.I_POP:
            if length == 2:
                self._byte(PREFIX)
            self._byte(opcode + modrm.reg)
        elif opt in (Symbol.I_IMUL, Symbol.I_IDIV):
            if length == 2:
                self._byte(PREFIX)
            self._byte(opcode)
            self._byte((0xE8 if opt == Symbol.I_IMUL else 0xF8) + modrm.reg)

    def gen0op(self, opt: Symbol) -> None:
        """Encode an instruction without operands (ret)."""
        self._byte(_RET)