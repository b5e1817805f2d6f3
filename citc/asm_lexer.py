"""Lexical analyser for the assembler's source language."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from enum import IntEnum, auto
from typing import TextIO

ID_LEN = 30
"""Longest identifier kept; extra characters are dropped."""
NUM_LEN = 9
"""Most decimal digits kept; extra digits are dropped."""
STRING_LEN = 255
"""Longest string literal kept; extra characters are dropped."""

_EOF = ""


class Symbol(IntEnum):
    """Assembler symbols, in the order the encoder relies on."""

    NULL = 0
    IDENT = auto()
    EXCEP = auto()
    NUMBER = auto()
    STRINGS = auto()
    ADDI = auto()
    SUBS = auto()
    COMMA = auto()
    LBRAC = auto()
    RBRAC = auto()
    COLON = auto()
    BR_AL = auto()
    BR_CL = auto()
    BR_DL = auto()
    BR_BL = auto()
    BR_AH = auto()
    BR_CH = auto()
    BR_DH = auto()
    BR_BH = auto()
    WR_AX = auto()
    WR_CX = auto()
    WR_DX = auto()
    WR_BX = auto()
    WR_SP = auto()
    WR_BP = auto()
    WR_SI = auto()
    WR_DI = auto()
    DR_EAX = auto()
    DR_ECX = auto()
    DR_EDX = auto()
    DR_EBX = auto()
    DR_ESP = auto()
    DR_EBP = auto()
    DR_ESI = auto()
    DR_EDI = auto()
    I_MOV = auto()
    I_CMP = auto()
    I_SUB = auto()
    I_ADD = auto()
    I_AND = auto()
    I_OR = auto()
    I_LEA = auto()
    I_CALL = auto()
    I_INT = auto()
    I_IMUL = auto()
    I_IDIV = auto()
    I_NEG = auto()
    I_INC = auto()
    I_DEC = auto()
    I_JMP = auto()
    I_JE = auto()
    I_JNE = auto()
    I_JG = auto()
    I_JL = auto()
    I_JGE = auto()
    I_JLE = auto()
    I_JNA = auto()
    I_SETE = auto()
    I_SETNE = auto()
    I_SETG = auto()
    I_SETGE = auto()
    I_SETL = auto()
    I_SETLE = auto()
    I_PUSH = auto()
    I_POP = auto()
    I_RET = auto()
    A_SEC = auto()
    A_GLB = auto()
    A_EQU = auto()
    A_TIMES = auto()
    A_DB = auto()
    A_DW = auto()
    A_DD = auto()


class OperandType(IntEnum):
    """Kinds of instruction operand."""

    IMMD = 1
    REGS = 2
    MEMR = 3


_KEYWORDS: dict[str, Symbol] = {
    "al": Symbol.BR_AL, "cl": Symbol.BR_CL, "dl": Symbol.BR_DL, "bl": Symbol.BR_BL,
    "ah": Symbol.BR_AH, "ch": Symbol.BR_CH, "dh": Symbol.BR_DH, "bh": Symbol.BR_BH,
    "ax": Symbol.WR_AX, "cx": Symbol.WR_CX, "dx": Symbol.WR_DX, "bx": Symbol.WR_BX,
    "sp": Symbol.WR_SP, "bp": Symbol.WR_BP, "si": Symbol.WR_SI, "di": Symbol.WR_DI,
    "eax": Symbol.DR_EAX, "ecx": Symbol.DR_ECX, "edx": Symbol.DR_EDX, "ebx": Symbol.DR_EBX,
    "esp": Symbol.DR_ESP, "ebp": Symbol.DR_EBP, "esi": Symbol.DR_ESI, "edi": Symbol.DR_EDI,
    "mov": Symbol.I_MOV, "cmp": Symbol.I_CMP, "sub": Symbol.I_SUB, "add": Symbol.I_ADD,
    "and": Symbol.I_AND, "or": Symbol.I_OR, "lea": Symbol.I_LEA,
    "call": Symbol.I_CALL, "int": Symbol.I_INT,
    "imul": Symbol.I_IMUL, "idiv": Symbol.I_IDIV,
    "neg": Symbol.I_NEG, "inc": Symbol.I_INC, "dec": Symbol.I_DEC,
    "jmp": Symbol.I_JMP, "je": Symbol.I_JE, "jne": Symbol.I_JNE, "jg": Symbol.I_JG,
    "jl": Symbol.I_JL, "jge": Symbol.I_JGE, "jle": Symbol.I_JLE, "jna": Symbol.I_JNA,
    "sete": Symbol.I_SETE, "setne": Symbol.I_SETNE, "setg": Symbol.I_SETG,
    "setge": Symbol.I_SETGE, "setl": Symbol.I_SETL, "setle": Symbol.I_SETLE,
    "push": Symbol.I_PUSH, "pop": Symbol.I_POP,
    "ret": Symbol.I_RET,
    "section": Symbol.A_SEC, "global": Symbol.A_GLB, "equ": Symbol.A_EQU,
    "times": Symbol.A_TIMES, "db": Symbol.A_DB, "dw": Symbol.A_DW, "dd": Symbol.A_DD,
}

_SINGLE = {
    "+": Symbol.ADDI, "-": Symbol.SUBS, ":": Symbol.COLON, ",": Symbol.COMMA,
    "[": Symbol.LBRAC, "]": Symbol.RBRAC,
}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_hex(ch: str) -> bool:
    return _is_digit(ch) or "a" <= ch <= "f" or "A" <= ch <= "F"


def _is_id_start(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch in ("_", "@", ".")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


class AsmLexer:
    """Reads assembler symbols from a source text."""

    def __init__(self, text: str, out: TextIO | None = None) -> None:
        self._text = text.split("\0", 1)[0]
        self._pos = 0
        self._out = out
        self.ch = " "
        self.old_ch = " "
        self.line = 0
        self.column = 0
        self.line_len = 0
        self.sym = Symbol.NULL
        self.ident = ""
        self.number = 0
        self.string = ""
        self.errors = 0
        self.exhausted = False
        self.messages: list[str] = []

    def _report(self, message: str) -> None:
        self.messages.append(message)
        print(message, file=self._out if self._out is not None else sys.stdout)

    def _get_char(self) -> bool:
        if self._pos >= len(self._text):
            self.ch = _EOF
            self.exhausted = True
            return False
        self.old_ch = self.ch
        self.ch = self._text[self._pos]
        self._pos += 1
        self.line_len += 1
        self.column += 1
        if self.ch == "\n":
            self.line += 1
            self.line_len = self.column = 0
        return True

    def next_symbol(self) -> Symbol:
        """Read the next symbol, store it in ``sym`` and return it."""
        while self.ch in (" ", "\n", "\t"):
            self._get_char()

        ch = self.ch
        if _is_id_start(ch):
            chars = []
            while _is_id_start(self.ch) or _is_digit(self.ch):
                chars.append(self.ch)
                self._get_char()
            self.ident = "".join(chars)[:ID_LEN]
            self.sym = _KEYWORDS.get(self.ident, Symbol.IDENT)
            return self.sym
        if _is_digit(ch):
            self._number()
            return self.sym
        if ch in _SINGLE:
            self.sym = _SINGLE[ch]
            self._get_char()
        elif ch == ";":
            self.sym = Symbol.NULL
            self._get_char()
            while self.ch != "\n":
                if not self._get_char():
                    return self.sym
            self._get_char()
        elif ch == '"':
            self._string()
        elif ch == _EOF:
            self.sym = Symbol.NULL
        else:
            self.sym = Symbol.EXCEP
            self._report(f"不能解析的词法符号 [line: {self.line}]")
            self.errors += 1
            self._get_char()
        return self.sym

    def _number(self) -> None:
        self.sym = Symbol.NUMBER
        value = 0
        if self.ch != "0":
            count = 0
            while _is_digit(self.ch):
                if count < NUM_LEN:
                    value = value * 10 + int(self.ch)
                    count += 1
                self._get_char()
            self.number = value
            return

        self._get_char()
        if self.ch in ("x", "X"):
            if not self._get_char():
                self.number = 0
                return
            if _is_hex(self.ch):
                while _is_hex(self.ch):
                    value = _to_int32(value * 16 + int(self.ch, 16))
                    self._get_char()
            else:
                self._report(f"lex error: [line {self.line}]")
        elif self.ch in ("b", "B"):
            self._get_char()
            if self.ch in ("0", "1"):
                while self.ch in ("0", "1"):
                    value = _to_int32(value * 2 + int(self.ch))
                    self._get_char()
            else:
                self._report(f"lex error: [line {self.line}]")
        elif "0" <= self.ch <= "7":
            while "0" <= self.ch <= "7":
                value = _to_int32(value * 8 + int(self.ch))
                self._get_char()
        self.number = value

    def _string(self) -> None:
        self.sym = Symbol.NULL
        if not self._get_char():
            return
        chars = []
        while self.ch != '"':
            if len(chars) < STRING_LEN:
                chars.append(self.ch)
            if not self._get_char():
                return
        self.string = "".join(chars)
        self.sym = Symbol.STRINGS
        self._get_char()

    def __iter__(self) -> Iterator[Symbol]:
        """Yield every non-null symbol until the input is used up."""
        while True:
            sym = self.next_symbol()
            if sym is not Symbol.NULL:
                yield sym
            if self.exhausted and self.ch == _EOF:
                return