"""Relocatable 32-bit ELF object file built by the assembler."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any

EHDR_SIZE = 52
SHDR_SIZE = 40
SYM_SIZE = 16
REL_SIZE = 8

ET_REL = 1
EM_386 = 3
EV_CURRENT = 1

SHT_NULL = 0
SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_NOBITS = 8
SHT_REL = 9

SHF_WRITE = 0x1
SHF_ALLOC = 0x2
SHF_EXECINSTR = 0x4

SHN_UNDEF = 0
STN_UNDEF = 0

STB_LOCAL = 0
STB_GLOBAL = 1
STT_NOTYPE = 0

R_386_32 = 1
R_386_PC32 = 2

_IDENT = bytes([0x7F, 0x45, 0x4C, 0x46, 0x01, 0x01, 0x01]) + bytes(9)
_EXTRA_SECTIONS = (".shstrtab", ".symtab", ".strtab", ".rel.text", ".rel.data")


def _st_info(bind: int, kind: int) -> int:
    return (bind << 4) + (kind & 0xF)


def _r_info(sym: int, kind: int) -> int:
    return ((sym << 8) + (kind & 0xFF)) & 0xFFFFFFFF


def _u32(value: int) -> int:
    return value & 0xFFFFFFFF


@dataclass
class RelInfo:
    """A pending relocation: where it is and which label it refers to."""

    segment: str
    offset: int
    label: str
    rel_type: int


@dataclass
class SectionHeader:
    """One entry of the section header table."""

    sh_name: int = 0
    sh_type: int = 0
    flags: int = 0
    addr: int = 0
    offset: int = 0
    size: int = 0
    link: int = 0
    info: int = 0
    addralign: int = 0
    entsize: int = 0

    def pack(self) -> bytes:
        return struct.pack(
            "<10I",
            *(_u32(v) for v in (
                self.sh_name, self.sh_type, self.flags, self.addr, self.offset,
                self.size, self.link, self.info, self.addralign, self.entsize,
            )),
        )


@dataclass
class ElfSymbol:
    """One entry of the symbol table."""

    st_name: int = 0
    value: int = 0
    size: int = 0
    info: int = 0
    other: int = 0
    shndx: int = 0

    @property
    def bind(self) -> int:
        return self.info >> 4

    def pack(self) -> bytes:
        return struct.pack(
            "<IIIBBH", _u32(self.st_name), _u32(self.value), _u32(self.size),
            self.info & 0xFF, self.other & 0xFF, self.shndx & 0xFFFF,
        )


class ElfObject:
    """Sections, symbols and relocations of one object file."""

    def __init__(self) -> None:
        self.sections: dict[str, SectionHeader] = {}
        self.section_names: list[str] = []
        self.symbols: dict[str, ElfSymbol] = {}
        self.symbol_names: list[str] = []
        self.relocations: list[RelInfo] = []
        self.shstrtab = b""
        self.strtab = b""
        self.rel_text: list[tuple[int, int]] = []
        self.rel_data: list[tuple[int, int]] = []
        self.shoff = 0
        self.shnum = 0
        self.add_header("", 0, 0, 0, 0, 0, 0, 0, 0, 0)

    def segment_index(self, name: str) -> int:
        """Index of the section ``name``; the table length if it is absent."""
        try:
            return self.section_names.index(name)
        except ValueError:
            return len(self.section_names)

    def symbol_index(self, name: str) -> int:
        """Index of the symbol ``name``; the table length if it is absent."""
        try:
            return self.symbol_names.index(name)
        except ValueError:
            return len(self.symbol_names)

    def add_section(self, name: str, size: int, data_len: int) -> None:
        """Add ``.text``, ``.data`` or ``.bss`` placed after ``data_len`` bytes of content."""
        offset = EHDR_SIZE + data_len
        if name == ".text":
            self.add_header(name, SHT_PROGBITS, SHF_ALLOC | SHF_EXECINSTR, 0, offset, size, 0, 0, 4, 0)
        elif name == ".data":
            self.add_header(name, SHT_PROGBITS, SHF_ALLOC | SHF_WRITE, 0, offset, size, 0, 0, 4, 0)
        elif name == ".bss":
            self.add_header(name, SHT_NOBITS, SHF_ALLOC | SHF_WRITE, 0, offset, size, 0, 0, 4, 0)

    def add_header(self, name: str, sh_type: int, flags: int, addr: int, offset: int,
                   size: int, link: int, info: int, addralign: int, entsize: int) -> None:
        """Append a section header entry."""
        self.sections[name] = SectionHeader(
            0, sh_type, flags, addr, offset, size, link, info, addralign, entsize,
        )
        self.section_names.append(name)

    def add_symbol(self, label: Any) -> None:
        """Append a symbol for a label record."""
        is_global = label.externed if label.seg_name == "" else label.is_global
        bind = STB_GLOBAL if is_global else STB_LOCAL
        shndx = STN_UNDEF if label.externed else self.segment_index(label.seg_name)
        self.symbols[label.name] = ElfSymbol(
            st_name=0,
            value=label.addr,
            size=label.times * label.length * len(label.content),
            info=_st_info(bind, STT_NOTYPE),
            other=0,
            shndx=shndx,
        )
        self.symbol_names.append(label.name)

    def add_relocation(self, segment: str, offset: int, label: str, rel_type: int) -> RelInfo:
        """Record a relocation and return it."""
        rel = RelInfo(segment, offset, label, rel_type)
        self.relocations.append(rel)
        return rel

    def assemble_object(self, data_len: int) -> None:
        """Lay out the string tables, symbol table and relocation sections."""
        all_names = [*self.section_names, *_EXTRA_SECTIONS]
        self.shnum = len(all_names)

        shstr_index = {
            ".rel.text": 0, ".text": 4, "": 9,
            ".rel.data": 10, ".data": 14,
            ".bss": 20, ".shstrtab": 25, ".symtab": 35, ".strtab": 43,
        }
        self.shstrtab = b".rel.text\0.rel.data\0.bss\0.shstrtab\0.symtab\0.strtab\0"

        cur_off = EHDR_SIZE + data_len
        self.add_header(".shstrtab", SHT_STRTAB, 0, 0, cur_off, len(self.shstrtab), SHN_UNDEF, 0, 1, 0)

        cur_off += len(self.shstrtab)
        self.shoff = cur_off
        cur_off += 9 * SHDR_SIZE

        self.add_header(".symtab", SHT_SYMTAB, 0, 0, cur_off,
                        len(self.symbol_names) * SYM_SIZE, 0, 0, 1, SYM_SIZE)
        self.sections[".symtab"].link = self.segment_index(".symtab") + 1

        strtab_size = sum(len(name.encode()) + 1 for name in self.symbol_names)
        cur_off += len(self.symbol_names) * SYM_SIZE
        self.add_header(".strtab", SHT_STRTAB, 0, 0, cur_off, strtab_size, SHN_UNDEF, 0, 1, 0)

        chunks = []
        index = 0
        for name in self.symbol_names:
            self.symbols[name].st_name = index
            encoded = name.encode() + b"\0"
            chunks.append(encoded)
            index += len(encoded)
        self.strtab = b"".join(chunks)

        for rel in self.relocations:
            entry = (rel.offset, _r_info(self.symbol_index(rel.label), rel.rel_type))
            if rel.segment == ".text":
                self.rel_text.append(entry)
            elif rel.segment == ".data":
                self.rel_data.append(entry)

        symtab_index = self.segment_index(".symtab")
        cur_off += strtab_size
        self.add_header(".rel.text", SHT_REL, 0, 0, cur_off, len(self.rel_text) * REL_SIZE,
                        symtab_index, self.segment_index(".text"), 1, REL_SIZE)
        cur_off += len(self.rel_text) * REL_SIZE
        self.add_header(".rel.data", SHT_REL, 0, 0, cur_off, len(self.rel_data) * REL_SIZE,
                        symtab_index, self.segment_index(".data"), 1, REL_SIZE)

        for name in all_names:
            self.sections[name].sh_name = shstr_index.get(name, 0)

    def _header(self) -> bytes:
        return _IDENT + struct.pack(
            "<HHIIIIIHHHHHH", ET_REL, EM_386, EV_CURRENT, 0, 0, self.shoff, 0,
            EHDR_SIZE, 0, 0, SHDR_SIZE, self.shnum, 4,
        )

    def _padding(self, first: str, second: str) -> bytes:
        a = self.sections.get(first)
        b = self.sections.get(second)
        if a is None or b is None:
            return b""
        return bytes(max(0, b.offset - (a.offset + a.size)))

    def to_bytes(self, text: bytes, data: bytes, data_len: int) -> bytes:
        """Assemble the object and return the whole file contents."""
        self.assemble_object(data_len)
        out = bytearray(self._header())
        out += text
        out += self._padding(".text", ".data")
        out += data
        out += self._padding(".data", ".bss")
        out += self.shstrtab
        for name in self.section_names:
            out += self.sections[name].pack()
        for name in self.symbol_names:
            out += self.symbols[name].pack()
        out += self.strtab
        for offset, info in (*self.rel_text, *self.rel_data):
            out += struct.pack("<II", _u32(offset), info)
        return bytes(out)

    def describe(self) -> str:
        """A readable listing of sections, symbols and relocations."""
        lines = ["------------段信息------------"]
        lines += [f"{name}:{sh.size}" for name, sh in self.sections.items() if name]
        lines.append("------------符号信息------------")
        for name, sym in self.symbols.items():
            if not name:
                continue
            text = f"{name}:"
            if sym.shndx == 0:
                text += "外部"
            if sym.bind == STB_GLOBAL:
                text += "全局"
            elif sym.bind == STB_LOCAL:
                text += "局部"
            lines.append(text)
        lines.append("------------重定位信息------------")
        lines += [f"{rel.segment}:{rel.offset}<-{rel.label}" for rel in self.relocations]
        return "\n".join(lines)