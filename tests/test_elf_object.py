import struct

import pytest

from citc.asm_semantic import Assembly, LabelRecord, LabelTable
from citc.elf_object import (
    EHDR_SIZE,
    R_386_PC32,
    SHDR_SIZE,
    SHF_ALLOC,
    SHF_EXECINSTR,
    SHT_NOBITS,
    SHT_PROGBITS,
    STB_GLOBAL,
    STB_LOCAL,
    ElfObject,
)


def _layout():
    """Sections .text (5 bytes), .data (3 bytes) and .bss (4 bytes)."""
    elf = ElfObject()
    asm = Assembly()
    table = LabelTable()
    table.switch_segment(asm, elf, ".text")
    asm.cur_addr = 5
    table.switch_segment(asm, elf, ".data")
    asm.cur_addr = 3
    table.switch_segment(asm, elf, ".bss")
    asm.cur_addr = 4
    table.switch_segment(asm, elf, "")
    return elf, asm


def _name(shstrtab, index):
    return shstrtab[index:].split(b"\0", 1)[0].decode()


def test_new_object_has_null_section():
    elf = ElfObject()
    assert elf.section_names == [""]
    assert elf.segment_index("") == 0
    assert elf.segment_index(".text") == 1


def test_add_section_offsets_and_flags():
    elf = ElfObject()
    elf.add_section(".text", 10, 8)
    elf.add_section(".bss", 4, 20)
    elf.add_section(".other", 4, 20)
    text = elf.sections[".text"]
    assert text.offset == EHDR_SIZE + 8
    assert text.size == 10
    assert text.sh_type == SHT_PROGBITS
    assert text.flags == SHF_ALLOC | SHF_EXECINSTR
    assert elf.sections[".bss"].sh_type == SHT_NOBITS
    assert elf.section_names == ["", ".text", ".bss"]


def test_layout_from_segment_switching():
    elf, asm = _layout()
    assert elf.sections[".text"].offset == EHDR_SIZE
    assert elf.sections[".data"].offset % 4 == 0
    assert elf.sections[".data"].offset >= EHDR_SIZE + 5
    assert elf.sections[".bss"].offset >= elf.sections[".data"].offset + 3
    assert asm.data_len + EHDR_SIZE == elf.sections[".bss"].offset


def test_add_symbol_binding_and_index():
    elf, _ = _layout()
    elf.add_symbol(LabelRecord("main", seg_name=".text", addr=2, is_global=True))
    elf.add_symbol(LabelRecord("buf", seg_name=".data", times=2, length=4, content=[1, 2]))
    elf.add_symbol(LabelRecord("printf", seg_name="", externed=True))
    assert elf.symbols["main"].bind == STB_GLOBAL
    assert elf.symbols["main"].shndx == elf.segment_index(".text")
    assert elf.symbols["main"].value == 2
    assert elf.symbols["buf"].bind == STB_LOCAL
    assert elf.symbols["buf"].size == 2 * 4 * 2
    assert elf.symbols["printf"].bind == STB_GLOBAL
    assert elf.symbols["printf"].shndx == 0
    assert elf.symbol_index("buf") == 1
    assert elf.symbol_index("missing") == 3


def test_assemble_names_sections_through_shstrtab():
    elf, asm = _layout()
    elf.assemble_object(asm.data_len)
    assert elf.shnum == len(elf.section_names)
    for name in elf.section_names:
        assert _name(elf.shstrtab, elf.sections[name].sh_name) == name
    symtab = elf.sections[".symtab"]
    assert symtab.link == elf.segment_index(".strtab")


def test_to_bytes_layout():
    elf, asm = _layout()
    elf.add_symbol(LabelRecord("main", seg_name=".text", is_global=True))
    elf.add_symbol(LabelRecord("printf", seg_name="", externed=True))
    elf.add_relocation(".text", 1, "printf", R_386_PC32)
    text = b"\xe8\x01\x02\x03\x04"
    data = b"abc"
    out = elf.to_bytes(text, data, asm.data_len)

    assert out[:4] == b"\x7fELF"
    e_type, e_machine = struct.unpack_from("<HH", out, 16)
    assert (e_type, e_machine) == (1, 3)
    shoff, = struct.unpack_from("<I", out, 32)
    shnum, shstrndx = struct.unpack_from("<HH", out, 48)
    assert shnum == len(elf.section_names)
    assert elf.section_names[shstrndx] == ".shstrtab"

    data_off = elf.sections[".data"].offset
    assert out[EHDR_SIZE:EHDR_SIZE + 5] == text
    assert out[EHDR_SIZE + 5:data_off] == bytes(data_off - EHDR_SIZE - 5)
    assert out[data_off:data_off + 3] == data

    shstr = elf.sections[".shstrtab"]
    assert shoff == shstr.offset + shstr.size
    assert out[shstr.offset:shstr.offset + shstr.size] == elf.shstrtab

    for i, name in enumerate(elf.section_names):
        fields = struct.unpack_from("<10I", out, shoff + i * SHDR_SIZE)
        assert _name(elf.shstrtab, fields[0]) == name
        assert fields[4] == elf.sections[name].offset

    strtab = elf.sections[".strtab"]
    assert out[strtab.offset:strtab.offset + strtab.size] == b"main\0printf\0"

    rel = elf.sections[".rel.text"]
    offset, info = struct.unpack_from("<II", out, rel.offset)
    assert offset == 1
    assert info >> 8 == elf.symbol_index("printf")
    assert info & 0xFF == R_386_PC32
    rel_data = elf.sections[".rel.data"]
    assert len(out) == rel_data.offset + rel_data.size


def test_relocation_in_unknown_segment_is_dropped():
    elf, asm = _layout()
    elf.add_relocation(".bss", 0, "x", 1)
    elf.assemble_object(asm.data_len)
    assert elf.rel_text == [] and elf.rel_data == []
    assert elf.sections[".rel.text"].size == 0


def test_describe_lists_everything():
    elf, _ = _layout()
    elf.add_symbol(LabelRecord("printf", seg_name="", externed=True))
    elf.add_relocation(".text", 1, "printf", R_386_PC32)
    text = elf.describe()
    assert ".text:5" in text
    assert "printf:外部全局" in text
    assert ".text:1<-printf" in text


@pytest.mark.parametrize("name", [".text", ".data", ".bss"])
def test_segment_index_matches_position(name):
    elf, _ = _layout()
    assert elf.section_names[elf.segment_index(name)] == name