"""Labels, instruction state and output bookkeeping for the assembler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LabelRecord:
    """A label, constant or data definition."""

    name: str
    seg_name: str = ""
    addr: int = 0
    is_equ: bool = False
    externed: bool = False
    is_global: bool = False
    times: int = 0
    length: int = 0
    content: list[int] = field(default_factory=list)

    def write(self, assembly: "Assembly") -> None:
        """Emit the label's data ``times`` times over."""
        for _ in range(self.times):
            for value in self.content:
                assembly.write_bytes(value, self.length)


@dataclass
class ModRM:
    """The ModRM byte fields; ``mod == -1`` means no byte is emitted."""

    mod: int = -1
    reg: int = 0
    rm: int = 0

    def reset(self) -> None:
        self.mod, self.reg, self.rm = -1, 0, 0


@dataclass
class SIB:
    """The SIB byte fields; ``scale == -1`` means no byte is emitted."""

    scale: int = -1
    index: int = 0
    base: int = 0

    def reset(self) -> None:
        self.scale, self.index, self.base = -1, 0, 0


@dataclass
class Instruction:
    """Operand details of the instruction being assembled."""

    opcode: int = 0
    disp: int = 0
    imm32: int = 0
    disp_len: int = 0
    modrm: ModRM = field(default_factory=ModRM)
    sib: SIB = field(default_factory=SIB)

    def reset(self) -> None:
        """Clear the instruction, its ModRM and its SIB."""
        self.opcode = 0
        self.disp = 0
        self.disp_len = 0
        self.imm32 = 0
        self.modrm.reset()
        self.sib.reset()

    def set_disp(self, disp: int, length: int) -> None:
        self.disp = disp
        self.disp_len = length

    def write_disp(self, assembly: "Assembly") -> None:
        """Emit the displacement, if any, and forget it."""
        if self.disp_len:
            assembly.write_bytes(self.disp, self.disp_len)
            self.disp_len = 0


@dataclass
class Assembly:
    """State shared by one assembly run: addresses, pass and output bytes."""

    cur_addr: int = 0
    scan_pass: int = 1
    cur_seg: str = ""
    data_len: int = 0
    show_ass: bool = False
    in_len: int = 0
    output: bytearray = field(default_factory=bytearray)
    rel_label: LabelRecord | None = None
    instr: Instruction = field(default_factory=Instruction)

    @property
    def modrm(self) -> ModRM:
        return self.instr.modrm

    @property
    def sib(self) -> SIB:
        return self.instr.sib

    def write_bytes(self, value: int, length: int) -> None:
        """Advance the address by ``length``; on the second pass emit ``value`` little endian."""
        if not 1 <= length <= 4:
            raise ValueError(f"cannot write {length} bytes")
        self.cur_addr += length
        if self.scan_pass == 2:
            mask = (1 << (8 * length)) - 1
            self.output += (value & mask).to_bytes(length, "little")
            self.in_len += length

    def new_label(self, name: str, externed: bool = False) -> LabelRecord:
        """A label at the current address, or an external one at address 0."""
        if externed:
            return LabelRecord(name, seg_name="", addr=0, externed=True)
        return LabelRecord(name, seg_name=self.cur_seg, addr=self.cur_addr)

    def new_equ(self, name: str, value: int) -> LabelRecord:
        """A constant defined with ``equ``."""
        return LabelRecord(name, seg_name=self.cur_seg, addr=value, is_equ=True)

    def new_data(self, name: str, times: int, length: int, content: list[int]) -> LabelRecord:
        """A data definition; the current address moves past its contents."""
        record = LabelRecord(
            name, seg_name=self.cur_seg, addr=self.cur_addr,
            times=times, length=length, content=list(content),
        )
        self.cur_addr += times * length * len(record.content)
        return record


@dataclass
class LabelTable:
    """All labels by name, plus the data definitions in order."""

    labels: dict[str, LabelRecord] = field(default_factory=dict)
    defined: list[LabelRecord] = field(default_factory=list)

    def __contains__(self, name: str) -> bool:
        return name in self.labels

    def add(self, label: LabelRecord, assembly: Assembly) -> None:
        """Record a label; only the first pass adds labels."""
        if assembly.scan_pass != 1:
            return
        existing = self.labels.get(label.name)
        if existing is None:
            self.labels[label.name] = label
        elif existing.externed and not label.externed:
            self.labels[label.name] = label
        if label.times != 0 and label.seg_name == ".data":
            self.defined.append(label)

    def get(self, name: str, assembly: Assembly) -> LabelRecord:
        """Return the named label, creating an external one if unknown."""
        record = self.labels.get(name)
        if record is None:
            record = self.labels[name] = assembly.new_label(name, True)
        return record

    def switch_segment(self, assembly: Assembly, elf: Any, name: str) -> None:
        """Close the current segment (on the first pass) and start ``name``."""
        if assembly.scan_pass == 1:
            assembly.data_len += (4 - assembly.data_len % 4) % 4
            elf.add_section(assembly.cur_seg, assembly.cur_addr, assembly.data_len)
            if assembly.cur_seg != ".bss":
                assembly.data_len += assembly.cur_addr
        assembly.cur_seg = name
        assembly.cur_addr = 0

    def export_symbols(self, elf: Any) -> None:
        """Hand every non-constant label to the object file."""
        for record in self.labels.values():
            if not record.is_equ:
                elf.add_symbol(record)

    def write(self, assembly: Assembly) -> None:
        """Emit the contents of all data definitions."""
        for record in self.defined:
            record.write(assembly)
        if assembly.show_ass:
            print("------------定义符号------------")
            for record in self.defined:
                print(record.name)