# citc

`citc` provides two sets of building blocks for a toolchain that handles a small
C-like language:

* **Compiler front end.** This includes a character scanner, a lexer that turns
  source text into tokens, and a diagnostics object that counts and prints
  lexical, syntax and semantic errors and warnings.
* **x86 assembler pieces.** These are a lexer for a NASM-like assembly dialect,
  bookkeeping for labels and segments, an instruction encoder, and a writer
  that produces relocatable ELF32 object files (`ET_REL`, `EM_386`).

The package depends only on the standard library and needs Python 3.10 or later.

## Tokenizing source text

```python
from citc.lexer import tokenize_text

for token in tokenize_text("int main() { return 0x1F; }", "main.c"):
    print(token)
```

`tokenize_text` returns a list of tokens from `citc.tokens`. The last token in
the list has `Tag.END`. There are five token types:

* `Token` carries only a tag.
* `Id` is an identifier.
* `Num` is an integer.
* `Char` is a character literal.
* `Str` is a string literal.

`Tag` holds the display text of each kind, such as `"int"`, `"+="`-style
operators, `"IDENT"` or `"EOF"`. Calling `str(token)` gives text such as
`IDENT main` or `[NUM]: 31`.

The lexer recognizes the following:

* The keywords `int char void extern if else switch case default while do for
  break continue return`. Use `lookup_keyword(name)` to look one up. It returns
  `Tag.ID` for any name that is not a keyword.
* Integers in four bases: decimal, hexadecimal (`0x`), binary (`0b`) and octal
  (leading `0`). Values wrap to 32-bit signed integers.
* String literals, with the escapes `\n \t \\ \" \0`. A backslash before a
  newline continues the string on the next line.
* Character literals, with the escapes `\n \t \\ \' \0`.
* Operators and punctuation.

The lexer skips whitespace, `//` and `/* */` comments, and the rest of a line
after `#`.

### Reading a file

```python
from citc.scanner import Scanner
from citc.diagnostics import Diagnostics
from citc.lexer import Lexer

scanner = Scanner.open("main.c", show_chars=False)
diagnostics = Diagnostics(scanner)
lexer = Lexer(scanner, diagnostics)
for token in lexer:          # or call lexer.tokenize() repeatedly
    ...
print(diagnostics.error_count, diagnostics.messages)
```

`Scanner` tracks `line` and `column`, and a tab counts as four columns. If you
set `show_chars=True`, it prints every character it reads.

`Diagnostics` keeps the following:

* `error_count` and `warn_count`.
* The list of `messages`.

It also prints each message to the stream passed as `out`, or to standard
output if none is given. It reports errors through four methods:

| Method | What it reports |
| --- | --- |
| `lex_error(LexError)` | A lexical error. |
| `syn_error(code, token)` | A syntax error. An even code means a missing item and an odd code means a mismatched one. |
| `sem_error(SemError, name)` | A semantic error. |
| `sem_warn(SemWarn, name)` | A semantic warning. |

## Assembler building blocks

| Module | Contents |
| --- | --- |
| `citc.asm_lexer` | `AsmLexer`, whose `next_symbol()` reads `Symbol` values: registers, mnemonics, the directives `section global equ times db dw dd`, numbers, strings and punctuation. `OperandType` distinguishes immediate, register and memory operands. |
| `citc.asm_semantic` | `Assembly` holds the state of one run: the pass number, the current address and segment, and the output bytes. It also has `LabelRecord`, `LabelTable`, `Instruction`, `ModRM` and `SIB`. |
| `citc.asm_encoder` | `Encoder`, with `gen2op`, `gen1op` and `gen0op` for two-, one- and zero-operand instructions. It records relocations in an `ElfObject`. |
| `citc.elf_object` | `ElfObject` collects sections, symbols and relocations. `to_bytes(text, data, data_len)` returns the complete object file, and `describe()` returns a readable listing. |

On pass 1, `Assembly.write_bytes` only advances the address. On pass 2 it also
appends the bytes in little-endian order. The following example encodes
`mov eax, 5` and `ret`:

```python
from citc.asm_semantic import Assembly
from citc.asm_encoder import Encoder
from citc.asm_lexer import Symbol, OperandType
from citc.elf_object import ElfObject

asm = Assembly(scan_pass=2, cur_seg=".text")
enc = Encoder(asm, ElfObject())
asm.instr.reset()
asm.modrm.reg = 0          # eax
asm.instr.imm32 = 5
enc.gen2op(Symbol.I_MOV, OperandType.REGS, OperandType.IMMD, 4)
enc.gen0op(Symbol.I_RET)
assert bytes(asm.output) == b"\xb8\x05\x00\x00\x00\xc3"
```

## What the package does not do

The package has no parser. The compiler side stops at tokens and diagnostics.
Nothing builds syntax trees, intermediate code or optimizes anything, and
nothing emits assembly from C source.

The assembler side does not parse assembly source into instructions. You must
drive `AsmLexer`, `LabelTable` and `Encoder` yourself and choose the operands.

There is no linker and no command-line program.