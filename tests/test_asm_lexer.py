import io

import pytest

from citc.asm_lexer import ID_LEN, NUM_LEN, AsmLexer, OperandType, Symbol


def _lex(text):
    lexer = AsmLexer(text, out=io.StringIO())
    result = []
    for sym in lexer:
        if sym is Symbol.IDENT:
            result.append((sym, lexer.ident))
        elif sym is Symbol.NUMBER:
            result.append((sym, lexer.number))
        elif sym is Symbol.STRINGS:
            result.append((sym, lexer.string))
        else:
            result.append((sym, None))
    return lexer, result


def test_instruction_line():
    _, result = _lex("mov eax, [ebp+8]\n")
    syms = [s for s, _ in result]
    assert syms == [
        Symbol.I_MOV, Symbol.DR_EAX, Symbol.COMMA, Symbol.LBRAC,
        Symbol.DR_EBP, Symbol.ADDI, Symbol.NUMBER, Symbol.RBRAC,
    ]
    assert result[6][1] == 8


@pytest.mark.parametrize(
    "word, sym",
    [("al", Symbol.BR_AL), ("bx", Symbol.WR_BX), ("edi", Symbol.DR_EDI),
     ("setle", Symbol.I_SETLE), ("section", Symbol.A_SEC), ("dd", Symbol.A_DD),
     ("ret", Symbol.I_RET)],
)
def test_keywords(word, sym):
    _, result = _lex(word)
    assert result == [(sym, None)]


def test_identifiers_with_special_characters():
    _, result = _lex("@buffer .L1 _start")
    assert result == [
        (Symbol.IDENT, "@buffer"), (Symbol.IDENT, ".L1"), (Symbol.IDENT, "_start"),
    ]


def test_identifier_truncated():
    name = "a" * (ID_LEN + 10)
    _, result = _lex(name)
    assert result == [(Symbol.IDENT, name[:ID_LEN])]


@pytest.mark.parametrize("n", [0, 7, 31, 255, 65536])
def test_number_bases(n):
    for text in (str(n), hex(n), bin(n)):
        _, result = _lex(text)
        assert result == [(Symbol.NUMBER, n)]
    if n:
        _, result = _lex("0" + format(n, "o"))
        assert result == [(Symbol.NUMBER, n)]


def test_decimal_truncated():
    digits = "1234567890123"
    _, result = _lex(digits)
    assert result == [(Symbol.NUMBER, int(digits[:NUM_LEN]))]


def test_hex_wraps_to_32_bits():
    _, result = _lex("0xFFFFFFFF")
    assert result == [(Symbol.NUMBER, -1)]


def test_hex_without_digits_reports():
    lexer, result = _lex("0xg")
    assert result[0] == (Symbol.NUMBER, 0)
    assert lexer.messages and lexer.messages[0].startswith("lex error")
    assert lexer.errors == 0


def test_string_literal():
    _, result = _lex('db "hello world", 0')
    assert result == [
        (Symbol.A_DB, None), (Symbol.STRINGS, "hello world"),
        (Symbol.COMMA, None), (Symbol.NUMBER, 0),
    ]


def test_unterminated_string_gives_null():
    lexer = AsmLexer('"abc', out=io.StringIO())
    assert lexer.next_symbol() is Symbol.NULL
    assert lexer.exhausted


def test_comment_skipped():
    _, result = _lex("; a comment\nret ; trailing\npush ebp")
    assert [s for s, _ in result] == [Symbol.I_RET, Symbol.I_PUSH, Symbol.DR_EBP]


def test_unknown_character_counts_error():
    lexer, result = _lex("mov $ eax")
    assert [s for s, _ in result] == [Symbol.I_MOV, Symbol.EXCEP, Symbol.DR_EAX]
    assert lexer.errors == 1


def test_line_counting():
    text = "mov eax, 1\nadd eax, 2\nret\n"
    lexer, _ = _lex(text)
    assert lexer.line == text.count("\n")


def test_colon_and_minus():
    _, result = _lex("main: sub esp, 4")
    assert [s for s, _ in result] == [
        Symbol.IDENT, Symbol.COLON, Symbol.I_SUB, Symbol.DR_ESP, Symbol.COMMA, Symbol.NUMBER,
    ]
    _, result = _lex("[ebp-4]")
    assert Symbol.SUBS in [s for s, _ in result]


def test_enum_order_used_by_encoder():
    _, result = _lex("mov cmp call ret")
    mov, cmp, call, ret = (s for s, _ in result)
    assert cmp - mov == 1
    assert ret - call == 23
    assert [t.value for t in OperandType] == [1, 2, 3]