import io

import pytest

from citc.diagnostics import Diagnostics, LexError, SemError, SemWarn
from citc.scanner import Scanner
from citc.tokens import Id, Tag, Token


@pytest.fixture
def diag():
    return Diagnostics(Scanner("x", "f.c"), out=io.StringIO())


def test_lex_error_message_and_count(diag):
    diag.lex_error(LexError.OR_NO_PAIR)
    assert diag.error_count == 1
    assert diag.warn_count == 0
    assert diag.messages == ["f.c <1 行, 0 列> 词法错误 : 错误的或运算符."]


def test_syntax_error_lost(diag):
    diag.syn_error(2, Token(Tag.SEMICON))
    assert diag.messages[-1] == "f.c <第 1 行> 语法错误: 在 ; 之前丢失 标识符 ."


def test_syntax_error_wrong(diag):
    diag.syn_error(1, Id("y"))
    assert diag.messages[-1] == "f.c <第 1 行> 语法错误: 在 IDENT y 处没有正确匹配 类型 ."
    assert diag.error_count == 1


def test_syntax_error_unknown_code(diag):
    with pytest.raises(ValueError):
        diag.syn_error(30, Token(Tag.END))
    assert diag.error_count == 0


def test_semantic_error_includes_name(diag):
    diag.sem_error(SemError.VAR_RE_DEF, "count")
    assert diag.messages[-1] == "f.c <第 1 行> 语义错误: count 变量重定义."


def test_semantic_warning_counts_separately(diag):
    diag.sem_warn(SemWarn.FUN_RET_CONFLICT, "f")
    assert diag.warn_count == 1
    assert diag.error_count == 0
    assert diag.messages[-1].endswith("语义警告: f 函数返回值类型不精确匹配.")


def test_output_is_written_to_stream():
    out = io.StringIO()
    diag = Diagnostics(Scanner("", "a.c"), out=out)
    diag.sem_error(SemError.BREAK_ERR)
    assert out.getvalue() == diag.messages[0] + "\n"


def test_line_follows_scanner():
    scanner = Scanner("a\nb", "g.c")
    diag = Diagnostics(scanner, out=io.StringIO())
    for _ in range(3):
        scanner.scan()
    diag.sem_error(SemError.RETURN_ERR)
    assert diag.messages[0].startswith(f"g.c <第 {scanner.line} 行>")
    assert scanner.line == 2