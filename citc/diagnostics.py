"""Error and warning reporting for the compiler front end."""

from __future__ import annotations

import sys
from enum import Enum
from typing import TextIO

from .scanner import Scanner
from .tokens import Token


class LexError(Enum):
    """Lexical errors; each value is its message."""

    STR_NO_R_QUOTE = "字符串丢失右引号"
    NUM_BIN_TYPE = "二进制数没有实体数据"
    NUM_HEX_TYPE = "十六进制数没有实体数据"
    CHAR_NO_R_QUOTE = "字符丢失右单引号"
    CHAR_NO_DATA = "不支持空字符"
    OR_NO_PAIR = "错误的或运算符"
    COMMENT_NO_END = "多行注释没有正常结束"
    TOKEN_NO_EXIST = "词法记号不存在"


class SemError(Enum):
    """Semantic errors; each value is its message."""

    VAR_RE_DEF = "变量重定义"
    FUN_RE_DEF = "函数重定义"
    VAR_UN_DEC = "变量未声明"
    FUN_UN_DEC = "函数未声明"
    FUN_DEC_ERR = "函数声明与定义不匹配"
    FUN_CALL_ERR = "函数行参实参不匹配"
    DEC_INIT_DENY = "变量声明时不允许初始化"
    EXTERN_FUN_DEF = "函数定义不能声明 extern"
    ARRAY_LEN_INVALID = "数组长度应该是正整数"
    VAR_INIT_ERR = "变量初始化类型错误"
    GLB_INIT_NOT_CONST = "全局变量初始化值不是常量"
    VOID_VAR = "变量不能声明为 void 类型"
    EXPR_NOT_LEFT_VAL = "无效的左值表达式"
    ASSIGN_TYPE_ERR = "赋值表达式类型不兼容"
    EXPR_IS_BASE = "表达式运算对象不能是基本类型"
    EXPR_NOT_BASE = "表达式运算对象不是基本类型"
    ARR_TYPE_ERR = "数组索引运算类型错误"
    EXPR_IS_VOID = "void 的函数返回值不能参与表达式运算"
    BREAK_ERR = "break 语句不能出现在循环或 switch 语句之外"
    CONTINUE_ERR = "continue 不能出现在循环之外"
    RETURN_ERR = "return 语句和函数返回值类型不匹配"


class SemWarn(Enum):
    """Semantic warnings; each value is its message."""

    FUN_DEC_CONFLICT = "函数参数列表类型冲突"
    FUN_RET_CONFLICT = "函数返回值类型不精确匹配"


_SYNTAX_ITEMS = (
    "类型", "标识符", "数组长度", "常量", "逗号", "分号", "=", "冒号",
    "while", "(", ")", "[", "]", "{", "}",
)


class Diagnostics:
    """Counts and prints diagnostics, positioned by the scanner."""

    def __init__(self, scanner: Scanner, out: TextIO | None = None) -> None:
        self.scanner = scanner
        self._out = out
        self.error_count = 0
        self.warn_count = 0
        self.messages: list[str] = []

    def _emit(self, message: str) -> None:
        self.messages.append(message)
        print(message, file=self._out if self._out is not None else sys.stdout)

    def lex_error(self, code: LexError) -> None:
        """Report a lexical error at the current line and column."""
        self.error_count += 1
        sc = self.scanner
        self._emit(f"{sc.filename} <{sc.line} 行, {sc.column} 列> 词法错误 : {code.value}.")

    def syn_error(self, code: int, token: Token) -> None:
        """Report a syntax error; even codes mean a missing item, odd a mismatch."""
        if not 0 <= code < 2 * len(_SYNTAX_ITEMS):
            raise ValueError(f"unknown syntax error code {code}")
        self.error_count += 1
        sc = self.scanner
        item = _SYNTAX_ITEMS[code // 2]
        if code % 2 == 0:
            detail = f"在 {token} 之前丢失 {item} ."
        else:
            detail = f"在 {token} 处没有正确匹配 {item} ."
        self._emit(f"{sc.filename} <第 {sc.line} 行> 语法错误: {detail}")

    def sem_error(self, code: SemError, name: str = "") -> None:
        """Report a semantic error, optionally naming the offending symbol."""
        self.error_count += 1
        sc = self.scanner
        self._emit(f"{sc.filename} <第 {sc.line} 行> 语义错误: {name} {code.value}.")

    def sem_warn(self, code: SemWarn, name: str = "") -> None:
        """Report a semantic warning, optionally naming the symbol."""
        self.warn_count += 1
        sc = self.scanner
        self._emit(f"{sc.filename} <第 {sc.line} 行> 语义警告: {name} {code.value}.")