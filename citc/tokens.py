"""Lexical tokens of the C subset and the keyword table."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Tag(Enum):
    """Token kinds; each value is the token's display name."""

    ERR = "error"
    END = "EOF"
    ID = "IDENT"
    KW_INT = "int"
    KW_CHAR = "char"
    KW_VOID = "void"
    KW_EXTERN = "extern"
    NUM = "NUM"
    CH = "CHAR"
    STR = "STR"
    NOT = "!"
    LEA = "&"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    INC = "++"
    DEC = "--"
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    EQU = "=="
    NEQU = "!="
    AND = "&&"
    OR = "||"
    LPAREN = "("
    RPAREN = ")"
    LBRACK = "["
    RBRACK = "]"
    LBRACE = "{"
    RBRACE = "}"
    COMMA = ","
    COLON = ":"
    SEMICON = ";"
    ASSIGN = "="
    KW_IF = "if"
    KW_ELSE = "else"
    KW_SWITCH = "switch"
    KW_CASE = "case"
    KW_DEFAULT = "default"
    KW_WHILE = "while"
    KW_DO = "do"
    KW_FOR = "for"
    KW_BREAK = "break"
    KW_CONTINUE = "continue"
    KW_RETURN = "return"

    @property
    def label(self) -> str:
        return self.value


_KEYWORDS: dict[str, Tag] = {
    tag.value: tag for tag in Tag if tag.name.startswith("KW_")
}


def lookup_keyword(name: str) -> Tag:
    """Return the keyword tag for ``name``, or ``Tag.ID`` if it is no keyword."""
    return _KEYWORDS.get(name, Tag.ID)


@dataclass(frozen=True)
class Token:
    """A token carrying only its kind."""

    tag: Tag

    def __str__(self) -> str:
        return self.tag.value


@dataclass(frozen=True)
class Id(Token):
    """An identifier."""

    name: str
    tag: Tag = field(default=Tag.ID, init=False)

    def __str__(self) -> str:
        return f"{Token.__str__(self)} {self.name}"


@dataclass(frozen=True)
class Str(Token):
    """A string literal."""

    text: str
    tag: Tag = field(default=Tag.STR, init=False)

    def __str__(self) -> str:
        return f"[{Token.__str__(self)}]: {self.text}"


@dataclass(frozen=True)
class Num(Token):
    """An integer literal."""

    value: int
    tag: Tag = field(default=Tag.NUM, init=False)

    def __str__(self) -> str:
        return f"[{Token.__str__(self)}]: {self.value}"


@dataclass(frozen=True)
class Char(Token):
    """A character literal."""

    ch: str
    tag: Tag = field(default=Tag.CH, init=False)

    def __str__(self) -> str:
        return f"[{Token.__str__(self)}]: {self.ch}"