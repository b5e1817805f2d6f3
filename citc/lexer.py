"""Lexical analyser turning source characters into tokens."""

from __future__ import annotations

from collections.abc import Iterator

from .diagnostics import Diagnostics, LexError
from .scanner import EOF, Scanner
from .tokens import Char, Id, Num, Str, Tag, Token, lookup_keyword

_ERR = Token(Tag.ERR)

_WHITESPACE = {" ", "\n", "\t"}

_STRING_ESCAPES = {"n": "\n", "\\": "\\", "t": "\t", '"': '"', "0": "\0"}
_CHAR_ESCAPES = {"n": "\n", "\\": "\\", "t": "\t", "0": "\0", "'": "'"}

_SINGLE = {
    "*": Tag.MUL, "%": Tag.MOD, ",": Tag.COMMA, ":": Tag.COLON, ";": Tag.SEMICON,
    "(": Tag.LPAREN, ")": Tag.RPAREN, "[": Tag.LBRACK, "]": Tag.RBRACK,
    "{": Tag.LBRACE, "}": Tag.RBRACE,
}

# first character -> (second character, tag if matched, tag otherwise)
_PAIRED = {
    "+": ("+", Tag.INC, Tag.ADD),
    "-": ("-", Tag.DEC, Tag.SUB),
    ">": ("=", Tag.GE, Tag.GT),
    "<": ("=", Tag.LE, Tag.LT),
    "=": ("=", Tag.EQU, Tag.ASSIGN),
    "&": ("&", Tag.AND, Tag.LEA),
    "!": ("=", Tag.NEQU, Tag.NOT),
}


def _is_letter(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_hex(ch: str) -> bool:
    return _is_digit(ch) or "a" <= ch <= "f" or "A" <= ch <= "F"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= 1 << 31 else value


class Lexer:
    """Produces tokens from a scanner, reporting lexical errors."""

    def __init__(self, scanner: Scanner, diagnostics: Diagnostics | None = None) -> None:
        self.scanner = scanner
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(scanner)
        self._ch = " "

    def _scan(self, need: str | None = None) -> bool:
        self._ch = self.scanner.scan()
        if need is None:
            return True
        if self._ch != need:
            return False
        self._ch = self.scanner.scan()
        return True

    def _error(self, code: LexError) -> Token:
        self.diagnostics.lex_error(code)
        return _ERR

    def tokenize(self) -> Token:
        """Return the next valid token; a ``Tag.END`` token once input ends."""
        while self._ch != EOF:
            token = self._next()
            if token is not None and token.tag is not Tag.ERR:
                return token
        return Token(Tag.END)

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to and including the end token."""
        while True:
            token = self.tokenize()
            yield token
            if token.tag is Tag.END:
                return

    def _next(self) -> Token | None:
        while self._ch in _WHITESPACE:
            self._scan()
        ch = self._ch
        if _is_letter(ch):
            return self._identifier()
        if ch == '"':
            return self._string()
        if _is_digit(ch):
            return self._number()
        if ch == "'":
            return self._char()
        return self._punctuation()

    def _identifier(self) -> Token:
        chars = []
        while _is_letter(self._ch) or _is_digit(self._ch):
            chars.append(self._ch)
            self._scan()
        name = "".join(chars)
        tag = lookup_keyword(name)
        return Id(name) if tag is Tag.ID else Token(tag)

    def _string(self) -> Token:
        chars = []
        while not self._scan('"'):
            ch = self._ch
            if ch == "\\":
                self._scan()
                escaped = self._ch
                if escaped == EOF:
                    return self._error(LexError.STR_NO_R_QUOTE)
                if escaped == "\n":
                    continue
                chars.append(_STRING_ESCAPES.get(escaped, escaped))
            elif ch == "\n" or ch == EOF:
                return self._error(LexError.STR_NO_R_QUOTE)
            else:
                chars.append(ch)
        return Str("".join(chars))

    def _number(self) -> Token:
        value = 0
        if self._ch != "0":
            while _is_digit(self._ch):
                value = value * 10 + int(self._ch)
                self._scan()
            return Num(_to_int32(value))

        self._scan()
        if self._ch in ("x", "X"):
            self._scan()
            if not _is_hex(self._ch):
                return self._error(LexError.NUM_HEX_TYPE)
            while _is_hex(self._ch):
                value = value * 16 + int(self._ch, 16)
                self._scan()
        elif self._ch in ("b", "B"):
            self._scan()
            if self._ch not in ("0", "1"):
                return self._error(LexError.NUM_BIN_TYPE)
            while self._ch in ("0", "1"):
                value = value * 2 + int(self._ch)
                self._scan()
        elif "0" <= self._ch <= "7":
            while "0" <= self._ch <= "7":
                value = value * 8 + int(self._ch)
                self._scan()
        return Num(_to_int32(value))

    def _char(self) -> Token:
        self._scan()
        ch = self._ch
        if ch == "\\":
            self._scan()
            escaped = self._ch
            if escaped in (EOF, "\n"):
                return self._error(LexError.CHAR_NO_R_QUOTE)
            value = _CHAR_ESCAPES.get(escaped, escaped)
        elif ch in ("\n", EOF):
            return self._error(LexError.CHAR_NO_R_QUOTE)
        elif ch == "'":
            self.diagnostics.lex_error(LexError.CHAR_NO_DATA)
            self._scan()
            return _ERR
        else:
            value = ch
        if self._scan("'"):
            return Char(value)
        return self._error(LexError.CHAR_NO_R_QUOTE)

    def _punctuation(self) -> Token | None:
        ch = self._ch
        if ch == EOF:
            self._scan()
            return None
        if ch in _SINGLE:
            self._scan()
            return Token(_SINGLE[ch])
        if ch in _PAIRED:
            second, matched, single = _PAIRED[ch]
            return Token(matched if self._scan(second) else single)
        if ch == "|":
            if self._scan("|"):
                return Token(Tag.OR)
            return self._error(LexError.OR_NO_PAIR)
        if ch == "#":
            while self._ch != "\n" and self._ch != EOF:
                self._scan()
            return _ERR
        if ch == "/":
            return self._slash()
        self.diagnostics.lex_error(LexError.TOKEN_NO_EXIST)
        self._scan()
        return _ERR

    def _slash(self) -> Token:
        self._scan()
        if self._ch == "/":
            while self._ch != "\n" and self._ch != EOF:
                self._scan()
            return _ERR
        if self._ch == "*":
            while True:
                self._scan()
                if self._ch == EOF:
                    self._scan()
                    break
                if self._ch == "*" and self._scan("/"):
                    break
            if self._ch == EOF:
                self.diagnostics.lex_error(LexError.COMMENT_NO_END)
            return _ERR
        return Token(Tag.DIV)


def tokenize_text(text: str, filename: str = "<string>") -> list[Token]:
    """Tokenize ``text``; the returned list ends with the end token."""
    scanner = Scanner(text, filename)
    return list(Lexer(scanner, Diagnostics(scanner)))