"""Character scanner that tracks line and column positions."""

from __future__ import annotations

from os import PathLike

EOF = ""
"""Value returned by :meth:`Scanner.scan` once the input is exhausted."""


class Scanner:
    """Hands out the characters of a source text one at a time."""

    def __init__(self, text: str, filename: str = "<string>", show_chars: bool = False) -> None:
        self._text = text
        self._pos = 0
        self._closed = False
        self._last = ""
        self.filename = filename
        self.show_chars = show_chars
        self.line = 1
        self.column = 0

    @classmethod
    def open(cls, path: str | PathLike, show_chars: bool = False) -> "Scanner":
        """Create a scanner over the contents of the file at ``path``."""
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
        return cls(text, str(path), show_chars)

    @property
    def finished(self) -> bool:
        """True once the end of the input has been read."""
        return self._closed

    def scan(self) -> str:
        """Return the next character, or :data:`EOF` at the end of input."""
        if self._closed:
            return EOF
        if self._pos < len(self._text):
            ch = self._text[self._pos]
            self._pos += 1
        else:
            ch = EOF

        if self._last == "\n":
            self.line += 1
            self.column = 0
        if ch == EOF:
            self._closed = True
        elif ch != "\n":
            self.column += 4 if ch == "\t" else 1

        self._last = ch
        if self.show_chars:
            self._show(ch)
        return ch

    @staticmethod
    def _show(ch: str) -> None:
        if ch == EOF:
            shown, code = "EOF", -1
        else:
            shown = {"\n": "\\n", "\t": "\\t", " ": "<blank>"}.get(ch, ch)
            code = ord(ch)
        print(f"{shown}\t\t<{code}>")