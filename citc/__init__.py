"""Lexer and diagnostics for a small C-like language, plus x86 encoding and ELF32 object writing."""

__version__ = "0.1.0"