"""
Tokenizer for the nginx-like configuration syntax.

Recognised tokens:
- Identifiers (block and directive names, bare words such as ``info``)
- Quoted strings, single or double, with backslash escapes
- Integers and floats, optionally followed by a duration unit (10s, 500ms)
- Booleans: on, off, true, false
- ``{``, ``}`` and ``;``

``#`` line comments and ``/* */`` block comments are skipped.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types of the config syntax."""

    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    DURATION = auto()  # value already converted to seconds
    BOOLEAN = auto()

    LBRACE = auto()
    RBRACE = auto()
    SEMICOLON = auto()

    EOF = auto()


@dataclass
class Token:
    """A single token with its source position."""

    type: TokenType
    value: str | int | float | bool
    line: int
    column: int
    raw: str = ""

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class LexerError(Exception):
    """Exception raised for malformed input."""

    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(f"Line {line}, column {column}: {message}")


BOOLEAN_KEYWORDS = {"on": True, "off": False, "true": True, "false": False}

DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}

ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}

_WHITESPACE = re.compile(r"[ \t\r\n]+")
_LINE_COMMENT = re.compile(r"#[^\n]*")
_NUMBER = re.compile(r"([0-9]+(?:\.[0-9]+)?)([A-Za-z]*)")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*")

_PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}


class Lexer:
    """
    Tokenizer for configuration source text.

    Example:
        fpm {
            scrape_uri "http://localhost/fpm_status";
            timeout 5s;
        }
    """

    def __init__(self, source: str, filename: str = "<string>"):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.line_start = 0

    @property
    def column(self) -> int:
        return self.pos - self.line_start + 1

    def _consume(self, length: int) -> str:
        """Consume ``length`` characters, keeping line bookkeeping right."""
        text = self.source[self.pos:self.pos + length]
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.line_start = self.pos + text.rindex("\n") + 1
        self.pos += length
        return text

    def _skip_ignored(self) -> None:
        while self.pos < len(self.source):
            match = _WHITESPACE.match(self.source, self.pos) or _LINE_COMMENT.match(
                self.source, self.pos
            )
            if match:
                self._consume(match.end() - self.pos)
                continue

            if self.source.startswith("/*", self.pos):
                line, column = self.line, self.column
                end = self.source.find("*/", self.pos + 2)
                if end == -1:
                    raise LexerError("Unterminated multi-line comment", line, column)
                self._consume(end + 2 - self.pos)
                continue

            break

    def _read_string(self) -> Token:
        line, column = self.line, self.column
        start = self.pos
        quote = self.source[self.pos]
        chars: list[str] = []
        i = self.pos + 1

        while True:
            if i >= len(self.source) or self.source[i] == "\n":
                raise LexerError("Unterminated string literal", line, column)
            char = self.source[i]
            if char == quote:
                break
            if char == "\\":
                if i + 1 >= len(self.source):
                    raise LexerError("Unexpected end of string", line, column)
                escaped = self.source[i + 1]
                chars.append(ESCAPES.get(escaped, escaped))
                i += 2
                continue
            chars.append(char)
            i += 1

        raw = self._consume(i + 1 - start)
        return Token(TokenType.STRING, "".join(chars), line, column, raw)

    def _read_number(self) -> Token:
        line, column = self.line, self.column
        match = _NUMBER.match(self.source, self.pos)
        assert match is not None  # caller checked for a leading digit
        number, unit = match.group(1), match.group(2).lower()
        raw = self._consume(match.end() - self.pos)

        value: int | float = float(number) if "." in number else int(number)

        if not unit:
            return Token(TokenType.NUMBER, value, line, column, raw)

        if unit not in DURATION_UNITS:
            raise LexerError(f"Unknown duration unit: {unit}", line, column)
        return Token(TokenType.DURATION, value * DURATION_UNITS[unit], line, column, raw)

    def _read_word(self) -> Token:
        line, column = self.line, self.column
        match = _IDENTIFIER.match(self.source, self.pos)
        assert match is not None
        raw = self._consume(match.end() - self.pos)

        lowered = raw.lower()
        if lowered in BOOLEAN_KEYWORDS:
            return Token(TokenType.BOOLEAN, BOOLEAN_KEYWORDS[lowered], line, column, raw)
        return Token(TokenType.IDENTIFIER, raw, line, column, raw)

    def next_token(self) -> Token:
        """Return the next token, EOF once the source is exhausted."""
        self._skip_ignored()

        if self.pos >= len(self.source):
            return Token(TokenType.EOF, "", self.line, self.column)

        char = self.source[self.pos]

        if char in _PUNCTUATION:
            line, column = self.line, self.column
            self._consume(1)
            return Token(_PUNCTUATION[char], char, line, column, char)

        if char in "\"'":
            return self._read_string()

        if char in "0123456789":
            return self._read_number()

        if char == "_" or (char.isascii() and char.isalpha()):
            return self._read_word()

        raise LexerError(f"Unexpected character: {char!r}", self.line, self.column)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return


def tokenize(source: str, filename: str = "<string>") -> list[Token]:
    """Tokenize a whole source string."""
    return list(Lexer(source, filename))
