"""
Recursive descent parser for the nginx-like configuration syntax.

Grammar:
    document   := (block | directive)*
    block      := IDENTIFIER [STRING] '{' (block | directive)* '}'
    directive  := IDENTIFIER value* ';'
    value      := STRING | NUMBER | DURATION | BOOLEAN | IDENTIFIER
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .lexer import Lexer, Token, TokenType


VALUE_TOKENS = (
    TokenType.STRING,
    TokenType.NUMBER,
    TokenType.DURATION,
    TokenType.BOOLEAN,
    TokenType.IDENTIFIER,
)


class ParseError(Exception):
    """Exception raised for syntax errors."""

    def __init__(self, message: str, token: Token | None = None):
        self.token = token
        if token:
            super().__init__(f"Line {token.line}, column {token.column}: {message}")
        else:
            super().__init__(message)


@dataclass
class Directive:
    """
    A directive with a name and its values.

    Examples:
        scrape_uri "http://localhost/fpm_status";  -> values=["http://localhost/fpm_status"]
        timeout 5s;                                -> values=[5]
        insecure off;                              -> values=[False]
    """

    name: str
    values: list[Any] = field(default_factory=list)
    line: int = 0
    column: int = 0

    @property
    def value(self) -> Any:
        """First value, or None for a bare directive."""
        return self.values[0] if self.values else None


@dataclass
class Block:
    """A ``type [name] { ... }`` block."""

    type: str
    name: str | None = None
    directives: list[Directive] = field(default_factory=list)
    blocks: list["Block"] = field(default_factory=list)
    line: int = 0
    column: int = 0

    def get_directive(self, name: str) -> Directive | None:
        """Get the last directive with the given name (later ones win)."""
        found = None
        for directive in self.directives:
            if directive.name == name:
                found = directive
        return found

    def get_value(self, name: str, default: Any = None) -> Any:
        directive = self.get_directive(name)
        if directive is None or directive.value is None:
            return default
        return directive.value

    def get_block(self, type_name: str) -> "Block | None":
        for block in self.blocks:
            if block.type == type_name:
                return block
        return None


@dataclass
class ConfigDocument:
    """Top-level blocks and directives of one source file."""

    blocks: list[Block] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)
    filename: str = "<string>"

    def get_block(self, type_name: str) -> Block | None:
        for block in self.blocks:
            if block.type == type_name:
                return block
        return None


class ConfigParser:
    """Builds a ConfigDocument from lexer tokens with one token of lookahead."""

    def __init__(self, source: str, filename: str = "<string>"):
        self.lexer = Lexer(source, filename)
        self.filename = filename
        self.current: Token = self.lexer.next_token()

    def _advance(self) -> Token:
        previous = self.current
        self.current = self.lexer.next_token()
        return previous

    def _check(self, token_type: TokenType) -> bool:
        return self.current.type == token_type

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if not self._check(token_type):
            raise ParseError(message, self.current)
        return self._advance()

    def parse(self) -> ConfigDocument:
        """Parse the whole document."""
        doc = ConfigDocument(filename=self.filename)

        while not self._check(TokenType.EOF):
            item = self._parse_item()
            if isinstance(item, Block):
                doc.blocks.append(item)
            else:
                doc.directives.append(item)

        return doc

    def _parse_item(self) -> Block | Directive:
        name_token = self._expect(
            TokenType.IDENTIFIER,
            f"Expected block or directive name, got {self.current.type.name}",
        )
        name = str(name_token.value)

        values: list[Any] = []
        while self.current.type in VALUE_TOKENS:
            values.append(self._advance().value)

        if self._check(TokenType.SEMICOLON):
            self._advance()
            return Directive(name, values, name_token.line, name_token.column)

        if self._check(TokenType.LBRACE):
            if len(values) > 1 or (values and not isinstance(values[0], str)):
                raise ParseError(
                    f"Block '{name}' takes at most one string argument before '{{'",
                    self.current,
                )
            block_name = values[0] if values else None
            return self._parse_block_body(name, block_name, name_token)

        raise ParseError(f"Expected '{{' or ';' after '{name}'", self.current)

    def _parse_block_body(self, type_name: str, name: str | None, start: Token) -> Block:
        self._advance()  # consume {
        block = Block(type=type_name, name=name, line=start.line, column=start.column)

        while not self._check(TokenType.RBRACE):
            if self._check(TokenType.EOF):
                raise ParseError(f"Expected '}}' to close '{type_name}' block", self.current)
            item = self._parse_item()
            if isinstance(item, Block):
                block.blocks.append(item)
            else:
                block.directives.append(item)

        self._advance()  # consume }
        return block


def parse_config(source: str, filename: str = "<string>") -> ConfigDocument:
    """Parse configuration source text."""
    return ConfigParser(source, filename).parse()


def parse_config_file(path: str | Path) -> ConfigDocument:
    """Parse a configuration file."""
    path = Path(path)
    return parse_config(path.read_text(), str(path))
