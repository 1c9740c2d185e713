"""
Token definitions for the Kaleidoscope lexer.

The language has a deliberately tiny token set:
- End of input
- The two command keywords (`def`, `extern`)
- Identifiers and numeric literals
- Any other single character, carried as-is (operators, parentheses, commas)
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """Enumeration of all token types in Kaleidoscope."""

    EOF = auto()                    # End of input (sticky once produced)

    # Commands
    DEF = auto()                    # def
    EXTERN = auto()                 # extern

    # Primary
    IDENTIFIER = auto()             # [A-Za-z][A-Za-z0-9]*
    NUMBER = auto()                 # [0-9.]+

    # Anything else: '+', '(', ',', ';', ...
    CHAR = auto()


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and for tagging AST nodes.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    A lexical token.

    `value` holds the semantic payload: the identifier text for IDENTIFIER,
    the float64 for NUMBER, the character itself for CHAR, None otherwise.
    """
    type: TokenType
    lexeme: str
    value: Any
    location: SourceLocation

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    def is_char(self, char: str) -> bool:
        """Check if this is the single-character token `char`."""
        return self.type == TokenType.CHAR and self.value == char

    @property
    def char(self) -> Optional[str]:
        """The carried character for CHAR tokens, None for everything else."""
        return self.value if self.type == TokenType.CHAR else None

    @property
    def is_keyword(self) -> bool:
        return self.type in (TokenType.DEF, TokenType.EXTERN)

    def describe(self) -> str:
        """Human-readable rendering used in diagnostics."""
        if self.type == TokenType.EOF:
            return "end of input"
        if self.type == TokenType.CHAR:
            return f"'{self.lexeme}'"
        return f"{self.type.name.lower()} '{self.lexeme}'"


KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}

# Characters skipped between tokens
WHITESPACE = frozenset(" \t\n\r\v\f")

COMMENT_START = "#"
