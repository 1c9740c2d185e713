"""
Kaleidoscope Lexer Package

Lazy, single-character-lookahead tokenizer for the Kaleidoscope language.

Key Features:
- Pulls characters on demand from a string or a text stream (REPL friendly)
- Keywords `def` and `extern`, identifiers, permissive `[0-9.]+` numbers
- `#` line comments
- Source location tracking for diagnostics
"""

from .tokens import Token, TokenType, SourceLocation
from .lexer import Lexer, tokenize_string, convert_number
from .errors import Diagnostic, KaleidoscopeError, LexerWarning

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "tokenize_string",
    "convert_number",
    "Diagnostic",
    "KaleidoscopeError",
    "LexerWarning",
]
