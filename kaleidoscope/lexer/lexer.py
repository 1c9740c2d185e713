"""
Kaleidoscope Lexer - turns a character stream into tokens, one at a time.

The lexer pulls characters lazily from a text stream and keeps exactly one
character of lookahead (`last_char`), so it can sit on top of an interactive
console as well as an in-memory string.
"""

import re
import string
from io import StringIO
from typing import Iterator, List, TextIO, Tuple, Union

from .tokens import Token, TokenType, SourceLocation, KEYWORDS, WHITESPACE, COMMENT_START
from .errors import LexerWarning, create_malformed_number_warning


IDENTIFIER_START = frozenset(string.ascii_letters)
IDENTIFIER_CONTINUE = frozenset(string.ascii_letters + string.digits)
NUMBER_CHARS = frozenset(string.digits + ".")

# Longest prefix a C-style decimal conversion would accept from [0-9.]+ text
_DECIMAL_PREFIX = re.compile(r'[0-9]*\.?[0-9]*')


def convert_number(text: str) -> Tuple[float, bool]:
    """
    Best-effort, locale-independent decimal to float64 conversion.

    Returns the value and whether the whole text was consumed. Text with no
    convertible prefix (".", "..") yields 0.0.
    """
    prefix = _DECIMAL_PREFIX.match(text).group(0)
    if not any(c in string.digits for c in prefix):
        return 0.0, False
    return float(prefix), prefix == text


class Lexer:
    """
    Kaleidoscope lexical analyzer.

    `next_token()` is the whole contract: it skips whitespace and `#` comments,
    then produces one token. Once the input is exhausted every further call
    returns an EOF token.
    """

    def __init__(self, source: Union[str, TextIO], filename: str = None):
        """
        Initialize the lexer.

        Args:
            source: Source text, or a text stream read one character at a time
            filename: Name used in source locations
        """
        if isinstance(source, str):
            self.stream: TextIO = StringIO(source)
            self.filename = filename or "<string>"
        else:
            self.stream = source
            self.filename = filename or getattr(source, "name", None) or "<stream>"

        self.warnings: List[LexerWarning] = []

        # One character of pushback. Starts as a blank so the first call reads.
        self.last_char = " "
        self._at_eof = False
        self.line = 1
        self.column = 0
        self.offset = -1

    def _advance(self):
        """Replace `last_char` with the next character of the stream."""
        if self.last_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.offset += 1

        if self._at_eof:
            self.last_char = ""
            return
        char = self.stream.read(1)
        if char == "":
            self._at_eof = True
        self.last_char = char

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.offset)

    def next_token(self) -> Token:
        """Return the next token, advancing the read position."""
        while True:
            while self.last_char in WHITESPACE:
                self._advance()

            location = self._location()

            if self.last_char in IDENTIFIER_START:
                return self._tokenize_identifier_or_keyword(location)

            if self.last_char in NUMBER_CHARS:
                return self._tokenize_number(location)

            if self.last_char == COMMENT_START:
                while self.last_char not in ("", "\n", "\r"):
                    self._advance()
                if self.last_char != "":
                    continue

            if self.last_char == "":
                return Token(TokenType.EOF, "", None, location)

            this_char = self.last_char
            self._advance()
            return Token(TokenType.CHAR, this_char, this_char, location)

    def _tokenize_identifier_or_keyword(self, location: SourceLocation) -> Token:
        chars = [self.last_char]
        self._advance()
        while self.last_char in IDENTIFIER_CONTINUE:
            chars.append(self.last_char)
            self._advance()

        lexeme = "".join(chars)
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None
        return Token(token_type, lexeme, value, location)

    def _tokenize_number(self, location: SourceLocation) -> Token:
        chars = []
        while self.last_char in NUMBER_CHARS:
            chars.append(self.last_char)
            self._advance()

        lexeme = "".join(chars)
        value, exact = convert_number(lexeme)
        if not exact:
            self.warnings.append(create_malformed_number_warning(lexeme, value, location))
        return Token(TokenType.NUMBER, lexeme, value, location)

    def tokenize(self) -> List[Token]:
        """
        Drain the input.

        Returns:
            List of tokens ending with the EOF token
        """
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_diagnostics(self) -> List[LexerWarning]:
        return list(self.warnings)


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for source locations

    Returns:
        List of tokens including the final EOF token
    """
    return Lexer(source, filename).tokenize()
