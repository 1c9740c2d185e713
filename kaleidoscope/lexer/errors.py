"""
Diagnostics shared by every compiler stage.

The lexer itself never fails: malformed numeric literals are converted on a
best-effort basis and reported as warnings. The `Diagnostic` record and the
`KaleidoscopeError` base class live here because the parser and the IR
generator build their own errors on top of them.
"""

from typing import Optional, List
from dataclasses import dataclass

from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """A single error, warning or note with its source location."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "note"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def one_line(self) -> str:
        """Compact form printed by the REPL."""
        tag = f"{self.severity}[{self.code}]" if self.code else self.severity
        where = f" ({self.location})" if self.location else ""
        return f"{tag}: {self.message}{where}"

    def render(self) -> str:
        result = f"{self.severity.upper()}: {self.message}\n"
        if self.location:
            result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result

    def __str__(self) -> str:
        return self.one_line()


class KaleidoscopeError(Exception):
    """
    Base class for errors raised while compiling a top-level unit.

    Carries a `Diagnostic`; `str()` gives the one-line form.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def code(self) -> Optional[str]:
        return self.diagnostic.code

    @property
    def location(self) -> Optional[SourceLocation]:
        return self.diagnostic.location

    def __str__(self) -> str:
        return self.diagnostic.one_line()


class LexerWarning:
    """A lexer finding that does not stop tokenization."""

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
        help_text: Optional[str] = None
    ):
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="warning",
            code=code,
            help_text=help_text
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


def create_malformed_number_warning(lexeme: str, value: float,
                                    location: SourceLocation) -> LexerWarning:
    """Warn that only a prefix of a numeric literal was converted."""
    return LexerWarning(
        message=f"Malformed numeric literal '{lexeme}' read as {value!r}",
        location=location,
        code="L001",
        help_text="Only the longest valid decimal prefix of the literal is used."
    )
