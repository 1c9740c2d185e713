"""
Error handling for the Kaleidoscope parser.

Each grammar position that can fail has its own error code and factory, so
the REPL can print a precise one-line diagnostic and tests can assert on the
failure kind.
"""

from typing import Optional, List

from ..lexer.tokens import Token, SourceLocation
from ..lexer.errors import KaleidoscopeError


class ParseError(KaleidoscopeError):
    """
    Syntax error at a specific grammar position.

    `token` is the lookahead token the parser was looking at when it failed.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        token: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message, location, code, help_text, suggestions)
        self.token = token


PARSER_ERROR_CODES = {
    "P001": "Unknown token when expecting an expression",
    "P002": "Expected ')' closing a parenthesized expression",
    "P003": "Expected ')' or ',' in argument list",
    "P004": "Expected function name in prototype",
    "P005": "Expected '(' in prototype",
    "P006": "Expected ')' in prototype",
    "P007": "Duplicate parameter name in prototype",
    "P008": "Expression nested too deeply",
}


def create_expected_expression_error(found: Token) -> ParseError:
    return ParseError(
        message="unknown token when expecting an expression",
        location=found.location,
        token=found,
        code="P001",
        help_text=f"Found {found.describe()}; an expression starts with a number, "
                  f"an identifier or '('."
    )


def create_unclosed_paren_error(found: Token) -> ParseError:
    return ParseError(
        message="expected ')'",
        location=found.location,
        token=found,
        code="P002",
        help_text=f"Found {found.describe()} where the parenthesized expression should end.",
        suggestions=["Add a closing parenthesis ')'"]
    )


def create_argument_separator_error(callee: str, found: Token) -> ParseError:
    return ParseError(
        message="Expected ')' or ',' in argument list",
        location=found.location,
        token=found,
        code="P003",
        help_text=f"Found {found.describe()} in the arguments of '{callee}'."
    )


def create_missing_function_name_error(found: Token) -> ParseError:
    return ParseError(
        message="Expected function name in prototype",
        location=found.location,
        token=found,
        code="P004",
        help_text=f"Found {found.describe()}; a prototype looks like 'name(arg1 arg2)'."
    )


def create_missing_open_paren_error(name: str, found: Token) -> ParseError:
    return ParseError(
        message="Expected '(' in prototype",
        location=found.location,
        token=found,
        code="P005",
        help_text=f"Found {found.describe()} after the function name '{name}'."
    )


def create_missing_close_paren_error(name: str, found: Token) -> ParseError:
    return ParseError(
        message="Expected ')' in prototype",
        location=found.location,
        token=found,
        code="P006",
        help_text=f"Parameters of '{name}' are identifiers separated by whitespace; "
                  f"found {found.describe()}."
    )


def create_duplicate_parameter_error(name: str, param: str, token: Token) -> ParseError:
    return ParseError(
        message=f"Duplicate parameter '{param}' in prototype",
        location=token.location,
        token=token,
        code="P007",
        help_text=f"Every parameter of '{name}' needs a distinct name."
    )


def create_nesting_depth_error(found: Token, limit: int) -> ParseError:
    return ParseError(
        message="expression nested too deeply",
        location=found.location,
        token=found,
        code="P008",
        help_text=f"Parentheses and calls may nest at most {limit} levels deep."
    )
