"""
Error handling for IR emission.

Emission errors are semantic: the program parsed, but names, arities or
operators do not line up, or the produced IR does not verify.
"""

from typing import Optional, List

from ..lexer.tokens import SourceLocation
from ..lexer.errors import KaleidoscopeError


class CodegenError(KaleidoscopeError):
    """Raised when an AST node cannot be lowered to IR."""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        function_name: Optional[str] = None
    ):
        super().__init__(message, location, code, help_text, suggestions)
        self.function_name = function_name


CODEGEN_ERROR_CODES = {
    "E001": "Unknown variable name",
    "E002": "Unknown function referenced",
    "E003": "Incorrect number of arguments passed",
    "E004": "Invalid binary operator",
    "E005": "Function redeclared with a different number of parameters",
    "E006": "Function cannot be redefined",
    "E007": "IR verification failed",
    "E008": "Expression nested too deeply",
    "E009": "Expression emitted outside a function body",
}


def create_unknown_variable_error(name: str, location: Optional[SourceLocation],
                                  similar: Optional[List[str]] = None) -> CodegenError:
    suggestions = [f"Did you mean '{candidate}'?" for candidate in similar or []]
    return CodegenError(
        message=f"Unknown variable name '{name}'",
        location=location,
        code="E001",
        help_text="Only the parameters of the enclosing function are in scope.",
        suggestions=suggestions or None
    )


def create_unknown_function_error(name: str, location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message=f"Unknown function referenced '{name}'",
        location=location,
        code="E002",
        help_text=f"Declare it first with 'extern {name}(...)' or 'def {name}(...) ...'."
    )


def create_arity_mismatch_error(name: str, expected: int, given: int,
                                location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message=f"Incorrect # arguments passed to '{name}': expected {expected}, got {given}",
        location=location,
        code="E003"
    )


def create_invalid_operator_error(operator: str, location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message=f"invalid binary operator '{operator}'",
        location=location,
        code="E004",
        help_text="Supported operators are '+', '-', '*' and '<'."
    )


def create_redeclaration_error(name: str, existing: int, requested: int,
                               location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message=f"Function '{name}' redeclared with {requested} parameter(s), "
                f"previously declared with {existing}",
        location=location,
        code="E005",
        function_name=name
    )


def create_redefinition_error(name: str, location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message=f"Function '{name}' cannot be redefined.",
        location=location,
        code="E006",
        function_name=name
    )


def create_verification_error(name: str, details: str) -> CodegenError:
    return CodegenError(
        message=f"IR verification failed for '{name}'",
        code="E007",
        help_text=details.strip() or None,
        function_name=name
    )


def create_nesting_depth_error(name: str, location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message=f"Expression nested too deeply in '{name}'",
        location=location,
        code="E008",
        help_text="Split the expression across helper functions.",
        function_name=name
    )


def create_outside_function_error(location: Optional[SourceLocation]) -> CodegenError:
    return CodegenError(
        message="Expressions can only be emitted inside a function body",
        location=location,
        code="E009",
        help_text="Wrap the expression in a 'Function' node."
    )
