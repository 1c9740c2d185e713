"""
Session configuration.

Everything a compilation session needs to know up front lives in one
dataclass, so independent sessions never share mutable settings.
"""

import string
from dataclasses import dataclass, field, replace
from typing import Dict, Optional


# Higher binds tighter; all operators are left-associative
DEFAULT_PRECEDENCE: Dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
}

DEFAULT_MODULE_NAME = "kaleidoscope"
DEFAULT_ANONYMOUS_NAME = "__anon_expr"

# Characters the lexer or grammar already gives a meaning to
RESERVED_CHARS = frozenset(string.ascii_letters + string.digits + ".#(),;")


@dataclass(frozen=True)
class SessionConfig:
    """
    Settings for one compilation session.

    Attributes:
        module_name: Name of the LLVM module holding every emitted function
        precedence: Binary operator character -> positive precedence
        verify: Run the IR verifier after each function body
        target_triple: Triple stamped on the module; None means the host
        anonymous_name: Base symbol name for top-level expressions
        jit: Evaluate top-level expressions after emitting them
    """
    module_name: str = DEFAULT_MODULE_NAME
    precedence: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRECEDENCE))
    verify: bool = True
    target_triple: Optional[str] = None
    anonymous_name: str = DEFAULT_ANONYMOUS_NAME
    jit: bool = False

    def with_operator(self, operator: str, precedence: int) -> 'SessionConfig':
        """Return a copy that also parses `operator` as a binary operator."""
        if len(operator) != 1 or operator in RESERVED_CHARS or operator.isspace():
            raise ValueError(f"Binary operator must be a single symbol character, got {operator!r}")
        if precedence <= 0:
            raise ValueError(f"Operator precedence must be positive, got {precedence}")

        table = dict(self.precedence)
        table[operator] = precedence
        return replace(self, precedence=table)
