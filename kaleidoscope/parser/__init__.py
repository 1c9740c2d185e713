"""
Kaleidoscope Parser Package

Recursive descent parser with a precedence-climbing loop for binary
operators, producing immutable, tagged AST nodes.

Key Features:
- One-token lookahead over a lazy token stream
- Configurable binary operator precedence table
- Distinct, coded diagnostics for every failing grammar position
- Results instead of exceptions at the public entry points
"""

from .ast_nodes import (
    ASTNode, ASTNodeType, Expression,
    NumberLiteral, VariableRef, BinaryOp, Call, Prototype, Function,
    ANONYMOUS_FUNCTION_NAME, anonymous_function, walk,
)
from .parser import Parser, parse_string, parse_expression_string
from .errors import ParseError

__all__ = [
    # Core parser
    "Parser",
    "parse_string",
    "parse_expression_string",

    # AST nodes
    "ASTNode", "ASTNodeType", "Expression",
    "NumberLiteral", "VariableRef", "BinaryOp", "Call", "Prototype", "Function",
    "ANONYMOUS_FUNCTION_NAME", "anonymous_function", "walk",

    # Error handling
    "ParseError",
]
