"""
Abstract Syntax Tree node definitions for Kaleidoscope.

The node set is closed: four expression variants plus `Prototype` and
`Function`. Every node is an immutable dataclass tagged with an
`ASTNodeType`, and consumers dispatch on that tag rather than on subclassing.
Children are owned exclusively by their parent, so the tree has no sharing
and no cycles.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

from ..lexer.tokens import SourceLocation


class ASTNodeType(Enum):
    """Tags for every AST node variant."""

    # Expressions
    NUMBER = "NumberLiteral"
    VARIABLE = "VariableRef"
    BINARY_OP = "BinaryOp"
    CALL = "Call"

    # Top-level
    PROTOTYPE = "Prototype"
    FUNCTION = "Function"


# Name carried by the prototype wrapping a bare top-level expression
ANONYMOUS_FUNCTION_NAME = ""


@dataclass(frozen=True)
class NumberLiteral:
    """Numeric literal; the language's only type is float64."""
    value: float
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    node_type: ASTNodeType = field(default=ASTNodeType.NUMBER, init=False, compare=False, repr=False)

    def children(self) -> List['Expression']:
        return []

    def __str__(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class VariableRef:
    """Reference to a named value (a function parameter)."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    node_type: ASTNodeType = field(default=ASTNodeType.VARIABLE, init=False, compare=False, repr=False)

    def children(self) -> List['Expression']:
        return []

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BinaryOp:
    """Binary operation; `operator` is a single character."""
    operator: str
    left: 'Expression'
    right: 'Expression'
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    node_type: ASTNodeType = field(default=ASTNodeType.BINARY_OP, init=False, compare=False, repr=False)

    def children(self) -> List['Expression']:
        return [self.left, self.right]

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class Call:
    """Call of a named function with positional arguments."""
    callee: str
    args: Tuple['Expression', ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    node_type: ASTNodeType = field(default=ASTNodeType.CALL, init=False, compare=False, repr=False)

    def __post_init__(self):
        # Accept any sequence but store a tuple so the node stays immutable
        object.__setattr__(self, "args", tuple(self.args))

    def children(self) -> List['Expression']:
        return list(self.args)

    def __str__(self) -> str:
        return f"{self.callee}({', '.join(str(arg) for arg in self.args)})"


Expression = Union[NumberLiteral, VariableRef, BinaryOp, Call]


@dataclass(frozen=True)
class Prototype:
    """
    A function signature: its name and parameter names.

    Every parameter is a float64 and so is the return value; the arity is
    therefore the whole signature.
    """
    name: str
    params: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)
    node_type: ASTNodeType = field(default=ASTNodeType.PROTOTYPE, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def is_anonymous(self) -> bool:
        return self.name == ANONYMOUS_FUNCTION_NAME

    def __str__(self) -> str:
        return f"{self.name}({' '.join(self.params)})"


@dataclass(frozen=True)
class Function:
    """
    A prototype together with an optional body.

    A missing body marks a pure declaration (`extern`).
    """
    prototype: Prototype
    body: Optional[Expression] = None
    node_type: ASTNodeType = field(default=ASTNodeType.FUNCTION, init=False, compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.prototype.name

    @property
    def is_declaration(self) -> bool:
        return self.body is None

    def __str__(self) -> str:
        if self.body is None:
            return f"extern {self.prototype}"
        if self.prototype.is_anonymous:
            return str(self.body)
        return f"def {self.prototype} {self.body}"


ASTNode = Union[NumberLiteral, VariableRef, BinaryOp, Call, Prototype, Function]


def anonymous_function(body: Expression) -> Function:
    """Wrap a bare expression in a zero-argument anonymous function."""
    location = getattr(body, "location", None)
    return Function(Prototype(ANONYMOUS_FUNCTION_NAME, (), location), body)


def walk(node: Expression) -> Iterator[Expression]:
    """Yield `node` and every expression below it, parents first."""
    yield node
    for child in node.children():
        yield from walk(child)
