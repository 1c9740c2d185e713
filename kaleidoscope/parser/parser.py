"""
Kaleidoscope recursive descent parser with precedence climbing.

The parser pulls tokens from the lexer on demand and keeps a single token of
lookahead (`current`). Grammar productions raise `ParseError` internally; the
public `parse_*` entry points turn that into a `Result`, leaving the caller to
resynchronize (see `skip_token`).

    primary    := number | identifier | identifier '(' args ')' | '(' expression ')'
    expression := primary binop-rhs
    binop-rhs  := (operator primary)*
    prototype  := identifier '(' identifier* ')'
    definition := 'def' prototype expression
    extern     := 'extern' prototype
    toplevel   := expression
"""

from typing import Dict, List, Optional, Union

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType
from ..config import DEFAULT_PRECEDENCE
from ..result import Result
from .ast_nodes import (
    Expression, NumberLiteral, VariableRef, BinaryOp, Call, Prototype, Function,
    anonymous_function
)
from .errors import (
    ParseError, create_expected_expression_error, create_unclosed_paren_error,
    create_argument_separator_error, create_missing_function_name_error,
    create_missing_open_paren_error, create_missing_close_paren_error,
    create_duplicate_parameter_error, create_nesting_depth_error
)


# Precedence of anything that does not continue a binary expression
NO_PRECEDENCE = -1

# Deepest nesting of primaries (parentheses, call arguments) accepted
MAX_NESTING_DEPTH = 200


class Parser:
    """
    Kaleidoscope parser.

    One instance parses a whole input, one top-level unit at a time. The
    binary operator table is per instance, so sessions configured with extra
    operators do not affect each other.
    """

    def __init__(self, lexer: Lexer, precedence: Optional[Dict[str, int]] = None,
                 max_depth: int = MAX_NESTING_DEPTH):
        """
        Initialize parser over a lexer.

        Args:
            lexer: Token source
            precedence: Operator character -> precedence (higher binds tighter)
            max_depth: Nesting limit for parenthesized expressions and calls
        """
        self.lexer = lexer
        self.precedence: Dict[str, int] = dict(DEFAULT_PRECEDENCE if precedence is None else precedence)
        self._current: Optional[Token] = None
        self.max_depth = max_depth
        self._depth = 0

    @property
    def current(self) -> Token:
        """The lookahead token, read lazily on first use."""
        if self._current is None:
            self._current = self.lexer.next_token()
        return self._current

    def next_token(self) -> Token:
        """Advance the lookahead by one token and return it."""
        self._current = self.lexer.next_token()
        return self._current

    def skip_token(self) -> Token:
        """Discard the lookahead token; used to resynchronize after an error."""
        skipped = self.current
        self.next_token()
        return skipped

    # Public entry points

    def parse_expression(self) -> Result[Expression]:
        return self._attempt(self._parse_expression)

    def parse_prototype(self) -> Result[Prototype]:
        return self._attempt(self._parse_prototype)

    def parse_definition(self) -> Result[Function]:
        return self._attempt(self._parse_definition)

    def parse_extern(self) -> Result[Prototype]:
        return self._attempt(self._parse_extern)

    def parse_top_level_expression(self) -> Result[Function]:
        return self._attempt(self._parse_top_level_expression)

    def _attempt(self, production) -> Result:
        self._depth = 0
        try:
            return Result.success(production())
        except ParseError as e:
            return Result.failure(e)
        except RecursionError:
            return Result.failure(create_nesting_depth_error(self.current, self.max_depth))

    # Expressions

    def _parse_expression(self) -> Expression:
        lhs = self._parse_primary()
        return self._parse_bin_op_rhs(0, lhs)

    def _parse_primary(self) -> Expression:
        token = self.current
        if self._depth >= self.max_depth:
            raise create_nesting_depth_error(token, self.max_depth)

        self._depth += 1
        try:
            if token.type == TokenType.IDENTIFIER:
                return self._parse_identifier_expr()
            if token.type == TokenType.NUMBER:
                return self._parse_number_expr()
            if token.is_char("("):
                return self._parse_paren_expr()
            raise create_expected_expression_error(token)
        finally:
            self._depth -= 1

    def _parse_number_expr(self) -> NumberLiteral:
        token = self.current
        self.next_token()
        return NumberLiteral(token.value, token.location)

    def _parse_paren_expr(self) -> Expression:
        self.next_token()  # eat (
        expr = self._parse_expression()
        if not self.current.is_char(")"):
            raise create_unclosed_paren_error(self.current)
        self.next_token()  # eat )
        return expr

    def _parse_identifier_expr(self) -> Expression:
        name_token = self.current
        self.next_token()

        if not self.current.is_char("("):
            return VariableRef(name_token.value, name_token.location)

        self.next_token()  # eat (
        args: List[Expression] = []
        if not self.current.is_char(")"):
            while True:
                args.append(self._parse_expression())

                if self.current.is_char(")"):
                    break
                if not self.current.is_char(","):
                    raise create_argument_separator_error(name_token.value, self.current)
                self.next_token()

        self.next_token()  # eat )
        return Call(name_token.value, args, name_token.location)

    def _get_token_precedence(self) -> int:
        """Precedence of the lookahead if it is a known binary operator."""
        char = self.current.char
        if char is None:
            return NO_PRECEDENCE
        precedence = self.precedence.get(char, NO_PRECEDENCE)
        return precedence if precedence > 0 else NO_PRECEDENCE

    def _parse_bin_op_rhs(self, expr_precedence: int, lhs: Expression) -> Expression:
        """
        Precedence climbing over the operators following `lhs`.

        Only operators binding at least as tightly as `expr_precedence` are
        absorbed. An operator followed by a tighter one lets the tighter one
        take the right operand first; equal precedence merges to the left.
        """
        while True:
            token_precedence = self._get_token_precedence()
            if token_precedence < expr_precedence:
                return lhs

            operator = self.current
            self.next_token()  # eat the operator

            rhs = self._parse_primary()

            next_precedence = self._get_token_precedence()
            if token_precedence < next_precedence:
                rhs = self._parse_bin_op_rhs(token_precedence + 1, rhs)

            lhs = BinaryOp(operator.char, lhs, rhs, operator.location)

    # Prototypes and top-level units

    def _parse_prototype(self) -> Prototype:
        name_token = self.current
        if name_token.type != TokenType.IDENTIFIER:
            raise create_missing_function_name_error(name_token)
        name = name_token.value

        if not self.next_token().is_char("("):
            raise create_missing_open_paren_error(name, self.current)

        params: List[str] = []
        while self.next_token().type == TokenType.IDENTIFIER:
            if self.current.value in params:
                raise create_duplicate_parameter_error(name, self.current.value, self.current)
            params.append(self.current.value)

        if not self.current.is_char(")"):
            raise create_missing_close_paren_error(name, self.current)

        self.next_token()  # eat )
        return Prototype(name, params, name_token.location)

    def _parse_definition(self) -> Function:
        self.next_token()  # eat def
        prototype = self._parse_prototype()
        body = self._parse_expression()
        return Function(prototype, body)

    def _parse_extern(self) -> Prototype:
        self.next_token()  # eat extern
        return self._parse_prototype()

    def _parse_top_level_expression(self) -> Function:
        return anonymous_function(self._parse_expression())


def parse_string(source: str, filename: str = "<string>",
                 precedence: Optional[Dict[str, int]] = None) -> List[Union[Function, Prototype]]:
    """
    Convenience function to parse every top-level unit of a source string.

    Definitions and top-level expressions come back as `Function`, externs as
    `Prototype`. Top-level semicolons are ignored.

    Raises:
        ParseError: On the first syntax error
    """
    parser = Parser(Lexer(source, filename), precedence)
    units: List[Union[Function, Prototype]] = []

    while parser.current.type != TokenType.EOF:
        if parser.current.is_char(";"):
            parser.next_token()
            continue
        if parser.current.type == TokenType.DEF:
            result = parser.parse_definition()
        elif parser.current.type == TokenType.EXTERN:
            result = parser.parse_extern()
        else:
            result = parser.parse_top_level_expression()
        units.append(result.unwrap())

    return units


def parse_expression_string(source: str, precedence: Optional[Dict[str, int]] = None) -> Expression:
    """
    Parse a single expression from a string.

    Raises:
        ParseError: If the text does not start with a valid expression
    """
    parser = Parser(Lexer(source, "<expr>"), precedence)
    return parser.parse_expression().unwrap()
