"""
Compilation session: the top-level driver.

A session owns everything that used to be process-wide state in a REPL-style
compiler: the lexer position, the parser's lookahead, the operator table, the
LLVM module and (optionally) a JIT. Each call to `step()` reads, parses and
emits exactly one top-level unit and reports what happened; a malformed unit
is reported and skipped, never raised.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, TextIO, Tuple, Union

from .config import SessionConfig
from .lexer.errors import KaleidoscopeError
from .lexer.lexer import Lexer
from .lexer.tokens import TokenType
from .parser.ast_nodes import Function, Prototype
from .parser.parser import Parser
from .ir.ir_generator import IRGenerator
from .backend.llvm_backend import LLVMBackend
from .backend.jit import JITEngine, JITError

logger = logging.getLogger(__name__)


class UnitKind(Enum):
    """The three kinds of top-level unit."""
    DEFINITION = "definition"
    EXTERN = "extern"
    TOP_LEVEL_EXPRESSION = "top-level expression"


SUCCESS_MESSAGES = {
    UnitKind.DEFINITION: "Parsed a function definition.",
    UnitKind.EXTERN: "Parsed an extern.",
    UnitKind.TOP_LEVEL_EXPRESSION: "Parsed a top-level expression.",
}


@dataclass
class UnitOutcome:
    """
    What happened to one top-level unit.

    Attributes:
        kind: Which production handled the unit
        ok: Whether parsing and emission both succeeded
        message: Success message, or the one-line diagnostic on failure
        node: The parsed AST (None if parsing failed)
        error: The parse, emission or evaluation error
        ir: Textual IR of the emitted function
        value: Result of evaluating a top-level expression (JIT sessions)
    """
    kind: UnitKind
    ok: bool
    message: str
    node: Optional[Union[Function, Prototype]] = None
    error: Optional[KaleidoscopeError] = None
    ir: Optional[str] = None
    value: Optional[float] = None


class CompilationSession:
    """
    One independent compile of an input stream.

    Sessions share nothing: two sessions can declare the same names, use
    different operator tables and target different triples.
    """

    def __init__(self, source: Union[str, TextIO], config: Optional[SessionConfig] = None,
                 filename: Optional[str] = None):
        """
        Create a session reading from `source`.

        Args:
            source: Program text or a text stream (e.g. stdin)
            config: Session settings; defaults when omitted
            filename: Name used in diagnostics
        """
        self.config = config or SessionConfig()
        self.lexer = Lexer(source, filename)
        self.parser = Parser(self.lexer, self.config.precedence)
        self.backend = LLVMBackend(self.config.target_triple)
        self.module = self.backend.create_module(self.config.module_name)
        self.generator = IRGenerator(self.module, self.backend, self.config)
        self.jit: Optional[JITEngine] = JITEngine(self.backend) if self.config.jit else None

    def step(self) -> Optional[UnitOutcome]:
        """
        Handle the next top-level unit.

        Returns:
            The unit's outcome, or None once the input is exhausted
        """
        # Top-level semicolons are ignored
        while self.parser.current.is_char(";"):
            self.parser.next_token()

        token = self.parser.current
        if token.type == TokenType.EOF:
            return None
        if token.type == TokenType.DEF:
            return self.handle_definition()
        if token.type == TokenType.EXTERN:
            return self.handle_extern()
        return self.handle_top_level_expression()

    def run(self) -> Iterator[UnitOutcome]:
        """Yield the outcome of every remaining unit."""
        while True:
            outcome = self.step()
            if outcome is None:
                return
            yield outcome

    def handle_definition(self) -> UnitOutcome:
        parsed = self.parser.parse_definition()
        if not parsed.ok:
            return self._syntax_failure(UnitKind.DEFINITION, parsed.error)

        emitted = self.generator.emit_function(parsed.value)
        if not emitted.ok:
            return self._failure(UnitKind.DEFINITION, emitted.error, parsed.value)
        return self._success(UnitKind.DEFINITION, parsed.value, str(emitted.value))

    def handle_extern(self) -> UnitOutcome:
        parsed = self.parser.parse_extern()
        if not parsed.ok:
            return self._syntax_failure(UnitKind.EXTERN, parsed.error)

        emitted = self.generator.emit_prototype(parsed.value)
        if not emitted.ok:
            return self._failure(UnitKind.EXTERN, emitted.error, parsed.value)
        return self._success(UnitKind.EXTERN, parsed.value, str(emitted.value))

    def handle_top_level_expression(self) -> UnitOutcome:
        kind = UnitKind.TOP_LEVEL_EXPRESSION
        parsed = self.parser.parse_top_level_expression()
        if not parsed.ok:
            return self._syntax_failure(kind, parsed.error)

        emitted = self.generator.emit_function(parsed.value)
        if not emitted.ok:
            return self._failure(kind, emitted.error, parsed.value)

        function = emitted.value
        outcome = self._success(kind, parsed.value, str(function))
        if self.jit is not None:
            try:
                outcome.value = self.jit.evaluate(self.module, function.name)
            except JITError as e:
                outcome = self._failure(kind, e, parsed.value)
                outcome.ir = str(function)
            finally:
                # The anonymous function has served its purpose once run
                self.backend.erase_function(self.module, function)
        return outcome

    def module_ir(self) -> str:
        """Textual IR of every function emitted so far."""
        return self.backend.print_llvm_ir(self.module)

    def _success(self, kind: UnitKind, node, ir: str) -> UnitOutcome:
        # Signature only, bodies may be deeply nested
        logger.debug("%s ok: %s", kind.value, getattr(node, "prototype", node))
        return UnitOutcome(kind, True, SUCCESS_MESSAGES[kind], node=node, ir=ir)

    def _failure(self, kind: UnitKind, error: KaleidoscopeError, node=None) -> UnitOutcome:
        logger.debug("%s failed: %s", kind.value, error)
        return UnitOutcome(kind, False, str(error), node=node, error=error)

    def _syntax_failure(self, kind: UnitKind, error: KaleidoscopeError) -> UnitOutcome:
        # Skip the offending token so the next unit can be read
        self.parser.skip_token()
        return self._failure(kind, error)


def compile_source(source: str, config: Optional[SessionConfig] = None,
                   filename: str = "<string>") -> Tuple[List[UnitOutcome], CompilationSession]:
    """
    Run a fresh session over a whole program.

    Returns:
        The outcome of every unit, and the session (for its module)
    """
    session = CompilationSession(source, config, filename)
    return list(session.run()), session
