"""
IR Generator for Kaleidoscope.

Lowers AST nodes to LLVM IR with llvmlite. Every value is a double; each
function takes doubles and returns a double. The LLVM module doubles as the
function registry: calls are resolved against the functions it already holds,
which is what makes forward declarations (`extern`) and a growing REPL
session work.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import llvmlite.ir as ll

from ..config import SessionConfig
from ..result import Result
from ..parser.ast_nodes import (
    ASTNode, ASTNodeType, Expression, NumberLiteral, VariableRef, BinaryOp, Call,
    Prototype, Function
)
from ..backend.llvm_backend import LLVMBackend
from .symbol_table import Scope
from .errors import (
    CodegenError, create_unknown_variable_error, create_unknown_function_error,
    create_arity_mismatch_error, create_invalid_operator_error,
    create_redeclaration_error, create_redefinition_error, create_verification_error,
    create_nesting_depth_error, create_outside_function_error
)

logger = logging.getLogger(__name__)

DOUBLE = ll.DoubleType()


@dataclass
class IRGenContext:
    """State of the function currently being emitted."""
    function: Optional[ll.Function] = None
    builder: Optional[ll.IRBuilder] = None
    scope: Scope = field(default_factory=Scope)


class IRGenerator:
    """
    Generates LLVM IR from Kaleidoscope AST nodes.

    `emit` is the single entry point and dispatches on the node's tag:
    expressions become values inside the current function, a `Prototype`
    becomes a declaration and a `Function` becomes a declaration plus, when
    it has a body, a definition. Failures come back as `Result` errors; a
    definition that fails halfway is removed from the module first.
    """

    def __init__(self, module: Optional[ll.Module] = None,
                 backend: Optional[LLVMBackend] = None,
                 config: Optional[SessionConfig] = None):
        """
        Initialize the IR generator.

        Args:
            module: Module receiving the functions; created when omitted
            backend: LLVM capabilities (verification, erasure)
            config: Session settings
        """
        self.config = config or SessionConfig()
        self.backend = backend or LLVMBackend(self.config.target_triple)
        self.module = module if module is not None else self.backend.create_module(self.config.module_name)
        self.context = IRGenContext()

        self._emitters: Dict[ASTNodeType, Callable[[ASTNode], ll.Value]] = {
            ASTNodeType.NUMBER: self._emit_number,
            ASTNodeType.VARIABLE: self._emit_variable,
            ASTNodeType.BINARY_OP: self._emit_binary_op,
            ASTNodeType.CALL: self._emit_call,
            ASTNodeType.PROTOTYPE: self._emit_prototype,
            ASTNodeType.FUNCTION: self._emit_function,
        }

    def emit(self, node: ASTNode) -> Result[ll.Value]:
        """
        Lower one AST node.

        Expressions may only be emitted while a function body is being built;
        top-level code goes through `Function` nodes.
        """
        try:
            return Result.success(self._emit(node))
        except CodegenError as e:
            return Result.failure(e)
        except RecursionError:
            location = getattr(node, "location", None)
            return Result.failure(create_nesting_depth_error("<expression>", location))

    def emit_prototype(self, prototype: Prototype) -> Result[ll.Function]:
        return self.emit(prototype)

    def emit_function(self, function: Function) -> Result[ll.Function]:
        return self.emit(function)

    def lookup_function(self, name: str) -> Optional[ll.Function]:
        value = self.module.globals.get(name)
        return value if isinstance(value, ll.Function) else None

    def _emit(self, node: ASTNode) -> ll.Value:
        return self._emitters[node.node_type](node)

    # Expressions

    def _builder(self, node: Expression) -> ll.IRBuilder:
        if self.context.builder is None:
            raise create_outside_function_error(node.location)
        return self.context.builder

    def _emit_number(self, node: NumberLiteral) -> ll.Value:
        return ll.Constant(DOUBLE, node.value)

    def _emit_variable(self, node: VariableRef) -> ll.Value:
        value = self.context.scope.lookup(node.name)
        if value is None:
            raise create_unknown_variable_error(
                node.name, node.location, self.context.scope.get_similar_names(node.name)
            )
        return value

    def _emit_binary_op(self, node: BinaryOp) -> ll.Value:
        # Walk the left spine first so long left-associative chains do not
        # recurse once per operator. Left operands are still emitted first.
        spine: List[BinaryOp] = []
        while node.node_type == ASTNodeType.BINARY_OP:
            spine.append(node)
            node = node.left

        value = self._emit(node)
        for binary in reversed(spine):
            right = self._emit(binary.right)
            value = self._apply_operator(binary, value, right)
        return value

    def _apply_operator(self, node: BinaryOp, left: ll.Value, right: ll.Value) -> ll.Value:
        builder = self._builder(node)

        op = node.operator
        if op == "+":
            return builder.fadd(left, right, name="addtmp")
        elif op == "-":
            return builder.fsub(left, right, name="subtmp")
        elif op == "*":
            return builder.fmul(left, right, name="multmp")
        elif op == "<":
            comparison = builder.fcmp_unordered("<", left, right, name="cmptmp")
            # Convert bool 0/1 to double 0.0 or 1.0
            return builder.uitofp(comparison, DOUBLE, name="booltmp")

        raise create_invalid_operator_error(op, node.location)

    def _emit_call(self, node: Call) -> ll.Value:
        callee = self.lookup_function(node.callee)
        if callee is None:
            raise create_unknown_function_error(node.callee, node.location)

        if len(callee.args) != len(node.args):
            raise create_arity_mismatch_error(node.callee, len(callee.args), len(node.args), node.location)

        args = [self._emit(arg) for arg in node.args]
        return self._builder(node).call(callee, args, name="calltmp")

    # Declarations and definitions

    def _symbol_name(self, prototype: Prototype) -> str:
        if prototype.is_anonymous:
            return self.module.get_unique_name(self.config.anonymous_name)
        return prototype.name

    def _declare(self, prototype: Prototype, name: str) -> ll.Function:
        existing = self.lookup_function(name)
        if existing is not None:
            if len(existing.args) != prototype.arity:
                raise create_redeclaration_error(name, len(existing.args), prototype.arity,
                                                 prototype.location)
            return existing

        function_type = ll.FunctionType(DOUBLE, [DOUBLE] * prototype.arity)
        function = ll.Function(self.module, function_type, name=name)
        for arg, param in zip(function.args, prototype.params):
            arg.name = param

        logger.debug("declared %s(%s)", name, ", ".join(prototype.params))
        return function

    def _emit_prototype(self, prototype: Prototype) -> ll.Function:
        return self._declare(prototype, self._symbol_name(prototype))

    def _emit_function(self, node: Function) -> ll.Function:
        prototype = node.prototype
        name = self._symbol_name(prototype)
        previously_declared = self.lookup_function(name) is not None

        function = self._declare(prototype, name)
        if node.body is None:
            return function

        if not function.is_declaration:
            raise create_redefinition_error(name, prototype.location)

        scope: Scope[ll.Value] = Scope(name)
        try:
            block = function.append_basic_block(name="entry")
            builder = ll.IRBuilder(block)
            for arg, param in zip(function.args, prototype.params):
                scope.bind(param, arg)
            self.context = IRGenContext(function, builder, scope)

            return_value = self._emit(node.body)
            builder.ret(return_value)

            if self.config.verify:
                self._verify(function)
        except RecursionError as e:
            self._discard(function, previously_declared)
            raise create_nesting_depth_error(name, prototype.location) from e
        except BaseException:
            self._discard(function, previously_declared)
            raise
        finally:
            self.context = IRGenContext()

        logger.debug("defined %s", name)
        return function

    def _verify(self, function: ll.Function) -> None:
        try:
            self.backend.verify(self.module)
        except RuntimeError as e:
            raise create_verification_error(function.name, str(e)) from e

    def _discard(self, function: ll.Function, keep_declaration: bool) -> None:
        """Undo a failed definition without touching earlier declarations."""
        if keep_declaration:
            self.backend.strip_body(function)
        else:
            self.backend.erase_function(self.module, function)
