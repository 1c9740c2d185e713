"""
Kaleidoscope JIT
================

Evaluates top-level expressions by compiling the anonymous function, and the
functions it reaches, to native code with llvmlite's MCJIT and calling it
through ctypes.

Externs resolve against symbols already loaded in the running process (libm's
`sin`, `cos`, ...). Calls to externs nobody provides are reported before
compilation, since MCJIT would otherwise abort the process.
"""

import ctypes
import logging
from typing import List, Set

import llvmlite.binding as llvm
import llvmlite.ir as ll

from ..lexer.errors import KaleidoscopeError
from .llvm_backend import LLVMBackend

logger = logging.getLogger(__name__)

_native_target_ready = False


def _initialize_native_target():
    global _native_target_ready
    if not _native_target_ready:
        llvm.initialize_native_target()
        llvm.initialize_native_asmprinter()
        _native_target_ready = True


class JITError(KaleidoscopeError):
    """Raised when a top-level expression cannot be evaluated."""


def create_unresolved_symbol_error(names: List[str]) -> JITError:
    listed = ", ".join(f"'{name}'" for name in names)
    return JITError(
        message=f"Unresolved external function(s): {listed}",
        code="J001",
        help_text="Externs are looked up among the symbols loaded in this process."
    )


class JITEngine:
    """MCJIT-based evaluator for functions of a Kaleidoscope module."""

    def __init__(self, backend: LLVMBackend):
        _initialize_native_target()
        self.backend = backend
        target = llvm.Target.from_triple(backend.target_triple)
        self.target_machine = target.create_target_machine()

        # Creating the engine also makes the process's own symbols resolvable
        backing_module = llvm.parse_assembly("")
        self.engine = llvm.create_mcjit_compiler(backing_module, self.target_machine)

    def evaluate(self, module: ll.Module, function_name: str) -> float:
        """
        Compile `function_name` and everything it calls, then run it.

        Only functions reachable from `function_name` are compiled, so a
        definition calling a missing extern does not block unrelated
        expressions. The compiled copy is dropped afterwards, so later
        definitions are picked up by the next evaluation.

        Raises:
            JITError: If a reachable extern cannot be resolved
        """
        reachable = self.reachable_functions(module, function_name)
        missing = self._unresolved(module, reachable)
        if missing:
            raise create_unresolved_symbol_error(missing)

        llvm_module = self.backend.verify_functions(module, reachable)
        self.engine.add_module(llvm_module)
        try:
            self.engine.finalize_object()
            self.engine.run_static_constructors()

            address = self.engine.get_function_address(function_name)
            entry = ctypes.CFUNCTYPE(ctypes.c_double)(address)
            result = entry()
        finally:
            self.engine.remove_module(llvm_module)

        logger.debug("evaluated %s -> %r", function_name, result)
        return result

    def reachable_functions(self, module: ll.Module, function_name: str) -> Set[str]:
        """Names of `function_name` and every function it calls, transitively."""
        reachable: Set[str] = set()
        pending = [function_name]
        while pending:
            name = pending.pop()
            function = module.globals.get(name)
            if name in reachable or not isinstance(function, ll.Function):
                continue
            reachable.add(name)
            for block in function.blocks:
                for instruction in block.instructions:
                    if isinstance(instruction, ll.CallInstr):
                        pending.append(instruction.callee.name)
        return reachable

    def unresolved_calls(self, module: ll.Module, function_name: str) -> List[str]:
        """Declarations reachable from `function_name` that the process cannot provide."""
        return self._unresolved(module, self.reachable_functions(module, function_name))

    def _unresolved(self, module: ll.Module, names: Set[str]) -> List[str]:
        missing = []
        for name in sorted(names):
            if module.globals[name].is_declaration and llvm.address_of_symbol(name) is None:
                missing.append(name)
        return missing
