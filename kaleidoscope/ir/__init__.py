"""
Kaleidoscope IR Emission Package

Lowers the AST to LLVM IR (via llvmlite): every value is a double, every
function maps doubles to a double, and the LLVM module itself is the registry
of declared and defined functions.

Key Features:
- Single tag-dispatched `emit` entry point
- Per-function symbol table rebuilt from the parameters
- Arity checks on calls and redeclarations
- Failed definitions are removed from the module
- Optional verification after every function body
"""

from .ir_generator import IRGenerator, IRGenContext
from .symbol_table import Scope
from .errors import CodegenError

__all__ = [
    "IRGenerator",
    "IRGenContext",
    "Scope",
    "CodegenError",
]
