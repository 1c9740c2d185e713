"""
Kaleidoscope Backend Package.

LLVM capabilities used by the IR generator (module creation, verification,
function removal) and an MCJIT evaluator for top-level expressions.
"""

from .llvm_backend import LLVMBackend
from .jit import JITEngine, JITError

__all__ = ['LLVMBackend', 'JITEngine', 'JITError']
