"""
LLVM Backend for Kaleidoscope.

Thin capability layer over llvmlite: creating modules, verifying them,
erasing functions and printing IR. The IR generator builds instructions with
`llvmlite.ir` directly and calls back in here for everything that touches the
module as a whole.
"""

import logging
from typing import Collection, Optional

import llvmlite
import llvmlite.binding as llvm
import llvmlite.ir as ll

logger = logging.getLogger(__name__)


def _release_name(scope, name: str) -> None:
    # llvmlite has no public API for releasing a global name
    used = getattr(scope, "_useset", None)
    if not isinstance(used, set):
        raise RuntimeError(
            f"llvmlite {llvmlite.__version__} does not expose the module name scope; "
            f"cannot release '{name}'"
        )
    used.discard(name)


class LLVMBackend:
    """
    LLVM backend for Kaleidoscope.

    Handles:
    - Module creation for the host (or a given) target triple
    - Verification through the LLVM verifier
    - Removal of functions from a module
    """

    def __init__(self, target_triple: Optional[str] = None):
        """
        Initialize the LLVM backend.

        Args:
            target_triple: Target triple (e.g., "x86_64-pc-linux-gnu"); the
                host's triple when omitted
        """
        self.target_triple = target_triple or llvm.get_process_triple()

    def create_module(self, name: str) -> ll.Module:
        module = ll.Module(name=name)
        module.triple = self.target_triple
        return module

    def verify(self, module: ll.Module) -> llvm.ModuleRef:
        """
        Run the LLVM verifier over the textual form of `module`.

        Returns:
            The parsed LLVM module

        Raises:
            RuntimeError: If the IR does not parse or does not verify
        """
        llvm_module = llvm.parse_assembly(str(module))
        llvm_module.verify()
        return llvm_module

    def verify_functions(self, module: ll.Module, names: Collection[str]) -> llvm.ModuleRef:
        """
        Like `verify`, but for a module holding only the functions in `names`.

        Every function called by a kept function must be kept too.
        """
        lines = [
            f'; ModuleID = "{module.name}"',
            f'target triple = "{module.triple}"',
            f'target datalayout = "{module.data_layout}"',
            "",
        ]
        lines += [str(value) for name, value in module.globals.items() if name in names]

        llvm_module = llvm.parse_assembly("\n".join(lines))
        llvm_module.verify()
        return llvm_module

    def erase_function(self, module: ll.Module, function: ll.Function) -> None:
        """Remove `function` from `module`, freeing its name for reuse."""
        del module.globals[function.name]
        _release_name(module.scope, function.name)
        logger.debug("erased function %s from module %s", function.name, module.name)

    def strip_body(self, function: ll.Function) -> None:
        """Turn a (partially built) definition back into a declaration."""
        del function.blocks[:]
        logger.debug("stripped body of %s", function.name)

    def print_llvm_ir(self, module: ll.Module) -> str:
        return str(module)
