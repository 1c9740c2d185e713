"""
Kaleidoscope Compiler Package

A small compiler for the Kaleidoscope toy language: every value is a double,
functions are declared with `extern` and defined with `def`, and bare
expressions become anonymous functions.

Architecture:
    kaleidoscope/
    ├── lexer/           # Tokenization
    ├── parser/          # Precedence-climbing parser and AST
    ├── ir/              # Symbol table and LLVM IR emission
    ├── backend/         # Module services and the MCJIT evaluator
    ├── session.py       # One compile of one input stream
    └── repl.py          # Command line front end

License: MIT
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config import SessionConfig
from .result import Result
from .lexer import Lexer, Token, TokenType, KaleidoscopeError
from .parser import Parser, ParseError
from .ir import IRGenerator, CodegenError
from .session import CompilationSession, UnitKind, UnitOutcome, compile_source

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "IRGenerator",
    "CompilationSession",
    "SessionConfig",

    # Results and errors
    "Result",
    "UnitKind",
    "UnitOutcome",
    "KaleidoscopeError",
    "ParseError",
    "CodegenError",

    # Tokens
    "Token",
    "TokenType",

    # Convenience
    "compile_source",

    # Version info
    "__version__",
]
