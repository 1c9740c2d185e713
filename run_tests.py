#!/usr/bin/env python3
"""
Main test runner for the Kaleidoscope compiler tests.
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def check_imports():
    """Make sure every compiler stage imports before running the suite."""
    try:
        from kaleidoscope.lexer import Lexer
        from kaleidoscope.parser import Parser
        from kaleidoscope.ir import IRGenerator
        from kaleidoscope.backend import LLVMBackend, JITEngine
        from kaleidoscope.session import CompilationSession
    except ImportError as e:
        print(f"Failed to import compiler modules: {e}")
        return False

    print("All compiler modules imported successfully")
    return True


def run_all_tests():
    """Discover and run every test module under tests/."""
    print("Kaleidoscope Compiler Test Suite")
    print("=" * 60)

    if not check_imports():
        return False

    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), pattern="test_*.py")
    result = unittest.TextTestRunner(verbosity=2).run(suite)

    print("=" * 60)
    print(f"Ran {result.testsRun} tests: "
          f"{len(result.failures)} failures, {len(result.errors)} errors")
    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
