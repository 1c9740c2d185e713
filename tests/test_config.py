"""
Tests for session configuration and results.
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.config import SessionConfig, DEFAULT_PRECEDENCE
from kaleidoscope.result import Result
from kaleidoscope.parser import ParseError


class TestSessionConfig(unittest.TestCase):
    """Test cases for SessionConfig."""

    def test_defaults(self):
        config = SessionConfig()
        self.assertEqual(config.precedence, {"<": 10, "+": 20, "-": 20, "*": 40})
        self.assertEqual(config.module_name, "kaleidoscope")
        self.assertTrue(config.verify)
        self.assertFalse(config.jit)
        self.assertIsNone(config.target_triple)

    def test_precedence_tables_are_not_shared(self):
        first = SessionConfig()
        first.precedence["/"] = 40
        self.assertNotIn("/", SessionConfig().precedence)
        self.assertNotIn("/", DEFAULT_PRECEDENCE)

    def test_with_operator(self):
        base = SessionConfig()
        extended = base.with_operator("/", 40)
        self.assertEqual(extended.precedence["/"], 40)
        self.assertNotIn("/", base.precedence)

    def test_with_operator_rejects_bad_symbols(self):
        config = SessionConfig()
        for operator in ("a", "1", "(", "#", ",", ";", "", "<=", " "):
            with self.assertRaises(ValueError):
                config.with_operator(operator, 10)

    def test_with_operator_rejects_non_positive_precedence(self):
        with self.assertRaises(ValueError):
            SessionConfig().with_operator("/", 0)


class TestResult(unittest.TestCase):
    """Test cases for Result."""

    def test_success(self):
        result = Result.success(None)
        self.assertTrue(result.ok)
        self.assertTrue(result)
        self.assertIsNone(result.unwrap())

    def test_failure(self):
        error = ParseError("boom", None, code="P001")
        result = Result.failure(error)
        self.assertFalse(result)
        with self.assertRaises(ParseError):
            result.unwrap()


if __name__ == '__main__':
    unittest.main()
