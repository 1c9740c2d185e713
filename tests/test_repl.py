"""
Tests for the Kaleidoscope command line.
"""

import re
import unittest
import sys
import os

from click.testing import CliRunner

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope import __version__
from kaleidoscope.repl import main


class TestRepl(unittest.TestCase):
    """Test the click entry point."""

    def setUp(self):
        self.runner = CliRunner()

    def test_reports_each_unit(self):
        result = self.runner.invoke(main, [], input="def f(x) x\nextern g()\nf(1)\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("ready> ", result.stderr)
        self.assertIn("Parsed a function definition.", result.stderr)
        self.assertIn("Parsed an extern.", result.stderr)
        self.assertIn("Parsed a top-level expression.", result.stderr)
        self.assertEqual(result.stdout, "")

    def test_errors_do_not_stop_the_loop(self):
        result = self.runner.invoke(main, [], input="1 + )\ndef f(x) x\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("error[P001]", result.stderr)
        self.assertIn("Parsed a function definition.", result.stderr)

    def test_emit_ir(self):
        result = self.runner.invoke(main, ["--emit-ir"], input="def f(x) x + 1\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn('define double @"f"(double %"x")', result.stdout)
        self.assertIn("fadd double", result.stdout)

    def test_dump_module(self):
        result = self.runner.invoke(main, ["--dump-module", "--module-name", "demo"],
                                    input="extern sin(x)\ndef f(x) sin(x)\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn('; ModuleID = "demo"', result.stdout)
        self.assertIn('declare double @"sin"', result.stdout)

    def test_jit(self):
        result = self.runner.invoke(main, ["--jit"], input="def sq(x) x * x\nsq(4) + 1\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Evaluated to 17.000000", result.stderr)

    def test_source_file(self):
        with self.runner.isolated_filesystem():
            with open("prog.ks", "w") as f:
                f.write("# squares\ndef sq(x) x * x\n")
            result = self.runner.invoke(main, ["prog.ks", "--emit-ir"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn('define double @"sq"', result.stdout)

    def test_version(self):
        result = self.runner.invoke(main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_version_is_declared_in_package(self):
        # setup.py reads the version from this line
        with open(os.path.join(project_root, "kaleidoscope", "__init__.py")) as f:
            match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
        self.assertIsNotNone(match)
        self.assertEqual(match.group(1), __version__)


if __name__ == '__main__':
    unittest.main()
