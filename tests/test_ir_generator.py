"""
Test suite for Kaleidoscope IR emission.

Tests cover:
- Lowering of every expression form
- Declarations, definitions and the function registry
- Arity checking on calls and redeclarations
- Removal of failed definitions
- Symbol table suggestions
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.config import SessionConfig
from kaleidoscope.ir import IRGenerator, CodegenError, Scope
from kaleidoscope.backend.llvm_backend import _release_name
from kaleidoscope.ir.symbol_table import levenshtein_distance
from kaleidoscope.parser import (
    parse_string, NumberLiteral, VariableRef, BinaryOp, Call, Prototype, Function,
    anonymous_function
)


class TestIRGenerator(unittest.TestCase):
    """Test cases for the IR generator."""

    def setUp(self):
        self.generator = IRGenerator()

    def emit_source(self, source):
        """Emit every unit of `source`, returning the results."""
        results = []
        for unit in parse_string(source):
            results.append(self.generator.emit(unit))
        return results

    def emit_ok(self, source):
        results = self.emit_source(source)
        for result in results:
            self.assertTrue(result.ok, str(result.error))
        return results[-1].value

    def emit_error(self, source):
        result = self.emit_source(source)[-1]
        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, CodegenError)
        return result.error

    # Expressions

    def test_arithmetic(self):
        function = self.emit_ok("def f(a b) a + b * a - b")
        ir = str(function)
        self.assertIn("fadd double", ir)
        self.assertIn("fmul double", ir)
        self.assertIn("fsub double", ir)
        self.assertIn("ret double", ir)
        self.assertIn('define double @"f"(double %"a", double %"b")', ir)

    def test_less_than_yields_double(self):
        ir = str(self.emit_ok("def lt(a b) a < b"))
        self.assertIn("fcmp ult double", ir)
        self.assertIn("uitofp i1", ir)

    def test_constant_body(self):
        ir = str(self.emit_ok("def one() 1"))
        self.assertIn("ret double 0x3ff0000000000000", ir)

    def test_call(self):
        ir = str(self.emit_ok("extern sin(x)\ndef g(y) sin(y) + 1"))
        self.assertIn('call double @"sin"(double %"y")', ir)

    def test_recursive_call(self):
        ir = str(self.emit_ok("def loop(n) loop(n - 1)"))
        self.assertIn('call double @"loop"', ir)

    def test_unknown_variable(self):
        error = self.emit_error("x + 1")
        self.assertEqual(error.code, "E001")
        self.assertIn("Unknown variable name", str(error))

    def test_unknown_variable_suggestion(self):
        error = self.emit_error("def f(value) valeu")
        self.assertEqual(error.code, "E001")
        self.assertEqual(error.diagnostic.suggestions, ["Did you mean 'value'?"])

    def test_unknown_function(self):
        self.assertEqual(self.emit_error("nope(1)").code, "E002")

    def test_arity_mismatch(self):
        error = self.emit_error("extern foo(a b)\nfoo(1)")
        self.assertEqual(error.code, "E003")
        self.assertIn("Incorrect # arguments passed", error.message)

        self.assertTrue(self.generator.emit(parse_string("foo(1, 2)")[0]).ok)

    def test_invalid_operator(self):
        body = BinaryOp("^", NumberLiteral(1.0), NumberLiteral(2.0))
        result = self.generator.emit_function(anonymous_function(body))
        self.assertFalse(result.ok)
        self.assertEqual(result.error.code, "E004")
        self.assertEqual(self.generator.module.functions, [])

    def test_expression_outside_function(self):
        self.assertTrue(self.generator.emit(NumberLiteral(2.0)).ok)
        self.assertEqual(self.generator.emit(VariableRef("x")).error.code, "E001")

        result = self.generator.emit(BinaryOp("+", NumberLiteral(1.0), NumberLiteral(2.0)))
        self.assertFalse(result.ok)
        self.assertEqual(result.error.code, "E009")

        self.generator.emit_prototype(Prototype("now"))
        self.assertEqual(self.generator.emit(Call("now")).error.code, "E009")

    def test_long_operator_chain(self):
        source = "def f(x) " + " + ".join(["x"] * 600) + "\ndef g(y) y"
        results = self.emit_source(source)
        self.assertTrue(all(result.ok for result in results))
        self.assertEqual(str(results[0].value).count("fadd double"), 599)

    def test_deeply_nested_body(self):
        body = VariableRef("x")
        for _ in range(5000):
            body = BinaryOp("+", NumberLiteral(1.0), body)
        result = self.generator.emit_function(Function(Prototype("deep", ["x"]), body))
        self.assertFalse(result.ok)
        self.assertEqual(result.error.code, "E008")
        self.assertIsNone(self.generator.lookup_function("deep"))

        # The module still verifies afterwards
        self.assertIsNotNone(self.emit_ok("def g(y) y"))

    def test_unexpected_failure_still_discards_function(self):
        def crashing_verify(module):
            raise KeyError("boom")

        self.generator.backend.verify = crashing_verify
        with self.assertRaises(KeyError):
            self.generator.emit(parse_string("def f(x) x")[0])
        self.assertIsNone(self.generator.lookup_function("f"))

    def test_erased_name_is_released(self):
        self.emit_error("def h(x) y")
        self.assertFalse(self.generator.module.scope.is_used("h"))

    def test_name_release_requires_known_scope(self):
        with self.assertRaises(RuntimeError):
            _release_name(object(), "h")

    # Declarations and definitions

    def test_extern_is_declaration(self):
        function = self.emit_ok("extern cos(x)")
        self.assertTrue(function.is_declaration)
        self.assertIn('declare double @"cos"(double %"x")', str(self.generator.module))

    def test_compatible_redeclaration(self):
        results = self.emit_source("extern foo(a b)\nextern foo(c d)")
        self.assertTrue(all(result.ok for result in results))
        self.assertIs(results[0].value, results[1].value)
        self.assertEqual(len(self.generator.module.functions), 1)

    def test_incompatible_redeclaration(self):
        error = self.emit_error("extern foo(a)\nextern foo(a b)")
        self.assertEqual(error.code, "E005")
        self.assertEqual(len(self.generator.lookup_function("foo").args), 1)

    def test_definition_after_extern(self):
        function = self.emit_ok("extern f(a)\ndef f(b) b * 2")
        self.assertFalse(function.is_declaration)
        self.assertEqual(len(self.generator.module.functions), 1)

    def test_redefinition(self):
        error = self.emit_error("def f(x) x\ndef f(y) y")
        self.assertEqual(error.code, "E006")
        self.assertFalse(self.generator.lookup_function("f").is_declaration)

    def test_failed_definition_is_erased(self):
        error = self.emit_error("def h(x) y")
        self.assertEqual(error.code, "E001")
        self.assertIsNone(self.generator.lookup_function("h"))

        # The name is free again
        function = self.emit_ok("def h(x) x")
        self.assertEqual(function.name, "h")

    def test_failed_definition_keeps_earlier_declaration(self):
        error = self.emit_error("extern g(a)\ndef g(a) b")
        self.assertEqual(error.code, "E001")
        function = self.generator.lookup_function("g")
        self.assertIsNotNone(function)
        self.assertTrue(function.is_declaration)

        self.assertFalse(self.emit_ok("def g(a) a").is_declaration)

    def test_failed_verification_is_erased(self):
        def failing_verify(module):
            raise RuntimeError("broken module")

        self.generator.backend.verify = failing_verify
        error = self.emit_error("def f(x) x")
        self.assertEqual(error.code, "E007")
        self.assertEqual(error.function_name, "f")
        self.assertIsNone(self.generator.lookup_function("f"))

    def test_verification_can_be_disabled(self):
        generator = IRGenerator(config=SessionConfig(verify=False))

        def failing_verify(module):
            raise RuntimeError("should not run")

        generator.backend.verify = failing_verify
        result = generator.emit(parse_string("def f(x) x")[0])
        self.assertTrue(result.ok)

    def test_anonymous_functions_get_unique_names(self):
        results = self.emit_source("1\n2")
        names = [result.value.name for result in results]
        self.assertEqual(names[0], "__anon_expr")
        self.assertNotEqual(names[0], names[1])
        self.assertTrue(names[1].startswith("__anon_expr"))

    def test_parameters_do_not_leak(self):
        error = self.emit_error("def f(x) x\ndef g(y) x")
        self.assertEqual(error.code, "E001")

    def test_module_settings(self):
        config = SessionConfig(module_name="demo", target_triple="x86_64-unknown-linux-gnu")
        generator = IRGenerator(config=config)
        self.assertEqual(generator.module.name, "demo")
        self.assertIn('target triple = "x86_64-unknown-linux-gnu"', str(generator.module))

    def test_prototype_node(self):
        function = self.generator.emit_prototype(Prototype("ext", ["p", "q"])).unwrap()
        self.assertEqual([arg.name for arg in function.args], ["p", "q"])
        self.assertTrue(self.generator.emit_function(Function(Prototype("ext", ["p", "q"]))).ok)


class TestScope(unittest.TestCase):
    """Test cases for the symbol table."""

    def test_bind_and_lookup(self):
        scope = Scope("f")
        scope.bind("x", 1)
        self.assertEqual(scope.lookup("x"), 1)
        self.assertIsNone(scope.lookup("y"))
        self.assertIn("x", scope)
        self.assertEqual(len(scope), 1)

    def test_rebind_replaces(self):
        scope = Scope()
        scope.bind("x", 1)
        scope.bind("x", 2)
        self.assertEqual(scope.lookup("x"), 2)
        self.assertEqual(scope.names(), ["x"])

    def test_clear(self):
        scope = Scope()
        scope.bind("a", 1)
        scope.clear()
        self.assertEqual(len(scope), 0)

    def test_similar_names(self):
        scope = Scope()
        for name in ("count", "counter", "total"):
            scope.bind(name, None)
        self.assertEqual(scope.get_similar_names("cont"), ["count"])
        self.assertEqual(scope.get_similar_names("zzz"), [])

    def test_levenshtein(self):
        self.assertEqual(levenshtein_distance("kitten", "sitting"), 3)
        self.assertEqual(levenshtein_distance("", "abc"), 3)
        self.assertEqual(levenshtein_distance("same", "same"), 0)


if __name__ == '__main__':
    unittest.main()
