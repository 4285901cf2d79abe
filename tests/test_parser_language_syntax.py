from __future__ import annotations

import unittest

from shikigami.ast import Assignment, FunctionCall, FunctionDefinition, Number, Operation, Program, String, Variable
from shikigami.errors import ErrorKind, ParseError, RecursionLimitExceeded
from shikigami.lexer import tokenize
from shikigami.parser import parse, parse_expression, parse_program
from shikigami.rational import Rational


def _num(text: str) -> Number:
    return Number(value=Rational.from_literal(text))


class ParserLanguageSyntaxTests(unittest.TestCase):
    def test_binary_operator_takes_two_prefix_operands(self) -> None:
        expr = parse("+ 3 * 4 5")
        self.assertEqual(expr, Operation(op="+", left=_num("3"), right=Operation(op="*", left=_num("4"), right=_num("5"))))

    def test_fraction_literal_keeps_written_form(self) -> None:
        expr = parse("6/8")
        self.assertIsInstance(expr, Number)
        assert isinstance(expr, Number)
        self.assertTrue(expr.value.raw)
        self.assertEqual(expr.value.to_string(), "6/8")

    def test_nodes_record_next_token_index(self) -> None:
        expr = parse("+ 3 4")
        assert isinstance(expr, Operation)
        self.assertEqual(expr.next_index, 3)
        self.assertEqual(expr.left.next_index, 2)
        self.assertEqual(expr.right.next_index, 3)

    def test_parse_expression_threads_token_index(self) -> None:
        tokens = tokenize("+ 1 2 7")
        first, index = parse_expression(tokens, 0)
        self.assertEqual(first, Operation(op="+", left=_num("1"), right=_num("2")))
        self.assertEqual(index, 3)
        second, index = parse_expression(tokens, index)
        self.assertEqual(second, _num("7"))
        self.assertEqual(index, 4)

    def test_string_literal_strips_quotes_and_resolves_escapes(self) -> None:
        self.assertEqual(parse("'hello world'"), String(value="hello world"))
        self.assertEqual(parse('"a\\"b"'), String(value='a"b'))
        self.assertEqual(parse("'x\\ny'"), String(value="x\ny"))
        self.assertEqual(parse("'keep \\q'"), String(value="keep \\q"))

    def test_assignment(self) -> None:
        self.assertEqual(parse("= A 5"), Assignment(name="A", value=_num("5")))

    def test_function_definition(self) -> None:
        expr = parse("= DOUBLE (X) * X 2")
        self.assertEqual(
            expr,
            FunctionDefinition(
                name="DOUBLE",
                params=("X",),
                body=Operation(op="*", left=Variable(name="X"), right=_num("2")),
            ),
        )

    def test_function_definition_parameter_lists(self) -> None:
        self.assertEqual(parse("= ONE () 1"), FunctionDefinition(name="ONE", params=(), body=_num("1")))
        expr = parse("= ADD (A, B) + A B")
        assert isinstance(expr, FunctionDefinition)
        self.assertEqual(expr.params, ("A", "B"))

    def test_parenthesized_calls(self) -> None:
        self.assertEqual(parse("DOUBLE(5)"), FunctionCall(name="DOUBLE", args=(_num("5"),)))
        self.assertEqual(parse("F()"), FunctionCall(name="F", args=()))
        self.assertEqual(
            parse("F(1, + 2 3)"),
            FunctionCall(name="F", args=(_num("1"), Operation(op="+", left=_num("2"), right=_num("3")))),
        )

    def test_program_statements_and_separators(self) -> None:
        program = parse_program(";; 1 ;; 2 ;")
        self.assertIsInstance(program, Program)
        self.assertEqual(program.statements, (_num("1"), _num("2")))
        self.assertEqual(parse_program("1 2 3").statements, (_num("1"), _num("2"), _num("3")))
        self.assertEqual(parse_program("").statements, ())


class BarePrefixCallTests(unittest.TestCase):
    def test_bare_call_after_definition(self) -> None:
        program = parse_program("= DOUBLE (X) * X 2; DOUBLE 5")
        self.assertEqual(program.statements[1], FunctionCall(name="DOUBLE", args=(_num("5"),)))

    def test_bare_call_before_definition_is_a_variable(self) -> None:
        program = parse_program("DOUBLE 5; = DOUBLE (X) * X 2")
        self.assertEqual(len(program.statements), 3)
        self.assertEqual(program.statements[0], Variable(name="DOUBLE"))
        self.assertEqual(program.statements[1], _num("5"))
        self.assertIsInstance(program.statements[2], FunctionDefinition)

    def test_bare_call_consumes_exactly_arity_arguments(self) -> None:
        program = parse_program("= ADD (A, B) + A B; ADD 1 2 3")
        self.assertEqual(
            program.statements[1:],
            (FunctionCall(name="ADD", args=(_num("1"), _num("2"))), _num("3")),
        )

    def test_bare_call_inside_own_body_is_not_recognised(self) -> None:
        program = parse_program("= F (X) F X")
        definition = program.statements[0]
        assert isinstance(definition, FunctionDefinition)
        self.assertEqual(definition.body, Variable(name="F"))
        self.assertEqual(program.statements[1], Variable(name="X"))

    def test_zero_arity_function_name_stays_a_variable(self) -> None:
        program = parse_program("= ONE () 1; ONE 2")
        self.assertEqual(program.statements[1:], (Variable(name="ONE"), _num("2")))

    def test_known_function_before_separator_is_a_variable(self) -> None:
        program = parse_program("= F (X) X; F; 1")
        self.assertEqual(program.statements[1], Variable(name="F"))

    def test_seeded_function_table(self) -> None:
        program = parse_program("TWICE 4", functions={"TWICE": 1})
        self.assertEqual(program.statements, (FunctionCall(name="TWICE", args=(_num("4"),)),))

    def test_seeded_function_table_is_not_mutated(self) -> None:
        known = {"TWICE": 1}
        parse_program("= HALF (X) / X 2", functions=known)
        self.assertEqual(known, {"TWICE": 1})


class ParserErrorTests(unittest.TestCase):
    def _assert_kind(self, source: str, kind: ErrorKind) -> ParseError:
        with self.assertRaises(ParseError) as ctx:
            parse_program(source)
        self.assertEqual(ctx.exception.kind, kind)
        return ctx.exception

    def test_unexpected_end_of_input(self) -> None:
        for source in ("+ 1", "*", "= F (X)", "= ADD (A, B) + A B; ADD 1"):
            with self.subTest(source=source):
                err = self._assert_kind(source, ErrorKind.UNEXPECTED_END_OF_INPUT)
                self.assertEqual(err.found, "EOF")

    def test_unexpected_token(self) -> None:
        for source in (")", "abc", ",", "+ 1 )", "(1)"):
            with self.subTest(source=source):
                self._assert_kind(source, ErrorKind.UNEXPECTED_TOKEN)

    def test_unexpected_token_reports_span(self) -> None:
        err = self._assert_kind("+ 1 )", ErrorKind.UNEXPECTED_TOKEN)
        self.assertEqual((err.start, err.end), (4, 5))
        self.assertEqual(err.found, "RPAREN())")
        self.assertIn("at span [4, 5)", str(err))

    def test_expected_close_paren(self) -> None:
        for source in ("F(1", "F(", "F(1,", "F(1 2)", "= F (X", "= F (", "= F (X Y) 1"):
            with self.subTest(source=source):
                self._assert_kind(source, ErrorKind.EXPECTED_CLOSE_PAREN)

    def test_invalid_parameter_name(self) -> None:
        for source in ("= F (x) 1", "= F (X, 2) 1", "= F (X,) 1"):
            with self.subTest(source=source):
                self._assert_kind(source, ErrorKind.INVALID_PARAMETER_NAME)

    def test_invalid_assignment(self) -> None:
        for source in ("=", "= A", "= 5 3", "= a 1"):
            with self.subTest(source=source):
                self._assert_kind(source, ErrorKind.INVALID_ASSIGNMENT_EXPRESSION)

    def test_single_expression_parse_rejects_trailing_tokens(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse("1 2")
        self.assertEqual(ctx.exception.kind, ErrorKind.UNEXPECTED_TOKEN)

    def test_deep_nesting_fails_cleanly(self) -> None:
        source = "+ " * 10000 + "1 1"
        with self.assertRaises(RecursionLimitExceeded):
            parse_program(source)
