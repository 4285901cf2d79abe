from __future__ import annotations

import unittest
from fractions import Fraction

from shikigami import Session, execute
from shikigami.errors import ErrorKind, EvaluationError
from shikigami.rational import Rational


class StatefulSessionTests(unittest.TestCase):
    def test_session_persists_variables(self) -> None:
        session = Session()
        self.assertEqual(session.execute("= A 5"), "5")
        self.assertEqual(session.execute("+ A 1"), "6")
        self.assertEqual(session["A"], Rational.make(5))

    def test_session_persists_functions_for_bare_calls(self) -> None:
        session = Session()
        session.execute("= DOUBLE (X) * X 2")
        self.assertEqual(session.execute("DOUBLE 21"), "42")
        self.assertEqual(session.functions, {"DOUBLE": ("X",)})

    def test_seeded_variables_are_coerced(self) -> None:
        session = Session({"N": 3, "HALF": Fraction(1, 2), "NAME": "kb"})
        self.assertEqual(session.execute("+ NAME N"), "kb3")
        self.assertEqual(session.execute("+ HALF HALF"), "1")
        self.assertEqual(session.execute("HALF"), "1/2")

    def test_mapping_surface(self) -> None:
        session = Session()
        session["X"] = 4
        self.assertEqual(session.execute("* X X"), "16")
        self.assertEqual(list(session), ["X"])
        self.assertEqual(len(session), 1)
        del session["X"]
        self.assertEqual(len(session), 0)
        with self.assertRaises(TypeError):
            session["Y"] = object()

    def test_reset_clears_bindings(self) -> None:
        session = Session()
        session.execute("= A 1; = F (X) X")
        session.reset()
        self.assertTrue(session.execute("A").startswith("Error: "))
        self.assertTrue(session.execute("F(1)").startswith("Error: "))

    def test_session_run_raises_typed_errors(self) -> None:
        session = Session()
        self.assertEqual(session.run("= A 2"), Rational.make(2))
        with self.assertRaises(EvaluationError) as ctx:
            session.run("B")
        self.assertEqual(ctx.exception.kind, ErrorKind.UNDEFINED_VARIABLE)

    def test_failed_run_keeps_earlier_bindings(self) -> None:
        session = Session()
        session.execute("= A 2")
        self.assertTrue(session.execute("= A 3; + A 'x' ; / A 0").startswith("Error: "))
        self.assertEqual(session.execute("A"), "3")

    def test_plain_execute_is_isolated_from_sessions(self) -> None:
        session = Session()
        session.execute("= A 1")
        self.assertTrue(execute("A").startswith("Error: "))
