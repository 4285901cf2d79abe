"""Tree-walking evaluator for the prefix-notation keypad language."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Final

from .ast import Assignment, Expr, FunctionCall, FunctionDefinition, Number, Operation, Program, String, Variable
from .errors import ErrorKind, EvaluationError, RecursionLimitExceeded
from .rational import Rational
from .values import Value, format_value, kind_of

logger = logging.getLogger("shikigami.evaluator")

MAX_CALL_DEPTH: Final[int] = max(1, int(os.environ.get("SHIKIGAMI_MAX_CALL_DEPTH", "100")))


@dataclass(frozen=True)
class UserFunction:
    name: str
    params: tuple[str, ...]
    body: Expr

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass
class Environment:
    """Variable bindings plus the function table visible to one evaluation.

    Calls run in a child environment whose variables are a copy of the
    caller's (copy-in, nothing is written back) and whose function table is
    the caller's table itself.
    """

    variables: dict[str, Value] = field(default_factory=dict)
    functions: dict[str, UserFunction] = field(default_factory=dict)
    depth: int = 0

    def lookup(self, name: str) -> Value:
        try:
            return self.variables[name]
        except KeyError:
            raise EvaluationError(ErrorKind.UNDEFINED_VARIABLE, f"Undefined variable {name!r}") from None

    def define_function(self, fn: UserFunction) -> None:
        self.functions[fn.name] = fn

    def child(self, bindings: dict[str, Value]) -> "Environment":
        variables = dict(self.variables)
        variables.update(bindings)
        return Environment(variables=variables, functions=self.functions, depth=self.depth + 1)

    def function_arities(self) -> dict[str, int]:
        return {name: fn.arity for name, fn in self.functions.items()}


def _check_numeric(op: str, left: Value, right: Value) -> tuple[Rational, Rational]:
    for operand in (left, right):
        if not isinstance(operand, Rational):
            raise EvaluationError(
                ErrorKind.INVALID_OPERAND_TYPE,
                f"Operator {op!r} expects numbers, got {kind_of(operand).value} {format_value(operand)!r}",
            )
    return left, right  # type: ignore[return-value]


def _eval_operation(op: str, left: Value, right: Value) -> Value:
    if isinstance(left, str) or isinstance(right, str):
        if op != "+":
            raise EvaluationError(ErrorKind.INVALID_STRING_OPERATOR, f"Operator {op!r} cannot be applied to strings")
        return format_value(left) + format_value(right)

    if op == "+":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.add(rhs, preserve_form=False)
    if op == "-":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.subtract(rhs, preserve_form=False)
    if op == "*":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.multiply(rhs, preserve_form=False)
    if op == "/":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.divide(rhs, preserve_form=True)
    if op == ">":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.greater_than(rhs)
    if op == ">=":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.greater_than_or_equal(rhs)
    if op == "==":
        lhs, rhs = _check_numeric(op, left, right)
        return lhs.equals(rhs)

    raise EvaluationError(ErrorKind.UNKNOWN_OPERATOR, f"Unknown operator {op!r}")


def _call_function(expr: FunctionCall, env: Environment) -> Value:
    fn = env.functions.get(expr.name)
    if fn is None:
        raise EvaluationError(ErrorKind.UNDEFINED_FUNCTION, f"Undefined function {expr.name!r}")
    if len(expr.args) != fn.arity:
        raise EvaluationError(
            ErrorKind.ARITY_MISMATCH,
            f"Function {expr.name} expects {fn.arity} argument(s), got {len(expr.args)}",
        )
    if env.depth >= MAX_CALL_DEPTH:
        raise RecursionLimitExceeded(f"Call depth limit of {MAX_CALL_DEPTH} exceeded in {expr.name}")

    args = [_eval_expr(arg, env) for arg in expr.args]
    logger.debug("call %s at depth %d", expr.name, env.depth + 1)
    return _eval_expr(fn.body, env.child(dict(zip(fn.params, args))))


def _eval_expr(expr: Expr, env: Environment) -> Value:
    if isinstance(expr, Number):
        return expr.value

    if isinstance(expr, String):
        return expr.value

    if isinstance(expr, Variable):
        return env.lookup(expr.name)

    if isinstance(expr, Operation):
        left = _eval_expr(expr.left, env)
        right = _eval_expr(expr.right, env)
        return _eval_operation(expr.op, left, right)

    if isinstance(expr, Assignment):
        value = _eval_expr(expr.value, env)
        env.variables[expr.name] = value
        return value

    if isinstance(expr, FunctionDefinition):
        env.define_function(UserFunction(name=expr.name, params=expr.params, body=expr.body))
        logger.debug("defined %s(%s)", expr.name, ", ".join(expr.params))
        return f"Function {expr.name}({', '.join(expr.params)}) defined"

    if isinstance(expr, FunctionCall):
        return _call_function(expr, env)

    raise EvaluationError(ErrorKind.UNKNOWN_NODE_TYPE, f"Unknown node type {type(expr).__name__}")


def _evaluate_program(program: Program, env: Environment) -> Value | None:
    result: Value | None = None
    for stmt in program.statements:
        result = _eval_expr(stmt, env)
    return result


def evaluate(node: Program | Expr, env: Environment | None = None) -> Value | None:
    """Evaluate a program (value of its last statement) or a single expression.

    A fresh :class:`Environment` is used when ``env`` is omitted.
    """
    runtime_env = Environment() if env is None else env
    try:
        if isinstance(node, Program):
            return _evaluate_program(node, runtime_env)
        return _eval_expr(node, runtime_env)
    except RecursionError as exc:
        raise RecursionLimitExceeded("Evaluation exhausted the host stack") from exc
