"""Structured error types shared by the lexer, parser and evaluator."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    UNTERMINATED_STRING = "UnterminatedString"
    UNEXPECTED_END_OF_INPUT = "UnexpectedEndOfInput"
    UNEXPECTED_TOKEN = "UnexpectedToken"
    EXPECTED_CLOSE_PAREN = "ExpectedCloseParen"
    INVALID_PARAMETER_NAME = "InvalidParameterName"
    INVALID_ASSIGNMENT_EXPRESSION = "InvalidAssignmentExpression"
    DIVISION_BY_ZERO = "DivisionByZero"
    UNDEFINED_VARIABLE = "UndefinedVariable"
    UNDEFINED_FUNCTION = "UndefinedFunction"
    ARITY_MISMATCH = "ArityMismatch"
    INVALID_STRING_OPERATOR = "InvalidStringOperator"
    INVALID_OPERAND_TYPE = "InvalidOperandType"
    UNKNOWN_OPERATOR = "UnknownOperator"
    UNKNOWN_NODE_TYPE = "UnknownNodeType"
    RECURSION_LIMIT_EXCEEDED = "RecursionLimitExceeded"


class ShikigamiError(Exception):
    """Base class for every failure raised by the language pipeline."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message


class LexError(ShikigamiError):
    """Raised while splitting source text into tokens."""

    def __init__(self, kind: ErrorKind, message: str, pos: int) -> None:
        super().__init__(kind, message)
        self.pos = pos

    def __str__(self) -> str:
        return f"{self.message} at index {self.pos}"


class ParseError(ShikigamiError):
    """Raised when the token stream does not match the prefix grammar."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        start: int,
        end: int,
        expected: tuple[str, ...] = (),
        found: str | None = None,
    ) -> None:
        super().__init__(kind, message)
        self.start = start
        self.end = end
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        expected_text = ""
        if self.expected:
            expected_text = f"; expected {', '.join(self.expected)}"
        found_text = ""
        if self.found is not None:
            found_text = f"; found {self.found}"
        return f"{self.message} at span [{self.start}, {self.end}){expected_text}{found_text}"


class EvaluationError(ShikigamiError):
    """Generic runtime failure after a successful parse."""


class DivisionByZeroError(EvaluationError):
    """Zero denominator constructed, or division by a zero-valued rational."""

    def __init__(self, message: str = "Division by zero") -> None:
        super().__init__(ErrorKind.DIVISION_BY_ZERO, message)


class RecursionLimitExceeded(ShikigamiError):
    """Nesting went deeper than the configured call depth or the host stack."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorKind.RECURSION_LIMIT_EXCEEDED, message)
