"""shikigami public API."""

from .errors import (
    DivisionByZeroError,
    ErrorKind,
    EvaluationError,
    LexError,
    ParseError,
    RecursionLimitExceeded,
    ShikigamiError,
)
from .evaluator import Environment, UserFunction, evaluate
from .interpreter import ERROR_PREFIX, Session, execute, is_error, run
from .lexer import Token, token_texts, tokenize
from .parser import parse, parse_expression, parse_program
from .rational import Rational
from .values import ValueKind, format_value

__all__ = [
    "tokenize",
    "token_texts",
    "Token",
    "parse",
    "parse_program",
    "parse_expression",
    "evaluate",
    "Environment",
    "UserFunction",
    "execute",
    "run",
    "is_error",
    "Session",
    "ERROR_PREFIX",
    "Rational",
    "ValueKind",
    "format_value",
    "ShikigamiError",
    "ErrorKind",
    "LexError",
    "ParseError",
    "EvaluationError",
    "DivisionByZeroError",
    "RecursionLimitExceeded",
]
