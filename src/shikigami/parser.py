"""Recursive-descent parser for the fully prefixed keypad language."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .ast import Assignment, Expr, FunctionCall, FunctionDefinition, Number, Operation, Program, String, Variable
from .errors import ErrorKind, ParseError, RecursionLimitExceeded
from .lexer import Token, tokenize
from .rational import Rational

logger = logging.getLogger("shikigami.parser")

BINARY_OPS = frozenset({"+", "-", "*", "/", ">", ">=", "=="})

_EXPR_START = ("NUMBER", "STRING", "NAME", "OP")

_ESCAPES = {
    "\\": "\\",
    "'": "'",
    '"': '"',
    "n": "\n",
    "t": "\t",
}


def _unquote(text: str) -> str:
    body = text[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            esc = body[i + 1]
            out.append(_ESCAPES.get(esc, ch + esc))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass
class _Parser:
    tokens: Sequence[Token]
    functions: dict[str, int] = field(default_factory=dict)
    index: int = 0

    def parse_program(self) -> Program:
        statements: list[Expr] = []
        self._consume_separators()
        while self._peek().kind != "EOF":
            statements.append(self._parse_expression())
            self._consume_separators()
        return Program(statements=tuple(statements))

    def parse_expression_only(self) -> Expr:
        expr = self._parse_expression()
        self._consume_separators()
        tok = self._peek()
        if tok.kind != "EOF":
            self._error(tok, kind=ErrorKind.UNEXPECTED_TOKEN, message="Unexpected trailing token", expected=("EOF",))
        return expr

    def parse_expression_at(self, index: int) -> tuple[Expr, int]:
        self.index = index
        expr = self._parse_expression()
        return expr, self.index

    def _peek(self, offset: int = 0) -> Token:
        pos = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        if tok.kind != "EOF":
            self.index += 1
        return tok

    def _error(
        self,
        tok: Token,
        *,
        kind: ErrorKind,
        message: str,
        expected: tuple[str, ...] = (),
    ) -> None:
        if tok.kind == "EOF":
            found = "EOF"
        else:
            found = f"{tok.kind}({tok.text})"
        raise ParseError(kind, message, tok.pos, tok.end, expected=tuple(dict.fromkeys(expected)), found=found)

    def _consume_separators(self) -> None:
        while self._peek().kind == "SEMI":
            self._advance()

    def _parse_expression(self) -> Expr:
        tok = self._peek()

        if tok.kind == "EOF":
            self._error(tok, kind=ErrorKind.UNEXPECTED_END_OF_INPUT, message="Unexpected end of input", expected=_EXPR_START)

        if tok.kind == "NUMBER":
            self._advance()
            return Number(value=Rational.from_literal(tok.text), next_index=self.index)

        if tok.kind == "STRING":
            self._advance()
            return String(value=_unquote(tok.text), next_index=self.index)

        if tok.kind == "NAME":
            return self._parse_name()

        if tok.kind == "OP":
            if tok.text == "=":
                return self._parse_assignment()
            if tok.text in BINARY_OPS:
                self._advance()
                left = self._parse_expression()
                right = self._parse_expression()
                return Operation(op=tok.text, left=left, right=right, next_index=self.index)

        self._error(tok, kind=ErrorKind.UNEXPECTED_TOKEN, message="Unexpected token", expected=_EXPR_START)
        raise AssertionError("unreachable")

    def _parse_name(self) -> Expr:
        name_tok = self._advance()
        name = name_tok.text

        if self._peek().kind == "LPAREN":
            open_tok = self._advance()
            args = self._parse_arguments(open_tok)
            return FunctionCall(name=name, args=tuple(args), next_index=self.index)

        # Bare prefix calls only apply to functions this parser has already seen defined.
        arity = self.functions.get(name, 0)
        if arity and self._peek().kind in _EXPR_START:
            args = [self._parse_expression() for _ in range(arity)]
            return FunctionCall(name=name, args=tuple(args), next_index=self.index)

        return Variable(name=name, next_index=self.index)

    def _expected_close(self, tok: Token, open_tok: Token) -> None:
        self._error(
            tok,
            kind=ErrorKind.EXPECTED_CLOSE_PAREN,
            message=f"Expected ')' to close '(' at index {open_tok.pos}",
            expected=("COMMA", "RPAREN"),
        )

    def _parse_arguments(self, open_tok: Token) -> list[Expr]:
        args: list[Expr] = []
        if self._peek().kind == "RPAREN":
            self._advance()
            return args

        while True:
            if self._peek().kind == "EOF":
                self._expected_close(self._peek(), open_tok)
            args.append(self._parse_expression())
            tok = self._peek()
            if tok.kind == "COMMA":
                self._advance()
                continue
            if tok.kind == "RPAREN":
                self._advance()
                return args
            self._expected_close(tok, open_tok)

    def _parse_assignment(self) -> Expr:
        self._advance()
        target = self._peek()
        if target.kind != "NAME":
            message = "Assignment requires a variable name and a value"
            if target.kind != "EOF":
                message = f"Assignment target {target.text!r} is not a valid name"
            self._error(target, kind=ErrorKind.INVALID_ASSIGNMENT_EXPRESSION, message=message, expected=("NAME",))

        if self._peek(1).kind == "LPAREN":
            return self._parse_function_definition()

        self._advance()
        if self._peek().kind == "EOF":
            self._error(
                self._peek(),
                kind=ErrorKind.INVALID_ASSIGNMENT_EXPRESSION,
                message=f"Assignment to {target.text} is missing a value",
                expected=_EXPR_START,
            )
        value = self._parse_expression()
        return Assignment(name=target.text, value=value, next_index=self.index)

    def _parse_function_definition(self) -> Expr:
        name_tok = self._advance()
        open_tok = self._advance()
        params: list[str] = []

        if self._peek().kind == "RPAREN":
            self._advance()
        else:
            while True:
                tok = self._peek()
                if tok.kind == "EOF":
                    self._expected_close(tok, open_tok)
                if tok.kind != "NAME":
                    self._error(
                        tok,
                        kind=ErrorKind.INVALID_PARAMETER_NAME,
                        message=f"Invalid parameter name {tok.text!r} in definition of {name_tok.text}",
                        expected=("NAME",),
                    )
                params.append(self._advance().text)
                sep = self._peek()
                if sep.kind == "COMMA":
                    self._advance()
                    continue
                if sep.kind == "RPAREN":
                    self._advance()
                    break
                self._expected_close(sep, open_tok)

        body = self._parse_expression()
        self.functions[name_tok.text] = len(params)
        logger.debug("registered %s/%d for bare calls", name_tok.text, len(params))
        return FunctionDefinition(name=name_tok.text, params=tuple(params), body=body, next_index=self.index)


def _as_tokens(source: str | Sequence[Token]) -> Sequence[Token]:
    if isinstance(source, str):
        return tokenize(source)
    tokens = list(source)
    if not tokens or tokens[-1].kind != "EOF":
        pos = tokens[-1].end if tokens else 0
        tokens.append(Token("EOF", "", pos, pos))
    return tokens


def _make_parser(source: str | Sequence[Token], functions: Mapping[str, int] | None) -> _Parser:
    return _Parser(tokens=_as_tokens(source), functions=dict(functions or {}))


def parse_program(source: str | Sequence[Token], functions: Mapping[str, int] | None = None) -> Program:
    """Parse every top-level statement.

    ``functions`` maps already-known function names to their arity so that
    bare prefix calls to them are recognised; it is copied, not updated.
    """
    parser = _make_parser(source, functions)
    try:
        return parser.parse_program()
    except RecursionError as exc:
        raise RecursionLimitExceeded("Expression nesting is too deep to parse") from exc


def parse(source: str | Sequence[Token], functions: Mapping[str, int] | None = None) -> Expr:
    parser = _make_parser(source, functions)
    try:
        return parser.parse_expression_only()
    except RecursionError as exc:
        raise RecursionLimitExceeded("Expression nesting is too deep to parse") from exc


def parse_expression(
    tokens: Sequence[Token],
    index: int = 0,
    functions: Mapping[str, int] | None = None,
) -> tuple[Expr, int]:
    """Parse one expression starting at ``tokens[index]``; return it and the next index."""
    parser = _make_parser(tokens, functions)
    try:
        return parser.parse_expression_at(index)
    except RecursionError as exc:
        raise RecursionLimitExceeded("Expression nesting is too deep to parse") from exc
