"""Lexer -> parser -> evaluator pipeline and its string-only boundary."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Final

from .errors import ShikigamiError
from .evaluator import Environment, evaluate
from .lexer import tokenize
from .parser import parse_program
from .values import Value, coerce_value, format_value

logger = logging.getLogger("shikigami.interpreter")

ERROR_PREFIX: Final[str] = "Error: "


def run(source: str, env: Environment | None = None) -> Value | None:
    """Run a program and return the raw value of its last statement.

    Errors propagate as :class:`~shikigami.errors.ShikigamiError` subclasses.
    Bare prefix calls may target functions already present in ``env``.
    """
    runtime_env = Environment() if env is None else env
    tokens = tokenize(source)
    program = parse_program(tokens, functions=runtime_env.function_arities())
    return evaluate(program, runtime_env)


def _execute_in(source: str, env: Environment) -> str:
    logger.debug("execute %r", source)
    try:
        return format_value(run(source, env))
    except ShikigamiError as exc:
        logger.debug("execution failed with %s: %s", exc.kind.value, exc)
        return f"{ERROR_PREFIX}{exc}"
    except Exception as exc:
        logger.exception("unexpected failure while executing program")
        return f"{ERROR_PREFIX}internal error: {exc}"


def execute(source: str) -> str:
    """Run a program in a fresh environment and return its display text.

    Failures are returned as text starting with ``"Error: "``; nothing is raised.
    """
    return _execute_in(source, Environment())


def is_error(result: str) -> bool:
    return result.startswith(ERROR_PREFIX)


class Session(MutableMapping[str, Value]):
    """Persistent environment for several programs run one after another.

    Variables and functions defined by one call stay visible to the next.
    Mapping access reads and writes variables.
    """

    def __init__(self, variables: Mapping[str, object] | None = None) -> None:
        self.env = Environment()
        for name, value in (variables or {}).items():
            self[name] = value

    def execute(self, source: str) -> str:
        return _execute_in(source, self.env)

    def run(self, source: str) -> Value | None:
        return run(source, self.env)

    def reset(self) -> None:
        self.env = Environment()

    @property
    def functions(self) -> dict[str, tuple[str, ...]]:
        return {name: fn.params for name, fn in self.env.functions.items()}

    def __getitem__(self, key: str) -> Value:
        return self.env.variables[key]

    def __setitem__(self, key: str, value: object) -> None:
        self.env.variables[key] = coerce_value(value, where=f"variable {key!r}")

    def __delitem__(self, key: str) -> None:
        del self.env.variables[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.env.variables)

    def __len__(self) -> int:
        return len(self.env.variables)
