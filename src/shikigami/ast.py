"""AST nodes for the prefix-notation keypad language.

Every node records ``next_index``, the index of the token right after it.
It is parser bookkeeping and does not take part in equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .rational import Rational


@dataclass(frozen=True)
class Number:
    value: Rational
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class String:
    value: str
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class Variable:
    name: str
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class Operation:
    op: str
    left: "Expr"
    right: "Expr"
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class Assignment:
    name: str
    value: "Expr"
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: tuple[str, ...]
    body: "Expr"
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionCall:
    name: str
    args: tuple["Expr", ...]
    next_index: int = field(default=-1, compare=False, repr=False)


@dataclass(frozen=True)
class Program:
    statements: tuple["Expr", ...]


Expr = Union[Number, String, Variable, Operation, Assignment, FunctionDefinition, FunctionCall]
