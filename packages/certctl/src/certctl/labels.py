"""Boolean label expressions used to select checks.

Grammar::

    expr  := and (('||' | ',') and)*
    and   := unary ('&&' unary)*
    unary := '!' unary | '(' expr ')' | TAG

``-`` and ``_`` are interchangeable inside tags. The reserved literal ``none``
never matches, so ``none`` alone selects nothing and ``none || <check-id>``
selects exactly the named check (every check carries its own id as a tag).
The literal ``all`` as a whole expression expands to the four scenario tags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Union

from .errors import LabelExpressionError

NONE_LITERAL = "none"
ALL_LITERAL = "all"
ALL_TAGS = ("common", "extended", "faredge", "telco")

_TOKEN = re.compile(r"\s*(?:(&&)|(\|\|)|(,)|(!)|(\()|(\))|([A-Za-z0-9_.\-/]+))")


def normalize_tag(tag: str) -> str:
    return str(tag).strip().replace("-", "_")


@dataclass(frozen=True)
class Tag:
    name: str

    def eval(self, tags: frozenset[str]) -> bool:
        if self.name == NONE_LITERAL:
            return False
        return self.name in tags

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Not:
    operand: Node

    def eval(self, tags: frozenset[str]) -> bool:
        return not self.operand.eval(tags)

    def __str__(self) -> str:
        return f"!{self.operand}"


@dataclass(frozen=True)
class And:
    left: Node
    right: Node

    def eval(self, tags: frozenset[str]) -> bool:
        return self.left.eval(tags) and self.right.eval(tags)

    def __str__(self) -> str:
        return f"({self.left} && {self.right})"


@dataclass(frozen=True)
class Or:
    left: Node
    right: Node

    def eval(self, tags: frozenset[str]) -> bool:
        return self.left.eval(tags) or self.right.eval(tags)

    def __str__(self) -> str:
        return f"({self.left} || {self.right})"


Node = Union[Tag, Not, And, Or]


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _TOKEN.match(stripped, pos)
        if match is None:
            raise LabelExpressionError(f"failed to parse labels expression {text!r}: unexpected character at offset {pos}")
        kinds = ("and", "or", "or", "not", "lparen", "rparen", "tag")
        for kind, value in zip(kinds, match.groups()):
            if value is not None:
                tokens.append((kind, value))
                break
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def _peek(self) -> str | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][0]
        return None

    def _fail(self, reason: str) -> LabelExpressionError:
        return LabelExpressionError(f"failed to parse labels expression {self.text!r}: {reason}")

    def parse(self) -> Node:
        if not self.tokens:
            raise self._fail("expression is empty")
        node = self._or()
        if self.pos != len(self.tokens):
            raise self._fail(f"unexpected token {self.tokens[self.pos][1]!r}")
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._peek() == "or":
            self.pos += 1
            node = Or(node, self._and())
        return node

    def _and(self) -> Node:
        node = self._unary()
        while self._peek() == "and":
            self.pos += 1
            node = And(node, self._unary())
        return node

    def _unary(self) -> Node:
        kind = self._peek()
        if kind is None:
            raise self._fail("unexpected end of expression")
        value = self.tokens[self.pos][1]
        if kind == "not":
            self.pos += 1
            return Not(self._unary())
        if kind == "lparen":
            self.pos += 1
            node = self._or()
            if self._peek() != "rparen":
                raise self._fail("missing closing parenthesis")
            self.pos += 1
            return node
        if kind == "tag":
            self.pos += 1
            return Tag(normalize_tag(value))
        raise self._fail(f"unexpected token {value!r}")


@dataclass(frozen=True)
class LabelExpression:
    source: str
    root: Node

    def matches(self, tags: Iterable[str]) -> bool:
        normalized = frozenset(normalize_tag(tag) for tag in tags)
        return self.root.eval(normalized)

    def __str__(self) -> str:
        return self.source


def parse_label_expression(text: str) -> LabelExpression:
    raw = str(text or "").strip()
    expanded = ",".join(ALL_TAGS) if raw == ALL_LITERAL else raw
    return LabelExpression(source=raw, root=_Parser(expanded).parse())


def select(expression: str | LabelExpression, tags: Iterable[str]) -> bool:
    expr = expression if isinstance(expression, LabelExpression) else parse_label_expression(expression)
    return expr.matches(tags)


__all__ = [
    "ALL_TAGS",
    "LabelExpression",
    "NONE_LITERAL",
    "normalize_tag",
    "parse_label_expression",
    "select",
]
