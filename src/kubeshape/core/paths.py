#!/usr/bin/env python3
"""
KUBESHAPE PATHS - The Matcher
-----------------------------
Concrete paths address a single node of a value tree; path expressions
select nodes with optional wildcards. An expression matches a path only
when both have the same length and every step matches. There is no
prefix or suffix matching.

Text form of an expression:
    status
    metadata.name
    spec.containers[*].image
    metadata.labels.*
    metadata.annotations["example.com/owner"]

Author: KubeShape Team
Date: 2026-01-16
"""

import json
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from kubeshape.core.errors import PathError


# --- Concrete steps ---

@dataclass(frozen=True)
class Name:
    """A field of a structured value."""
    name: str


@dataclass(frozen=True)
class Key:
    """A key of a mapping value."""
    key: str


@dataclass(frozen=True)
class Index:
    """A position inside a sequence."""
    index: int


Step = Union[Name, Key, Index]

_PLAIN_NAME = re.compile(r"^[^.\[\]\"*]+$")


def _label(step: Step) -> Optional[str]:
    if isinstance(step, Name):
        return step.name
    if isinstance(step, Key):
        return step.key
    return None


class Path:
    """An immutable, ordered sequence of concrete steps."""

    __slots__ = ("_steps",)

    def __init__(self, steps: Iterable[Step] = ()):
        self._steps: Tuple[Step, ...] = tuple(steps)

    @classmethod
    def root(cls) -> "Path":
        return cls()

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    def at_name(self, name: str) -> "Path":
        return Path(self._steps + (Name(name),))

    def at_key(self, key: str) -> "Path":
        return Path(self._steps + (Key(key),))

    def at_index(self, index: int) -> "Path":
        return Path(self._steps + (Index(index),))

    def parent(self) -> "Path":
        return Path(self._steps[:-1])

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __eq__(self, other) -> bool:
        return isinstance(other, Path) and self._steps == other._steps

    def __hash__(self) -> int:
        return hash(self._steps)

    def __repr__(self) -> str:
        return f"Path({str(self)!r})"

    def __str__(self) -> str:
        parts = []
        for step in self._steps:
            if isinstance(step, Index):
                parts.append(f"[{step.index}]")
            elif isinstance(step, Name) and _PLAIN_NAME.match(step.name):
                parts.append(f".{step.name}" if parts else step.name)
            else:
                parts.append(f"[{json.dumps(_label(step))}]")
        return "".join(parts)


# --- Expression steps ---

@dataclass(frozen=True)
class MatchName:
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise PathError(f"Name step requires a non-empty string, got {self.name!r}")


@dataclass(frozen=True)
class AnyName:
    pass


@dataclass(frozen=True)
class MatchIndex:
    index: int

    def __post_init__(self):
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            raise PathError(f"Index step requires a non-negative integer, got {self.index!r}")


@dataclass(frozen=True)
class AnyIndex:
    pass


ExpressionStep = Union[MatchName, AnyName, MatchIndex, AnyIndex]
_EXPRESSION_STEPS = (MatchName, AnyName, MatchIndex, AnyIndex)


def _step_matches(expr: ExpressionStep, step: Step) -> bool:
    # Names and keys share one category, indexes the other.
    if isinstance(expr, AnyName):
        return isinstance(step, (Name, Key))
    if isinstance(expr, MatchName):
        return isinstance(step, (Name, Key)) and _label(step) == expr.name
    if isinstance(expr, AnyIndex):
        return isinstance(step, Index)
    return isinstance(step, Index) and step.index == expr.index


# Group 1: [*], Group 2: [n], Group 3: ["quoted"], Group 4: plain name or *
TOKEN_PATTERN = re.compile(r'\[(\*)\]|\[(\d+)\]|\["((?:[^"\\]|\\.)*)"\]|\.?([^.\[\]"]+)')
EXPRESSION_PATTERN = re.compile(
    r'(?:[^.\[\]"]+|\[(?:\*|\d+|"(?:[^"\\]|\\.)*")\])'
    r'(?:\.[^.\[\]"]+|\[(?:\*|\d+|"(?:[^"\\]|\\.)*")\])*'
)


class PathExpression:
    """An ordered sequence of expression steps."""

    __slots__ = ("_steps",)

    def __init__(self, steps: Iterable[ExpressionStep]):
        steps = tuple(steps)
        for step in steps:
            if not isinstance(step, _EXPRESSION_STEPS):
                raise PathError(f"Unsupported path expression step: {step!r}")
        self._steps: Tuple[ExpressionStep, ...] = steps

    @classmethod
    def parse(cls, text: str) -> "PathExpression":
        if not isinstance(text, str) or not EXPRESSION_PATTERN.fullmatch(text):
            raise PathError(f"Malformed path expression: {text!r}")

        steps = []
        for match in TOKEN_PATTERN.finditer(text):
            any_index, index, quoted, name = match.groups()
            if any_index:
                steps.append(AnyIndex())
            elif index is not None:
                steps.append(MatchIndex(int(index)))
            elif quoted is not None:
                steps.append(MatchName(json.loads(f'"{quoted}"')))
            elif name == "*":
                steps.append(AnyName())
            else:
                steps.append(MatchName(name))
        return cls(steps)

    @property
    def steps(self) -> Tuple[ExpressionStep, ...]:
        return self._steps

    def matches(self, path: Path) -> bool:
        if len(self._steps) != len(path):
            return False
        return all(_step_matches(e, s) for e, s in zip(self._steps, path))

    def matches_prefix_of(self, path: Path) -> bool:
        """True when this expression is longer than `path` and begins with it."""
        if len(self._steps) <= len(path):
            return False
        return all(_step_matches(e, s) for e, s in zip(self._steps, path))

    def __len__(self) -> int:
        return len(self._steps)

    def __eq__(self, other) -> bool:
        return isinstance(other, PathExpression) and self._steps == other._steps

    def __hash__(self) -> int:
        return hash(self._steps)

    def __repr__(self) -> str:
        return f"PathExpression({str(self)!r})"

    def __str__(self) -> str:
        parts = []
        for step in self._steps:
            if isinstance(step, AnyIndex):
                parts.append("[*]")
            elif isinstance(step, MatchIndex):
                parts.append(f"[{step.index}]")
            elif isinstance(step, AnyName):
                parts.append(".*" if parts else "*")
            elif _PLAIN_NAME.match(step.name):
                parts.append(f".{step.name}" if parts else step.name)
            else:
                parts.append(f"[{json.dumps(step.name)}]")
        return "".join(parts)


class ExpressionSet:
    """An immutable collection of path expressions."""

    __slots__ = ("_expressions",)

    def __init__(self, expressions: Iterable[PathExpression] = ()):
        expressions = tuple(expressions)
        for expr in expressions:
            if not isinstance(expr, PathExpression):
                raise PathError(f"Expected a PathExpression, got {type(expr).__name__}")
        self._expressions: Tuple[PathExpression, ...] = expressions

    @classmethod
    def from_strings(cls, texts: Iterable[str]) -> "ExpressionSet":
        return cls(PathExpression.parse(t) for t in texts)

    def union(self, other: "ExpressionSet") -> "ExpressionSet":
        return ExpressionSet(self._expressions + tuple(other))

    def matches(self, path: Path) -> bool:
        return any(expr.matches(path) for expr in self._expressions)

    def covers_below(self, path: Path) -> bool:
        """True when some expression could match a strict descendant of `path`."""
        return any(expr.matches_prefix_of(path) for expr in self._expressions)

    def __iter__(self) -> Iterator[PathExpression]:
        return iter(self._expressions)

    def __len__(self) -> int:
        return len(self._expressions)

    def __bool__(self) -> bool:
        return bool(self._expressions)

    def __repr__(self) -> str:
        return f"ExpressionSet({[str(e) for e in self._expressions]!r})"


ExpressionsLike = Union[ExpressionSet, Iterable[PathExpression], None]


def as_expression_set(expressions: ExpressionsLike) -> ExpressionSet:
    if expressions is None:
        return ExpressionSet()
    if isinstance(expressions, ExpressionSet):
        return expressions
    return ExpressionSet(expressions)


def matches(expressions: ExpressionsLike, path: Path) -> bool:
    """True iff some expression in `expressions` matches `path` exactly."""
    return as_expression_set(expressions).matches(path)
