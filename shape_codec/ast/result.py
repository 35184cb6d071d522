"""Error tree and success/failure results produced by decoding and encoding.

A failed run yields exactly one :class:`ParseError`, which holds a non-empty
ordered tuple of :data:`ParseErrors` variants. Composite variants
(:class:`Index`, :class:`Key`, :class:`UnionMember`) wrap a non-empty inner
tuple, so the error tree mirrors the shape of the offending input.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .describe import describe, render_value
from .nodes import AST, PropertyKey


def _non_empty(errors: Sequence[ParseErrors], owner: str) -> tuple[ParseErrors, ...]:
    out = tuple(errors)
    if not out:
        raise ValueError(f"{owner} requires at least one nested error")
    return out


@dataclass(frozen=True, slots=True)
class Type:
    """The actual value does not have the shape of ``expected``."""

    expected: AST
    actual: Any
    message: str | None = None


@dataclass(frozen=True, slots=True)
class Forbidden:
    """A hook tried to suspend while only synchronous results are allowed."""


@dataclass(frozen=True, slots=True)
class Index:
    index: int
    errors: Sequence[ParseErrors]

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _non_empty(self.errors, "Index"))


@dataclass(frozen=True, slots=True)
class Key:
    key: PropertyKey
    errors: Sequence[ParseErrors]

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _non_empty(self.errors, "Key"))


@dataclass(frozen=True, slots=True)
class Missing:
    """A required key or index is absent."""


@dataclass(frozen=True, slots=True)
class Unexpected:
    """A key or index is present but not declared by the schema."""

    actual: Any


@dataclass(frozen=True, slots=True)
class UnionMember:
    errors: Sequence[ParseErrors]

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _non_empty(self.errors, "UnionMember"))


ParseErrors = Type | Forbidden | Index | Key | Missing | Unexpected | UnionMember

FORBIDDEN = Forbidden()
MISSING = Missing()


def format_errors(
    errors: Sequence[ParseErrors], path: tuple[PropertyKey, ...] = ()
) -> list[str]:
    """Render an error tree as path-qualified lines such as ``/a is missing``."""

    prefix = "".join(f"/{part}" for part in path)
    prefix = f"{prefix} " if prefix else ""
    lines: list[str] = []
    for error in errors:
        if isinstance(error, Key):
            lines.extend(format_errors(error.errors, (*path, error.key)))
        elif isinstance(error, Index):
            lines.extend(format_errors(error.errors, (*path, error.index)))
        elif isinstance(error, UnionMember):
            lines.extend(format_errors(error.errors, path))
        elif isinstance(error, Missing):
            lines.append(f"{prefix}is missing")
        elif isinstance(error, Unexpected):
            lines.append(f"{prefix}is unexpected")
        elif isinstance(error, Forbidden):
            lines.append(f"{prefix}is forbidden")
        elif error.message is not None:
            lines.append(f"{prefix}{error.message}")
        else:
            lines.append(
                f"{prefix}Expected {describe(error.expected)}, "
                f"actual {render_value(error.actual)}"
            )
    return lines


@dataclass(slots=True, eq=False)
class ParseError(ValueError):
    """Non-empty ordered collection of errors from one decode or encode run."""

    errors: Sequence[ParseErrors]

    def __post_init__(self) -> None:
        self.errors = _non_empty(self.errors, "ParseError")

    def __str__(self) -> str:
        return ", ".join(format_errors(self.errors))


@dataclass(frozen=True, slots=True)
class Success:
    value: Any

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    def map(self, f: Callable[[Any], Any]) -> ParseResult:
        return Success(f(self.value))

    def flat_map(self, f: Callable[[Any], ParseResult]) -> ParseResult:
        return f(self.value)

    def map_error(self, f: Callable[[ParseError], ParseError]) -> ParseResult:
        return self

    def get_or_raise(self) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    error: ParseError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def map(self, f: Callable[[Any], Any]) -> ParseResult:
        return self

    def flat_map(self, f: Callable[[Any], ParseResult]) -> ParseResult:
        return self

    def map_error(self, f: Callable[[ParseError], ParseError]) -> ParseResult:
        return Failure(f(self.error))

    def get_or_raise(self) -> Any:
        raise self.error


ParseResult = Success | Failure


def success(value: Any) -> Success:
    return Success(value)


def failure(error: ParseErrors) -> Failure:
    return Failure(ParseError((error,)))


def failures(errors: Sequence[ParseErrors]) -> Failure:
    return Failure(ParseError(errors))
