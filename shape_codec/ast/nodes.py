from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass, replace
from dataclasses import field as dc_field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Literal, get_args

logger = logging.getLogger(__name__)

MESSAGE_ANNOTATION = "message"
IDENTIFIER_ANNOTATION = "identifier"
TITLE_ANNOTATION = "title"
DESCRIPTION_ANNOTATION = "description"

Annotations = Mapping[Hashable, Any]


class Symbol:
    """Process-unique symbolic identifier, compared by identity."""

    __slots__ = ("description",)

    def __init__(self, description: str = ""):
        self.description = description

    def __repr__(self) -> str:
        return f"Symbol({self.description!r})"


class _Undefined:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

LiteralValue = str | int | float | bool | None
PropertyKey = str | int | Symbol
KeywordKind = Literal[
    "undefined",
    "void",
    "never",
    "unknown",
    "any",
    "string",
    "number",
    "boolean",
    "bigint",
    "symbol",
    "object",
]
IndexSignatureKey = Literal["string", "number", "symbol"]

KEYWORD_KINDS = frozenset(get_args(KeywordKind))


@dataclass(slots=True)
class ASTConstructionError(ValueError):
    """Raised when a node would violate a structural invariant."""

    message: str

    def __str__(self) -> str:
        return self.message


def _freeze_annotations(node: Any) -> None:
    # read-only view over a private copy; nodes are shared across runs
    object.__setattr__(node, "annotations", MappingProxyType(dict(node.annotations)))


@dataclass(frozen=True, slots=True)
class LiteralType:
    literal: LiteralValue
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)

    def __eq__(self, other: object) -> bool:
        # 1, 1.0 and True are distinct literals
        if not isinstance(other, LiteralType):
            return NotImplemented
        return (
            type(self.literal) is type(other.literal)
            and self.literal == other.literal
            and self.annotations == other.annotations
        )


@dataclass(frozen=True, slots=True)
class UniqueSymbol:
    symbol: Symbol
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)


@dataclass(frozen=True, slots=True)
class Keyword:
    kind: KeywordKind
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in KEYWORD_KINDS:
            raise ASTConstructionError(f"Unknown keyword: {self.kind!r}")
        _freeze_annotations(self)


@dataclass(frozen=True, slots=True)
class Element:
    type: AST
    is_optional: bool = False
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)


@dataclass(frozen=True, slots=True)
class Tuple:
    """Positional elements followed by an optional rest.

    ``rest[0]`` is the variadic element type; any further entries are
    required trailing elements matched against the last input positions.
    """

    elements: Sequence[Element] = ()
    rest: Sequence[AST] | None = None
    is_readonly: bool = False
    allow_unexpected: bool = False
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)
        elements = tuple(self.elements)
        seen_optional = False
        for element in elements:
            if element.is_optional:
                seen_optional = True
            elif seen_optional:
                raise ASTConstructionError(
                    "A required element cannot follow an optional element"
                )
        object.__setattr__(self, "elements", elements)
        if self.rest is not None:
            rest = tuple(self.rest)
            if not rest:
                raise ASTConstructionError("Tuple rest must contain at least one type")
            object.__setattr__(self, "rest", rest)


@dataclass(frozen=True, slots=True)
class Field:
    key: PropertyKey
    value: AST
    is_optional: bool = False
    is_readonly: bool = False
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)


@dataclass(frozen=True, slots=True)
class IndexSignature:
    key: IndexSignatureKey
    value: AST
    is_readonly: bool = False
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)


@dataclass(frozen=True, slots=True)
class Struct:
    """Keyed object shape.

    Fields and index signatures are stored in ascending cardinality of their
    value type, so the most selective checks run first.
    """

    fields: Sequence[Field] = ()
    index_signatures: Sequence[IndexSignature] = ()
    allow_unexpected: bool = False
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)
        object.__setattr__(self, "fields", _sort_by_cardinality(self.fields))
        object.__setattr__(
            self, "index_signatures", _sort_by_cardinality(self.index_signatures)
        )


@dataclass(frozen=True, slots=True)
class Union:
    """At least two distinct, non-union members, stored in descending weight.

    Nested unions are flattened and duplicates dropped on construction.
    :func:`union` additionally collapses candidate lists that would leave
    fewer than two members.
    """

    members: Sequence[AST]
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)
        members = _flatten_members(self.members)
        if len(members) < 2:
            raise ASTConstructionError("Union requires at least two members")
        object.__setattr__(
            self, "members", tuple(sorted(members, key=get_weight, reverse=True))
        )


@dataclass(frozen=True, eq=False)
class Lazy:
    """Deferred node for recursive schemas; the produced AST is cached."""

    f: Callable[[], AST]
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)

    @cached_property
    def type(self) -> AST:
        logger.debug("resolving lazy schema %r", self.f)
        return self.f()


@dataclass(frozen=True, slots=True)
class Enums:
    enums: Sequence[tuple[str, str | int | float]]
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)
        object.__setattr__(self, "enums", tuple((str(n), v) for n, v in self.enums))


@dataclass(frozen=True, slots=True)
class Refinement:
    from_: AST
    refinement: Callable[[Any], Any]
    meta: Any = None
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)


@dataclass(frozen=True, slots=True)
class TypeAlias:
    type_parameters: Sequence[AST]
    type: AST
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)
        object.__setattr__(self, "type_parameters", tuple(self.type_parameters))


@dataclass(frozen=True, slots=True)
class Transform:
    """Opaque decode/encode hook pair between a ``from_`` and a ``to`` shape.

    Hooks receive one value and may return a plain value, a parse result,
    or an awaitable of either. Raising ``ValueError`` or ``TypeError``
    reports a ``Type`` mismatch against this node.
    """

    from_: AST
    to: AST
    decode: Callable[[Any], Any]
    encode: Callable[[Any], Any]
    annotations: Annotations = dc_field(default_factory=dict)

    def __post_init__(self) -> None:
        _freeze_annotations(self)


AST = (
    TypeAlias
    | LiteralType
    | UniqueSymbol
    | Keyword
    | Tuple
    | Struct
    | Union
    | Lazy
    | Enums
    | Refinement
    | Transform
)


# ---------------------------------------------------------------------------
# Ordering heuristics
# ---------------------------------------------------------------------------

_KEYWORD_CARDINALITY: dict[str, int] = {
    "never": 0,
    "undefined": 1,
    "boolean": 2,
    "string": 3,
    "number": 3,
    "bigint": 3,
    "symbol": 3,
    "unknown": 4,
    "any": 4,
}

LAZY_WEIGHT = 10


def get_cardinality(ast: AST) -> int:
    """Rough count of distinct values ``ast`` accepts, from 0 (never) to 5."""

    if isinstance(ast, TypeAlias):
        return get_cardinality(ast.type)
    if isinstance(ast, Keyword):
        return _KEYWORD_CARDINALITY.get(ast.kind, 5)
    if isinstance(ast, (LiteralType, UniqueSymbol)):
        return 1
    return 5


def get_weight(ast: AST) -> int:
    """Structural complexity used to try union members most-specific first."""

    if isinstance(ast, TypeAlias):
        return get_weight(ast.type)
    if isinstance(ast, Tuple):
        return len(ast.elements) + (1 if ast.rest is not None else 0)
    if isinstance(ast, Struct):
        return len(ast.fields) + len(ast.index_signatures)
    if isinstance(ast, Union):
        return sum(get_weight(member) for member in ast.members)
    if isinstance(ast, Lazy):
        return LAZY_WEIGHT
    return 0


def _sort_by_cardinality(items: Sequence[Any]) -> tuple[Any, ...]:
    return tuple(sorted(items, key=lambda item: get_cardinality(item.value)))


# ---------------------------------------------------------------------------
# Smart constructors
# ---------------------------------------------------------------------------


def keyword(kind: KeywordKind, annotations: Annotations | None = None) -> Keyword:
    return Keyword(kind, annotations or {})


UNDEFINED_KEYWORD = keyword("undefined")
VOID = keyword("void")
NEVER = keyword("never")
UNKNOWN = keyword("unknown")
ANY = keyword("any")
STRING = keyword("string")
NUMBER = keyword("number")
BOOLEAN = keyword("boolean")
BIGINT = keyword("bigint")
SYMBOL = keyword("symbol")
OBJECT = keyword("object")


def literal(value: LiteralValue, annotations: Annotations | None = None) -> LiteralType:
    if value is not None and not isinstance(value, (str, int, float, bool)):
        raise ASTConstructionError(f"Unsupported literal value: {value!r}")
    return LiteralType(value, annotations or {})


def _flatten_members(candidates: Sequence[AST]) -> list[AST]:
    uniq: list[AST] = []
    for candidate in candidates:
        parts = candidate.members if isinstance(candidate, Union) else (candidate,)
        for part in parts:
            if part not in uniq:
                uniq.append(part)
    return uniq


def union(candidates: Sequence[AST], annotations: Annotations | None = None) -> AST:
    """Build a union, collapsing to ``never`` or the sole member when fewer
    than two distinct candidates remain."""

    uniq = _flatten_members(candidates)
    if not uniq:
        return Keyword("never", annotations or {})
    if len(uniq) == 1:
        return uniq[0]
    return Union(uniq, annotations or {})


def annotate(ast: AST, extra: Annotations) -> AST:
    """Return a copy of ``ast`` whose annotations are merged, rightmost wins."""

    return replace(ast, annotations={**ast.annotations, **extra})


def append_rest_element(
    ast: Tuple, rest_element: AST, annotations: Annotations | None = None
) -> Tuple:
    if ast.rest is not None:
        raise ASTConstructionError("A rest element cannot follow another rest element")
    return Tuple(
        ast.elements,
        (rest_element,),
        ast.is_readonly,
        ast.allow_unexpected,
        dict(annotations or {}),
    )


def append_element(
    ast: Tuple, new_element: Element, annotations: Annotations | None = None
) -> Tuple:
    if any(e.is_optional for e in ast.elements) and not new_element.is_optional:
        raise ASTConstructionError("A required element cannot follow an optional element")
    if ast.rest is None:
        return Tuple(
            (*ast.elements, new_element),
            None,
            ast.is_readonly,
            ast.allow_unexpected,
            dict(annotations or {}),
        )
    if new_element.is_optional:
        raise ASTConstructionError("An optional element cannot follow a rest element")
    return Tuple(
        ast.elements,
        (*ast.rest, new_element.type),
        ast.is_readonly,
        ast.allow_unexpected,
        dict(annotations or {}),
    )
