from __future__ import annotations

import asyncio
import inspect
import logging
import numbers
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from ..config import ParseOptions
from .describe import describe
from .nodes import (
    AST,
    MESSAGE_ANNOTATION,
    UNDEFINED,
    Enums,
    IndexSignature,
    Keyword,
    Lazy,
    LiteralType,
    LiteralValue,
    PropertyKey,
    Refinement,
    Struct,
    Symbol,
    Transform,
    Tuple,
    TypeAlias,
    Union,
    UniqueSymbol,
    union,
)
from .result import (
    FORBIDDEN,
    MISSING,
    Failure,
    Index,
    Key,
    ParseError,
    ParseErrors,
    ParseResult,
    Success,
    Type,
    Unexpected,
    UnionMember,
    failure,
    failures,
)
from .transforms import get_fields

logger = logging.getLogger(__name__)

AwaitableResolver = Callable[[Awaitable[Any]], Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_object(value: Any) -> bool:
    return not (
        value is None
        or value is UNDEFINED
        or isinstance(value, (str, bytes, bool, numbers.Number, Symbol))
    )


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


_KEYWORD_GUARDS: dict[str, Callable[[Any], bool]] = {
    "undefined": lambda v: v is UNDEFINED,
    "void": lambda v: v is UNDEFINED,
    "never": lambda v: False,
    "unknown": lambda v: True,
    "any": lambda v: True,
    "string": lambda v: isinstance(v, str),
    "number": _is_number,
    "boolean": lambda v: isinstance(v, bool),
    "bigint": _is_integer,
    "symbol": lambda v: isinstance(v, Symbol),
    "object": _is_object,
}


def literal_matches(literal: LiteralValue, value: Any) -> bool:
    if isinstance(literal, bool) or isinstance(value, bool):
        return isinstance(literal, bool) and isinstance(value, bool) and literal == value
    if literal is None:
        return value is None
    if isinstance(literal, str):
        return isinstance(value, str) and value == literal
    return _is_number(value) and value == literal


def _key_in_domain(key: Any, signature: IndexSignature) -> bool:
    if signature.key == "symbol":
        return isinstance(key, Symbol)
    if signature.key == "number":
        return _is_number(key)
    return isinstance(key, str)


def _unwrap(ast: AST) -> AST:
    while isinstance(ast, TypeAlias):
        ast = ast.type
    return ast


def _literal_options(ast: AST) -> tuple[LiteralType, ...] | None:
    ast = _unwrap(ast)
    if isinstance(ast, LiteralType):
        return (ast,)
    if isinstance(ast, Union) and all(isinstance(m, LiteralType) for m in ast.members):
        return tuple(ast.members)
    return None


def _discriminants(member: AST) -> list[tuple[PropertyKey, tuple[LiteralType, ...]]]:
    """Required literal-valued fields of a struct member, in field order."""

    member = _unwrap(member)
    if not isinstance(member, Struct):
        return []
    out = []
    for f in member.fields:
        if f.is_optional:
            continue
        options = _literal_options(f.value)
        if options is not None:
            out.append((f.key, options))
    return out


class Parser:
    """Walks an AST against one value, either decoding or encoding.

    Typical usage::

        parser = Parser(is_decoding=True, options=ParseOptions())
        result = parser.run(ast, {"a": 1})

    Hooks (refinement predicates and transform functions) may return
    awaitables. Without ``resolve_awaitable`` such a hook yields
    ``Forbidden``; with it, the resolver blocks until the awaitable settles.
    """

    def __init__(
        self,
        is_decoding: bool,
        options: ParseOptions,
        resolve_awaitable: AwaitableResolver | None = None,
    ):
        self.is_decoding = is_decoding
        self.options = options
        self._resolve_awaitable = resolve_awaitable

    def run(self, ast: AST, value: Any) -> ParseResult:
        if isinstance(ast, TypeAlias):
            return self.run(ast.type, value)
        if isinstance(ast, Lazy):
            return self.run(ast.type, value)
        if isinstance(ast, Keyword):
            return self._guard(ast, value, _KEYWORD_GUARDS[ast.kind](value))
        if isinstance(ast, LiteralType):
            return self._guard(ast, value, literal_matches(ast.literal, value))
        if isinstance(ast, UniqueSymbol):
            return self._guard(ast, value, value is ast.symbol)
        if isinstance(ast, Enums):
            matched = any(literal_matches(v, value) for _, v in ast.enums)
            return self._guard(ast, value, matched)
        if isinstance(ast, Refinement):
            return self._refinement(ast, value)
        if isinstance(ast, Transform):
            return self._transform(ast, value)
        if isinstance(ast, Tuple):
            return self._tuple(ast, value)
        if isinstance(ast, Struct):
            return self._struct(ast, value)
        if isinstance(ast, Union):
            return self._union(ast, value)
        raise TypeError(f"Unsupported AST node: {type(ast)!r}")

    # -- leaves ------------------------------------------------------------

    def _type_error(self, ast: AST, value: Any, message: str | None = None) -> Failure:
        if message is None:
            annotation = ast.annotations.get(MESSAGE_ANNOTATION)
            if callable(annotation):
                message = str(annotation(value))
            elif annotation is not None:
                message = str(annotation)
        return failure(Type(ast, value, message))

    def _guard(self, ast: AST, value: Any, ok: bool) -> ParseResult:
        return Success(value) if ok else self._type_error(ast, value)

    # -- hooks -------------------------------------------------------------

    def _call_hook(self, ast: AST, hook: Callable[[Any], Any], value: Any) -> ParseResult:
        try:
            outcome = hook(value)
            if inspect.isawaitable(outcome):
                if self._resolve_awaitable is None:
                    if inspect.iscoroutine(outcome):
                        outcome.close()
                    logger.warning(
                        "hook on %s suspended during a synchronous run", describe(ast)
                    )
                    return failure(FORBIDDEN)
                outcome = self._resolve_awaitable(outcome)
        except ParseError as exc:
            return Failure(exc)
        except (ValueError, TypeError) as exc:
            return self._type_error(ast, value, str(exc) or None)
        if isinstance(outcome, (Success, Failure)):
            return outcome
        return Success(outcome)

    def _check_predicate(self, ast: Refinement, value: Any) -> ParseResult:
        checked = self._call_hook(ast, ast.refinement, value)
        if isinstance(checked, Failure):
            return checked
        return Success(value) if checked.value else self._type_error(ast, value)

    def _refinement(self, ast: Refinement, value: Any) -> ParseResult:
        if self.is_decoding:
            return self.run(ast.from_, value).flat_map(
                lambda decoded: self._check_predicate(ast, decoded)
            )
        return self._check_predicate(ast, value).flat_map(
            lambda checked: self.run(ast.from_, checked)
        )

    def _transform(self, ast: Transform, value: Any) -> ParseResult:
        if self.is_decoding:
            return (
                self.run(ast.from_, value)
                .flat_map(lambda a: self._call_hook(ast, ast.decode, a))
                .flat_map(lambda b: self.run(ast.to, b))
            )
        return (
            self.run(ast.to, value)
            .flat_map(lambda b: self._call_hook(ast, ast.encode, b))
            .flat_map(lambda a: self.run(ast.from_, a))
        )

    # -- tuples ------------------------------------------------------------

    def _tuple(self, ast: Tuple, value: Any) -> ParseResult:
        if not _is_sequence(value):
            return self._type_error(ast, value)

        all_errors = self.options.all_errors
        errors: list[ParseErrors] = []
        output: list[Any] = []
        n = len(value)

        def _item(i: int, type_: AST) -> bool:
            if i >= n:
                errors.append(Index(i, (MISSING,)))
                return False
            result = self.run(type_, value[i])
            if isinstance(result, Failure):
                errors.append(Index(i, result.error.errors))
                return False
            output.append(result.value)
            return True

        for i, element in enumerate(ast.elements):
            if i >= n and element.is_optional:
                continue
            if not _item(i, element.type) and not all_errors:
                return failures(errors)

        start = len(ast.elements)
        if ast.rest is not None:
            head, *tail = ast.rest
            end = max(start, n - len(tail))
            for i in range(start, end):
                if not _item(i, head) and not all_errors:
                    return failures(errors)
            for j, type_ in enumerate(tail):
                if not _item(end + j, type_) and not all_errors:
                    return failures(errors)
        else:
            for i in range(start, n):
                if ast.allow_unexpected:
                    output.append(value[i])
                elif self.options.is_exact:
                    errors.append(Index(i, (Unexpected(value[i]),)))
                    if not all_errors:
                        return failures(errors)

        if errors:
            return failures(errors)
        return Success(output)

    # -- structs -----------------------------------------------------------

    def _struct(self, ast: Struct, value: Any) -> ParseResult:
        if not isinstance(value, Mapping):
            return self._type_error(ast, value)

        all_errors = self.options.all_errors
        errors: list[ParseErrors] = []
        output: dict[Any, Any] = {}
        declared: set[Any] = set()

        for f in ast.fields:
            declared.add(f.key)
            if f.key not in value:
                if f.is_optional:
                    continue
                errors.append(Key(f.key, (MISSING,)))
                if not all_errors:
                    return failures(errors)
                continue
            result = self.run(f.value, value[f.key])
            if isinstance(result, Failure):
                errors.append(Key(f.key, result.error.errors))
                if not all_errors:
                    return failures(errors)
                continue
            output[f.key] = result.value

        for key, item in value.items():
            if key in declared:
                continue
            signatures = [s for s in ast.index_signatures if _key_in_domain(key, s)]
            if signatures:
                for signature in signatures:
                    result = self.run(signature.value, item)
                    if isinstance(result, Failure):
                        errors.append(Key(key, result.error.errors))
                        if not all_errors:
                            return failures(errors)
                        break
                    output[key] = result.value
            elif ast.allow_unexpected:
                output[key] = item
            elif self.options.is_exact:
                errors.append(Key(key, (Unexpected(item),)))
                if not all_errors:
                    return failures(errors)

        if errors:
            return failures(errors)
        return Success(output)

    # -- unions ------------------------------------------------------------

    def _union(self, ast: Union, value: Any) -> ParseResult:
        candidates: list[AST] = list(ast.members)
        rejected: dict[Any, list[LiteralType]] = {}
        if isinstance(value, Mapping):
            candidates = []
            for member in ast.members:
                mismatched = False
                for key, options in _discriminants(member):
                    if key in value and any(literal_matches(o.literal, value[key]) for o in options):
                        continue
                    mismatched = True
                    rejected.setdefault(key, []).extend(options)
                if not mismatched:
                    candidates.append(member)

        successes: list[tuple[AST, Any]] = []
        member_errors: list[tuple[ParseErrors, ...]] = []
        for member in candidates:
            result = self.run(member, value)
            if isinstance(result, Failure):
                member_errors.append(tuple(result.error.errors))
                continue
            successes.append((member, result.value))
            if self._covers_input(value, result.value):
                break

        if successes:
            logger.debug(
                "union matched %d of %d members", len(successes), len(ast.members)
            )
            return Success(self._merge(successes))

        if not candidates:
            return failures(self._discriminant_errors(value, rejected))

        if not rejected and all(
            len(es) == 1 and isinstance(es[0], Type) and es[0].actual is value
            for es in member_errors
        ):
            return self._type_error(ast, value)
        # keys some surviving member matched are not reported as mismatches
        matched = {key for member in candidates for key, _ in _discriminants(member)}
        unmatched = {k: v for k, v in rejected.items() if k not in matched}
        return failures(
            self._discriminant_errors(value, unmatched)
            + [UnionMember(es) for es in member_errors]
        )

    @staticmethod
    def _covers_input(value: Any, output: Any) -> bool:
        if not isinstance(value, Mapping) or not isinstance(output, Mapping):
            return True
        return all(key in output for key in value)

    @staticmethod
    def _discriminant_errors(
        value: Mapping[Any, Any], rejected: dict[Any, list[LiteralType]]
    ) -> list[ParseErrors]:
        # one error per key, however many members share it
        errors: list[ParseErrors] = []
        for key, options in rejected.items():
            if key not in value:
                errors.append(Key(key, (MISSING,)))
            else:
                errors.append(Key(key, (Type(union(options), value[key]),)))
        return errors

    def _merge(self, successes: Sequence[tuple[AST, Any]]) -> Any:
        _, base = successes[0]
        if len(successes) == 1 or not isinstance(base, dict):
            return base
        merged = dict(base)
        for member, output in successes[1:]:
            if not isinstance(output, Mapping):
                continue
            required = {f.key for f in get_fields(member) if not f.is_optional}
            for key, item in output.items():
                if key in merged:
                    if self.options.union_conflicts == "last":
                        merged[key] = item
                elif key in required or self.options.is_exact:
                    merged[key] = item
        return merged


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def decode(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> ParseResult:
    """Convert an external value into its canonical representation."""

    return Parser(True, ParseOptions.coerce(options)).run(ast, value)


def encode(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> ParseResult:
    """Convert a canonical value back into its external representation."""

    return Parser(False, ParseOptions.coerce(options)).run(ast, value)


def decode_or_raise(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> Any:
    return decode(ast, value, options).get_or_raise()


def encode_or_raise(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> Any:
    return encode(ast, value, options).get_or_raise()


def is_valid(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> bool:
    return decode(ast, value, options).is_success


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


async def _run_async(
    is_decoding: bool,
    ast: AST,
    value: Any,
    options: ParseOptions | Mapping[str, Any] | None,
) -> ParseResult:
    loop = asyncio.get_running_loop()

    def _resolve(awaitable: Awaitable[Any]) -> Any:
        return asyncio.run_coroutine_threadsafe(_await(awaitable), loop).result()

    parser = Parser(is_decoding, ParseOptions.coerce(options), resolve_awaitable=_resolve)
    return await asyncio.to_thread(parser.run, ast, value)


async def decode_async(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> ParseResult:
    """Like :func:`decode`, but hooks may suspend on the running event loop."""

    return await _run_async(True, ast, value, options)


async def encode_async(
    ast: AST, value: Any, options: ParseOptions | Mapping[str, Any] | None = None
) -> ParseResult:
    return await _run_async(False, ast, value, options)
