"""Structural queries and AST-to-AST transforms that never look at values."""

from __future__ import annotations

from collections.abc import Sequence

from .nodes import (
    AST,
    NEVER,
    NUMBER,
    STRING,
    SYMBOL,
    UNDEFINED_KEYWORD,
    ASTConstructionError,
    Element,
    Enums,
    Field,
    IndexSignature,
    Keyword,
    Lazy,
    LiteralType,
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

_NO_KEYS_KINDS = {"unknown", "number", "boolean", "bigint", "symbol", "undefined", "void", "object"}


def _intersection(left: Sequence, right: Sequence) -> list:
    return [item for item in left if item in right]


def _key_domain(key: PropertyKey) -> str:
    if isinstance(key, Symbol):
        return "symbol"
    if isinstance(key, (int, float)) and not isinstance(key, bool):
        return "number"
    return "string"


def property_key_ast(key: PropertyKey) -> AST:
    if isinstance(key, Symbol):
        return UniqueSymbol(key)
    return LiteralType(key)


def _index_signature_domains(signatures: Sequence[IndexSignature]) -> dict[str, bool]:
    out = {"string": False, "number": False, "symbol": False}
    for signature in signatures:
        if signature.key == "symbol":
            out["symbol"] = True
        elif signature.key == "number":
            out["number"] = True
        else:
            # string keys also cover numeric ones
            out["string"] = True
            out["number"] = True
    return out


def _index_signature_ast(signature: IndexSignature) -> AST:
    if signature.key == "symbol":
        return SYMBOL
    if signature.key == "number":
        return NUMBER
    return union([STRING, NUMBER])


def keyof(ast: AST) -> list[AST]:
    """Key types of ``ast``; a union keeps only keys common to every member."""

    if isinstance(ast, TypeAlias):
        return keyof(ast.type)
    if isinstance(ast, Keyword):
        if ast.kind in {"never", "any"}:
            return [STRING, NUMBER, SYMBOL]
        if ast.kind in _NO_KEYS_KINDS:
            return [NEVER]
    if isinstance(ast, (UniqueSymbol, Enums)):
        return [NEVER]
    if isinstance(ast, Struct):
        covered = _index_signature_domains(ast.index_signatures)
        keys = [
            property_key_ast(f.key) for f in ast.fields if not covered[_key_domain(f.key)]
        ]
        return keys + [_index_signature_ast(s) for s in ast.index_signatures]
    if isinstance(ast, Union):
        out = keyof(ast.members[0])
        for member in ast.members[1:]:
            out = _intersection(out, keyof(member))
        return out
    if isinstance(ast, Lazy):
        return keyof(ast.type)
    if isinstance(ast, Refinement):
        return keyof(ast.from_)
    if isinstance(ast, Transform):
        return keyof(ast.to)
    raise ASTConstructionError(f"cannot compute keyof for {type(ast).__name__}")


def record(key: AST, value: AST, is_readonly: bool = False) -> Struct:
    """Build a struct from a key type: literal keys become fields, primitive
    keys become index signatures."""

    fields: list[Field] = []
    signatures: list[IndexSignature] = []

    def _go(key_: AST) -> None:
        if isinstance(key_, TypeAlias):
            _go(key_.type)
        elif isinstance(key_, Keyword) and key_.kind == "never":
            return
        elif isinstance(key_, Keyword) and key_.kind in {"string", "number", "symbol"}:
            signatures.append(IndexSignature(key_.kind, value, is_readonly))
        elif isinstance(key_, LiteralType):
            literal_ = key_.literal
            if isinstance(literal_, (str, int, float)) and not isinstance(literal_, bool):
                fields.append(Field(literal_, value, False, is_readonly))
        elif isinstance(key_, UniqueSymbol):
            fields.append(Field(key_.symbol, value, False, is_readonly))
        elif isinstance(key_, Union):
            for member in key_.members:
                _go(member)
        elif isinstance(key_, Refinement):
            raise ASTConstructionError("cannot handle refinements in record")
        else:
            raise ASTConstructionError(
                f"{type(key_).__name__} does not satisfy the constraint string | number | symbol"
            )

    _go(key)
    return Struct(fields, signatures)


def property_keys(ast: AST) -> list[PropertyKey]:
    if isinstance(ast, TypeAlias):
        return property_keys(ast.type)
    if isinstance(ast, Tuple):
        return list(range(len(ast.elements)))
    if isinstance(ast, Struct):
        return [f.key for f in ast.fields]
    if isinstance(ast, Union):
        out = property_keys(ast.members[0])
        for member in ast.members[1:]:
            out = _intersection(out, property_keys(member))
        return out
    if isinstance(ast, Lazy):
        return property_keys(ast.type)
    if isinstance(ast, Refinement):
        return property_keys(ast.from_)
    if isinstance(ast, Transform):
        return property_keys(ast.to)
    return []


def get_fields(ast: AST) -> list[Field]:
    """Declared fields of ``ast``; tuple elements are reported under their index.

    For a union only the keys shared by every member survive, each typed as
    the union of the member field types and optional/readonly if any member
    declares it so.
    """

    if isinstance(ast, TypeAlias):
        return get_fields(ast.type)
    if isinstance(ast, Tuple):
        return [
            Field(i, element.type, element.is_optional, ast.is_readonly)
            for i, element in enumerate(ast.elements)
        ]
    if isinstance(ast, Struct):
        return list(ast.fields)
    if isinstance(ast, Union):
        all_fields = [f for member in ast.members for f in get_fields(member)]
        out: list[Field] = []
        for key in property_keys(ast):
            matching = [f for f in all_fields if f.key == key]
            out.append(
                Field(
                    key,
                    union([f.value for f in matching]),
                    any(f.is_optional for f in matching),
                    any(f.is_readonly for f in matching),
                )
            )
        return out
    if isinstance(ast, Lazy):
        return get_fields(ast.type)
    if isinstance(ast, Refinement):
        return get_fields(ast.from_)
    if isinstance(ast, Transform):
        return get_fields(ast.to)
    return []


def pick(ast: AST, keys: Sequence[PropertyKey]) -> Struct:
    return Struct([f for f in get_fields(ast) if f.key in keys])


def omit(ast: AST, keys: Sequence[PropertyKey]) -> Struct:
    return Struct([f for f in get_fields(ast) if f.key not in keys])


def partial(ast: AST) -> AST:
    """Make every field and element optional; rest types also accept undefined."""

    if isinstance(ast, TypeAlias):
        return partial(ast.type)
    if isinstance(ast, Tuple):
        rest = None
        if ast.rest is not None:
            rest = (union([*ast.rest, UNDEFINED_KEYWORD]),)
        return Tuple(
            [Element(e.type, True) for e in ast.elements],
            rest,
            ast.is_readonly,
            ast.allow_unexpected,
        )
    if isinstance(ast, Struct):
        return Struct(
            [Field(f.key, f.value, True, f.is_readonly, f.annotations) for f in ast.fields],
            ast.index_signatures,
            ast.allow_unexpected,
        )
    if isinstance(ast, Union):
        return union([partial(member) for member in ast.members])
    if isinstance(ast, Lazy):
        return Lazy(lambda: partial(ast.type))
    if isinstance(ast, Refinement):
        return partial(ast.from_)
    return ast
