from __future__ import annotations

import json
import math
from typing import Any

from .nodes import (
    AST,
    DESCRIPTION_ANNOTATION,
    IDENTIFIER_ANNOTATION,
    UNDEFINED,
    Enums,
    Keyword,
    Lazy,
    LiteralType,
    Refinement,
    Struct,
    Symbol,
    Transform,
    Tuple,
    TypeAlias,
    Union,
    UniqueSymbol,
)


def render_value(value: Any) -> str:
    """Render a scalar the way it would read in a JSON document."""

    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return str(value)
        return f"{value:.12g}"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Symbol):
        return repr(value)
    return repr(value)


def describe(ast: AST) -> str:
    """Short human-readable expectation for ``ast``."""

    identifier = ast.annotations.get(IDENTIFIER_ANNOTATION)
    if identifier:
        return str(identifier)

    if isinstance(ast, LiteralType):
        return render_value(ast.literal)
    if isinstance(ast, UniqueSymbol):
        return repr(ast.symbol)
    if isinstance(ast, Keyword):
        return ast.kind
    if isinstance(ast, Struct):
        return "a generic object"
    if isinstance(ast, Tuple):
        return "an array" if not ast.elements and ast.rest else "a tuple"
    if isinstance(ast, Union):
        parts: list[str] = []
        for member in ast.members:
            text = describe(member)
            if text not in parts:
                parts.append(text)
        return " or ".join(parts)
    if isinstance(ast, Enums):
        return " or ".join(render_value(value) for _, value in ast.enums)
    if isinstance(ast, Refinement):
        description = ast.annotations.get(DESCRIPTION_ANNOTATION)
        if description:
            return str(description)
        return f"a refinement of {describe(ast.from_)}"
    if isinstance(ast, TypeAlias):
        return describe(ast.type)
    if isinstance(ast, Lazy):
        return "<lazy>"
    if isinstance(ast, Transform):
        return f"{describe(ast.from_)} -> {describe(ast.to)}"
    return type(ast).__name__
