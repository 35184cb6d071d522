from .describe import describe, render_value
from .nodes import (
    ANY,
    AST,
    BIGINT,
    BOOLEAN,
    DESCRIPTION_ANNOTATION,
    IDENTIFIER_ANNOTATION,
    MESSAGE_ANNOTATION,
    NEVER,
    NUMBER,
    OBJECT,
    STRING,
    SYMBOL,
    TITLE_ANNOTATION,
    UNDEFINED,
    UNDEFINED_KEYWORD,
    UNKNOWN,
    VOID,
    ASTConstructionError,
    Element,
    Enums,
    Field,
    IndexSignature,
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
    annotate,
    append_element,
    append_rest_element,
    get_cardinality,
    get_weight,
    keyword,
    literal,
    union,
)
from .parser import (
    Parser,
    decode,
    decode_async,
    decode_or_raise,
    encode,
    encode_async,
    encode_or_raise,
    is_valid,
)
from .result import (
    FORBIDDEN,
    MISSING,
    Failure,
    Forbidden,
    Index,
    Key,
    Missing,
    ParseError,
    ParseErrors,
    ParseResult,
    Success,
    Type,
    Unexpected,
    UnionMember,
    failure,
    failures,
    format_errors,
    success,
)
from .transforms import get_fields, keyof, omit, partial, pick, property_keys, record

__all__ = [
    "ANY",
    "AST",
    "BIGINT",
    "BOOLEAN",
    "DESCRIPTION_ANNOTATION",
    "FORBIDDEN",
    "IDENTIFIER_ANNOTATION",
    "MESSAGE_ANNOTATION",
    "MISSING",
    "NEVER",
    "NUMBER",
    "OBJECT",
    "STRING",
    "SYMBOL",
    "TITLE_ANNOTATION",
    "UNDEFINED",
    "UNDEFINED_KEYWORD",
    "UNKNOWN",
    "VOID",
    "ASTConstructionError",
    "Element",
    "Enums",
    "Failure",
    "Field",
    "Forbidden",
    "Index",
    "IndexSignature",
    "Key",
    "Keyword",
    "Lazy",
    "LiteralType",
    "Missing",
    "ParseError",
    "ParseErrors",
    "ParseResult",
    "Parser",
    "Refinement",
    "Struct",
    "Success",
    "Symbol",
    "Transform",
    "Tuple",
    "Type",
    "TypeAlias",
    "Unexpected",
    "Union",
    "UnionMember",
    "UniqueSymbol",
    "annotate",
    "append_element",
    "append_rest_element",
    "decode",
    "decode_async",
    "decode_or_raise",
    "describe",
    "encode",
    "encode_async",
    "encode_or_raise",
    "failure",
    "failures",
    "format_errors",
    "get_cardinality",
    "get_fields",
    "get_weight",
    "is_valid",
    "keyof",
    "keyword",
    "literal",
    "omit",
    "partial",
    "pick",
    "property_keys",
    "record",
    "render_value",
    "success",
    "union",
]
