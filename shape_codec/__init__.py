"""Public package API for shape-codec."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("shape-codec")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

from .ast import (
    AST,
    ParseError,
    ParseResult,
    decode,
    decode_async,
    decode_or_raise,
    encode,
    encode_async,
    encode_or_raise,
    is_valid,
)
from .config import ParseOptions

__all__ = [
    "__version__",
    "AST",
    "ParseError",
    "ParseOptions",
    "ParseResult",
    "decode",
    "decode_async",
    "decode_or_raise",
    "encode",
    "encode_async",
    "encode_or_raise",
    "is_valid",
]
