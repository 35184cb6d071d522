"""Error model invariants, result combinators and error formatting."""

from __future__ import annotations

import pytest

from shape_codec.ast.nodes import NUMBER, STRING, Struct, literal
from shape_codec.ast.result import (
    FORBIDDEN,
    MISSING,
    Failure,
    Index,
    Key,
    ParseError,
    Success,
    Type,
    Unexpected,
    UnionMember,
    failure,
    failures,
    format_errors,
)


class TestErrorModel:
    def test_composites_reject_empty_errors(self):
        with pytest.raises(ValueError):
            Key("a", ())
        with pytest.raises(ValueError):
            Index(0, [])
        with pytest.raises(ValueError):
            UnionMember(())

    def test_parse_error_is_non_empty(self):
        with pytest.raises(ValueError):
            ParseError(())

    def test_errors_are_stored_as_tuples(self):
        assert Key("a", [MISSING]).errors == (MISSING,)
        assert ParseError([MISSING]).errors == (MISSING,)

    def test_failure_helpers(self):
        assert failure(MISSING).error.errors == (MISSING,)
        assert failures([MISSING, FORBIDDEN]).error.errors == (MISSING, FORBIDDEN)


class TestResult:
    def test_success_combinators(self):
        result = Success(2)
        assert result.map(lambda v: v + 1) == Success(3)
        assert result.flat_map(lambda v: failure(MISSING)).is_failure
        assert result.map_error(lambda e: e) is result
        assert result.get_or_raise() == 2

    def test_failure_combinators(self):
        result = failure(MISSING)
        assert result.map(lambda v: v + 1) is result
        assert result.flat_map(lambda v: Success(v)) is result
        mapped = result.map_error(lambda e: ParseError((Key("a", e.errors),)))
        assert isinstance(mapped, Failure)
        assert mapped.error.errors == (Key("a", (MISSING,)),)
        with pytest.raises(ParseError):
            result.get_or_raise()


class TestFormatting:
    def test_nested_paths(self):
        errors = (Key("a", (Index(1, (Type(STRING, 1),)),)),)
        assert format_errors(errors) == ["/a/1 Expected string, actual 1"]

    def test_presence_errors(self):
        errors = (Key("a", (MISSING,)), Key("z", (Unexpected(1),)), FORBIDDEN)
        assert format_errors(errors) == ["/a is missing", "/z is unexpected", "is forbidden"]

    def test_union_members_are_flattened(self):
        errors = (
            UnionMember((Type(STRING, None),)),
            UnionMember((Type(NUMBER, None),)),
        )
        assert str(ParseError(errors)) == (
            "Expected string, actual null, Expected number, actual null"
        )

    def test_explicit_message_wins(self):
        errors = (Key("a", (Type(literal(1), 2, "not one"),)),)
        assert format_errors(errors) == ["/a not one"]

    def test_struct_expectation(self):
        assert str(ParseError((Type(Struct(), "x"),))) == (
            'Expected a generic object, actual "x"'
        )
