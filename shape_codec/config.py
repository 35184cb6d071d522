"""Run-time options for decoding and encoding."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class ParseOptions(BaseModel):
    """Switches threaded through one decode or encode run.

    Attributes:
        on_excess_property: ``"ignore"`` silently drops keys and positions the
            schema does not declare; ``"error"`` reports each one as
            ``Unexpected``.
        errors: ``"first"`` stops inside a struct or tuple at the first
            failing child; ``"all"`` keeps collecting. Union members are
            always all attempted before a union fails.
        union_conflicts: When several union members succeed and report
            different values for the same key, keep the value from the
            earliest (``"first"``) or latest (``"last"``) member in weight
            order.

    Invariants:
        - Instances are immutable and reject unknown option names.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    on_excess_property: Literal["ignore", "error"] = "ignore"
    errors: Literal["first", "all"] = "first"
    union_conflicts: Literal["first", "last"] = "first"

    @classmethod
    def coerce(cls, options: ParseOptions | Mapping[str, Any] | None) -> ParseOptions:
        if options is None:
            return DEFAULT_OPTIONS
        if isinstance(options, ParseOptions):
            return options
        return cls.model_validate(dict(options))

    @property
    def is_exact(self) -> bool:
        return self.on_excess_property == "error"

    @property
    def all_errors(self) -> bool:
        return self.errors == "all"


DEFAULT_OPTIONS = ParseOptions()
