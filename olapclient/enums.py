"""
Enumerations shared by the schema graph, the query builder and the dialects.

All enumerations are ``str`` based, so members compare equal to their wire
values and can be passed wherever a plain string is accepted.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from .errors import ArgumentError

__all__ = [
    "AggregatorType",
    "Calculation",
    "Comparison",
    "DimensionType",
    "Direction",
    "Format",
    "Joint",
    "TimePrecision",
    "TimeValue",
    "QUERY_OPTIONS",
]

# Boolean switches understood by at least one backend
QUERY_OPTIONS = (
    "debug",
    "distinct",
    "exclude_default_members",
    "nonempty",
    "parents",
    "sparse",
)


def _member_for(enum_cls, value: Any):
    """Case-insensitive lookup by value or member name. Returns None when
    nothing matches."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    token = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == token or member.name.lower() == token:
            return member
    return None


class AggregatorType(str, Enum):
    """Aggregation functions a measure can be computed with."""

    AVG = "avg"
    COUNT = "count"
    MAX = "max"
    MIN = "min"
    SUM = "sum"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> AggregatorType:
        """Normalize a backend aggregator name, unknown names map to UNKNOWN."""
        if isinstance(value, dict):
            value = value.get("name")
        return _member_for(cls, value) or cls.UNKNOWN


class Calculation(str, Enum):
    """Derived query features."""

    GROWTH = "growth"
    RATE = "rate"
    RCA = "rca"
    TOPK = "topk"

    @classmethod
    def get(cls, value: Any) -> Calculation | None:
        return _member_for(cls, value)


class Comparison(str, Enum):
    """Comparison operators usable in query filters."""

    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    NEQ = "neq"

    @classmethod
    def parse(cls, value: Any) -> Comparison:
        """
        Resolve a comparison from its name or a symbolic operator.

        Accepts the member values in any case, and the operators ``=``,
        ``!=``, ``<>``, ``<``, ``<=``, ``>`` and ``>=``.

        Raises:
            ArgumentError: If the value is not a known comparison
        """
        if isinstance(value, str) and value.strip() in COMPARISON_SYMBOLS:
            return COMPARISON_SYMBOLS[value.strip()]
        member = _member_for(cls, value)
        if member is None:
            raise ArgumentError(f"Invalid comparison operator: {value!r}")
        return member


COMPARISON_SYMBOLS = {
    "=": Comparison.EQ,
    "==": Comparison.EQ,
    "!=": Comparison.NEQ,
    "<>": Comparison.NEQ,
    "<": Comparison.LT,
    "<=": Comparison.LTE,
    ">": Comparison.GT,
    ">=": Comparison.GTE,
}


class DimensionType(str, Enum):
    """Semantic kinds of dimensions."""

    GEO = "geo"
    STANDARD = "std"
    TIME = "time"

    @classmethod
    def parse(cls, value: Any) -> DimensionType:
        if isinstance(value, str) and value.lower() in ("standard", "std"):
            return cls.STANDARD
        if isinstance(value, str) and value.lower() in ("geographic", "geography"):
            return cls.GEO
        return _member_for(cls, value) or cls.STANDARD


class Direction(str, Enum):
    """Sorting directions."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """``False`` means ascending, explicit tokens are honoured and
        anything else defaults to descending."""
        if value is False:
            return cls.ASC
        return _member_for(cls, value) or cls.DESC


class Format(str, Enum):
    """Output formats a backend can answer with."""

    CSV = "csv"
    JSON = "json"
    JSONARRAYS = "jsonarrays"
    JSONRECORDS = "jsonrecords"
    XLS = "xls"

    @classmethod
    def parse(cls, value: Any) -> Format:
        member = _member_for(cls, value)
        if member is None:
            raise ArgumentError(f"Invalid format: {value!r}")
        return member


class Joint(str, Enum):
    """Logical operator joining two filter constraints."""

    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, value: Any) -> Joint:
        member = _member_for(cls, value)
        if member is None:
            raise ArgumentError(f"Invalid filter joint: {value!r}")
        return member


class TimePrecision(str, Enum):
    """Granularity of a time frame."""

    YEAR = "year"
    QUARTER = "quarter"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    TIME = "time"

    @classmethod
    def parse(cls, value: Any) -> TimePrecision:
        member = _member_for(cls, value)
        if member is None:
            raise ArgumentError(f"Invalid time precision: {value!r}")
        return member


class TimeValue(str, Enum):
    """Conceptual time frame anchors."""

    LATEST = "latest"
    OLDEST = "oldest"

    @classmethod
    def parse(cls, value: Any) -> TimeValue | int:
        """Return the anchor, or an integer amount of periods."""
        member = _member_for(cls, value)
        if member is not None:
            return member
        if isinstance(value, bool):
            raise ArgumentError(f"Invalid time value: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            return int(value)
        raise ArgumentError(f"Invalid time value: {value!r}")
