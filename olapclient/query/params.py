"""
Value records held by a :class:`~olapclient.query.Query`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

from ..enums import Calculation, Comparison, Direction, Joint, TimePrecision, TimeValue
from ..metadata import Level, Measure, NamedSet, Property

__all__ = [
    "Drillable",
    "QueryCut",
    "QueryFilter",
    "Constraint",
    "Pagination",
    "Sorting",
    "TimeFrame",
]

Drillable: TypeAlias = Level | NamedSet

Constraint: TypeAlias = tuple[Comparison, int | float]


@dataclass(slots=True)
class QueryCut:
    """Restriction of a drillable to a set of member keys."""

    drillable: Drillable
    members: list[str] = field(default_factory=list)
    exclusive: bool = False
    for_match: bool = False

    @property
    def key(self) -> str:
        return self.drillable.full_name

    def copy(self) -> QueryCut:
        return QueryCut(
            drillable=self.drillable,
            members=list(self.members),
            exclusive=self.exclusive,
            for_match=self.for_match,
        )


@dataclass(frozen=True, slots=True)
class QueryFilter:
    """Numeric constraint over a measure or a calculation result."""

    measure: Measure | Calculation
    constraint: Constraint
    joint: Joint | None = None
    constraint2: Constraint | None = None

    @property
    def measure_name(self) -> str:
        if isinstance(self.measure, Measure):
            return self.measure.name
        return self.measure.value

    @property
    def constraints(self) -> list[Constraint]:
        if self.joint is None or self.constraint2 is None:
            return [self.constraint]
        return [self.constraint, self.constraint2]


@dataclass(frozen=True, slots=True)
class Pagination:
    """A limit of 0 means pagination is off."""

    limit: int = 0
    offset: int = 0

    def __bool__(self) -> bool:
        return self.limit > 0


@dataclass(frozen=True, slots=True)
class Sorting:
    """Sort target and direction. An empty target means no sorting."""

    target: Measure | Property | Calculation | None = None
    direction: Direction | None = None

    @property
    def target_name(self) -> str | None:
        if self.target is None:
            return None
        if isinstance(self.target, Calculation):
            return self.target.value
        return self.target.name

    def __bool__(self) -> bool:
        return self.target is not None


@dataclass(frozen=True, slots=True)
class TimeFrame:
    """Relative time restriction. Precision and value are both set or both
    empty."""

    precision: TimePrecision | None = None
    value: TimeValue | int | None = None

    @property
    def wire_value(self) -> Any:
        if isinstance(self.value, TimeValue):
            return self.value.value
        return self.value

    def __bool__(self) -> bool:
        return self.precision is not None and self.value is not None
