"""
The canonical query.

A :class:`Query` accumulates the features of an analytical request against
one cube. Every mutator resolves its arguments through the cube before
touching the query state, so a call either applies completely or raises and
leaves the query unchanged. Mutators return the query to allow chaining::

    query = (
        cube.query.add_drilldown("Year")
        .add_measure("Value")
        .add_cut("Country", ["ca", "mx"], exclusive=True)
        .set_pagination(10)
    )
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ..common import ensure_list, parse_bool, parse_numeric
from ..enums import Calculation, Comparison, Direction, Format, Joint, TimePrecision, TimeValue
from ..errors import ArgumentError
from ..metadata import Measure, NamedSet, Property, is_property_descriptor
from ..settings import get_settings
from .calculations import QueryCalculation, build_calculation
from .params import Constraint, Drillable, Pagination, QueryCut, QueryFilter, Sorting, TimeFrame

if TYPE_CHECKING:
    from ..metadata import Cube

__all__ = ["Query"]


class Query:
    """Builder of an analytical request against `cube`.

    Queries are usually created with :attr:`Cube.query`. The cube is never
    modified, so any number of queries can share it.
    """

    def __init__(self, cube: Cube):
        self.cube = cube

        settings = get_settings()
        self._format: Format = Format.parse(settings.default_format)
        self._locale: str = settings.default_locale

        self._drilldowns: dict[str, Drillable] = {}
        self._cuts: dict[str, QueryCut] = {}
        self._measures: dict[str, Measure] = {}
        self._filters: list[QueryFilter] = []
        self._calculations: dict[str, QueryCalculation] = {}
        self._captions: dict[str, Property] = {}
        self._properties: dict[str, Property] = {}
        self._pagination = Pagination()
        self._sorting = Sorting()
        self._time = TimeFrame()
        self._options: dict[str, bool] = {}

    def __repr__(self) -> str:
        return f"<Query(cube={self.cube.name!r})>"

    # Reference resolution
    # --------------------

    def _get_drillable(self, ref: Any) -> Drillable:
        cube = self.cube
        if isinstance(ref, NamedSet):
            return cube.get_named_set(ref)
        if isinstance(ref, Mapping) and "namedset" in ref:
            return cube.get_named_set(ref["namedset"])
        if isinstance(ref, str) and cube.has_named_set(ref):
            return cube.get_named_set(ref)
        return cube.get_level(ref)

    def _get_property(self, ref: Any, property_name: str | None = None) -> Property:
        if property_name:
            return self.cube.get_level(ref).get_property(property_name)
        return self.cube.get_property(ref)

    def _get_measure_or_calculation(self, ref: Any) -> Measure | Calculation:
        if isinstance(ref, Calculation):
            return ref
        if isinstance(ref, str):
            calculation = Calculation.get(ref)
            if calculation is not None:
                return calculation
        return self.cube.get_measure(ref)

    # Drilldowns, cuts and measures
    # -----------------------------

    def add_drilldown(self, ref: Any) -> Query:
        """Add a level or named set to group the results by. Adding the same
        drillable twice has no effect."""
        drillable = self._get_drillable(ref)
        self._drilldowns.setdefault(drillable.full_name, drillable)
        return self

    def add_cut(
        self,
        ref: Any,
        members: Any = None,
        exclusive: bool | None = None,
        for_match: bool | None = None,
    ) -> Query:
        """
        Restrict `ref` (a level or named set) to `members`.

        Cuts on the same drillable are merged: keys are appended if they are
        not present yet, and the flags are only changed when given.

        Raises:
            MissingObjectError: If the drillable can not be resolved
        """
        drillable = self._get_drillable(ref)
        keys = [str(member) for member in ensure_list(members) if member not in (None, "")]

        cut = self._cuts.get(drillable.full_name)
        if cut is None:
            cut = QueryCut(drillable=drillable)
        for key in keys:
            if key not in cut.members:
                cut.members.append(key)
        if exclusive is not None:
            cut.exclusive = bool(exclusive)
        if for_match is not None:
            cut.for_match = bool(for_match)

        self._cuts[drillable.full_name] = cut
        return self

    def add_measure(self, ref: Any) -> Query:
        measure = self.cube.get_measure(ref)
        self._measures.setdefault(measure.name, measure)
        return self

    # Captions and properties
    # -----------------------

    def add_caption(self, ref: Any, property_name: str | None = None) -> Query:
        """Use a property as the label of its level members. A level has one
        caption: a new caption replaces the previous one of the same level.

        `ref` is a property reference, or a level reference when
        `property_name` is given.
        """
        prop = self._get_property(ref, property_name)
        self._captions[prop.level.full_name] = prop
        return self

    def add_property(self, ref: Any, property_name: str | None = None) -> Query:
        """Include the values of a level property in the results."""
        prop = self._get_property(ref, property_name)
        self._properties[prop.full_name] = prop
        return self

    # Filters and calculations
    # ------------------------

    def add_filter(
        self,
        measure: Any,
        constraint: Sequence[Any],
        joint: Any = None,
        constraint2: Sequence[Any] | None = None,
    ) -> Query:
        """
        Keep only the aggregated rows whose `measure` satisfies the
        constraints. A constraint is a ``(comparison, number)`` pair. A second
        constraint needs a joint (``and`` or ``or``) and vice versa.

        Raises:
            ArgumentError: If a constraint or the joint is invalid
            NoSuchMeasureError: If the measure can not be resolved
        """
        target = self._get_measure_or_calculation(measure)
        first = _parse_constraint(constraint)
        if joint in (None, "") and constraint2 is None:
            parsed_joint, second = None, None
        elif joint in (None, ""):
            raise ArgumentError(
                f"Undefined joint between constraints of filter on '{measure}'"
            )
        elif constraint2 is None:
            raise ArgumentError(
                f"Undefined second constraint in filter on '{measure}' "
                f"after joint '{joint}'"
            )
        else:
            parsed_joint, second = Joint.parse(joint), _parse_constraint(constraint2)

        item = QueryFilter(
            measure=target, constraint=first, joint=parsed_joint, constraint2=second
        )
        if item not in self._filters:
            self._filters.append(item)
        return self

    def add_calculation(
        self, kind: Any, params: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> Query:
        """
        Add a calculation of `kind` (``growth``, ``rca`` or ``topk``).
        Parameters can be passed as a mapping, as keyword arguments, or both.

        Raises:
            ArgumentError: If the kind is unknown or the parameters invalid
            MissingObjectError: If an operand can not be resolved
        """
        merged = {**(params or {}), **kwargs}
        merged.pop("kind", None)
        calculation = build_calculation(self.cube, kind, merged)
        self._calculations.setdefault(calculation.key, calculation)
        return self

    # Settings
    # --------

    def set_format(self, value: Any) -> Query:
        self._format = Format.parse(value)
        return self

    def set_locale(self, value: str | None) -> Query:
        self._locale = str(value or "")
        return self

    def set_option(self, name: str, value: Any) -> Query:
        """Set a boolean backend option. ``None`` removes the option."""
        if not isinstance(name, str) or not name:
            raise ArgumentError(f"Invalid option name: {name!r}")
        if value is None:
            self._options.pop(name, None)
        else:
            self._options[name] = bool(parse_bool(value))
        return self

    def set_pagination(self, limit: Any, offset: Any = 0) -> Query:
        """Set the page size and start. A limit of 0 or less disables
        pagination, and the offset is never negative."""
        limit = 0 if limit is None else int(parse_numeric(limit))
        if limit <= 0:
            self._pagination = Pagination()
        else:
            offset = 0 if offset in (None, "") else int(parse_numeric(offset))
            self._pagination = Pagination(limit=limit, offset=max(offset, 0))
        return self

    def set_sorting(self, target: Any = None, direction: Any = None) -> Query:
        """
        Sort by a calculation, a measure or a property. Strings are resolved
        in that order. An empty `target` removes the sorting.

        `direction` is ``asc`` or ``desc``; ``False`` means ascending and
        anything else descending.

        Raises:
            NoSuchPropertyError: If a string matches no calculation, measure
                or property
        """
        if not target:
            self._sorting = Sorting()
            return self

        cube = self.cube
        resolved: Measure | Property | Calculation
        if isinstance(target, Calculation):
            resolved = target
        elif isinstance(target, Measure):
            resolved = cube.get_measure(target)
        elif isinstance(target, str):
            resolved = (
                Calculation.get(target)
                or (cube.get_measure(target) if cube.has_measure(target) else None)
                or cube.get_property(target)
            )
        elif isinstance(target, Property) or is_property_descriptor(target):
            resolved = cube.get_property(target)
        else:
            raise ArgumentError(f"Invalid sorting target: {target!r}")

        self._sorting = Sorting(target=resolved, direction=Direction.parse(direction))
        return self

    def set_time(self, precision: Any = None, value: Any = None) -> Query:
        """Set a relative time frame. Both arguments are needed, otherwise
        the time frame is removed."""
        if precision in (None, "") or value in (None, ""):
            self._time = TimeFrame()
        else:
            self._time = TimeFrame(
                precision=TimePrecision.parse(precision), value=TimeValue.parse(value)
            )
        return self

    # Accessors
    # ---------

    @property
    def drilldowns(self) -> list[Drillable]:
        return list(self._drilldowns.values())

    @property
    def cuts(self) -> list[QueryCut]:
        return [cut.copy() for cut in self._cuts.values()]

    @property
    def measures(self) -> list[Measure]:
        return list(self._measures.values())

    @property
    def filters(self) -> list[QueryFilter]:
        return list(self._filters)

    @property
    def calculations(self) -> list[QueryCalculation]:
        return list(self._calculations.values())

    @property
    def captions(self) -> list[Property]:
        return list(self._captions.values())

    @property
    def properties(self) -> list[Property]:
        return list(self._properties.values())

    @property
    def sorting(self) -> Sorting:
        return self._sorting

    @property
    def pagination(self) -> Pagination:
        return self._pagination

    @property
    def time(self) -> TimeFrame:
        return self._time

    @property
    def options(self) -> dict[str, bool]:
        return dict(self._options)

    @property
    def format(self) -> Format:
        return self._format

    @property
    def locale(self) -> str:
        return self._locale

    def get_cut(self, ref: Any) -> QueryCut | None:
        """The cut on drillable `ref`, if any."""
        cut = self._cuts.get(self._get_drillable(ref).full_name)
        return cut.copy() if cut is not None else None

    # Serialization
    # -------------

    def to_json(self) -> dict[str, Any]:
        """Plain, JSON compatible description of the query."""
        from .descriptors import extract_query_to_json

        return extract_query_to_json(self)

    def from_json(self, descriptor: Mapping[str, Any]) -> Query:
        """Apply a description produced by :meth:`to_json` to this query."""
        from .descriptors import hydrate_query_from_json

        return hydrate_query_from_json(self, descriptor)

    def to_source(self) -> str:
        from .formatters import query_to_source

        return query_to_source(self)

    def to_summary(self) -> dict[str, Any]:
        from .formatters import query_to_summary

        return query_to_summary(self)

    def to_query_string(self) -> str:
        from .formatters import query_to_query_string

        return query_to_query_string(self)


def _parse_constraint(constraint: Any) -> Constraint:
    if isinstance(constraint, str) or not isinstance(constraint, Sequence) \
            or len(constraint) != 2:
        raise ArgumentError(
            f"Invalid filter constraint: {constraint!r}, expected (comparison, number)"
        )
    comparison, value = constraint
    if isinstance(value, float) and math.isnan(value):
        raise ArgumentError("Invalid value: NaN is not a valid filter value.")
    return (Comparison.parse(comparison), parse_numeric(value))
