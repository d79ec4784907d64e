"""
The ``records`` dialect, spoken by the Python tesseract server.

Names travel bare, lists are repeated parameters and the cube name is part
of the request path set by the transport::

    drilldowns=Year&drilldowns=Country&measures=Value&include=Country:ca,mx
    &filters=Value.gt.100.and.lt.1000&limit=10,0&sort=Value.desc
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..common import ensure_list, parse_bool
from ..errors import ArgumentError
from .base import Dialect, DialectCapabilities, WireParams
from .registry import DialectRegistry

if TYPE_CHECKING:
    from ..query import Query, QueryCut, QueryFilter

__all__ = ["RecordsDialect"]

_NUMBER = r"-?\d+(?:\.\d+)?(?:e[+-]?\d+)?"
_OPERATOR = r"eq|neq|gt|gte|lt|lte"

RE_FILTER = re.compile(
    rf"^(?P<measure>.+?)\.(?P<op>{_OPERATOR})\.(?P<value>{_NUMBER})"
    rf"(?:\.(?P<joint>and|or)\.(?P<op2>{_OPERATOR})\.(?P<value2>{_NUMBER}))?$",
    re.IGNORECASE,
)


def stringify_cut(cut: QueryCut) -> str:
    return f"{cut.drillable.name}:{','.join(cut.members)}"


def stringify_filter(item: QueryFilter) -> str:
    token = f"{item.measure_name}.{item.constraint[0].value}.{item.constraint[1]}"
    if item.joint is not None and item.constraint2 is not None:
        token += f".{item.joint.value}.{item.constraint2[0].value}.{item.constraint2[1]}"
    return token


@DialectRegistry.register
class RecordsDialect(Dialect):
    """Python tesseract ``data`` endpoint parameters."""

    @property
    def name(self) -> str:
        return "records"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            supports_captions=False,
            supports_calculations=False,
            supports_time=True,
        )

    def serialize(self, query: Query) -> WireParams:
        params: WireParams = {}

        if query.locale:
            params["locale"] = query.locale
        if query.drilldowns:
            params["drilldowns"] = [item.name for item in query.drilldowns]
        if query.measures:
            params["measures"] = [item.name for item in query.measures]
        if query.properties:
            params["properties"] = [item.name for item in query.properties]

        cuts = [cut for cut in query.cuts if cut.members]
        include = [stringify_cut(cut) for cut in cuts if not cut.exclusive]
        exclude = [stringify_cut(cut) for cut in cuts if cut.exclusive]
        if include:
            params["include"] = include
        if exclude:
            params["exclude"] = exclude

        if query.filters:
            params["filters"] = [stringify_filter(item) for item in query.filters]

        pagination = query.pagination
        if pagination:
            params["limit"] = f"{pagination.limit},{pagination.offset}"

        sorting = query.sorting
        if sorting:
            params["sort"] = f"{sorting.target_name}.{sorting.direction.value}"

        timeframe = query.time
        if timeframe:
            params["time"] = f"{timeframe.wire_value}.{timeframe.precision.value}"

        if query.options.get("parents"):
            params["parents"] = True

        return params

    def parse(self, query: Query, params: Mapping[str, Any]) -> Query:
        cube_name = params.get("cube")
        if cube_name and cube_name != query.cube.name:
            raise ArgumentError(
                f"Cube '{cube_name}' in parameters doesn't match the query cube "
                f"'{query.cube.name}'"
            )

        if params.get("locale"):
            query.set_locale(str(params["locale"]))

        def add_cut(token: str, exclusive: bool) -> None:
            name, separator, members = token.partition(":")
            if not separator:
                raise ArgumentError(f"Invalid cut: {token!r}")
            query.add_cut(name, members.split(","), exclusive=exclusive)

        def add_filter(token: str) -> None:
            match = RE_FILTER.match(token.strip())
            if match is None:
                raise ArgumentError(f"Couldn't parse filter: {token}")
            second = None
            if match.group("joint"):
                second = (match.group("op2"), match.group("value2"))
            query.add_filter(
                match.group("measure"),
                (match.group("op"), match.group("value")),
                match.group("joint"),
                second,
            )

        def set_pagination(token: str) -> None:
            limit, _, offset = token.partition(",")
            query.set_pagination(limit, offset or 0)

        def set_sorting(token: str) -> None:
            target, _, direction = token.rpartition(".")
            if not target:
                target, direction = direction, None
            query.set_sorting(target, direction)

        def set_time(token: str) -> None:
            value, _, precision = token.rpartition(".")
            query.set_time(precision, value)

        self._apply("drilldowns", params.get("drilldowns"), query.add_drilldown)
        self._apply("measures", params.get("measures"), query.add_measure)
        self._apply("properties", params.get("properties"), query.add_property)
        self._apply(
            "include", params.get("include"), lambda t: add_cut(t, False), split=False
        )
        self._apply(
            "exclude", params.get("exclude"), lambda t: add_cut(t, True), split=False
        )
        self._apply("filters", params.get("filters"), add_filter, split=False)
        self._apply("limit", params.get("limit"), set_pagination, split=False)
        self._apply("sort", params.get("sort"), set_sorting, split=False)
        self._apply("time", params.get("time"), set_time, split=False)

        if params.get("parents") is not None:
            parents = ensure_list(params["parents"])[-1]
            query.set_option("parents", parse_bool(parents))

        return query
