"""
The query descriptor: the plain, JSON compatible form of a query.

:func:`extract_query_to_json` and :func:`hydrate_query_from_json` are exact
inverses. Object references are replaced by names and by level and property
descriptors without the server and cube fields, which the descriptor carries
only once at its top level.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ArgumentError
from ..metadata import NamedSet, Property
from .params import Drillable

if TYPE_CHECKING:
    from .query import Query

__all__ = [
    "QueryDescriptor",
    "CutDescriptor",
    "FilterDescriptor",
    "extract_query_to_json",
    "hydrate_query_from_json",
    "describe_drillable",
]


class CutDescriptor(BaseModel):
    """A cut: a level descriptor, or a named set, plus the member keys."""

    model_config = ConfigDict(extra="ignore")

    level: str | None = None
    hierarchy: str | None = None
    dimension: str | None = None
    namedset: str | None = None
    members: list[str] = Field(default_factory=list)
    exclusive: bool | None = None
    for_match: bool | None = None

    @field_validator("members", mode="before")
    @classmethod
    def stringify_members(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if not isinstance(v, (list, tuple)):
            v = [v]
        return [str(member) for member in v]

    @property
    def reference(self) -> dict[str, str]:
        if self.namedset:
            return {"namedset": self.namedset}
        return self.model_dump(
            include={"level", "hierarchy", "dimension"}, exclude_none=True
        )


class FilterDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    measure: str
    constraint: tuple[Any, Any]
    joint: str | None = None
    constraint2: tuple[Any, Any] | None = None


class QueryDescriptor(BaseModel):
    """Validated shape of a query descriptor. Every feature is optional."""

    model_config = ConfigDict(extra="ignore")

    server: str | None = None
    cube: str | None = None
    format: str | None = None
    locale: str | None = None
    calculations: list[dict[str, Any]] = Field(default_factory=list)
    captions: list[dict[str, Any] | str] = Field(default_factory=list)
    cuts: list[CutDescriptor] = Field(default_factory=list)
    drilldowns: list[dict[str, Any] | str] = Field(default_factory=list)
    filters: list[FilterDescriptor] = Field(default_factory=list)
    measures: list[str] = Field(default_factory=list)
    properties: list[dict[str, Any] | str] = Field(default_factory=list)
    page_limit: int | None = None
    page_offset: int | None = None
    sort_property: dict[str, Any] | str | None = None
    sort_direction: str | None = None
    time: tuple[str, str | int] | None = None
    options: dict[str, bool | None] = Field(default_factory=dict)

    @field_validator(
        "calculations", "captions", "cuts", "drilldowns", "filters", "measures",
        "properties", mode="before",
    )
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("options", mode="before")
    @classmethod
    def none_as_empty_options(cls, v: Any) -> Any:
        return {} if v is None else v


def describe_drillable(drillable: Drillable) -> dict[str, str]:
    if isinstance(drillable, NamedSet):
        return {"namedset": drillable.name}
    return drillable.descriptor.to_dict(skim=True)


def _describe_property(prop: Property) -> dict[str, str]:
    return prop.descriptor.to_dict(skim=True)


def extract_query_to_json(query: Query) -> dict[str, Any]:
    """
    Extract the state of `query` into a plain dictionary, which can be
    serialized to JSON and applied to another query of the same cube with
    :func:`hydrate_query_from_json`.
    """
    cube = query.cube
    sorting = query.sorting
    pagination = query.pagination
    timeframe = query.time

    sort_property: Any = None
    if isinstance(sorting.target, Property):
        sort_property = _describe_property(sorting.target)
    elif sorting.target is not None:
        sort_property = sorting.target_name

    return {
        "server": cube.server,
        "cube": cube.name,
        "format": query.format.value,
        "locale": query.locale,
        "calculations": [item.describe() for item in query.calculations],
        "captions": [_describe_property(item) for item in query.captions],
        "cuts": [
            {
                **describe_drillable(item.drillable),
                "members": list(item.members),
                "exclusive": item.exclusive,
                "for_match": item.for_match,
            }
            for item in query.cuts
        ],
        "drilldowns": [describe_drillable(item) for item in query.drilldowns],
        "filters": [
            {
                "measure": item.measure_name,
                "constraint": [item.constraint[0].value, item.constraint[1]],
                "joint": item.joint.value if item.joint else None,
                "constraint2": (
                    [item.constraint2[0].value, item.constraint2[1]]
                    if item.constraint2
                    else None
                ),
            }
            for item in query.filters
        ],
        "page_limit": pagination.limit,
        "page_offset": pagination.offset,
        "measures": [item.name for item in query.measures],
        "properties": [_describe_property(item) for item in query.properties],
        "sort_property": sort_property,
        "sort_direction": sorting.direction.value if sorting.direction else None,
        "time": (
            [timeframe.precision.value, timeframe.wire_value] if timeframe else None
        ),
        "options": query.options,
    }


def hydrate_query_from_json(query: Query, json: Mapping[str, Any]) -> Query:
    """
    Apply the features described in `json` to `query`, in place. Returns the
    same query.

    Raises:
        ArgumentError: If the descriptor is malformed, or belongs to another
            server or cube
        MissingObjectError: If a reference can not be resolved
    """
    try:
        descriptor = QueryDescriptor.model_validate(json)
    except ValidationError as e:
        raise ArgumentError(f"Invalid query descriptor: {e}") from e

    cube = query.cube
    if descriptor.server and descriptor.server != cube.server:
        raise ArgumentError(
            f"Server '{descriptor.server}' doesn't match the server "
            f"'{cube.server}' of the target query"
        )
    if descriptor.cube and descriptor.cube != cube.name:
        raise ArgumentError(
            f"Cube '{descriptor.cube}' doesn't match the cube "
            f"'{cube.name}' of the target query"
        )

    if descriptor.format:
        query.set_format(descriptor.format)
    if descriptor.locale is not None:
        query.set_locale(descriptor.locale)

    for item in descriptor.calculations:
        query.add_calculation(item.get("kind"), item)
    for item in descriptor.captions:
        query.add_caption(item)
    for item in descriptor.drilldowns:
        query.add_drilldown(item)
    for cut in descriptor.cuts:
        query.add_cut(
            cut.reference, cut.members, exclusive=cut.exclusive, for_match=cut.for_match
        )
    for item in descriptor.filters:
        query.add_filter(item.measure, item.constraint, item.joint, item.constraint2)
    for item in descriptor.measures:
        query.add_measure(item)
    for item in descriptor.properties:
        query.add_property(item)

    if descriptor.page_limit is not None:
        query.set_pagination(descriptor.page_limit, descriptor.page_offset)
    if descriptor.sort_property:
        query.set_sorting(descriptor.sort_property, descriptor.sort_direction or "desc")
    if descriptor.time:
        query.set_time(*descriptor.time)
    for name, value in descriptor.options.items():
        if value is not None:
            query.set_option(name, value)

    return query
