"""
The ``aggregate`` dialect, spoken by Mondrian-style REST servers.

Names travel fully qualified with every segment bracketed
(``[Geography].[Geography].[Country]``), and cuts use member tokens like
``[Geography].[Geography].[Country].&[mx]``::

    drilldown=[Time].[Time].[Year]
    cut=~{[Geography].[Geography].[Country].&[ca],[Geography].[Geography].[Country].&[mx]}
    measures=Value
    filter=Value > 100 and < 1000
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..common import ensure_list, join_bracketed_name, parse_bool, split_full_name
from ..enums import QUERY_OPTIONS, Calculation, Comparison, Direction
from ..errors import ArgumentError
from ..metadata import Level, LevelDescriptor, NamedSet, Property
from ..query.calculations import GrowthCalculation, RcaCalculation, TopkCalculation
from .base import (
    Dialect,
    DialectCapabilities,
    WireParams,
    localized_property,
    split_operands,
)
from .registry import DialectRegistry

if TYPE_CHECKING:
    from ..metadata import Cube
    from ..query import Query, QueryCut, QueryFilter
    from ..query.params import Drillable

__all__ = ["AggregateDialect", "stringify_cut", "parse_cut"]

COMPARISON_SYMBOLS = {
    Comparison.EQ: "=",
    Comparison.NEQ: "<>",
    Comparison.GT: ">",
    Comparison.GTE: ">=",
    Comparison.LT: "<",
    Comparison.LTE: "<=",
}

RE_FILTER = re.compile(
    r"^(?P<measure>.+?)\s+(?P<op><>|>=|<=|=|>|<)\s+(?P<value>\S+)"
    r"(?:\s+(?P<joint>and|or)\s+(?P<op2><>|>=|<=|=|>|<)\s+(?P<value2>\S+))?$",
    re.IGNORECASE,
)

# Separator between the member tokens of a multi-valued cut
RE_CUT_SEPARATOR = re.compile(r"(?<=\]),(?=\[)")


def drillable_name(drillable: Drillable) -> str:
    if isinstance(drillable, NamedSet):
        return join_bracketed_name([drillable.name])
    return join_bracketed_name(
        [drillable.dimension.name, drillable.hierarchy.name, drillable.name]
    )


def property_name(prop: Property) -> str:
    level = prop.level
    return join_bracketed_name(
        [level.dimension.name, level.hierarchy.name, level.name, prop.name]
    )


def stringify_cut(cut: QueryCut) -> str | None:
    """Member tokens of a cut, braced when there are several, prefixed with
    ``~`` when exclusive and ``*`` when for-match."""
    if not cut.members:
        return None
    name = drillable_name(cut.drillable)
    tokens = ",".join(f"{name}.&[{member}]" for member in cut.members)
    if len(cut.members) > 1:
        tokens = f"{{{tokens}}}"
    prefix = ("~" if cut.exclusive else "") + ("*" if cut.for_match else "")
    return prefix + tokens


def parse_cut(value: str) -> tuple[str, list[str], bool, bool]:
    """
    Split a cut token into the drillable name, member keys and the
    exclusive and for-match flags.

    Raises:
        ArgumentError: If the token is not a cut
    """
    token = value.strip()
    exclusive = for_match = False
    while token[:1] in ("~", "*"):
        if token[0] == "~":
            exclusive = True
        else:
            for_match = True
        token = token[1:]
    if token.startswith("{") and token.endswith("}"):
        token = token[1:-1]
    if "].&[" not in token:
        raise ArgumentError(f"Couldn't parse cut: {value}")

    drillable = None
    members = []
    for item in RE_CUT_SEPARATOR.split(token):
        name, _, key = item.rpartition(".&[")
        if not name or not key.endswith("]"):
            raise ArgumentError(f"Couldn't parse cut: {value}")
        if drillable is None:
            drillable = name
        elif name != drillable:
            raise ArgumentError(f"Cut mixes members of several levels: {value}")
        members.append(key[:-1])
    return drillable, members, exclusive, for_match


def resolve_drillable(cube: Cube, name: str) -> Drillable:
    """Resolve a bracketed name of 1 to 3 segments into a level or a named
    set of `cube`."""
    parts = split_full_name(name)
    if len(parts) == 3:
        return cube.get_level(
            LevelDescriptor(dimension=parts[0], hierarchy=parts[1], level=parts[2])
        )
    if len(parts) == 2:
        return cube.get_level(LevelDescriptor(dimension=parts[0], level=parts[1]))
    if len(parts) == 1:
        if cube.has_named_set(parts[0]):
            return cube.get_named_set(parts[0])
        return cube.get_level(parts[0])
    raise ArgumentError(f"Invalid level name: {name!r}")


def resolve_property(cube: Cube, name: str) -> Property:
    parts = split_full_name(name)
    if len(parts) < 2:
        return cube.get_property(name)
    level = resolve_drillable(cube, join_bracketed_name(parts[:-1]))
    if not isinstance(level, Level):
        raise ArgumentError(f"Named sets have no properties: {name!r}")
    return level.get_property(parts[-1])


@DialectRegistry.register
class AggregateDialect(Dialect):
    """Mondrian REST ``aggregate`` endpoint parameters."""

    @property
    def name(self) -> str:
        return "aggregate"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            supports_time=False,
            supports_format=False,
            supports_locale=False,
        )

    def serialize(self, query: Query) -> WireParams:
        params: WireParams = {}

        captions = [property_name(prop) for prop in query.captions]
        if query.locale:
            # One caption per level: an explicit caption wins over the locale
            captioned = {prop.level.full_name for prop in query.captions}
            for drillable in query.drilldowns:
                if not isinstance(drillable, Level) or drillable.full_name in captioned:
                    continue
                prop = localized_property(drillable, query.locale)
                if prop is not None:
                    captions.append(property_name(prop))
        if captions:
            params["caption"] = captions

        cuts = [token for token in map(stringify_cut, query.cuts) if token]
        if cuts:
            params["cut"] = cuts

        if query.drilldowns:
            params["drilldown"] = [drillable_name(item) for item in query.drilldowns]
        if query.measures:
            params["measures"] = [item.name for item in query.measures]
        if query.properties:
            params["properties"] = [property_name(item) for item in query.properties]
        if query.filters:
            params["filter"] = [self._stringify_filter(item) for item in query.filters]

        for calculation in query.calculations:
            if isinstance(calculation, GrowthCalculation):
                params.setdefault(
                    "growth",
                    f"{drillable_name(calculation.category)},{calculation.value.name}",
                )
            elif isinstance(calculation, RcaCalculation):
                params.setdefault(
                    "rca",
                    f"{drillable_name(calculation.location)},"
                    f"{drillable_name(calculation.category)},{calculation.value.name}",
                )
            elif isinstance(calculation, TopkCalculation):
                value = calculation.value
                params.setdefault(
                    "top",
                    f"{calculation.amount},{drillable_name(calculation.category)},"
                    f"{value.value if isinstance(value, Calculation) else value.name},"
                    f"{calculation.order.value}",
                )

        pagination = query.pagination
        if pagination.limit:
            params["limit"] = pagination.limit
        if pagination.offset:
            params["offset"] = pagination.offset

        sorting = query.sorting
        if sorting:
            target = sorting.target
            params["order"] = (
                property_name(target) if isinstance(target, Property) else sorting.target_name
            )
            if sorting.direction == Direction.DESC:
                params["order_desc"] = True

        for option, value in query.options.items():
            if option in QUERY_OPTIONS:
                params[option] = value

        return params

    def _stringify_filter(self, item: QueryFilter) -> str:
        tokens = [
            item.measure_name,
            COMPARISON_SYMBOLS[item.constraint[0]],
            str(item.constraint[1]),
        ]
        if item.joint is not None and item.constraint2 is not None:
            tokens += [
                item.joint.value,
                COMPARISON_SYMBOLS[item.constraint2[0]],
                str(item.constraint2[1]),
            ]
        return " ".join(tokens)

    def parse(self, query: Query, params: Mapping[str, Any]) -> Query:
        cube = query.cube

        def add_cut(token: str) -> None:
            name, members, exclusive, for_match = parse_cut(token)
            query.add_cut(
                resolve_drillable(cube, name),
                members,
                exclusive=exclusive,
                for_match=for_match,
            )

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

        def add_growth(token: str) -> None:
            category, value = _operands(token, 2)
            query.add_calculation(
                "growth", category=resolve_drillable(cube, category), value=value
            )

        def add_rca(token: str) -> None:
            location, category, value = _operands(token, 3)
            query.add_calculation(
                "rca",
                location=resolve_drillable(cube, location),
                category=resolve_drillable(cube, category),
                value=value,
            )

        def add_top(token: str) -> None:
            amount, category, value, order = _operands(token, 4)
            query.add_calculation(
                "topk",
                amount=amount,
                category=resolve_drillable(cube, category),
                value=value,
                order=order,
            )

        handlers = {
            "drilldown": lambda token: query.add_drilldown(resolve_drillable(cube, token)),
            "cut": add_cut,
            "measures": query.add_measure,
            "caption": lambda token: query.add_caption(resolve_property(cube, token)),
            "properties": lambda token: query.add_property(resolve_property(cube, token)),
            "filter": add_filter,
            "growth": add_growth,
            "rca": add_rca,
            "top": add_top,
        }
        for key, handler in handlers.items():
            if key in params:
                self._apply(key, params[key], handler)

        if "limit" in params:
            self._apply(
                "limit",
                params["limit"],
                lambda token: query.set_pagination(token, _last(params.get("offset")) or 0),
            )

        if params.get("order"):
            direction = Direction.DESC if parse_bool(params.get("order_desc")) else Direction.ASC
            self._apply(
                "order",
                params["order"],
                lambda token: query.set_sorting(
                    resolve_property(cube, token) if token.startswith("[") else token,
                    direction,
                ),
            )

        for option in QUERY_OPTIONS:
            if params.get(option) is not None:
                query.set_option(option, parse_bool(_last(params[option])))

        return query

    def _tokens(self, value: Any) -> list[str]:
        # Repeated parameters, each value is one token
        return [str(item) for item in ensure_list(value) if item not in (None, "")]


def _operands(token: str, count: int) -> list[str]:
    operands = split_operands(token)
    if len(operands) != count:
        raise ArgumentError(f"Expected {count} comma separated operands: {token!r}")
    return operands


def _last(value: Any) -> Any:
    values = ensure_list(value)
    return values[-1] if values else None
