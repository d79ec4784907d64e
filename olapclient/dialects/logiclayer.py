"""
The ``logiclayer`` dialect, spoken by the Tesseract logic layer endpoint.

Levels are addressed by unique name, lists are comma joined and each cut is
a parameter named after the level it restricts::

    cube=trade&drilldowns=Year,Country&measures=Value&Country=ca,mx
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..common import join_full_name, parse_bool, split_full_name
from ..enums import Calculation
from ..errors import ArgumentError
from ..metadata import Level, NamedSet
from ..query.calculations import GrowthCalculation, RcaCalculation, TopkCalculation
from .base import Dialect, DialectCapabilities, WireParams, localized_property, split_operands
from .registry import DialectRegistry

if TYPE_CHECKING:
    from ..query import Query
    from ..query.params import Drillable

__all__ = ["LogicLayerDialect"]

# Boolean switches of the endpoint
OPTIONS = ("debug", "parents", "sparse")

RESERVED_KEYS = frozenset(
    {
        "cube",
        "drilldowns",
        "measures",
        "locale",
        "properties",
        "growth",
        "rca",
        "top",
        "limit",
        "sort",
        "filters",
        "time",
        *OPTIONS,
    }
)


def drillable_name(drillable: Drillable) -> str:
    if isinstance(drillable, NamedSet):
        return drillable.name
    return drillable.unique_name or drillable.name


@DialectRegistry.register
class LogicLayerDialect(Dialect):
    """Tesseract logic layer parameters."""

    @property
    def name(self) -> str:
        return "logiclayer"

    @property
    def capabilities(self) -> DialectCapabilities:
        return DialectCapabilities(
            supports_captions=False,
            supports_exclusive_cuts=False,
            supports_filters=False,
            supports_sorting=False,
            supports_pagination=False,
        )

    def serialize(self, query: Query) -> WireParams:
        params: WireParams = {"cube": query.cube.name}

        if query.drilldowns:
            params["drilldowns"] = ",".join(drillable_name(d) for d in query.drilldowns)
        if query.measures:
            params["measures"] = ",".join(m.name for m in query.measures)
        if query.locale:
            params["locale"] = query.locale

        properties = []
        if query.locale:
            for drillable in query.drilldowns:
                if isinstance(drillable, Level):
                    prop = localized_property(drillable, query.locale)
                    if prop is not None:
                        properties.append(prop)
        properties.extend(prop for prop in query.properties if prop not in properties)
        if properties:
            params["properties"] = ",".join(
                join_full_name([drillable_name(prop.level), prop.name]) for prop in properties
            )

        options = query.options
        for option in OPTIONS:
            if option in options:
                params[option] = options[option]

        for calculation in query.calculations:
            if isinstance(calculation, GrowthCalculation):
                params.setdefault(
                    "growth",
                    ",".join([drillable_name(calculation.category), calculation.value.name]),
                )
            elif isinstance(calculation, RcaCalculation):
                params.setdefault(
                    "rca",
                    ",".join(
                        [
                            drillable_name(calculation.location),
                            drillable_name(calculation.category),
                            calculation.value.name,
                        ]
                    ),
                )
            elif isinstance(calculation, TopkCalculation):
                value = calculation.value
                params.setdefault(
                    "top",
                    ",".join(
                        [
                            str(calculation.amount),
                            drillable_name(calculation.category),
                            value.value if isinstance(value, Calculation) else value.name,
                            calculation.order.value,
                        ]
                    ),
                )

        for cut in query.cuts:
            if cut.exclusive:
                continue
            if isinstance(cut.drillable, Level) and cut.members:
                params[drillable_name(cut.drillable)] = ",".join(cut.members)

        return params

    def parse(self, query: Query, params: Mapping[str, Any]) -> Query:
        cube = query.cube
        cube_name = params.get("cube")
        if cube_name and cube_name != cube.name:
            raise ArgumentError(
                f"Cube '{cube_name}' in parameters doesn't match the query cube '{cube.name}'"
            )

        locale = str(params["locale"]) if params.get("locale") else None
        if locale:
            query.set_locale(locale)

        def add_property(token: str) -> None:
            parts = split_full_name(token)
            if len(parts) != 2:
                raise ArgumentError(f"Invalid property reference: {token!r}")
            if locale and _is_localized(query, parts[0], parts[1], locale):
                # Implied by the locale, serialize adds it back
                return
            query.add_property(parts[0], parts[1])

        def add_growth(token: str) -> None:
            category, value = _operands(token, 2)
            query.add_calculation("growth", category=category, value=value)

        def add_rca(token: str) -> None:
            location, category, value = _operands(token, 3)
            query.add_calculation("rca", location=location, category=category, value=value)

        def add_top(token: str) -> None:
            amount, category, value, order = _operands(token, 4)
            query.add_calculation(
                "topk", amount=amount, category=category, value=value, order=order
            )

        handlers = {
            "drilldowns": query.add_drilldown,
            "measures": query.add_measure,
            "properties": add_property,
        }
        for key, handler in handlers.items():
            if key in params:
                self._apply(key, params[key], handler)

        for key, handler in (("growth", add_growth), ("rca", add_rca), ("top", add_top)):
            if params.get(key):
                self._apply(key, params[key], handler, split=False)

        for option in OPTIONS:
            if params.get(option) is not None:
                query.set_option(option, parse_bool(params[option]))

        for key, value in params.items():
            if key in RESERVED_KEYS:
                continue
            if not cube.has_level(key):
                self.logger.debug("%s dialect: skipping unknown parameter %s", self.name, key)
                continue
            self._apply(key, value, lambda member, key=key: query.add_cut(key, [member]))

        return query


def _operands(token: str, count: int) -> list[str]:
    operands = split_operands(token)
    if len(operands) != count:
        raise ArgumentError(f"Expected {count} comma separated operands: {token!r}")
    return operands


def _is_localized(query: Query, level_ref: str, property_name: str, locale: str) -> bool:
    """True if the property is the one serialize injects for `locale` on a
    drilled level."""
    for drillable in query.drilldowns:
        if isinstance(drillable, Level) and drillable.matches(level_ref):
            prop = localized_property(drillable, locale)
            return prop is not None and prop.name == property_name
    return False
