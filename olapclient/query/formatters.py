"""
Textual forms of a query.

* :func:`query_to_source` writes the Python expression that rebuilds the
  query from an empty query of the same cube.
* :func:`query_to_summary` and :func:`query_to_query_string` give a
  deterministic, non-reversible identification of the query, used to
  compare queries and as cache keys.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from ..enums import Calculation
from ..metadata import Measure, Property
from .calculations import plain_reference

if TYPE_CHECKING:
    from .params import QueryFilter
    from .query import Query

__all__ = ["query_to_source", "query_to_summary", "query_to_query_string"]


def _literal(value: Any) -> str:
    """Python literal for a query argument."""
    if isinstance(value, (list, tuple)):
        items = ", ".join(_literal(item) for item in value)
        return f"[{items}]" if isinstance(value, list) else f"({items})"
    if isinstance(value, bool) or value is None:
        return repr(value)
    if isinstance(value, (int, float)):
        return repr(value)
    return repr(plain_reference(value))


def _call(method: str, *args: Any, **kwargs: Any) -> str:
    tokens = [_literal(arg) for arg in args]
    tokens.extend(f"{key}={_literal(value)}" for key, value in kwargs.items())
    return f".{method}({', '.join(tokens)})"


def _filter_arguments(item: QueryFilter) -> list[Any]:
    args: list[Any] = [
        item.measure_name,
        (item.constraint[0].value, item.constraint[1]),
    ]
    if item.joint is not None and item.constraint2 is not None:
        args.append(item.joint.value)
        args.append((item.constraint2[0].value, item.constraint2[1]))
    return args


def query_to_source(query: Query) -> str:
    """
    Return a Python expression that rebuilds `query`. Evaluate it with the
    name ``query`` bound to a new query of the same cube::

        rebuilt = eval(source, {"query": cube.query})
    """
    calls = [_call("set_format", query.format.value)]
    if query.locale:
        calls.append(_call("set_locale", query.locale))

    calls.extend(_call("add_measure", item) for item in query.measures)
    calls.extend(_call("add_drilldown", item) for item in query.drilldowns)
    calls.extend(_call("add_caption", item) for item in query.captions)
    calls.extend(_call("add_property", item) for item in query.properties)

    for cut in query.cuts:
        flags = {}
        if cut.exclusive:
            flags["exclusive"] = True
        if cut.for_match:
            flags["for_match"] = True
        calls.append(_call("add_cut", cut.drillable, cut.members, **flags))

    calls.extend(_call("add_filter", *_filter_arguments(item)) for item in query.filters)

    for calculation in query.calculations:
        calls.append(
            _call("add_calculation", calculation.kind.value, **calculation.operands())
        )

    pagination = query.pagination
    if pagination:
        calls.append(_call("set_pagination", pagination.limit, pagination.offset))

    sorting = query.sorting
    if sorting:
        calls.append(_call("set_sorting", sorting.target, sorting.direction.value))

    timeframe = query.time
    if timeframe:
        calls.append(_call("set_time", timeframe.precision.value, timeframe.wire_value))

    calls.extend(_call("set_option", name, value) for name, value in query.options.items())

    return "(query\n    " + "\n    ".join(calls) + "\n)"


def _sort_reference(target: Any) -> str | None:
    if target is None:
        return None
    if isinstance(target, Property):
        return target.full_name
    if isinstance(target, Measure):
        return target.name
    if isinstance(target, Calculation):
        return target.value
    return str(target)


def query_to_summary(query: Query) -> dict[str, Any]:
    """Identification of every feature of the query, with unset features
    as ``None``."""
    cube = query.cube
    pagination = query.pagination
    sorting = query.sorting
    timeframe = query.time

    def filter_token(item: QueryFilter) -> str:
        tokens = [item.measure_name, item.constraint[0].value, str(item.constraint[1])]
        if item.joint is not None and item.constraint2 is not None:
            tokens += [
                item.joint.value,
                item.constraint2[0].value,
                str(item.constraint2[1]),
            ]
        return " ".join(tokens)

    return {
        "server": cube.server or None,
        "cube": cube.name,
        "format": query.format.value,
        "locale": query.locale or None,
        "calculations": [item.key for item in query.calculations],
        "captions": [item.full_name for item in query.captions],
        "cuts": [
            f"{'~' if cut.exclusive else ''}{'*' if cut.for_match else ''}"
            f"{cut.drillable.full_name}.{','.join(cut.members)}"
            for cut in query.cuts
        ],
        "drilldowns": [item.full_name for item in query.drilldowns],
        "filters": [filter_token(item) for item in query.filters],
        "page_limit": pagination.limit or None,
        "page_offset": pagination.offset or None,
        "measures": [item.name for item in query.measures],
        "properties": [item.full_name for item in query.properties],
        "sort_property": _sort_reference(sorting.target),
        "sort_direction": sorting.direction.value if sorting.direction else None,
        "time_precision": timeframe.precision.value if timeframe else None,
        "time_value": timeframe.wire_value if timeframe else None,
        "options": query.options,
    }


def query_to_query_string(query: Query) -> str:
    """The summary as a sorted, url-encoded string without empty fields."""
    pairs: list[tuple[str, Any]] = []
    for key, value in query_to_summary(query).items():
        if key == "options":
            pairs.extend(
                (f"options.{name}", str(flag).lower()) for name, flag in value.items()
            )
        elif isinstance(value, list):
            pairs.extend((key, item) for item in value)
        elif value is not None:
            pairs.append((key, value))
    pairs.sort(key=lambda pair: pair[0])
    return urlencode(pairs)
