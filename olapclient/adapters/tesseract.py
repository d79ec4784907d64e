"""Plain schema records from a Tesseract (Rust) server."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ..common import ensure_list, join_full_name, join_uri
from ..enums import AggregatorType, DimensionType
from ..logging import get_logger

__all__ = ["plain_to_schema", "cube_to_plain", "member_to_plain"]


def plain_to_schema(raw_schema: Any, server_uri: str) -> list[dict[str, Any]]:
    """Convert the response of the ``/cubes`` endpoint (or its list of
    cubes) into plain cube records."""
    cubes = raw_schema.get("cubes", []) if isinstance(raw_schema, dict) else raw_schema
    records = [cube_to_plain(cube, server_uri) for cube in ensure_list(cubes)]
    get_logger().debug("tesseract: adapted %d cubes from %s", len(records), server_uri)
    return records


def cube_to_plain(json: dict[str, Any], server_uri: str) -> dict[str, Any]:
    cube_uri = join_uri(server_uri, "cubes", json["name"])
    return {
        "name": json["name"],
        "annotations": json.get("annotations"),
        "server": server_uri,
        "uri": cube_uri,
        "dimensions": [_dimension(item, cube_uri) for item in json.get("dimensions", [])],
        "measures": [_measure(item, cube_uri) for item in json.get("measures", [])],
        "named_sets": [],
    }


def _dimension(json: dict[str, Any], cube_uri: str) -> dict[str, Any]:
    dimension_uri = join_uri(cube_uri, "dimensions", json["name"])
    hierarchies = json.get("hierarchies", [])
    default_hierarchy = json.get("default_hierarchy")
    if not default_hierarchy and hierarchies:
        default_hierarchy = hierarchies[0]["name"]
    return {
        "name": json["name"],
        "annotations": json.get("annotations"),
        "uri": dimension_uri,
        "dimension_type": DimensionType.parse(json.get("type")).value,
        "default_hierarchy": default_hierarchy,
        "hierarchies": [_hierarchy(item, dimension_uri) for item in hierarchies],
    }


def _hierarchy(json: dict[str, Any], dimension_uri: str) -> dict[str, Any]:
    hierarchy_uri = join_uri(dimension_uri, "hierarchies", json["name"])
    return {
        "name": json["name"],
        "annotations": json.get("annotations"),
        "uri": hierarchy_uri,
        "levels": [
            _level(item, hierarchy_uri, depth)
            for depth, item in enumerate(json.get("levels", []), start=1)
        ],
    }


def _level(json: dict[str, Any], hierarchy_uri: str, depth: int) -> dict[str, Any]:
    level_uri = join_uri(hierarchy_uri, "levels", json["name"])
    return {
        "name": json["name"],
        "annotations": json.get("annotations"),
        "uri": level_uri,
        "unique_name": json.get("unique_name"),
        "depth": depth,
        "properties": [
            {
                "name": item["name"],
                "annotations": item.get("annotations"),
                "unique_name": item.get("unique_name"),
                "caption_set": item.get("caption_set"),
                "uri": join_uri(level_uri, "properties", item["name"]),
            }
            for item in ensure_list(json.get("properties"))
        ],
    }


def _measure(json: dict[str, Any], cube_uri: str) -> dict[str, Any]:
    aggregator = json.get("aggregator") or {}
    name = aggregator.get("name") if isinstance(aggregator, dict) else aggregator
    return {
        "name": json["name"],
        "annotations": json.get("annotations"),
        "uri": join_uri(cube_uri, "measures", json["name"]),
        "aggregator_type": AggregatorType.parse(name.upper() if name else None).value,
    }


def member_to_plain(
    json: dict[str, Any], level_name: str, server_uri: str, locale: str = ""
) -> dict[str, Any]:
    """Plain record of a member row (``ID``, ``Label``, ``<LOCALE> Label``)."""
    key = json["ID"]
    label = json.get(f"{locale.upper()} Label") if locale else None
    label = label or json.get("Label") or str(key)
    return {
        "key": key,
        "name": label,
        "caption": label,
        "full_name": join_full_name([level_name, str(key)]),
        "level": level_name,
        "uri": f"{join_uri(server_uri, 'members')}?level={quote(level_name, safe='')}",
    }
