"""
Plain schema records from a Mondrian REST server.

Mondrian publishes an implicit "All" level at the top of each hierarchy; the
adapter removes it, so plain levels start at depth 1.
"""

from __future__ import annotations

from typing import Any

from ..common import ensure_list, join_uri
from ..enums import AggregatorType, DimensionType
from ..logging import get_logger

__all__ = ["plain_to_schema", "cube_to_plain", "member_to_plain"]


def plain_to_schema(raw_schema: Any, server_uri: str) -> list[dict[str, Any]]:
    """Convert the response of the ``/cubes`` endpoint (or its list of
    cubes) into plain cube records."""
    cubes = raw_schema.get("cubes", []) if isinstance(raw_schema, dict) else raw_schema
    records = [cube_to_plain(cube, server_uri) for cube in ensure_list(cubes)]
    get_logger().debug("mondrian: adapted %d cubes from %s", len(records), server_uri)
    return records


def cube_to_plain(json: dict[str, Any], server_uri: str) -> dict[str, Any]:
    cube_uri = join_uri(server_uri, "cubes", json["name"])
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "server": server_uri,
        "uri": cube_uri,
        "dimensions": [_dimension(item, cube_uri) for item in json.get("dimensions", [])],
        "measures": [_measure(item, cube_uri) for item in json.get("measures", [])],
        "named_sets": [_named_set(item, cube_uri) for item in json.get("named_sets", [])],
    }


def _dimension(json: dict[str, Any], cube_uri: str) -> dict[str, Any]:
    dimension_uri = join_uri(cube_uri, "dimensions", json["name"])
    hierarchies = json.get("hierarchies", [])
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": dimension_uri,
        "dimension_type": DimensionType.parse(json.get("type")).value,
        "default_hierarchy": hierarchies[0]["name"] if hierarchies else None,
        "hierarchies": [_hierarchy(item, dimension_uri) for item in hierarchies],
    }


def _hierarchy(json: dict[str, Any], dimension_uri: str) -> dict[str, Any]:
    hierarchy_uri = join_uri(dimension_uri, "hierarchies", json["name"])
    levels = json.get("levels", [])
    has_all = json.get("has_all", True)
    if has_all:
        levels = levels[1:]
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": hierarchy_uri,
        "levels": [
            _level(item, hierarchy_uri, depth_offset=0 if has_all else 1)
            for item in levels
        ],
    }


def _level(json: dict[str, Any], hierarchy_uri: str, depth_offset: int) -> dict[str, Any]:
    level_uri = join_uri(hierarchy_uri, "levels", json["name"])
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": level_uri,
        "depth": json.get("depth", 0) + depth_offset,
        "properties": [
            {"name": name, "uri": join_uri(level_uri, "properties", name)}
            for name in json.get("properties", [])
        ],
    }


def _measure(json: dict[str, Any], cube_uri: str) -> dict[str, Any]:
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": join_uri(cube_uri, "measures", json["name"]),
        "aggregator_type": AggregatorType.parse(json.get("aggregator")).value,
    }


def _named_set(json: dict[str, Any], cube_uri: str) -> dict[str, Any]:
    return {
        "name": json["name"],
        "annotations": json.get("annotations"),
        "uri": join_uri(cube_uri, "namedsets", json["name"]),
        "dimension": json.get("dimension"),
        "hierarchy": json.get("hierarchy"),
        "level": json["level"],
    }


def member_to_plain(json: dict[str, Any], hierarchy_uri: str) -> dict[str, Any]:
    """Plain record of a member returned by the members endpoint, with its
    ancestors and children."""
    return {
        "key": json["key"],
        "name": json.get("name"),
        "caption": json.get("caption"),
        "full_name": json.get("full_name", ""),
        "parent_name": json.get("parent_name"),
        "depth": json.get("depth"),
        "level": json.get("level_name", ""),
        "num_children": json.get("num_children"),
        "ancestors": [
            member_to_plain(item, hierarchy_uri) for item in ensure_list(json.get("ancestors"))
        ],
        "children": [
            member_to_plain(item, hierarchy_uri) for item in ensure_list(json.get("children"))
        ],
        "uri": join_uri(
            hierarchy_uri, "levels", json.get("level_name", ""), "members", json["key"]
        ),
    }
