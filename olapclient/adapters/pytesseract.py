"""Plain schema records from a Python tesseract server."""

from __future__ import annotations

from typing import Any

from ..common import ensure_list, join_uri
from ..enums import AggregatorType, DimensionType
from ..logging import get_logger

__all__ = ["plain_to_schema", "cube_to_plain", "members_to_plain"]


def plain_to_schema(raw_schema: Any, server_uri: str) -> list[dict[str, Any]]:
    """Convert the response of the ``/cubes`` endpoint (or its list of
    cubes) into plain cube records."""
    cubes = raw_schema.get("cubes", []) if isinstance(raw_schema, dict) else raw_schema
    records = [cube_to_plain(cube, server_uri) for cube in ensure_list(cubes)]
    get_logger().debug("pytesseract: adapted %d cubes from %s", len(records), server_uri)
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
        "measures": [
            {
                "name": item["name"],
                "caption": item.get("caption"),
                "annotations": item.get("annotations"),
                "aggregator_type": AggregatorType.parse(item.get("aggregator")).value,
                "uri": join_uri(cube_uri, "msr", item["name"]),
            }
            for item in json.get("measures", [])
        ],
        "named_sets": [],
    }


def _dimension(json: dict[str, Any], cube_uri: str) -> dict[str, Any]:
    dimension_uri = join_uri(cube_uri, "dim", json["name"])
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": dimension_uri,
        "dimension_type": DimensionType.parse(json.get("type")).value,
        "default_hierarchy": json.get("default_hierarchy"),
        "hierarchies": [
            _hierarchy(item, dimension_uri) for item in json.get("hierarchies", [])
        ],
    }


def _hierarchy(json: dict[str, Any], dimension_uri: str) -> dict[str, Any]:
    hierarchy_uri = join_uri(dimension_uri, json["name"])
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": hierarchy_uri,
        "levels": [_level(item, hierarchy_uri) for item in json.get("levels", [])],
    }


def _level(json: dict[str, Any], hierarchy_uri: str) -> dict[str, Any]:
    level_uri = join_uri(hierarchy_uri, json["name"])
    return {
        "name": json["name"],
        "caption": json.get("caption"),
        "annotations": json.get("annotations"),
        "uri": level_uri,
        "depth": json.get("depth", 1),
        "properties": [
            {
                "name": item["name"],
                "caption": item.get("caption"),
                "annotations": item.get("annotations"),
                "uri": join_uri(level_uri, item["name"]),
            }
            for item in ensure_list(json.get("properties"))
        ],
    }


def members_to_plain(response: dict[str, Any]) -> list[dict[str, Any]]:
    """Plain member records from the response of the ``/members``
    endpoint."""
    level_name = response["name"]
    depth = response.get("depth")

    def adapt(row: dict[str, Any], row_depth: int | None) -> dict[str, Any]:
        ancestors = ensure_list(row.get("ancestor"))
        return {
            "key": row["key"],
            "name": str(row["key"]),
            "caption": row.get("caption"),
            "depth": row_depth,
            "level": level_name,
            "ancestors": [
                adapt(item, max(row_depth - index - 1, 0) if row_depth else None)
                for index, item in enumerate(ancestors)
            ],
            "uri": join_uri("", level_name, row["key"]),
        }

    return [adapt(row, depth) for row in response.get("members", [])]
