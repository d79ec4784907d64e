"""Helpers to read query parameters out of request URLs."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl, unquote_plus, urlsplit

from ..errors import ArgumentError

__all__ = ["params_from_url", "apply_parse_url_rules", "match_cube_name_from_url"]

RE_CUBE_NAME = re.compile(r"/cubes/([^/]+)/|\bcube=([^&]+)&")


def params_from_url(url: str) -> dict[str, str | list[str]]:
    """Query parameters of `url`. Repeated keys are collected in a list,
    in order of appearance."""
    query_string = urlsplit(url).query if "?" in url or "://" in url else url
    params: dict[str, str | list[str]] = {}
    for key, value in parse_qsl(query_string, keep_blank_values=False):
        current = params.get(key)
        if current is None:
            params[key] = value
        elif isinstance(current, list):
            current.append(value)
        else:
            params[key] = [current, value]
    return params


def apply_parse_url_rules(
    params: Mapping[str, Any],
    include: Iterable[str] | None = None,
    exclude: Iterable[str] | None = None,
    filter: Callable[[str, Any], bool] | None = None,
) -> dict[str, Any]:
    """
    Select the parameters to parse.

    Keys in `exclude` are dropped, and when `include` is given only its keys
    are kept. A `filter` function receiving the key and value is only used
    when neither `include` nor `exclude` are given.
    """
    if include is not None or exclude is not None:
        included = set(include) if include is not None else None
        excluded = set(exclude or ())

        def tester(key: str, value: Any) -> bool:
            if included is not None and key not in included:
                return False
            return key not in excluded

    elif filter is not None:
        tester = filter
    else:
        return dict(params)

    return {key: value for key, value in params.items() if tester(key, value)}


def match_cube_name_from_url(url: str) -> str:
    """
    Extract the cube name from a query url, either from a ``/cubes/<name>/``
    path segment or from a ``cube=<name>`` parameter.

    Raises:
        ArgumentError: If the url does not name a cube
    """
    match = RE_CUBE_NAME.search(url)
    if match is None:
        raise ArgumentError(f"Provided URL is not a valid query URL: {url}")
    return unquote_plus(match.group(1) or match.group(2))
