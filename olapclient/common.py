"""Utility functions shared across olapclient modules."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

from .errors import ArgumentError

__all__ = [
    "abbreviate_full_name",
    "join_full_name",
    "join_bracketed_name",
    "split_full_name",
    "parse_numeric",
    "ensure_list",
    "split_tokens",
    "parse_bool",
    "join_uri",
]

RE_BRACKETED_SEPARATOR = re.compile(r"\]\.\[?")


def abbreviate_full_name(parts: Iterable[str], joint: str = "/") -> str:
    """Join the name `parts` keeping only the last occurrence of repeated
    tokens: ``["Year", "Year", "Year"]`` becomes ``"Year"`` and
    ``["Geography", "Geography", "Country"]`` becomes ``"Geography/Country"``.
    """
    composed: list[str] = []
    for token in reversed(list(parts)):
        if token not in composed:
            composed.insert(0, token)
    return joint.join(composed)


def join_full_name(parts: Iterable[str]) -> str:
    """Dot-join name parts. Segments are bracketed only when one of them
    contains a dot."""
    parts = [str(part) for part in parts]
    if any("." in part for part in parts):
        return ".".join(f"[{part}]" for part in parts)
    return ".".join(parts)


def join_bracketed_name(parts: Iterable[str]) -> str:
    """Dot-join name parts, bracketing every segment."""
    return ".".join(f"[{part}]" for part in parts)


def split_full_name(full_name: str | None) -> list[str]:
    """Inverse of :func:`join_full_name` and :func:`join_bracketed_name`."""
    if not full_name:
        return []
    full_name = str(full_name)
    if full_name.startswith("[") and full_name.endswith("]"):
        inner = full_name[1:-1]
        return RE_BRACKETED_SEPARATOR.split(inner)
    return full_name.split(".")


def parse_numeric(value: Any) -> int | float:
    """Convert `value` to a finite number, keeping integers integral.

    Raises:
        ArgumentError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ArgumentError(f"Invalid value: {value!r} is not numeric.")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ArgumentError(f"Invalid value: {value!r} is not numeric.") from None
    else:
        raise ArgumentError(f"Invalid value: {value!r} is not numeric.")

    if not math.isfinite(number):
        raise ArgumentError(f"Invalid value: {value!r} is not a finite number.")
    if isinstance(value, str) and number.is_integer() and "." not in value \
            and "e" not in value.lower():
        return int(number)
    return number


def ensure_list(value: Any) -> list:
    """Wrap a scalar into a list, `None` becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def split_tokens(value: Any, separator: str = ",") -> list[str]:
    """Split comma separated strings (or lists of them) into clean tokens."""
    tokens = []
    for item in ensure_list(value):
        tokens.extend(token.strip() for token in str(item).split(separator))
    return [token for token in tokens if token]


def parse_bool(value: Any) -> bool | None:
    """Interpret wire values like ``"true"``, ``"0"`` or ``True``."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = value.strip().lower()
        if token in ("", "false", "0", "no", "off", "null", "undefined"):
            return False
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def join_uri(base: str, *parts: Any) -> str:
    """Join url segments with single slashes, quoting every segment after
    the base."""
    segments = [str(base).rstrip("/")]
    for part in parts:
        segments.append(quote(str(part).strip("/"), safe=""))
    return "/".join(segments)
