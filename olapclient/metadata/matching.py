"""
Reference matching over schema objects.

A reference is whatever a caller uses to point at a schema object: the object
itself, a string (unique name, full name or bare name) or a structured
descriptor whose optional ancestor fields narrow the search. The matcher never
raises; getters on the schema objects turn a missing match into an error that
names the reference and the searched scope.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from ..errors import ArgumentError, ModelError

__all__ = [
    "LevelDescriptor",
    "PropertyDescriptor",
    "first_match",
    "link_children",
    "describe_reference",
    "suggestion_for",
]

T = TypeVar("T")

# Ancestor fields checked when matching a descriptor, outermost first
ANCESTOR_FIELDS = ("server", "cube", "dimension", "hierarchy")


@dataclass(frozen=True, slots=True)
class LevelDescriptor:
    """Structured reference to a level.

    Only `level` is required; every other field narrows the candidates to
    the levels whose corresponding ancestor has that name.
    """

    level: str
    hierarchy: str | None = None
    dimension: str | None = None
    cube: str | None = None
    server: str | None = None

    @classmethod
    def from_format(cls, obj: Any) -> LevelDescriptor:
        """
        Create a descriptor from a string, a mapping or another descriptor.

        Raises:
            ArgumentError: If the object can not describe a level
        """
        if isinstance(obj, LevelDescriptor):
            return obj
        if isinstance(obj, str) and obj:
            return cls(level=obj)
        if isinstance(obj, Mapping) and isinstance(obj.get("level"), str):
            return cls(**{key: obj.get(key) for key in cls.__slots__})
        raise ArgumentError(f"Invalid level descriptor: {obj!r}")

    def to_dict(self, skim: bool = False) -> dict[str, str]:
        """Descriptor as a plain dictionary without empty fields. `skim`
        drops the server and cube fields."""
        result = {key: value for key, value in asdict(self).items() if value is not None}
        if skim:
            result.pop("server", None)
            result.pop("cube", None)
        return result


@dataclass(frozen=True, slots=True)
class PropertyDescriptor:
    """Structured reference to a level property."""

    property: str
    level: str | None = None
    hierarchy: str | None = None
    dimension: str | None = None
    cube: str | None = None
    server: str | None = None

    @classmethod
    def from_format(cls, obj: Any) -> PropertyDescriptor:
        """
        Create a descriptor from a string, a mapping or another descriptor.

        Raises:
            ArgumentError: If the object can not describe a property
        """
        if isinstance(obj, PropertyDescriptor):
            return obj
        if isinstance(obj, str) and obj:
            return cls(property=obj)
        if isinstance(obj, Mapping) and isinstance(obj.get("property"), str):
            level = obj.get("level")
            if level is not None and not isinstance(level, str):
                raise ArgumentError(f"Invalid property descriptor: {obj!r}")
            return cls(**{key: obj.get(key) for key in cls.__slots__})
        raise ArgumentError(f"Invalid property descriptor: {obj!r}")

    def to_dict(self, skim: bool = False) -> dict[str, str]:
        result = {key: value for key, value in asdict(self).items() if value is not None}
        if skim:
            result.pop("server", None)
            result.pop("cube", None)
        return result


def is_level_descriptor(obj: Any) -> bool:
    return isinstance(obj, LevelDescriptor) or (
        isinstance(obj, Mapping)
        and isinstance(obj.get("level"), str)
        and "property" not in obj
    )


def is_property_descriptor(obj: Any) -> bool:
    return isinstance(obj, PropertyDescriptor) or (
        isinstance(obj, Mapping) and isinstance(obj.get("property"), str)
    )


def ancestors_match(descriptor: Any, ancestors: Mapping[str, str | None]) -> bool:
    """True when every ancestor field present in `descriptor` equals the
    name in `ancestors`. Absent fields impose no constraint."""
    for field in ANCESTOR_FIELDS:
        expected = getattr(descriptor, field, None)
        if expected is None:
            continue
        if ancestors.get(field) != expected:
            return False
    return True


def first_match(items: Iterable[T], ref: Any) -> T | None:
    """Return the first item whose ``matches(ref)`` is true, or None."""
    for item in items:
        if item.matches(ref):
            return item
    return None


def link_children(parent: Any, children: Iterable[T], kind: str) -> dict[str, T]:
    """
    Attach `children` to `parent` and index them by name.

    Raises:
        ModelError: If two children share a name
    """
    index: dict[str, T] = {}
    for child in children:
        if child.name in index:
            raise ModelError(
                f"{parent.object_kind.capitalize()} '{parent.name}' has duplicate "
                f"{kind} name '{child.name}'"
            )
        child._attach(parent)
        index[child.name] = child
    return index


def describe_reference(ref: Any) -> str:
    """Short printable form of a reference for error messages."""
    if isinstance(ref, (LevelDescriptor, PropertyDescriptor)):
        return repr(ref.to_dict())
    if hasattr(ref, "object_kind"):
        return f"{ref.object_kind} '{ref.name}'"
    return repr(ref)


def suggestion_for(ref: Any, available: list[str]) -> str:
    """Did-you-mean hint for a string reference."""
    if not isinstance(ref, str) or not available:
        return ""
    matches = difflib.get_close_matches(ref, available, n=1)
    if matches:
        return f" Did you mean '{matches[0]}'?"
    return ""
