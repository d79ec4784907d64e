"""
Pydantic-based dimension classes: Level, Hierarchy and Dimension.

Each class links its own children while it is validated, so a Dimension
built from a plain record already owns fully linked hierarchies and levels.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, PrivateAttr, field_validator, model_validator

from ..common import abbreviate_full_name, join_full_name
from ..enums import DimensionType
from ..errors import ModelError, NoSuchHierarchyError, NoSuchLevelError, NoSuchPropertyError
from ..settings import get_settings
from .attributes import Property
from .base import SchemaObject
from .matching import (
    LevelDescriptor,
    ancestors_match,
    describe_reference,
    first_match,
    is_level_descriptor,
    link_children,
    suggestion_for,
)

if TYPE_CHECKING:
    from .cube import Cube

__all__ = ["Level", "Hierarchy", "Dimension", "INTRINSIC_PROPERTIES"]

# Properties every level answers to, even if the backend does not list them
INTRINSIC_PROPERTIES = ("Caption", "Key", "Name", "UniqueName")


class Level(SchemaObject):
    """Represents a hierarchy level, with the properties of its members."""

    object_kind: ClassVar[str] = "level"

    unique_name: str | None = Field(None, description="Backend unique name")
    depth: int = Field(1, ge=1, description="1-based position in the hierarchy")
    properties: tuple[Property, ...] = Field(default_factory=tuple)

    _properties_by_name: dict[str, Property] = PrivateAttr(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def default_unique_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"name": data}
        if isinstance(data, dict) and not data.get("unique_name") and data.get("name"):
            data = {**data, "unique_name": data["name"]}
        return data

    @field_validator("properties", mode="before")
    @classmethod
    def convert_string_properties(cls, v: Any) -> Any:
        """Backends may list properties by name only."""
        if v is None:
            return ()
        return [{"name": prop} if isinstance(prop, str) else prop for prop in v]

    @model_validator(mode="after")
    def link_properties(self):
        self._properties_by_name = link_children(self, self.properties, "property")
        return self

    @property
    def hierarchy(self) -> Hierarchy:
        return self._parent("hierarchy")

    @property
    def dimension(self) -> Dimension:
        return self.hierarchy.dimension

    @property
    def cube(self) -> Cube:
        return self.dimension.cube

    def ancestor_names(self) -> dict[str, str | None]:
        """Names of the ancestors this level is linked to, as far as the
        chain goes."""
        names: dict[str, str | None] = {}
        node: Any = self
        for field in ("hierarchy", "dimension", "cube"):
            node = node._parent_ref() if node._parent_ref is not None else None
            if node is None:
                return names
            names[field] = node.name
        names["server"] = node.server or None
        return names

    @property
    def full_name(self) -> str:
        """Dot-joined dimension, hierarchy and level names."""
        hierarchy = self.hierarchy
        return join_full_name([hierarchy.dimension.name, hierarchy.name, self.name])

    @property
    def display_name(self) -> str:
        """Full name without repeated tokens."""
        hierarchy = self.hierarchy
        return abbreviate_full_name(
            [hierarchy.dimension.name, hierarchy.name, self.name],
            get_settings().display_name_joint,
        )

    @property
    def descriptor(self) -> LevelDescriptor:
        return LevelDescriptor(level=self.name, **self.ancestor_names())

    def has_property(self, name: str) -> bool:
        """True for own properties and for the intrinsic ones."""
        return name in INTRINSIC_PROPERTIES or name in self._properties_by_name

    def get_property(self, ref: Any) -> Property:
        """
        Get a property of this level.

        Raises:
            NoSuchPropertyError: If no property matches `ref`
        """
        prop = first_match(self.properties, ref)
        if prop is None:
            available = list(self._properties_by_name)
            raise NoSuchPropertyError(
                f"Level '{self.name}' has no property {describe_reference(ref)}."
                f"{suggestion_for(ref, available)}",
                name=ref,
                scope=f"level '{self.name}'",
            )
        return prop

    def matches(self, ref: Any) -> bool:
        """True if `ref` points to this level: the object itself, its unique
        name, full name or name, or a level descriptor."""
        if isinstance(ref, Level):
            return ref is self
        if isinstance(ref, str):
            if ref == self.unique_name or ref == self.name:
                return True
            try:
                return ref == self.full_name
            except ModelError:
                return False
        if is_level_descriptor(ref):
            descriptor = LevelDescriptor.from_format(ref)
            return self.matches(descriptor.level) and ancestors_match(
                descriptor, self.ancestor_names()
            )
        return False

    def __repr__(self) -> str:
        return f"<Level(name={self.name!r}, depth={self.depth})>"


class Hierarchy(SchemaObject):
    """Defines an ordered arrangement of levels within a dimension."""

    object_kind: ClassVar[str] = "hierarchy"

    levels: tuple[Level, ...] = Field(default_factory=tuple)

    _levels_by_name: dict[str, Level] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def link_levels(self):
        self._levels_by_name = link_children(self, self.levels, "level")
        return self

    @property
    def dimension(self) -> Dimension:
        return self._parent("dimension")

    @property
    def cube(self) -> Cube:
        return self.dimension.cube

    @property
    def full_name(self) -> str:
        return join_full_name([self.dimension.name, self.name])

    def get_level(self, ref: Any) -> Level:
        """
        Get a level of this hierarchy.

        Raises:
            NoSuchLevelError: If no level matches `ref`
        """
        level = first_match(self.levels, ref)
        if level is None:
            raise NoSuchLevelError(
                f"Hierarchy '{self.name}' has no level {describe_reference(ref)}."
                f"{suggestion_for(ref, list(self._levels_by_name))}",
                name=ref,
                scope=f"hierarchy '{self.name}'",
            )
        return level

    def matches(self, ref: Any) -> bool:
        if isinstance(ref, Hierarchy):
            return ref is self
        if isinstance(ref, str):
            if ref == self.name:
                return True
            try:
                return ref == self.full_name
            except ModelError:
                return False
        return False

    def __len__(self) -> int:
        return len(self.levels)


class Dimension(SchemaObject):
    """A set of hierarchies describing one analytical axis of a cube."""

    object_kind: ClassVar[str] = "dimension"

    dimension_type: DimensionType = Field(DimensionType.STANDARD)
    default_hierarchy_name: str | None = Field(None, alias="default_hierarchy")
    hierarchies: tuple[Hierarchy, ...] = Field(default_factory=tuple)

    _hierarchies_by_name: dict[str, Hierarchy] = PrivateAttr(default_factory=dict)

    @field_validator("dimension_type", mode="before")
    @classmethod
    def normalize_dimension_type(cls, v: Any) -> DimensionType:
        return DimensionType.parse(v)

    @model_validator(mode="after")
    def link_hierarchies(self):
        self._hierarchies_by_name = link_children(self, self.hierarchies, "hierarchy")
        return self

    @property
    def cube(self) -> Cube:
        return self._parent("cube")

    @property
    def full_name(self) -> str:
        return join_full_name([self.name])

    @property
    def default_hierarchy(self) -> Hierarchy:
        """The hierarchy named as default, or the first one."""
        hierarchy = self._hierarchies_by_name.get(self.default_hierarchy_name or "")
        if hierarchy is not None:
            return hierarchy
        if not self.hierarchies:
            raise NoSuchHierarchyError(
                f"Dimension '{self.name}' has no hierarchies",
                scope=f"dimension '{self.name}'",
            )
        return self.hierarchies[0]

    def has_hierarchy(self, name: str) -> bool:
        return name in self._hierarchies_by_name

    def get_hierarchy(self, ref: Any = None) -> Hierarchy:
        """
        Get a hierarchy by reference, or the default hierarchy when `ref` is
        empty.

        Raises:
            NoSuchHierarchyError: If no hierarchy matches `ref`
        """
        if not ref:
            return self.default_hierarchy
        hierarchy = first_match(self.hierarchies, ref)
        if hierarchy is None:
            raise NoSuchHierarchyError(
                f"Dimension '{self.name}' has no hierarchy {describe_reference(ref)}."
                f"{suggestion_for(ref, list(self._hierarchies_by_name))}",
                name=ref,
                scope=f"dimension '{self.name}'",
            )
        return hierarchy

    def level_iterator(self) -> Iterator[Level]:
        """Levels of every hierarchy, in order. Single pass."""
        for hierarchy in self.hierarchies:
            yield from hierarchy.levels

    def property_iterator(self) -> Iterator[Property]:
        """Properties of every level, in order. Single pass."""
        for level in self.level_iterator():
            yield from level.properties

    def matches(self, ref: Any) -> bool:
        if isinstance(ref, Dimension):
            return ref is self
        return isinstance(ref, str) and ref in (self.name, self.full_name)
