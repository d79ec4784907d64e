"""
Cube and NamedSet, the roots of the schema graph.

A cube is built once from the plain record a backend adapter produces (see
:mod:`olapclient.adapters`) and never changes afterwards. Queries created by
:attr:`Cube.query` resolve every reference through the lookups defined here.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, PrivateAttr, ValidationError, model_validator

from ..enums import DimensionType
from ..errors import (
    ArgumentError,
    ModelError,
    NoSuchDimensionError,
    NoSuchHierarchyError,
    NoSuchLevelError,
    NoSuchMeasureError,
    NoSuchNamedSetError,
    NoSuchPropertyError,
)
from ..logging import get_logger
from .attributes import Measure, Property
from .base import SchemaObject
from .dimension import Dimension, Hierarchy, Level
from .matching import (
    LevelDescriptor,
    describe_reference,
    first_match,
    link_children,
    suggestion_for,
)

if TYPE_CHECKING:
    from ..query import Query

__all__ = ["Cube", "NamedSet"]


class NamedSet(SchemaObject):
    """A predefined set of members of one level, usable as a drillable."""

    object_kind: ClassVar[str] = "namedset"

    dimension_name: str | None = Field(None, alias="dimension")
    hierarchy_name: str | None = Field(None, alias="hierarchy")
    level_name: str = Field(..., alias="level")

    _level: Level | None = PrivateAttr(default=None)

    @property
    def cube(self) -> Cube:
        return self._parent("cube")

    @property
    def level(self) -> Level:
        """The level this set draws its members from."""
        if self._level is None:
            raise ModelError(f"Named set '{self.name}' is not resolved to a level")
        return self._level

    @property
    def full_name(self) -> str:
        return self.name

    @property
    def unique_name(self) -> str:
        return self.name

    def _resolve(self, cube: Cube) -> None:
        descriptor = LevelDescriptor(
            level=self.level_name,
            hierarchy=self.hierarchy_name,
            dimension=self.dimension_name,
        )
        try:
            self._level = cube.get_level(descriptor)
        except NoSuchLevelError as e:
            raise ModelError(
                f"Named set '{self.name}' of cube '{cube.name}' points to an "
                f"unknown level: {e}"
            ) from e

    def matches(self, ref: Any) -> bool:
        if isinstance(ref, NamedSet):
            return ref is self
        return isinstance(ref, str) and ref == self.name


class Cube(SchemaObject):
    """
    An analytical cube as published by a server: dimensions to drill and
    slice by, measures to aggregate, and named sets.

    Construct it with :meth:`Cube.from_plain`. Child objects are linked to
    their parents during validation, so any level or property obtained from
    a cube can navigate back up to it as long as the cube is alive.
    """

    object_kind: ClassVar[str] = "cube"

    server: str = Field("", description="Address of the server publishing the cube")
    dimensions: tuple[Dimension, ...] = Field(default_factory=tuple)
    measures: tuple[Measure, ...] = Field(default_factory=tuple)
    namedsets: tuple[NamedSet, ...] = Field(default_factory=tuple, alias="named_sets")

    _dimensions: dict[str, Dimension] = PrivateAttr(default_factory=dict)
    _measures: dict[str, Measure] = PrivateAttr(default_factory=dict)
    _namedsets: dict[str, NamedSet] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def link_schema(self):
        """Link the children and resolve the named sets."""
        self._dimensions = link_children(self, self.dimensions, "dimension")
        self._measures = link_children(self, self.measures, "measure")
        self._namedsets = link_children(self, self.namedsets, "named set")
        for namedset in self.namedsets:
            namedset._resolve(self)

        get_logger().debug(
            "cube '%s' linked: %d dimensions, %d measures, %d named sets",
            self.name,
            len(self.dimensions),
            len(self.measures),
            len(self.namedsets),
        )
        return self

    @classmethod
    def from_plain(cls, record: dict[str, Any]) -> Cube:
        """
        Create a cube from a plain record.

        Raises:
            ArgumentError: If `record` is not a dictionary
            ModelError: If the record is not a valid cube
        """
        if not isinstance(record, dict):
            raise ArgumentError(f"Invalid cube record type: {type(record)}")
        try:
            return cls.model_validate(record)
        except ValidationError as e:
            raise ModelError(f"Failed to create cube '{record.get('name')}': {e}") from e

    @property
    def query(self) -> Query:
        """A new, empty query bound to this cube."""
        from ..query import Query

        return Query(self)

    # Dimensions
    # ----------

    def has_dimension(self, name: str) -> bool:
        return name in self._dimensions

    def get_dimension(self, ref: Any) -> Dimension:
        """
        Get a dimension by name or object.

        Raises:
            NoSuchDimensionError: If no dimension matches `ref`
        """
        dimension = first_match(self.dimensions, ref)
        if dimension is None:
            raise NoSuchDimensionError(
                f"Cube '{self.name}' has no dimension {describe_reference(ref)}."
                f"{suggestion_for(ref, list(self._dimensions))}",
                name=ref,
                scope=f"cube '{self.name}'",
            )
        return dimension

    def find_dimensions_by_type(self, dimension_type: Any) -> list[Dimension]:
        dimension_type = DimensionType.parse(dimension_type)
        return [dim for dim in self.dimensions if dim.dimension_type == dimension_type]

    @property
    def standard_dimensions(self) -> list[Dimension]:
        return self.find_dimensions_by_type(DimensionType.STANDARD)

    @property
    def time_dimension(self) -> Dimension:
        """The first time dimension of the cube."""
        return self._first_of_type(DimensionType.TIME)

    @property
    def geo_dimension(self) -> Dimension:
        """The first geographic dimension of the cube."""
        return self._first_of_type(DimensionType.GEO)

    def _first_of_type(self, dimension_type: DimensionType) -> Dimension:
        found = self.find_dimensions_by_type(dimension_type)
        if not found:
            raise NoSuchDimensionError(
                f"Cube '{self.name}' has no {dimension_type.value} dimension",
                name=dimension_type.value,
                scope=f"cube '{self.name}'",
            )
        return found[0]

    # Hierarchies, levels and properties
    # ----------------------------------

    def hierarchy_iterator(self) -> Iterator[Hierarchy]:
        for dimension in self.dimensions:
            yield from dimension.hierarchies

    def level_iterator(self) -> Iterator[Level]:
        """All levels of the cube in declaration order. Single pass."""
        for dimension in self.dimensions:
            yield from dimension.level_iterator()

    def property_iterator(self) -> Iterator[Property]:
        """All level properties of the cube in declaration order. Single
        pass."""
        for dimension in self.dimensions:
            yield from dimension.property_iterator()

    def get_hierarchy(self, ref: Any) -> Hierarchy:
        """
        Get a hierarchy by name, full name or object.

        Raises:
            NoSuchHierarchyError: If no hierarchy matches `ref`
        """
        hierarchy = first_match(self.hierarchy_iterator(), ref)
        if hierarchy is None:
            available = [item.name for item in self.hierarchy_iterator()]
            raise NoSuchHierarchyError(
                f"Cube '{self.name}' has no hierarchy {describe_reference(ref)}."
                f"{suggestion_for(ref, available)}",
                name=ref,
                scope=f"cube '{self.name}'",
            )
        return hierarchy

    def has_level(self, ref: Any) -> bool:
        return first_match(self.level_iterator(), ref) is not None

    def get_level(self, ref: Any) -> Level:
        """
        Get a level by object, unique name, full name, name or level
        descriptor. The first level in declaration order wins.

        Raises:
            NoSuchLevelError: If no level matches `ref`
        """
        level = first_match(self.level_iterator(), ref)
        if level is None:
            available = [item.name for item in self.level_iterator()]
            raise NoSuchLevelError(
                f"Cube '{self.name}' has no level {describe_reference(ref)}."
                f"{suggestion_for(ref, available)}",
                name=ref,
                scope=f"cube '{self.name}'",
            )
        return level

    def has_property(self, ref: Any) -> bool:
        return first_match(self.property_iterator(), ref) is not None

    def get_property(self, ref: Any) -> Property:
        """
        Get a level property by object, unique name, full name, name or
        property descriptor.

        Raises:
            NoSuchPropertyError: If no property matches `ref`
        """
        prop = first_match(self.property_iterator(), ref)
        if prop is None:
            available = [item.name for item in self.property_iterator()]
            raise NoSuchPropertyError(
                f"Cube '{self.name}' has no property {describe_reference(ref)}."
                f"{suggestion_for(ref, available)}",
                name=ref,
                scope=f"cube '{self.name}'",
            )
        return prop

    # Measures and named sets
    # -----------------------

    def has_measure(self, name: str) -> bool:
        return name in self._measures

    def get_measure(self, ref: Any) -> Measure:
        """
        Get a measure by name or object.

        Raises:
            NoSuchMeasureError: If no measure matches `ref`
        """
        measure = first_match(self.measures, ref)
        if measure is None:
            raise NoSuchMeasureError(
                f"Cube '{self.name}' has no measure {describe_reference(ref)}."
                f"{suggestion_for(ref, list(self._measures))}",
                name=ref,
                scope=f"cube '{self.name}'",
            )
        return measure

    @property
    def default_measure(self) -> Measure:
        """The measure named by the ``default`` annotation, else the first
        measure."""
        name = self.annotations.get("default")
        if name and name in self._measures:
            return self._measures[name]
        if not self.measures:
            raise NoSuchMeasureError(
                f"Cube '{self.name}' has no measures", scope=f"cube '{self.name}'"
            )
        return self.measures[0]

    def has_named_set(self, name: str) -> bool:
        return name in self._namedsets

    def get_named_set(self, ref: Any) -> NamedSet:
        """
        Get a named set by name or object.

        Raises:
            NoSuchNamedSetError: If no named set matches `ref`
        """
        namedset = first_match(self.namedsets, ref)
        if namedset is None:
            raise NoSuchNamedSetError(
                f"Cube '{self.name}' has no named set {describe_reference(ref)}."
                f"{suggestion_for(ref, list(self._namedsets))}",
                name=ref,
                scope=f"cube '{self.name}'",
            )
        return namedset
