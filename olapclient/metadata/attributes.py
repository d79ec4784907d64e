"""
Level properties and cube measures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, field_validator, model_validator

from ..enums import AggregatorType
from ..errors import ModelError
from .base import SchemaObject
from .matching import PropertyDescriptor, ancestors_match, is_property_descriptor

if TYPE_CHECKING:
    from .cube import Cube
    from .dimension import Dimension, Hierarchy, Level


class Property(SchemaObject):
    """An attribute of the members of a level (a label, a code, a
    translated name...)."""

    object_kind: ClassVar[str] = "property"

    unique_name: str | None = Field(None, description="Backend unique name")
    caption_set: str | None = Field(
        None, description="Name of the caption set this property belongs to"
    )

    @model_validator(mode="before")
    @classmethod
    def default_unique_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            data = {"name": data}
        if isinstance(data, dict) and not data.get("unique_name") and data.get("name"):
            data = {**data, "unique_name": data["name"]}
        return data

    @property
    def level(self) -> Level:
        return self._parent("level")

    @property
    def hierarchy(self) -> Hierarchy:
        return self.level.hierarchy

    @property
    def dimension(self) -> Dimension:
        return self.level.dimension

    @property
    def cube(self) -> Cube:
        return self.level.cube

    @property
    def full_name(self) -> str:
        """Level full name plus the property name."""
        return f"{self.level.full_name}.{self.name}"

    @property
    def descriptor(self) -> PropertyDescriptor:
        if not self.is_attached:
            return PropertyDescriptor(property=self.name)
        level_descriptor = self.level.descriptor
        return PropertyDescriptor(property=self.name, **level_descriptor.to_dict())

    def matches(self, ref: Any) -> bool:
        """True if `ref` points to this property: the object itself, its
        unique name, full name or name, or a property descriptor."""
        if isinstance(ref, Property):
            return ref is self
        if isinstance(ref, str):
            if ref == self.unique_name or ref == self.name:
                return True
            try:
                return ref == self.full_name
            except ModelError:
                return False
        if is_property_descriptor(ref):
            descriptor = PropertyDescriptor.from_format(ref)
            if not self.matches(descriptor.property):
                return False
            has_ancestors = descriptor.level is not None or any(
                getattr(descriptor, field) is not None
                for field in ("hierarchy", "dimension", "cube", "server")
            )
            if not has_ancestors:
                return True
            if not self.is_attached:
                return False
            level = self.level
            if descriptor.level is not None and descriptor.level not in (
                level.name,
                level.unique_name,
            ):
                return False
            return ancestors_match(descriptor, level.ancestor_names())
        return False


class Measure(SchemaObject):
    """A numeric value of the cube facts, aggregated with
    `aggregator_type`."""

    object_kind: ClassVar[str] = "measure"

    aggregator_type: AggregatorType = Field(
        AggregatorType.UNKNOWN, description="Aggregation function"
    )

    @field_validator("aggregator_type", mode="before")
    @classmethod
    def normalize_aggregator(cls, v: Any) -> AggregatorType:
        return AggregatorType.parse(v)

    @property
    def cube(self) -> Cube:
        return self._parent("cube")

    @property
    def full_name(self) -> str:
        return self.name

    def matches(self, ref: Any) -> bool:
        if isinstance(ref, Measure):
            return ref is self
        return isinstance(ref, str) and ref == self.name
