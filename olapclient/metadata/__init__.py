"""Schema graph: cubes, dimensions, hierarchies, levels, properties,
measures, named sets and members."""

from .attributes import Measure, Property
from .base import SchemaObject
from .cube import Cube, NamedSet
from .dimension import INTRINSIC_PROPERTIES, Dimension, Hierarchy, Level
from .matching import (
    LevelDescriptor,
    PropertyDescriptor,
    describe_reference,
    first_match,
    is_level_descriptor,
    is_property_descriptor,
    link_children,
)
from .member import Member

__all__ = [
    "SchemaObject",
    "Cube",
    "NamedSet",
    "Dimension",
    "Hierarchy",
    "Level",
    "Property",
    "Measure",
    "Member",
    "INTRINSIC_PROPERTIES",
    "LevelDescriptor",
    "PropertyDescriptor",
    "describe_reference",
    "first_match",
    "is_level_descriptor",
    "is_property_descriptor",
    "link_children",
]
