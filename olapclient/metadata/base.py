"""
Pydantic base class for the schema graph objects.

Schema objects are built once from the plain records delivered by a backend
adapter and are frozen afterwards. Parent links are weak references set by the
parent while it validates its children, so ownership stays top-down
(cube → dimension → hierarchy → level → property) while every object can
still navigate to its ancestors.
"""

from __future__ import annotations

import weakref
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from ..errors import ModelError, NoSuchAnnotationError

_MISSING = object()


class SchemaObject(BaseModel):
    """
    Base class for all schema graph objects.

    Provides the name, caption, annotations and uri every object published by
    a backend carries, annotation lookups and the parent link machinery.
    Equality is identity: two objects are the same entity only if they are the
    same node of the same graph.
    """

    model_config = ConfigDict(
        # Immutable after construction
        frozen=True,
        # Plain records carry backend specific keys we do not model
        extra="ignore",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    name: str = Field(..., description="Identifier, unique among siblings")
    caption: str | None = Field(None, description="Human readable label")
    annotations: dict[str, str] = Field(
        default_factory=dict, description="Free-form backend annotations"
    )
    uri: str = Field("", description="Address of the object in its server")

    _parent_ref: weakref.ReferenceType | None = PrivateAttr(default=None)

    # Human readable kind used in error messages
    object_kind: ClassVar[str] = "object"

    @model_validator(mode="before")
    @classmethod
    def default_caption(cls, data: Any) -> Any:
        """Use the name as caption when the backend does not publish one."""
        if isinstance(data, dict) and not data.get("caption") and data.get("name"):
            data = {**data, "caption": data["name"]}
        return data

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that name is a non-empty string."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("name must be a non-empty string")
        return v

    @field_validator("annotations", mode="before")
    @classmethod
    def validate_annotations(cls, v: Any) -> dict[str, str]:
        """Annotations are a string map, missing annotations are empty."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            raise ValueError("annotations must be a dictionary")
        return {str(key): str(value) for key, value in v.items() if value is not None}

    # Parent links
    # ------------

    def _attach(self, parent: SchemaObject) -> None:
        """Set the parent back-reference. A child belongs to one parent."""
        current = self._parent_ref() if self._parent_ref is not None else None
        if current is not None and current is not parent:
            raise ModelError(
                f"{self.object_kind.capitalize()} '{self.name}' already belongs to "
                f"{current.object_kind} '{current.name}'"
            )
        self._parent_ref = weakref.ref(parent)

    def _parent(self, kind: str) -> Any:
        """Return the parent object or raise when the object is detached."""
        parent = self._parent_ref() if self._parent_ref is not None else None
        if parent is None:
            raise ModelError(
                f"{self.object_kind.capitalize()} '{self.name}' doesn't have an "
                f"associated parent {kind}"
            )
        return parent

    @property
    def is_attached(self) -> bool:
        return self._parent_ref is not None and self._parent_ref() is not None

    # Annotations
    # -----------

    def get_annotation(self, key: str, default: Any = _MISSING) -> Any:
        """
        Get an annotation value.

        Args:
            key: Annotation name
            default: Value returned when the annotation is missing

        Raises:
            NoSuchAnnotationError: If the annotation is missing and no default
                was given
        """
        try:
            return self.annotations[key]
        except KeyError:
            if default is not _MISSING:
                return default
            raise NoSuchAnnotationError(
                f"Annotation '{key}' does not exist in {self.object_kind} '{self.name}'",
                name=key,
                scope=f"{self.object_kind} '{self.name}'",
            ) from None

    def get_locale_annotation(self, key: str, locale: str, default: Any = _MISSING) -> Any:
        """Get the `locale` variant of an annotation (``key_locale``),
        falling back to the plain annotation."""
        localized = self.annotations.get(f"{key}_{locale}")
        if localized is not None:
            return localized
        return self.get_annotation(key, default)

    def to_dict(self, **options: Any) -> dict[str, Any]:
        """Plain record of this object, the inverse of model validation."""
        return self.model_dump(exclude_none=True, by_alias=True, **options)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name!r})>"
