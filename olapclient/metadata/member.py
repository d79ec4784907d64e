"""
Level members.

Members are not part of the static schema graph: backends return them on
demand, and the adapters turn each response into plain member records.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import Field, ValidationError, model_validator

from ..errors import ModelError
from .base import SchemaObject

if TYPE_CHECKING:
    from .cube import Cube
    from .dimension import Level

__all__ = ["Member"]


class Member(SchemaObject):
    """An element of a level, with its ancestors and children when the
    backend includes them."""

    object_kind: ClassVar[str] = "member"

    key: str | int = Field(..., description="Identifier used in cuts")
    full_name: str = Field("", description="Backend full name of the member")
    parent_name: str | None = Field(None, description="Name of the parent member")
    depth: int | None = Field(None, ge=0)
    level_name: str = Field("", alias="level")
    num_children: int | None = Field(None, ge=0)
    ancestors: tuple[Member, ...] = Field(default_factory=tuple)
    children: tuple[Member, ...] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def default_name(cls, data: Any) -> Any:
        """Some backends omit the name of a member, use its key."""
        if isinstance(data, dict) and not data.get("name") and data.get("key") is not None:
            data = {**data, "name": str(data["key"])}
            if not data.get("caption"):
                data["caption"] = data["name"]
        return data

    @classmethod
    def from_plain(cls, record: dict[str, Any], level: Level | None = None) -> Member:
        """
        Create a member, and its relatives, from a plain member record and
        link them to `level`.

        Raises:
            ModelError: If the record is not a valid member
        """
        try:
            member = cls.model_validate(record)
        except ValidationError as e:
            raise ModelError(f"Failed to create member: {e}") from e
        if level is not None:
            member._link_level(level)
        return member

    def _link_level(self, level: Level) -> None:
        self._attach(level)
        for relative in self.ancestors + self.children:
            relative._link_level(level)

    @property
    def level(self) -> Level:
        return self._parent("level")

    @property
    def cube(self) -> Cube:
        return self.level.cube

    def matches(self, ref: Any) -> bool:
        if isinstance(ref, Member):
            return ref is self
        return ref == self.key or (isinstance(ref, str) and ref == str(self.key))
