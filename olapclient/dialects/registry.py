"""Name to class table of the wire dialects.

Dialect modules register their class at import time::

    @DialectRegistry.register
    class RecordsDialect(Dialect):
        ...

and callers pick one by the name a server advertises::

    DialectRegistry.get("logiclayer").serialize(query)
"""

from __future__ import annotations

from collections.abc import Callable

from ..errors import InternalError, NoSuchDialectError
from .base import Dialect


class DialectRegistry:
    """Dialect classes keyed by their lowercase `name`."""

    _dialects: dict[str, type[Dialect]] = {}

    @classmethod
    def register(
        cls, dialect_class: type[Dialect] | None = None, *, replace: bool = False
    ) -> type[Dialect] | Callable[[type[Dialect]], type[Dialect]]:
        """
        Add `dialect_class` under the name its instances report. Usable as a
        bare decorator or as ``@DialectRegistry.register(replace=True)``.

        Raises:
            InternalError: If another class already holds the name and
                `replace` is false
        """

        def decorator(dialect_class: type[Dialect]) -> type[Dialect]:
            name = dialect_class().name.lower()
            current = cls._dialects.get(name)
            if current is not None and current is not dialect_class and not replace:
                raise InternalError(
                    f"Dialect name '{name}' is taken by {current.__name__}, "
                    f"can not register {dialect_class.__name__}"
                )
            cls._dialects[name] = dialect_class
            return dialect_class

        if dialect_class is None:
            return decorator
        return decorator(dialect_class)

    @classmethod
    def get(cls, name: str) -> Dialect:
        """A fresh instance of the dialect called `name`."""
        try:
            dialect_class = cls._dialects[name.lower()]
        except KeyError:
            raise NoSuchDialectError(
                f"No dialect named '{name}' (known dialects: {', '.join(cls.available())})",
                name=name,
                scope="dialects",
            ) from None
        return dialect_class()

    @classmethod
    def available(cls) -> list[str]:
        return sorted(cls._dialects)
