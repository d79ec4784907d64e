"""Abstract base dialect with capability flags and shared wire helpers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias
from urllib.parse import urlencode

from ..common import ensure_list, split_tokens
from ..errors import ArgumentError, MissingObjectError
from ..logging import get_logger
from ..metadata import Level, Property
from ..query import apply_parse_url_rules, params_from_url

if TYPE_CHECKING:
    from ..query import Query

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "WireParams",
    "WireValue",
    "localized_property",
    "split_operands",
]

WireValue: TypeAlias = str | int | bool | list[str]
WireParams: TypeAlias = dict[str, WireValue]

# Commas outside brackets separate operands: "[A].[B,C].[D],Value"
RE_OPERAND_SEPARATOR = re.compile(r",(?![^\[]*\])")


@dataclass
class DialectCapabilities:
    """Flags indicating which query features a dialect can express. Features
    a dialect can not express are omitted when serializing."""

    supports_captions: bool = True
    supports_properties: bool = True
    supports_exclusive_cuts: bool = True
    supports_filters: bool = True
    supports_calculations: bool = True
    supports_sorting: bool = True
    supports_pagination: bool = True
    supports_time: bool = False
    supports_format: bool = False
    supports_locale: bool = True


def localized_property(level: Level, locale: str) -> Property | None:
    """The property of `level` holding the labels in `locale`, found by a
    two-letter prefix or suffix in its name (``"ES Name"``, ``"Name ES"``)."""
    prefix = (locale or "")[:2]
    if not prefix:
        return None
    tester = re.compile(rf"^{re.escape(prefix)}\s|\s{re.escape(prefix)}$", re.IGNORECASE)
    for prop in level.properties:
        if tester.search(prop.name):
            return prop
    return None


def split_operands(value: str) -> list[str]:
    """Split comma separated operands, keeping bracketed names whole."""
    return [token.strip() for token in RE_OPERAND_SEPARATOR.split(value) if token.strip()]


class Dialect(ABC):
    """Abstract base for the wire dialects.

    A dialect translates a :class:`~olapclient.query.Query` into the query
    parameters of one family of backends, and back. Neither direction performs
    any I/O.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def capabilities(self) -> DialectCapabilities: ...

    @abstractmethod
    def serialize(self, query: Query) -> WireParams:
        """Return the parameters for `query`. Unset features are omitted."""

    @abstractmethod
    def parse(self, query: Query, params: Mapping[str, Any]) -> Query:
        """Apply `params` to `query` and return it. Unknown keys and
        references that can not be resolved are skipped."""

    @property
    def logger(self):
        return get_logger()

    def stringify(self, query: Query) -> str:
        """Url-encoded parameters of `query`, with sorted keys."""
        pairs: list[tuple[str, str]] = []
        for key, value in sorted(self.serialize(query).items()):
            for item in ensure_list(value):
                if isinstance(item, bool):
                    item = "true" if item else "false"
                pairs.append((key, str(item)))
        return urlencode(pairs)

    def parse_url(
        self,
        query: Query,
        url: str,
        include: Iterable[str] | None = None,
        exclude: Iterable[str] | None = None,
        filter: Callable[[str, Any], bool] | None = None,
    ) -> Query:
        """Parse the query parameters of `url` into `query`."""
        params = apply_parse_url_rules(
            params_from_url(url), include=include, exclude=exclude, filter=filter
        )
        return self.parse(query, params)

    def _apply(
        self, key: str, value: Any, apply: Callable[[Any], Any], split: bool = True
    ) -> None:
        """Run `apply` for each token of `value`, skipping the tokens that
        can not be applied. With `split` false, each value of a repeated
        parameter is a single token."""
        if split:
            tokens = self._tokens(value)
        else:
            tokens = [str(item) for item in ensure_list(value) if item not in (None, "")]
        for token in tokens:
            try:
                apply(token)
            except (MissingObjectError, ArgumentError) as e:
                self.logger.debug(
                    "%s dialect: skipping parameter %s=%r: %s", self.name, key, token, e
                )

    def _tokens(self, value: Any) -> list[str]:
        return split_tokens(value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name!r})>"
