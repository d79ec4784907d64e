"""Wire dialects: translate queries to backend parameters and back."""

# Import dialects to trigger registration
from . import aggregate as _aggregate  # noqa: F401
from . import logiclayer as _logiclayer  # noqa: F401
from . import records as _records  # noqa: F401
from .aggregate import AggregateDialect
from .base import Dialect, DialectCapabilities
from .logiclayer import LogicLayerDialect
from .records import RecordsDialect
from .registry import DialectRegistry

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "DialectRegistry",
    "AggregateDialect",
    "LogicLayerDialect",
    "RecordsDialect",
]
