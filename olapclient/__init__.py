"""OLAP client: schema graph, canonical queries and wire dialects"""

__version__ = "1.1"

from .common import *
from .errors import *
from .enums import *
from .metadata import *
from .query import *
from .dialects import *
from .settings import *
from .logging import *
