"""Exceptions used in olapclient.

The base exception class is :class:`.OlapClientError`."""

from collections import OrderedDict

__all__ = [
    "OlapClientError",
    "UserError",
    "InternalError",
    "ConfigurationError",
    "ModelError",
    "MissingObjectError",
    "NoSuchCubeError",
    "NoSuchDimensionError",
    "NoSuchHierarchyError",
    "NoSuchLevelError",
    "NoSuchPropertyError",
    "NoSuchMeasureError",
    "NoSuchNamedSetError",
    "NoSuchAnnotationError",
    "NoSuchDialectError",
    "ArgumentError",
]


class OlapClientError(Exception):
    """Generic error class."""


class UserError(OlapClientError):
    """Superclass for all errors caused by the library users: unresolvable
    references, malformed query arguments. Messages of these errors can be
    passed to a front-end."""

    error_type = "unknown_user_error"


class InternalError(OlapClientError):
    """Superclass for all errors that happened internally: configuration
    issues, inconsistent schema records..."""

    error_type = "internal_error"


class ConfigurationError(InternalError):
    """Raised when the settings can not be used."""


class ModelError(InternalError):
    """Raised when a plain schema record can not be turned into a schema
    object, or when the object graph would become inconsistent."""


class MissingObjectError(UserError):
    """Raised when a reference can not be resolved against the schema graph.

    `name` is the attempted reference and `scope` names the object that was
    searched (for example ``"cube 'sales'"``)."""

    error_type = "missing_object"
    object_type = None

    def __init__(self, message=None, name=None, scope=None):
        super().__init__(message or name)
        self.message = message
        self.name = name
        self.scope = scope

    def __str__(self):
        return self.message or str(self.name)

    def to_dict(self):
        d = OrderedDict()
        d["object"] = self.name
        d["message"] = self.message
        if self.object_type:
            d["object_type"] = self.object_type
        if self.scope:
            d["scope"] = self.scope

        return d


class NoSuchCubeError(MissingObjectError):
    """Raised when an unknown cube is requested."""

    object_type = "cube"


class NoSuchDimensionError(MissingObjectError):
    """Raised when an unknown dimension is requested."""

    object_type = "dimension"


class NoSuchHierarchyError(MissingObjectError):
    """Raised when an unknown hierarchy is requested."""

    object_type = "hierarchy"


class NoSuchLevelError(MissingObjectError):
    """Raised when no level matches a level reference."""

    object_type = "level"


class NoSuchPropertyError(MissingObjectError):
    """Raised when no level property matches a property reference."""

    object_type = "property"


class NoSuchMeasureError(MissingObjectError):
    """Raised when an unknown measure is requested."""

    object_type = "measure"


class NoSuchNamedSetError(MissingObjectError):
    """Raised when an unknown named set is requested."""

    object_type = "namedset"


class NoSuchAnnotationError(MissingObjectError):
    """Raised when an annotation is requested without a default value and
    the object does not have it."""

    object_type = "annotation"


class NoSuchDialectError(MissingObjectError):
    """Raised when a requested dialect is not registered."""

    object_type = "dialect"


class ArgumentError(UserError):
    """Raised when an invalid or conflicting function argument is supplied."""

    error_type = "argument"
