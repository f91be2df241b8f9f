"""
esmapper Exceptions
===================

Every error raised by the registry derives from MapperError. The concrete
classes also subclass the closest builtin so callers can catch them either way.
"""


class MapperError(Exception):
    """Base exception for mapper-related errors."""


class InvalidIndexName(MapperError, ValueError):
    """Exception raised when an index name is empty or not a string."""


class FieldConfigError(MapperError, ValueError):
    """Exception raised when a per-field override or sampling config is invalid."""


class IndexNotFound(MapperError, LookupError):
    """Exception raised when an index is not registered."""


class TypeNotFound(MapperError, LookupError):
    """Exception raised when a type is not registered under an index."""


class DynamicMappingStateError(MapperError, RuntimeError):
    """Exception raised when a dynamic-mapping operation is used at the wrong control level."""


class MappingCancelled(MapperError):
    """Exception raised inside a collection task after it was cancelled."""
