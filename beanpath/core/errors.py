# beanpath/core/errors.py
"""
Error taxonomy for property-path resolution.

Every error carries the full `path` being resolved and the `segment` (bare
property name, possibly with its index) where resolution failed.

The resolver and adapters always raise; leniency lives only in the façade's
silent entry points, which catch BeanPathError as a whole.
"""

from __future__ import annotations

from typing import Optional


class BeanPathError(RuntimeError):
    """Base class for every failure raised while resolving a property path."""

    def __init__(self, message: str, *, path: Optional[str] = None, segment: Optional[str] = None) -> None:
        self.path = path
        self.segment = segment
        if path is not None:
            message = f"{message} (path: {path!r})"
        super().__init__(message)


class PropertyNotFoundError(BeanPathError):
    """No accessor for the name and the bean is not a mapping."""


class InvalidIndexError(BeanPathError):
    """Malformed index text (not an integer where one is required, unbalanced bracket)."""


class IndexOutOfRangeError(InvalidIndexError):
    """Index outside the bounds of a list/array on a non-forced access."""


class NullIntermediateError(BeanPathError):
    """An index (or a nested step) was applied to a None value."""


class NotIndexableError(BeanPathError):
    """An index was applied to a value that is not an array, list or map."""


class AccessorInvocationError(BeanPathError):
    """A getter or setter raised; the original exception is chained as __cause__."""


class ElementConstructionError(BeanPathError):
    """Forced creation of a property value or container element failed."""


class TypeConversionError(BeanPathError):
    """A value could not be coerced to the declared element/key type."""


__all__ = [
    "BeanPathError",
    "PropertyNotFoundError",
    "InvalidIndexError",
    "IndexOutOfRangeError",
    "NullIntermediateError",
    "NotIndexableError",
    "AccessorInvocationError",
    "ElementConstructionError",
    "TypeConversionError",
]
