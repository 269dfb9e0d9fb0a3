# beanpath/core/conversion.py
"""
Value coercion + element instantiation

Converter contract
- convert(value, target_type) -> coerced value
- Raises TypeConversionError when no viable conversion exists.

Default converter (TypeConverter)
- pydantic v2 TypeAdapter in lax mode, so "3" -> 3 and "1.5" -> 1.5.
- Numbers are accepted for `str` targets (coerce_numbers_to_str).
- None and values that already are instances of a plain target class pass
  through untouched.

new_instance(tp)
- Builds the value the resolver stores when forced mode meets a missing slot:
  unknown types -> {}, typed containers -> empty container of their runtime
  class, numpy arrays -> empty object array, anything else -> tp().
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Optional, Protocol

import numpy as np
from pydantic import ConfigDict, TypeAdapter, ValidationError

from beanpath.core.errors import ElementConstructionError, TypeConversionError
from beanpath.core.introspection import is_unknown_type, raw_type


class Converter(Protocol):
    def convert(self, value: Any, target_type: Any) -> Any:
        ...


class TypeConverter:
    """pydantic-backed converter; adapters are built per target type and reused."""

    def __init__(self) -> None:
        self._adapters: Dict[Any, TypeAdapter] = {}

    def _adapter(self, target_type: Any) -> TypeAdapter:
        try:
            return self._adapters[target_type]
        except (KeyError, TypeError):
            pass
        if target_type is str:
            adapter = TypeAdapter(str, config=ConfigDict(coerce_numbers_to_str=True))
        else:
            adapter = TypeAdapter(target_type)
        try:
            self._adapters[target_type] = adapter
        except TypeError:
            # unhashable annotation
            pass
        return adapter

    def convert(self, value: Any, target_type: Any) -> Any:
        if value is None or is_unknown_type(target_type):
            return value
        cls = raw_type(target_type)
        if cls is not None and cls is target_type and isinstance(value, cls):
            return value
        try:
            return self._adapter(target_type).validate_python(value)
        except ValidationError as ex:
            raise TypeConversionError(
                f"Cannot convert {value!r} to {getattr(target_type, '__name__', target_type)}"
            ) from ex


def new_instance(tp: Any, *, path: Optional[str] = None, segment: Optional[str] = None) -> Any:
    """Instantiate a default value for a declared type ({} when the type is unknown)."""
    cls = None if is_unknown_type(tp) else raw_type(tp)
    if cls is None or cls is object:
        return {}
    if cls is np.ndarray:
        return np.empty(0, dtype=object)
    if inspect.isabstract(cls):
        # abstract collection annotations get the concrete builtin
        if issubclass(cls, Mapping):
            return {}
        if issubclass(cls, Sequence) and not issubclass(cls, (str, bytes)):
            return []
    try:
        return cls()
    except Exception as ex:
        raise ElementConstructionError(
            f"Unable to create instance of {cls.__name__}", path=path, segment=segment
        ) from ex


__all__ = ["Converter", "TypeConverter", "new_instance"]
