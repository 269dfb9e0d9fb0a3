# beanpath/core/introspection.py
"""
Accessor discovery (getter/setter handles for named properties)

Intent
- Give the resolver one small contract for "does this bean expose property X":
    find_getter(bean, name, declared) -> Getter | None
    find_setter(bean, name, declared) -> Setter | None
- Report declared types so the resolver can coerce container elements and
  instantiate missing values.

Default implementation (AttributeIntrospector)
- Accessors are data attributes only:
  - `property` objects (getter needs fget, setter needs fset)
  - slots and other data descriptors
  - plain class attributes and instance attributes (`vars(bean)`)
  - annotated names (dataclass fields, pydantic model fields, typed class
    attributes); an annotated name without a value is a setter only
- Methods, classmethods and staticmethods are never accessors.
- Dunder names are never accessors; `_private` names need declared=True.

Type extraction
- Declared types come from pydantic `model_fields`, `typing.get_type_hints`
  on the class, or the property's fget/fset annotations.
- Optional[X] unwraps to X; other unions and unresolved forward references
  count as unknown (None).
"""

from __future__ import annotations

import inspect
import types
import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Tuple

import numpy as np
from pydantic import BaseModel

_UNION_TYPES: Tuple[Any, ...] = tuple(t for t in (typing.Union, getattr(types, "UnionType", None)) if t is not None)


# -------------------------------------------------------------------------------------------------
# Type helpers
# -------------------------------------------------------------------------------------------------
def is_unknown_type(tp: Any) -> bool:
    """True for types that carry no information (None, Any, object, TypeVar)."""
    return tp is None or tp is Any or tp is object or isinstance(tp, typing.TypeVar)


def _strip(tp: Any) -> Any:
    """Unwrap Annotated[...] and Optional[...]; ambiguous unions become None."""
    while True:
        origin = typing.get_origin(tp)
        if origin is typing.Annotated:
            tp = typing.get_args(tp)[0]
            continue
        if origin in _UNION_TYPES:
            args = [a for a in typing.get_args(tp) if a is not type(None)]
            if len(args) != 1:
                return None
            tp = args[0]
            continue
        return tp


def raw_type(tp: Any) -> Optional[type]:
    """Runtime class behind an annotation: List[int] -> list, Optional[Foo] -> Foo."""
    tp = _strip(tp)
    if is_unknown_type(tp) or isinstance(tp, str):
        return None
    origin = typing.get_origin(tp)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    return tp if isinstance(tp, type) else None


def element_types(tp: Any) -> Tuple[Any, Any]:
    """
    (key_type, component_type) of a container annotation.

    Dict[str, int] -> (str, int); List[Foo] -> (None, Foo); Tuple[int, ...] -> (None, int).
    Anything else -> (None, None).
    """
    tp = _strip(tp)
    origin = typing.get_origin(tp)
    if not isinstance(origin, type):
        return None, None
    args = typing.get_args(tp)
    if issubclass(origin, Mapping) and len(args) == 2:
        return args[0], args[1]
    if issubclass(origin, Sequence) and args:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return None, None
        return None, args[0]
    if origin is np.ndarray and len(args) == 2:
        # ndarray[shape, dtype[X]]
        dtype_args = typing.get_args(args[1])
        return None, dtype_args[0] if dtype_args else None
    return None, None


def _class_hints(cls: type) -> Dict[str, Any]:
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return {name: f.annotation for name, f in cls.model_fields.items()}
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except Exception:
        # unresolved forward references: fall back to raw, possibly string, annotations
        hints: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            hints.update(getattr(klass, "__annotations__", {}) or {})
        return hints


def _fn_hints(fn: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(fn, include_extras=True)
    except Exception:
        return dict(getattr(fn, "__annotations__", {}) or {})


# -------------------------------------------------------------------------------------------------
# Accessor handles
# -------------------------------------------------------------------------------------------------
@dataclass(frozen=True)
class _Accessor:
    name: str
    declared_type: Any = None

    @property
    def raw_type(self) -> Optional[type]:
        return raw_type(self.declared_type)

    @property
    def component_type(self) -> Any:
        """Element type for sequences/arrays, value type for mappings (None if unknown)."""
        comp = element_types(self.declared_type)[1]
        return None if is_unknown_type(comp) else comp

    @property
    def key_type(self) -> Any:
        key = element_types(self.declared_type)[0]
        return None if is_unknown_type(key) else key


@dataclass(frozen=True)
class Getter(_Accessor):
    """Read handle: invoke(bean) -> value."""

    def invoke(self, bean: Any) -> Any:
        return getattr(bean, self.name)


@dataclass(frozen=True)
class Setter(_Accessor):
    """Write handle: invoke(bean, value)."""

    def invoke(self, bean: Any, value: Any) -> None:
        setattr(bean, self.name, value)


class Introspector(Protocol):
    """Accessor discovery contract consumed by the resolver."""

    def find_getter(self, bean: Any, name: str, declared: bool) -> Optional[Getter]:
        ...

    def find_setter(self, bean: Any, name: str, declared: bool) -> Optional[Setter]:
        ...


# -------------------------------------------------------------------------------------------------
# Default: attribute-based discovery
# -------------------------------------------------------------------------------------------------
_MISSING = object()


class AttributeIntrospector:
    """Discover accessors from Python attributes, properties and annotations."""

    @staticmethod
    def is_visible(name: str, declared: bool) -> bool:
        if not name or (name.startswith("__") and name.endswith("__")):
            return False
        if name.startswith("_") and not declared:
            return False
        return True

    @staticmethod
    def _class_attr(cls: type, name: str) -> Any:
        for klass in cls.__mro__:
            if klass is object:
                break
            ns = vars(klass)
            if name in ns:
                return ns[name]
        return _MISSING

    def _is_method_like(self, attr: Any) -> bool:
        if isinstance(attr, (staticmethod, classmethod)):
            return True
        return inspect.isroutine(attr) or inspect.ismethoddescriptor(attr)

    def find_getter(self, bean: Any, name: str, declared: bool) -> Optional[Getter]:
        if bean is None or not self.is_visible(name, declared):
            return None
        cls = type(bean)
        attr = self._class_attr(cls, name)

        if isinstance(attr, property):
            if attr.fget is None:
                return None
            return Getter(name, _fn_hints(attr.fget).get("return"))

        hints = _class_hints(cls)
        instance_ns = getattr(bean, "__dict__", None)
        if isinstance(instance_ns, dict) and name in instance_ns:
            return Getter(name, hints.get(name))

        if attr is _MISSING or self._is_method_like(attr):
            return None
        if inspect.isdatadescriptor(attr) or name in hints or not callable(attr):
            return Getter(name, hints.get(name))
        return None

    def find_setter(self, bean: Any, name: str, declared: bool) -> Optional[Setter]:
        if bean is None or not self.is_visible(name, declared):
            return None
        cls = type(bean)
        attr = self._class_attr(cls, name)

        if isinstance(attr, property):
            if attr.fset is None:
                return None
            params = [h for k, h in _fn_hints(attr.fset).items() if k != "return"]
            declared_type = params[0] if params else None
            if declared_type is None and attr.fget is not None:
                declared_type = _fn_hints(attr.fget).get("return")
            return Setter(name, declared_type)

        hints = _class_hints(cls)
        if name in hints:
            return Setter(name, hints[name])

        instance_ns = getattr(bean, "__dict__", None)
        if isinstance(instance_ns, dict) and name in instance_ns:
            return Setter(name, None)

        if attr is _MISSING or self._is_method_like(attr):
            return None
        if inspect.isdatadescriptor(attr) or not callable(attr):
            return Setter(name, None)
        return None


__all__ = [
    "Getter",
    "Setter",
    "Introspector",
    "AttributeIntrospector",
    "is_unknown_type",
    "raw_type",
    "element_types",
]
