# beanpath/bean_util.py
"""
BeanUtil: public façade over the property-path resolver.

Intent
- One parameterized core per operation (_get/_set/_has/_type_of) driven by an
  AccessOptions record; the named entry points below only pick options.
- Strict variants raise the exact BeanPathError subclass; silent variants
  return None (reads) or False (writes) and log the failure at DEBUG.
- Every call is all-or-nothing: on failure the mutations recorded in the
  address journal are rolled back before raising / returning the sentinel.

Entry points
- read:   get_property[_silently], get_property_forced[_silently],
          get_declared_property[_silently], get_declared_property_forced
- write:  set_property[_silent], set_property_forced[_silent],
          set_declared_property[_silent], set_declared_property_forced[_silent]
- exists: has_property, has_declared_property
- type:   get_property_type, get_declared_property_type
- single step (no nesting): has/get/set_simple_property, get_simple_property_forced,
          has/get/set_index_property
- batch:  populate_bean, populate_property

Module-level functions with the same names are bound to a default BeanUtil().

Notes
- "declared" widens accessor discovery to non-public (`_name`) members.
- The type query only runs the non-forced existence descent, so it never
  creates values.
- has_* and type queries return False / None for a malformed path.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from beanpath.core.address import PropertyAddress
from beanpath.core.conversion import Converter, TypeConverter
from beanpath.core.errors import BeanPathError, InvalidIndexError
from beanpath.core.introspection import AttributeIntrospector, Introspector
from beanpath.core.resolver import PropertyResolver
from beanpath.core.segmenter import extract_this_reference as _extract_this_reference
from beanpath.core.segmenter import index_of_dot
from beanpath.utils.config import BeanPathSettings, load_settings
from beanpath.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessOptions:
    """forced: create missing values; silent: sentinel instead of raising; declared: include `_private`."""
    forced: bool = False
    silent: bool = False
    declared: bool = False


class BeanUtil:
    def __init__(
        self,
        *,
        introspector: Optional[Introspector] = None,
        converter: Optional[Converter] = None,
        settings: Optional[BeanPathSettings] = None,
    ) -> None:
        self.settings = settings or BeanPathSettings()
        self.resolver = PropertyResolver(
            introspector or AttributeIntrospector(),
            converter or TypeConverter(),
            this_ref=self.settings.this_ref,
            array_growth=self.settings.array_growth,
        )

    @classmethod
    def from_settings_file(cls, path: str | Path) -> "BeanUtil":
        """Load settings YAML, apply its logging options, and build a BeanUtil."""
        settings = load_settings(path)
        configure_logging(settings.log_level, settings.log_file)
        logger.info("BeanUtil configured from %s (this_ref=%r, array_growth=%s)",
                    path, settings.this_ref, settings.array_growth)
        return cls(settings=settings)

    # ---------------------------------------------------------------------------------------------
    # parameterized cores
    # ---------------------------------------------------------------------------------------------
    @staticmethod
    def _address(bean: Any, name: str, opts: AccessOptions) -> PropertyAddress:
        return PropertyAddress(bean=bean, path=name, forced=opts.forced, declared=opts.declared)

    @staticmethod
    def _fail(address: PropertyAddress, opts: AccessOptions, op: str, ex: BeanPathError) -> None:
        address.rollback()
        if not opts.silent:
            raise ex
        logger.debug("Silent %s failed for %r: %s", op, address.path, ex)

    def _get(self, bean: Any, name: str, opts: AccessOptions) -> Any:
        address = self._address(bean, name, opts)
        try:
            self.resolver.resolve_nested(address)
            value = self.resolver.get_index_property(address)
        except BeanPathError as ex:
            self._fail(address, opts, "get", ex)
            return None
        address.commit()
        return value

    def _set(self, bean: Any, name: str, value: Any, opts: AccessOptions) -> bool:
        address = self._address(bean, name, opts)
        try:
            self.resolver.resolve_nested(address)
            self.resolver.set_index_property(address, value)
        except BeanPathError as ex:
            self._fail(address, opts, "set", ex)
            return False
        address.commit()
        return True

    def _has(self, bean: Any, name: str, declared: bool) -> bool:
        address = self._address(bean, name, AccessOptions(declared=declared))
        try:
            if not self.resolver.resolve_existing_nested(address):
                return False
        except InvalidIndexError:
            # a malformed path names no property
            return False
        return self.resolver.has_index_property(address)

    def _type_of(self, bean: Any, name: str, declared: bool) -> Optional[type]:
        address = self._address(bean, name, AccessOptions(declared=declared))
        try:
            if not self.resolver.resolve_existing_nested(address):
                return None
        except InvalidIndexError:
            return None
        return self.resolver.extract_type(address)

    # ---------------------------------------------------------------------------------------------
    # SET
    # ---------------------------------------------------------------------------------------------
    def set_property(self, bean: Any, name: str, value: Any) -> None:
        self._set(bean, name, value, AccessOptions())

    def set_property_silent(self, bean: Any, name: str, value: Any) -> bool:
        """Returns False instead of raising when the property cannot be set."""
        return self._set(bean, name, value, AccessOptions(silent=True))

    def set_property_forced(self, bean: Any, name: str, value: Any) -> None:
        """Sets the property, creating missing intermediate values along the path."""
        self._set(bean, name, value, AccessOptions(forced=True))

    def set_property_forced_silent(self, bean: Any, name: str, value: Any) -> bool:
        return self._set(bean, name, value, AccessOptions(forced=True, silent=True))

    def set_declared_property(self, bean: Any, name: str, value: Any) -> None:
        self._set(bean, name, value, AccessOptions(declared=True))

    def set_declared_property_silent(self, bean: Any, name: str, value: Any) -> bool:
        return self._set(bean, name, value, AccessOptions(declared=True, silent=True))

    def set_declared_property_forced(self, bean: Any, name: str, value: Any) -> None:
        self._set(bean, name, value, AccessOptions(forced=True, declared=True))

    def set_declared_property_forced_silent(self, bean: Any, name: str, value: Any) -> bool:
        return self._set(bean, name, value, AccessOptions(forced=True, declared=True, silent=True))

    # ---------------------------------------------------------------------------------------------
    # GET
    # ---------------------------------------------------------------------------------------------
    def get_property(self, bean: Any, name: str) -> Any:
        return self._get(bean, name, AccessOptions())

    def get_property_silently(self, bean: Any, name: str) -> Any:
        """
        None on failure. The result is ambiguous: the property may exist and hold None.
        """
        return self._get(bean, name, AccessOptions(silent=True))

    def get_property_forced(self, bean: Any, name: str) -> Any:
        return self._get(bean, name, AccessOptions(forced=True))

    def get_property_forced_silently(self, bean: Any, name: str) -> Any:
        return self._get(bean, name, AccessOptions(forced=True, silent=True))

    def get_declared_property(self, bean: Any, name: str) -> Any:
        return self._get(bean, name, AccessOptions(declared=True))

    def get_declared_property_silently(self, bean: Any, name: str) -> Any:
        return self._get(bean, name, AccessOptions(declared=True, silent=True))

    def get_declared_property_forced(self, bean: Any, name: str) -> Any:
        return self._get(bean, name, AccessOptions(forced=True, declared=True))

    # ---------------------------------------------------------------------------------------------
    # HAS / TYPE
    # ---------------------------------------------------------------------------------------------
    def has_property(self, bean: Any, name: str) -> bool:
        return self._has(bean, name, False)

    def has_declared_property(self, bean: Any, name: str) -> bool:
        return self._has(bean, name, True)

    def get_property_type(self, bean: Any, name: str) -> Optional[type]:
        """Declared type of the property when known, else the runtime class of its value."""
        return self._type_of(bean, name, False)

    def get_declared_property_type(self, bean: Any, name: str) -> Optional[type]:
        return self._type_of(bean, name, True)

    # ---------------------------------------------------------------------------------------------
    # single-step primitives
    # ---------------------------------------------------------------------------------------------
    def _run_single(self, address: PropertyAddress, fn, *args: Any) -> Any:
        try:
            result = fn(address, *args)
        except BeanPathError:
            address.rollback()
            raise
        address.commit()
        return result

    def _indexed_address(self, bean: Any, name: str, opts: AccessOptions) -> PropertyAddress:
        if index_of_dot(name) != -1:
            raise BeanPathError(f"Nested name not allowed for a single-step access: {name}", path=name)
        return self._address(bean, name, opts)

    def has_simple_property(self, bean: Any, name: str, declared: bool = False) -> bool:
        address = PropertyAddress.simple(bean, name, declared=declared)
        return self.resolver.has_simple_property(address)

    def get_simple_property(self, bean: Any, name: str, declared: bool = False) -> Any:
        address = PropertyAddress.simple(bean, name, declared=declared)
        return self._run_single(address, self.resolver.get_simple_property)

    def get_simple_property_forced(self, bean: Any, name: str, declared: bool = False) -> Any:
        """Reads a simple property; a missing or None value is created first."""
        address = PropertyAddress.simple(bean, name, forced=True, declared=declared)
        return self._run_single(address, self.resolver.get_simple_property)

    def set_simple_property(self, bean: Any, name: str, value: Any, declared: bool = False) -> None:
        address = PropertyAddress.simple(bean, name, declared=declared)
        self._run_single(address, self.resolver.set_simple_property, value)

    def has_index_property(self, bean: Any, name: str, declared: bool = False) -> bool:
        address = self._indexed_address(bean, name, AccessOptions(declared=declared))
        try:
            if not self.resolver.resolve_existing_nested(address):
                return False
        except InvalidIndexError:
            return False
        return self.resolver.has_index_property(address)

    def get_index_property(self, bean: Any, name: str, declared: bool = False, forced: bool = False) -> Any:
        address = self._indexed_address(bean, name, AccessOptions(forced=forced, declared=declared))

        def run(addr: PropertyAddress) -> Any:
            self.resolver.resolve_nested(addr)
            return self.resolver.get_index_property(addr)

        return self._run_single(address, run)

    def set_index_property(
        self, bean: Any, name: str, value: Any, declared: bool = False, forced: bool = False
    ) -> None:
        address = self._indexed_address(bean, name, AccessOptions(forced=forced, declared=declared))

        def run(addr: PropertyAddress, v: Any) -> None:
            self.resolver.resolve_nested(addr)
            self.resolver.set_index_property(addr, v)

        self._run_single(address, run, value)

    # ---------------------------------------------------------------------------------------------
    # populate
    # ---------------------------------------------------------------------------------------------
    def populate_bean(self, bean: Any, mapping: Mapping) -> None:
        """
        Apply a nested mapping onto a bean graph.

        Nested mappings descend through forced simple reads, lists/tuples become
        forced indexed writes (name[0], name[1], ...), everything else is a
        simple write. Each write is its own call: a failure part-way leaves the
        earlier writes in place.
        """
        self.populate_property(bean, None, mapping)

    def populate_property(self, bean: Any, name: Optional[str], value: Any) -> None:
        if isinstance(value, Mapping):
            if name is not None:
                bean = self.get_simple_property_forced(bean, name, True)
            for key, item in value.items():
                self.populate_property(bean, str(key), item)
            return

        if name is None:
            raise BeanPathError(f"Cannot populate a bean from {type(value).__name__}")

        if isinstance(value, (list, tuple)):
            for n, item in enumerate(value):
                self.set_index_property(bean, f"{name}[{n}]", item, True, True)
            return

        self.set_simple_property(bean, name, value, True)

    # ---------------------------------------------------------------------------------------------
    # utilities
    # ---------------------------------------------------------------------------------------------
    @staticmethod
    def extract_this_reference(path: str) -> str:
        """First reference name of a path: "user.roles[0]" -> "user"."""
        return _extract_this_reference(path)


# -------------------------------------------------------------------------------------------------
# module-level shortcuts bound to a default instance
# -------------------------------------------------------------------------------------------------
_default = BeanUtil()

set_property = _default.set_property
set_property_silent = _default.set_property_silent
set_property_forced = _default.set_property_forced
set_property_forced_silent = _default.set_property_forced_silent
set_declared_property = _default.set_declared_property
set_declared_property_silent = _default.set_declared_property_silent
set_declared_property_forced = _default.set_declared_property_forced
set_declared_property_forced_silent = _default.set_declared_property_forced_silent

get_property = _default.get_property
get_property_silently = _default.get_property_silently
get_property_forced = _default.get_property_forced
get_property_forced_silently = _default.get_property_forced_silently
get_declared_property = _default.get_declared_property
get_declared_property_silently = _default.get_declared_property_silently
get_declared_property_forced = _default.get_declared_property_forced

has_property = _default.has_property
has_declared_property = _default.has_declared_property
get_property_type = _default.get_property_type
get_declared_property_type = _default.get_declared_property_type

populate_bean = _default.populate_bean
populate_property = _default.populate_property
extract_this_reference = BeanUtil.extract_this_reference


__all__ = [
    "AccessOptions",
    "BeanUtil",
    "set_property",
    "set_property_silent",
    "set_property_forced",
    "set_property_forced_silent",
    "set_declared_property",
    "set_declared_property_silent",
    "set_declared_property_forced",
    "set_declared_property_forced_silent",
    "get_property",
    "get_property_silently",
    "get_property_forced",
    "get_property_forced_silently",
    "get_declared_property",
    "get_declared_property_silently",
    "get_declared_property_forced",
    "has_property",
    "has_declared_property",
    "get_property_type",
    "get_declared_property_type",
    "populate_bean",
    "populate_property",
    "extract_this_reference",
]
