# beanpath/core/resolver.py
"""
Property resolver: walks a path step by step over a PropertyAddress cursor.

Two passes per call
- nested descent: every non-terminal step is resolved to a value that
  becomes the new current bean (resolve_nested / resolve_existing_nested)
- terminal pass: the requested operation is applied to the last step
  (get_index_property / set_index_property / has_index_property / extract_type)

Named access (the bare name of a step), first match wins
1. self reference: empty first name, the configured this-token, or a chained
   index ("a[1][2]" -> the second bracket indexes the current bean)
2. accessor found by the introspector (getter for reads, setter for writes)
3. mapping key lookup / insertion
4. PropertyNotFoundError

Forced mode
- A None read through a named step (no index) is replaced by a new instance of
  the setter's declared type ({} when unknown) and written back to the owner.
- A missing mapping key is created as {}.
- A None container under an index is NOT created: NullIntermediateError.
- Indexed creation/growth rules live in beanpath.core.adapters.

The resolver always raises; callers that want sentinels catch BeanPathError.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Callable, Optional, Tuple

from beanpath.core.adapters import IndexedAdapter, MapAdapter, build_adapters, select_adapter
from beanpath.core.address import PropertyAddress
from beanpath.core.conversion import Converter, new_instance
from beanpath.core.errors import (
    AccessorInvocationError,
    NotIndexableError,
    NullIntermediateError,
    PropertyNotFoundError,
)
from beanpath.core.introspection import Getter, Introspector, Setter, raw_type
from beanpath.core.segmenter import Step, iter_steps
from beanpath.utils.logging import get_logger

logger = get_logger(__name__)


class PropertyResolver:
    def __init__(
        self,
        introspector: Introspector,
        converter: Converter,
        *,
        this_ref: str = "*this",
        array_growth: str = "double",
    ) -> None:
        self.introspector = introspector
        self.converter = converter
        self.this_ref = this_ref
        self.adapters = build_adapters(converter, array_growth=array_growth)

    # ---------------------------------------------------------------------------------------------
    # accessor plumbing
    # ---------------------------------------------------------------------------------------------
    def is_self_reference(self, address: PropertyAddress) -> bool:
        if address.chained:
            return True
        return (address.name == "" and address.first) or address.name == self.this_ref

    @staticmethod
    def _invoke_getter(address: PropertyAddress, getter: Getter, bean: Any) -> Any:
        try:
            return getter.invoke(bean)
        except Exception as ex:
            raise AccessorInvocationError(
                f"Unable to invoke getter: {getter.name}", path=address.path, segment=address.segment
            ) from ex

    @staticmethod
    def _invoke_setter(address: PropertyAddress, setter: Setter, bean: Any, value: Any) -> None:
        try:
            setter.invoke(bean, value)
        except Exception as ex:
            raise AccessorInvocationError(
                f"Unable to invoke setter: {setter.name}", path=address.path, segment=address.segment
            ) from ex

    def _undo_for(self, address: PropertyAddress, bean: Any, name: str, setter: Setter) -> Callable[[], None]:
        """Restore the current value, or drop the attribute if it was never assigned."""
        getter = self.introspector.find_getter(bean, name, True)
        if getter is not None:
            try:
                old = getter.invoke(bean)
            except AttributeError:
                pass
            except Exception:
                # no readable previous value; the write still goes ahead
                logger.debug("Getter %r raised before write in path %r; write is not undoable", name, address.path)
                return lambda: None
            else:
                return lambda: setter.invoke(bean, old)
        return lambda: delattr(bean, name)

    def write_named(self, address: PropertyAddress, bean: Any, name: str, value: Any, declared: bool) -> None:
        """Setter or mapping insertion on `bean`, journaled for rollback."""
        setter = self.introspector.find_setter(bean, name, declared)
        if setter is not None:
            undo = self._undo_for(address, bean, name, setter)
            self._invoke_setter(address, setter, bean, value)
            address.record(undo)
            return

        if isinstance(bean, MutableMapping):
            MapAdapter.put(address, bean, name, value)
            return

        raise PropertyNotFoundError(f"Simple property not found: {name}", path=address.path, segment=address.segment)

    def _create_property(self, address: PropertyAddress) -> Any:
        bean = address.bean
        setter = self.introspector.find_setter(bean, address.name, True)
        if setter is None:
            if isinstance(bean, MutableMapping):
                value: Any = {}
                MapAdapter.put(address, bean, address.name, value)
                return value
            # read-only property: nothing to write back
            return None
        value = new_instance(setter.declared_type, path=address.path, segment=address.segment)
        logger.debug("Created %s for %r in path %r", type(value).__name__, address.name, address.path)
        self.write_named(address, bean, address.name, value, True)
        return value

    # ---------------------------------------------------------------------------------------------
    # simple (named) property
    # ---------------------------------------------------------------------------------------------
    def has_simple_property(self, address: PropertyAddress) -> bool:
        bean = address.bean
        if bean is None:
            return False
        if self.is_self_reference(address):
            return True
        if self.introspector.find_getter(bean, address.name, address.declared) is not None:
            return True
        return isinstance(bean, Mapping) and address.name in bean

    def get_simple_property(self, address: PropertyAddress) -> Any:
        bean = address.bean
        if self.is_self_reference(address):
            return bean
        if bean is None:
            raise NullIntermediateError(
                f"Bean is null while reading: {address.name}", path=address.path, segment=address.segment
            )

        creates = address.forced and address.index is None

        getter = self.introspector.find_getter(bean, address.name, address.declared)
        if getter is not None:
            value = self._invoke_getter(address, getter, bean)
            if value is None and creates:
                value = self._create_property(address)
            return value

        if isinstance(bean, Mapping):
            key = address.name
            if key not in bean:
                if not address.forced or not isinstance(bean, MutableMapping):
                    raise PropertyNotFoundError(f"Map key not found: {key}", path=address.path, segment=address.segment)
                value = {}
                logger.debug("Created map for missing key %r in path %r", key, address.path)
                MapAdapter.put(address, bean, key, value)
                return value
            value = bean[key]
            if value is None and creates and isinstance(bean, MutableMapping):
                value = {}
                MapAdapter.put(address, bean, key, value)
            return value

        raise PropertyNotFoundError(
            f"Simple property not found: {address.name}", path=address.path, segment=address.segment
        )

    def set_simple_property(self, address: PropertyAddress, value: Any) -> None:
        if self.is_self_reference(address):
            raise PropertyNotFoundError("Cannot assign to the bean itself", path=address.path, segment=address.segment)
        if address.bean is None:
            raise NullIntermediateError(
                f"Bean is null while writing: {address.name}", path=address.path, segment=address.segment
            )
        self.write_named(address, address.bean, address.name, value, address.declared)

    # ---------------------------------------------------------------------------------------------
    # indexed property
    # ---------------------------------------------------------------------------------------------
    def _resolve_container(self, address: PropertyAddress) -> Tuple[Any, Optional[Getter]]:
        """Value of the bare name of an indexed step plus its getter (for element types)."""
        getter: Optional[Getter] = None
        if address.chained:
            container = address.bean
        elif self.is_self_reference(address):
            container = address.bean
            address.rebind = None
        else:
            owner, name = address.bean, address.name
            container = self.get_simple_property(address)
            getter = self.introspector.find_getter(owner, name, address.declared)

            def rebind(value: Any) -> None:
                self.write_named(address, owner, name, value, True)

            address.rebind = rebind

        if container is None:
            raise NullIntermediateError(
                f"Index property is null: {address.name}", path=address.path, segment=address.segment
            )
        return container, getter

    def _adapter_for(self, address: PropertyAddress, container: Any) -> IndexedAdapter:
        adapter = select_adapter(self.adapters, container)
        if adapter is None:
            raise NotIndexableError(
                f"Index property is not an array, list or map: {address.name} ({type(container).__name__})",
                path=address.path,
                segment=address.segment,
            )
        return adapter

    def get_index_property(self, address: PropertyAddress) -> Any:
        if address.index is None:
            return self.get_simple_property(address)
        container, getter = self._resolve_container(address)
        return self._adapter_for(address, container).get(address, container, getter)

    def set_index_property(self, address: PropertyAddress, value: Any) -> None:
        if address.index is None:
            self.set_simple_property(address, value)
            return
        container, getter = self._resolve_container(address)
        self._adapter_for(address, container).set(address, container, getter, value)

    def has_index_property(self, address: PropertyAddress) -> bool:
        if address.bean is None:
            return False
        if address.index is None:
            return self.has_simple_property(address)
        if not self.has_simple_property(address):
            return False

        getter: Optional[Getter] = None
        if self.is_self_reference(address):
            container = address.bean
        else:
            container = self.get_simple_property(address)
            getter = self.introspector.find_getter(address.bean, address.name, address.declared)
        if container is None:
            return False
        adapter = select_adapter(self.adapters, container)
        return adapter is not None and adapter.has(address, container, getter)

    # ---------------------------------------------------------------------------------------------
    # nested descent
    # ---------------------------------------------------------------------------------------------
    @staticmethod
    def _enter(address: PropertyAddress, step: Step, declared: bool) -> None:
        previous_slot = address.slot
        address.enter(step)
        # non-terminal steps always descend through non-public names
        address.declared = declared if step.last else True
        address.slot = None
        if step.chained:
            address.rebind = previous_slot

    @staticmethod
    def _descend(address: PropertyAddress, value: Any) -> None:
        if value is None:
            raise NullIntermediateError(
                f"Nested property is null: {address.segment}", path=address.path, segment=address.segment
            )
        address.bean = value
        address.first = False

    def resolve_nested(self, address: PropertyAddress) -> None:
        """Descend to the terminal step, creating missing values when the address is forced."""
        declared = address.declared
        for step in iter_steps(address.path):
            self._enter(address, step, declared)
            if step.last:
                return
            self._descend(address, self.get_index_property(address))

    def resolve_existing_nested(self, address: PropertyAddress) -> bool:
        """Descend only through existing values; False at the first missing step."""
        declared = address.declared
        for step in iter_steps(address.path):
            self._enter(address, step, declared)
            if step.last:
                return True
            if not self.has_index_property(address):
                return False
            value = self.get_index_property(address)
            if value is None:
                return False
            self._descend(address, value)
        return True

    # ---------------------------------------------------------------------------------------------
    # type-of
    # ---------------------------------------------------------------------------------------------
    def extract_type(self, address: PropertyAddress) -> Optional[type]:
        """
        Declared type of the terminal step when the accessor states it,
        else the runtime class of the current value; None when unknown.
        """
        bean = address.bean
        if bean is None:
            return None

        if address.index is None:
            if self.is_self_reference(address):
                return type(bean)
            getter = self.introspector.find_getter(bean, address.name, address.declared)
            if getter is not None:
                if getter.raw_type is not None:
                    return getter.raw_type
                return _runtime_type(self._invoke_getter(address, getter, bean))
            if isinstance(bean, Mapping) and address.name in bean:
                return _runtime_type(bean[address.name])
            return None

        getter = None
        if not self.is_self_reference(address):
            getter = self.introspector.find_getter(bean, address.name, address.declared)
        if getter is not None and getter.component_type is not None:
            declared = raw_type(getter.component_type)
            if declared is not None:
                return declared
        if not self.has_index_property(address):
            return None
        return _runtime_type(self.get_index_property(address))


def _runtime_type(value: Any) -> Optional[type]:
    return None if value is None else type(value)


__all__ = ["PropertyResolver"]
