# beanpath/core/adapters.py
"""
Indexed container adapters (array / list / map)

Once the bare name of an indexed step ("items" in "items[3]") has been
resolved to a container, exactly one adapter handles the index:

- ArrayAdapter: numpy.ndarray with ndim >= 1. Fixed length, so forced growth
  allocates a new array, copies the old elements and rebinds the owning slot.
- ListAdapter:  mutable sequences other than bytearray. Forced access pads with None.
- MapAdapter:   mutable mappings. Index text is the key, coerced to the
  declared key type when the accessor declares one.

Selection order is array -> list -> map; anything else is not indexable.

Every adapter exposes the same three operations:
    get(address, container, getter) -> value
    set(address, container, getter, value) -> None
    has(address, container, getter) -> bool      (never mutates, never raises)

All mutations go through _put()/_pad() helpers that record undo actions in the
address journal. After get(), `address.slot` writes back into the slot just
read, which is how a chained index ("a[1][2]") can rebind a grown array.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import MutableMapping, MutableSequence
from typing import Any, List, Optional

import numpy as np

from beanpath.core.address import PropertyAddress
from beanpath.core.conversion import Converter, new_instance
from beanpath.core.errors import (
    IndexOutOfRangeError,
    InvalidIndexError,
    TypeConversionError,
)
from beanpath.core.introspection import Getter, is_unknown_type
from beanpath.utils.logging import get_logger

logger = get_logger(__name__)


def parse_index(address: PropertyAddress, text: str) -> int:
    """Parse a non-negative integer index."""
    try:
        idx = int(text.strip())
    except ValueError as ex:
        raise InvalidIndexError(
            f"Invalid index {text!r} for {address.name!r}", path=address.path, segment=address.segment
        ) from ex
    if idx < 0:
        raise InvalidIndexError(
            f"Negative index {idx} for {address.name!r}", path=address.path, segment=address.segment
        )
    return idx


class IndexedAdapter(ABC):
    kind: str = ""

    def __init__(self, converter: Converter) -> None:
        self.converter = converter

    @abstractmethod
    def accepts(self, value: Any) -> bool:
        ...

    @abstractmethod
    def get(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> Any:
        ...

    @abstractmethod
    def set(self, address: PropertyAddress, container: Any, getter: Optional[Getter], value: Any) -> None:
        ...

    @abstractmethod
    def has(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> bool:
        ...

    def convert(self, address: PropertyAddress, value: Any, target_type: Any) -> Any:
        if value is None or is_unknown_type(target_type):
            return value
        try:
            return self.converter.convert(value, target_type)
        except (TypeConversionError, ValueError, TypeError) as ex:
            raise TypeConversionError(
                f"Cannot convert value for {address.segment!r}: {ex}", path=address.path, segment=address.segment
            ) from ex

    @staticmethod
    def new_element(address: PropertyAddress, element_type: Any) -> Any:
        value = new_instance(element_type, path=address.path, segment=address.segment)
        logger.debug("Created %s for %r in path %r", type(value).__name__, address.segment, address.path)
        return value

    @staticmethod
    def out_of_range(address: PropertyAddress, idx: int, size: int) -> IndexOutOfRangeError:
        return IndexOutOfRangeError(
            f"Index {idx} out of range for {address.name!r} (size {size})",
            path=address.path,
            segment=address.segment,
        )


# -------------------------------------------------------------------------------------------------
# Array (numpy.ndarray)
# -------------------------------------------------------------------------------------------------
class ArrayAdapter(IndexedAdapter):
    kind = "array"

    def __init__(self, converter: Converter, growth: str = "double") -> None:
        super().__init__(converter)
        self.growth = growth

    def accepts(self, value: Any) -> bool:
        return isinstance(value, np.ndarray) and value.ndim >= 1

    @staticmethod
    def component_type(array: np.ndarray, getter: Optional[Getter]) -> Any:
        if array.dtype == object:
            return getter.component_type if getter is not None else None
        return array.dtype.type

    def _put(self, address: PropertyAddress, array: np.ndarray, idx: int, value: Any) -> None:
        old = array[idx].copy() if array.ndim > 1 else array[idx]
        try:
            array[idx] = value
        except (ValueError, TypeError) as ex:
            raise TypeConversionError(
                f"Cannot store {value!r} in {array.dtype} array {address.name!r}",
                path=address.path,
                segment=address.segment,
            ) from ex

        def undo() -> None:
            array[idx] = old

        address.record(undo)

    def ensure_size(self, address: PropertyAddress, array: np.ndarray, idx: int) -> np.ndarray:
        size = len(array)
        if idx < size:
            return array
        if address.rebind is None:
            raise IndexOutOfRangeError(
                f"Cannot grow root array to index {idx}", path=address.path, segment=address.segment
            )
        if self.growth == "exact":
            new_size = idx + 1
        else:
            new_size = max(idx + 1, size * 2 or 1)
        shape = (new_size,) + array.shape[1:]
        if array.dtype == object:
            grown = np.full(shape, None, dtype=object)
        else:
            grown = np.zeros(shape, dtype=array.dtype)
        grown[:size] = array
        logger.debug("Growing array %r from %d to %d in path %r", address.name, size, new_size, address.path)
        address.rebind(grown)
        return grown

    def get(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> Any:
        idx = parse_index(address, address.index or "")
        array = container
        if address.forced and not address.last:
            array = self.ensure_size(address, array, idx)
        if idx >= len(array):
            raise self.out_of_range(address, idx, len(array))

        value = array[idx]
        if address.forced and value is None:
            value = self.new_element(address, self.component_type(array, getter))
            self._put(address, array, idx, value)

        address.slot = lambda v: self._put(address, array, idx, v)
        return value

    def set(self, address: PropertyAddress, container: Any, getter: Optional[Getter], value: Any) -> None:
        idx = parse_index(address, address.index or "")
        array = container
        if address.forced:
            array = self.ensure_size(address, array, idx)
        elif idx >= len(array):
            raise self.out_of_range(address, idx, len(array))
        if array.dtype == object:
            value = self.convert(address, value, self.component_type(array, getter))
        self._put(address, array, idx, value)

    def has(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> bool:
        try:
            idx = parse_index(address, address.index or "")
        except InvalidIndexError:
            return False
        return idx < len(container)


# -------------------------------------------------------------------------------------------------
# List (mutable sequence)
# -------------------------------------------------------------------------------------------------
class ListAdapter(IndexedAdapter):
    kind = "list"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, MutableSequence) and not isinstance(value, bytearray)

    @staticmethod
    def _pad(address: PropertyAddress, seq: MutableSequence, idx: int) -> None:
        size = len(seq)
        if idx < size:
            return
        seq.extend([None] * (idx + 1 - size))

        def undo() -> None:
            del seq[size:]

        address.record(undo)

    @staticmethod
    def _put(address: PropertyAddress, seq: MutableSequence, idx: int, value: Any) -> None:
        old = seq[idx]
        seq[idx] = value

        def undo() -> None:
            seq[idx] = old

        address.record(undo)

    def get(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> Any:
        idx = parse_index(address, address.index or "")
        seq: MutableSequence = container
        if address.forced and not address.last:
            self._pad(address, seq, idx)
        if idx >= len(seq):
            raise self.out_of_range(address, idx, len(seq))

        value = seq[idx]
        if address.forced and value is None:
            element_type = getter.component_type if getter is not None else None
            value = self.new_element(address, element_type)
            self._put(address, seq, idx, value)

        address.slot = lambda v: self._put(address, seq, idx, v)
        return value

    def set(self, address: PropertyAddress, container: Any, getter: Optional[Getter], value: Any) -> None:
        idx = parse_index(address, address.index or "")
        seq: MutableSequence = container
        if getter is not None:
            value = self.convert(address, value, getter.component_type)
        if address.forced:
            self._pad(address, seq, idx)
        elif idx >= len(seq):
            raise self.out_of_range(address, idx, len(seq))
        self._put(address, seq, idx, value)

    def has(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> bool:
        try:
            idx = parse_index(address, address.index or "")
        except InvalidIndexError:
            return False
        return idx < len(container)


# -------------------------------------------------------------------------------------------------
# Map (mutable mapping)
# -------------------------------------------------------------------------------------------------
class MapAdapter(IndexedAdapter):
    kind = "map"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, MutableMapping)

    def key_for(self, address: PropertyAddress, getter: Optional[Getter]) -> Any:
        text = address.index or ""
        key_type = getter.key_type if getter is not None else None
        if key_type is None or key_type is str:
            return text
        return self.convert(address, text, key_type)

    @staticmethod
    def put(address: PropertyAddress, mapping: MutableMapping, key: Any, value: Any) -> None:
        existed = key in mapping
        old = mapping.get(key) if existed else None
        mapping[key] = value

        def undo() -> None:
            if existed:
                mapping[key] = old
            else:
                mapping.pop(key, None)

        address.record(undo)

    def get(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> Any:
        mapping: MutableMapping = container
        key = self.key_for(address, getter)
        value = mapping.get(key)
        if address.forced and not address.last and value is None:
            element_type = getter.component_type if getter is not None else None
            value = self.new_element(address, element_type)
            self.put(address, mapping, key, value)

        address.slot = lambda v: self.put(address, mapping, key, v)
        return value

    def set(self, address: PropertyAddress, container: Any, getter: Optional[Getter], value: Any) -> None:
        key = self.key_for(address, getter)
        if getter is not None:
            value = self.convert(address, value, getter.component_type)
        self.put(address, container, key, value)

    def has(self, address: PropertyAddress, container: Any, getter: Optional[Getter]) -> bool:
        try:
            key = self.key_for(address, getter)
        except TypeConversionError:
            return False
        return key in container


def build_adapters(converter: Converter, *, array_growth: str = "double") -> List[IndexedAdapter]:
    """Adapters in dispatch order."""
    return [ArrayAdapter(converter, growth=array_growth), ListAdapter(converter), MapAdapter(converter)]


def select_adapter(adapters: List[IndexedAdapter], value: Any) -> Optional[IndexedAdapter]:
    for adapter in adapters:
        if adapter.accepts(value):
            return adapter
    return None


__all__ = [
    "parse_index",
    "IndexedAdapter",
    "ArrayAdapter",
    "ListAdapter",
    "MapAdapter",
    "build_adapters",
    "select_adapter",
]
