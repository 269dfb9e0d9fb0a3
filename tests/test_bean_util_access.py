# tests/test_bean_util_access.py
"""
Named (non-indexed) reads and writes through the BeanUtil façade.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest

from beanpath.bean_util import (
    BeanUtil,
    get_declared_property,
    get_property,
    get_property_forced,
    get_property_silently,
    has_declared_property,
    has_property,
    set_declared_property,
    set_property,
    set_property_forced,
    set_property_silent,
)
from beanpath.core.errors import (
    AccessorInvocationError,
    BeanPathError,
    NullIntermediateError,
    PropertyNotFoundError,
)
from beanpath.core.introspection import Getter, Setter
from beanpath.utils.config import BeanPathSettings


@dataclass
class Address:
    city: Optional[str] = None
    zip_code: Optional[str] = None


@dataclass
class Person:
    name: str = ""
    address: Optional[Address] = None
    tags: List[str] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)
    _secret: str = "hidden"


class Exploding:
    @property
    def boom(self):
        raise RuntimeError("kaput")


class Lazy:
    def __init__(self):
        self._v = None

    @property
    def v(self):
        if self._v is None:
            raise ValueError("not loaded")
        return self._v

    @v.setter
    def v(self, value):
        self._v = value


@dataclass
class Vault:
    label: str = ""
    _inner: Optional[Address] = None


class Guarded:
    def __init__(self):
        self._v = 1

    @property
    def value(self):
        return self._v

    @value.setter
    def value(self, v):
        raise PermissionError("read only")


# -------------------------
# plain reads / writes
# -------------------------
def test_get_simple_and_nested():
    p = Person(name="Ann", address=Address(city="Oslo"))
    assert get_property(p, "name") == "Ann"
    assert get_property(p, "address.city") == "Oslo"


def test_set_nested_existing():
    p = Person(address=Address())
    set_property(p, "address.zip_code", "0150")
    assert p.address.zip_code == "0150"


def test_get_through_none_raises():
    with pytest.raises(NullIntermediateError):
        get_property(Person(), "address.city")


def test_set_through_none_raises_without_forced():
    p = Person()
    with pytest.raises(NullIntermediateError):
        set_property(p, "address.city", "Paris")
    assert p.address is None


def test_forced_set_creates_typed_intermediate():
    p = Person()
    set_property_forced(p, "address.city", "Paris")
    assert p.address == Address(city="Paris")


def test_forced_get_creates_terminal_none_value():
    p = Person()
    assert get_property_forced(p, "address.city") == ""
    assert isinstance(p.address, Address)


def test_missing_property_strict_and_silent():
    p = Person()
    with pytest.raises(PropertyNotFoundError):
        set_property(p, "missing", 1)
    with pytest.raises(PropertyNotFoundError):
        get_property(p, "missing")
    assert set_property_silent(p, "missing", 1) is False
    assert get_property_silently(p, "missing") is None


def test_map_keys_are_properties():
    data = {"cfg": {"limit": 5}}
    assert get_property(data, "cfg.limit") == 5
    set_property(data, "cfg.limit", 6)
    set_property(data, "cfg.extra", "x")
    assert data == {"cfg": {"limit": 6, "extra": "x"}}


def test_missing_map_key_strict_read_raises():
    with pytest.raises(PropertyNotFoundError):
        get_property({"a": 1}, "b")


def test_forced_read_creates_missing_map_key():
    data: Dict[str, Any] = {}
    assert get_property_forced(data, "a.b") == {}
    assert data == {"a": {"b": {}}}


# -------------------------
# declared (non-public) access
# -------------------------
def test_private_names_need_declared_variants():
    p = Person()
    with pytest.raises(PropertyNotFoundError):
        get_property(p, "_secret")
    assert get_declared_property(p, "_secret") == "hidden"
    assert has_property(p, "_secret") is False
    assert has_declared_property(p, "_secret") is True

    set_declared_property(p, "_secret", "changed")
    assert p._secret == "changed"


# -------------------------
# self reference
# -------------------------
def test_self_reference_tokens():
    p = Person(name="Ann")
    assert get_property(p, "*this") is p
    assert get_property(p, "") is p
    assert get_property(p, "*this.name") == "Ann"
    assert get_property([10, 20], "[1]") == 20


def test_custom_this_token():
    util = BeanUtil(settings=BeanPathSettings(this_ref="self"))
    p = Person(name="Ann")
    assert util.get_property(p, "self") is p
    with pytest.raises(PropertyNotFoundError):
        util.get_property(p, "*this")


def test_cannot_assign_to_self():
    with pytest.raises(PropertyNotFoundError):
        set_property(Person(), "", 1)


# -------------------------
# accessor failures
# -------------------------
def test_getter_failure_is_wrapped():
    with pytest.raises(AccessorInvocationError) as ei:
        get_property(Exploding(), "boom")
    assert isinstance(ei.value.__cause__, RuntimeError)
    assert get_property_silently(Exploding(), "boom") is None


def test_setter_failure_is_wrapped():
    g = Guarded()
    with pytest.raises(AccessorInvocationError) as ei:
        set_property(g, "value", 2)
    assert isinstance(ei.value.__cause__, PermissionError)
    assert g.value == 1


def test_errors_carry_path_and_segment():
    with pytest.raises(BeanPathError) as ei:
        get_property(Person(), "address.city")
    assert ei.value.path == "address.city"
    assert ei.value.segment == "address"
    assert "address.city" in str(ei.value)


def test_silent_failure_is_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="beanpath"):
        assert set_property_silent(Person(), "missing", 1) is False
    assert "Silent set failed" in caplog.text


# -------------------------
# injectable introspector
# -------------------------
@dataclass(frozen=True)
class _ClosureGetter(Getter):
    read: Optional[Callable[[Any], Any]] = None

    def invoke(self, bean: Any) -> Any:
        return self.read(bean)


@dataclass(frozen=True)
class _ClosureSetter(Setter):
    write: Optional[Callable[[Any, Any], None]] = None

    def invoke(self, bean: Any, value: Any) -> None:
        self.write(bean, value)


class _StoreIntrospector:
    """Every property is a closure over one entry of a backing dict."""

    def __init__(self, store: Dict[str, Any]):
        self.store = store

    def find_getter(self, bean, name, declared):
        if name not in self.store:
            return None
        return _ClosureGetter(name, None, read=lambda b: self.store[name])

    def find_setter(self, bean, name, declared):
        if name not in self.store:
            return None
        return _ClosureSetter(name, None, write=lambda b, v: self.store.__setitem__(name, v))


def test_custom_introspector_backs_properties():
    store = {"color": "red", "sizes": [1, 2]}
    util = BeanUtil(introspector=_StoreIntrospector(store))
    bean = object()

    assert util.get_property(bean, "color") == "red"
    util.set_property(bean, "color", "blue")
    util.set_property_forced(bean, "sizes[3]", 4)

    assert store == {"color": "blue", "sizes": [1, 2, None, 4]}
    assert util.has_property(bean, "shape") is False


def test_write_goes_through_when_previous_value_is_unreadable():
    lazy = Lazy()
    set_property_forced(lazy, "v", 3)
    assert lazy.v == 3

    other = Lazy()
    assert set_property_silent(other, "v", 4) is True
    assert other.v == 4


# -------------------------
# non-public intermediate steps
# -------------------------
def test_private_intermediate_steps_are_traversed():
    v = Vault(_inner=Address(city="Rome"))
    assert get_property(v, "_inner.city") == "Rome"
    assert has_property(v, "_inner.city") is True
    with pytest.raises(PropertyNotFoundError):
        get_property(v, "_inner")


def test_forced_write_creates_private_intermediate():
    v = Vault()
    set_property_forced(v, "_inner.city", "Rome")
    assert v._inner == Address(city="Rome")
