# tests/test_bean_util_scenarios.py
"""
End-to-end behavior: worked scenarios, strict/silent symmetry, existence checks
and all-or-nothing rollback.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pytest

from beanpath.bean_util import (
    get_property,
    get_property_forced,
    get_property_silently,
    get_property_type,
    has_property,
    populate_bean,
    set_property,
    set_property_forced,
    set_property_forced_silent,
    set_property_silent,
)
from beanpath.core.errors import (
    BeanPathError,
    ElementConstructionError,
    IndexOutOfRangeError,
    NotIndexableError,
    PropertyNotFoundError,
)


@dataclass
class Address:
    city: Optional[str] = None


@dataclass
class Item:
    name: str = ""


@dataclass
class Customer:
    address: Any = None


@dataclass
class Person:
    name: str = ""
    address: Optional[Address] = None
    tags: List[str] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Stats:
    scores: np.ndarray = field(default_factory=lambda: np.array([1, 2]))


class NeedsArg:
    def __init__(self, value):
        self.value = value


@dataclass
class Registry:
    slots: List[NeedsArg] = field(default_factory=list)


@dataclass
class Catalog:
    products: Dict[str, Item] = field(default_factory=dict)


# -------------------------
# worked scenarios
# -------------------------
class TestScenarios:
    def test_forced_write_creates_generic_mapping(self):
        data: Dict[str, Any] = {}
        set_property_forced(data, "address.city", "Paris")
        assert data == {"address": {"city": "Paris"}}
        assert get_property_forced(data, "address.city") == "Paris"

    def test_forced_write_on_untyped_field_creates_mapping(self):
        c = Customer()
        set_property_forced(c, "address.city", "Paris")
        assert c.address == {"city": "Paris"}
        assert get_property_forced(c, "address.city") == "Paris"

    def test_list_padding_and_strict_bounds(self):
        p = Person()
        with pytest.raises(IndexOutOfRangeError):
            get_property(p, "tags[5]")
        set_property_forced(p, "tags[2]", "x")
        assert p.tags == [None, None, "x"]

    def test_array_growth_preserves_prefix(self):
        s = Stats()
        set_property_forced(s, "scores[4]", 9)
        assert len(s.scores) >= 5
        assert s.scores[4] == 9
        assert list(s.scores[:2]) == [1, 2]

    def test_populate_onto_empty_bean(self):
        bean: Dict[str, Any] = {}
        populate_bean(bean, {"user": {"name": "Ann", "roles": ["admin", "dev"]}})
        assert get_property(bean, "user.name") == "Ann"
        assert get_property(bean, "user.roles[0]") == "admin"
        assert get_property(bean, "user.roles[1]") == "dev"

    def test_existence_check_never_creates(self):
        bean = {"present": 1}
        assert has_property(bean, "missing.nested.path") is False
        assert bean == {"present": 1}


# -------------------------
# round trip / idempotent existence
# -------------------------
@pytest.mark.parametrize(
    "path, value",
    [
        ("name", "Ann"),
        ("address.city", "Paris"),
        ("tags[3]", "t"),
        ("items[1].name", "pen"),
        ("attrs[color]", "red"),
        ("attrs[box].size", 3),
    ],
)
def test_forced_write_then_read_round_trips(path, value):
    p = Person()
    set_property_forced(p, path, value)
    assert get_property_forced(p, path) == value
    assert get_property(p, path) == value


@pytest.mark.parametrize("path", ["name", "address.city", "tags[1]", "items[0]", "attrs[k]"])
def test_none_write_then_read_round_trips(path):
    p = Person(name="Ann")
    set_property_forced(p, path, None)
    assert get_property(p, path) is None


@pytest.mark.parametrize("path", ["name", "address.city", "tags[0]", "attrs[k]", "nope.deeper"])
def test_has_property_is_idempotent_and_read_only(path):
    p = Person(tags=["a"])
    before = copy.deepcopy(p)
    first = has_property(p, path)
    second = has_property(p, path)
    assert first == second
    assert p == before


def test_has_property_answers():
    p = Person(name="Ann", address=Address(city="Oslo"), tags=["a"])
    assert has_property(p, "name") is True
    assert has_property(p, "address.city") is True
    assert has_property(p, "tags[0]") is True
    assert has_property(p, "tags[1]") is False
    assert has_property(p, "tags[x]") is False
    assert has_property(Person(), "address.city") is False


def test_has_property_malformed_path_is_false():
    p = Person(tags=["a"])
    assert has_property(p, "tags[0") is False
    assert has_property(p, "tags[0]x") is False
    assert get_property_type(p, "tags[0") is None
    with pytest.raises(BeanPathError):
        get_property(p, "tags[0")


# -------------------------
# strict / silent symmetry
# -------------------------
_FAILING_PATHS = ["missing", "address.city", "tags[3]", "name[0]", "tags[x]"]


@pytest.mark.parametrize("path", _FAILING_PATHS)
def test_strict_write_raises_iff_silent_returns_false(path):
    p = Person(name="Ann", tags=["a"])
    before = copy.deepcopy(p)
    with pytest.raises(BeanPathError):
        set_property(p, path, "v")
    assert set_property_silent(p, path, "v") is False
    assert p == before


@pytest.mark.parametrize("path", _FAILING_PATHS)
def test_strict_read_raises_iff_silent_returns_none(path):
    p = Person(name="Ann", tags=["a"])
    with pytest.raises(BeanPathError):
        get_property(p, path)
    assert get_property_silently(p, path) is None


def test_silent_write_success_returns_true():
    p = Person()
    assert set_property_silent(p, "name", "Bo") is True
    assert p.name == "Bo"


# -------------------------
# all-or-nothing
# -------------------------
def test_failed_forced_write_rolls_back_created_intermediates():
    p = Person()
    with pytest.raises(PropertyNotFoundError):
        set_property_forced(p, "address.city.x", 1)
    assert p.address is None
    assert set_property_forced_silent(p, "address.city.x", 1) is False
    assert p.address is None


def test_failed_forced_write_rolls_back_list_padding():
    r = Registry()
    with pytest.raises(ElementConstructionError):
        set_property_forced(r, "slots[2].value", 1)
    assert r.slots == []


def test_failed_forced_write_rolls_back_map_insert():
    c = Catalog()
    with pytest.raises(NotIndexableError):
        set_property_forced(c, "products[p1].name[0]", "x")
    assert c.products == {}


def test_failed_forced_write_rolls_back_array_rebind():
    s = Stats()
    original = s.scores
    assert set_property_forced_silent(s, "scores[6]", "abc") is False
    assert s.scores is original
    assert list(s.scores) == [1, 2]


def test_failed_conversion_leaves_list_untouched():
    p = Person()
    assert set_property_forced_silent(p, "tags[4]", object()) is False
    assert p.tags == []
