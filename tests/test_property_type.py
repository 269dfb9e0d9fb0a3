# tests/test_property_type.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, Field

from beanpath.bean_util import get_declared_property_type, get_property_type, set_property


@dataclass
class Address:
    city: Optional[str] = None


@dataclass
class Person:
    name: str = ""
    address: Optional[Address] = None
    tags: List[str] = field(default_factory=list)
    attrs: Dict[str, Any] = field(default_factory=dict)
    extra: Any = None
    scores: np.ndarray = field(default_factory=lambda: np.array([1, 2]))
    _secret: int = 0


class Limits(BaseModel):
    limits: Dict[str, int] = Field(default_factory=dict)


def test_declared_types_win():
    p = Person()
    assert get_property_type(p, "name") is str
    assert get_property_type(p, "address") is Address
    assert get_property_type(p, "tags") is list


def test_declared_component_type_for_index():
    p = Person()
    assert get_property_type(p, "tags[0]") is str
    assert get_property_type(p, "tags[7]") is str


def test_runtime_type_when_undeclared():
    p = Person(extra=3.5, attrs={"color": "red"})
    assert get_property_type(p, "extra") is float
    assert get_property_type(p, "attrs[color]") is str
    assert get_property_type({"a": 1}, "a") is int
    assert issubclass(get_property_type(p, "scores[0]"), np.integer)


def test_unknown_and_missing_types_are_none():
    p = Person()
    assert get_property_type(p, "extra") is None
    assert get_property_type(p, "missing") is None
    assert get_property_type(p, "attrs[nope]") is None


def test_type_query_does_not_create_values():
    p = Person()
    assert get_property_type(p, "address.city") is None
    assert p.address is None


def test_nested_type():
    p = Person(address=Address())
    assert get_property_type(p, "address.city") is str


def test_declared_type_of_private_field():
    p = Person()
    assert get_property_type(p, "_secret") is None
    assert get_declared_property_type(p, "_secret") is int


def test_pydantic_component_type():
    m = Limits()
    set_property(m, "limits[cpu]", "4")
    assert m.limits == {"cpu": 4}
    assert get_property_type(m, "limits[cpu]") is int
