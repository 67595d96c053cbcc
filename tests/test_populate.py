# tests/test_populate.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
import enum
import logging
import types
import uuid

import pytest

from pydummy.classify import Char
from pydummy.compare import compare
from pydummy.errors import ConstructionError
from pydummy.populate import Constructor, ObjectPopulator, populate, populate_many
from pydummy.random_source import ALPHABET, DATE_EPOCH, RandomValueSource
from pydummy.typing_defs import ConstructorLike


# --- Fixture types -------------------------------------------------------------

@dataclass
class Pet:
    name: str = ""


@dataclass
class Person:
    name: str = ""
    age: int = 0
    pets: list[Pet] = field(default_factory=list)


class Status(enum.Enum):
    NEW = 1
    DONE = 2


@dataclass
class Everything:
    flag: bool = False
    count: int = 0
    ratio: float = 0.0
    price: Decimal = Decimal(0)
    label: str = ""
    initial: Char = Char("")
    born: date = date(1900, 1, 1)
    seen: datetime = datetime(1900, 1, 1)
    ident: uuid.UUID = uuid.UUID(int=0)
    status: Status = Status.NEW
    maybe: Optional[int] = None
    tags: tuple[str, ...] = ()
    owner: Person = field(default_factory=Person)


@dataclass
class Shift:
    starts: time = time(0, 0)
    length: timedelta = timedelta(0)
    overtime: Optional[int] = None


class Point:
    x: int
    y: int

    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str


class Exploding:
    value: int

    def __init__(self) -> None:
        raise RuntimeError("boom")


class Shape(ABC):
    name: str

    @abstractmethod
    def area(self) -> float:
        ...


@dataclass
class Holder:
    label: str = ""
    bomb: Optional[Exploding] = None
    broken: Exploding = None
    shape: Shape = None
    point: Point = None


class Gauge:
    unit: str

    def __init__(self) -> None:
        self.unit = ""
        self._level = 0

    @property
    def level(self) -> int:
        return self._level

    @level.setter
    def level(self, value: int) -> None:
        self._level = value

    @property
    def reading(self) -> str:
        return f"{self._level}{self.unit}"


@dataclass
class Node:
    value: int = 0
    next: Optional[Node] = None
    children: list[Node] = field(default_factory=list)


@dataclass
class Left:
    right: Optional[Right] = None
    name: str = ""


@dataclass
class Right:
    left: Left = None
    name: str = ""


class Unresolved:
    thing: "DefinitelyNotDefined"


@dataclass
class WithUnresolved:
    label: str = ""
    inner: Unresolved = None


@dataclass
class WithMeta:
    name: str = ""
    meta: dict[str, int] = field(default_factory=dict)


def _is_text(s) -> bool:
    return isinstance(s, str) and len(s) == 12 and set(s) <= set(ALPHABET)


@pytest.fixture()
def src() -> RandomValueSource:
    return RandomValueSource(2024)


# --- Scenario --------------------------------------------------------------------

def test_person_with_pets_scenario(src):
    p = populate(Person, source=src)
    assert isinstance(p, Person)
    assert _is_text(p.name)
    assert 0 <= p.age < 1000
    assert len(p.pets) == 3
    assert all(isinstance(pet, Pet) and _is_text(pet.name) for pet in p.pets)
    assert compare(p, p) == (True, [])


def test_every_member_kind_is_filled(src):
    e = populate(Everything, source=src)
    assert isinstance(e.flag, bool)
    assert type(e.count) is int and 0 <= e.count < 1000
    assert type(e.ratio) is float
    assert isinstance(e.price, Decimal)
    assert _is_text(e.label)
    assert len(e.initial) == 1 and e.initial in ALPHABET
    assert DATE_EPOCH <= e.born <= date.today()
    assert e.seen.year >= 1995
    assert e.ident != uuid.UUID(int=0) and e.ident.version == 4
    assert e.status in (Status.NEW, Status.DONE)
    assert e.maybe is None or 0 <= e.maybe < 1000
    assert len(e.tags) == 3 and all(_is_text(t) for t in e.tags)
    assert isinstance(e.owner, Person) and _is_text(e.owner.name)
    assert len(e.owner.pets) == 3


def test_classes_requiring_arguments_get_bare_instances(src):
    pt = populate(Point, source=src)
    assert isinstance(pt, Point)
    assert 0 <= pt.x < 1000 and 0 <= pt.y < 1000


def test_frozen_dataclasses_are_filled(src):
    m = populate(Money, source=src)
    assert isinstance(m, Money)
    assert isinstance(m.amount, Decimal) and _is_text(m.currency)


def test_existing_optional_values_are_replaced_not_emptied():
    for seed in range(50):
        s = populate(Shift(overtime=5), source=RandomValueSource(seed))
        assert s.overtime is not None and 0 <= s.overtime < 1000


def test_time_members_are_random_and_compare_equal_to_themselves(src):
    shifts = [populate(Shift, source=src) for _ in range(20)]
    assert len({s.starts for s in shifts}) > 1
    assert all(timedelta(0) <= s.length < timedelta(days=1) for s in shifts)
    assert compare(shifts[0], shifts[0]).equal


def test_without_bare_instances_argument_classes_are_unconstructible(src):
    ctor = Constructor(bare_instances=False)
    assert populate(Point, source=src, constructor=ctor) is None
    h = populate(Holder, source=src, constructor=ctor)
    assert h.point is None
    assert _is_text(h.label)


def test_constructor_raises_construction_error():
    ctor = Constructor()
    with pytest.raises(ConstructionError):
        ctor.construct(Exploding)
    with pytest.raises(ConstructionError):
        ctor.construct(Shape)
    assert isinstance(ctor, ConstructorLike)


def test_unconstructible_top_level_type_returns_default(src, caplog):
    caplog.set_level(logging.WARNING, logger="pydummy")
    assert populate(Exploding, source=src) is None
    assert "cannot construct" in caplog.text


def test_unconstructible_nested_members_do_not_abort_the_pass(src):
    h = populate(Holder, source=src)
    assert _is_text(h.label)
    assert h.bomb is None
    assert h.broken is None
    assert h.shape is None
    assert isinstance(h.point, Point)


def test_read_only_members_are_skipped(src):
    g = populate(Gauge, source=src)
    assert _is_text(g.unit)
    assert 0 <= g.level < 1000
    assert g.reading == f"{g.level}{g.unit}"


def test_self_referencing_type_terminates(src):
    n = populate(Node, source=src)
    assert isinstance(n, Node)
    assert 0 <= n.value < 1000
    assert n.next is None
    assert n.children == [None, None, None]


def test_mutually_recursive_types_terminate(src):
    left = populate(Left, source=src)
    assert _is_text(left.name)
    if left.right is not None:
        assert left.right.left is None
        assert _is_text(left.right.name)


def test_nested_type_with_unresolvable_annotations_becomes_none(src):
    w = populate(WithUnresolved, source=src)
    assert _is_text(w.label)
    assert w.inner is None


def test_populate_existing_instance_in_place(src):
    p = Person()
    out = populate(p, source=src)
    assert out is p
    assert _is_text(p.name)
    assert len(p.pets) == 3


def test_existing_values_of_unsupported_members_are_kept(src):
    w = WithMeta(meta={"k": 1})
    populate(w, source=src)
    assert w.meta == {"k": 1}
    assert _is_text(w.name)


def test_non_class_targets_are_synthesized_directly(src):
    pets = populate(list[Pet], source=src)
    assert len(pets) == 3 and all(isinstance(x, Pet) for x in pets)
    assert 0 <= populate(int, source=src) < 1000
    assert _is_text(populate(str, source=src))


def test_same_seed_same_graph():
    a = populate(Person, source=RandomValueSource(9))
    b = populate(Person, source=RandomValueSource(9))
    assert a == b
    assert a is not b


# --- populate_many ---------------------------------------------------------------

class CountingConstructor(Constructor):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def construct(self, cls: type):
        self.calls += 1
        return super().construct(cls)


def test_populate_many_yields_count_independent_instances(src):
    people = list(populate_many(Person, 5, source=src))
    assert len(people) == 5
    assert all(isinstance(p, Person) for p in people)
    assert len({p.name for p in people}) == 5
    assert len({id(p) for p in people}) == 5


def test_populate_many_is_lazy(src):
    ctor = CountingConstructor()
    it = populate_many(Pet, 3, source=src, constructor=ctor)
    assert isinstance(it, types.GeneratorType)
    assert ctor.calls == 0
    next(it)
    assert ctor.calls == 1
    rest = list(it)
    assert len(rest) == 2 and ctor.calls == 3


def test_populate_many_zero_and_negative(src):
    assert list(populate_many(Pet, 0, source=src)) == []
    with pytest.raises(ValueError):
        populate_many(Pet, -1, source=src)


def test_populator_object_api(src):
    pop = ObjectPopulator(source=src)
    assert pop.synthesizer.populator is pop
    assert isinstance(pop.populate(Pet), Pet)
    assert pop.fill(Pet()).name != ""
