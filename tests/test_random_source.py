# tests/test_random_source.py
from __future__ import annotations

from datetime import date
import uuid

import pytest

import pydummy.random_source as rs
from pydummy.random_source import (
    ALPHABET,
    DATE_EPOCH,
    STRING_LENGTH,
    RandomValueSource,
    random_date,
    random_string,
    random_uuid,
)
from pydummy.typing_defs import RandomSourceLike


def test_same_seed_same_stream():
    a, b = RandomValueSource(42), RandomValueSource(42)
    assert [a.next_int(1000) for _ in range(20)] == [b.next_int(1000) for _ in range(20)]
    assert a.next_string() == b.next_string()
    assert a.next_uuid() == b.next_uuid()


def test_reseed_restarts_the_stream():
    src = RandomValueSource(5)
    first = [src.next_float() for _ in range(5)]
    src.reseed(5)
    assert [src.next_float() for _ in range(5)] == first
    assert src.seed == 5


def test_primitives_ranges():
    src = RandomValueSource(1)
    for _ in range(500):
        assert 0 <= src.next_int(7) < 7
        assert 0.0 <= src.next_float() < 1.0
        assert isinstance(src.next_bool(), bool)


@pytest.mark.parametrize("bound", [0, -3])
def test_next_int_rejects_non_positive_bound(bound):
    with pytest.raises(ValueError):
        RandomValueSource(1).next_int(bound)


def test_strings_are_twelve_chars_from_alphabet():
    src = RandomValueSource(3)
    for _ in range(200):
        s = random_string(src)
        assert len(s) == STRING_LENGTH == 12
        assert set(s) <= set(ALPHABET)
    assert ALPHABET == "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


def test_dates_fall_between_epoch_and_today_inclusive():
    src = RandomValueSource(11)
    today = date.today()
    seen = [random_date(src) for _ in range(500)]
    assert all(DATE_EPOCH <= d <= today for d in seen)
    assert DATE_EPOCH == date(1995, 1, 1)


def test_date_span_of_one_day_reaches_both_ends():
    src = RandomValueSource(2)
    today = date(1995, 1, 2)
    seen = {random_date(src, today) for _ in range(200)}
    assert seen == {date(1995, 1, 1), date(1995, 1, 2)}


def test_date_before_epoch_clamps_to_epoch():
    assert random_date(RandomValueSource(0), date(1990, 6, 1)) == DATE_EPOCH


def test_uuids_are_random_version_4():
    src = RandomValueSource(8)
    ids = {random_uuid(src) for _ in range(50)}
    assert len(ids) == 50
    assert all(u.version == 4 for u in ids)
    assert uuid.UUID(int=0) not in ids


def test_source_satisfies_protocol():
    assert isinstance(RandomValueSource(), RandomSourceLike)


def test_default_source_is_shared_and_replaceable(monkeypatch):
    monkeypatch.setattr(rs, "_DEFAULT_SOURCE", None)
    first = rs.get_default_source()
    assert rs.get_default_source() is first

    mine = RandomValueSource(123)
    previous = rs.set_default_source(mine)
    assert previous is first
    assert rs.get_default_source() is mine

    again = rs.reseed(9)
    assert again is mine and mine.seed == 9
