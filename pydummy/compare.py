# pydummy/compare.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from fractions import Fraction
from typing import Any, List, Mapping, NamedTuple, Set, Tuple
import collections.abc as cabc
import enum
import logging
import uuid

from .errors import ShapeMismatchError
from .schema import member_names

_log = logging.getLogger("pydummy.compare")

_MISSING = object()

_TEXT = (str, bytes, bytearray)
_SCALARS = (bool, int, float, complex, Decimal, Fraction, uuid.UUID, enum.Enum, timedelta)
_TEMPORAL = (date, time)


class DivergenceEntry(NamedTuple):
    """A member of the first operand that had no counterpart on the second."""
    path: str
    value: Any


class ComparisonResult(NamedTuple):
    """
    ``equal`` is the verdict. ``divergences`` is diagnostic only: it can be
    non-empty when ``equal`` is True (missing members do not fail a
    comparison) and it only holds what was collected before a failure
    stopped the traversal.
    """
    equal: bool
    divergences: List[DivergenceEntry]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, cabc.Sequence) and not isinstance(value, _TEXT)


def canonical_temporal(value: Any) -> str:
    """String form used to compare dates/times, truncated to whole seconds."""
    if isinstance(value, (datetime, time)):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _read(obj: Any, name: Any) -> Any:
    if isinstance(obj, Mapping):
        return obj[name] if name in obj else _MISSING
    try:
        return getattr(obj, name, _MISSING)
    except Exception as exc:
        _log.debug("reading %r on %s failed: %s", name, type(obj).__qualname__, exc)
        return _MISSING


def _join(path: str, name: Any) -> str:
    if not isinstance(name, str):
        return f"{path}[{name!r}]"
    return f"{path}.{name}" if path else name


class ObjectComparator:
    """
    Structural comparison driven by the members of the *first* operand.

    Members the second operand lacks are recorded as divergences and
    skipped; any other mismatch stops the traversal and fails the
    comparison. Cycles are cut by remembering which ``(first, second)``
    pairs are currently being compared: meeting one again counts as equal.
    """

    def compare(self, first: Any, second: Any) -> ComparisonResult:
        out: List[DivergenceEntry] = []
        try:
            equal = self._compare(first, second, "", out, set())
        except ShapeMismatchError as exc:
            _log.debug("%s", exc)
            equal = False
        return ComparisonResult(equal, out)

    def _compare(
        self,
        first: Any,
        second: Any,
        path: str,
        out: List[DivergenceEntry],
        active: Set[Tuple[int, int]],
    ) -> bool:
        if first is None:
            return second is None
        if isinstance(first, _TEXT):
            return first == second
        if _is_sequence(first):
            return self._compare_sequences(first, second, path, out, active)
        if second is None:
            return False
        if isinstance(first, _TEMPORAL):
            return canonical_temporal(first) == canonical_temporal(second)
        if isinstance(first, _SCALARS):
            return first == second
        return self._compare_members(first, second, path, out, active)

    def _compare_sequences(
        self,
        first: Any,
        second: Any,
        path: str,
        out: List[DivergenceEntry],
        active: Set[Tuple[int, int]],
    ) -> bool:
        if not _is_sequence(second):
            raise ShapeMismatchError(path, len(first), None)
        key = (id(first), id(second))
        if key in active:
            return True
        active.add(key)
        try:
            for i, (a, b) in enumerate(zip(first, second)):
                if not self._compare(a, b, f"{path}[{i}]", out, active):
                    return False
        finally:
            active.discard(key)
        if len(first) != len(second):
            raise ShapeMismatchError(path, len(first), len(second))
        return True

    def _compare_members(
        self,
        first: Any,
        second: Any,
        path: str,
        out: List[DivergenceEntry],
        active: Set[Tuple[int, int]],
    ) -> bool:
        key = (id(first), id(second))
        if key in active:
            return True
        names = member_names(first)
        if not names:
            return first == second

        active.add(key)
        try:
            for name in names:
                value1 = _read(first, name)
                if value1 is _MISSING:
                    continue
                where = _join(path, name)
                value2 = _read(second, name)
                if value2 is _MISSING:
                    _log.debug("no member %s on %s", where, type(second).__qualname__)
                    out.append(DivergenceEntry(where, value1))
                    continue
                if value1 is None and value2 is None:
                    continue
                if value1 is None or value2 is None:
                    return False
                if not self._compare(value1, value2, where, out, active):
                    return False
            return True
        finally:
            active.discard(key)


def compare(first: Any, second: Any) -> ComparisonResult:
    return ObjectComparator().compare(first, second)
