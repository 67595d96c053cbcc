# pydummy/classify.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from fractions import Fraction
from typing import Annotated, Any, Literal, NewType, Optional, Tuple, Union, get_args, get_origin
import collections.abc as cabc
import enum
import logging
import types
import uuid

_log = logging.getLogger("pydummy.classify")

# Python has no single-character type; annotate with ``Char`` to get one.
Char = NewType("Char", str)


class Category(enum.Enum):
    BOOLEAN = "boolean"
    NUMERIC_INTEGER = "numeric-integer"
    NUMERIC_FRACTIONAL = "numeric-fractional"
    TEXT = "text"
    CHARACTER = "character"
    DATE_TIME = "date-time"
    UNIQUE_IDENTIFIER = "unique-identifier"
    ENUMERATION = "enumeration"
    OPTIONAL_VALUE = "optional-value"
    SEQUENCE = "sequence"
    FIXED_ARRAY = "fixed-array"
    COMPLEX_OBJECT = "complex-object"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Classification result for one annotation.

    ``type`` is the annotation after unwrapping ``Annotated`` and ``NewType``;
    ``element_type``/``container`` are set for sequences and fixed arrays,
    ``underlying_type`` for optional values and ``choices`` for enumerations.
    """
    category: Category
    type: Any
    element_type: Any = None
    underlying_type: Any = None
    container: Optional[type] = None
    choices: Tuple[Any, ...] = ()


# origin -> concrete container rebuilt by the synthesizer
_SEQUENCE_ORIGINS = {
    list: list,
    cabc.Sequence: list,
    cabc.MutableSequence: list,
    cabc.Iterable: list,
    cabc.Collection: list,
    set: set,
    cabc.Set: set,
    cabc.MutableSet: set,
    frozenset: frozenset,
    deque: deque,
}

_FRACTIONAL = (float, Decimal, Fraction, complex)

_UNION_ORIGINS = (Union, types.UnionType)


def _unwrap(tp: Any) -> Any:
    while True:
        if get_origin(tp) is Annotated:
            tp = get_args(tp)[0]
            continue
        if tp is not Char and hasattr(tp, "__supertype__"):
            tp = tp.__supertype__
            continue
        return tp


def _is_class(tp: Any) -> bool:
    return isinstance(tp, type)


def _classify(tp: Any) -> TypeDescriptor:
    tp = _unwrap(tp)
    if tp is Any:
        return TypeDescriptor(Category.UNSUPPORTED, tp)

    origin = get_origin(tp)
    args = get_args(tp)

    # 1) sequences
    if origin in _SEQUENCE_ORIGINS:
        return TypeDescriptor(
            Category.SEQUENCE, tp,
            element_type=args[0] if args else Any,
            container=_SEQUENCE_ORIGINS[origin],
        )
    if origin is None and tp in (list, set, frozenset, deque):
        return TypeDescriptor(Category.SEQUENCE, tp, element_type=Any, container=tp)

    # 2) homogeneous tuples
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return TypeDescriptor(Category.FIXED_ARRAY, tp, element_type=args[0], container=tuple)
        return TypeDescriptor(Category.UNSUPPORTED, tp)
    if tp is tuple:
        return TypeDescriptor(Category.FIXED_ARRAY, tp, element_type=Any, container=tuple)

    # 3) bool before int: bool is an int subclass
    if tp is bool:
        return TypeDescriptor(Category.BOOLEAN, tp)

    # 4) enumerations (IntEnum must not land in the numeric bucket)
    if _is_class(tp) and issubclass(tp, enum.Enum):
        return TypeDescriptor(Category.ENUMERATION, tp, choices=tuple(tp))
    if origin is Literal:
        return TypeDescriptor(Category.ENUMERATION, tp, choices=tuple(args))

    # 5) numbers
    if _is_class(tp) and issubclass(tp, int):
        return TypeDescriptor(Category.NUMERIC_INTEGER, tp)
    if _is_class(tp) and issubclass(tp, _FRACTIONAL):
        return TypeDescriptor(Category.NUMERIC_FRACTIONAL, tp)

    # 6-7) text
    if tp is Char:
        return TypeDescriptor(Category.CHARACTER, tp)
    if _is_class(tp) and issubclass(tp, str):
        return TypeDescriptor(Category.TEXT, tp)

    # 8-9)
    if _is_class(tp) and issubclass(tp, (date, time, timedelta)):
        return TypeDescriptor(Category.DATE_TIME, tp)
    if _is_class(tp) and issubclass(tp, uuid.UUID):
        return TypeDescriptor(Category.UNIQUE_IDENTIFIER, tp)

    # 10) Optional[X] / X | None
    if origin in _UNION_ORIGINS:
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1 and len(rest) < len(args):
            return TypeDescriptor(Category.OPTIONAL_VALUE, tp, underlying_type=rest[0])
        return TypeDescriptor(Category.UNSUPPORTED, tp)

    # 11) user classes
    if _is_class(tp) and origin is None and tp.__module__ not in ("builtins", "typing", "types"):
        return TypeDescriptor(Category.COMPLEX_OBJECT, tp)

    return TypeDescriptor(Category.UNSUPPORTED, tp)


def classify(tp: Any) -> TypeDescriptor:
    """
    Assign ``tp`` to exactly one ``Category``. Never raises: anything that is
    not recognized (or that breaks introspection) is ``UNSUPPORTED``.
    """
    try:
        desc = _classify(tp)
    except Exception as exc:
        _log.debug("classification of %r failed (%s); treating as unsupported", tp, exc)
        return TypeDescriptor(Category.UNSUPPORTED, tp)
    if desc.category is Category.UNSUPPORTED:
        _log.debug("no category for %r", tp)
    return desc
