# pydummy/synthesize.py
from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal
from typing import Any, FrozenSet, Optional, get_origin
import logging

from .classify import Category, TypeDescriptor, classify
from .random_source import (
    SECONDS_PER_DAY,
    get_default_source,
    random_date,
    random_string,
    random_time,
    random_uuid,
)
from .typing_defs import RandomSourceLike

_log = logging.getLogger("pydummy.synthesize")

# Every synthesized sequence/array holds exactly this many elements.
SEQUENCE_LENGTH = 3
# Integers are drawn from [0, MAX_INT).
MAX_INT = 1000

_EMPTY_DEFAULTS = (dict, bytes, bytearray)


def default_value(tp: Any) -> Any:
    """
    Best-effort "absent" value for ``tp``: an empty instance for the few
    builtin containers that have a natural empty form, ``None`` otherwise.
    """
    target = get_origin(tp) or tp
    if target in _EMPTY_DEFAULTS:
        return target()
    return None


def _to_fractional(value: float, tp: type) -> Any:
    if issubclass(tp, Decimal):
        return tp(repr(value))
    return tp(value)


class ValueSynthesizer:
    """
    Produce a dummy value for a classified annotation.

    One handler per ``Category`` (see ``_DISPATCH``); nested user classes are
    handed back to the owning ``ObjectPopulator``. ``active`` is the set of
    classes currently being populated higher up the call stack and is only
    threaded through so the populator can stop on cycles.
    """

    _DISPATCH = {
        Category.BOOLEAN: "_boolean",
        Category.NUMERIC_INTEGER: "_integer",
        Category.NUMERIC_FRACTIONAL: "_fractional",
        Category.TEXT: "_text",
        Category.CHARACTER: "_character",
        Category.DATE_TIME: "_date_time",
        Category.UNIQUE_IDENTIFIER: "_unique_identifier",
        Category.ENUMERATION: "_enumeration",
        Category.OPTIONAL_VALUE: "_optional",
        Category.SEQUENCE: "_sequence",
        Category.FIXED_ARRAY: "_sequence",
        Category.COMPLEX_OBJECT: "_complex_object",
        Category.UNSUPPORTED: "_unsupported",
    }

    def __init__(self, source: Optional[RandomSourceLike] = None, populator: Any = None) -> None:
        self.source = source if source is not None else get_default_source()
        self._populator = populator

    @property
    def populator(self) -> Any:
        if self._populator is None:
            from .populate import ObjectPopulator

            self._populator = ObjectPopulator(source=self.source, synthesizer=self)
        return self._populator

    def synthesize(
        self,
        descriptor: TypeDescriptor,
        existing: Any = None,
        active: FrozenSet[type] = frozenset(),
    ) -> Any:
        handler = getattr(self, self._DISPATCH[descriptor.category])
        return handler(descriptor, existing, active)

    def value_for(self, tp: Any, existing: Any = None, active: FrozenSet[type] = frozenset()) -> Any:
        """Classify ``tp`` and synthesize a value for it."""
        return self.synthesize(classify(tp), existing, active)

    # ---- handlers ----

    def _boolean(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> bool:
        return self.source.next_bool()

    def _integer(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> int:
        return desc.type(self.source.next_int(MAX_INT))

    def _fractional(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        value = self.source.next_int(MAX_INT) + self.source.next_float()
        return _to_fractional(value, desc.type)

    def _text(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> str:
        return desc.type(random_string(self.source))

    def _character(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> str:
        return random_string(self.source)[0]

    def _date_time(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        if issubclass(desc.type, timedelta):
            return desc.type(seconds=self.source.next_int(SECONDS_PER_DAY))
        if issubclass(desc.type, time):
            t = random_time(self.source)
            return desc.type(t.hour, t.minute, t.second)
        # date.fromordinal / datetime.fromordinal (midnight) both exist
        return desc.type.fromordinal(random_date(self.source).toordinal())

    def _unique_identifier(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        return random_uuid(self.source)

    def _enumeration(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        if not desc.choices:
            _log.debug("enumeration %r declares no values", desc.type)
            return None
        return desc.choices[self.source.next_int(len(desc.choices))]

    def _optional(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        # a member that already holds a value is treated as its underlying type
        if existing is not None:
            return self.value_for(desc.underlying_type, existing, active)
        if self.source.next_bool():
            return self.value_for(desc.underlying_type, None, active)
        return None

    def _sequence(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        element = classify(desc.element_type)
        items = [self.synthesize(element, None, active) for _ in range(SEQUENCE_LENGTH)]
        try:
            return desc.container(items)
        except TypeError:
            # set[...] of unhashable instances: keep the elements, lose the set
            _log.debug("cannot build %s from %d elements; returning a list", desc.container, len(items))
            return list(items)

    def _complex_object(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        return self.populator.populate_nested(desc.type, active)

    def _unsupported(self, desc: TypeDescriptor, existing: Any, active: FrozenSet[type]) -> Any:
        if existing is not None:
            return existing
        return default_value(desc.type)
