# pydummy/shallow.py
from __future__ import annotations

from typing import Optional, TypeVar
import logging

from .errors import ReflectionInvocationError
from .populate import get_default_constructor
from .schema import assign, get_object_attributes, schema_for
from .typing_defs import ConstructorLike

_log = logging.getLogger("pydummy.shallow")

T = TypeVar("T")


def shallow_copy(source: T, *, constructor: Optional[ConstructorLike] = None) -> T:
    """
    Build a new ``type(source)`` and copy each writable top-level member onto it
    **by reference**.

    This is not a deep copy: nested objects and containers are shared between
    ``source`` and the copy, so mutating ``copy.pets.append(...)`` is visible
    through ``source.pets``. Use ``copy.deepcopy`` when independence is needed.

    Classes without a member table (no annotations, properties or
    registration) get their public instance attributes copied instead.

    Raises
    ------
    ConstructionError
        If ``type(source)`` cannot be instantiated.
    """
    cls = type(source)
    ctor = constructor if constructor is not None else get_default_constructor()
    target = ctor.construct(cls)

    try:
        names = [f.name for f in schema_for(cls).writable()]
    except ReflectionInvocationError as exc:
        _log.debug("%s; copying instance attributes", exc)
        names = []
    if not names:
        names = [k for k in get_object_attributes(source) if not k.startswith("_")]

    for name in names:
        try:
            value = getattr(source, name)
        except AttributeError:
            continue
        assign(target, name, value)
    return target
