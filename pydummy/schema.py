# pydummy/schema.py
"""
Per-class member tables.

Population and comparison never walk ``__dict__`` blindly to find out what a
class holds: they ask ``schema_for(cls)``, which returns a cached, ordered
table of ``FieldSpec`` rows. A table comes either from an explicit
``register_schema`` call or is derived once from the class itself:

1. dataclass fields, in declaration order;
2. remaining public annotations across the MRO (``ClassVar`` and ``InitVar``
   entries are skipped, ``Final`` entries are read-only);
3. ``property`` objects, typed by the getter's return annotation and writable
   only when a setter exists.
"""
from __future__ import annotations

from dataclasses import dataclass, FrozenInstanceError
from typing import Any, ClassVar, Dict, Final, Iterable, List, Mapping, Optional, Tuple, get_origin, get_args
import dataclasses
import logging
import typing

from .errors import ReflectionInvocationError

_log = logging.getLogger("pydummy.schema")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    type: Any
    writable: bool = True


@dataclass(frozen=True)
class Schema:
    cls: type
    fields: Tuple[FieldSpec, ...]
    registered: bool = False

    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    def writable(self) -> List[FieldSpec]:
        return [f for f in self.fields if f.writable]

    def get(self, name: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


_REGISTERED: Dict[type, Schema] = {}
_DERIVED: Dict[type, Schema] = {}


# ------------------------- registration -------------------------

def register_schema(
    cls: type,
    fields: Mapping[str, Any],
    *,
    read_only: Iterable[str] = (),
) -> Schema:
    """
    Declare the member table of ``cls`` explicitly. Registration wins over
    derivation and is the way to describe classes whose annotations are
    missing, incomplete or misleading.

    Example::

        register_schema(Legacy, {"name": str, "tags": list[str], "id": int},
                        read_only=("id",))
    """
    ro = set(read_only)
    unknown = ro - set(fields)
    if unknown:
        raise ValueError(f"read_only names not in fields: {sorted(unknown)}")
    schema = Schema(
        cls=cls,
        fields=tuple(FieldSpec(name, tp, name not in ro) for name, tp in fields.items()),
        registered=True,
    )
    _REGISTERED[cls] = schema
    _DERIVED.pop(cls, None)
    _log.debug("registered schema for %s: %s", cls.__qualname__, schema.names())
    return schema


def clear_schema_cache(*, registrations: bool = False) -> None:
    _DERIVED.clear()
    if registrations:
        _REGISTERED.clear()


# ------------------------- derivation -------------------------

def _is_classvar(tp: Any) -> bool:
    return tp is ClassVar or get_origin(tp) is ClassVar


def _is_initvar(tp: Any) -> bool:
    return tp is dataclasses.InitVar or isinstance(tp, dataclasses.InitVar)


def _unwrap_final(tp: Any) -> Tuple[Any, bool]:
    if tp is Final:
        return Any, True
    if get_origin(tp) is Final:
        args = get_args(tp)
        return (args[0] if args else Any), True
    return tp, False


def _property_type(prop: property) -> Any:
    if prop.fget is None:
        return Any
    try:
        return typing.get_type_hints(prop.fget).get("return", Any)
    except Exception:
        return Any


def _properties(cls: type) -> Dict[str, property]:
    out: Dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, property):
                out[name] = attr
            elif name in out:
                # shadowed by a plain attribute further down the MRO
                del out[name]
    return out


def _derive(cls: type) -> Schema:
    try:
        hints = typing.get_type_hints(cls)
    except Exception as exc:
        raise ReflectionInvocationError(cls, str(exc)) from exc

    rows: List[FieldSpec] = []
    seen: set[str] = set()

    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            if f.name.startswith("_"):
                continue
            tp, final = _unwrap_final(hints.get(f.name, Any))
            rows.append(FieldSpec(f.name, tp, not final))
            seen.add(f.name)

    props = _properties(cls)

    for name, raw in hints.items():
        if name in seen or name in props or name.startswith("_"):
            continue
        if _is_classvar(raw) or _is_initvar(raw):
            continue
        tp, final = _unwrap_final(raw)
        rows.append(FieldSpec(name, tp, not final))
        seen.add(name)

    for name, prop in props.items():
        if name in seen or name.startswith("_"):
            continue
        rows.append(FieldSpec(name, _property_type(prop), prop.fset is not None))
        seen.add(name)

    return Schema(cls=cls, fields=tuple(rows))


def schema_for(cls: type) -> Schema:
    """
    Return the member table for ``cls``.

    Raises
    ------
    ReflectionInvocationError
        If derivation is needed and the class annotations cannot be resolved.
    """
    if cls in _REGISTERED:
        return _REGISTERED[cls]
    cached = _DERIVED.get(cls)
    if cached is None:
        cached = _derive(cls)
        _DERIVED[cls] = cached
    return cached


def writable_fields(cls: type) -> List[FieldSpec]:
    return schema_for(cls).writable()


# ------------------------- instance helpers -------------------------

def get_object_attributes(obj: Any) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {}
    if hasattr(obj, "__dict__"):
        attrs.update(vars(obj))
    for klass in type(obj).__mro__:
        slots = getattr(klass, "__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in attrs or name in ("__dict__", "__weakref__"):
                continue
            try:
                attrs[name] = getattr(obj, name)
            except AttributeError:
                pass
    return attrs


def member_names(obj: Any) -> List[str]:
    """
    Names the comparator inspects on ``obj``: mapping keys for mappings,
    otherwise the schema fields of ``type(obj)`` followed by any public,
    non-callable instance attribute the schema does not list.
    """
    if isinstance(obj, Mapping):
        return list(obj.keys())
    try:
        names = schema_for(type(obj)).names()
    except ReflectionInvocationError as exc:
        _log.debug("%s; falling back to instance attributes", exc)
        names = []
    for key, value in get_object_attributes(obj).items():
        if key in names or key.startswith("_") or callable(value):
            continue
        names.append(key)
    return names


def assign(obj: Any, name: str, value: Any) -> None:
    """``setattr`` that also fills the fields of frozen dataclasses."""
    try:
        setattr(obj, name, value)
    except FrozenInstanceError:
        object.__setattr__(obj, name, value)
