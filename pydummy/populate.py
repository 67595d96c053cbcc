# pydummy/populate.py
from __future__ import annotations

from typing import Any, FrozenSet, Iterator, Optional, TypeVar, get_origin
import inspect
import logging

from .classify import Category, classify
from .errors import ConstructionError, ReflectionInvocationError
from .random_source import get_default_source
from .schema import assign, schema_for
from .synthesize import ValueSynthesizer, default_value
from .typing_defs import ConstructorLike, RandomSourceLike

_log = logging.getLogger("pydummy.populate")

T = TypeVar("T")


class Constructor:
    """
    Default construction service.

    - ``cls()`` when the signature accepts a call with no arguments; anything
      raised by that call becomes a ``ConstructionError``.
    - Otherwise, when ``bare_instances`` is on, an uninitialised instance from
      ``cls.__new__(cls)``; the populator then fills every writable member.
      Abstract classes and builtins that need arguments still fail here.
    """

    def __init__(self, bare_instances: bool = True) -> None:
        self.bare_instances = bare_instances

    def __repr__(self) -> str:
        return f"Constructor(bare_instances={self.bare_instances!r})"

    def construct(self, cls: type) -> Any:
        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError):
            sig = None

        needs_args = False
        if sig is not None:
            try:
                sig.bind()
            except TypeError:
                needs_args = True

        if not needs_args:
            try:
                return cls()
            except Exception as exc:
                raise ConstructionError(cls, f"{type(exc).__name__}: {exc}") from exc

        if not self.bare_instances:
            raise ConstructionError(cls, "no parameterless constructor")
        try:
            return cls.__new__(cls)
        except Exception as exc:
            raise ConstructionError(cls, f"{type(exc).__name__}: {exc}") from exc


_DEFAULT_CONSTRUCTOR: ConstructorLike = Constructor()


def get_default_constructor() -> ConstructorLike:
    return _DEFAULT_CONSTRUCTOR


def set_default_constructor(constructor: ConstructorLike) -> ConstructorLike:
    """Install the construction service used by ``populate``; return the previous one."""
    global _DEFAULT_CONSTRUCTOR
    previous = _DEFAULT_CONSTRUCTOR
    _DEFAULT_CONSTRUCTOR = constructor
    return previous


def _is_annotation(target: Any) -> bool:
    if get_origin(target) is not None:
        return True
    if isinstance(target, type):
        return True
    return target is Any or hasattr(target, "__supertype__")


def _current(instance: Any, name: str) -> Any:
    try:
        return getattr(instance, name, None)
    except Exception:
        return None


class ObjectPopulator:
    """
    Construct instances and fill their writable members with dummy values.

    Recursion into nested classes is guarded: a class that is already being
    populated further up the stack yields ``None`` instead of recursing again,
    so self-referencing types terminate.
    """

    def __init__(
        self,
        source: Optional[RandomSourceLike] = None,
        constructor: Optional[ConstructorLike] = None,
        synthesizer: Optional[ValueSynthesizer] = None,
    ) -> None:
        self.source = source if source is not None else get_default_source()
        self.constructor = constructor if constructor is not None else _DEFAULT_CONSTRUCTOR
        self.synthesizer = (
            synthesizer if synthesizer is not None else ValueSynthesizer(self.source, populator=self)
        )

    # ---- public API ----

    def populate(self, target: Any) -> Any:
        """
        ``target`` is either an annotation (a class, ``list[Pet]``, ``int``, ...)
        for which a new value is built, or an existing instance whose writable
        members are filled in place. Never raises construction or
        introspection errors: the top-level fallback is ``default_value``.
        """
        if not _is_annotation(target):
            return self.fill(target)

        desc = classify(target)
        if desc.category is not Category.COMPLEX_OBJECT:
            return self.synthesizer.synthesize(desc)
        try:
            return self._build(desc.type, frozenset())
        except (ConstructionError, ReflectionInvocationError) as exc:
            _log.warning("%s; returning default value", exc)
            return default_value(desc.type)

    def populate_many(self, tp: Any, count: int) -> Iterator[Any]:
        """Lazily yield ``count`` independently populated values of ``tp``."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        return (self.populate(tp) for _ in range(count))

    def fill(self, instance: T) -> T:
        cls = type(instance)
        try:
            return self._fill(instance, cls, frozenset({cls}))
        except ReflectionInvocationError as exc:
            _log.warning("%s; instance left unchanged", exc)
            return instance

    # ---- recursion ----

    def populate_nested(self, cls: type, active: FrozenSet[type]) -> Any:
        if cls in active:
            _log.debug("cycle through %s; leaving member empty", cls.__qualname__)
            return None
        try:
            return self._build(cls, active)
        except (ConstructionError, ReflectionInvocationError) as exc:
            _log.warning("%s; leaving member empty", exc)
            return None

    def _build(self, cls: type, active: FrozenSet[type]) -> Any:
        instance = self.constructor.construct(cls)
        return self._fill(instance, cls, active | {cls})

    def _fill(self, instance: Any, cls: type, active: FrozenSet[type]) -> Any:
        for field in schema_for(cls).writable():
            value = self.synthesizer.value_for(field.type, _current(instance, field.name), active)
            try:
                assign(instance, field.name, value)
            except Exception as exc:
                _log.warning("cannot set %s.%s: %s", cls.__qualname__, field.name, exc)
        return instance


# ------------------------- module-level helpers -------------------------

def populate(
    target: Any,
    *,
    source: Optional[RandomSourceLike] = None,
    constructor: Optional[ConstructorLike] = None,
) -> Any:
    """Populate ``target`` using the shared random source unless one is given."""
    return ObjectPopulator(source=source, constructor=constructor).populate(target)


def populate_many(
    tp: Any,
    count: int,
    *,
    source: Optional[RandomSourceLike] = None,
    constructor: Optional[ConstructorLike] = None,
) -> Iterator[Any]:
    return ObjectPopulator(source=source, constructor=constructor).populate_many(tp, count)
