from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

__all__ = [
    "RandomSourceLike",
    "ConstructorLike",
]


# ----------------------------- Collaborators ---------------------------------

@runtime_checkable
class RandomSourceLike(Protocol):
    """
    Minimal protocol for the source of randomness. The synthesizer only relies
    on these three primitives plus the helpers built on top of them in
    ``RandomValueSource``; alternative sources (fakes in tests, a numpy-backed
    generator, ...) must expose at least this API.
    """

    def next_int(self, bound: int) -> int:
        """Return an integer in ``[0, bound)``. ``bound`` must be positive."""
        ...

    def next_float(self) -> float:
        """Return a float in ``[0.0, 1.0)``."""
        ...

    def next_bool(self) -> bool:
        ...


@runtime_checkable
class ConstructorLike(Protocol):
    """
    Object-construction service. Implementations raise
    ``pydummy.errors.ConstructionError`` when ``cls`` has no usable construction
    path; any other exception is treated as a bug in the implementation.
    """

    def construct(self, cls: type) -> Any:
        ...
