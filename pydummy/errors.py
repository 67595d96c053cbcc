from __future__ import annotations

from typing import Any


class PydummyError(Exception):
    """Base exception for pydummy."""


class ConfigError(PydummyError):
    pass


class ConstructionError(PydummyError):
    """
    Raised by the construction collaborator when a class cannot be instantiated:
    no usable parameterless path, an ``__init__`` that raises, or an abstract
    class.

    The populator catches it; callers of ``populate`` never see it.
    """

    def __init__(self, cls: Any, reason: str | None = None) -> None:
        self.cls = cls
        self.reason = reason
        name = getattr(cls, "__qualname__", repr(cls))
        message = f"cannot construct {name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ReflectionInvocationError(PydummyError):
    """
    Raised when the member table of a class cannot be derived, typically
    because an annotation refers to a name that does not resolve.
    """

    def __init__(self, cls: Any, reason: str | None = None) -> None:
        self.cls = cls
        self.reason = reason
        name = getattr(cls, "__qualname__", repr(cls))
        message = f"cannot introspect {name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ShapeMismatchError(PydummyError):
    """
    Two sequences compared element-wise do not have the same length, or the
    second operand is not a sequence at all.

    Parameters
    ----------
    path : str
        Location of the sequence inside the compared graph ("" for the root).
    first_len : int
        Length of the first operand.
    second_len : int | None
        Length of the second operand, ``None`` when it is not a sequence.
    """

    def __init__(self, path: str, first_len: int, second_len: int | None) -> None:
        self.path = path
        self.first_len = first_len
        self.second_len = second_len
        where = path or "<root>"
        if second_len is None:
            message = f"shape mismatch at {where}: second operand is not a sequence"
        else:
            message = f"shape mismatch at {where}: len {first_len} != {second_len}"
        super().__init__(message)
