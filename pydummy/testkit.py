# pydummy/testkit.py
from __future__ import annotations

from typing import Any
import pprint

from .compare import ComparisonResult, compare

__all__ = [
    "assert_structurally_equal",
    "format_divergences",
]

_WRAP_WIDTH = 88


def format_divergences(result: ComparisonResult) -> str:
    """One line per divergence: ``path: value``."""
    lines = []
    for entry in result.divergences:
        lines.append(f"  {entry.path}: {pprint.pformat(entry.value, width=_WRAP_WIDTH)}")
    return "\n".join(lines)


def assert_structurally_equal(first: Any, second: Any, *, allow_unmatched: bool = True) -> ComparisonResult:
    """
    Assert that ``compare(first, second)`` succeeds.

    With ``allow_unmatched=False`` members of ``first`` missing on ``second``
    also fail the assertion. Returns the comparison result so callers can
    inspect the divergences further.
    """
    result = compare(first, second)
    if not result.equal:
        details = format_divergences(result)
        msg = f"objects differ structurally: {first!r} != {second!r}"
        if details:
            msg += f"\nunmatched members seen before the mismatch:\n{details}"
        raise AssertionError(msg)
    if not allow_unmatched and result.divergences:
        raise AssertionError(
            "members of the first object have no counterpart on the second:\n"
            + format_divergences(result)
        )
    return result
