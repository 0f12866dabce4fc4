"""Directional traversal over ordered version lists."""

from __future__ import annotations

from typing import Iterator, Sequence


def iterate(versions: Sequence[str], reverse_order: bool = False) -> Iterator[str]:
    """Yield ``versions`` from the low end, or from the high end when
    ``reverse_order`` is set.

    Consumers may stop at any point; nothing past the last requested item is
    visited.
    """
    if reverse_order:
        for index in range(len(versions) - 1, -1, -1):
            yield versions[index]
    else:
        for index in range(len(versions)):
            yield versions[index]
