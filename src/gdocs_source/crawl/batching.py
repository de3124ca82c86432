"""Split oversized work lists into evenly sized batches."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def evenly_chunk(items: Sequence[T], max_batch_size: int) -> list[Sequence[T]]:
    """Split ``items`` into the fewest near-equal batches of at most ``max_batch_size``.

    250 items with a maximum of 100 yield batches of 84, 83 and 83 rather
    than 100, 100 and 50. Order is preserved.

    Args:
        items: Items to split.
        max_batch_size: Upper bound on the size of each batch.

    Returns:
        ``[items]`` unchanged when it already fits, otherwise the batches.

    Raises:
        ValueError: If ``max_batch_size`` is smaller than 1.
    """
    if max_batch_size < 1:
        raise ValueError(f"max_batch_size must be at least 1, got {max_batch_size}")
    if len(items) <= max_batch_size:
        return [items]
    chunks = math.ceil(len(items) / max_batch_size)
    size, remainder = divmod(len(items), chunks)
    batches: list[Sequence[T]] = []
    start = 0
    for index in range(chunks):
        end = start + size + (1 if index < remainder else 0)
        batches.append(items[start:end])
        start = end
    return batches
