"""
Bucketing of numeric values into configured ranges.

A list of boundaries ``[b0, b1, ..., bn]`` describes the buckets
``(b0, b1], (b1, b2], ...`` plus an open-ended last bucket ``(bn, inf)``.
Values at or below ``b0`` match no bucket.
"""

from typing import List, Optional, Sequence, Union

Number = Union[int, float]


def validate_boundaries(boundaries: Sequence[Number]) -> None:
    """Raise ``ValueError`` unless ``boundaries`` is strictly ascending."""
    for lower, upper in zip(boundaries, boundaries[1:]):
        if not lower < upper:
            raise ValueError(
                f"Range boundaries must be strictly ascending, got {list(boundaries)}"
            )


def _find_bucket(boundaries: Sequence[Number], value: Number) -> Optional[int]:
    if not boundaries or value <= boundaries[0]:
        return None

    for index, lower in enumerate(boundaries[:-1]):
        if lower < value <= boundaries[index + 1]:
            return index

    return len(boundaries) - 1


def get_range(
    boundaries: Sequence[Number], value: Number
) -> Union[List[Number], Number, None]:
    """
    Return ``[lower, upper]`` for the bucket ``value`` falls into, the last
    boundary alone for the open-ended bucket, or ``None``.
    """
    index = _find_bucket(boundaries, value)
    if index is None:
        return None
    if index == len(boundaries) - 1:
        return boundaries[index]
    return [boundaries[index], boundaries[index + 1]]


def get_range_index(boundaries: Sequence[Number], value: Optional[Number]) -> Optional[int]:
    """1-based index of the bucket ``value`` falls into, or ``None``."""
    if value is None:
        return None
    index = _find_bucket(boundaries, value)
    return None if index is None else index + 1
