"""Nested count distributions and their elementwise merge."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from itertools import zip_longest
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

Number = Union[int, float]


class ShapeMismatchError(ValueError):
    """Raised when two distributions for the same key disagree on dimensionality."""


@dataclass(frozen=True)
class Leaf:
    """Plain count at the bottom of a 2D distribution."""

    value: Number = 0


@dataclass(frozen=True)
class Pair:
    """Known count and first-unknown count at the bottom of a 3D distribution."""

    known: Number = 0
    first_unknown: Number = 0


@dataclass(frozen=True)
class Vector:
    """One dimension of a distribution."""

    items: Tuple["Distribution", ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> "Distribution":
        return self.items[index]


Distribution = Union[Leaf, Pair, Vector]


def merge(a: Optional[Distribution], b: Optional[Distribution]) -> Distribution:
    """Sum two distributions cell by cell.

    Missing entries on either side (ragged vectors, or ``None``) count as zero.
    Meeting two different node kinds at the same index is a corruption of the
    stored data and raises ShapeMismatchError.
    """
    if a is None and b is None:
        raise ValueError("At least one distribution is required to merge.")
    if a is None:
        return b  # type: ignore[return-value]
    if b is None:
        return a
    if type(a) is not type(b):
        raise ShapeMismatchError(f"Cannot merge {type(a).__name__} with {type(b).__name__}.")
    if isinstance(a, Leaf):
        return Leaf(a.value + b.value)  # type: ignore[union-attr]
    if isinstance(a, Pair):
        return Pair(a.known + b.known, a.first_unknown + b.first_unknown)  # type: ignore[union-attr]
    return Vector(tuple(merge(left, right) for left, right in zip_longest(a.items, b.items)))  # type: ignore[union-attr]


def merge_all(distributions: Iterable[Distribution]) -> Distribution:
    """Merge any number of distributions, padding shorter ones with zeros."""
    return reduce(merge, distributions, Vector())


def zeros_like(distribution: Distribution) -> Distribution:
    """Distribution of the same shape with every count set to zero."""
    if isinstance(distribution, Leaf):
        return Leaf(0)
    if isinstance(distribution, Pair):
        return Pair(0, 0)
    return Vector(tuple(zeros_like(item) for item in distribution.items))


def total(distribution: Distribution, known_only: bool = False) -> Number:
    """Sum of every count in the distribution."""
    if isinstance(distribution, Leaf):
        return distribution.value
    if isinstance(distribution, Pair):
        return distribution.known if known_only else distribution.known + distribution.first_unknown
    return sum(total(item, known_only) for item in distribution.items)


def rank(distribution: Distribution) -> int:
    """Number of dimensions, counting a Pair as one."""
    if isinstance(distribution, Leaf):
        return 0
    if isinstance(distribution, Pair):
        return 1
    for item in distribution.items:
        return 1 + rank(item)
    return 1


def from_nested(data: Any, rank: int) -> Distribution:
    """Build a distribution from nested lists.

    ``rank=2`` reads ``rows[i][j]`` as plain counts. ``rank=3`` reads the innermost
    two-element lists as ``(known, first_unknown)`` pairs.
    """
    if rank not in (2, 3):
        raise ValueError(f"Unsupported distribution rank {rank}; expected 2 or 3.")
    return _from_nested(data, rank, leaf_depth=rank - 2)


def _from_nested(data: Any, depth: int, leaf_depth: int) -> Distribution:
    if depth == leaf_depth == 0:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise ShapeMismatchError(f"Expected a count, received {data!r}.")
        return Leaf(data)
    if not isinstance(data, Sequence) or isinstance(data, str):
        raise ShapeMismatchError(f"Expected a nested list, received {data!r}.")
    if depth == leaf_depth == 1:
        if len(data) != 2 or not all(isinstance(value, (int, float)) for value in data):
            raise ShapeMismatchError(f"Expected a (known, first unknown) pair, received {data!r}.")
        return Pair(data[0], data[1])
    return Vector(tuple(_from_nested(item, depth - 1, leaf_depth) for item in data))


def to_nested(distribution: Distribution) -> Any:
    """Inverse of `from_nested`."""
    if isinstance(distribution, Leaf):
        return distribution.value
    if isinstance(distribution, Pair):
        return [distribution.known, distribution.first_unknown]
    return [to_nested(item) for item in distribution.items]


def vector(rows: Iterable[Iterable[Distribution]]) -> Vector:
    """Wrap a list of cell lists into a two-level Vector."""
    return Vector(tuple(Vector(tuple(cells)) for cells in rows))


__all__ = [
    "Distribution",
    "Leaf",
    "Number",
    "Pair",
    "ShapeMismatchError",
    "Vector",
    "from_nested",
    "merge",
    "merge_all",
    "rank",
    "to_nested",
    "total",
    "vector",
    "zeros_like",
]
