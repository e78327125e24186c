"""Coordinate traversal over (sub-regions of) N-dimensional arrays.

Every operator that visits elements goes through :func:`coordinates`, so
visiting order is always row-major and agrees with ravel order.
"""

from __future__ import annotations

import numbers
from itertools import product
from typing import Callable, Iterator, Sequence, Union

from .errors import APLIndexError, APLShapeError
from .values import APLArray

Elision = Union[None, int, Sequence[int]]


def strides(shape: Sequence[int]) -> tuple[int, ...]:
    out = [1] * len(shape)
    for axis in range(len(shape) - 2, -1, -1):
        out[axis] = out[axis + 1] * int(shape[axis + 1])
    return tuple(out)


def ravel_offset(coordinate: Sequence[int], shape: Sequence[int]) -> int:
    return sum(int(c) * s for c, s in zip(coordinate, strides(shape), strict=True))


def unravel_offset(offset: int, shape: Sequence[int]) -> tuple[int, ...]:
    coordinate = []
    for step in strides(shape):
        coordinate.append(offset // step if step else 0)
        offset = offset % step if step else offset
    return tuple(coordinate)


def _padded(values: Sequence | None, rank: int, default, *, name: str) -> list:
    if values is None:
        return [default] * rank
    values = list(values)
    if len(values) > rank:
        raise APLShapeError(f"{name} has {len(values)} entries for a rank-{rank} array")
    return values + [default] * (rank - len(values))


def axis_positions(
    shape: Sequence[int],
    *,
    start: Sequence[int] | None = None,
    limit: Sequence[int | None] | None = None,
    elide: Sequence[Elision] | None = None,
) -> list[list[int]]:
    """Positions visited along each axis.

    An elision entry fixes its axis to one index or to an explicit index
    list; otherwise the axis runs from ``start`` for at most ``limit``
    positions, clipped to the axis length. Negative starts and limits are
    rejected rather than clamped.
    """
    rank = len(shape)
    starts = _padded(start, rank, 0, name="start")
    limits = _padded(limit, rank, None, name="limit")
    elisions = _padded(elide, rank, None, name="elide")

    positions: list[list[int]] = []
    for axis, dim in enumerate(shape):
        fixed = elisions[axis]
        if fixed is None:
            begin = int(starts[axis])
            if begin < 0:
                raise APLIndexError(f"start {begin} is negative on axis {axis}")
            end = int(dim)
            if limits[axis] is not None:
                count = int(limits[axis])
                if count < 0:
                    raise APLShapeError(f"limit {count} is negative on axis {axis}")
                end = min(end, begin + count)
            positions.append(list(range(begin, end)))
            continue
        if isinstance(fixed, numbers.Integral) or getattr(fixed, "ndim", None) == 0:
            picks = [int(fixed)]
        else:
            picks = [int(i) for i in fixed]
        for i in picks:
            if i < 0 or i >= dim:
                raise APLIndexError(f"index {i} out of range for axis {axis} of length {dim}")
        positions.append(picks)
    return positions


def coordinates(
    shape: Sequence[int],
    *,
    start: Sequence[int] | None = None,
    limit: Sequence[int | None] | None = None,
    elide: Sequence[Elision] | None = None,
) -> Iterator[tuple[int, ...]]:
    """Yield coordinates of the selected region in lexicographic order."""
    yield from product(*axis_positions(shape, start=start, limit=limit, elide=elide))


def walk(
    target,
    visit: Callable[[object, tuple[int, ...]], None],
    *,
    start: Sequence[int] | None = None,
    limit: Sequence[int | None] | None = None,
    elide: Sequence[Elision] | None = None,
) -> None:
    """Call ``visit(element, coordinate)`` over a region of ``target``.

    ``target`` is an ``APLArray`` or a bare shape; for a shape the element
    passed to ``visit`` is ``None``.
    """
    if isinstance(target, APLArray):
        shape = target.shape
        steps = strides(shape)
        for coordinate in coordinates(shape, start=start, limit=limit, elide=elide):
            offset = sum(c * s for c, s in zip(coordinate, steps))
            visit(target.data[offset], coordinate)
        return

    for coordinate in coordinates(tuple(target), start=start, limit=limit, elide=elide):
        visit(None, coordinate)
