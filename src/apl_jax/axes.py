"""Run trailing-axis algorithms against any axis.

The target axis is rotated to the last position, the operator runs, and
the inverse rotation restores the original axis order.
"""

from __future__ import annotations

from typing import Callable

from .errors import APLLengthError
from .primitives import check_axis, permute_axes
from .values import APLArray, array, derived, shape_size


def trailing_permutation(rank: int, axis: int) -> tuple[int, ...]:
    return (*range(axis), *range(axis + 1, rank), axis)


def inverse_permutation(perm: tuple[int, ...]) -> tuple[int, ...]:
    inverse = [0] * len(perm)
    for position, axis in enumerate(perm):
        inverse[axis] = position
    return tuple(inverse)


def resolve_axis(arr: APLArray, axis: int | None, *, where: str) -> int:
    if axis is None:
        return check_axis(arr.rank - 1, arr.rank, where=where)
    return check_axis(axis, arr.rank, where=where)


def to_trailing(arr: APLArray, axis: int) -> APLArray:
    if axis == arr.rank - 1:
        return arr
    return permute_axes(arr, trailing_permutation(arr.rank, axis))


def from_trailing(arr: APLArray, axis: int) -> APLArray:
    if axis == arr.rank - 1:
        return arr
    return permute_axes(arr, inverse_permutation(trailing_permutation(arr.rank, axis)))


def along_axis(
    op: Callable[[APLArray], APLArray | list[APLArray]],
    value,
    axis: int | None = None,
    *,
    where: str = "axis",
):
    """Apply ``op``, written for the last axis, along ``axis`` (default last).

    ``op`` may change the length of the trailing axis but not the rank. It
    returns one array, or a list of arrays that are each rotated back.
    """
    arr = array(value)
    axis = resolve_axis(arr, axis, where=where)
    result = op(to_trailing(arr, axis))
    if isinstance(result, APLArray):
        return from_trailing(result, axis)
    return [from_trailing(part, axis) for part in result]


def apply_along_axis(fn: Callable[[APLArray], object], value, axis: int | None = None) -> APLArray:
    """Marginal apply: call ``fn`` on every vector running along ``axis``.

    If every call returns a scalar the axis is removed; if every call
    returns a vector of one common length that length replaces the axis.
    """
    arr = array(value)
    axis = resolve_axis(arr, axis, where="apply_along_axis")
    collapsed: list[bool] = []

    def apply_rows(rotated: APLArray) -> APLArray:
        frame = rotated.shape[:-1]
        n = rotated.shape[-1]
        rows = [derived((n,), rotated.data[i * n : (i + 1) * n], arr) for i in range(shape_size(frame))]
        results = [array(fn(row)) for row in rows]
        if all(result.rank == 0 for result in results):
            collapsed.append(True)
            return derived((*frame, 1), [result.data[0] for result in results], arr)

        lengths = {result.shape for result in results}
        if len(lengths) != 1 or len(next(iter(lengths))) != 1:
            raise APLLengthError("apply_along_axis results must all be vectors of one length")
        (m,) = lengths.pop()
        return derived((*frame, m), [item for result in results for item in result.data], arr)

    out = along_axis(apply_rows, arr, axis, where="apply_along_axis")
    if collapsed:
        return derived(out.shape[:axis] + out.shape[axis + 1 :], out.data, arr)
    return out
