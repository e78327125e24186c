"""Generic N-dimensional array primitives used by the operator layer.

Index arithmetic runs on ``jax.numpy`` int32 grids of ravel offsets; the
element values themselves are gathered from the flat data list, so exact
numbers, characters and nested arrays pass through untouched.
"""

from __future__ import annotations

from typing import Callable, Sequence

from jax import lax
import jax.numpy as jnp

from .errors import APLAxisError, APLAxisGroupError, APLIndexError, APLShapeError
from .values import APLArray, ElementKind, array, derived, element_kind, prototype_kind, shape_size


def check_axis(axis: int, rank: int, *, where: str = "axis") -> int:
    if isinstance(axis, bool) or not isinstance(axis, int):
        raise TypeError(f"{where} must be an integer axis, got {type(axis).__name__}")
    if axis < 0 or axis >= rank:
        raise APLAxisError(axis=axis, rank=rank, where=where)
    return axis


def index_grid(shape: tuple[int, ...]) -> jnp.ndarray:
    return jnp.reshape(jnp.arange(shape_size(shape), dtype=jnp.int32), shape)


def _gather(source: APLArray, offsets: jnp.ndarray, shape: tuple[int, ...]) -> APLArray:
    positions = jnp.ravel(offsets).tolist()
    return derived(shape, [source.data[i] for i in positions], source)


def allocate(shape: Sequence[int], fill, kind: ElementKind | None = None) -> APLArray:
    shape = tuple(int(d) for d in shape)
    size = shape_size(shape)
    if size == 0 and kind in (None, ElementKind.MIXED):
        kind = element_kind(fill)
    return APLArray(shape, [fill] * size, kind)


def flatten(value) -> list:
    return list(array(value).data)


def permute_axes(value, perm: Sequence[int]) -> APLArray:
    """Result axis ``j`` is source axis ``perm[j]``."""
    arr = array(value)
    perm = tuple(int(p) for p in perm)
    if sorted(perm) != list(range(arr.rank)):
        raise APLAxisGroupError(f"{perm} is not a permutation of the axes of a rank-{arr.rank} array")
    if perm == tuple(range(arr.rank)):
        return arr.copy()
    shape = tuple(arr.shape[p] for p in perm)
    return _gather(arr, jnp.transpose(index_grid(arr.shape), perm), shape)


def split(value, axis: int = 0) -> list[APLArray]:
    """Rank-(r-1) sub-arrays along ``axis``, in axis order."""
    arr = array(value)
    check_axis(axis, arr.rank, where="split")
    count = arr.shape[axis]
    cell_shape = arr.shape[:axis] + arr.shape[axis + 1 :]
    if count == 0:
        return []
    rows = jnp.reshape(jnp.moveaxis(index_grid(arr.shape), axis, 0), (count, shape_size(cell_shape)))
    return [derived(cell_shape, [arr.data[i] for i in row], arr) for row in rows.tolist()]


def recombine(
    cells: Sequence[APLArray],
    axis: int = 0,
    *,
    cell_shape: tuple[int, ...] | None = None,
    kind: ElementKind | None = None,
) -> APLArray:
    """Stack equal-shape ``cells`` into one array whose new axis is ``axis``."""
    cells = [array(cell) for cell in cells]
    if cells:
        cell_shape = cells[0].shape
        if any(cell.shape != cell_shape for cell in cells):
            raise APLShapeError("recombine requires sub-arrays of equal shape")
    elif cell_shape is None:
        raise APLShapeError("recombine of no sub-arrays needs an explicit cell shape")
    rank = len(cell_shape) + 1
    check_axis(axis, rank, where="recombine")

    data = [item for cell in cells for item in cell.data]
    if kind is None and not data:
        kind = prototype_kind(cells[0]) if cells else ElementKind.NUMERIC
    stacked = APLArray((len(cells), *cell_shape), data, None if data else kind)
    if axis == 0:
        return stacked
    perm = (*range(1, axis + 1), 0, *range(axis + 1, rank))
    return permute_axes(stacked, perm)


def extract_block(value, axis: int, start: int, count: int) -> APLArray:
    arr = array(value)
    check_axis(axis, arr.rank, where="extract_block")
    if start < 0 or count < 0 or start + count > arr.shape[axis]:
        raise APLIndexError(
            f"block [{start}, {start + count}) exceeds axis {axis} of length {arr.shape[axis]}"
        )
    block = lax.slice_in_dim(index_grid(arr.shape), start, start + count, axis=axis)
    shape = arr.shape[:axis] + (count,) + arr.shape[axis + 1 :]
    return _gather(arr, block, shape)


def outer_product(left, right, fn: Callable[[object, object], object]) -> APLArray:
    lhs = array(left)
    rhs = array(right)
    data = [fn(a, b) for a in lhs.data for b in rhs.data]
    return derived((*lhs.shape, *rhs.shape), data, lhs)


def map_elements(fn: Callable[[object], object], value) -> APLArray:
    arr = array(value)
    return derived(arr.shape, [fn(item) for item in arr.data], arr)
