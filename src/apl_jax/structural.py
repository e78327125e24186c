"""Axis-relative structural operators: take/drop, expand, partition, enclose, mix."""

from __future__ import annotations

import numbers

from .axes import along_axis, resolve_axis
from .errors import APLAxisGroupError, APLExhaustedError, APLLengthError, APLShapeError
from .primitives import allocate, check_axis, permute_axes, recombine, split
from .traversal import ravel_offset, strides, walk
from .values import (
    APLArray,
    ElementKind,
    array,
    as_int_list,
    derived,
    fill_of,
    prototype_kind,
    scalar,
    shape_size,
)


def _promote_scalar(arr: APLArray, rank: int = 1) -> APLArray:
    if arr.rank:
        return arr
    return APLArray((1,) * max(1, rank), list(arr.data), arr.kind)


def multidim_slice(value, counts, *, axis: int = 0, inverse: bool = False) -> APLArray:
    """Take (``inverse=False``) or drop (``inverse=True``) along consecutive axes.

    ``counts[k]`` applies to axis ``axis + k``. Taking ``c >= 0`` keeps the
    first ``c`` positions and ``c < 0`` the last ``-c``, padding with the
    array's fill when the axis is too short. Dropping ``c >= 0`` removes the
    first ``c`` positions and ``c < 0`` the last ``-c``; drops never pad.
    """
    counts = as_int_list(counts, where="multidim_slice")
    arr = _promote_scalar(array(value), len(counts))
    check_axis(axis, arr.rank, where="multidim_slice")
    if axis + len(counts) > arr.rank:
        raise APLLengthError(f"{len(counts)} counts from axis {axis} exceed rank {arr.rank}")

    out_shape = list(arr.shape)
    src_start = [0] * arr.rank
    copy_len: list[int | None] = [None] * arr.rank
    dest_offset = [0] * arr.rank
    for k, count in enumerate(counts):
        ax = axis + k
        n = arr.shape[ax]
        m = abs(count)
        if not inverse:
            copied = min(m, n)
            out_shape[ax] = m
            if count < 0:
                src_start[ax] = n - copied
                dest_offset[ax] = m - copied
        else:
            copied = max(0, n - m)
            out_shape[ax] = copied
            if count >= 0:
                src_start[ax] = min(m, n)
        copy_len[ax] = copied

    result = allocate(out_shape, fill_of(arr), arr.kind)
    steps = strides(out_shape)
    shift = [d - s for s, d in zip(src_start, dest_offset, strict=True)]

    def place(item, coordinate) -> None:
        offset = sum((c + sh) * st for c, sh, st in zip(coordinate, shift, steps))
        result.data[offset] = item

    walk(arr, place, start=src_start, limit=copy_len)
    result.refresh_kind()
    return result


def take(counts, value, *, axis: int = 0) -> APLArray:
    return multidim_slice(value, counts, axis=axis)


def drop(counts, value, *, axis: int = 0) -> APLArray:
    return multidim_slice(value, counts, axis=axis, inverse=True)


def _is_scalar_argument(value) -> bool:
    if isinstance(value, numbers.Integral):
        return True
    if isinstance(value, APLArray):
        return value.rank == 0
    return getattr(value, "ndim", None) == 0


def expand(value, degrees, *, axis: int | None = None, compress: bool = False) -> APLArray:
    """Replicate and fill-insert segments along ``axis`` (default last).

    Degrees are read left to right against the segments of the axis. A
    positive degree repeats the current segment and consumes it. Zero
    inserts one fill segment in expand mode and nothing in compress mode,
    consuming no segment either way. A negative degree inserts that many
    fill segments without consuming.
    """
    arr = _promote_scalar(array(value))
    axis = resolve_axis(arr, axis, where="expand")
    counts = as_int_list(degrees, where="expand")
    if _is_scalar_argument(degrees):
        counts = counts * arr.shape[axis]
    fill = fill_of(arr)

    def expand_trailing(rotated: APLArray) -> APLArray:
        last = rotated.rank - 1
        segments = split(rotated, last)
        segment_shape = rotated.shape[:-1]
        filler = allocate(segment_shape, fill, rotated.kind)
        out: list[APLArray] = []
        cursor = 0
        for degree in counts:
            if degree > 0:
                if cursor >= len(segments):
                    raise APLExhaustedError(
                        f"degrees consume more than the {len(segments)} segments along axis {axis}"
                    )
                out.extend([segments[cursor]] * degree)
                cursor += 1
            elif degree == 0:
                if not compress:
                    out.append(filler)
            else:
                out.extend([filler] * -degree)
        return recombine(out, last, cell_shape=segment_shape, kind=prototype_kind(rotated))

    return along_axis(expand_trailing, arr, axis, where="expand")


def partitioned_enclose(value, markers, *, axis: int | None = None) -> APLArray:
    """Enclose runs of segments along ``axis`` (default last).

    Each nonzero marker starts a partition; segments before the first
    nonzero marker are dropped. Markers shorter than the axis are padded
    with zeros.
    """
    arr = _promote_scalar(array(value))
    axis = resolve_axis(arr, axis, where="partitioned_enclose")
    flags = as_int_list(markers, where="partitioned_enclose")
    extent = arr.shape[axis]
    if len(flags) > extent:
        raise APLLengthError(f"{len(flags)} markers for an axis of length {extent}")
    flags.extend([0] * (extent - len(flags)))

    def enclose_runs(rotated: APLArray) -> list[APLArray]:
        last = rotated.rank - 1
        groups: list[list[APLArray]] = []
        for flag, segment in zip(flags, split(rotated, last), strict=True):
            if flag:
                groups.append([])
            if groups:
                groups[-1].append(segment)
        return [recombine(group, last) for group in groups]

    parts = along_axis(enclose_runs, arr, axis, where="partitioned_enclose")
    return APLArray((len(parts),), parts, ElementKind.NESTED)


def reenclose(value, axes) -> APLArray:
    """Split into an outer array of sub-arrays spanning the ``axes`` given.

    ``axes`` must be strictly ascending; they form the inner shape and the
    remaining axes form the outer shape.
    """
    arr = array(value)
    inner = as_int_list(axes, where="reenclose")
    for ax in inner:
        check_axis(ax, arr.rank, where="reenclose")
    if any(b <= a for a, b in zip(inner, inner[1:])):
        raise APLAxisGroupError(f"reenclose axes {inner} must be strictly ascending")

    outer = [ax for ax in range(arr.rank) if ax not in inner]
    outer_shape = tuple(arr.shape[ax] for ax in outer)
    inner_shape = tuple(arr.shape[ax] for ax in inner)
    outer_size = shape_size(outer_shape)
    inner_size = shape_size(inner_shape)

    trailing_run = inner == list(range(arr.rank - len(inner), arr.rank))
    if len(inner) == 1 or trailing_run:
        moved = permute_axes(arr, (*outer, *inner))
        cells = [
            derived(inner_shape, moved.data[i * inner_size : (i + 1) * inner_size], arr)
            for i in range(outer_size)
        ]
        return APLArray(outer_shape, cells, ElementKind.NESTED)

    buckets: list[list] = [[None] * inner_size for _ in range(outer_size)]

    def scatter(item, coordinate) -> None:
        o = ravel_offset([coordinate[ax] for ax in outer], outer_shape)
        i = ravel_offset([coordinate[ax] for ax in inner], inner_shape)
        buckets[o][i] = item

    walk(arr, scatter)
    cells = [derived(inner_shape, bucket, arr) for bucket in buckets]
    return APLArray(outer_shape, cells, ElementKind.NESTED)


def mix(value, *, axis: int | None = None) -> APLArray:
    """Combine an array of arrays into one array of higher rank.

    Elements are lifted to a common rank by leading unit axes and padded
    with their own fill to the elementwise maximum shape. The new axes
    follow the outer axes; for a vector of arrays ``axis`` chooses where
    the outer axis lands instead.
    """
    arr = array(value)
    if not any(isinstance(item, APLArray) for item in arr.data):
        return arr.copy()

    elements = [item if isinstance(item, APLArray) else scalar(item) for item in arr.data]
    inner_rank = max(element.rank for element in elements)
    lifted = [
        APLArray((1,) * (inner_rank - e.rank) + e.shape, list(e.data), e.kind) for e in elements
    ]
    max_shape = tuple(max(e.shape[k] for e in lifted) for k in range(inner_rank))
    padded = [e if e.shape == max_shape else take(list(max_shape), e) for e in lifted]

    data = [item for element in padded for item in element.data]
    result = derived((*arr.shape, *max_shape), data, padded[0])
    if axis is None:
        return result
    if arr.rank != 1:
        raise APLShapeError("mix with an axis requires a vector of arrays")
    check_axis(axis, result.rank, where="mix")
    if axis == 0:
        return result
    return permute_axes(result, (*range(1, axis + 1), 0, *range(axis + 1, result.rank)))
