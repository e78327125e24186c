"""Linearization and reshaping: enlist, ravel and cyclic reshape."""

from __future__ import annotations

from .errors import APLAxisGroupError, APLShapeError
from .primitives import check_axis
from .values import APLArray, ElementKind, array, as_int_list, derived, fill_of, shape_size


def enlist(value) -> APLArray:
    """Every simple element of a nested array, depth first, as one vector."""
    out: list = []

    def collect(item) -> None:
        if isinstance(item, APLArray):
            for sub in item.data:
                collect(sub)
            return
        out.append(item)

    arr = array(value)
    collect(arr)
    if out:
        return APLArray((len(out),), out)
    kind = ElementKind.NUMERIC if arr.kind is ElementKind.NESTED else arr.kind
    return APLArray((0,), [], kind)


def ravel(value, axes=None) -> APLArray:
    """Ravel to a vector, or merge a contiguous ascending group of axes."""
    arr = array(value)
    if axes is None:
        return derived((arr.size,), list(arr.data), arr)

    group = as_int_list(axes, where="ravel")
    if not group:
        raise APLAxisGroupError("ravel needs at least one axis to merge")
    for ax in group:
        check_axis(ax, arr.rank, where="ravel")
    if any(b != a + 1 for a, b in zip(group, group[1:])):
        raise APLAxisGroupError(f"ravel axes {group} must be contiguous and ascending")

    first, last = group[0], group[-1]
    merged = shape_size(arr.shape[first : last + 1])
    return derived((*arr.shape[:first], merged, *arr.shape[last + 1 :]), list(arr.data), arr)


def reshape(value, shape) -> APLArray:
    """Reshape, repeating the source cyclically or truncating it to fit."""
    arr = array(value)
    dims = as_int_list(shape, where="reshape")
    if any(d < 0 for d in dims):
        raise APLShapeError(f"reshape dimensions must be non-negative, got {dims}")
    size = shape_size(tuple(dims))
    if arr.size == 0:
        data = [fill_of(arr)] * size
    else:
        data = [arr.data[i % arr.size] for i in range(size)]
    return derived(tuple(dims), data, arr)
