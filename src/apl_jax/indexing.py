"""Generalized indexing with one index spec per axis.

A spec is a single integer (selects and collapses the axis), a sequence of
integers (sub-selects the axis, possibly reordered or repeated) or ``None``
(keeps the whole axis). Missing trailing specs mean ``None``.
"""

from __future__ import annotations

import numbers
from typing import Callable, Sequence, Union

from .errors import APLIndexError, APLLengthError, APLShapeError
from .traversal import coordinates, ravel_offset, walk
from .values import APLArray, array, as_element, as_int, as_int_list, derived

IndexSpec = Union[None, int, Sequence[int], APLArray]


def _is_scalar_spec(spec: object) -> bool:
    if isinstance(spec, numbers.Integral):
        return True
    if isinstance(spec, APLArray):
        return spec.rank == 0
    return getattr(spec, "ndim", None) == 0


def resolve_specs(arr: APLArray, specs: Sequence[IndexSpec] | None) -> list:
    specs = [] if specs is None else list(specs)
    if len(specs) > arr.rank:
        raise APLShapeError(f"{len(specs)} index specs for a rank-{arr.rank} array")

    resolved: list = []
    for axis, spec in enumerate(specs):
        if spec is None:
            resolved.append(None)
            continue
        extent = arr.shape[axis]
        if _is_scalar_spec(spec):
            index = as_int(spec, where="index")
            if index < 0 or index >= extent:
                raise APLIndexError(f"index {index} out of range for axis {axis} of length {extent}")
            resolved.append(index)
            continue
        picks = as_int_list(spec, where="index")
        if len(picks) > extent:
            raise APLIndexError(
                f"index list of length {len(picks)} exceeds axis {axis} of length {extent}"
            )
        resolved.append(picks)
    resolved.extend([None] * (arr.rank - len(resolved)))
    return resolved


def selection_shape(arr: APLArray, resolved: list) -> tuple[int, ...]:
    shape: list[int] = []
    for dim, spec in zip(arr.shape, resolved, strict=True):
        if spec is None:
            shape.append(dim)
        elif not isinstance(spec, int):
            shape.append(len(spec))
    return tuple(shape)


def index(value, specs: Sequence[IndexSpec] | None = None) -> APLArray:
    """Read the addressed sub-array.

    Axes with a scalar spec are dropped from the result. When every axis
    collapses the result is a rank-0 array holding the one element.
    """
    arr = array(value)
    resolved = resolve_specs(arr, specs)
    data: list = []
    walk(arr, lambda item, _coordinate: data.append(item), elide=resolved)
    return derived(selection_shape(arr, resolved), data, arr)


def assign(
    target: APLArray,
    specs: Sequence[IndexSpec] | None,
    value: object | Callable[[APLArray], object],
) -> APLArray:
    """Write ``value`` into the addressed positions of ``target`` in place.

    ``value`` is a single element (written everywhere), an array of the
    selection's shape, a one-element array (unwrapped, then written
    everywhere) or a function receiving the current selection and
    returning one of those. ``target`` itself is mutated and returned.
    """
    if not isinstance(target, APLArray):
        raise TypeError("assign requires an APLArray to mutate")
    resolved = resolve_specs(target, specs)
    shape = selection_shape(target, resolved)
    offsets = [ravel_offset(c, target.shape) for c in coordinates(target.shape, elide=resolved)]

    if callable(value) and not isinstance(value, APLArray):
        value = value(index(target, resolved))
    value = as_element(value)

    if isinstance(value, APLArray):
        if value.size == 1:
            items = [value.data[0]] * len(offsets)
        elif value.shape == shape:
            items = value.data
        else:
            raise APLLengthError(f"cannot assign shape {value.shape} into selection of shape {shape}")
    else:
        items = [value] * len(offsets)

    for offset, item in zip(offsets, items, strict=True):
        target.data[offset] = item
    target.refresh_kind()
    return target
