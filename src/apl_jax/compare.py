"""Deep comparison, sub-array search and lexicographic grading."""

from __future__ import annotations

import functools
import logging
import numbers
import os
from typing import Callable, Final

from jax import lax
import jax.numpy as jnp

from .errors import APLDomainError, APLShapeError
from .primitives import split
from .traversal import coordinates, ravel_offset, walk
from .values import APLArray, APLChar, ElementKind, array, as_element, as_int, as_jax_array

logger = logging.getLogger(__name__)

_DEFAULT_INDEX_ORIGIN: Final[int] = int(os.environ.get("APL_JAX_INDEX_ORIGIN", "0"))
_USE_FIND_FAST_PATH: Final[bool] = os.environ.get("APL_JAX_DISABLE_FIND_FAST_PATH", "0") != "1"
_USE_GRADE_FAST_PATH: Final[bool] = os.environ.get("APL_JAX_DISABLE_GRADE_FAST_PATH", "0") != "1"
_INT32_BOUND: Final[int] = 2**31

Comparator = Callable[[object, object], int]


def _match(left, right) -> bool:
    if left is right:
        return True
    if isinstance(left, APLArray) and isinstance(right, APLArray):
        if left.shape != right.shape:
            return False
        return all(_match(a, b) for a, b in zip(left.data, right.data, strict=True))
    if isinstance(left, APLArray) or isinstance(right, APLArray):
        return False
    return left == right


def deep_equal(left, right) -> bool:
    """True when shapes agree and every leaf pair is equal, recursively."""
    return _match(as_element(left), as_element(right))


def _dense_codes(arr: APLArray) -> bool:
    """True when ``arr`` maps exactly onto an int32 jax array."""
    if arr.kind is ElementKind.CHARACTER:
        return True
    if arr.kind is not ElementKind.NUMERIC:
        return False
    return all(isinstance(x, numbers.Integral) and -_INT32_BOUND < int(x) < _INT32_BOUND for x in arr.data)


def _find_windows(target: jnp.ndarray, source: jnp.ndarray) -> jnp.ndarray:
    rank = source.ndim
    window_shape = tuple(int(d) for d in target.shape)
    out_shape = tuple(max(0, int(s) - w + 1) for s, w in zip(source.shape, window_shape))
    if any(dim == 0 for dim in out_shape):
        return jnp.zeros(source.shape, dtype=jnp.int32)

    start_mesh = jnp.meshgrid(*[jnp.arange(dim, dtype=jnp.int32) for dim in out_shape], indexing="ij")
    starts = jnp.stack(start_mesh, axis=-1).reshape((-1, rank))
    offset_mesh = jnp.meshgrid(*[jnp.arange(dim, dtype=jnp.int32) for dim in window_shape], indexing="ij")
    offsets = jnp.stack(offset_mesh, axis=-1).reshape((-1, rank))

    idx = starts[:, None, :] + offsets[None, :, :]
    windows = source[tuple(idx[..., axis] for axis in range(rank))]
    windows_flat = jnp.reshape(windows, (starts.shape[0], -1))
    matches = jnp.all(windows_flat == jnp.reshape(target, (1, -1)), axis=1)
    hits = jnp.reshape(lax.convert_element_type(matches, jnp.int32), out_shape)
    return jnp.pad(hits, [(0, int(s) - dim) for s, dim in zip(source.shape, out_shape)])


def find_array(target, source) -> APLArray:
    """Mark every position of ``source`` where a copy of ``target`` starts.

    A lower-rank target is lifted with leading unit axes. The result has
    the shape of ``source`` and holds 1 at match starts, 0 elsewhere.
    """
    tgt = array(target)
    src = array(source)
    if tgt.rank > src.rank:
        return APLArray(src.shape, [0] * src.size, ElementKind.NUMERIC)
    work = src if src.rank else APLArray((1,), list(src.data), src.kind)
    window = (1,) * (work.rank - tgt.rank) + tgt.shape

    if (
        _USE_FIND_FAST_PATH
        and tgt.size
        and work.size
        and tgt.kind is work.kind
        and _dense_codes(tgt)
        and _dense_codes(work)
    ):
        logger.debug("find_array: vectorized window search over shape %s", work.shape)
        lifted = jnp.reshape(as_jax_array(tgt), window)
        hits = _find_windows(lifted, as_jax_array(work))
        return APLArray(src.shape, [int(x) for x in jnp.ravel(hits).tolist()], ElementKind.NUMERIC)

    marks: list[int] = []

    def probe(_item, start) -> None:
        if any(s + w > n for s, w, n in zip(start, window, work.shape)):
            marks.append(0)
            return
        for i, offset in enumerate(coordinates(window)):
            position = [s + o for s, o in zip(start, offset)]
            if not _match(work.data[ravel_offset(position, work.shape)], tgt.data[i]):
                marks.append(0)
                return
        marks.append(1)

    walk(work, probe)
    return APLArray(src.shape, marks, ElementKind.NUMERIC)


def _sign(left, right) -> int:
    return (left > right) - (left < right)


def compare_values(left, right) -> int:
    """Default element ordering: numbers, then characters by code point."""
    if isinstance(left, APLArray) or isinstance(right, APLArray):
        return lexicographic_compare(left, right, compare_values)
    left_is_char = isinstance(left, APLChar)
    right_is_char = isinstance(right, APLChar)
    if left_is_char != right_is_char:
        return 1 if left_is_char else -1
    if left_is_char:
        return _sign(left.codepoint, right.codepoint)
    if not isinstance(left, numbers.Real) or not isinstance(right, numbers.Real):
        raise APLDomainError("only real numbers and characters have a default ordering")
    return _sign(left, right)


def alphabet_comparator(alphabet) -> Comparator:
    """Order characters by position in ``alphabet``.

    Characters missing from the alphabet sort after all listed ones, among
    themselves by code point. Numbers sort before characters.
    """
    letters = [item.value if isinstance(item, APLChar) else str(item) for item in array(alphabet).data]
    ranks: dict[str, int] = {}
    for position, letter in enumerate(letters):
        ranks.setdefault(letter, position)
    untracked = len(letters)

    def key(value) -> tuple:
        if isinstance(value, APLChar):
            rank = ranks.get(value.value)
            if rank is None:
                return (1, untracked, value.codepoint)
            return (1, rank, 0)
        if not isinstance(value, numbers.Real):
            raise APLDomainError("alphabet ordering applies to real numbers and characters")
        return (0, value, 0)

    def compare(left, right) -> int:
        return _sign(key(left), key(right))

    return compare


def _unwrap(value):
    while isinstance(value, APLArray) and value.rank == 0:
        value = value.data[0]
    return value


def _major_cells(value) -> list:
    if not isinstance(value, APLArray):
        return [value]
    if value.rank == 1:
        return value.data
    return split(value, 0)


def lexicographic_compare(left, right, comparator: Comparator = compare_values) -> int:
    """Compare position by position; a proper prefix sorts first.

    Arrays of rank above one compare major cell by major cell, each cell
    compared the same way. A simple scalar compares as a one-element
    vector.
    """
    left = _unwrap(left)
    right = _unwrap(right)
    if not isinstance(left, APLArray) and not isinstance(right, APLArray):
        return comparator(left, right)

    left_cells = _major_cells(left)
    right_cells = _major_cells(right)
    for a, b in zip(left_cells, right_cells):
        order = lexicographic_compare(a, b, comparator)
        if order:
            return order
    return _sign(len(left_cells), len(right_cells))


def _lexsort_rows(arr: APLArray) -> list[int]:
    codes = as_jax_array(arr)
    count = arr.shape[0]
    if codes.ndim == 1:
        order = jnp.argsort(codes, stable=True)
    else:
        flat = jnp.reshape(codes, (count, arr.size // count))
        if int(flat.shape[1]) == 0:
            return list(range(count))
        order = jnp.lexsort(flat[:, ::-1].T)
    return [int(i) for i in order.tolist()]


def grade(
    value,
    *,
    origin: int | None = None,
    comparator: Comparator | None = None,
    descending: bool = False,
) -> APLArray:
    """Stable permutation that sorts the major cells of ``value``.

    Indices are offset by ``origin`` (default from ``APL_JAX_INDEX_ORIGIN``).
    ``comparator(a, b)`` returns a negative, zero or positive int for
    less, equal or greater and is applied element by element.
    """
    arr = array(value)
    if arr.rank == 0:
        raise APLShapeError("grade requires an array of rank at least 1")
    origin = _DEFAULT_INDEX_ORIGIN if origin is None else as_int(origin, where="grade origin")
    count = arr.shape[0]

    if comparator is None and not descending and _USE_GRADE_FAST_PATH and arr.size and _dense_codes(arr):
        logger.debug("grade: jax lexsort over shape %s", arr.shape)
        order = _lexsort_rows(arr)
    else:
        cells = _major_cells(arr)
        element_order = comparator or compare_values
        sign = -1 if descending else 1

        def by_cells(i: int, j: int) -> int:
            return sign * lexicographic_compare(cells[i], cells[j], element_order)

        order = sorted(range(count), key=functools.cmp_to_key(by_cells))
    return APLArray((count,), [origin + i for i in order], ElementKind.NUMERIC)
