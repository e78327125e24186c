"""Generalized inner product and Gauss-Jordan matrix inversion.

Inversion promotes integer input to ``fractions.Fraction`` so results are
exact; float input is inverted in floating point.
"""

from __future__ import annotations

import functools
import logging
import numbers
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable

from .errors import APLDomainError, APLLengthError, APLShapeError
from .primitives import outer_product
from .structural import reenclose
from .values import APLArray, ElementKind, array

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class SingularMatrix:
    """Failure value: the pivot chosen at ``step`` was exactly zero."""

    step: int
    size: int

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Inversion:
    inverse: APLArray
    determinant: object


def _as_vector(arr: APLArray) -> APLArray:
    if arr.rank:
        return arr
    return APLArray((1,), list(arr.data), arr.kind)


def inner_product(
    left,
    right,
    f1: Callable[[object, object], object],
    f2: Callable[[object, object], object],
    *,
    identity=_MISSING,
) -> APLArray:
    """Combine rows of ``left`` with columns of ``right`` by ``f1``, reduce by ``f2``.

    The reduction folds from the right, as APL reductions do. A length-1
    axis extends to the length of the other operand. The result has shape
    ``left.shape[:-1] + right.shape[1:]``; two vectors give a rank-0 array.
    """
    lhs = _as_vector(array(left))
    rhs = _as_vector(array(right))
    n_left = lhs.shape[-1]
    n_right = rhs.shape[0]
    if n_left != n_right and 1 not in (n_left, n_right):
        raise APLLengthError(f"inner product lengths {n_left} and {n_right} do not conform")
    length = n_right if n_left == 1 else n_left

    def reduce_pair(row: APLArray, column: APLArray):
        a = row.data * length if row.size == 1 else row.data
        b = column.data * length if column.size == 1 else column.data
        values = [f1(x, y) for x, y in zip(a, b, strict=True)]
        if not values:
            if identity is _MISSING:
                raise APLLengthError("inner product over an empty axis needs an identity")
            return identity
        return functools.reduce(lambda acc, item: f2(item, acc), reversed(values))

    rows = reenclose(lhs, [lhs.rank - 1])
    columns = reenclose(rhs, [0])
    result = outer_product(rows, columns, reduce_pair)
    if not result.data:
        result.kind = ElementKind.NUMERIC
    return result


def _exact(value):
    if isinstance(value, numbers.Integral):
        return Fraction(int(value))
    if isinstance(value, numbers.Number):
        return value
    raise APLDomainError(f"cannot invert a matrix containing {type(value).__name__}")


def _plain(value):
    if isinstance(value, Fraction) and value.denominator == 1:
        return int(value)
    return value


def gauss_jordan(matrix) -> Inversion | SingularMatrix:
    """Invert a square matrix by Gauss-Jordan elimination with full pivoting.

    Returns the inverse together with the determinant, or ``SingularMatrix``
    when a pivot is exactly zero.
    """
    arr = array(matrix)
    if arr.rank != 2 or arr.shape[0] != arr.shape[1]:
        raise APLShapeError(f"matrix inversion requires a square matrix, got shape {arr.shape}")
    n = arr.shape[0]
    a = [[_exact(arr.data[i * n + j]) for j in range(n)] for i in range(n)]
    row_swaps = [0] * n
    col_swaps = [0] * n
    determinant = Fraction(1)

    for k in range(n):
        pivot_row, pivot_col, pivot = k, k, a[k][k]
        for i in range(k, n):
            for j in range(k, n):
                if abs(a[i][j]) > abs(pivot):
                    pivot_row, pivot_col, pivot = i, j, a[i][j]
        row_swaps[k] = pivot_row
        col_swaps[k] = pivot_col
        if pivot == 0:
            logger.debug("gauss_jordan: zero pivot at step %d of %d", k, n)
            return SingularMatrix(step=k, size=n)

        if pivot_row != k:
            a[k], a[pivot_row] = a[pivot_row], a[k]
            determinant = -determinant
        if pivot_col != k:
            for row in a:
                row[k], row[pivot_col] = row[pivot_col], row[k]
            determinant = -determinant

        for i in range(n):
            if i != k:
                a[i][k] = a[i][k] / -pivot
        for i in range(n):
            if i == k:
                continue
            for j in range(n):
                if j != k:
                    a[i][j] += a[i][k] * a[k][j]
        for j in range(n):
            if j != k:
                a[k][j] = a[k][j] / pivot
        determinant *= pivot
        a[k][k] = 1 / pivot

    for k in reversed(range(n)):
        i = row_swaps[k]
        if i != k:
            for row in a:
                row[k], row[i] = row[i], row[k]
        j = col_swaps[k]
        if j != k:
            a[k], a[j] = a[j], a[k]

    data = [_plain(value) for row in a for value in row]
    return Inversion(APLArray((n, n), data, ElementKind.NUMERIC), _plain(determinant))


def invert_matrix(matrix) -> APLArray | SingularMatrix:
    result = gauss_jordan(matrix)
    if isinstance(result, SingularMatrix):
        return result
    return result.inverse
