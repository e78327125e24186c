"""Runtime value model and validators for nested APL arrays."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

import jax.numpy as jnp

from .errors import APLDomainError, APLShapeError


@dataclass(frozen=True)
class APLChar:
    """First-class character value."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 1:
            raise ValueError("APLChar must contain exactly one codepoint")

    @property
    def codepoint(self) -> int:
        return ord(self.value)


SPACE = APLChar(" ")


class ElementKind(str, Enum):
    NUMERIC = "numeric"
    CHARACTER = "character"
    NESTED = "nested"
    MIXED = "mixed"


def shape_size(shape: tuple[int, ...]) -> int:
    return math.prod(int(d) for d in shape)


def is_number(value: object) -> bool:
    return isinstance(value, numbers.Number)


def element_kind(value: object) -> ElementKind:
    if isinstance(value, APLArray):
        return ElementKind.NESTED
    if isinstance(value, APLChar):
        return ElementKind.CHARACTER
    if is_number(value):
        return ElementKind.NUMERIC
    raise TypeError(f"element has unsupported runtime type {type(value).__name__}")


def infer_kind(data: list) -> ElementKind:
    if not data:
        return ElementKind.NUMERIC
    kinds = {element_kind(item) for item in data}
    if ElementKind.NESTED in kinds:
        return ElementKind.NESTED
    if len(kinds) == 1:
        return kinds.pop()
    return ElementKind.MIXED


@dataclass(eq=False)
class APLArray:
    """Dense array: a shape plus its elements in ravel (row-major) order.

    Elements are numbers, ``APLChar`` values or nested ``APLArray`` values.
    ``kind`` tags the element type; it is inferred from ``data`` when
    omitted, and is what empty arrays use to choose their fill.
    """

    shape: tuple[int, ...]
    data: list
    kind: ElementKind | None = None

    def __post_init__(self) -> None:
        self.shape = tuple(int(d) for d in self.shape)
        if any(d < 0 for d in self.shape):
            raise APLShapeError(f"array dimensions must be non-negative, got {self.shape}")
        if not isinstance(self.data, list):
            self.data = list(self.data)
        if shape_size(self.shape) != len(self.data):
            raise APLShapeError(
                f"shape {self.shape} holds {shape_size(self.shape)} elements, got {len(self.data)}"
            )
        if self.kind is None:
            self.kind = infer_kind(self.data)

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return len(self.data)

    def copy(self) -> "APLArray":
        return APLArray(self.shape, list(self.data), self.kind)

    def refresh_kind(self) -> None:
        if self.data:
            self.kind = infer_kind(self.data)

    def tolist(self):
        items = [_element_to_python(item) for item in self.data]
        if not self.shape:
            return items[0]
        return _nest(items, self.shape)


def prototype_kind(arr: APLArray) -> ElementKind:
    """Kind an empty array cut from ``arr`` carries; mixed arrays use their first element."""
    if arr.kind is not ElementKind.MIXED:
        return arr.kind
    if not arr.data:
        return ElementKind.NUMERIC
    return element_kind(arr.data[0])


def derived(shape: tuple[int, ...], data: list, like: APLArray) -> APLArray:
    """New array over ``data``; empty results keep the element kind of ``like``."""
    return APLArray(shape, data, None if data else prototype_kind(like))


def _element_to_python(value):
    if isinstance(value, APLArray):
        return value.tolist()
    if isinstance(value, APLChar):
        return value.value
    return value


def _nest(items: list, shape: tuple[int, ...]) -> list:
    if len(shape) == 1:
        return list(items)
    step = shape_size(shape[1:])
    return [_nest(items[i * step : (i + 1) * step], shape[1:]) for i in range(shape[0])]


def _is_scalar_leaf(value: object) -> bool:
    if isinstance(value, (APLChar, numbers.Number)):
        return True
    if isinstance(value, str):
        return len(value) == 1
    if hasattr(value, "ndim"):
        return value.ndim == 0
    return False


def _rectangular_shape(value) -> tuple[int, ...] | None:
    if all(_is_scalar_leaf(item) for item in value):
        return (len(value),)
    if all(isinstance(item, (list, tuple)) for item in value):
        shapes = {_rectangular_shape(item) for item in value}
        if len(shapes) == 1 and None not in shapes:
            return (len(value), *shapes.pop())
    return None


def _flatten_nested(value):
    for item in value:
        if isinstance(item, (list, tuple)):
            yield from _flatten_nested(item)
        else:
            yield item


def as_element(value):
    if isinstance(value, (APLArray, APLChar)):
        return value
    if isinstance(value, str):
        if len(value) == 1:
            return APLChar(value)
        return array(value)
    if isinstance(value, (list, tuple)):
        return array(value)
    if hasattr(value, "ndim") and hasattr(value, "tolist"):
        if value.ndim == 0:
            return value.item()
        return array(value)
    validate_value(value, where="element")
    return value


def array(value) -> APLArray:
    """Build an ``APLArray`` from Python, jax or numpy values.

    Strings become character vectors, rectangular lists become dense
    arrays and ragged lists become nested vectors.
    """
    if isinstance(value, APLArray):
        return value
    if isinstance(value, str):
        return APLArray((len(value),), [APLChar(c) for c in value], ElementKind.CHARACTER)
    if hasattr(value, "shape") and hasattr(value, "tolist"):
        shape = tuple(int(d) for d in value.shape)
        return APLArray(shape, [as_element(item) for item in value.reshape(-1).tolist()])
    if isinstance(value, (list, tuple)):
        shape = _rectangular_shape(value)
        if shape is not None:
            return APLArray(shape, [as_element(item) for item in _flatten_nested(value)])
        return APLArray((len(value),), [as_element(item) for item in value])
    return APLArray((), [as_element(value)])


def scalar(value) -> APLArray:
    return APLArray((), [as_element(value)])


def vector(items) -> APLArray:
    """Rank-1 array whose elements are ``items`` as given, never stacked."""
    elements = [as_element(item) for item in items]
    return APLArray((len(elements),), elements)


def enclose(value) -> APLArray:
    if isinstance(value, APLArray):
        return APLArray((), [value], ElementKind.NESTED)
    return scalar(value)


def fill_for(kind: ElementKind):
    if kind is ElementKind.CHARACTER:
        return SPACE
    return 0


def fill_of(value: object):
    if not isinstance(value, APLArray):
        return fill_for(element_kind(value))
    return fill_for(prototype_kind(value))


def shape_of(value: object) -> tuple[int, ...]:
    if isinstance(value, APLArray):
        return value.shape
    return ()


def rank_of(value: object) -> int:
    return len(shape_of(value))


def kind_of(value: object) -> ElementKind:
    if isinstance(value, APLArray):
        return value.kind
    return element_kind(value)


def depth_of(value: object) -> int:
    if not isinstance(value, APLArray):
        return 0
    if value.kind is not ElementKind.NESTED or not value.data:
        return 1
    return 1 + max(depth_of(item) for item in value.data)


def as_int(value, *, where: str) -> int:
    if hasattr(value, "ndim") and hasattr(value, "tolist"):
        value = array(value)
    if isinstance(value, APLArray):
        if value.size != 1:
            raise APLShapeError(f"{where} requires a single integer")
        value = value.data[0]
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise APLDomainError(f"{where} requires integers, got {value!r}")


def as_int_list(value, *, where: str) -> list[int]:
    if isinstance(value, APLArray):
        if value.rank > 1:
            raise APLShapeError(f"{where} requires a scalar or vector")
        return [as_int(item, where=where) for item in value.data]
    if isinstance(value, (list, tuple)):
        return [as_int(item, where=where) for item in value]
    if hasattr(value, "ndim") and hasattr(value, "tolist"):
        return as_int_list(array(value), where=where)
    return [as_int(value, where=where)]


def as_jax_array(value) -> jnp.ndarray:
    """Convert a numeric or character array into a ``jax.numpy`` array.

    Characters become int32 code points; fractions become floats.
    """
    arr = array(value)
    if arr.kind is ElementKind.CHARACTER:
        data = [item.codepoint for item in arr.data]
        return jnp.reshape(jnp.asarray(data, dtype=jnp.int32), arr.shape)
    if arr.kind is not ElementKind.NUMERIC:
        raise APLDomainError(f"cannot convert {arr.kind.value} array to a jax array")
    data = [float(item) if isinstance(item, Fraction) else item for item in arr.data]
    return jnp.reshape(jnp.asarray(data), arr.shape)


def validate_value(value: object, *, where: str = "value") -> None:
    if isinstance(value, APLArray):
        for idx, item in enumerate(value.data):
            validate_value(item, where=f"{where}[{idx}]")
        return
    if isinstance(value, APLChar):
        return
    if isinstance(value, numbers.Number):
        return
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")
