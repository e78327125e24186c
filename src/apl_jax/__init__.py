"""apl-jax public API."""

from .axes import (
    along_axis,
    apply_along_axis,
    from_trailing,
    inverse_permutation,
    to_trailing,
    trailing_permutation,
)
from .compare import (
    alphabet_comparator,
    compare_values,
    deep_equal,
    find_array,
    grade,
    lexicographic_compare,
)
from .errors import (
    APLAxisError,
    APLAxisGroupError,
    APLDomainError,
    APLError,
    APLExhaustedError,
    APLIndexError,
    APLLengthError,
    APLShapeError,
)
from .indexing import assign, index
from .linalg import Inversion, SingularMatrix, gauss_jordan, inner_product, invert_matrix
from .primitives import (
    allocate,
    check_axis,
    extract_block,
    flatten,
    index_grid,
    map_elements,
    outer_product,
    permute_axes,
    recombine,
    split,
)
from .reshape import enlist, ravel, reshape
from .structural import drop, expand, mix, multidim_slice, partitioned_enclose, reenclose, take
from .traversal import coordinates, ravel_offset, unravel_offset, walk
from .values import (
    APLArray,
    APLChar,
    ElementKind,
    array,
    as_jax_array,
    depth_of,
    enclose,
    fill_of,
    kind_of,
    rank_of,
    scalar,
    shape_of,
    vector,
)

__all__ = [
    "APLArray",
    "APLChar",
    "ElementKind",
    "array",
    "scalar",
    "vector",
    "enclose",
    "as_jax_array",
    "shape_of",
    "rank_of",
    "depth_of",
    "kind_of",
    "fill_of",
    "coordinates",
    "walk",
    "ravel_offset",
    "unravel_offset",
    "index",
    "assign",
    "check_axis",
    "to_trailing",
    "from_trailing",
    "trailing_permutation",
    "inverse_permutation",
    "along_axis",
    "apply_along_axis",
    "allocate",
    "flatten",
    "split",
    "recombine",
    "permute_axes",
    "outer_product",
    "extract_block",
    "map_elements",
    "index_grid",
    "multidim_slice",
    "take",
    "drop",
    "expand",
    "partitioned_enclose",
    "reenclose",
    "mix",
    "enlist",
    "ravel",
    "reshape",
    "deep_equal",
    "find_array",
    "grade",
    "compare_values",
    "alphabet_comparator",
    "lexicographic_compare",
    "inner_product",
    "invert_matrix",
    "gauss_jordan",
    "Inversion",
    "SingularMatrix",
    "APLError",
    "APLShapeError",
    "APLLengthError",
    "APLAxisError",
    "APLAxisGroupError",
    "APLExhaustedError",
    "APLIndexError",
    "APLDomainError",
]
