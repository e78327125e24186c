from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for traversal and indexing tests")
class TraversalTests(unittest.TestCase):
    def test_full_traversal_matches_ravel_order(self) -> None:
        from apl_jax import coordinates, ravel_offset, unravel_offset

        shape = (2, 3, 2)
        coords = list(coordinates(shape))
        self.assertEqual(len(coords), 12)
        self.assertEqual(coords[:3], [(0, 0, 0), (0, 0, 1), (0, 1, 0)])
        self.assertEqual(coords, [unravel_offset(i, shape) for i in range(12)])
        self.assertEqual([ravel_offset(c, shape) for c in coords], list(range(12)))

    def test_start_and_limit_bound_the_region(self) -> None:
        from apl_jax import coordinates

        coords = list(coordinates((3, 4), start=[1, 1], limit=[2, 2]))
        self.assertEqual(coords, [(1, 1), (1, 2), (2, 1), (2, 2)])

        clipped = list(coordinates((3, 4), start=[2], limit=[5]))
        self.assertEqual(clipped, [(2, 0), (2, 1), (2, 2), (2, 3)])

    def test_negative_start_or_limit_is_rejected(self) -> None:
        from apl_jax import APLIndexError, APLShapeError, array, coordinates, walk

        with self.assertRaises(APLIndexError):
            list(coordinates((3,), start=[-2]))
        with self.assertRaises(APLShapeError):
            list(coordinates((3,), limit=[-1]))

        seen = []
        with self.assertRaises(APLIndexError):
            walk(array([[1, 2], [3, 4]]), lambda item, _coord: seen.append(item), start=[-1, 0], limit=[1, None])
        self.assertEqual(seen, [])

        self.assertEqual(list(coordinates((3,), start=[1], limit=[0])), [])

    def test_elision_fixes_axes(self) -> None:
        from apl_jax import coordinates

        listed = list(coordinates((2, 4), elide=[None, [3, 0]]))
        self.assertEqual(listed, [(0, 3), (0, 0), (1, 3), (1, 0)])

        fixed = list(coordinates((3, 2), elide=[1]))
        self.assertEqual(fixed, [(1, 0), (1, 1)])

    def test_elision_accepts_array_integer_scalars(self) -> None:
        import jax.numpy as jnp
        import numpy as np

        from apl_jax import coordinates

        self.assertEqual(list(coordinates((3, 2), elide=[jnp.int32(2)])), [(2, 0), (2, 1)])
        self.assertEqual(list(coordinates((3, 2), elide=[np.int64(0)])), [(0, 0), (0, 1)])
        self.assertEqual(list(coordinates((3, 2), elide=[None, jnp.asarray(1)])), [(0, 1), (1, 1), (2, 1)])

    def test_elision_out_of_range_is_reported(self) -> None:
        from apl_jax import APLIndexError, coordinates

        with self.assertRaises(APLIndexError):
            list(coordinates((3,), elide=[[0, 3]]))

    def test_walk_visits_elements_with_coordinates(self) -> None:
        from apl_jax import array, walk

        seen = []
        walk(array([[1, 2, 3], [4, 5, 6]]), lambda item, coord: seen.append((item, coord)))
        self.assertEqual([item for item, _ in seen], [1, 2, 3, 4, 5, 6])
        self.assertEqual(seen[4], (5, (1, 1)))

        region = []
        walk(array([[1, 2, 3], [4, 5, 6]]), lambda item, _coord: region.append(item), start=[0, 1], limit=[2, 1])
        self.assertEqual(region, [2, 5])

    def test_walk_over_bare_shape(self) -> None:
        from apl_jax import walk

        seen = []
        walk((2, 2), lambda item, coord: seen.append((item, coord)))
        self.assertEqual(seen, [(None, (0, 0)), (None, (0, 1)), (None, (1, 0)), (None, (1, 1))])

    def test_rank_zero_has_one_coordinate(self) -> None:
        from apl_jax import coordinates

        self.assertEqual(list(coordinates(())), [()])
        self.assertEqual(list(coordinates((0, 3))), [])


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for traversal and indexing tests")
class IndexingTests(unittest.TestCase):
    def _matrix(self):
        from apl_jax import array

        return array([[0, 1, 2, 3], [4, 5, 6, 7], [8, 9, 10, 11]])

    def test_read_list_and_omitted_specs(self) -> None:
        from apl_jax import index

        m = self._matrix()
        self.assertEqual(index(m, [[2, 0], None]).tolist(), [[8, 9, 10, 11], [0, 1, 2, 3]])
        self.assertEqual(index(m, [None, [3, 3]]).tolist(), [[3, 3], [7, 7], [11, 11]])
        self.assertEqual(index(m).tolist(), m.tolist())

    def test_scalar_spec_collapses_axis(self) -> None:
        from apl_jax import index

        m = self._matrix()
        row = index(m, [1])
        self.assertEqual(row.shape, (4,))
        self.assertEqual(row.tolist(), [4, 5, 6, 7])

        column = index(m, [None, 2])
        self.assertEqual(column.tolist(), [2, 6, 10])

    def test_full_collapse_yields_one_element_container(self) -> None:
        from apl_jax import APLArray, index

        out = index(self._matrix(), [1, 2])
        self.assertIsInstance(out, APLArray)
        self.assertEqual(out.shape, ())
        self.assertEqual(out.tolist(), 6)

    def test_read_errors(self) -> None:
        from apl_jax import APLIndexError, APLShapeError, index

        m = self._matrix()
        with self.assertRaises(APLIndexError):
            index(m, [[0, 1, 2, 0]])
        with self.assertRaises(APLIndexError):
            index(m, [3])
        with self.assertRaises(APLIndexError):
            index(m, [-1])
        with self.assertRaises(APLShapeError):
            index(m, [0, 0, 0])

    def test_write_single_value_mutates_target_only(self) -> None:
        from apl_jax import assign

        m = self._matrix()
        target = m.copy()
        out = assign(target, [None, 0], 99)
        self.assertIs(out, target)
        self.assertEqual(target.tolist(), [[99, 1, 2, 3], [99, 5, 6, 7], [99, 9, 10, 11]])
        self.assertEqual(m.data[0], 0)

    def test_write_matching_array(self) -> None:
        from apl_jax import assign

        target = self._matrix().copy()
        assign(target, [0], [10, 20, 30, 40])
        self.assertEqual(target.tolist()[0], [10, 20, 30, 40])

        assign(target, [[2, 1], [0, 1]], [[-1, -2], [-3, -4]])
        self.assertEqual(target.tolist()[1][:2], [-3, -4])
        self.assertEqual(target.tolist()[2][:2], [-1, -2])

    def test_singleton_replacement_is_unwrapped(self) -> None:
        from apl_jax import array, assign

        target = self._matrix().copy()
        assign(target, [[0, 1], 1], array([7]))
        self.assertEqual(target.data[1], 7)
        self.assertEqual(target.data[5], 7)

    def test_update_function_sees_current_selection(self) -> None:
        from apl_jax import assign, map_elements

        target = self._matrix().copy()
        assign(target, [2], lambda current: map_elements(lambda x: x * 10, current))
        self.assertEqual(target.tolist()[2], [80, 90, 100, 110])
        self.assertEqual(target.tolist()[1], [4, 5, 6, 7])

    def test_write_shape_mismatch_is_reported(self) -> None:
        from apl_jax import APLLengthError, assign

        with self.assertRaises(APLLengthError):
            assign(self._matrix().copy(), [0], [1, 2, 3])

    def test_write_enclosed_array_as_element(self) -> None:
        from apl_jax import APLArray, ElementKind, array, assign, enclose

        v = array([1, 2, 3])
        assign(v, [1], enclose(array([8, 9])))
        self.assertIsInstance(v.data[1], APLArray)
        self.assertEqual(v.kind, ElementKind.NESTED)
        self.assertEqual(v.tolist(), [1, [8, 9], 3])


if __name__ == "__main__":
    unittest.main()
