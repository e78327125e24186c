from __future__ import annotations

import importlib.util
import math
import operator
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for inferred-property tests")
class InferredPropertiesTests(unittest.TestCase):
    def _assert_close(self, got, want, *, places: int = 6) -> None:
        def check(g, w):
            if isinstance(w, list):
                self.assertIsInstance(g, list)
                self.assertEqual(len(g), len(w))
                for g_item, w_item in zip(g, w, strict=True):
                    check(g_item, w_item)
                return
            if math.isinf(float(w)) or math.isinf(float(g)):
                self.assertEqual(float(g), float(w))
                return
            self.assertAlmostEqual(float(g), float(w), places=places)

        check(got.tolist() if hasattr(got, "tolist") else got, want)

    def test_deep_equal_is_reflexive_and_symmetric(self) -> None:
        from apl_jax import array, deep_equal

        values = [0, "x", [1, 2, 3], [[1, 2], [3, 4]], [1, [2, [3, "ab"]]], "", []]
        for left in values:
            with self.subTest(value=left):
                self.assertTrue(deep_equal(left, left))
                self.assertTrue(deep_equal(array(left), array(left).copy()))
            for right in values:
                self.assertEqual(deep_equal(left, right), deep_equal(right, left))

    def test_reshape_inverts_ravel(self) -> None:
        import jax.numpy as jnp

        from apl_jax import array, ravel, reshape

        for shape in [(6,), (2, 3), (2, 3, 4), (1, 5, 1), (0, 3)]:
            with self.subTest(shape=shape):
                source = array(jnp.reshape(jnp.arange(math.prod(shape)), shape))
                self.assertEqual(reshape(ravel(source), list(shape)).tolist(), source.tolist())

    def test_take_and_drop_are_complementary(self) -> None:
        from apl_jax import drop, take

        v = [4, 8, 15, 16, 23, 42]
        for k in range(len(v) + 1):
            with self.subTest(k=k):
                self.assertEqual(take([k], v).tolist() + drop([k], v).tolist(), v)
                self.assertEqual(drop([-k], v).tolist() + take([-k], v).tolist(), v)

    def test_split_inverts_mix(self) -> None:
        from apl_jax import array, mix, split, vector

        rows = [array([1, 2, 3]), array([4, 5, 6]), array([7, 8, 9])]
        mixed = mix(vector(rows))
        self.assertEqual([cell.tolist() for cell in split(mixed, 0)], [row.tolist() for row in rows])

    def test_permute_then_inverse_permute_is_identity(self) -> None:
        import jax.numpy as jnp

        from apl_jax import array, inverse_permutation, permute_axes

        source = array(jnp.reshape(jnp.arange(24), (2, 3, 4)))
        for perm in [(1, 2, 0), (2, 0, 1), (0, 2, 1)]:
            with self.subTest(perm=perm):
                there = permute_axes(source, perm)
                back = permute_axes(there, inverse_permutation(perm))
                self.assertEqual(back.tolist(), source.tolist())

    def test_grade_yields_sorting_permutation(self) -> None:
        from apl_jax import grade

        samples = [[3, -1, 4, 1, -5, 9, 2, 6], [0.5, 0.25, 1.0, 0.25], list("permutation")]
        for sample in samples:
            with self.subTest(sample=sample):
                order = grade(sample).tolist()
                self.assertEqual(sorted(order), list(range(len(sample))))
                ordered = [sample[i] for i in order]
                self.assertEqual(ordered, sorted(sample))

    def test_assigning_a_selection_back_changes_nothing(self) -> None:
        from apl_jax import array, assign, index

        m = array([[0, 1, 2, 3], [4, 5, 6, 7], [8, 9, 10, 11]])
        for specs in ([[2, 0], None], [None, [3, 1]], [1], [[0, 1], [1, 2]]):
            with self.subTest(specs=specs):
                target = m.copy()
                assign(target, specs, index(m, specs))
                self.assertEqual(target.tolist(), m.tolist())

    def test_partition_then_enlist_keeps_marked_tail(self) -> None:
        from apl_jax import enlist, partitioned_enclose

        v = [1, 2, 3, 4, 5, 6]
        for markers in ([1, 0, 0, 1, 0, 0], [0, 0, 1, 1, 0, 1], [0, 1]):
            with self.subTest(markers=markers):
                first = markers.index(1)
                self.assertEqual(enlist(partitioned_enclose(v, markers)).tolist(), v[first:])

    def test_inverse_times_matrix_is_identity_for_floats(self) -> None:
        from apl_jax import inner_product, invert_matrix

        matrix = [[2.0, -1.0, 0.0], [-1.0, 2.0, -1.0], [0.0, -1.0, 2.0]]
        inverse = invert_matrix(matrix)
        product = inner_product(inverse, matrix, operator.mul, operator.add)
        self._assert_close(product, [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])


if __name__ == "__main__":
    unittest.main()
