from __future__ import annotations

import itertools
import unittest

import numpy as np

from gridinterp import make_interpolator
from gridinterp.simplicial import simplex_order, simplex_weights


def _random_axes(rng: np.random.Generator, lengths) -> list[np.ndarray]:
    return [np.cumsum(rng.uniform(0.25, 1.5, size=n)) - 1.0 for n in lengths]


def _interior_points(rng: np.random.Generator, axes, count: int) -> np.ndarray:
    lo = np.array([a[0] for a in axes])
    hi = np.array([a[-1] for a in axes])
    return lo + (hi - lo) * rng.uniform(0.0, 1.0, size=(count, len(axes)))


UNIT_SQUARE = [[0.0, 1.0], [0.0, 1.0]]
PRODUCT = [0.0, 0.0, 0.0, 1.0]


class TestSimplexHelpers(unittest.TestCase):
    def test_order_descending_with_stable_ties(self) -> None:
        self.assertEqual(simplex_order([0.2, 0.7, 0.5]), [1, 2, 0])
        self.assertEqual(simplex_order([0.5, 0.5, 0.1]), [0, 1, 2])
        self.assertEqual(simplex_order([0.1, 0.5, 0.5]), [1, 2, 0])
        self.assertEqual(simplex_order([0.0, 0.0, 0.0, 0.0]), [0, 1, 2, 3])

    def test_weights(self) -> None:
        t = [0.2, 0.7, 0.5]
        w = simplex_weights(t, simplex_order(t))
        np.testing.assert_allclose(w, [0.3, 0.2, 0.3, 0.2])
        self.assertAlmostEqual(sum(w), 1.0, places=14)


class TestSimplicial(unittest.TestCase):
    def test_square_scenario(self) -> None:
        interp = make_interpolator(
            [[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]],
            [0.0, 1.0, 2.0, 1.0, 2.0, 3.0, 2.0, 3.0, 4.0],
            method="simplicial",
        )
        self.assertAlmostEqual(interp.evaluate([0.5, 0.5]), 1.0, places=14)
        self.assertAlmostEqual(interp.evaluate([1.5, 0.25]), 1.75, places=14)

    def test_uses_diagonal_split(self) -> None:
        interp = make_interpolator(UNIT_SQUARE, PRODUCT, method="simplicial")
        lin = make_interpolator(UNIT_SQUARE, PRODUCT, method="linear")
        self.assertAlmostEqual(interp.evaluate([0.75, 0.25]), 0.25, places=14)
        self.assertAlmostEqual(interp.evaluate([0.25, 0.75]), 0.25, places=14)
        self.assertAlmostEqual(interp.evaluate([0.5, 0.5]), 0.5, places=14)
        self.assertAlmostEqual(lin.evaluate([0.5, 0.5]), 0.25, places=14)

    def test_vertices_follow_sorted_dimensions(self) -> None:
        interp = make_interpolator(UNIT_SQUARE, PRODUCT, method="simplex")
        nodes, weights = interp.weights([0.75, 0.25])
        np.testing.assert_array_equal(nodes, [0, 2, 3])
        np.testing.assert_allclose(weights, [0.25, 0.5, 0.25])
        nodes, _ = interp.weights([0.25, 0.75])
        np.testing.assert_array_equal(nodes, [0, 1, 3])
        nodes, weights = interp.weights([0.5, 0.5])
        np.testing.assert_array_equal(nodes, [0, 2, 3])
        np.testing.assert_allclose(weights, [0.5, 0.0, 0.5])

    def test_exact_at_nodes(self) -> None:
        rng = np.random.default_rng(11)
        for lengths in ([4], [3, 5], [2, 3, 4], [2, 3, 2, 3, 2], [2, 2, 3, 2, 2, 2]):
            axes = _random_axes(rng, lengths)
            values = rng.normal(size=int(np.prod(lengths)))
            interp = make_interpolator(axes, values, method="simplicial")
            for flat, node in enumerate(itertools.product(*axes)):
                self.assertAlmostEqual(interp.evaluate(node), values[flat], places=12)

    def test_affine_exact_inside(self) -> None:
        rng = np.random.default_rng(12)
        for lengths in ([5], [4, 3], [3, 4, 3], [2, 3, 2, 3, 3, 2]):
            axes = _random_axes(rng, lengths)
            coef = rng.normal(size=len(lengths))
            offset = rng.normal()
            nodes = np.array(list(itertools.product(*axes)))
            interp = make_interpolator(axes, nodes @ coef + offset, method="simplicial")
            pts = _interior_points(rng, axes, 50)
            np.testing.assert_allclose(interp.evaluate_batch(pts), pts @ coef + offset, rtol=1e-10, atol=1e-10)

    def test_weights_normalized_and_non_negative(self) -> None:
        rng = np.random.default_rng(13)
        for lengths in ([3], [3, 4], [2, 3, 4], [3, 2, 3, 2, 3], [2, 2, 2, 2, 2, 2, 2]):
            axes = _random_axes(rng, lengths)
            interp = make_interpolator(axes, np.zeros(int(np.prod(lengths))), method="simplicial")
            for p in _interior_points(rng, axes, 20):
                nodes, weights = interp.weights(p)
                self.assertEqual(len(nodes), len(lengths) + 1)
                self.assertEqual(len(set(nodes.tolist())), len(lengths) + 1)
                self.assertAlmostEqual(float(weights.sum()), 1.0, places=12)
                self.assertTrue((weights >= 0.0).all())

    def test_agrees_with_multilinear_on_cell_diagonal_corners(self) -> None:
        rng = np.random.default_rng(14)
        axes = _random_axes(rng, [3, 3, 3])
        values = rng.normal(size=27)
        simp = make_interpolator(axes, values, method="simplicial")
        lin = make_interpolator(axes, values, method="linear")
        # along a cell edge both reduce to 1-D linear interpolation
        for x in np.linspace(axes[0][0], axes[0][-1], 9):
            p = [x, axes[1][1], axes[2][2]]
            self.assertAlmostEqual(simp.evaluate(p), lin.evaluate(p), places=12)

    def test_boundary_and_extrapolation(self) -> None:
        interp = make_interpolator([[0.0, 1.0, 2.0]], [0.0, 1.0, 4.0], method="simplicial")
        self.assertEqual(interp.evaluate([2.0]), 4.0)
        self.assertEqual(interp.evaluate([0.0]), 0.0)
        self.assertAlmostEqual(interp.evaluate([3.0]), 7.0, places=12)
        self.assertAlmostEqual(interp.evaluate([-1.0]), -1.0, places=12)

    def test_clamp_policy(self) -> None:
        interp = make_interpolator(UNIT_SQUARE, PRODUCT, method="simplicial", out_of_bounds="clamp")
        self.assertEqual(interp.evaluate([5.0, 5.0]), 1.0)
        self.assertEqual(interp.evaluate([-5.0, 0.5]), 0.0)


if __name__ == "__main__":
    unittest.main()
