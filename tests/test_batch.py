from __future__ import annotations

import contextlib
import io
import unittest

import numpy as np

from gridinterp import BatchEvaluator, InterpConfig, make_interpolator
from gridinterp.backends.numpy_backend import NumpyKernel, PythonKernel
from gridinterp.errors import DimensionMismatchError, OutOfBoundsError

AXES = [[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]]
VALUES = [0.0, 1.0, 2.0, 1.0, 2.0, 3.0, 2.0, 3.0, 4.0]


def _table(rng: np.random.Generator, lengths):
    axes = [np.cumsum(rng.uniform(0.25, 1.5, size=n)) for n in lengths]
    values = rng.normal(size=int(np.prod(lengths)))
    return axes, values


def _points(rng: np.random.Generator, axes, count: int) -> np.ndarray:
    lo = np.array([a[0] for a in axes])
    hi = np.array([a[-1] for a in axes])
    # spill past both ends to cover extrapolation
    return lo + (hi - lo) * rng.uniform(-0.2, 1.2, size=(count, len(axes)))


class TestBatchAgreement(unittest.TestCase):
    def test_batch_matches_single(self) -> None:
        rng = np.random.default_rng(21)
        for method in ("linear", "simplicial"):
            for lengths in ([4], [3, 4], [3, 2, 4], [2, 3, 2, 2, 3]):
                axes, values = _table(rng, lengths)
                interp = make_interpolator(axes, values, method=method)
                pts = _points(rng, axes, 40)
                batch = interp.evaluate_batch(pts)
                self.assertEqual(batch.shape, (40,))
                single = np.array([interp.evaluate(p) for p in pts])
                np.testing.assert_allclose(batch, single, rtol=1e-12, atol=1e-12)

    def test_python_backend_is_bit_identical(self) -> None:
        rng = np.random.default_rng(22)
        for method in ("linear", "simplicial"):
            axes, values = _table(rng, [3, 4, 3])
            interp = make_interpolator(axes, values, method=method, backend="python")
            pts = _points(rng, axes, 25)
            batch = interp.evaluate_batch(pts)
            for k, p in enumerate(pts):
                self.assertEqual(batch[k], interp.evaluate(p))

    def test_accepts_lists_of_tuples(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        out = interp([(0.5, 0.5), (1.5, 0.25)])
        np.testing.assert_allclose(out, [1.0, 1.75])

    def test_one_dimensional_flat_sequence(self) -> None:
        interp = make_interpolator([[0.0, 1.0, 2.0]], [0.0, 1.0, 4.0])
        np.testing.assert_allclose(interp.evaluate_batch([0.5, 1.5, 3.0]), [0.5, 2.5, 7.0])

    def test_empty_batch(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        res = interp.evaluate_batch_report([])
        self.assertEqual(len(res), 0)
        self.assertTrue(res.ok)

    def test_scalar_input_rejected(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        with self.assertRaises(ValueError):
            interp.evaluate_batch(1.0)


class TestBatchErrors(unittest.TestCase):
    def test_malformed_point_raises_by_default(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        with self.assertRaises(DimensionMismatchError):
            interp.evaluate_batch([(0.5, 0.5), (1.0,), (1.5, 0.25)])

    def test_malformed_point_reported_per_point(self) -> None:
        interp = make_interpolator(AXES, VALUES, batch_errors="nan")
        res = interp.evaluate_batch_report([(0.5, 0.5), (1.0,), (1.5, 0.25), (1.0, 2.0, 3.0)])
        self.assertEqual(len(res), 4)
        self.assertFalse(res.ok)
        self.assertEqual(sorted(res.errors), [1, 3])
        self.assertIsInstance(res.errors[1], DimensionMismatchError)
        self.assertEqual(res.errors[3].got, 3)
        self.assertAlmostEqual(res.values[0], 1.0, places=14)
        self.assertTrue(np.isnan(res.values[1]))
        self.assertAlmostEqual(res.values[2], 1.75, places=14)
        self.assertTrue(np.isnan(res.values[3]))

    def test_non_numeric_point_reported(self) -> None:
        interp = make_interpolator(AXES, VALUES, batch_errors="nan")
        res = interp.evaluate_batch_report([(0.5, 0.5), ("a", "b")])
        self.assertEqual(list(res.errors), [1])
        self.assertAlmostEqual(res.values[0], 1.0, places=14)

    def test_wrong_width_array(self) -> None:
        interp = make_interpolator(AXES, VALUES, batch_errors="nan")
        res = interp.evaluate_batch_report(np.zeros((3, 3)))
        self.assertEqual(sorted(res.errors), [0, 1, 2])
        self.assertTrue(np.isnan(res.values).all())

    def test_strict_bounds_in_batch(self) -> None:
        strict = make_interpolator(AXES, VALUES, out_of_bounds="error")
        with self.assertRaises(OutOfBoundsError):
            strict.evaluate_batch([(0.5, 0.5), (3.0, 0.0)])
        lenient = make_interpolator(AXES, VALUES, out_of_bounds="error", batch_errors="nan")
        res = lenient.evaluate_batch_report([(0.5, 0.5), (3.0, 0.0), (2.0, 2.0)])
        self.assertEqual(list(res.errors), [1])
        self.assertIsInstance(res.errors[1], OutOfBoundsError)
        self.assertEqual(res.errors[1].dim, 0)
        self.assertAlmostEqual(res.values[0], 1.0, places=14)
        self.assertTrue(np.isnan(res.values[1]))
        self.assertEqual(res.values[2], 4.0)

    def test_first_error_in_input_order_is_raised(self) -> None:
        interp = make_interpolator(AXES, VALUES, out_of_bounds="error")
        with self.assertRaises(OutOfBoundsError):
            interp.evaluate_batch([(3.0, 3.0), (1.0,)])
        with self.assertRaises(DimensionMismatchError):
            interp.evaluate_batch([(1.0,), (3.0, 3.0)])


class TestBatchWorkers(unittest.TestCase):
    def test_threaded_chunks_match_sequential(self) -> None:
        rng = np.random.default_rng(31)
        axes, values = _table(rng, [4, 3, 5])
        pts = _points(rng, axes, 103)
        for method in ("linear", "simplicial"):
            seq = make_interpolator(axes, values, method=method)
            par = make_interpolator(axes, values, method=method, workers=4, chunk_size=7)
            np.testing.assert_array_equal(par.evaluate_batch(pts), seq.evaluate_batch(pts))

    def test_evaluator_with_override_config(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        evaluator = BatchEvaluator(interp, InterpConfig(batch_errors="nan", workers=2, chunk_size=1))
        res = evaluator.run([(0.5, 0.5), (0.5,), (1.5, 0.25)])
        self.assertEqual(list(res.errors), [1])
        np.testing.assert_allclose(res.values[[0, 2]], [1.0, 1.75])

    def test_override_out_of_bounds_policy_is_applied(self) -> None:
        interp = make_interpolator([[0.0, 1.0, 2.0]], [0.0, 1.0, 4.0])
        clamped = BatchEvaluator(interp, InterpConfig(out_of_bounds="clamp")).run([[3.0], [-1.0], [1.5]])
        np.testing.assert_allclose(clamped.values, [4.0, 0.0, 2.5])
        np.testing.assert_allclose(interp.evaluate_batch([[3.0]]), [7.0])

    def test_override_backend_is_applied(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        evaluator = BatchEvaluator(interp, InterpConfig(backend="python"))
        self.assertIsInstance(evaluator.interpolator.kernel, PythonKernel)
        self.assertIsInstance(interp.kernel, NumpyKernel)
        self.assertIs(evaluator.interpolator.lattice, interp.lattice)
        np.testing.assert_allclose(evaluator.run([(0.5, 0.5), (1.5, 0.25)]).values, [1.0, 1.75])

    def test_matching_override_reuses_interpolator(self) -> None:
        interp = make_interpolator(AXES, VALUES)
        evaluator = BatchEvaluator(interp, InterpConfig(batch_errors="nan"))
        self.assertIs(evaluator.interpolator, interp)

    def test_profile_timing_prints(self) -> None:
        interp = make_interpolator(AXES, VALUES, profile_timing=True)
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            interp.evaluate_batch([(0.5, 0.5)])
        self.assertIn("timing profile (s):", buf.getvalue())


if __name__ == "__main__":
    unittest.main()
