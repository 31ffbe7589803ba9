import unittest
import numpy as np

from nepsolve import NumericalBreakdownError
from nepsolve.orthogonalization import OrthMethod, orthogonalize_and_normalize
from nepsolve.subspacebasis import SubspaceBasis
from nepsolve.convergedpairs import ConvergedPairs
from utils import backends

class TestOrthogonalization(unittest.TestCase):

    def setUp(self):
        self.methods = list(OrthMethod)
        self.rng = np.random.default_rng(1)

    def test_orthonormal(self) -> None:
        for xp in backends:
            for method in self.methods:
                basis, _ = np.linalg.qr(self.rng.standard_normal((20, 5)) + 0j)
                vec = xp.asarray(self.rng.standard_normal(20) + 0j)
                org = vec.copy()
                coeffs = xp.zeros(5, dtype=complex)
                nrm = orthogonalize_and_normalize(basis, vec, coeffs, method)

                self.assertAlmostEqual(float(np.linalg.norm(vec)), 1.0, places=12)
                self.assertLess(float(np.linalg.norm(basis.conj().T @ vec)), 1e-12)
                # the coefficients reproduce the original vector
                np.testing.assert_allclose(basis @ coeffs + nrm * vec, org, atol=1e-12)

    def test_breakdown(self) -> None:
        for method in self.methods:
            basis, _ = np.linalg.qr(self.rng.standard_normal((10, 3)))
            vec = basis @ np.array([1.0, -2.0, 0.5])
            with self.assertRaises(NumericalBreakdownError):
                orthogonalize_and_normalize(basis, vec, np.zeros(3), method)
            with self.assertRaises(NumericalBreakdownError):
                orthogonalize_and_normalize(basis, np.zeros(10), np.zeros(3), method)

    def test_empty_basis(self) -> None:
        vec = np.array([3.0, 4.0])
        nrm = orthogonalize_and_normalize(np.zeros((2, 0)), vec, np.zeros(0))
        self.assertAlmostEqual(nrm, 5.0)
        np.testing.assert_allclose(vec, [0.6, 0.8])

class TestSubspaceBasis(unittest.TestCase):

    def test_append(self) -> None:
        for xp in backends:
            V = SubspaceBasis(xp, 4, 3, np.complex128)
            V.push(xp.asarray([1.0, 1.0, 0.0, 0.0]))
            V.append(xp.asarray([1.0, 0.0, 1.0, 0.0]))
            self.assertEqual(V.width, 2)
            np.testing.assert_allclose(V.basis.conj().T @ V.basis, np.eye(2), atol=1e-14)

            # a dependent vector is not committed
            with self.assertRaises(NumericalBreakdownError):
                V.append(xp.asarray([2.0, 1.0, 1.0, 0.0]))
            self.assertEqual(V.width, 2)

            V.append(xp.asarray([0.0, 0.0, 0.0, 1.0]))
            with self.assertRaises(IndexError):
                V.append(xp.asarray([0.0, 1.0, 0.0, 0.0]))

class TestConvergedPairs(unittest.TestCase):

    def test_update(self) -> None:
        for xp in backends:
            pairs = ConvergedPairs(xp, 3, 2, np.complex128)
            vec = xp.asarray([1.0, 0.0, 0.0])
            self.assertFalse(pairs.update(1.0, vec, 1e-3, 1e-8))
            self.assertTrue(pairs.update(1.0, vec, 1e-12, 1e-8))
            # too close to an accepted eigenvalue
            self.assertFalse(pairs.update(1.0 + 1e-6, vec, 1e-12, 1e-8))
            self.assertTrue(pairs.update(2.0, vec, 1e-12, 1e-8))
            self.assertTrue(pairs.full)
            self.assertFalse(pairs.update(3.0, vec, 1e-12, 1e-8))
            np.testing.assert_allclose(pairs.accepted_values, [1.0, 2.0])

    def test_zero_eigenvalue(self) -> None:
        pairs = ConvergedPairs(np, 2, 3, np.complex128)
        vec = np.array([1.0, 0.0])
        self.assertTrue(pairs.update(0.0, vec, 0.0, 1e-8))
        self.assertFalse(pairs.update(0.0, vec, 0.0, 1e-8))
        self.assertTrue(pairs.update(1e-3, vec, 0.0, 1e-8))

if __name__ == "__main__":
    unittest.main()
