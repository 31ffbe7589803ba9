import unittest
import numpy as np
import scipy.sparse as sp
from scipy.linalg import expm

from nepsolve import NEPSolve, ProblemKind, InvalidConfigurationError
from utils import backends, quadratic_coefficients, random_pep_coefficients, random_dep_coefficients

class TestNEP(unittest.TestCase):

    def setUp(self):
        self.nepsolve = [NEPSolve(backend) for backend in backends]

    def test_pep(self) -> None:
        for ns in self.nepsolve:
            Av = random_pep_coefficients(6)
            pep = ns.pep(Av)
            self.assertEqual(pep.kind, ProblemKind.POLYNOMIAL)
            self.assertEqual(pep.size, 6)
            self.assertEqual(pep.degree, 2)
            λ = 0.3 - 0.2j
            np.testing.assert_allclose(pep.compute_Mder(λ), Av[0] + λ*Av[1] + λ**2*Av[2])
            np.testing.assert_allclose(pep.compute_Mder(λ, 1), Av[1] + 2*λ*Av[2])
            np.testing.assert_allclose(pep.compute_Mder(λ, 2), 2*Av[2])
            np.testing.assert_allclose(pep.compute_Mder(λ, 3), np.zeros((6, 6)))

    def test_lincomb(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(5))
            V = np.random.default_rng(2).standard_normal((5, 3))
            λ, a = 0.7j, [1.0, -2.0, 0.5]
            expected = sum(a[k] * pep.compute_Mder(λ, k + 1) @ V[:, k] for k in range(3))
            np.testing.assert_allclose(pep.compute_Mlincomb(λ, V, a=a, startder=1), expected,
                                       atol=1e-12)
            np.testing.assert_allclose(pep.compute_Mlincomb(λ, V[:, 0]),
                                       pep.compute_Mder(λ) @ V[:, 0], atol=1e-12)

    def test_dep(self) -> None:
        for ns in self.nepsolve:
            A0, A1 = random_dep_coefficients(4)
            dep = ns.dep([A0, A1], [0.0, 1.5])
            self.assertEqual(dep.kind, ProblemKind.DELAY)
            λ = 0.2 + 0.1j
            M = -λ * np.eye(4) + A0 + A1 * np.exp(-1.5 * λ)
            np.testing.assert_allclose(dep.compute_Mder(λ), M, atol=1e-14)
            Mp = -np.eye(4) - 1.5 * A1 * np.exp(-1.5 * λ)
            np.testing.assert_allclose(dep.compute_Mder(λ, 1), Mp, atol=1e-14)
            with self.assertRaises(ValueError):
                ns.dep([A0, A1], [0.0, -1.0])
            with self.assertRaises(ValueError):
                ns.dep([A0, A1], [1.0])

    def test_sparse(self) -> None:
        for ns in self.nepsolve:
            A0, A1 = random_dep_coefficients(4)
            dense = ns.dep([A0, A1])
            sparse = ns.dep([sp.csr_matrix(A0), sp.csr_matrix(A1)])
            v = np.arange(4.0)
            λ = -0.4 + 1j
            np.testing.assert_allclose(sparse.compute_Mder(λ).toarray(), dense.compute_Mder(λ),
                                       atol=1e-14)
            np.testing.assert_allclose(sparse.compute_Mlincomb(λ, v), dense.compute_Mlincomb(λ, v),
                                       atol=1e-13)

    def test_spmf(self) -> None:
        for ns in self.nepsolve:
            A0, A1 = random_dep_coefficients(3)
            dep = ns.dep([A0, A1])
            spmf = ns.spmf([np.eye(3), A0, A1],
                           [lambda S: -S, lambda S: np.eye(len(S)), lambda S: expm(-S)])
            self.assertEqual(spmf.kind, ProblemKind.SPMF)
            λ = 0.5 - 0.3j
            for der in range(4):
                np.testing.assert_allclose(spmf.compute_Mder(λ, der), dep.compute_Mder(λ, der),
                                           atol=1e-12)
            self.assertEqual(ns.spmf([A0], [expm], ProblemKind.GENERIC).kind, ProblemKind.GENERIC)
            with self.assertRaises(ValueError):
                ns.spmf([A0, A1], [expm])

    def test_projected(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(8))
            rng = np.random.default_rng(4)
            V, _ = np.linalg.qr(rng.standard_normal((8, 4)) + 1j * rng.standard_normal((8, 4)))
            W, _ = np.linalg.qr(rng.standard_normal((8, 4)))
            proj = ns.projected(pep)
            self.assertEqual(proj.kind, ProblemKind.POLYNOMIAL)
            self.assertEqual(proj.size, 0)

            # growing the bases column by column gives the full projection
            for k in range(1, 5):
                proj.expand_projectmatrices(W[:, :k], V[:, :k])
            λ = 1.0 + 0.5j
            full = W.conj().T @ pep.compute_Mder(λ) @ V
            np.testing.assert_allclose(proj.compute_Mder(λ), full, atol=1e-12)

            other = ns.projected(pep)
            other.set_projectmatrices(W, V)
            np.testing.assert_allclose(other.compute_Mder(λ, 1), proj.compute_Mder(λ, 1), atol=1e-12)
            with self.assertRaises(ValueError):
                proj.expand_projectmatrices(W[:, :2], V[:, :2])

    def test_polyeig(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            λ, V = ns.polyeig(pep)
            self.assertEqual(len(λ), 4)
            for i in range(4):
                self.assertLess(np.linalg.norm(pep.compute_Mlincomb(λ[i], V[:, i])), 1e-10)
                self.assertAlmostEqual(np.linalg.norm(V[:, i]), 1.0)
            real = np.sort(λ[np.abs(λ.imag) < 1e-8].real)
            np.testing.assert_allclose(real, [-8.7145, 1.3627], atol=1e-3)
            with self.assertRaises(InvalidConfigurationError):
                ns.polyeig(ns.dep(random_dep_coefficients(2)))

    def test_errmeasure(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            λ, V = ns.polyeig(pep)
            for kind in ["default", "backward"]:
                errmeasure = ns.errmeasure(pep, kind)
                self.assertLess(errmeasure(λ[0], V[:, 0]), 1e-13)
                self.assertGreater(errmeasure(λ[0] + 0.1, V[:, 0]), 1e-4)

if __name__ == "__main__":
    unittest.main()
