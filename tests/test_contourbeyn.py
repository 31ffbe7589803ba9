import unittest
import numpy as np

from nepsolve import NEPSolve
from utils import backends, quadratic_coefficients, random_dep_coefficients, residual

class TestContourBeyn(unittest.TestCase):

    def setUp(self):
        self.nepsolve = [NEPSolve(backend) for backend in backends]

    def test_pep(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            exact, _ = ns.polyeig(pep)
            exact = exact[np.abs(exact + 0.8) < 0.5]
            self.assertEqual(len(exact), 2)

            res = ns.contour_beyn(neigs=2)(pep, -0.8, 0.5, rng=np.random.default_rng(0))
            λ, V = res.unwrap()
            self.assertEqual(len(λ), 2)
            np.testing.assert_allclose(λ[np.argsort(λ.imag)], exact[np.argsort(exact.imag)], atol=1e-8)
            for i in range(2):
                self.assertLess(residual(pep, λ[i], V[:, i]), 1e-8)

    def test_ellipse(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            exact, _ = ns.polyeig(pep)
            exact = exact[((exact.real + 0.8) / 0.4)**2 + (exact.imag / 0.6)**2 < 1]
            self.assertEqual(len(exact), 2)

            res = ns.contour_beyn(neigs=2, quad_method=ns.gauss())(
                pep, -0.8, (0.4, 0.6), rng=np.random.default_rng(1))
            λ, _ = res.unwrap()
            np.testing.assert_allclose(λ[np.argsort(λ.imag)], exact[np.argsort(exact.imag)], atol=1e-8)

    def test_dep(self) -> None:
        for ns in self.nepsolve:
            dep = ns.dep(random_dep_coefficients(10, seed=5))
            λi, _ = ns.iar(Neig=1, maxit=50, tol=1e-10)(dep).unwrap()
            res = ns.contour_beyn(neigs=4, N=500, quad_method=ns.trapezoidal(n_jobs=2))(
                dep, λi[0], 0.05, rng=np.random.default_rng(2))
            λ, V = res.unwrap()
            self.assertGreaterEqual(len(λ), 1)
            self.assertLess(np.min(np.abs(λ - λi[0])), 1e-8)
            for i in range(len(λ)):
                self.assertLess(residual(dep, λ[i], V[:, i]), 1e-6)

    def test_full_rank_warning(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            with self.assertLogs("nepsolve", "WARNING"):
                ns.contour_beyn(neigs=2)(pep, -0.8, 0.5, rng=np.random.default_rng(0))

if __name__ == "__main__":
    unittest.main()
