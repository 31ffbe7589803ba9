import unittest
import numpy as np

from nepsolve import NEPSolve, InnerSolver, InvalidConfigurationError
from nepsolve.innersolver import DEFAULT_STRATEGY, resolve_strategy, as_dep
from utils import backends, quadratic_coefficients, random_pep_coefficients, random_dep_coefficients

class TestInnerSolver(unittest.TestCase):

    def setUp(self):
        self.nepsolve = [NEPSolve(backend) for backend in backends]

    def projected(self, ns, nep, k: int, seed: int = 0):
        rng = np.random.default_rng(seed)
        V, _ = np.linalg.qr(rng.standard_normal((nep.size, k)))
        proj = ns.projected(nep)
        proj.set_projectmatrices(V, V)
        return proj

    def test_default(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(8))
            dep = ns.dep(random_dep_coefficients(8))
            for nep, strategy in [(pep, InnerSolver.POLYEIG), (dep, InnerSolver.IAR_CHEBYSHEV)]:
                proj = self.projected(ns, nep, 4)
                self.assertEqual(resolve_strategy(InnerSolver.DEFAULT, proj), strategy)
                default = ns.inner_solve("default", proj, Neig=2)
                explicit = ns.inner_solve(strategy, proj, Neig=2)
                self.assertEqual(default.strategy, strategy)
                np.testing.assert_allclose(default.values, explicit.values)
                np.testing.assert_allclose(default.vectors, explicit.vectors)
            self.assertEqual(DEFAULT_STRATEGY.get(ns.spmf([np.eye(2)], [np.exp]).kind),
                             InnerSolver.IAR)

    def test_strategies(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            exact, _ = ns.polyeig(pep)
            guess = exact[np.argmin(np.abs(exact - 1.3))]
            for strategy in ["polyeig", "iar", "contour_beyn", "newton"]:
                λv, V = ns.inner_solve(strategy, pep, Neig=2, σ=1.3,
                                       λv=[1.3], V=np.ones((2, 1)))
                self.assertGreater(len(λv), 0)
                self.assertLess(np.min(np.abs(λv - guess)), 1e-6, strategy)

    def test_newton(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            sol = ns.inner_solve(InnerSolver.NEWTON, pep, λv=[1.3, -8.5], V=np.ones((2, 2)))
            self.assertEqual(sol.unconverged, [])
            np.testing.assert_allclose(np.sort(sol.values.real), [-8.7145, 1.3627], atol=1e-3)
            for λ, v in zip(sol.values, sol.vectors.T):
                self.assertLess(np.linalg.norm(pep.compute_Mlincomb(λ, v)), 1e-8)

    def test_newton_unconverged_guess(self) -> None:
        for ns in self.nepsolve:
            # M(λ) = diag(λ - 5, λ³ - 2λ + 2), Newton cycles between 0 and 1 on the second entry
            pep = ns.pep([np.diag([-5.0, 2.0]), np.diag([1.0, -2.0]),
                          np.zeros((2, 2)), np.diag([0.0, 1.0])])
            V = np.array([[0.0, 1.0], [1.0, 0.0]])
            sol = ns.inner_solve(InnerSolver.NEWTON, pep, λv=[0.0, 5.3], V=V)
            self.assertEqual(sol.unconverged, [0])
            # the last iterate is kept
            self.assertAlmostEqual(sol.values[0], 0.0, places=12)
            np.testing.assert_allclose(np.abs(sol.vectors[:, 0]), [0.0, 1.0], atol=1e-12)
            # the next guess is still refined
            self.assertAlmostEqual(sol.values[1], 5.0, places=12)
            np.testing.assert_allclose(np.abs(sol.vectors[:, 1]), [1.0, 0.0], atol=1e-12)

    def test_sgiter(self) -> None:
        for ns in self.nepsolve:
            rng = np.random.default_rng(6)
            A = rng.standard_normal((6, 6))
            A = A + A.T
            pep = ns.pep([-A, np.eye(6)])
            λv, _ = ns.inner_solve("sgiter", pep, j=2, tol=1e-10)
            self.assertAlmostEqual(λv[0].real, np.linalg.eigvalsh(A)[1], places=8)
            # the index is capped at the size of the problem
            λv, _ = ns.inner_solve("sgiter", pep, j=10, tol=1e-10)
            self.assertAlmostEqual(λv[0].real, np.linalg.eigvalsh(A)[-1], places=8)

    def test_as_dep(self) -> None:
        for ns in self.nepsolve:
            dep = ns.dep(random_dep_coefficients(6))
            proj = self.projected(ns, dep, 6)
            converted = as_dep(proj)
            λ = 0.3 - 0.4j
            # with a full orthogonal basis the eigenvalues are those of the original problem
            np.testing.assert_allclose(np.linalg.det(converted.compute_Mder(λ)),
                                       np.linalg.det(dep.compute_Mder(λ)), rtol=1e-10)
            with self.assertRaises(InvalidConfigurationError):
                as_dep(ns.pep(quadratic_coefficients()))

    def test_invalid(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(quadratic_coefficients())
            dep = ns.dep(random_dep_coefficients(2))
            with self.assertRaises(InvalidConfigurationError):
                ns.inner_solve("arnoldi", pep)
            with self.assertRaises(InvalidConfigurationError):
                ns.inner_solve("polyeig", dep)
            with self.assertRaises(InvalidConfigurationError):
                ns.inner_solve(InnerSolver.IAR_CHEBYSHEV, pep)

if __name__ == "__main__":
    unittest.main()
