import unittest
import numpy as np

from nepsolve import NEPSolve, NoConvergenceError, InvalidConfigurationError
from nepsolve.jacobidavidson import jd_eig_sorter
from nepsolve.linsolver import BackslashLinSolver
from nepsolve.orthogonalization import OrthMethod
from utils import backends, random_pep_coefficients, random_dep_coefficients

class TestJacobiDavidson(unittest.TestCase):

    def setUp(self):
        self.nepsolve = [NEPSolve(backend) for backend in backends]
        self.n = 50

    def check_pairs(self, nep, λv, V, tol: float) -> None:
        errmeasure = self.nepsolve[0].errmeasure(nep)
        for λ, v in zip(λv, V.T):
            self.assertLess(errmeasure(λ, v), tol)
        # every accepted eigenvalue is separated from the ones accepted before it
        for i in range(len(λv)):
            for j in range(i):
                self.assertGreater(abs(λv[i] - λv[j]), np.finfo(float).eps**0.25 * abs(λv[j]))

    def test_pep(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(self.n))
            for projtype in ["galerkin", "petrov_galerkin"]:
                λv, V = ns.jd(pep, Neig=2, tol=1e-10, maxit=self.n, projtype=projtype,
                              v0=np.ones(self.n))
                self.assertEqual(len(λv), 2)
                self.assertEqual(V.shape, (self.n, 2))
                self.check_pairs(pep, λv, V, 1e-10)

    def test_target(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(self.n, seed=1))
            exact, _ = ns.polyeig(pep)
            solver = ns.jacobi_davidson(Neig=1, tol=1e-10, maxit=self.n, projtype="galerkin")
            res = solver(pep, 0.0, np.ones(self.n), target=0.0)
            self.assertTrue(res.converged)
            # the eigenvalue is an exact one, typically the closest to the target
            self.assertLess(np.min(np.abs(exact - res.values[0])), 1e-6)

    def test_dep(self) -> None:
        for ns in self.nepsolve:
            dep = ns.dep(random_dep_coefficients(30, seed=3))
            λv, V = ns.jd(dep, Neig=1, tol=1e-8, maxit=30, projtype="galerkin",
                          v0=np.ones(30))
            self.check_pairs(dep, λv, V, 1e-8)

    def test_options(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(self.n, seed=2))
            logger = ns.logger(1, keep_errors=True)
            with ns.options(logger=logger, linsolvercreator=BackslashLinSolver,
                            orthmethod=OrthMethod.MODIFIED_GRAM_SCHMIDT):
                with self.assertLogs("nepsolve", "INFO"):
                    λv, V = ns.jd(pep, Neig=1, tol=1e-10, maxit=self.n, v0=np.ones(self.n))
            self.check_pairs(pep, λv, V, 1e-10)
            self.assertIn(0, logger.errs)
            self.assertGreater(len(logger.errs), 1)

    def test_no_convergence(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(self.n))
            with self.assertRaises(NoConvergenceError) as cm:
                ns.jd(pep, Neig=3, tol=1e-10, maxit=2, v0=np.ones(self.n))
            err = cm.exception
            self.assertGreater(len(err.λ), 0)
            self.assertEqual(err.v.shape, (self.n, len(err.λ)))
            self.assertFalse(err.result.converged)

    def test_invalid(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep(random_pep_coefficients(10))
            with self.assertRaises(InvalidConfigurationError):
                ns.jd(pep, maxit=11)
            with self.assertRaises(InvalidConfigurationError):
                ns.jd(pep, maxit=5, projtype="ritz") # type: ignore
            with self.assertRaises(InvalidConfigurationError):
                ns.jd(pep, maxit=5, inner_solver="sgiter", projtype="petrov_galerkin")
            with self.assertRaises(InvalidConfigurationError):
                ns.jd(pep, maxit=5, inner_solver="unknown")
            with self.assertRaises(ValueError):
                ns.jacobi_davidson(Neig=0)

    def test_sorter(self) -> None:
        λv = np.array([3.0, -1.0, 1.0, 0.5])
        V = np.eye(4)
        λ, v = jd_eig_sorter(λv, V, 1, 0.0)
        self.assertEqual(λ, 0.5)
        np.testing.assert_allclose(v, V[:, 3])
        # ties keep the order of the inner solver
        λ, _ = jd_eig_sorter(λv, V, 2, 0.0)
        self.assertEqual(λ, -1.0)
        λ, _ = jd_eig_sorter(λv, V, 10, 0.0)
        self.assertEqual(λ, 3.0)

if __name__ == "__main__":
    unittest.main()
