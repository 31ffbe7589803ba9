import unittest
import numpy as np

from nepsolve import NEPSolve, InvalidConfigurationError
from utils import backends

class TestSGIter(unittest.TestCase):

    def setUp(self):
        self.nepsolve = [NEPSolve(backend) for backend in backends]
        rng = np.random.default_rng(6)
        A = rng.standard_normal((10, 10))
        self.A = A + A.T

    def test_linear(self) -> None:
        for ns in self.nepsolve:
            # M(λ) = λI - A, the j-th eigenvalue is the j-th smallest eigenvalue of A
            pep = ns.pep([-self.A, np.eye(10)])
            exact = np.linalg.eigvalsh(self.A)
            for j in [1, 2, 5]:
                λ, V = ns.sgiter(tol=1e-12)(pep, j).unwrap()
                self.assertAlmostEqual(λ[0].real, exact[j-1], places=10)
                np.testing.assert_allclose(self.A @ V[:, 0], exact[j-1] * V[:, 0], atol=1e-9)

    def test_quadratic(self) -> None:
        for ns in self.nepsolve:
            # M(λ) = λ^2 I + λ I - A, with A positive definite the positive eigenvalues
            # have a min-max characterization on [0, inf)
            A = self.A + 20 * np.eye(10)
            pep = ns.pep([-A, np.eye(10), np.eye(10)])
            μ = np.linalg.eigvalsh(A)
            exact = (-1 + np.sqrt(1 + 4 * μ)) / 2
            λ, _ = ns.sgiter(tol=1e-12, λ_min=0.0)(pep, 2, 1.0).unwrap()
            self.assertAlmostEqual(λ[0].real, exact[1], places=8)

    def test_invalid(self) -> None:
        for ns in self.nepsolve:
            pep = ns.pep([-self.A, np.eye(10)])
            with self.assertRaises(InvalidConfigurationError):
                ns.sgiter()(pep, 0)
            with self.assertRaises(InvalidConfigurationError):
                ns.sgiter()(pep, 11)

if __name__ == "__main__":
    unittest.main()
