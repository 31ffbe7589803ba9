# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Optional, Sequence
from dataclasses import dataclass
import numpy as np
import scipy.sparse as sp

from .backend import ArrayNamespace, get_namespace
from .nep import NEP, SumOfProducts, ProblemKind
from .pep import PEP
from .dep import DEP
from .spmf import SPMF
from .projectednep import ProjectedNEP
from .errmeasure import DefaultErrMeasure, BackwardErrMeasure
from .linsolver import LinSolverCreator, FactorizedLinSolver
from .logger import Logger, ErrorLogger
from .options import SolverOptions, set_options, get_options
from .orthogonalization import OrthMethod
from .matrixintegrator import MatrixIntegrator, MatrixTrapezoidal, MatrixGauss, RuleKind, integrate_interval
from .augnewton import AugNewton
from .polyeig import polyeig as _polyeig
from .iar import IAR
from .iarchebyshev import IARChebyshev
from .sgiter import SGIter
from .contourbeyn import ContourBeyn
from .nleigs import NLEIGS
from .innersolver import InnerSolver, InnerSolution, inner_solve as _inner_solve
from .jacobidavidson import JacobiDavidson, ProjectionType, jd as _jd

@dataclass(frozen=True)
class NEPSolve[NDArray: Any]:

    #: Array namespace for the underlying array library.
    namespace: ArrayNamespace[NDArray]

    #: Arithmetic of the solvers.
    dtype: Any

    def __init__(self, namespace: Any, dtype: Any = np.complex128) -> None:
        object.__setattr__(self, "namespace", get_namespace(namespace))
        object.__setattr__(self, "dtype", dtype)

    #-------------------------------------------------------------------------------------------------
    # problems

    def pep(self, Av: Sequence[Any]) -> PEP:
        """
        Polynomial eigenvalue problem ``sum_i A_i λ^i``.
        """
        return PEP([self._matrix(A) for A in Av])

    def dep(self, A: Sequence[Any], tauv: Optional[Sequence[float]] = None) -> DEP:
        """
        Delay eigenvalue problem ``-λI + sum_i A_i exp(-τ_i λ)``.
        """
        return DEP([self._matrix(a) for a in A], tauv)

    def spmf(
            self,
            Av: Sequence[Any],
            fv: Sequence[Callable[[np.ndarray], np.ndarray]],
            kind: ProblemKind = ProblemKind.SPMF) -> SPMF:
        """
        Sum of products of matrices and matrix functions ``sum_i A_i f_i(λ)``.
        """
        return SPMF([self._matrix(A) for A in Av], fv, kind)

    def projected(self, nep: SumOfProducts) -> ProjectedNEP:
        """
        Projection of a NEP, see ``ProjectedNEP.set_projectmatrices``.
        """
        return ProjectedNEP(nep)

    def errmeasure(self, nep: NEP, kind: str = "default") -> DefaultErrMeasure | BackwardErrMeasure:
        """
        Error measure of approximate eigenpairs, ``"default"`` for the relative residual and
        ``"backward"`` for the normwise backward error.
        """
        if kind == "backward":
            return BackwardErrMeasure(nep) # type: ignore
        return DefaultErrMeasure(nep)

    #-------------------------------------------------------------------------------------------------
    # solvers

    def jacobi_davidson(
            self, *,
            Neig: int = 1,
            tol: Optional[float] = None,
            maxit: int = 100,
            projtype: ProjectionType = "petrov_galerkin",
            inner_solver: InnerSolver | str = InnerSolver.DEFAULT,
            orthmethod: Optional[OrthMethod] = None,
            linsolvercreator: Optional[LinSolverCreator] = None) -> JacobiDavidson:
        """
        Jacobi-Davidson solver for the eigenvalues closest to a target.
        """
        return JacobiDavidson(Neig=Neig, tol=tol, maxit=maxit, projtype=projtype,
                              inner_solver=inner_solver, orthmethod=orthmethod,
                              linsolvercreator=linsolvercreator, dtype=self.dtype)

    def jd(self, nep: SumOfProducts, **kwargs: Any) -> tuple[Any, Any]:
        """
        Eigenvalues and eigenvectors by Jacobi-Davidson, raises NoConvergenceError on failure.
        """
        return _jd(nep, dtype=self.dtype, **kwargs)

    def augnewton(self, *, maxit: int = 30, tol: Optional[float] = None,
                  linsolvercreator: Optional[LinSolverCreator] = None) -> AugNewton:
        """
        Augmented Newton iteration for a single eigenpair.
        """
        return AugNewton(maxit=maxit, tol=tol, linsolvercreator=linsolvercreator, dtype=self.dtype)

    def iar(self, *, Neig: int = 6, maxit: int = 30, tol: Optional[float] = None,
            check_error_every: int = 1, γ: complex = 1.0) -> IAR:
        """
        Infinite Arnoldi method for eigenvalues close to a shift.
        """
        return IAR(Neig=Neig, maxit=maxit, tol=tol, check_error_every=check_error_every,
                   γ=γ, dtype=self.dtype)

    def iar_chebyshev(self, *, Neig: int = 6, maxit: int = 30, tol: Optional[float] = None,
                      check_error_every: int = 1) -> IARChebyshev:
        """
        Infinite Arnoldi method in a Chebyshev basis for delay eigenvalue problems.
        """
        return IARChebyshev(Neig=Neig, maxit=maxit, tol=tol,
                            check_error_every=check_error_every, dtype=self.dtype)

    def sgiter(self, *, maxit: int = 100, tol: Optional[float] = None,
               λ_min: float = -np.inf, λ_max: float = np.inf) -> SGIter:
        """
        Safeguarded iteration for Hermitian problems with a min-max characterization.
        """
        return SGIter(maxit=maxit, tol=tol, λ_min=λ_min, λ_max=λ_max, dtype=self.dtype)

    def contour_beyn(self, *, neigs: int = 10, N: int = 1000, tol: Optional[float] = None,
                     quad_method: Optional[MatrixIntegrator] = None) -> ContourBeyn:
        """
        Beyn's contour integral method for the eigenvalues inside a circle or an ellipse.
        """
        return ContourBeyn(neigs=neigs, N=N, tol=tol,
                           quad_method=MatrixTrapezoidal() if quad_method is None else quad_method,
                           dtype=self.dtype)

    def nleigs(self, *, poles: Sequence[complex] = (np.inf,), maxdgr: int = 100,
               maxit: int = 200, tol: float = 1e-10, blksize: int = 20,
               shifts: Optional[Sequence[complex]] = None) -> NLEIGS:
        """
        Rational Krylov method for all eigenvalues in a region.
        """
        return NLEIGS(poles=list(poles), maxdgr=maxdgr, maxit=maxit, tol=tol,
                      blksize=blksize, shifts=shifts, dtype=self.dtype)

    def polyeig(self, nep: NEP) -> tuple[Any, Any]:
        """
        All eigenpairs of a polynomial eigenvalue problem.
        """
        return _polyeig(nep, self.dtype)

    def inner_solve(self, strategy: InnerSolver | str, nep: NEP, **kwargs: Any) -> InnerSolution:
        """
        Solve a projected problem with the given inner solver strategy.
        """
        return _inner_solve(strategy, self.dtype, nep, **kwargs)

    #-------------------------------------------------------------------------------------------------
    # quadrature

    def trapezoidal(self, n_jobs: int = 1) -> MatrixTrapezoidal:
        """
        Trapezoidal rule for periodic matrix valued integrands.
        """
        return MatrixTrapezoidal(n_jobs=n_jobs)

    def gauss(self, n_jobs: int = 1) -> MatrixGauss:
        """
        Gauss-Legendre rule for matrix valued integrands.
        """
        return MatrixGauss(n_jobs=n_jobs)

    def integrate_interval(
            self,
            rule: MatrixIntegrator | RuleKind,
            f: Callable[[float], Any],
            gv: Sequence[Callable[[float], complex]],
            a: float,
            b: float,
            N: int,
            logger: Optional[Logger] = None) -> Any:
        """
        Integrals of ``f(t)g(t)`` over ``[a,b]`` for all weight functions g in gv.
        """
        return integrate_interval(rule, self.dtype, f, gv, a, b, N, logger)

    #-------------------------------------------------------------------------------------------------
    # options and logging

    def logger(self, displaylevel: int = 1, keep_errors: bool = False) -> Logger:
        """
        Logger reporting to the ``nepsolve`` logging channel.
        """
        return ErrorLogger(displaylevel) if keep_errors else Logger(displaylevel)

    def options(
            self, *,
            logger: Optional[Logger] = None,
            linsolvercreator: LinSolverCreator = FactorizedLinSolver,
            orthmethod: OrthMethod = OrthMethod.DGKS) -> SolverOptions:
        """
        Context manager for the defaults of all solvers.
        """
        return SolverOptions(logger=logger, linsolvercreator=linsolvercreator, orthmethod=orthmethod)

    def set_options(self, opts: SolverOptions) -> None:
        """
        Set the defaults of all solvers for the current thread.
        """
        set_options(opts)

    def get_options(self) -> SolverOptions:
        """
        Defaults of all solvers for the current thread.
        """
        return get_options()

    def _matrix(self, mat: Any) -> Any:
        if sp.issparse(mat):
            return mat
        return np.asarray(self.namespace.asarray(mat))
