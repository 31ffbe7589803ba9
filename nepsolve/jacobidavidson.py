# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Literal, Optional
from dataclasses import dataclass
import numpy as np

from .backend import ArrayLike, get_namespace, norm
from .nep import SumOfProducts
from .projectednep import ProjectedNEP
from .eigresult import EigResult, ResultStatus, partial_status
from .errors import InvalidConfigurationError, NumericalBreakdownError
from .errmeasure import ErrMeasure, DefaultErrMeasure
from .innersolver import InnerSolver, inner_solve, resolve_strategy
from .linsolver import LinSolver, LinSolverCreator
from .logger import Logger
from .options import get_options
from .orthogonalization import OrthMethod
from .subspacebasis import SubspaceBasis
from .convergedpairs import ConvergedPairs
from .utils import check_pos, check_non_neg, stable_argsort

type ProjectionType = Literal["galerkin", "petrov_galerkin"]

@dataclass
class JacobiDavidson:
    """
    Jacobi-Davidson method for nonlinear eigenvalue problems, computing the eigenvalues
    closest to a target one at a time. In every iteration the problem is projected onto the
    current subspace, the projected problem is solved by the inner solver, and the subspace is
    expanded by ``M(λ)^{-1} M'(λ) u`` for the selected Ritz pair ``(λ, u)``. Converged
    eigenvalues are deflated by selecting the next Ritz value in the order of distance to the
    target.

    With Galerkin projection the test basis is the trial basis. With Petrov-Galerkin the test
    basis is expanded by ``M(λ) u``.
    """

    #: Number of requested eigenpairs.
    Neig: int = 1

    #: Tolerance on the error measure, 100 times the machine epsilon if not set.
    tol: Optional[float] = None

    #: Maximum number of iterations, at most the size of the problem.
    maxit: int = 100

    #: Projection of the problem onto the subspace.
    projtype: ProjectionType = "petrov_galerkin"

    #: Solver for the projected problems.
    inner_solver: InnerSolver | str = InnerSolver.DEFAULT

    #: Orthogonalization method, taken from the options if not set.
    orthmethod: Optional[OrthMethod] = None

    #: Factory for the linear solvers of the correction equation, taken from the options if not set.
    linsolvercreator: Optional[LinSolverCreator] = None

    #: Arithmetic of the iteration.
    dtype: Any = np.complex128

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("Neig", "maxit"):
            check_pos(name, value)
        elif name == "tol" and value is not None:
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__(
            self,
            nep: SumOfProducts,
            λ: complex = 0.0,
            v0: Optional[ArrayLike] = None, /, *,
            target: complex = 0.0,
            errmeasure: Optional[ErrMeasure] = None,
            logger: Optional[Logger] = None,
            rng: Optional[np.random.Generator] = None) -> EigResult:
        """
        Compute ``Neig`` eigenpairs closest to ``target``, starting from the eigenvalue guess
        λ and the vector v0 (random if not set).
        """
        n = nep.size
        self._check_input(nep, n)
        opts = get_options()
        logger = opts.logger if logger is None else logger
        creator = opts.linsolvercreator if self.linsolvercreator is None else self.linsolvercreator
        method = opts.orthmethod if self.orthmethod is None else self.orthmethod
        errmeasure = DefaultErrMeasure(nep) if errmeasure is None else errmeasure
        tol = 100 * float(np.finfo(self.dtype).eps) if self.tol is None else self.tol
        dtype = self.dtype

        if v0 is None:
            rng = np.random.default_rng() if rng is None else rng
            v0 = rng.standard_normal(n)
        xp = get_namespace(v0)
        λ = dtype(λ)
        u = xp.asarray(v0, dtype=dtype)
        u = u / norm(u)

        pairs = ConvergedPairs(xp, n, self.Neig, dtype)
        err = errmeasure(λ, u)
        pairs.update(λ, u, err, tol)
        logger.push_iteration_info(0, err=err, λ=λ, conveig=pairs.count)
        if pairs.full:
            return self._converged(pairs, err, 0)

        proj_nep = ProjectedNEP(nep)
        V = SubspaceBasis(xp, n, self.maxit + 1, dtype)
        V.push(u)
        if self.projtype == "petrov_galerkin":
            W = SubspaceBasis(xp, n, self.maxit + 1, dtype)
            W.push(nep.compute_Mlincomb(λ, u))
        else:
            W = V

        for k in range(1, self.maxit + 1):
            proj_nep.expand_projectmatrices(W.basis, V.basis)

            conveig = pairs.count
            λv, s = inner_solve(self.inner_solver, dtype, proj_nep,
                                Neig=conveig + 1,
                                λv=xp.zeros(conveig + 1, dtype=dtype),
                                j=conveig + 1,
                                tol=tol)
            λ, s = jd_eig_sorter(λv, s, conveig + 1, target)
            u = V.basis @ (s / norm(s))

            err = errmeasure(λ, u)
            accepted = pairs.update(λ, u, err, tol)
            logger.push_iteration_info(k, err=err, λ=λ, conveig=pairs.count)
            if pairs.full:
                return self._converged(pairs, err, k)

            try:
                self._expand(nep, λ, u, V, W, creator(nep, λ), method, tol)
            except NumericalBreakdownError:
                # the correction of a just accepted pair may lie in the subspace
                if not accepted:
                    raise
                logger.push_info(f"iter {k}: subspace not expanded", level=2)

        return EigResult(status=partial_status(pairs.count),
                         values=pairs.accepted_values,
                         vectors=pairs.accepted_vectors,
                         candidate_values=xp.asarray([λ], dtype=dtype),
                         candidate_vectors=u[:, None],
                         errmeasure=err,
                         iterations=self.maxit,
                         message=f"jd: {pairs.count} of {self.Neig} eigenpairs converged "
                                 f"after {self.maxit} iterations, err={err:.3e}")

    def _expand(
            self,
            nep: SumOfProducts,
            λ: complex,
            u: ArrayLike,
            V: SubspaceBasis,
            W: SubspaceBasis,
            linsolver: LinSolver,
            method: OrthMethod,
            tol: float) -> None:
        # correction equation M(λ) t = M'(λ) u
        pk = nep.compute_Mlincomb(λ, u, a=[1], startder=1)
        V.append(linsolver.solve(pk, tol), method)
        if W is V:
            return
        try:
            W.append(nep.compute_Mlincomb(λ, u), method)
        except NumericalBreakdownError:
            V.width -= 1
            raise

    def _converged(self, pairs: ConvergedPairs, err: float, iterations: int) -> EigResult:
        return EigResult(status=ResultStatus.CONVERGED,
                         values=pairs.accepted_values,
                         vectors=pairs.accepted_vectors,
                         errmeasure=err,
                         iterations=iterations)

    def _check_input(self, nep: SumOfProducts, n: int) -> None:
        if self.maxit > n:
            raise InvalidConfigurationError(
                f"maxit={self.maxit} exceeds the problem size {n}")
        if self.projtype not in ("galerkin", "petrov_galerkin"):
            raise InvalidConfigurationError(
                f"Unknown projection type {self.projtype!r}, "
                "expected 'galerkin' or 'petrov_galerkin'")
        strategy = resolve_strategy(self.inner_solver, nep)
        if strategy is InnerSolver.SGITER and self.projtype != "galerkin":
            raise InvalidConfigurationError(
                "The sgiter inner solver requires Galerkin projection")

def jd_eig_sorter[T: ArrayLike](λv: T, V: T, N: int, target: complex) -> tuple[complex, T]:
    """
    The N-th Ritz pair (counting from one) in the order of distance to the target. Ties keep
    the order of the inner solver. Fewer than N pairs select the last one.
    """
    if len(λv) == 0:
        raise NumericalBreakdownError("The inner solver returned no eigenvalues")
    idx = stable_argsort(λv, target)[min(N, len(λv)) - 1]
    return λv[idx], V[:, idx]

def jd(
        nep: SumOfProducts, *,
        Neig: int = 1,
        tol: Optional[float] = None,
        maxit: int = 100,
        λ: complex = 0.0,
        v0: Optional[ArrayLike] = None,
        target: complex = 0.0,
        projtype: ProjectionType = "petrov_galerkin",
        orthmethod: Optional[OrthMethod] = None,
        inner_solver: InnerSolver | str = InnerSolver.DEFAULT,
        linsolvercreator: Optional[LinSolverCreator] = None,
        errmeasure: Optional[ErrMeasure] = None,
        logger: Optional[Logger] = None,
        dtype: Any = np.complex128) -> tuple[Any, Any]:
    """
    Jacobi-Davidson for ``Neig`` eigenpairs closest to ``target``. Returns the eigenvalues and
    the eigenvectors as columns, raises NoConvergenceError if not all of them converge within
    ``maxit`` iterations.
    """
    solver = JacobiDavidson(Neig=Neig, tol=tol, maxit=maxit, projtype=projtype,
                            inner_solver=inner_solver, orthmethod=orthmethod,
                            linsolvercreator=linsolvercreator, dtype=dtype)
    return solver(nep, λ, v0, target=target, errmeasure=errmeasure, logger=logger).unwrap()
