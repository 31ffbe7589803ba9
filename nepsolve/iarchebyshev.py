# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
from dataclasses import dataclass
import numpy as np
import scipy.linalg as sla
from numpy.polynomial.chebyshev import chebvander

from .nep import NEP
from .dep import DEP
from .eigresult import EigResult, ResultStatus, partial_status
from .errors import InvalidConfigurationError, NumericalBreakdownError
from .errmeasure import ErrMeasure, DefaultErrMeasure
from .linsolver import LinSolverCreator
from .logger import Logger
from .options import get_options
from .orthogonalization import OrthMethod, orthogonalize_and_normalize
from .utils import check_pos, check_non_neg

@dataclass
class IARChebyshev:
    """
    Infinite Arnoldi method for delay eigenvalue problems in a Chebyshev basis. The Krylov
    vectors hold the Chebyshev coefficients of functions on ``[-τ_max, 0]``, the operator
    integrates them and fixes the constant by the delay boundary condition.
    """

    #: Number of requested eigenpairs.
    Neig: int = 6

    #: Maximum number of Arnoldi steps.
    maxit: int = 30

    #: Tolerance on the error measure, 10000 times the machine epsilon if not set.
    tol: Optional[float] = None

    #: Ritz pairs are checked every that many steps.
    check_error_every: int = 1

    #: Orthogonalization method, taken from the options if not set.
    orthmethod: Optional[OrthMethod] = None

    #: Factory for the linear solver of M(σ), taken from the options if not set.
    linsolvercreator: Optional[LinSolverCreator] = None

    #: Arithmetic of the iteration.
    dtype: Any = np.complex128

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("Neig", "maxit", "check_error_every"):
            check_pos(name, value)
        elif name == "tol" and value is not None:
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__(
            self,
            nep: NEP,
            σ: complex = 0.0,
            v: Optional[Any] = None, /, *,
            errmeasure: Optional[ErrMeasure] = None,
            logger: Optional[Logger] = None) -> EigResult:
        """Compute eigenpairs close to the shift σ, starting from the constant function v."""
        if not isinstance(nep, DEP):
            raise InvalidConfigurationError("iar_chebyshev requires a delay eigenvalue problem")
        opts = get_options()
        logger = opts.logger if logger is None else logger
        creator = opts.linsolvercreator if self.linsolvercreator is None else self.linsolvercreator
        method = opts.orthmethod if self.orthmethod is None else self.orthmethod
        errmeasure = DefaultErrMeasure(nep) if errmeasure is None else errmeasure
        tol = 10000 * float(np.finfo(self.dtype).eps) if self.tol is None else self.tol

        n, m, dtype = nep.size, self.maxit, self.dtype
        σ = dtype(σ)
        shifted = shift_dep(nep, σ)
        tmax = float(np.max(shifted.tauv)) if np.max(shifted.tauv) > 0 else 1.0
        # θ in [-tmax, 0] is mapped to t = κθ + c in [-1, 1]
        κ, c = 2 / tmax, 1.0
        Tdelay = chebvander(c - κ * shifted.tauv, m+1)
        Tzero = chebvander(np.array([c]), m+1)[0]

        solver = creator(shifted, 0.0)
        V = np.zeros((n*(m+1), m+1), dtype=dtype)
        H = np.zeros((m+1, m), dtype=dtype)
        v = np.ones(n, dtype=dtype) if v is None else np.asarray(v, dtype=dtype)
        V[:n, 0] = v / np.linalg.norm(v)

        λ, Q, err = np.zeros(0, dtype=dtype), np.zeros((n, 0), dtype=dtype), np.zeros(0)
        k = 0
        for k in range(1, m+1):
            coeffs = np.zeros((n, k+2), dtype=dtype)
            coeffs[:, :k] = V[:n*k, k-1].reshape(k, n).T
            y = np.zeros((n, k+1), dtype=dtype)
            y[:, 1] = coeffs[:, 0] - coeffs[:, 2] / 2
            j = np.arange(2, k+1)
            y[:, 2:] = (coeffs[:, j-1] - coeffs[:, j+1]) / (2 * j)
            y[:, 1:] /= κ

            rhs = coeffs[:, :k] @ Tzero[:k]
            for A, T in zip(shifted.A, Tdelay):
                rhs -= A @ (y[:, 1:] @ T[1:k+1])
            y[:, 0] = solver.solve(rhs)

            vec = V[:n*(k+1), k]
            vec[:] = y.T.reshape(-1)
            breakdown = False
            try:
                H[k, k-1] = orthogonalize_and_normalize(V[:n*(k+1), :k], vec, H[:k, k-1], method)
            except NumericalBreakdownError:
                breakdown = True

            if k % self.check_error_every == 0 or k == m or breakdown:
                D, Z = sla.eig(H[:k, :k])
                with np.errstate(divide="ignore", invalid="ignore"):
                    λ = (σ + 1 / D).astype(dtype)
                # Ritz vectors are the Ritz functions evaluated at θ = 0
                Q = np.tensordot(Tzero[:k], V[:n*k, :k].reshape(k, n, k), axes=(0, 0)) @ Z
                Q /= np.linalg.norm(Q, axis=0)
                err = np.array([errmeasure(λ[s], Q[:, s]) if np.isfinite(λ[s]) else np.inf
                                for s in range(k)])
                conv = int(np.sum(err < tol))
                logger.push_iteration_info(k, err=err, conveig=conv)
                if conv >= self.Neig or breakdown:
                    break

        order = np.argsort(err, kind="stable")
        conv = [i for i in order if err[i] < tol][:self.Neig]
        rest = [i for i in order if err[i] >= tol and np.isfinite(λ[i])]
        if len(conv) >= self.Neig:
            return EigResult(status=ResultStatus.CONVERGED,
                             values=λ[conv], vectors=Q[:, conv],
                             errmeasure=float(err[conv[-1]]), iterations=k)
        return EigResult(status=partial_status(len(conv)),
                         values=λ[conv], vectors=Q[:, conv],
                         candidate_values=λ[rest], candidate_vectors=Q[:, rest],
                         errmeasure=float(err[rest[0]]) if rest else float("nan"),
                         iterations=k,
                         message=f"iar_chebyshev: {len(conv)} of {self.Neig} eigenpairs "
                                 f"converged after {k} iterations")

def shift_dep(nep: DEP, σ: complex) -> DEP:
    """
    The delay problem in the shifted variable ``λ - σ``, again of the form
    ``-λI + sum_i A_i exp(-τ_i λ)``.
    """
    if σ == 0:
        return nep
    A = [Ai * np.exp(-tau * σ) for Ai, tau in zip(nep.A, nep.tauv)]
    return DEP([*A, -σ * nep.Av[0]], [*nep.tauv, 0.0])
