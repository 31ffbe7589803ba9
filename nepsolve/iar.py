# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
from dataclasses import dataclass
import numpy as np
import scipy.linalg as sla

from .nep import NEP
from .eigresult import EigResult, ResultStatus, partial_status
from .errors import NumericalBreakdownError
from .errmeasure import ErrMeasure, DefaultErrMeasure
from .linsolver import LinSolverCreator
from .logger import Logger
from .options import get_options
from .orthogonalization import OrthMethod, orthogonalize_and_normalize
from .utils import check_pos, check_non_neg

@dataclass
class IAR:
    """
    Infinite Arnoldi method. Arnoldi is applied to the integration operator acting on the
    Taylor coefficients of functions on the shifted axis, every step adds one coefficient
    block and needs one solve with M(σ). Ritz values are ``σ + γ/μ`` for the eigenvalues
    ``μ`` of the Hessenberg matrix.
    """

    #: Number of requested eigenpairs.
    Neig: int = 6

    #: Maximum number of Arnoldi steps.
    maxit: int = 30

    #: Tolerance on the error measure, 10000 times the machine epsilon if not set.
    tol: Optional[float] = None

    #: Ritz pairs are checked every that many steps.
    check_error_every: int = 1

    #: Scaling of the eigenvalue variable.
    γ: complex = 1.0

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
        """Compute eigenpairs close to the shift σ, starting from the vector v (ones if not set)."""
        opts = get_options()
        logger = opts.logger if logger is None else logger
        creator = opts.linsolvercreator if self.linsolvercreator is None else self.linsolvercreator
        method = opts.orthmethod if self.orthmethod is None else self.orthmethod
        errmeasure = DefaultErrMeasure(nep) if errmeasure is None else errmeasure
        tol = 10000 * float(np.finfo(self.dtype).eps) if self.tol is None else self.tol

        n, m, dtype = nep.size, self.maxit, self.dtype
        σ = dtype(σ)
        V = np.zeros((n*(m+1), m+1), dtype=dtype)
        H = np.zeros((m+1, m), dtype=dtype)
        y = np.zeros((n, m+1), dtype=dtype)
        α = dtype(self.γ)**np.arange(m+1)
        α[0] = 0

        solver = creator(nep, σ)
        v = np.ones(n, dtype=dtype) if v is None else np.asarray(v, dtype=dtype)
        V[:n, 0] = v / np.linalg.norm(v)

        λ, Q, err = np.zeros(0, dtype=dtype), np.zeros((n, 0), dtype=dtype), np.zeros(0)
        k = 0
        for k in range(1, m+1):
            y[:, 0] = 0
            y[:, 1:k+1] = V[:n*k, k-1].reshape(k, n).T / np.arange(1, k+1)
            y[:, 0] = -solver.solve(nep.compute_Mlincomb(σ, y[:, :k+1], a=α[:k+1]))

            vec = V[:n*(k+1), k]
            vec[:] = y[:, :k+1].T.reshape(-1)
            breakdown = False
            try:
                H[k, k-1] = orthogonalize_and_normalize(V[:n*(k+1), :k], vec, H[:k, k-1], method)
            except NumericalBreakdownError:
                # invariant subspace, the Ritz values are exact
                breakdown = True

            if k % self.check_error_every == 0 or k == m or breakdown:
                λ, Q, err = self._ritz_pairs(nep, V[:n, :k], H[:k, :k], σ, errmeasure)
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
                         message=f"iar: {len(conv)} of {self.Neig} eigenpairs converged "
                                 f"after {k} iterations")

    def _ritz_pairs(
            self,
            nep: NEP,
            V: np.ndarray,
            H: np.ndarray,
            σ: complex,
            errmeasure: ErrMeasure) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        D, Z = sla.eig(H)
        with np.errstate(divide="ignore", invalid="ignore"):
            λ = σ + self.γ / D
        Q = V @ Z
        Q /= np.linalg.norm(Q, axis=0)
        err = np.array([errmeasure(λ[s], Q[:, s]) if np.isfinite(λ[s]) else np.inf
                        for s in range(len(λ))])
        return λ.astype(self.dtype), Q, err
