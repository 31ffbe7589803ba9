# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
from dataclasses import dataclass
import numpy as np
import scipy.linalg as sla
import scipy.sparse as sp

from .nep import NEP
from .eigresult import EigResult, ResultStatus
from .errors import InvalidConfigurationError
from .errmeasure import ErrMeasure, DefaultErrMeasure
from .logger import Logger
from .options import get_options
from .utils import check_pos, check_non_neg

@dataclass
class SGIter:
    """
    Safeguarded iteration for Hermitian NEPs whose eigenvalues in ``[λ_min, λ_max]`` satisfy a
    min-max characterization. The j-th eigenvalue is the value of the Rayleigh functional at
    the eigenvector belonging to the j-th largest eigenvalue of M(λ).
    """

    #: Maximum number of iterations.
    maxit: int = 100

    #: Tolerance on the error measure, 100 times the machine epsilon if not set.
    tol: Optional[float] = None

    #: Lower end of the interval of interest.
    λ_min: float = -np.inf

    #: Upper end of the interval of interest.
    λ_max: float = np.inf

    #: Arithmetic of the iteration.
    dtype: Any = np.complex128

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "maxit":
            check_pos(name, value)
        elif name == "tol" and value is not None:
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__(
            self,
            nep: NEP,
            j: int = 1,
            λ: Optional[float] = None, /, *,
            errmeasure: Optional[ErrMeasure] = None,
            logger: Optional[Logger] = None) -> EigResult:
        """Compute the j-th eigenvalue (counting from one) of the min-max characterization."""
        n = nep.size
        if not 1 <= j <= n:
            raise InvalidConfigurationError(f"Eigenvalue index j must be in [1, {n}], got {j}")
        logger = get_options().logger if logger is None else logger
        errmeasure = DefaultErrMeasure(nep) if errmeasure is None else errmeasure
        tol = 100 * float(np.finfo(self.dtype).eps) if self.tol is None else self.tol

        if λ is None:
            bounded = np.isfinite(self.λ_min) and np.isfinite(self.λ_max)
            λ = 0.5 * (self.λ_min + self.λ_max) if bounded else 0.0
        λ = float(np.clip(np.real(λ), self.λ_min, self.λ_max))

        x = np.zeros(n, dtype=self.dtype)
        err = float("inf")
        for k in range(self.maxit):
            M = nep.compute_Mder(λ)
            M = M.toarray() if sp.issparse(M) else np.asarray(M)
            _, X = sla.eigh((M + M.conj().T) / 2)
            x = X[:, n - j].astype(self.dtype)
            err = errmeasure(λ, x)
            logger.push_iteration_info(k, err=err, λ=λ, level=2)
            if err < tol:
                return EigResult(status=ResultStatus.CONVERGED,
                                 values=np.array([λ], dtype=self.dtype),
                                 vectors=x[:, np.newaxis],
                                 errmeasure=err,
                                 iterations=k)
            λ = float(np.clip(rayleigh_functional(nep, x, λ), self.λ_min, self.λ_max))

        return EigResult(status=ResultStatus.FAILED,
                         values=np.zeros(0, dtype=self.dtype),
                         vectors=np.zeros((n, 0), dtype=self.dtype),
                         candidate_values=np.array([λ], dtype=self.dtype),
                         candidate_vectors=x[:, np.newaxis],
                         errmeasure=err,
                         iterations=self.maxit,
                         message=f"sgiter: no convergence after {self.maxit} iterations, err={err:.3e}")

def rayleigh_functional(
        nep: NEP,
        x: Any,
        λ: float,
        tol: float = 1e-14,
        maxit: int = 20) -> float:
    """
    Root of ``x^H M(λ) x`` closest to the start value λ, computed by Newton's method on the
    real axis.
    """
    for _ in range(maxit):
        f = np.real(np.vdot(x, nep.compute_Mlincomb(λ, x)))
        fp = np.real(np.vdot(x, nep.compute_Mlincomb(λ, x, a=[1], startder=1)))
        if fp == 0:
            break
        step = f / fp
        λ = λ - step
        if abs(step) <= tol * max(1.0, abs(λ)):
            break
    return float(λ)
