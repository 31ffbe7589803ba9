# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
from dataclasses import dataclass
import numpy as np

from .nep import NEP
from .eigresult import EigResult, ResultStatus
from .errmeasure import ErrMeasure, DefaultErrMeasure
from .linsolver import LinSolverCreator
from .logger import Logger
from .options import get_options
from .utils import check_pos, check_non_neg

@dataclass
class AugNewton:
    """
    Augmented Newton iteration for one eigenpair. The eigenvector is normalized by
    ``c^H v = 1``, which makes every step a single linear solve with M(λ).
    """

    #: Maximum number of iterations.
    maxit: int = 30

    #: Tolerance on the error measure, 100 times the machine epsilon if not set.
    tol: Optional[float] = None

    #: Factory for the linear solvers of M(λ), taken from the options if not set.
    linsolvercreator: Optional[LinSolverCreator] = None

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
            λ: complex,
            v: Any, /, *,
            c: Optional[Any] = None,
            errmeasure: Optional[ErrMeasure] = None,
            logger: Optional[Logger] = None) -> EigResult:
        """
        Refine the eigenvalue guess λ with eigenvector guess v. The normalization vector c
        defaults to v.
        """
        opts = get_options()
        logger = opts.logger if logger is None else logger
        creator = opts.linsolvercreator if self.linsolvercreator is None else self.linsolvercreator
        errmeasure = DefaultErrMeasure(nep) if errmeasure is None else errmeasure
        tol = 100 * float(np.finfo(self.dtype).eps) if self.tol is None else self.tol

        λ = self.dtype(λ)
        v = np.array(v, dtype=self.dtype)
        c = v.copy() if c is None else np.asarray(c, dtype=self.dtype)
        v /= np.vdot(c, v)

        err = float("inf")
        for k in range(self.maxit):
            err = errmeasure(λ, v)
            logger.push_iteration_info(k, err=err, λ=λ, level=2)
            if err < tol:
                return EigResult(status=ResultStatus.CONVERGED,
                                 values=np.array([λ]),
                                 vectors=(v / np.linalg.norm(v))[:, np.newaxis],
                                 errmeasure=err,
                                 iterations=k)
            z = nep.compute_Mlincomb(λ, v, a=[1], startder=1)
            tempvec = creator(nep, λ).solve(z, tol)
            α = 1 / np.vdot(c, tempvec)
            λ = λ - α
            v = α * tempvec

        return EigResult(status=ResultStatus.FAILED,
                         values=np.zeros(0, dtype=self.dtype),
                         vectors=np.zeros((nep.size, 0), dtype=self.dtype),
                         candidate_values=np.array([λ]),
                         candidate_vectors=(v / np.linalg.norm(v))[:, np.newaxis],
                         errmeasure=err,
                         iterations=self.maxit,
                         message=f"augnewton: no convergence after {self.maxit} iterations, err={err:.3e}")
