# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
from dataclasses import dataclass, field
import logging
import numpy as np
import scipy.linalg as sla

from .nep import NEP
from .eigresult import EigResult, ResultStatus, partial_status
from .errmeasure import ErrMeasure, DefaultErrMeasure
from .linsolver import LinSolverCreator
from .logger import Logger
from .matrixintegrator import MatrixIntegrator, MatrixTrapezoidal
from .options import get_options
from .utils import check_pos, check_non_neg

_logger = logging.getLogger(__name__)

@dataclass
class ContourBeyn:
    """
    Beyn's contour integral method. The moments ``A0`` and ``A1`` of ``M(z)^{-1} V`` along a
    circle or ellipse are reduced by a rank revealing SVD to a small linear eigenvalue problem
    whose eigenvalues are those of M enclosed by the contour.
    """

    #: Number of probe vectors, bounded by the problem size.
    neigs: int = 10

    #: Number of quadrature points on the contour.
    N: int = 1000

    #: Tolerance on the error measure, square root of the machine epsilon if not set.
    tol: Optional[float] = None

    #: Singular values below this fraction of the largest one are dropped.
    rank_drop_tol: Optional[float] = None

    #: Drop eigenvalues outside the contour and check the errors of the others.
    sanity_check: bool = True

    #: Quadrature rule for the moments.
    quad_method: MatrixIntegrator = field(default_factory=MatrixTrapezoidal)

    #: Factory for the linear solvers of M(z), taken from the options if not set.
    linsolvercreator: Optional[LinSolverCreator] = None

    #: Arithmetic of the computation.
    dtype: Any = np.complex128

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("neigs", "N"):
            check_pos(name, value)
        elif name in ("tol", "rank_drop_tol") and value is not None:
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__(
            self,
            nep: NEP,
            σ: complex = 0.0,
            radius: float | tuple[float, float] = 1.0, /, *,
            rng: Optional[np.random.Generator] = None,
            errmeasure: Optional[ErrMeasure] = None,
            logger: Optional[Logger] = None) -> EigResult:
        """
        Compute the eigenvalues inside the circle of the given radius around σ, or inside the
        axis aligned ellipse if the radius is a pair of semi-axes.
        """
        opts = get_options()
        log = opts.logger if logger is None else logger
        creator = opts.linsolvercreator if self.linsolvercreator is None else self.linsolvercreator
        errmeasure = DefaultErrMeasure(nep) if errmeasure is None else errmeasure
        rng = np.random.default_rng() if rng is None else rng
        eps = float(np.finfo(self.dtype).eps)
        tol = np.sqrt(eps) if self.tol is None else self.tol
        rank_drop_tol = eps**(2/3) if self.rank_drop_tol is None else self.rank_drop_tol

        n = nep.size
        rx, ry = (radius, radius) if np.isscalar(radius) else radius # type: ignore
        σ = complex(σ)
        k = min(self.neigs, n)
        Vh = rng.standard_normal((n, k)).astype(self.dtype)

        def g(t: float) -> complex:
            return σ + rx * np.cos(t) + 1j * ry * np.sin(t)

        def gp(t: float) -> complex:
            return -rx * np.sin(t) + 1j * ry * np.cos(t)

        def f(t: float) -> np.ndarray:
            return creator(nep, g(t)).solve(Vh) * gp(t)

        log.push_info(f"contour_beyn: computing moments with {self.N} points, k={k}")
        S = self.quad_method.integrate_interval(
            self.dtype, f, [lambda t: 1.0, g], 0.0, 2*np.pi, self.N, log) / (2j * np.pi)
        A0, A1 = S[..., 0], S[..., 1]

        V, s, Wh = sla.svd(A0, full_matrices=False)
        p = int(np.sum(s > rank_drop_tol * s[0])) if s[0] > 0 else 0
        log.push_info(f"contour_beyn: rank {p} of {k}")
        if p == k:
            _logger.warning("contour_beyn: full rank moment matrix, "
                           "the contour may enclose more than %d eigenvalues", k)
        V0, W0 = V[:, :p], Wh[:p, :].conj().T
        B = (V0.conj().T @ A1 @ W0) / s[:p]
        λ, VB = sla.eig(B)
        X = V0 @ VB
        X /= np.linalg.norm(X, axis=0)

        if self.sanity_check:
            inside = ((λ.real - σ.real) / rx)**2 + ((λ.imag - σ.imag) / ry)**2 <= 1
            λ, X = λ[inside], X[:, inside]
        err = np.array([errmeasure(λi, X[:, i]) for i, λi in enumerate(λ)])
        conv = err < tol
        if np.all(conv):
            return EigResult(status=ResultStatus.CONVERGED,
                             values=λ.astype(self.dtype), vectors=X.astype(self.dtype),
                             errmeasure=float(np.max(err)) if len(err) else 0.0)
        _logger.warning("contour_beyn: %d of %d eigenpairs above the tolerance %.3e",
                       int(np.sum(~conv)), len(λ), tol)
        return EigResult(status=partial_status(int(np.sum(conv))),
                         values=λ[conv].astype(self.dtype), vectors=X[:, conv].astype(self.dtype),
                         candidate_values=λ[~conv].astype(self.dtype),
                         candidate_vectors=X[:, ~conv].astype(self.dtype),
                         errmeasure=float(np.max(err)),
                         message="contour_beyn: eigenpairs above the tolerance")
