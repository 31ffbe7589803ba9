# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Sequence
from dataclasses import dataclass, field
import logging
import numpy as np
import scipy.linalg as sla
import scipy.sparse as sp

from .nep import SumOfProducts
from .eigresult import EigResult, ResultStatus, partial_status
from .errors import InvalidConfigurationError, NumericalBreakdownError
from .errmeasure import BackwardErrMeasure
from .logger import Logger
from .options import get_options
from .orthogonalization import OrthMethod, orthogonalize_and_normalize
from .utils import check_pos, check_non_neg

_logger = logging.getLogger(__name__)

#: Number of consecutive negligible divided differences that mark a converged linearization.
LIN_CONV_TERMS = 4

@dataclass(kw_only=True)
class NLEIGSResult(EigResult):
    #: Backward errors of the accepted eigenpairs.
    residuals: np.ndarray = field(default_factory=lambda: np.zeros(0))
    #: Ritz values at every convergence check.
    lam_history: list[np.ndarray] = field(default_factory=list)
    #: Backward errors of the Ritz pairs at every convergence check, inf outside of Σ.
    res_history: list[np.ndarray] = field(default_factory=list)
    #: Degree of the rational interpolant.
    degree: int = 0
    #: Whether the interpolant reached the linearization tolerance.
    lin_converged: bool = False
    #: Interpolation nodes.
    nodes: np.ndarray = field(default_factory=lambda: np.zeros(0))
    #: Poles of the interpolant.
    poles: np.ndarray = field(default_factory=lambda: np.zeros(0))
    #: Scaling factors of the rational basis functions.
    scalings: np.ndarray = field(default_factory=lambda: np.zeros(0))
    #: Norms of the divided differences.
    coefficient_norms: np.ndarray = field(default_factory=lambda: np.zeros(0))

@dataclass
class NLEIGS:
    """
    NLEIGS, a rational Krylov method on a linearization of a rational interpolant of M. The
    interpolant is built in Newton form with Leja-Bagby nodes on the boundary of the target
    region Σ and poles picked from the candidates ``poles``. Without finite poles the
    interpolant is a polynomial. All eigenvalues inside Σ are computed.

    The interpolant grows by one degree per iteration until it converges or reaches
    ``maxdgr``. Ritz pairs are only extracted from the final interpolant, so a run whose
    iteration budget ends while the interpolant is still growing returns no eigenvalues.
    """

    #: Candidate poles of the rational interpolant, outside of Σ.
    poles: Sequence[complex] = field(default_factory=lambda: [np.inf])

    #: Maximum degree of the interpolant.
    maxdgr: int = 100

    #: Minimum number of Krylov iterations before the eigenvalues are accepted.
    minit: int = 20

    #: Maximum number of Krylov iterations, also a bound for the degree.
    maxit: int = 200

    #: Tolerance on the backward error of the eigenpairs.
    tol: float = 1e-10

    #: Tolerance of the linearization, ``max(tol/10, 100*eps)`` if not set.
    tollin: Optional[float] = None

    #: Iterations between convergence checks, shifts are changed after every block.
    blksize: int = 20

    #: Shifts of the rational Krylov method, the centre of Σ if not set.
    shifts: Optional[Sequence[complex]] = None

    #: Number of sample points per edge of Σ for the Leja-Bagby points.
    nsample: int = 1000

    #: Orthogonalization method, taken from the options if not set.
    orthmethod: Optional[OrthMethod] = None

    #: Arithmetic of the computation.
    dtype: Any = np.complex128

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("maxdgr", "minit", "maxit", "blksize", "nsample"):
            check_pos(name, value)
        elif name in ("tol", "tollin") and value is not None:
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def __call__(
            self,
            nep: SumOfProducts,
            Σ: Sequence[complex],
            v: Optional[Any] = None, /, *,
            logger: Optional[Logger] = None) -> NLEIGSResult:
        """
        Compute the eigenvalues inside Σ, a polygon given by its vertices or an interval given
        by its two end points. v is the start vector (ones if not set).
        """
        log = get_options().logger if logger is None else logger
        method = get_options().orthmethod if self.orthmethod is None else self.orthmethod
        eps = float(np.finfo(self.dtype).eps)
        tollin = max(self.tol / 10, 100 * eps) if self.tollin is None else self.tollin
        Σ = np.asarray(Σ, dtype=complex)
        if Σ.ndim != 1 or len(Σ) < 2:
            raise InvalidConfigurationError("Σ needs two end points or at least three vertices")
        n = nep.size

        degcap = min(self.maxdgr, self.maxit)
        σ, ξ, β = lejabagby(discretize_boundary(Σ, self.nsample),
                            np.asarray(self.poles, dtype=complex), degcap + 1)
        xinv = inverse_poles(ξ)
        coeffs = divided_differences(nep, σ, xinv, β)
        D = [_dense(nep.combine(c)) for c in coeffs]
        nrmD = np.array([np.linalg.norm(Dj) for Dj in D])
        d, lin_converged = linearization_degree(nrmD, tollin)
        if not lin_converged:
            _logger.warning("Linearization not converged: the divided differences of degree "
                           "up to %d did not drop below tollin=%.1e", degcap, tollin)
        log.push_info(f"nleigs: interpolation degree {d}, linearization converged: {lin_converged}")
        if not lin_converged and degcap < self.maxdgr:
            # maxit iterations were spent growing the interpolant
            return NLEIGSResult(status=ResultStatus.FAILED,
                                values=np.zeros(0, dtype=self.dtype),
                                vectors=np.zeros((n, 0), dtype=self.dtype),
                                iterations=self.maxit,
                                message=f"nleigs: interpolant still growing after {self.maxit} iterations",
                                degree=degcap,
                                lin_converged=False,
                                nodes=σ, poles=ξ, scalings=β,
                                coefficient_norms=nrmD)
        LA, LB = linearization(D[:d+1], σ, xinv, β)

        N = n * d
        m = min(self.maxit, N)
        shifts = [np.mean(Σ)] if self.shifts is None else list(self.shifts)
        V = np.zeros((N, m+1), dtype=self.dtype)
        H = np.zeros((m+1, m), dtype=self.dtype)
        K = np.zeros((m+1, m), dtype=self.dtype)
        x0 = np.zeros(N, dtype=self.dtype)
        x0[:n] = np.ones(n) if v is None else v
        V[:, 0] = x0 / np.linalg.norm(x0)

        errmeasure = BackwardErrMeasure(nep)
        factors: dict[complex, Any] = {}
        lam_history, res_history = [], []
        θ = np.zeros(0, dtype=self.dtype)
        X = np.zeros((n, 0), dtype=self.dtype)
        res = np.zeros(0)
        inside = np.zeros(0, dtype=bool)
        k = 0
        for j in range(m):
            s = complex(shifts[(j // self.blksize) % len(shifts)])
            if s not in factors:
                factors[s] = sla.lu_factor(LA - s * LB)
            col = V[:, j+1]
            col[:] = sla.lu_solve(factors[s], LB @ V[:, j])
            breakdown = False
            try:
                H[j+1, j] = orthogonalize_and_normalize(V[:, :j+1], col, H[:j+1, j], method)
            except NumericalBreakdownError:
                # invariant subspace
                breakdown = True
                col[:] = 0
            K[:j+1, j] = s * H[:j+1, j]
            K[j, j] += 1
            K[j+1, j] = s * H[j+1, j]

            k = j + 1
            if k % self.blksize != 0 and k != m and not breakdown:
                continue
            θ, Z = sla.eig(K[:k, :k], H[:k, :k])
            Y = (V[:, :k+1] @ (H[:k+1, :k] @ Z))[:n]
            X = Y / np.linalg.norm(Y, axis=0)
            with np.errstate(invalid="ignore"):
                inside = np.isfinite(θ) & in_region(θ, Σ)
            res = np.array([errmeasure(θ[i], X[:, i]) if inside[i] else np.inf
                            for i in range(k)])
            lam_history.append(θ)
            res_history.append(res)
            nconv = int(np.sum(res < self.tol))
            log.push_iteration_info(k, err=res[inside], conveig=nconv)
            if breakdown or (k >= min(self.minit, m) and np.any(inside)
                             and nconv == int(np.sum(inside))):
                break

        conv = inside & (res < self.tol)
        rest = inside & ~conv
        status = ResultStatus.CONVERGED if not np.any(rest) else partial_status(int(np.sum(conv)))
        return NLEIGSResult(status=status,
                            values=θ[conv], vectors=X[:, conv],
                            candidate_values=θ[rest], candidate_vectors=X[:, rest],
                            errmeasure=float(np.max(res[inside])) if np.any(inside) else 0.0,
                            iterations=k,
                            message="" if status is ResultStatus.CONVERGED else
                                    f"nleigs: {int(np.sum(rest))} Ritz values inside Σ not converged",
                            residuals=res[conv],
                            lam_history=lam_history,
                            res_history=res_history,
                            degree=d,
                            lin_converged=lin_converged,
                            nodes=σ[:d+1],
                            poles=ξ[:d+1],
                            scalings=β[:d+1],
                            coefficient_norms=nrmD)

def nleigs(
        nep: SumOfProducts,
        Σ: Sequence[complex],
        v: Optional[Any] = None, *,
        return_details: bool = False,
        logger: Optional[Logger] = None,
        **config: Any) -> tuple[Any, ...]:
    """
    Eigenvalues and eigenvectors of ``nep`` inside Σ, see ``NLEIGS``. With ``return_details``
    the full result is returned as a third element. Unconverged Ritz pairs are not returned.
    """
    result = NLEIGS(**config)(nep, Σ, v, logger=logger)
    if return_details:
        return result.values, result.vectors, result
    return result.values, result.vectors

def discretize_boundary(Σ: np.ndarray, nsample: int) -> np.ndarray:
    """
    Sample points on the interval, clustered towards its end points like Chebyshev points,
    or equispaced on the edges of the closed polygon Σ.
    """
    if len(Σ) == 2:
        return Σ[0] + (Σ[1] - Σ[0]) * (1 - np.cos(np.linspace(0, np.pi, nsample))) / 2
    t = np.linspace(0, 1, nsample, endpoint=False)
    return np.concatenate([a + (b - a) * t for a, b in zip(Σ, np.roll(Σ, -1))])

def in_region(z: np.ndarray, Σ: np.ndarray) -> np.ndarray:
    """Points inside the polygon Σ (even-odd rule), or on the interval Σ."""
    if len(Σ) == 2:
        length = abs(Σ[1] - Σ[0])
        t = (z - Σ[0]) / (Σ[1] - Σ[0])
        slack = np.sqrt(np.finfo(float).eps)
        return (np.abs(t.imag) * length <= slack * max(1.0, length)) \
            & (t.real >= -slack) & (t.real <= 1 + slack)
    x, y = z.real, z.imag
    inside = np.zeros(z.shape, dtype=bool)
    prev = np.roll(Σ, 1)
    for xi, yi, xj, yj in zip(Σ.real, Σ.imag, prev.real, prev.imag):
        if yi == yj:
            continue
        crosses = (yi > y) != (yj > y)
        inside ^= crosses & (x < (xj - xi) * (y - yi) / (yj - yi) + xi)
    return inside

def lejabagby(Z: np.ndarray, Ξ: np.ndarray, count: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Leja-Bagby nodes σ on the sample points Z, poles ξ from the candidates Ξ and scaling
    factors β such that the rational basis functions have maximum modulus one on Z.
    """
    Ξ = Ξ[np.isfinite(Ξ)]
    rational = len(Ξ) > 0
    sZ = np.ones(len(Z), dtype=complex)
    sXi = np.ones(len(Ξ), dtype=complex)
    σ = np.zeros(count, dtype=complex)
    ξ = np.full(count, np.inf, dtype=complex)
    β = np.ones(count)
    σ[0] = Z[0]
    if rational:
        ξ[0] = Ξ[0]
    for k in range(1, count):
        xi = inverse_poles(ξ[k-1:k])[0]
        sZ *= (Z - σ[k-1]) / (1 - Z * xi)
        β[k] = np.max(np.abs(sZ))
        sZ /= β[k]
        σ[k] = Z[np.argmax(np.abs(sZ))]
        if rational:
            with np.errstate(divide="ignore", invalid="ignore"):
                sXi *= (Ξ - σ[k-1]) / (1 - Ξ * xi) / β[k]
            ξ[k] = Ξ[np.argmin(np.where(np.isnan(sXi), np.inf, np.abs(sXi)))]
    return σ, ξ, β

def inverse_poles(ξ: np.ndarray) -> np.ndarray:
    """``1/ξ`` with infinite poles mapped to zero."""
    xinv = np.zeros(len(ξ), dtype=complex)
    finite = np.isfinite(ξ)
    xinv[finite] = 1 / ξ[finite]
    return xinv

def rational_basis(z: np.ndarray, σ: np.ndarray, xinv: np.ndarray, β: np.ndarray) -> np.ndarray:
    """
    Values ``b[k, j] = b_j(z_k)`` of the basis functions ``b_0 = 1`` and
    ``b_j = b_{j-1} (z - σ_{j-1}) / (β_j (1 - z/ξ_{j-1}))``.
    """
    b = np.ones((len(z), len(σ)), dtype=complex)
    for j in range(1, len(σ)):
        b[:, j] = b[:, j-1] * (z - σ[j-1]) / (β[j] * (1 - z * xinv[j-1]))
    return b

def divided_differences(
        nep: SumOfProducts,
        σ: np.ndarray,
        xinv: np.ndarray,
        β: np.ndarray) -> np.ndarray:
    """
    Coefficients ``c[j, i]`` of the interpolant ``sum_j b_j(λ) sum_i c[j, i] A_i`` matching
    the scalar functions at the nodes σ.
    """
    values = np.array([nep.derivatives(s, 0)[:, 0] for s in σ])
    return sla.solve_triangular(rational_basis(σ, σ, xinv, β), values, lower=True)

def linearization_degree(nrmD: np.ndarray, tollin: float) -> tuple[int, bool]:
    """
    Degree of the interpolant and whether it converged. It converged once ``LIN_CONV_TERMS``
    consecutive divided differences are below ``tollin`` relative to the largest one. In
    both cases the trailing negligible terms are dropped.
    """
    def trimmed(j: int) -> int:
        significant = np.nonzero(nrmD[:j+1] > tollin * np.max(nrmD[:j+1]))[0]
        return max(int(significant[-1]), 1) if len(significant) > 0 else 1

    for j in range(LIN_CONV_TERMS, len(nrmD)):
        scale = np.max(nrmD[:j+1])
        if np.all(nrmD[j-LIN_CONV_TERMS+1:j+1] <= tollin * scale):
            return trimmed(j), True
    return trimmed(len(nrmD) - 1), False

def linearization(
        D: Sequence[np.ndarray],
        σ: np.ndarray,
        xinv: np.ndarray,
        β: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Pencil ``A - λB`` of size ``n*d`` whose eigenvalues are those of the interpolant with the
    divided differences ``D_0, ..., D_d``. The first block row holds the interpolant, the
    others the recurrence of the basis functions.
    """
    d, n = len(D) - 1, D[0].shape[0]
    A = np.zeros((n*d, n*d), dtype=complex)
    B = np.zeros((n*d, n*d), dtype=complex)
    eye = np.eye(n)
    for j in range(d):
        A[:n, j*n:(j+1)*n] = β[d] * D[j]
        B[:n, j*n:(j+1)*n] = β[d] * xinv[d-1] * D[j]
    A[:n, (d-1)*n:] -= σ[d-1] * D[d]
    B[:n, (d-1)*n:] -= D[d]
    for r in range(1, d):
        rows = slice(r*n, (r+1)*n)
        A[rows, (r-1)*n:r*n] = σ[r-1] * eye
        A[rows, r*n:(r+1)*n] = β[r] * eye
        B[rows, (r-1)*n:r*n] = eye
        B[rows, r*n:(r+1)*n] = β[r] * xinv[r-1] * eye
    return A, B

def _dense(mat: Any) -> np.ndarray:
    return mat.toarray() if sp.issparse(mat) else np.asarray(mat)
