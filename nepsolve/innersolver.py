# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Iterator, Optional
from dataclasses import dataclass, field
from enum import Enum
import numpy as np

from .nep import NEP, ProblemKind, SumOfProducts
from .dep import DEP
from .projectednep import ProjectedNEP
from .errors import InvalidConfigurationError
from .errmeasure import DefaultErrMeasure, BackwardErrMeasure
from .augnewton import AugNewton
from .polyeig import polyeig
from .iar import IAR
from .iarchebyshev import IARChebyshev
from .sgiter import SGIter
from .contourbeyn import ContourBeyn

class InnerSolver(Enum):
    DEFAULT = "default"
    NEWTON = "newton"
    POLYEIG = "polyeig"
    IAR = "iar"
    IAR_CHEBYSHEV = "iar_chebyshev"
    SGITER = "sgiter"
    CONTOUR_BEYN = "contour_beyn"

#: Strategy used for ``InnerSolver.DEFAULT``, by problem kind.
DEFAULT_STRATEGY: dict[ProblemKind, InnerSolver] = {
    ProblemKind.POLYNOMIAL: InnerSolver.POLYEIG,
    ProblemKind.DELAY: InnerSolver.IAR_CHEBYSHEV,
    ProblemKind.SPMF: InnerSolver.IAR,
}

@dataclass(kw_only=True)
class InnerSolution:
    """Eigenpairs of a projected problem. Unpacks to ``(values, vectors)``."""

    #: Eigenvalue approximations.
    values: np.ndarray
    #: Eigenvector approximations, one per column.
    vectors: np.ndarray
    #: Strategy that produced the pairs.
    strategy: InnerSolver
    #: Indices of pairs returned unconverged (Newton only).
    unconverged: list[int] = field(default_factory=list)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter((self.values, self.vectors))

def resolve_strategy(strategy: InnerSolver | str, nep: NEP) -> InnerSolver:
    """The concrete strategy for a (possibly default or string) strategy tag."""
    if isinstance(strategy, str):
        try:
            strategy = InnerSolver(strategy.lower())
        except ValueError:
            raise InvalidConfigurationError(
                f"Unknown inner solver {strategy!r}, expected one of "
                f"{[s.value for s in InnerSolver]}") from None
    if not isinstance(strategy, InnerSolver):
        raise InvalidConfigurationError(f"Unknown inner solver {strategy!r}")
    if strategy is InnerSolver.DEFAULT:
        return DEFAULT_STRATEGY.get(nep.kind, InnerSolver.NEWTON)
    return strategy

def inner_solve(
        strategy: InnerSolver | str,
        dtype: Any,
        nep: NEP, *,
        Neig: int = 10,
        σ: complex = 0.0,
        λv: Optional[Any] = None,
        V: Optional[Any] = None,
        j: int = 1,
        tol: float = 1e-12) -> InnerSolution:
    """
    Solve a (typically small, projected) NEP with the given strategy. The guesses λv and V are
    used by the strategies that refine individual pairs, j is the eigenvalue index of the
    safeguarded iteration and tol the tolerance of the outer iteration.
    """
    concrete = resolve_strategy(strategy, nep)
    λv = np.zeros(1, dtype=dtype) if λv is None else np.asarray(λv, dtype=dtype)
    return _solvers[concrete](dtype, nep, Neig=Neig, σ=σ, λv=λv, V=V, j=j, tol=tol)

def _newton(dtype: Any, nep: NEP, *, λv: np.ndarray, V: Optional[Any], tol: float,
            **_: Any) -> InnerSolution:
    n = nep.size
    V = np.ones((n, len(λv)), dtype=dtype) / np.sqrt(n) if V is None else np.asarray(V, dtype=dtype)
    solver = AugNewton(maxit=50, tol=tol / 10, dtype=dtype)
    errmeasure = DefaultErrMeasure(nep)
    values = np.array(λv, copy=True)
    vectors = np.array(V, copy=True)
    unconverged = []
    for k in range(len(λv)):
        res = solver(nep, λv[k], V[:, k], errmeasure=errmeasure)
        λ, v = res.best_available()
        values[k], vectors[:, k] = λ[0], v[:, 0]
        if not res.converged:
            unconverged.append(k)
    return InnerSolution(values=values, vectors=vectors, strategy=InnerSolver.NEWTON,
                         unconverged=unconverged)

def _polyeig(dtype: Any, nep: NEP, **_: Any) -> InnerSolution:
    if nep.kind is not ProblemKind.POLYNOMIAL:
        raise InvalidConfigurationError(
            f"Inner solver polyeig requires a polynomial problem, got {nep.kind.value}")
    λ, V = polyeig(nep, dtype)
    return InnerSolution(values=λ, vectors=V, strategy=InnerSolver.POLYEIG)

def _iar(dtype: Any, nep: NEP, *, Neig: int, σ: complex, **_: Any) -> InnerSolution:
    solver = IAR(Neig=Neig, tol=1e-13, maxit=50, dtype=dtype)
    res = solver(nep, σ, errmeasure=_arnoldi_errmeasure(nep))
    λ, V = res.best_available()
    return InnerSolution(values=λ, vectors=V, strategy=InnerSolver.IAR)

def _iar_chebyshev(dtype: Any, nep: NEP, *, Neig: int, σ: complex, **_: Any) -> InnerSolution:
    dep = as_dep(nep)
    solver = IARChebyshev(Neig=Neig, tol=1e-13, maxit=50, dtype=dtype)
    res = solver(dep, σ, errmeasure=BackwardErrMeasure(dep))
    λ, V = res.best_available()
    return InnerSolution(values=λ, vectors=V, strategy=InnerSolver.IAR_CHEBYSHEV)

def _sgiter(dtype: Any, nep: NEP, *, j: int, tol: float, **_: Any) -> InnerSolution:
    solver = SGIter(tol=tol / 10, dtype=dtype)
    res = solver(nep, min(j, nep.size), errmeasure=_arnoldi_errmeasure(nep))
    λ, V = res.unwrap()
    return InnerSolution(values=λ, vectors=V, strategy=InnerSolver.SGITER)

def _contour_beyn(dtype: Any, nep: NEP, *, Neig: int, σ: complex, λv: np.ndarray,
                  **_: Any) -> InnerSolution:
    radius = 1.5 * float(np.max(np.abs(σ - λv)))
    solver = ContourBeyn(neigs=min(Neig, nep.size), dtype=dtype)
    res = solver(nep, σ, radius if radius > 0 else 1.0,
                 rng=np.random.default_rng(0), errmeasure=_arnoldi_errmeasure(nep))
    λ, V = res.best_available()
    return InnerSolution(values=λ, vectors=V, strategy=InnerSolver.CONTOUR_BEYN)

def _arnoldi_errmeasure(nep: NEP) -> Callable[[complex, Any], float]:
    if isinstance(nep, SumOfProducts):
        return BackwardErrMeasure(nep)
    return DefaultErrMeasure(nep)

def as_dep(nep: NEP) -> DEP:
    """
    A delay problem in the standard form ``-λI + sum_i B_i exp(-τ_i λ)``. Projected delay
    problems ``-λ W^H V + sum_i W^H A_i V exp(-τ_i λ)`` are multiplied by ``(W^H V)^{-1}``.
    """
    if isinstance(nep, DEP):
        return nep
    if isinstance(nep, ProjectedNEP) and isinstance(nep.orgnep, DEP):
        P0, *Pv = nep.Av
        return DEP([np.linalg.solve(P0, P) for P in Pv], nep.orgnep.tauv)
    raise InvalidConfigurationError(
        f"Inner solver iar_chebyshev requires a delay problem, got {nep.kind.value}")

_solvers: dict[InnerSolver, Callable[..., InnerSolution]] = {
    InnerSolver.NEWTON: _newton,
    InnerSolver.POLYEIG: _polyeig,
    InnerSolver.IAR: _iar,
    InnerSolver.IAR_CHEBYSHEV: _iar_chebyshev,
    InnerSolver.SGITER: _sgiter,
    InnerSolver.CONTOUR_BEYN: _contour_beyn,
}
