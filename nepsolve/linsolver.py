# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Protocol, TYPE_CHECKING
import numpy as np
import scipy.linalg as sla
import scipy.sparse as sp
import scipy.sparse.linalg as spla

if TYPE_CHECKING:
    from .nep import NEP

class LinSolver(Protocol):
    """Protocol for a solver of M(λ)x = b at a fixed λ."""

    def solve(self, rhs: Any, tol: Optional[float] = None) -> Any:
        """
        Solve the linear system for one right hand side vector or for the columns of a matrix.
        """
        ...

class LinSolverCreator(Protocol):
    """Protocol for creating a linear solver of a NEP at a given λ."""

    def __call__(self, nep: "NEP", λ: complex, /) -> LinSolver:
        ...

class FactorizedLinSolver:
    """
    Factorizes M(λ) once on creation, LU for dense and SuperLU for sparse matrices, and
    reuses the factors for all following solves.
    """

    def __init__(self, nep: "NEP", λ: complex, /) -> None:
        mat = nep.compute_Mder(λ)
        if sp.issparse(mat):
            self._splu = spla.splu(sp.csc_matrix(mat, dtype=np.result_type(mat.dtype, λ)))
            self._lu = None
        else:
            self._splu = None
            self._lu = sla.lu_factor(mat, check_finite=False)

    def solve(self, rhs: Any, tol: Optional[float] = None) -> Any:
        if self._lu is not None:
            return sla.lu_solve(self._lu, rhs, check_finite=False)
        return self._splu.solve(np.asarray(rhs, dtype=self._splu.L.dtype)) # type: ignore

class BackslashLinSolver:
    """Solves with a fresh dense or sparse direct solve on every call."""

    def __init__(self, nep: "NEP", λ: complex, /) -> None:
        self._mat = nep.compute_Mder(λ)

    def solve(self, rhs: Any, tol: Optional[float] = None) -> Any:
        if sp.issparse(self._mat):
            return spla.spsolve(sp.csc_matrix(self._mat), rhs)
        return np.linalg.solve(self._mat, rhs)
