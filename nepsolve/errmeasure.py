# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Protocol
import numpy as np

from .nep import NEP, SumOfProducts
from .projectednep import ProjectedNEP
from .utils import matrix_norm

class ErrMeasure(Protocol):
    """Protocol for the error estimate of an approximate eigenpair."""

    def __call__(self, λ: complex, v: Any, /) -> float:
        ...

class DefaultErrMeasure:
    """Residual norm relative to the Frobenius norm of M(λ), ``|M(λ)v| / |M(λ)|``."""

    def __init__(self, nep: NEP) -> None:
        self.nep = nep

    def __call__(self, λ: complex, v: Any, /) -> float:
        res = float(np.linalg.norm(self.nep.compute_Mlincomb(λ, v)))
        return res / matrix_norm(self.nep.compute_Mder(λ))

class BackwardErrMeasure:
    """
    Normwise backward error ``|M(λ)v| / (sum_i |f_i(λ)| |A_i| |v|)`` of a sum of products
    NEP. Unlike the relative residual, it is meaningful for problems of size one.
    """

    def __init__(self, nep: SumOfProducts) -> None:
        self.nep = nep
        # projected coefficients change with every basis update
        self._norms: Optional[np.ndarray] = None
        if not isinstance(nep, ProjectedNEP):
            self._norms = self._coefficient_norms()

    def __call__(self, λ: complex, v: Any, /) -> float:
        norms = self._coefficient_norms() if self._norms is None else self._norms
        res = float(np.linalg.norm(self.nep.compute_Mlincomb(λ, v)))
        scale = float(np.sum(np.abs(self.nep.derivatives(λ, 0)[:, 0]) * norms))
        return res / (scale * float(np.linalg.norm(v)))

    def _coefficient_norms(self) -> np.ndarray:
        return np.array([matrix_norm(A) for A in self.nep.Av])
