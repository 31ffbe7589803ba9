# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Sequence
from abc import ABC, abstractmethod
from enum import Enum
import numpy as np
import scipy.sparse as sp
import opt_einsum as oe

from .utils import as_columns

class ProblemKind(Enum):
    POLYNOMIAL = "polynomial"
    DELAY = "delay"
    SPMF = "spmf"
    GENERIC = "generic"

class NEP(ABC):
    """
    Nonlinear eigenvalue problem M(λ)v = 0 with a matrix valued function M that can be
    evaluated, together with its derivatives, at any λ.
    """

    #: Structural kind of the problem.
    kind: ProblemKind = ProblemKind.GENERIC

    @property
    @abstractmethod
    def size(self) -> int:
        ...

    @abstractmethod
    def compute_Mder(self, λ: complex, der: int = 0) -> Any:
        """The ``der``-th derivative of M at λ."""
        ...

    def compute_Mlincomb(
            self,
            λ: complex,
            V: Any,
            a: Optional[Sequence[complex]] = None,
            startder: int = 0) -> np.ndarray:
        """
        Linear combination ``sum_k a[k] M^(startder+k)(λ) V[:,k]`` of derivatives applied to
        the columns of ``V``. A vector ``V`` is treated as a single column.
        """
        V, _ = as_columns(V)
        coeffs = np.ones(V.shape[1]) if a is None else np.asarray(a)
        z = np.zeros(self.size, dtype=np.result_type(V.dtype, λ, coeffs.dtype))
        for k in range(V.shape[1]):
            if coeffs[k] != 0:
                z = z + coeffs[k] * (self.compute_Mder(λ, startder + k) @ V[:, k])
        return z

class SumOfProducts(NEP):
    """
    NEP of the form ``M(λ) = sum_i A_i f_i(λ)``. Subclasses provide the scalar functions and
    their derivatives, everything else is assembled from the coefficient matrices.
    Dense coefficients are kept as one stacked tensor and contracted with opt_einsum.
    """

    #: Coefficient matrices A_i.
    Av: list[Any]

    def __init__(self, Av: Sequence[Any]) -> None:
        self._set_coefficients(Av)

    def _set_coefficients(self, Av: Sequence[Any]) -> None:
        if len(Av) == 0:
            raise ValueError("At least one coefficient matrix is required")
        self.Av = [A if sp.issparse(A) else np.asarray(A) for A in Av]
        if any(A.shape != self.Av[0].shape or A.shape[0] != A.shape[1] for A in self.Av):
            raise ValueError("Coefficient matrices must be square and of equal size")
        self._stack = None if any(sp.issparse(A) for A in self.Av) else np.stack(self.Av)

    @property
    def size(self) -> int:
        return self.Av[0].shape[0]

    @property
    def nterms(self) -> int:
        return len(self.Av)

    @abstractmethod
    def derivatives(self, λ: complex, order: int = 0) -> np.ndarray:
        """
        Derivatives of the scalar functions, ``d[i,k] = f_i^(k)(λ)`` for ``k <= order``.
        """
        ...

    def compute_Mder(self, λ: complex, der: int = 0) -> Any:
        return self.combine(self.derivatives(λ, der)[:, der])

    def combine(self, coeffs: Sequence[complex]) -> Any:
        """Linear combination ``sum_i coeffs[i] A_i`` of the coefficient matrices."""
        if self._stack is not None:
            return oe.contract("i,imn->mn", np.asarray(coeffs), self._stack)
        mat = coeffs[0] * self.Av[0]
        for c, A in zip(coeffs[1:], self.Av[1:]):
            mat = mat + c * A
        return mat

    def compute_Mlincomb(
            self,
            λ: complex,
            V: Any,
            a: Optional[Sequence[complex]] = None,
            startder: int = 0) -> np.ndarray:
        V, _ = as_columns(V)
        p = V.shape[1]
        coeffs = np.ones(p) if a is None else np.asarray(a)
        weights = self.derivatives(λ, startder + p - 1)[:, startder:] * coeffs
        if self._stack is not None:
            return oe.contract("imn,np,ip->m", self._stack, V, weights)
        return sum(A @ (V @ w) for A, w in zip(self.Av, weights))

    def apply_coefficients(self, V: Any) -> np.ndarray:
        """All products ``A_i V`` as a tensor of shape (nterms, size, columns)."""
        V, _ = as_columns(V)
        if self._stack is not None:
            return oe.contract("imn,nk->imk", self._stack, V)
        return np.stack([np.asarray(A @ V) for A in self.Av])
