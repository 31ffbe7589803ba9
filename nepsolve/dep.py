# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional, Sequence
import numpy as np
import scipy.sparse as sp

from .nep import SumOfProducts, ProblemKind

class DEP(SumOfProducts):
    """
    Delay eigenvalue problem ``M(λ) = -λI + sum_i A_i exp(-τ_i λ)``. The coefficient list
    ``Av`` starts with the identity, followed by the delay matrices ``A``.
    """

    kind = ProblemKind.DELAY

    #: Delay matrices.
    A: list[Any]
    #: Delays, one per delay matrix.
    tauv: np.ndarray

    def __init__(self, A: Sequence[Any], tauv: Optional[Sequence[float]] = None) -> None:
        if tauv is None:
            tauv = [float(i) for i in range(len(A))]
        if len(tauv) != len(A):
            raise ValueError("One delay per delay matrix is required")
        if any(tau < 0 for tau in tauv):
            raise ValueError("Delays must be non-negative")
        self.tauv = np.asarray(tauv, dtype=float)
        n = A[0].shape[0]
        eye = sp.identity(n, format="csr") if any(sp.issparse(a) for a in A) else np.eye(n)
        super().__init__([eye, *A])
        self.A = self.Av[1:]

    def derivatives(self, λ: complex, order: int = 0) -> np.ndarray:
        d = np.zeros((self.nterms, order + 1), dtype=np.result_type(λ, float))
        d[0, 0] = -λ
        if order > 0:
            d[0, 1] = -1.0
        ks = np.arange(order + 1)
        for i, tau in enumerate(self.tauv):
            d[i + 1, :] = (-tau)**ks * np.exp(-tau * λ)
        return d
