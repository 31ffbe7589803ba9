# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Sequence
from math import perm
import numpy as np

from .nep import SumOfProducts, ProblemKind

class PEP(SumOfProducts):
    """Polynomial eigenvalue problem ``M(λ) = sum_i A_i λ^i``."""

    kind = ProblemKind.POLYNOMIAL

    def __init__(self, Av: Sequence[Any]) -> None:
        super().__init__(Av)

    @property
    def degree(self) -> int:
        return self.nterms - 1

    def derivatives(self, λ: complex, order: int = 0) -> np.ndarray:
        d = np.zeros((self.nterms, order + 1), dtype=np.result_type(λ, float))
        for i in range(self.nterms):
            for k in range(min(i, order) + 1):
                d[i, k] = perm(i, k) * λ**(i - k)
        return d
