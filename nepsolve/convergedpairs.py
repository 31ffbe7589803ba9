# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

import numpy as np

from .backend import ArrayLike, ArrayNamespace, DType, eps

class ConvergedPairs[T: ArrayLike]:
    """
    Accepted eigenpairs of a deflating iteration. A pair is accepted if its error is below the
    tolerance and its eigenvalue is relatively separated from all accepted ones by more than
    the fourth root of the machine epsilon.
    """

    #: Accepted eigenvalues in the first ``count`` entries.
    values: T
    #: Accepted eigenvectors in the first ``count`` columns.
    vectors: T
    #: Number of accepted pairs.
    count: int
    #: Relative distance an eigenvalue needs to all accepted ones.
    threshold: float

    def __init__(self, xp: ArrayNamespace[T], size: int, capacity: int, dtype: DType) -> None:
        self._xp = xp
        self.values = xp.zeros(capacity, dtype=dtype)
        self.vectors = xp.zeros((size, capacity), dtype=dtype)
        self.count = 0
        self.threshold = eps(xp, dtype)**0.25

    @property
    def capacity(self) -> int:
        return self.values.shape[0]

    @property
    def full(self) -> bool:
        return self.count >= self.capacity

    @property
    def accepted_values(self) -> T:
        return self.values[:self.count]

    @property
    def accepted_vectors(self) -> T:
        return self.vectors[:, :self.count]

    def is_separated(self, λ: complex) -> bool:
        xp = self._xp
        if self.count == 0:
            return True
        accepted = self.accepted_values
        # accepted eigenvalue zero gives inf (separated) or nan (same value, not separated)
        with np.errstate(divide="ignore", invalid="ignore"):
            dist = xp.abs(λ - accepted) / xp.abs(accepted)
        return bool(xp.all(dist > self.threshold))

    def update(self, λ: complex, vec: T, err: float, tol: float) -> bool:
        """Accept the pair if it is converged and not a copy of an accepted one."""
        if self.full or not err < tol or not self.is_separated(λ):
            return False
        self.values[self.count] = λ
        self.vectors[:, self.count] = vec
        self.count += 1
        return True
