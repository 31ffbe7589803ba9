# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .backend import ArrayLike, ArrayNamespace, DType, norm
from .orthogonalization import OrthMethod, orthogonalize_and_normalize

class SubspaceBasis[T: ArrayLike]:
    """
    Orthonormal basis that grows one column at a time inside a preallocated buffer.
    Only the first ``width`` columns of ``memory`` are part of the basis.
    """

    #: Preallocated storage with one column per possible basis vector.
    memory: T
    #: Number of columns currently in use.
    width: int

    def __init__(self, xp: ArrayNamespace[T], size: int, capacity: int, dtype: DType) -> None:
        self.memory = xp.zeros((size, capacity), dtype=dtype)
        self._coeffs = xp.zeros(capacity, dtype=dtype)
        self.width = 0

    @property
    def capacity(self) -> int:
        return self.memory.shape[1]

    @property
    def basis(self) -> T:
        return self.memory[:, :self.width]

    def push(self, vec: T) -> None:
        """Store a normalized copy of ``vec`` without orthogonalization."""
        self._check_capacity()
        self.memory[:, self.width] = vec / norm(vec)
        self.width += 1

    def append(self, vec: T, method: OrthMethod = OrthMethod.DGKS) -> float:
        """
        Orthogonalize ``vec`` against the basis and store it as the next column. The column
        is not committed if the orthogonalization breaks down.
        """
        self._check_capacity()
        col = self.memory[:, self.width]
        col[:] = vec
        nrm = orthogonalize_and_normalize(self.basis, col, self._coeffs[:self.width], method)
        self.width += 1
        return nrm

    def _check_capacity(self) -> None:
        if self.width >= self.capacity:
            raise IndexError(f"Subspace basis is full ({self.capacity} columns)")
