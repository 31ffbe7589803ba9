# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any
import numpy as np
import opt_einsum as oe

from .nep import SumOfProducts, ProblemKind

class ProjectedNEP(SumOfProducts):
    """
    Projection ``W^H M(λ) V`` of a sum of products NEP onto the trial basis V and the test
    basis W. The coefficients are ``W^H A_i V``, the scalar functions are those of the
    original problem. The projected problem reports the kind of the original one.
    """

    #: Problem that is projected.
    orgnep: SumOfProducts

    def __init__(self, orgnep: SumOfProducts) -> None:
        self.orgnep = orgnep
        self._AV = np.zeros((orgnep.nterms, orgnep.size, 0))
        self._set_coefficients([np.zeros((0, 0))] * orgnep.nterms)

    @property
    def kind(self) -> ProblemKind: # type: ignore[override]
        return self.orgnep.kind

    @property
    def size(self) -> int:
        return self._AV.shape[2]

    def derivatives(self, λ: complex, order: int = 0) -> np.ndarray:
        return self.orgnep.derivatives(λ, order)

    def set_projectmatrices(self, W: Any, V: Any) -> None:
        """Recompute the projection for the bases W and V from scratch."""
        if W.shape != V.shape:
            raise ValueError("Trial and test basis must have the same shape")
        self._AV = self.orgnep.apply_coefficients(V)
        self._set_coefficients(list(oe.contract("nk,inl->ikl", np.conj(W), self._AV)))

    def expand_projectmatrices(self, W: Any, V: Any) -> None:
        """
        Update the projection after new columns were appended to the bases W and V. Only the
        new rows and columns of the projected coefficients are computed.
        """
        k0, k = self.size, V.shape[1]
        if W.shape != V.shape or k < k0:
            raise ValueError("Bases must extend the currently projected ones")
        if k == k0:
            return
        AVnew = self.orgnep.apply_coefficients(V[:, k0:])
        self._AV = np.concatenate((self._AV, AVnew), axis=2)
        proj = np.zeros((self.orgnep.nterms, k, k), dtype=np.result_type(self._AV, W))
        proj[:, :k0, :k0] = self._stack
        proj[:, :, k0:] = oe.contract("nk,inl->ikl", np.conj(W), AVnew)
        proj[:, k0:, :k0] = oe.contract("nk,inl->ikl", np.conj(W[:, k0:]), self._AV[:, :, :k0])
        self._set_coefficients(list(proj))
