# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Sequence
import numpy as np

from .nep import SumOfProducts, ProblemKind
from .utils import jordan_block, factorials

type MatrixFunction = Callable[[np.ndarray], np.ndarray]

class SPMF(SumOfProducts):
    """
    Sum of products of matrices and functions, ``M(λ) = sum_i A_i f_i(λ)``. The functions
    are given as matrix functions, for example ``scipy.linalg.expm``, so that derivatives can
    be read from the first row of ``f_i`` applied to a Jordan block. The matrix functions must
    handle defective matrices, Schur-Parlett based ``funm`` does not.
    """

    #: Matrix functions f_i.
    fv: list[MatrixFunction]

    def __init__(
            self,
            Av: Sequence[Any],
            fv: Sequence[MatrixFunction],
            kind: ProblemKind = ProblemKind.SPMF) -> None:
        if len(Av) != len(fv):
            raise ValueError("One function per coefficient matrix is required")
        super().__init__(Av)
        self.fv = list(fv)
        self.kind = kind

    def derivatives(self, λ: complex, order: int = 0) -> np.ndarray:
        block = jordan_block(λ, order + 1)
        scale = factorials(order + 1)
        d = np.zeros((self.nterms, order + 1), dtype=complex)
        for i, f in enumerate(self.fv):
            d[i, :] = np.asarray(f(block))[0, :] * scale
        return d
