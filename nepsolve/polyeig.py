# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any
import numpy as np
import scipy.linalg as sla
import scipy.sparse as sp

from .nep import NEP, ProblemKind, SumOfProducts
from .errors import InvalidConfigurationError

def polyeig(nep: NEP, dtype: Any = np.complex128) -> tuple[np.ndarray, np.ndarray]:
    """
    All eigenpairs of a polynomial eigenvalue problem ``sum_i A_i λ^i`` from its companion
    linearization. Infinite eigenvalues of a singular leading coefficient are included.
    Eigenvectors are normalized to unit length.
    """
    if nep.kind is not ProblemKind.POLYNOMIAL or not isinstance(nep, SumOfProducts):
        raise InvalidConfigurationError(
            f"polyeig requires a polynomial eigenvalue problem, got {nep.kind.value}")
    Av = [A.toarray() if sp.issparse(A) else np.asarray(A) for A in nep.Av]
    d, n = len(Av) - 1, nep.size
    if d < 1:
        raise InvalidConfigurationError("polyeig requires a polynomial of degree at least one")

    A = np.zeros((n*d, n*d), dtype=dtype)
    B = np.eye(n*d, dtype=dtype)
    A[:n*(d-1), n:] = np.eye(n*(d-1))
    for i in range(d):
        A[n*(d-1):, n*i:n*(i+1)] = -Av[i]
    B[n*(d-1):, n*(d-1):] = Av[d]

    λ, Z = sla.eig(A, B)
    # all blocks of a companion eigenvector are multiples of v, take the largest one
    blocks = Z.reshape(d, n, n*d)
    pick = np.argmax(np.linalg.norm(blocks, axis=1), axis=0)
    V = blocks[pick, :, np.arange(n*d)].T
    V = V / np.linalg.norm(V, axis=0)
    return λ.astype(dtype), V.astype(dtype)
