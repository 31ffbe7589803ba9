# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Sequence
import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

def check_pos(msg: str, value: int | float):
    if value <= 0:
        raise ValueError(f"{msg} must be above zero, got {value}")

def check_non_neg(msg: str, value: int | float):
    if value < 0:
        raise ValueError(f"{msg} must be a positive, got {value}")

def matrix_norm(mat: Any) -> float:
    """Frobenius norm of a dense or sparse matrix."""
    if sp.issparse(mat):
        return float(spla.norm(mat))
    return float(np.linalg.norm(mat))

def jordan_block(value: complex, size: int) -> np.ndarray:
    """``value*I + N`` with ``N`` the nilpotent shift of ones on the first superdiagonal."""
    return value * np.eye(size, dtype=np.result_type(value, float)) + np.eye(size, k=1)

def factorials(n: int) -> np.ndarray:
    return np.cumprod(np.concatenate(([1.0], np.arange(1.0, n))))

def as_columns(vecs: Any) -> tuple[np.ndarray, bool]:
    """Views a vector as a single column matrix. The flag tells if the input was a vector."""
    vecs = np.asarray(vecs)
    if vecs.ndim == 1:
        return vecs[:, np.newaxis], True
    return vecs, False

def stable_argsort(values: Sequence[complex] | np.ndarray, target: complex) -> np.ndarray:
    """Indices ordering ``values`` by distance to ``target``, ties kept in input order."""
    return np.argsort(np.abs(np.asarray(values) - target), kind="stable")
