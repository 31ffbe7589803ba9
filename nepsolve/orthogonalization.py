# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from enum import Enum
from math import sqrt

from .backend import ArrayLike, namespace_of_arrays, eps, shape
from .errors import NumericalBreakdownError

class OrthMethod(Enum):
    CLASSICAL_GRAM_SCHMIDT = "cgs"
    MODIFIED_GRAM_SCHMIDT = "mgs"
    DGKS = "dgks"

#: Relative norm below which DGKS repeats the projection.
DGKS_THRESHOLD = 1 / sqrt(2)

def orthogonalize_and_normalize[T: ArrayLike](
        basis: T,
        vec: T,
        coeffs: T,
        method: OrthMethod = OrthMethod.DGKS) -> float:
    """
    Orthogonalize ``vec`` in place against the orthonormal columns of ``basis`` and normalize
    it. The projection coefficients are written into ``coeffs``, which must have one entry per
    column of ``basis``. Returns the norm of the orthogonalized vector before normalization.
    Raises NumericalBreakdownError if the vector (numerically) lies in the span of the basis.
    """
    xp = namespace_of_arrays(vec)
    nrm0 = float(xp.linalg.vector_norm(vec))
    if shape(basis)[1] > 0:
        match method:
            case OrthMethod.CLASSICAL_GRAM_SCHMIDT:
                _classical(basis, vec, coeffs)
            case OrthMethod.MODIFIED_GRAM_SCHMIDT:
                _modified(basis, vec, coeffs)
            case OrthMethod.DGKS:
                _classical(basis, vec, coeffs)
                if float(xp.linalg.vector_norm(vec)) < DGKS_THRESHOLD * nrm0:
                    corr = xp.conj(basis).T @ vec
                    vec -= basis @ corr
                    coeffs += corr

    nrm = float(xp.linalg.vector_norm(vec))
    if nrm <= 10 * eps(xp, vec.dtype) * nrm0 or nrm == 0.0:
        raise NumericalBreakdownError(
            f"Orthogonalization breakdown: norm dropped from {nrm0:.3e} to {nrm:.3e}")
    vec /= nrm
    return nrm

def _classical[T: ArrayLike](basis: T, vec: T, coeffs: T) -> None:
    xp = namespace_of_arrays(vec)
    coeffs[:] = xp.conj(basis).T @ vec
    vec -= basis @ coeffs

def _modified[T: ArrayLike](basis: T, vec: T, coeffs: T) -> None:
    xp = namespace_of_arrays(vec)
    for i in range(shape(basis)[1]):
        coeffs[i] = xp.sum(xp.conj(basis[:, i]) * vec)
        vec -= coeffs[i] * basis[:, i]
