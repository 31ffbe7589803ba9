# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from dataclasses import dataclass, field
from enum import Enum
import numpy as np

from .errors import NoConvergenceError

class ResultStatus(Enum):
    CONVERGED = "converged"
    PARTIAL = "partial"
    FAILED = "failed"

@dataclass(kw_only=True)
class EigResult:
    """
    Outcome of an eigenvalue iteration. Accepted pairs are always returned, the last
    unconverged candidates only if the iteration did not finish.
    """

    #: Whether all requested pairs converged, some of them or none.
    status: ResultStatus
    #: Accepted eigenvalues.
    values: np.ndarray
    #: Accepted eigenvectors, one per column.
    vectors: np.ndarray
    #: Unconverged candidate eigenvalues.
    candidate_values: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=complex))
    #: Unconverged candidate eigenvectors, one per column.
    candidate_vectors: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=complex))
    #: Error estimate of the last computed pair.
    errmeasure: float = float("nan")
    #: Number of iterations performed.
    iterations: int = 0
    #: Description of the outcome.
    message: str = ""

    @property
    def converged(self) -> bool:
        return self.status is ResultStatus.CONVERGED

    def unwrap(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Eigenvalues and eigenvectors of a converged run. Raises NoConvergenceError with all
        available pairs otherwise.
        """
        if not self.converged:
            λ, v = self.best_available()
            raise NoConvergenceError(λ, v, self.errmeasure, self.message, self)
        return self.values, self.vectors

    def best_available(self) -> tuple[np.ndarray, np.ndarray]:
        """Accepted pairs followed by the unconverged candidates."""
        if len(self.candidate_values) == 0:
            return self.values, self.vectors
        if len(self.values) == 0:
            return self.candidate_values, self.candidate_vectors
        return (np.concatenate((self.values, self.candidate_values)),
                np.concatenate((self.vectors, self.candidate_vectors), axis=1))

def partial_status(count: int) -> ResultStatus:
    return ResultStatus.PARTIAL if count > 0 else ResultStatus.FAILED
