# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .eigresult import EigResult

class NoConvergenceError(Exception):
    """
    Raised when an iteration exhausts its budget before the requested number of eigenpairs
    has converged. The accepted pairs and the last unconverged candidate are kept in ``λ``
    and ``v`` (accepted pairs first), next to the last error estimate.
    """

    #: Accepted eigenvalues followed by the unconverged candidate(s).
    λ: Any
    #: Eigenvectors matching ``λ`` column by column.
    v: Any
    #: Error estimate of the last candidate.
    errmeasure: float
    #: Human readable description.
    msg: str
    #: Full result of the failed run.
    result: "EigResult | None"

    def __init__(self, λ: Any, v: Any, errmeasure: float, msg: str,
                 result: "EigResult | None" = None) -> None:
        super().__init__(msg)
        self.λ = λ
        self.v = v
        self.errmeasure = errmeasure
        self.msg = msg
        self.result = result

class InvalidConfigurationError(ValueError):
    """Raised for inconsistent solver settings, detected before any computation."""

class NumericalBreakdownError(ArithmeticError):
    """Raised when a vector loses (numerically) all of its norm during orthogonalization."""
