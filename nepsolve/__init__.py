# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from .nepsolve import NEPSolve
from .nep import NEP, SumOfProducts, ProblemKind
from .pep import PEP
from .dep import DEP
from .spmf import SPMF
from .projectednep import ProjectedNEP
from .errors import NoConvergenceError, InvalidConfigurationError, NumericalBreakdownError
from .eigresult import EigResult, ResultStatus
from .options import SolverOptions, set_options, get_options
from .logger import Logger, ErrorLogger
from .polyeig import polyeig
from .jacobidavidson import JacobiDavidson, jd
from .nleigs import NLEIGS, nleigs
from .innersolver import InnerSolver, inner_solve
from .matrixintegrator import MatrixTrapezoidal, MatrixGauss, integrate_interval

__all__ = [
    "NEPSolve",
    "NEP", "SumOfProducts", "ProblemKind", "PEP", "DEP", "SPMF", "ProjectedNEP",
    "NoConvergenceError", "InvalidConfigurationError", "NumericalBreakdownError",
    "EigResult", "ResultStatus",
    "SolverOptions", "set_options", "get_options", "Logger", "ErrorLogger",
    "polyeig", "JacobiDavidson", "jd", "NLEIGS", "nleigs", "InnerSolver", "inner_solve",
    "MatrixTrapezoidal", "MatrixGauss", "integrate_interval",
]
