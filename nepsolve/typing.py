# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

"""typing has all classes used in the external API of nepsolve."""

from .nep import NEP, SumOfProducts, ProblemKind
from .pep import PEP
from .dep import DEP
from .spmf import SPMF
from .projectednep import ProjectedNEP

from .eigresult import EigResult, ResultStatus
from .nleigs import NLEIGSResult
from .innersolver import InnerSolver, InnerSolution
from .errmeasure import ErrMeasure, DefaultErrMeasure, BackwardErrMeasure
from .linsolver import LinSolver, LinSolverCreator, FactorizedLinSolver, BackslashLinSolver
from .orthogonalization import OrthMethod
from .matrixintegrator import MatrixIntegrator, MatrixTrapezoidal, MatrixGauss

from .augnewton import AugNewton
from .iar import IAR
from .iarchebyshev import IARChebyshev
from .sgiter import SGIter
from .contourbeyn import ContourBeyn
from .nleigs import NLEIGS
from .jacobidavidson import JacobiDavidson, ProjectionType

from .options import SolverOptions
from .logger import Logger, ErrorLogger

from .nepsolve import NEPSolve
