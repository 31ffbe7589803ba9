# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Hashable, Any, Self, Optional
from copy import deepcopy
import threading

from .logger import Logger
from .linsolver import LinSolverCreator, FactorizedLinSolver
from .orthogonalization import OrthMethod

class SolverOptions:
    """
    Context manager for the defaults shared by all solvers. Solvers that are not given a
    logger, linear solver creator or orthogonalization method explicitly take them from the
    innermost active options of the current thread.
    """

    key: Hashable

    #: Logger receiving the progress reports.
    logger: Logger
    #: Factory for the linear solvers of M(λ).
    linsolvercreator: LinSolverCreator
    #: Orthogonalization method for growing subspace bases.
    orthmethod: OrthMethod

    def __init__(
            self, *,
            logger: Optional[Logger] = None,
            linsolvercreator: LinSolverCreator = FactorizedLinSolver,
            orthmethod: OrthMethod = OrthMethod.DGKS) -> None:
        self.logger = Logger(0) if logger is None else logger
        self.linsolvercreator = linsolvercreator
        self.orthmethod = deepcopy(orthmethod)
        self.key = threading.get_ident()

    def __enter__(self) -> Self:
        global _opts
        if self.key in _opts:
            self._tmp = _opts[self.key]
        else:
            self._tmp = None
        _opts[self.key] = self
        return self

    def __exit__(self, *_) -> None:
        global _opts
        if self._tmp is not None:
            _opts[self.key] = self._tmp
        else:
            del _opts[self.key]

_opts: dict[Any, SolverOptions] = {}
_default = SolverOptions()

def get_options() -> SolverOptions:
    global _opts
    key = threading.get_ident()
    if key in _opts:
        return _opts[key]
    return _default

def set_options(opts: SolverOptions) -> None:
    global _opts
    _opts[opts.key] = opts
