# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Callable, Literal, Optional, Protocol, Sequence
from abc import ABC, abstractmethod
from dataclasses import dataclass
import numpy as np
from numpy.polynomial.legendre import leggauss
from joblib import Parallel, delayed

from .errors import InvalidConfigurationError
from .logger import Logger
from .options import get_options
from .utils import check_pos

type MatrixFunction = Callable[[float], Any]
type ScalarFunction = Callable[[float], complex]

class MatrixIntegrator(Protocol):
    """
    Protocol for the quadrature of matrix valued functions with scalar weights, as needed by
    contour integral methods.
    """

    def integrate_interval(
            self,
            dtype: Any,
            f: MatrixFunction,
            gv: Sequence[ScalarFunction],
            a: float,
            b: float,
            N: int,
            logger: Optional[Logger] = None) -> np.ndarray:
        """
        Approximate the integrals of ``f(t)*g(t)`` over ``[a,b]`` with ``N`` quadrature points
        for every ``g`` in ``gv``. The result has the shape of ``f(t)`` with one trailing
        axis of length ``len(gv)``, the j-th slice holding the integral with ``gv[j]``.
        """
        ...

@dataclass
class QuadratureRule(ABC):
    """Matrix integrator defined by a set of quadrature nodes and weights."""

    #: Number of parallel jobs evaluating ``f`` at the nodes, 1 evaluates sequentially.
    #: Negative values count back from the number of CPUs as in joblib.
    n_jobs: int = 1

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "n_jobs" and value == 0:
            raise ValueError("n_jobs must not be zero")
        super().__setattr__(name, value)

    @abstractmethod
    def nodes(self, a: float, b: float, N: int) -> tuple[np.ndarray, np.ndarray]:
        """Quadrature nodes and weights on ``[a,b]``."""
        ...

    def integrate_interval(
            self,
            dtype: Any,
            f: MatrixFunction,
            gv: Sequence[ScalarFunction],
            a: float,
            b: float,
            N: int,
            logger: Optional[Logger] = None) -> np.ndarray:
        check_pos("N", N)
        logger = get_options().logger if logger is None else logger
        name = type(self).__name__
        t, w = self.nodes(a, b, N)

        logger.push_info(f"{name}: computing G", continues=True)
        columns = []
        for g in gv:
            logger.push_info(".", continues=True)
            logger.push_info(f"t={t}", level=2, continues=True)
            columns.append(np.asarray([g(ti) for ti in t]))
        logger.push_info(".", continues=False)
        G = np.zeros((N, len(gv)), dtype=np.result_type(dtype, *columns))
        for j, column in enumerate(columns):
            G[:, j] = column
        G *= w[:, np.newaxis]

        # complex samples promote a real dtype on both paths
        logger.push_info(f"{name}: summing terms", continues=True)
        if self.n_jobs == 1:
            S: Optional[np.ndarray] = None
            for i, ti in enumerate(t):
                logger.push_info(".", continues=True)
                term = np.asarray(f(ti))[..., np.newaxis] * G[i]
                S = term if S is None else S + term
        else:
            values = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(f)(ti) for ti in t)
            S = np.tensordot(np.asarray(values), G, axes=([0], [0]))
        logger.push_info("")
        return S.astype(np.result_type(dtype, S), copy=False) # type: ignore

@dataclass
class MatrixTrapezoidal(QuadratureRule):
    """
    Trapezoidal rule for periodic integrands, N equidistant nodes ``a + i*h`` with
    ``h = (b-a)/N``. The node ``b`` coincides with ``a`` for periodic functions and is left out.
    """

    def nodes(self, a: float, b: float, N: int) -> tuple[np.ndarray, np.ndarray]:
        h = (b - a) / N
        return a + h * np.arange(N), np.full(N, h)

@dataclass
class MatrixGauss(QuadratureRule):
    """Gauss-Legendre rule with N nodes."""

    def nodes(self, a: float, b: float, N: int) -> tuple[np.ndarray, np.ndarray]:
        x, w = leggauss(N)
        return a + (x + 1) / 2 * (b - a), w * (b - a) / 2

type RuleKind = Literal["trapezoidal", "gauss"]

_rules: dict[str, type[QuadratureRule]] = {
    "trapezoidal": MatrixTrapezoidal,
    "gauss": MatrixGauss,
}

def integrator(rule: MatrixIntegrator | RuleKind) -> MatrixIntegrator:
    if isinstance(rule, str):
        if rule not in _rules:
            raise InvalidConfigurationError(
                f"Unknown quadrature rule {rule!r}, expected one of {sorted(_rules)}")
        return _rules[rule]()
    return rule

def integrate_interval(
        rule: MatrixIntegrator | RuleKind,
        dtype: Any,
        f: MatrixFunction,
        gv: Sequence[ScalarFunction],
        a: float,
        b: float,
        N: int,
        logger: Optional[Logger] = None) -> np.ndarray:
    """Integrate with the given rule, see ``MatrixIntegrator.integrate_interval``."""
    return integrator(rule).integrate_interval(dtype, f, gv, a, b, N, logger)
