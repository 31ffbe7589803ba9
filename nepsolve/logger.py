# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any, Optional
import logging

import numpy as np

from .utils import check_non_neg

class Logger:
    """
    Progress reporting of the solvers. Messages with a level above ``displaylevel`` are
    dropped, the others are sent to the ``nepsolve`` logging channel at INFO level.
    Messages pushed with ``continues=True`` are collected and emitted as one line together
    with the next message that does not continue.
    """

    #: Highest level of messages that are reported.
    displaylevel: int

    def __init__(self, displaylevel: int = 0, name: str = "nepsolve") -> None:
        self.displaylevel = displaylevel
        self._logger = logging.getLogger(name)
        self._buffer: list[str] = []

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "displaylevel":
            check_non_neg(name, value)
        super().__setattr__(name, value)

    def push_info(self, msg: str, level: int = 1, continues: bool = False) -> None:
        if level > self.displaylevel:
            return
        self._buffer.append(msg)
        if not continues:
            self._logger.info("".join(self._buffer))
            self._buffer.clear()

    def push_iteration_info(
            self,
            iteration: int, *,
            err: Optional[Any] = None,
            λ: Optional[Any] = None,
            conveig: Optional[int] = None,
            level: int = 1,
            continues: bool = False) -> None:
        msg = f"iter {iteration}:"
        if conveig is not None:
            msg += f" conveig={conveig}"
        if err is not None:
            msg += f" err={_format(err)}"
        if λ is not None:
            msg += f" λ={_format(λ)}"
        self.push_info(msg, level=level, continues=continues)

class ErrorLogger(Logger):
    """Logger that additionally keeps the error history, indexed by iteration."""

    #: Errors reported at each iteration.
    errs: dict[int, np.ndarray]

    def __init__(self, displaylevel: int = 0, name: str = "nepsolve") -> None:
        super().__init__(displaylevel, name)
        self.errs = {}

    def push_iteration_info(
            self,
            iteration: int, *,
            err: Optional[Any] = None,
            λ: Optional[Any] = None,
            conveig: Optional[int] = None,
            level: int = 1,
            continues: bool = False) -> None:
        if err is not None:
            self.errs[iteration] = np.atleast_1d(np.asarray(err, dtype=float))
        super().push_iteration_info(iteration, err=err, λ=λ, conveig=conveig,
                                    level=level, continues=continues)

def _format(value: Any) -> str:
    arr = np.asarray(value)
    if arr.ndim == 0:
        return f"{arr.item():.3e}" if not np.iscomplexobj(arr) else f"{arr.item():.6g}"
    return np.array2string(arr, precision=3)
