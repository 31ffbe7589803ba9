# Copyright© 2025-2026 Gesellschaft zur Förderung der angewandten Forschung e.V.
# acting on behalf of its Fraunhofer Institut für Graphische Datenverarbeitung.
# Licensed under the EUPL. See LICENSE.txt.

from typing import Any
import array_api_compat as api

from .array_namespace import ArrayNamespace, ArrayLike, Device, DType

def get_namespace(obj: Any) -> ArrayNamespace:
    if not api.is_array_api_obj(obj):
        try:
            obj = obj.zeros(1)
        except AttributeError:
            raise TypeError("Provided object is not a recognized array or namespace.")
    return api.array_namespace(obj) # type: ignore

def namespace_of_arrays[T: ArrayLike](*arrays: T) -> ArrayNamespace[T]:
    return api.array_namespace(*arrays) # type: ignore

def eps(xp: ArrayNamespace, dtype: DType) -> float:
    """Machine epsilon of the real type underlying ``dtype``."""
    return float(xp.finfo(dtype).eps)

def norm(array: ArrayLike) -> float:
    xp = namespace_of_arrays(array)
    return float(xp.linalg.vector_norm(array))

def shape(array: ArrayLike) -> tuple[int, ...]:
    shp = array.shape
    if any(s is None for s in shp):
        raise ValueError("Array shape contains None dimension(s).")
    return shp  # type: ignore
