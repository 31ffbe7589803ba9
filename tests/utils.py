import numpy as np
import array_api_compat as api

backends = [api.array_namespace(np.zeros(1))]

#import cupy as cp
#backends.append(api.array_namespace(cp.zeros(1)))

def quadratic_coefficients():
    return [np.array([[1.0, 3.0], [5.0, 6.0]]),
            np.array([[3.0, 4.0], [6.0, 6.0]]),
            np.eye(2)]

def random_pep_coefficients(n: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    return [rng.standard_normal((n, n)) for _ in range(3)]

def random_dep_coefficients(n: int, seed: int = 0):
    rng = np.random.default_rng(seed)
    return [rng.standard_normal((n, n)) / np.sqrt(n) for _ in range(2)]

def residual(nep, λ, v) -> float:
    return float(np.linalg.norm(nep.compute_Mlincomb(λ, v)) / np.linalg.norm(v))

def inside_rectangle(λ, lower: complex, upper: complex):
    λ = np.asarray(λ)
    return (λ.real > lower.real) & (λ.real < upper.real) & \
        (λ.imag > lower.imag) & (λ.imag < upper.imag)
