import math
from numbers import Real
from typing import Any
import numpy as np
from scipy.sparse import csr_matrix


def _validate_square_matrix(M: np.ndarray) -> None:
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        raise TypeError("Matrix must be square (n x n).")


def _make_symmetric_csr(A: csr_matrix, option: str = "max") -> csr_matrix:
    if option == "max":
        return A.maximum(A.T)
    if option == "min":
        return A.minimum(A.T)
    if option == "average":
        return (A + A.T) * 0.5
    raise ValueError("Unsupported option for symmetrization.")


def _edge_weight(edge, weight_attribute: str, default: float = 1.0) -> float:
    """Numeric weight of an edge; a missing attribute counts as ``default``."""
    value: Any = edge.get(weight_attribute, None)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (Real, np.integer, np.floating)):
        raise TypeError(
            f"Edge {edge.id!r} has non-numeric weight {value!r} "
            f"in attribute '{weight_attribute}'.")
    weight = float(value)
    if math.isnan(weight):
        raise ValueError(f"Edge {edge.id!r} has NaN weight in attribute '{weight_attribute}'.")
    return weight
