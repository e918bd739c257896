# src/ranchgrowth/modeling/linalg.py
from __future__ import annotations
import numpy as np

from .types import SingularMatrixError


def gaussian_elimination(matrix: np.ndarray, *, strict: bool = False) -> np.ndarray:
    """
    Solve an n x (n+1) augmented system with partial pivoting.

    The matrix is modified in place (rows swapped and reduced); pass a copy if
    the caller still needs it.

    A zero pivot is not special-cased by default: the division yields inf/NaN
    which flows into the solution. With strict=True a SingularMatrixError is
    raised instead.
    """
    m = matrix
    if m.ndim != 2 or m.shape[1] != m.shape[0] + 1:
        raise ValueError(f"Expected an n x (n+1) augmented matrix, got shape {m.shape}")
    if not np.issubdtype(m.dtype, np.floating):
        raise TypeError(f"Augmented matrix must be floating point, got {m.dtype}")
    n = m.shape[0]

    with np.errstate(divide="ignore", invalid="ignore"):
        # forward elimination
        for i in range(n):
            max_row = i
            for k in range(i + 1, n):
                if abs(m[k, i]) > abs(m[max_row, i]):
                    max_row = k
            if max_row != i:
                m[[i, max_row]] = m[[max_row, i]]

            if strict and m[i, i] == 0.0:
                raise SingularMatrixError(f"Zero pivot in column {i}")

            for k in range(i + 1, n):
                factor = m[k, i] / m[i, i]
                m[k, i:] -= factor * m[i, i:]

        # back substitution
        solution = np.empty(n, dtype=float)
        for i in range(n - 1, -1, -1):
            acc = m[i, n]
            for j in range(i + 1, n):
                acc -= m[i, j] * solution[j]
            solution[i] = acc / m[i, i]

    return solution
