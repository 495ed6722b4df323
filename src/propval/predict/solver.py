from __future__ import annotations

import numpy as np

from ..errors import SingularMatrixError, TrainingComputationError

DEFAULT_PIVOT_EPSILON = 1e-10


def normal_equation(X: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Form ``A = X'^T X'`` and ``b = X'^T y`` where ``X'`` is ``X`` with a leading bias column."""
    n = X.shape[0]
    Xb = np.hstack([np.ones((n, 1), dtype=np.float64), X])
    return Xb.T @ Xb, Xb.T @ y


def invert_matrix(A: np.ndarray, eps: float = DEFAULT_PIVOT_EPSILON) -> np.ndarray:
    """Invert a square matrix by Gauss-Jordan elimination with partial pivoting.

    Works on a single flat row-major buffer of size ``m * 2m`` holding ``[A | I]``.
    Raises SingularMatrixError when the best available pivot is below ``eps``
    relative to the largest entry of ``A``.
    """
    m = A.shape[0]
    if A.shape != (m, m):
        raise ValueError(f"expected a square matrix, got shape {A.shape}")
    threshold = eps * max(1.0, float(np.abs(A).max()))
    stride = 2 * m
    buf = np.zeros(m * stride, dtype=np.float64)
    for i in range(m):
        buf[i * stride : i * stride + m] = A[i]
        buf[i * stride + m + i] = 1.0

    def row(i: int) -> slice:
        return slice(i * stride, (i + 1) * stride)

    for col in range(m):
        # largest magnitude entry in this column among the remaining rows
        candidates = np.abs(buf[col * stride + col : m * stride : stride])
        pivot_row = col + int(np.argmax(candidates))
        if pivot_row != col:
            tmp = buf[row(col)].copy()
            buf[row(col)] = buf[row(pivot_row)]
            buf[row(pivot_row)] = tmp

        pivot = buf[col * stride + col]
        if not abs(pivot) >= threshold:
            raise SingularMatrixError(col, float(pivot))
        buf[row(col)] /= pivot

        pivot_vals = buf[row(col)]
        for r in range(m):
            if r == col:
                continue
            factor = buf[r * stride + col]
            if factor != 0.0:
                buf[row(r)] -= factor * pivot_vals

    return buf.reshape(m, stride)[:, m:].copy()


def solve_normal_equation(
    X: np.ndarray, y: np.ndarray, eps: float = DEFAULT_PIVOT_EPSILON
) -> tuple[float, np.ndarray]:
    """Least-squares fit of ``y`` on ``X`` with an intercept.

    Returns ``(intercept, coefficients)`` with coefficients aligned to the
    columns of ``X``.
    """
    if X.ndim != 2 or X.shape[0] == 0 or X.shape[1] == 0:
        raise TrainingComputationError(f"design matrix must be non-empty 2-D, got {X.shape}")
    if X.shape[0] != y.shape[0]:
        raise TrainingComputationError(
            f"design matrix has {X.shape[0]} rows but target has {y.shape[0]}"
        )
    A, b = normal_equation(X, y)
    beta = invert_matrix(A, eps=eps) @ b
    if not np.all(np.isfinite(beta)):
        raise TrainingComputationError("solver produced non-finite coefficients")
    return float(beta[0]), beta[1:].copy()
