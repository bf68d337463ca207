"""Discretization of a continuous match matrix.

Turns the converged softassign matrix into a binary assignment in
which every real row and column holds at most one match.
"""

from enum import Enum

import numpy as np
from scipy.optimize import linear_sum_assignment


class DiscretizationMethod(str, Enum):
    """Strategy for extracting a discrete assignment."""

    GREEDY = "greedy"
    HUNGARIAN = "hungarian"


def discretize_greedy(M: np.ndarray) -> np.ndarray:
    """Greedy per-row selection with column locking.

    Rows are processed in ascending order; each row takes the unused
    column with the largest value, the first such column on ties.
    Earlier rows may take the best column of later rows.

    Args:
        M: Match matrix of shape (n1, n2) with n1 <= n2.

    Returns:
        Binary matrix of shape (n1, n2).
    """
    n1, n2 = M.shape
    result = np.zeros((n1, n2))
    used = np.zeros(n2, dtype=bool)

    for i in range(n1):
        candidates = np.where(used, -np.inf, M[i])
        j = int(np.argmax(candidates))
        if used[j]:
            break
        result[i, j] = 1.0
        used[j] = True

    return result


def discretize_hungarian(M: np.ndarray) -> np.ndarray:
    """Maximum-weight assignment of rows to columns.

    Args:
        M: Match matrix of shape (n1, n2).

    Returns:
        Binary matrix of shape (n1, n2).
    """
    result = np.zeros(M.shape)
    if M.size == 0:
        return result
    rows, cols = linear_sum_assignment(M, maximize=True)
    result[rows, cols] = 1.0
    return result


def discretize(
    M: np.ndarray,
    method: DiscretizationMethod = DiscretizationMethod.GREEDY,
) -> np.ndarray:
    """Discretize a match matrix.

    Args:
        M: Match matrix; a slack row and column, if present, must be
            stripped by the caller.
        method: Greedy (reference behavior) or Hungarian (optimal).

    Returns:
        Binary matrix with the same shape as M.
    """
    method = DiscretizationMethod(method)
    if method is DiscretizationMethod.HUNGARIAN:
        return discretize_hungarian(M)
    return discretize_greedy(M)
