"""Projection of a discrete matching onto non-crossing matchings.

A matching is non-crossing when, for any two selected pairs (i1, j1)
and (i2, j2) with i1 < i2, also j1 < j2. The best-scoring non-crossing
subset is found by dynamic programming over the match matrix.
"""

import numpy as np


def noncrossing_scores(M: np.ndarray) -> np.ndarray:
    """Forward pass of the non-crossing DP.

    S[i, j] is the best weight of a non-crossing chain ending at (i, j):
    S[i, j] = M[i, j] + max(sOpt[0..j-1]), where sOpt[j] is the best
    chain ending in column j over all rows processed so far.

    Args:
        M: Match matrix of shape (n1, n2).

    Returns:
        Score matrix S of shape (n1, n2).
    """
    n1, n2 = M.shape
    S = np.zeros((n1, n2))
    s_opt = np.zeros(n2)
    if n2 == 0:
        return S

    for i in range(n1):
        S[i, 0] = M[i, 0]
        S[i, 1:] = M[i, 1:] + np.maximum.accumulate(s_opt[:-1])
        np.maximum(s_opt, S[i], out=s_opt)

    return S


def project_noncrossing(M: np.ndarray) -> np.ndarray:
    """Extract the maximum-weight non-crossing subset of a match matrix.

    The chain ends at the selected cell with the highest score S. Each
    step backtracks to a selected cell above and to the left whose score
    equals the current score minus the current weight.
    Ties go to the latest cell in row-major order.

    Args:
        M: Non-negative match matrix of shape (n1, n2), usually binary.

    Returns:
        New binary matrix holding only the non-crossing subset.
    """
    n1, n2 = M.shape
    result = np.zeros((n1, n2))
    selected = M > 0
    if not selected.any():
        return result

    S = noncrossing_scores(M)

    # Last occurrence of the best chain end
    scores = np.where(selected, S, -np.inf).ravel()
    flat = scores.size - 1 - int(np.argmax(scores[::-1]))
    i, j = np.unravel_index(flat, (n1, n2))

    while True:
        result[i, j] = 1.0
        target = S[i, j] - M[i, j]
        if target <= 0:
            break
        rows, cols = np.nonzero(selected[:i, :j] & np.isclose(S[:i, :j], target))
        if len(rows) == 0:
            break
        i, j = rows[-1], cols[-1]

    return result


def is_noncrossing(M: np.ndarray) -> bool:
    """Check that selected pairs are strictly increasing in both indices."""
    rows, cols = np.nonzero(M > 0)
    order = np.argsort(rows, kind="stable")
    rows, cols = rows[order], cols[order]
    return bool(np.all(np.diff(rows) > 0) and np.all(np.diff(cols) > 0))
