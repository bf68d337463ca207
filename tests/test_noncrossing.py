from itertools import combinations

import numpy as np

from contact_match.core.noncrossing import (
    is_noncrossing,
    noncrossing_scores,
    project_noncrossing,
)


def _pairs(M):
    return sorted(zip(*map(list, np.nonzero(M))))


def _best_noncrossing_weight(M):
    pairs = _pairs(M)
    for size in range(len(pairs), 0, -1):
        for subset in combinations(pairs, size):
            if all(i1 < i2 and j1 < j2 for (i1, j1), (i2, j2) in zip(subset, subset[1:])):
                return size
    return 0


def test_crossing_match_keeps_heavier_subset():
    # (0, 2) crosses both (1, 0) and (2, 1)
    M = np.array([
        [0, 0, 1],
        [1, 0, 0],
        [0, 1, 0],
    ], dtype=float)

    result = project_noncrossing(M)

    assert _pairs(result) == [(1, 0), (2, 1)]


def test_forward_scores():
    M = np.array([
        [0, 0, 1],
        [1, 0, 0],
        [0, 1, 0],
    ], dtype=float)

    S = noncrossing_scores(M)

    assert np.array_equal(S, [[0, 0, 1], [1, 0, 0], [0, 2, 1]])


def test_reversed_match_keeps_single_pair():
    M = np.fliplr(np.eye(3))

    result = project_noncrossing(M)

    assert result.sum() == 1
    assert np.all(result <= M)


def test_empty_rows_do_not_block_chain():
    M = np.array([
        [0, 1, 0],
        [0, 0, 1],
        [1, 0, 0],
    ], dtype=float)

    result = project_noncrossing(M)

    assert _pairs(result) == [(0, 1), (1, 2)]


def test_chain_skips_unmatched_rows():
    M = np.zeros((4, 5))
    M[0, 0] = M[2, 3] = 1.0

    result = project_noncrossing(M)

    assert _pairs(result) == [(0, 0), (2, 3)]


def test_identity_is_kept():
    M = np.eye(4, 6)

    assert np.array_equal(project_noncrossing(M), M)


def test_output_is_noncrossing_subset():
    rng = np.random.default_rng(3)
    for _ in range(20):
        perm = rng.permutation(8)[:5]
        M = np.zeros((5, 8))
        M[np.arange(5), perm] = 1.0

        result = project_noncrossing(M)

        assert is_noncrossing(result)
        assert np.all(result <= M)
        assert result.sum() == _best_noncrossing_weight(M)


def test_is_noncrossing():
    assert is_noncrossing(np.eye(3))
    assert not is_noncrossing(np.fliplr(np.eye(3)))
    assert is_noncrossing(np.zeros((2, 2)))


def test_empty_matrices():
    assert project_noncrossing(np.zeros((0, 4))).shape == (0, 4)
    assert project_noncrossing(np.zeros((0, 0))).shape == (0, 0)
