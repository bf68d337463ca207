"""Feasibility check and similarity score of a contact map matching.

A contact (i, k) of X is preserved under a matching when its partner
nodes (j, l) form a contact of Y with the same sequence orientation.
The score is the number of preserved contacts normalized by the number
of contacts of the sparser graph.
"""

import math
from dataclasses import dataclass

import numpy as np

from contact_match.core.graph import ContactGraph

INFEASIBLE_SCORE = -1.0


@dataclass
class ScoreResult:
    """Result of evaluating a matching."""

    score: float  # Preserved contacts / min(n_edges), unrounded
    common_contacts: int  # Number of preserved contacts
    feasible: bool  # False if a matched contact flips orientation

    @property
    def rounded_score(self) -> float:
        """Score rounded half up to two decimals."""
        return round_score(self.score)


def round_score(score: float) -> float:
    """Round half up to two decimals."""
    return math.floor(100.0 * score + 0.5) / 100.0


def evaluate(
    M: np.ndarray,
    graph_x: ContactGraph,
    graph_y: ContactGraph,
) -> ScoreResult:
    """Score a discrete matching between two contact graphs.

    Every preserved contact is seen from both of its endpoints, so the
    raw count is halved for common_contacts and divided by twice the
    smaller edge count for the score. The first orientation conflict makes the whole
    matching infeasible and evaluation stops there.

    Args:
        M: Binary match matrix, rows indexing graph_x, columns graph_y.
        graph_x: Row graph.
        graph_y: Column graph.

    Returns:
        ScoreResult; score and common_contacts are -1 if infeasible.
    """
    if M.shape != (graph_x.n_nodes, graph_y.n_nodes):
        raise ValueError(
            f"Match matrix shape {M.shape} does not fit graphs of size "
            f"({graph_x.n_nodes}, {graph_y.n_nodes})"
        )

    matched = M > 0
    adj_x = graph_x.adjacency_list
    adj_y = graph_y.adjacency_list

    count = 0
    for i, j in zip(*np.nonzero(matched)):
        nbrs_x = adj_x[i]
        nbrs_y = adj_y[j]
        if len(nbrs_x) == 0 or len(nbrs_y) == 0:
            continue

        # Matched neighbor pairs (k, l)
        kk, ll = np.nonzero(matched[np.ix_(nbrs_x, nbrs_y)])
        if len(kk) == 0:
            continue
        k_before = nbrs_x[kk] < i
        l_before = nbrs_y[ll] < j
        if np.any(k_before != l_before):
            return ScoreResult(
                score=INFEASIBLE_SCORE,
                common_contacts=-1,
                feasible=False,
            )
        count += len(kk)

    min_edges = min(graph_x.n_edges, graph_y.n_edges)
    score = count / (2.0 * min_edges) if min_edges > 0 else 0.0

    return ScoreResult(
        score=score,
        common_contacts=count // 2,
        feasible=True,
    )
