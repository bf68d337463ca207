"""Softassign relaxation for contact map matching.

Implements the deterministic annealing ("softassign") stage of the
contact map overlap solver. A continuous match matrix between the nodes
of two contact graphs is driven toward a near-permutation by three
nested loops:

    A loop: annealing, b = b0, b0*br, ... while b < bf
    B loop: assignment updates, M[i,j] = exp(b * Q[i,j])
    C loop: Sinkhorn row/column normalization

Parameters follow Gold and Rangarajan; b is the inverse temperature.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from contact_match.core.graph import ContactGraph

LOGGER = logging.getLogger(__name__)

# Initial value of every match variable, slack row/column included
INITIAL_MATCH_VALUE = 0.1

# Penalty on the difference of scaled sequence separations
SEPARATION_PENALTY = 0.1


@dataclass(frozen=True)
class SoftassignParams:
    """Tunables of the softassign relaxation.

    Attributes:
        b0: Initial inverse temperature, typically within (0, 2].
        bf: Final inverse temperature, typically within (5, 20].
        br: Growth factor of b per annealing step, typically [1.075, 3.0].
        i0: Maximum assignment (B loop) iterations per annealing step.
        i1: Maximum Sinkhorn (C loop) iterations per assignment iteration.
        eps0: Convergence threshold of the B loop.
        eps1: Convergence threshold of the C loop.
    """

    b0: float = 0.5
    bf: float = 10.0
    br: float = 1.075
    i0: int = 4
    i1: int = 30
    eps0: float = 0.5
    eps1: float = 0.05

    def __post_init__(self):
        if self.b0 <= 0:
            raise ValueError(f"b0 must be positive, got {self.b0}")
        if self.bf <= self.b0:
            raise ValueError(f"bf ({self.bf}) must exceed b0 ({self.b0})")
        if self.br <= 1.0:
            raise ValueError(f"br must be greater than 1, got {self.br}")
        if self.i0 < 1 or self.i1 < 1:
            raise ValueError(
                f"Iteration limits must be at least 1, got i0={self.i0}, i1={self.i1}"
            )
        if self.eps0 < 0 or self.eps1 < 0:
            raise ValueError("Convergence thresholds must be non-negative")

    def annealing_schedule(self) -> list[float]:
        """Values of b visited by the annealing loop, in order."""
        schedule = []
        b = self.b0
        while b < self.bf:
            schedule.append(b)
            b *= self.br
        return schedule

    def annealing_steps(self) -> int:
        """Number of passes of the annealing loop."""
        return len(self.annealing_schedule())

    def max_annealing_steps(self) -> int:
        """Upper bound ceil(log(bf/b0) / log(br)) on annealing passes."""
        return math.ceil(math.log(self.bf / self.b0) / math.log(self.br))


@dataclass
class AnnealingState:
    """Transient optimization state of one softassign run."""

    b: float
    n_annealing_steps: int = 0
    n_iterations: int = 0
    err0: float = float("inf")
    err1: float = float("inf")


def sinkhorn_step(M: np.ndarray) -> None:
    """Normalize rows, then columns, of M in place.

    Rows or columns summing to zero are left unchanged.
    """
    row_sums = M.sum(axis=1)
    nonzero = row_sums != 0
    M[nonzero] /= row_sums[nonzero, None]

    col_sums = M.sum(axis=0)
    nonzero = col_sums != 0
    M[:, nonzero] /= col_sums[nonzero]


class MatchEngine:
    """Softassign solver for the continuous contact map matching problem."""

    def __init__(self, params: Optional[SoftassignParams] = None):
        """Initialize the engine.

        Args:
            params: Softassign tunables; defaults apply when omitted.
        """
        self.params = params or SoftassignParams()

    def match(
        self,
        graph_x: ContactGraph,
        graph_y: ContactGraph,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> tuple[np.ndarray, AnnealingState]:
        """Relax the matching problem between two contact graphs.

        graph_x indexes the rows and must not have more nodes than
        graph_y, which indexes the columns.

        Args:
            graph_x: Row graph (the smaller one).
            graph_y: Column graph.
            progress_callback: Optional callback(step, total) per annealing step.

        Returns:
            Tuple of (match matrix with slack row and column, final state).
        """
        if graph_x.n_nodes > graph_y.n_nodes:
            raise ValueError(
                f"Row graph has more nodes ({graph_x.n_nodes}) than "
                f"column graph ({graph_y.n_nodes})"
            )

        params = self.params
        n1 = graph_x.n_nodes
        n2 = graph_y.n_nodes

        M = np.full((n1 + 1, n2 + 1), INITIAL_MATCH_VALUE)
        M0 = np.empty_like(M)
        M1 = np.empty_like(M)
        Q = np.zeros((n1, n2))

        # Compensates for size asymmetry in the separation comparison
        r = n2 / n1 if n1 > 0 else 1.0
        compat = _CompatibilityTerms(graph_x, graph_y, r)

        state = AnnealingState(b=params.b0)
        total_steps = params.annealing_steps()

        # A loop
        while state.b < params.bf:

            # B loop
            for _ in range(params.i0):
                state.n_iterations += 1
                np.copyto(M0, M)

                compat.compute(M0, out=Q)
                np.exp(state.b * Q, out=M[:n1, :n2])

                # C loop
                for _ in range(params.i1):
                    np.copyto(M1, M)
                    sinkhorn_step(M)
                    state.err1 = float(np.abs(M - M1).sum())
                    if state.err1 < params.eps1:
                        break

                state.err0 = float(np.abs(M[:n1, :n2] - M0[:n1, :n2]).sum())
                if state.err0 < params.eps0:
                    break

            LOGGER.debug(
                "annealing step %d/%d: b=%.4f err0=%.4g err1=%.4g",
                state.n_annealing_steps + 1,
                total_steps,
                state.b,
                state.err0,
                state.err1,
            )

            state.b *= params.br
            state.n_annealing_steps += 1

            if progress_callback:
                progress_callback(state.n_annealing_steps, total_steps)

        return M, state


class _CompatibilityTerms:
    """Compatibility coefficients Q[i,j] = sum_{k,l} w(i,j,k,l) * M0[k,l].

    The sum runs over neighbors k of i in X and l of j in Y such that
    (k, l) lies on the same side of (i, j) in both sequences, with
    w = 1 / (1 + 0.1 * |r*|i-k| - |j-l||).
    """

    def __init__(self, graph_x: ContactGraph, graph_y: ContactGraph, r: float):
        self.n2 = graph_y.n_nodes
        self.r = r
        self.neighbors_x = graph_x.adjacency_list

        # Every contact of Y in both orientations
        self.j_idx, self.l_idx = graph_y.directed_edges()
        self.d2 = np.abs(self.j_idx - self.l_idx)
        self.after_y = self.l_idx > self.j_idx

    def compute(self, M0: np.ndarray, out: np.ndarray) -> np.ndarray:
        """Fill out (n1, n2) with coefficients computed from M0."""
        out.fill(0.0)
        if len(self.j_idx) == 0:
            return out

        for i, k in enumerate(self.neighbors_x):
            if len(k) == 0:
                continue
            d1 = np.abs(i - k)
            after_x = k > i

            # (deg_x(i), n_directed_edges_y)
            same_side = after_x[:, None] == self.after_y[None, :]
            w = 1.0 / (
                1.0 + SEPARATION_PENALTY * np.abs(self.r * d1[:, None] - self.d2[None, :])
            )
            contrib = np.where(same_side, w * M0[k[:, None], self.l_idx[None, :]], 0.0)

            out[i] = np.bincount(
                self.j_idx, weights=contrib.sum(axis=0), minlength=self.n2
            )

        return out
