"""Batch matching engine for multiple contact graphs.

Provides all-vs-all and all-vs-reference contact map overlap runs with
optional process-level parallelism and result aggregation.
"""

import logging
from itertools import combinations
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from contact_match.core.discretize import DiscretizationMethod
from contact_match.core.engine import SoftassignParams
from contact_match.core.graph import ContactGraph
from contact_match.core.matcher import ContactMapMatcher, MatchResult
from contact_match.io.graph_io import load_contact_graph

LOGGER = logging.getLogger(__name__)


class BatchMatcher:
    """Match multiple contact graphs in batch mode."""

    def __init__(
        self,
        graphs: Optional[list[ContactGraph]] = None,
        reference: Optional[ContactGraph] = None,
        params: Optional[SoftassignParams] = None,
        discretization: DiscretizationMethod = DiscretizationMethod.GREEDY,
    ):
        """Initialize the batch matcher.

        Args:
            graphs: List of graphs to compare.
            reference: Optional reference graph for all-vs-reference mode.
            params: Softassign tunables shared by every run.
            discretization: Discretization strategy shared by every run.
        """
        self.graphs = []
        self.reference = reference
        for graph in graphs or []:
            self.add_graph(graph)
        self.matcher = ContactMapMatcher(params=params, discretization=discretization)

    def add_graph(self, graph: ContactGraph) -> None:
        """Add a graph to the comparison set.

        Raises:
            ValueError: If a graph with the same name was already added.
        """
        if any(g.name == graph.name for g in self.graphs):
            raise ValueError(f"Duplicate graph name: {graph.name}")
        self.graphs.append(graph)

    def add_graphs_from_paths(self, paths: list[str | Path]) -> None:
        """Load and add graphs from contact graph files.

        Args:
            paths: List of contact graph file paths.
        """
        for path in paths:
            self.add_graph(load_contact_graph(path))

    def set_reference(self, reference: ContactGraph) -> None:
        """Set the reference graph."""
        self.reference = reference

    def compare_pair(self, graph_a: ContactGraph, graph_b: ContactGraph) -> MatchResult:
        """Match two graphs with the shared settings."""
        return self.matcher.match(graph_a, graph_b)

    def _run(
        self,
        pairs: list[tuple[ContactGraph, ContactGraph]],
        n_jobs: int,
        progress_callback: Optional[Callable[[int, int], None]],
    ) -> pd.DataFrame:
        n_pairs = len(pairs)
        LOGGER.info("Running %d comparisons with n_jobs=%d", n_pairs, n_jobs)

        if n_jobs == 1:
            results = []
            for idx, (graph_a, graph_b) in enumerate(pairs):
                results.append(self.compare_pair(graph_a, graph_b))
                if progress_callback:
                    progress_callback(idx + 1, n_pairs)
        else:
            results = Parallel(n_jobs=n_jobs)(
                delayed(self.compare_pair)(graph_a, graph_b)
                for graph_a, graph_b in pairs
            )

        return pd.DataFrame(
            [r.to_dict() for r in results],
            columns=_RESULT_COLUMNS,
        )

    def compare_all_pairs(
        self,
        n_jobs: int = 1,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> pd.DataFrame:
        """Compare all pairs of graphs.

        Args:
            n_jobs: Number of parallel jobs (-1 for all CPUs).
            progress_callback: Optional callback(current, total), sequential runs only.

        Returns:
            DataFrame with one row per pair.
        """
        if len(self.graphs) < 2:
            raise ValueError("Need at least 2 graphs to compare")

        pairs = [
            (self.graphs[i], self.graphs[j])
            for i, j in combinations(range(len(self.graphs)), 2)
        ]
        return self._run(pairs, n_jobs, progress_callback)

    def compare_to_reference(
        self,
        n_jobs: int = 1,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> pd.DataFrame:
        """Compare all graphs to the reference.

        Args:
            n_jobs: Number of parallel jobs (-1 for all CPUs).
            progress_callback: Optional callback(current, total), sequential runs only.

        Returns:
            DataFrame with one row per graph.
        """
        if self.reference is None:
            raise ValueError("No reference graph set")

        if len(self.graphs) == 0:
            raise ValueError("No graphs to compare")

        pairs = [(self.reference, graph) for graph in self.graphs]
        return self._run(pairs, n_jobs, progress_callback)

    @staticmethod
    def get_summary_statistics(results: pd.DataFrame) -> dict:
        """Calculate summary statistics from results.

        Infeasible matchings are counted but left out of the score
        statistics.

        Args:
            results: DataFrame from compare_all_pairs or compare_to_reference.

        Returns:
            Dict with summary statistics.
        """
        feasible = results[results["feasible"]]
        return {
            "n_comparisons": len(results),
            "n_infeasible": int((~results["feasible"]).sum()),
            "score": {
                "mean": float(feasible["score"].mean()),
                "std": float(feasible["score"].std()),
                "min": float(feasible["score"].min()),
                "max": float(feasible["score"].max()),
            },
            "common_contacts": {
                "mean": float(feasible["common_contacts"].mean()),
                "max": float(feasible["common_contacts"].max()),
            },
            "elapsed_time": float(results["elapsed_time"].sum()),
        }

    @staticmethod
    def get_distance_matrix(results: pd.DataFrame) -> tuple[list[str], np.ndarray]:
        """Build a distance matrix (1 - score) from pairwise results.

        Infeasible pairs get the maximum distance 1. Graph names must be
        unique, which BatchMatcher enforces.

        Args:
            results: DataFrame from compare_all_pairs.

        Returns:
            Tuple of (sorted graph names, square distance matrix).
        """
        names = sorted(set(results["graph_1"]) | set(results["graph_2"]))
        name_to_idx = {name: i for i, name in enumerate(names)}
        matrix = np.zeros((len(names), len(names)))

        for _, row in results.iterrows():
            i = name_to_idx[row["graph_1"]]
            j = name_to_idx[row["graph_2"]]
            value = 1.0 - row["score"] if row["feasible"] else 1.0
            matrix[i, j] = value
            matrix[j, i] = value

        return names, matrix


_RESULT_COLUMNS = [
    "graph_1",
    "graph_2",
    "n_nodes_1",
    "n_nodes_2",
    "score",
    "common_contacts",
    "feasible",
    "n_matched",
    "iterations",
    "elapsed_time",
]
